"""Domain layer: errors, schemas and constants."""

from .errors import (
    ConfigError,
    ErrorCodes,
    MissingRequiredPlaceholderError,
    OutputConflictError,
    OutputDirectoryMissingError,
    OutputError,
    OutputPermissionError,
    ScaffoldError,
    SeedValidationError,
    TemplateError,
    TemplateNotFoundError,
    TemplateSyntaxError,
)
from .schemas import (
    BatchEntry,
    Finding,
    GenerationBatch,
    GenerationReport,
    IdType,
    OutputResult,
    OutputStatus,
    PlaceholderKind,
    SeedParameters,
    Severity,
    Template,
)

__all__ = [
    # errors
    "ScaffoldError",
    "ErrorCodes",
    "SeedValidationError",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateSyntaxError",
    "MissingRequiredPlaceholderError",
    "OutputError",
    "OutputConflictError",
    "OutputDirectoryMissingError",
    "OutputPermissionError",
    "ConfigError",
    # schemas
    "IdType",
    "PlaceholderKind",
    "Severity",
    "OutputStatus",
    "SeedParameters",
    "Template",
    "BatchEntry",
    "GenerationBatch",
    "Finding",
    "OutputResult",
    "GenerationReport",
]
