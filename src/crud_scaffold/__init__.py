"""
crud-scaffold: seed 몇 개 → 레이어드 CRUD 모듈 소스 파일 일괄 생성.
"""

from crud_scaffold.core.placeholders import build_placeholder_table
from crud_scaffold.domain.errors import ScaffoldError, SeedValidationError
from crud_scaffold.domain.schemas import GenerationReport, IdType, SeedParameters
from crud_scaffold.services.generate import ModuleGenerator
from crud_scaffold.templates.engine import render_template
from crud_scaffold.templates.manager import TemplateManager

__version__ = "0.1.0"

__all__ = [
    "ModuleGenerator",
    "SeedParameters",
    "IdType",
    "GenerationReport",
    "TemplateManager",
    "build_placeholder_table",
    "render_template",
    "ScaffoldError",
    "SeedValidationError",
]
