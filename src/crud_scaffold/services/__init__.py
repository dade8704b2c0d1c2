"""
Services layer: 배치 검사 + 생성 오케스트레이션.
"""

from .generate import ModuleGenerator
from .validate import ConsistencyValidator, ValidationResult

__all__ = [
    "ModuleGenerator",
    "ConsistencyValidator",
    "ValidationResult",
]
