"""
Templates layer: 템플릿 조회/관리 + 치환 엔진.

역할:
- 템플릿 조회 + custom 템플릿 CRUD (manager.py)
- placeholder 정적 분석 (scanner.py)
- 치환 (engine.py)

주의: 폴더 구분
- crud_scaffold/templates/ → 코드 (이 모듈)
- crud_scaffold/builtin_templates/ → 내장 템플릿 코퍼스 (데이터)
"""

from .engine import render_path, render_template, render_text
from .manager import (
    TemplateManager,
    get_template_path,
    validate_template_extension,
    validate_template_name,
)
from .scanner import ScanResult, detect_placeholders, scan_template

__all__ = [
    # manager
    "TemplateManager",
    "validate_template_name",
    "validate_template_extension",
    "get_template_path",
    # scanner
    "ScanResult",
    "detect_placeholders",
    "scan_template",
    # engine
    "render_text",
    "render_template",
    "render_path",
]
