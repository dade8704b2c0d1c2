"""
Error definitions for the scaffolding engine.

규칙:
- 조용한 실패 금지 → 코드가 붙은 ScaffoldError로 명시적 실패
- 배치 단위 에러는 Finding으로 모아서 한 번에 보고
- 개별 템플릿 에러는 해당 템플릿만 중단 (형제 출력 오염 금지)
"""

from typing import Any


class ScaffoldError(Exception):
    """
    스캐폴딩 엔진 공통 에러.

    Usage:
        raise ScaffoldError("OUTPUT_CONFLICT", "file exists", path="a/b.cs")
    """

    def __init__(self, code: str, message: str = "", **context: Any) -> None:
        self.code = code
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
        text = f"[{self.code}] {self.message}".rstrip()
        return f"{text} ({ctx_str})" if ctx_str else text

    def to_dict(self) -> dict[str, Any]:
        """로그/JSON 직렬화용."""
        return {
            "code": self.code,
            "message": self.message,
            **self.context,
        }


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """에러/경고 코드 상수."""

    # === Seed ===
    SEED_INVALID = "SEED_INVALID"

    # === Template ===
    TEMPLATE_NOT_FOUND = "TEMPLATE_NOT_FOUND"
    TEMPLATE_EXISTS = "TEMPLATE_EXISTS"
    TEMPLATE_SYNTAX_ERROR = "TEMPLATE_SYNTAX_ERROR"
    TEMPLATE_ENCODING_INVALID = "TEMPLATE_ENCODING_INVALID"
    TEMPLATE_LOCK_TIMEOUT = "TEMPLATE_LOCK_TIMEOUT"
    INVALID_TEMPLATE_NAME = "INVALID_TEMPLATE_NAME"
    BUILTIN_IMMUTABLE = "BUILTIN_IMMUTABLE"
    MANIFEST_INVALID = "MANIFEST_INVALID"
    UNKNOWN_PRESET = "UNKNOWN_PRESET"

    # === Substitution ===
    MISSING_REQUIRED_PLACEHOLDER = "MISSING_REQUIRED_PLACEHOLDER"
    INVALID_OUTPUT_PATH = "INVALID_OUTPUT_PATH"

    # === Consistency (warning 위주) ===
    ID_TYPE_MISMATCH = "ID_TYPE_MISMATCH"
    RESERVED_IDENTIFIER = "RESERVED_IDENTIFIER"  # warning
    NAME_COLLISION = "NAME_COLLISION"  # warning
    PLURAL_SUSPECT = "PLURAL_SUSPECT"  # warning
    PLURAL_EQUALS_SINGULAR = "PLURAL_EQUALS_SINGULAR"  # warning
    OUTPUT_PATH_COLLISION = "OUTPUT_PATH_COLLISION"

    # === Output ===
    OUTPUT_CONFLICT = "OUTPUT_CONFLICT"
    OUTPUT_DIR_MISSING = "OUTPUT_DIR_MISSING"
    OUTPUT_PERMISSION_DENIED = "OUTPUT_PERMISSION_DENIED"
    OUTPUT_WRITE_FAILED = "OUTPUT_WRITE_FAILED"

    # === Config ===
    CONFIG_INVALID = "CONFIG_INVALID"


# =============================================================================
# Seed
# =============================================================================

class SeedValidationError(ScaffoldError):
    """
    seed 파라미터 누락/형식 오류.

    모든 문제를 issues 목록으로 모아서 한 번에 보고한다.
    이 에러가 나면 템플릿은 하나도 해석되지 않는다.
    """

    def __init__(self, issues: list[str]) -> None:
        self.issues = list(issues)
        super().__init__(
            ErrorCodes.SEED_INVALID,
            "; ".join(self.issues) or "invalid seed parameters",
            issues=self.issues,
        )


# =============================================================================
# Template
# =============================================================================

class TemplateError(ScaffoldError):
    """템플릿 조회/관리 에러."""


class TemplateNotFoundError(TemplateError):
    """템플릿 없음."""

    def __init__(self, name: str) -> None:
        super().__init__(
            ErrorCodes.TEMPLATE_NOT_FOUND,
            f"Template '{name}' not found",
            template=name,
        )


class TemplateSyntaxError(ScaffoldError):
    """
    placeholder 구문 오류 (닫히지 않은 `${`, 잘못된 토큰 이름).

    offset은 템플릿 본문 기준 UTF-8 byte offset.
    """

    def __init__(self, template: str, offset: int, snippet: str = "") -> None:
        self.template = template
        self.offset = offset
        super().__init__(
            ErrorCodes.TEMPLATE_SYNTAX_ERROR,
            f"Malformed placeholder in '{template}' at byte {offset}",
            template=template,
            offset=offset,
            snippet=snippet,
        )


class MissingRequiredPlaceholderError(ScaffoldError):
    """필수 placeholder 값이 테이블에 없음."""

    def __init__(self, template: str, keys: list[str]) -> None:
        self.template = template
        self.keys = list(keys)
        super().__init__(
            ErrorCodes.MISSING_REQUIRED_PLACEHOLDER,
            f"Missing required placeholder(s) for '{template}': {', '.join(self.keys)}",
            template=template,
            keys=self.keys,
        )


# =============================================================================
# Output
# =============================================================================

class OutputError(ScaffoldError):
    """출력 쓰기 에러 공통."""


class OutputConflictError(OutputError):
    """대상 파일이 이미 존재하고 overwrite 미지정."""

    def __init__(self, path: str) -> None:
        super().__init__(
            ErrorCodes.OUTPUT_CONFLICT,
            f"{path} already exists. Use overwrite to replace it.",
            path=path,
        )


class OutputDirectoryMissingError(OutputError):
    """대상 디렉토리 없음."""

    def __init__(self, path: str) -> None:
        super().__init__(
            ErrorCodes.OUTPUT_DIR_MISSING,
            f"Destination directory does not exist: {path}",
            path=path,
        )


class OutputPermissionError(OutputError):
    """권한 부족으로 쓰기 실패."""

    def __init__(self, path: str) -> None:
        super().__init__(
            ErrorCodes.OUTPUT_PERMISSION_DENIED,
            f"Permission denied writing {path}",
            path=path,
        )


# =============================================================================
# Config
# =============================================================================

class ConfigError(ScaffoldError):
    """설정 파일 형식 오류."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(ErrorCodes.CONFIG_INVALID, message, **context)
