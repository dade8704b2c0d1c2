"""
Domain Constants: 엔진 전역 상수.

placeholder 구문, 템플릿 파일 규칙, 예약어 목록 등
시스템 전반에서 사용되는 값들.
"""

import re

# =============================================================================
# Placeholder Syntax (placeholder 구문)
# =============================================================================
# ${UPPER_SNAKE_CASE_NAME} 고정. 기존 템플릿 코퍼스와의 호환을 위해 변경 금지.

TOKEN_START = "${"
PLACEHOLDER_NAME_PATTERN = re.compile(r"^[A-Z][A-Z0-9_]*$")
PLACEHOLDER_PATTERN = re.compile(r"\$\{([A-Z][A-Z0-9_]*)\}")

# 토큰 이름 추출 시 최대 스니펫 길이 (에러 메시지용)
SNIPPET_MAX_LENGTH = 40

# =============================================================================
# Optional Blocks (선택 블록)
# =============================================================================
# 선택 블록 = 호출자가 채우는 자유 입력 지점. 값이 없으면 빈 문자열.
# 판정 순서: manifest 선언 → 아래 이름 목록 → 접두사 규칙

OPTIONAL_BLOCK_PREFIXES = ("ADDITIONAL_", "CUSTOM_")

OPTIONAL_BLOCK_NAMES = frozenset([
    "PROPERTIES",
    "RELATIONSHIPS",
    "VALIDATION_RULES",
    "VALIDATION_LOGIC",
    "VALIDATION_CONSTANTS",
    "REPOSITORY_METHODS",
    "PROPERTY_CONFIGURATIONS",
    "INDEXES",
    "FOREIGN_KEY_NAMES",
    "FILTER_PROPERTIES",
    "ATOMIC_VALUES",
])

# =============================================================================
# Template Directory Structure (템플릿 디렉토리 구조)
# =============================================================================
# <root>/
# ├── manifest.yaml
# └── <category>/<name>.template.<ext>

TEMPLATE_FILE_MARKER = ".template."
TEMPLATE_MANIFEST_FILENAME = "manifest.yaml"
TEMPLATE_LOCKS_DIR = ".locks"
DEFAULT_TEMPLATE_EXTENSION = "cs"

# 논리 이름: "api/controller-crud"
TEMPLATE_NAME_PATTERN = re.compile(r"^[a-z0-9][a-z0-9-]*(/[a-z0-9][a-z0-9-]*)+$")
TEMPLATE_NAME_MAX_LENGTH = 80

# 파일 확장자: "cs", "md"
TEMPLATE_EXTENSION_PATTERN = re.compile(r"^[a-z0-9]+$")
TEMPLATE_EXTENSION_MAX_LENGTH = 10
FORBIDDEN_PATH_CHARS = frozenset('/\\:*?"<>| .')

SOURCE_BUILTIN = "builtin"
SOURCE_CUSTOM = "custom"

# =============================================================================
# Seed Rules (seed 규칙)
# =============================================================================

PASCAL_IDENTIFIER_PATTERN = re.compile(r"^[A-Z][A-Za-z0-9]*$")
IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
NAMESPACE_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")
SEED_MAX_LENGTH = 100

# extras로 덮어쓸 수 있는 파생 키
OVERRIDABLE_DERIVED_KEYS = frozenset(["DB_CONTEXT_NAME"])
DB_CONTEXT_SUFFIX = "DbContext"

# =============================================================================
# Reserved Identifiers (예약어, 권고용)
# =============================================================================

CSHARP_KEYWORDS = frozenset([
    "abstract", "as", "base", "bool", "break", "byte", "case", "catch",
    "char", "checked", "class", "const", "continue", "decimal", "default",
    "delegate", "do", "double", "else", "enum", "event", "explicit",
    "extern", "false", "finally", "fixed", "float", "for", "foreach",
    "goto", "if", "implicit", "in", "int", "interface", "internal", "is",
    "lock", "long", "namespace", "new", "null", "object", "operator",
    "out", "override", "params", "private", "protected", "public",
    "readonly", "ref", "return", "sbyte", "sealed", "short", "sizeof",
    "stackalloc", "static", "string", "struct", "switch", "this", "throw",
    "true", "try", "typeof", "uint", "ulong", "unchecked", "unsafe",
    "ushort", "using", "virtual", "void", "volatile", "while",
])

# 생성 코드에서 using으로 들어오는 프레임워크 타입명 (정확히 일치할 때만)
RESERVED_TYPE_NAMES = frozenset([
    "Object", "String", "Task", "Guid", "DateTime", "Exception", "Type",
    "Action", "Func", "List", "Dictionary", "Attribute", "Enum", "Math",
    "Console", "Thread", "Monitor", "Array", "Entity", "AggregateRoot",
    "ValueObject", "DomainService", "ApplicationService", "Repository",
    "DbContext", "Controller", "Permission", "Profile", "Volo", "Abp",
    "System", "Microsoft",
])

# =============================================================================
# Id Types (식별자 타입)
# =============================================================================
# 템플릿 본문에 하드코딩된 식별자 타입 감지용 패턴 ({t} = 타입 이름)

HARDCODED_ID_TYPE_TEMPLATES = (
    r"\b{t}\s+[iI]d\b",
    r"(?:Entity|AggregateRoot|EntityDto|Repository)<\s*(?:[^<>,]+,\s*)?{t}\s*>",
)
GUID_GENERATION_PATTERN = re.compile(r"\bGuid\.NewGuid\(\)|\bGuidGenerator\.Create\(\)")

# =============================================================================
# Run Log
# =============================================================================

RUN_ID_PREFIX = "RUN-"
RUN_LOG_GLOB = "run_*.json"
