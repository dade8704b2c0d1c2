"""
Placeholder 테이블: seed → 평탄한 key/value 치환 테이블.

규칙:
- seed 검증 실패 시 SeedValidationError (모든 문제를 한 번에)
- 테이블은 seed로부터 순수 함수로 결정됨 (저장/캐시 없음)
- 호출 1회 동안만 유지, 호출 간 공유 금지
"""

from collections.abc import Iterator, Mapping

from crud_scaffold.core.naming import NameForms, derive_forms
from crud_scaffold.domain.constants import (
    DB_CONTEXT_SUFFIX,
    IDENTIFIER_PATTERN,
    NAMESPACE_PATTERN,
    OVERRIDABLE_DERIVED_KEYS,
    PASCAL_IDENTIFIER_PATTERN,
    PLACEHOLDER_NAME_PATTERN,
    SEED_MAX_LENGTH,
)
from crud_scaffold.domain.errors import SeedValidationError
from crud_scaffold.domain.schemas import IdType, PlaceholderKind, SeedParameters

# =============================================================================
# Placeholder Table
# =============================================================================


class PlaceholderTable(Mapping[str, str]):
    """
    불변 치환 테이블.

    각 키는 값과 함께 PlaceholderKind를 가진다.
    """

    def __init__(
        self,
        values: Mapping[str, str],
        kinds: Mapping[str, PlaceholderKind] | None = None,
    ) -> None:
        self._values = dict(values)
        kinds = kinds or {}
        self._kinds = {
            key: kinds.get(key, PlaceholderKind.REQUIRED) for key in self._values
        }

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"PlaceholderTable({self._values!r})"

    def kind_of(self, key: str) -> PlaceholderKind | None:
        """키의 종류 (없으면 None)."""
        return self._kinds.get(key)

    def to_dict(self) -> dict[str, str]:
        return dict(self._values)


# =============================================================================
# Seed Validation
# =============================================================================


def _check_identifier(
    issues: list[str],
    label: str,
    value: str | None,
    pattern_name: str = "pascal",
) -> None:
    """식별자 형식 검사 → issues에 누적."""
    if value is None or not str(value).strip():
        issues.append(f"{label} is required")
        return

    if len(value) > SEED_MAX_LENGTH:
        issues.append(f"{label} exceeds {SEED_MAX_LENGTH} characters")
        return

    if pattern_name == "pascal" and not PASCAL_IDENTIFIER_PATTERN.fullmatch(value):
        issues.append(f"{label} must be a PascalCase identifier: {value!r}")
    elif pattern_name == "namespace" and not NAMESPACE_PATTERN.fullmatch(value):
        issues.append(f"{label} must be a dotted identifier: {value!r}")
    elif pattern_name == "identifier" and not IDENTIFIER_PATTERN.fullmatch(value):
        issues.append(f"{label} must be an identifier: {value!r}")


def validate_seeds(seeds: SeedParameters) -> IdType:
    """
    seed 파라미터 검증.

    규칙:
    - namespace, module_name, entity_name 필수 + 식별자 형식
    - id_type은 지원 목록 중 하나
    - plural override는 PascalCase 식별자
    - extras 키는 UPPER_SNAKE, 값은 식별자, 파생 키 덮어쓰기 금지
      (DB_CONTEXT_NAME 제외)
    - blocks 키는 UPPER_SNAKE, 파생/extras 키와 겹치면 안 됨

    Args:
        seeds: 입력 seed

    Returns:
        파싱된 IdType

    Raises:
        SeedValidationError: 문제가 하나라도 있으면 전체 목록과 함께
    """
    issues: list[str] = []

    _check_identifier(issues, "namespace", seeds.namespace, "namespace")
    _check_identifier(issues, "module_name", seeds.module_name)
    _check_identifier(issues, "entity_name", seeds.entity_name)

    id_type = IdType.GUID
    try:
        id_type = IdType.parse(seeds.id_type)
    except ValueError as e:
        issues.append(str(e))

    if seeds.entity_name_plural is not None:
        _check_identifier(issues, "entity_name_plural", seeds.entity_name_plural)
    if seeds.module_name_plural is not None:
        _check_identifier(issues, "module_name_plural", seeds.module_name_plural)

    derived = set(DERIVED_KEYS)

    for key, value in seeds.extras.items():
        if not PLACEHOLDER_NAME_PATTERN.fullmatch(key):
            issues.append(f"extras key must be UPPER_SNAKE_CASE: {key!r}")
            continue
        if key in derived and key not in OVERRIDABLE_DERIVED_KEYS:
            issues.append(f"extras cannot override derived placeholder {key}")
            continue
        _check_identifier(issues, f"extras[{key}]", value, "identifier")

    for key in seeds.blocks:
        if not PLACEHOLDER_NAME_PATTERN.fullmatch(key):
            issues.append(f"blocks key must be UPPER_SNAKE_CASE: {key!r}")
        elif key in derived or key in seeds.extras:
            issues.append(f"blocks cannot override placeholder {key}")

    if issues:
        raise SeedValidationError(issues)

    return id_type


# =============================================================================
# Table Construction
# =============================================================================

DERIVED_KEYS = (
    "NAMESPACE",
    "MODULE_NAME",
    "MODULE_NAME_LOWER",
    "MODULE_NAME_LOWERCASE",
    "MODULE_NAME_PLURAL",
    "MODULE_NAME_LOWER_PLURAL",
    "ENTITY_NAME",
    "ENTITY_NAME_LOWER",
    "ENTITY_NAME_LOWERCASE",
    "ENTITY_NAME_PLURAL",
    "ENTITY_NAME_LOWER_PLURAL",
    "ENTITY_NAME_LOWERCASE_PLURAL",
    "ID_TYPE",
    "DB_CONTEXT_NAME",
)


def _forms_to_values(prefix: str, forms: NameForms) -> dict[str, str]:
    return {
        prefix: forms.pascal,
        f"{prefix}_LOWER": forms.lower,
        f"{prefix}_LOWERCASE": forms.lowercase,
        f"{prefix}_PLURAL": forms.plural,
        f"{prefix}_LOWER_PLURAL": forms.lower_plural,
    }


def build_placeholder_table(seeds: SeedParameters) -> PlaceholderTable:
    """
    seed → placeholder 테이블.

    Args:
        seeds: 입력 seed

    Returns:
        PlaceholderTable

    Raises:
        SeedValidationError: seed 검증 실패
    """
    id_type = validate_seeds(seeds)

    module = derive_forms(seeds.module_name, seeds.module_name_plural)
    entity = derive_forms(seeds.entity_name, seeds.entity_name_plural)

    values: dict[str, str] = {"NAMESPACE": seeds.namespace}
    values.update(_forms_to_values("MODULE_NAME", module))
    values.update(_forms_to_values("ENTITY_NAME", entity))
    values["ENTITY_NAME_LOWERCASE_PLURAL"] = entity.lowercase_plural
    values["ID_TYPE"] = id_type.value
    values["DB_CONTEXT_NAME"] = f"{module.pascal}{DB_CONTEXT_SUFFIX}"

    kinds: dict[str, PlaceholderKind] = {}

    # extras (DB_CONTEXT_NAME 덮어쓰기 포함)
    values.update(seeds.extras)

    # 선택 블록
    for key, text in seeds.blocks.items():
        values[key] = text
        kinds[key] = PlaceholderKind.OPTIONAL_BLOCK

    return PlaceholderTable(values, kinds)
