"""
Consistency Validator: 배치 전체의 이름/타입 일관성 검사.

검사 항목:
- 필수 placeholder 누락 → error (템플릿, 키 단위)
- 하드코딩된 식별자 타입 ≠ 선택된 IdType → ID_TYPE_MISMATCH
  (같은 템플릿이 ${ID_TYPE}도 쓰면 error, 아니면 warning)
- 예약어/프레임워크 타입명과 충돌하는 파생 이름 → warning
- 모듈명 = 엔티티명, 엔티티 복수형 = 모듈명 → warning
- 복수형 휴리스틱 의심, override = 단수형 → warning
- 두 템플릿이 같은 출력 경로 → error

배치는 읽기만 한다 (수정 금지).
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from crud_scaffold.core.naming import derive_forms, is_plural_suspect
from crud_scaffold.domain.constants import (
    CSHARP_KEYWORDS,
    GUID_GENERATION_PATTERN,
    HARDCODED_ID_TYPE_TEMPLATES,
    RESERVED_TYPE_NAMES,
)
from crud_scaffold.domain.errors import ErrorCodes
from crud_scaffold.domain.schemas import Finding, GenerationBatch, IdType, PlaceholderKind, Severity
from crud_scaffold.templates.scanner import is_optional_block

# =============================================================================
# Result
# =============================================================================


@dataclass
class ValidationResult:
    """검증 결과."""

    findings: list[Finding] = field(default_factory=list)
    strict: bool = False

    @property
    def errors(self) -> list[Finding]:
        return [f for f in self.findings if f.is_error]

    @property
    def warnings(self) -> list[Finding]:
        return [f for f in self.findings if f.severity == Severity.WARNING]

    @property
    def blocking(self) -> list[Finding]:
        """생성을 막는 finding (strict면 경고 포함)."""
        return list(self.findings) if self.strict else self.errors

    @property
    def valid(self) -> bool:
        return not self.blocking

    def blocked_templates(self) -> set[str]:
        """blocking finding이 붙은 템플릿 이름."""
        return {f.template for f in self.blocking if f.template}

    def add(
        self,
        severity: Severity,
        code: str,
        message: str,
        template: str | None = None,
        key: str | None = None,
        **context: Any,
    ) -> None:
        self.findings.append(
            Finding(
                severity=severity,
                code=code,
                message=message,
                template=template,
                key=key,
                context=context,
            )
        )


# =============================================================================
# Id Type Detection
# =============================================================================


def _compile_id_type_patterns(id_type: IdType) -> list[re.Pattern[str]]:
    name = re.escape(id_type.value)
    return [re.compile(t.format(t=name)) for t in HARDCODED_ID_TYPE_TEMPLATES]


_ID_TYPE_PATTERNS = {t: _compile_id_type_patterns(t) for t in IdType}


def find_hardcoded_id_types(text: str) -> list[IdType]:
    """
    템플릿 본문에 하드코딩된 식별자 타입 감지.

    예: `FullAuditedAggregateRoot<Guid>`, `GetAsync(Guid id)`,
    `IRepository<X, Guid>`, `Guid.NewGuid()`

    Returns:
        감지된 IdType 목록 (enum 선언 순서)
    """
    found = []
    for id_type, patterns in _ID_TYPE_PATTERNS.items():
        if any(p.search(text) for p in patterns):
            found.append(id_type)
        elif id_type == IdType.GUID and GUID_GENERATION_PATTERN.search(text):
            found.append(id_type)
    return found


# =============================================================================
# Consistency Validator
# =============================================================================


class ConsistencyValidator:
    """
    배치 일관성 검사기.

    Usage:
        result = ConsistencyValidator().validate(batch, strict=False)
        if not result.valid:
            ...
    """

    def __init__(self, reserved_extra: Iterable[str] = ()):
        """
        Args:
            reserved_extra: 추가 예약 이름 (설정 reserved_identifiers.extra)
        """
        self.reserved_extra = frozenset(reserved_extra)

    def validate(self, batch: GenerationBatch, strict: bool = False) -> ValidationResult:
        """
        배치 검사.

        Args:
            batch: 생성 배치 (테이블 + 템플릿 + 출력 경로)
            strict: 경고도 blocking으로 취급

        Returns:
            ValidationResult (모든 finding 포함)
        """
        result = ValidationResult(strict=strict)

        self._check_required(batch, result)
        self._check_id_types(batch, result)
        self._check_reserved(batch, result)
        self._check_collisions(batch, result)
        self._check_plurals(batch, result)
        self._check_output_paths(batch, result)

        return result

    # =========================================================================
    # Checks
    # =========================================================================

    def _check_required(self, batch: GenerationBatch, result: ValidationResult) -> None:
        table = batch.table
        for entry in batch.entries:
            template = entry.template
            for key in template.placeholders:
                if is_optional_block(key, template.declared_optional):
                    continue
                if key not in table:
                    result.add(
                        Severity.ERROR,
                        ErrorCodes.MISSING_REQUIRED_PLACEHOLDER,
                        f"No value for required placeholder ${{{key}}}",
                        template=template.name,
                        key=key,
                    )
                elif table.kind_of(key) == PlaceholderKind.OPTIONAL_BLOCK:
                    # 블록 본문은 식별자 검사를 거치지 않음
                    result.add(
                        Severity.ERROR,
                        ErrorCodes.MISSING_REQUIRED_PLACEHOLDER,
                        f"Required placeholder ${{{key}}} was supplied as a block; "
                        f"pass it as an extra value",
                        template=template.name,
                        key=key,
                        supplied_as="block",
                    )

    def _check_id_types(self, batch: GenerationBatch, result: ValidationResult) -> None:
        chosen = IdType.parse(batch.table["ID_TYPE"])

        for entry in batch.entries:
            template = entry.template
            hardcoded = [t for t in find_hardcoded_id_types(template.text) if t != chosen]
            if not hardcoded:
                continue

            uses_id_type = "ID_TYPE" in template.placeholders
            severity = Severity.ERROR if uses_id_type else Severity.WARNING
            types = ", ".join(t.value for t in hardcoded)
            message = f"Template hard-codes id type {types} but {chosen.value} was selected"
            if uses_id_type:
                message += " (template also uses ${ID_TYPE}; output would mix id types)"

            result.add(
                severity,
                ErrorCodes.ID_TYPE_MISMATCH,
                message,
                template=template.name,
                key="ID_TYPE",
                hardcoded=[t.value for t in hardcoded],
                selected=chosen.value,
            )

    def _check_reserved(self, batch: GenerationBatch, result: ValidationResult) -> None:
        table = batch.table
        keys = (
            "MODULE_NAME", "MODULE_NAME_PLURAL", "MODULE_NAME_LOWER", "MODULE_NAME_LOWER_PLURAL",
            "ENTITY_NAME", "ENTITY_NAME_PLURAL", "ENTITY_NAME_LOWER", "ENTITY_NAME_LOWER_PLURAL",
        )
        reserved_types = RESERVED_TYPE_NAMES | self.reserved_extra

        for key in keys:
            value = table.get(key)
            if not value:
                continue

            if "_LOWER" in key:
                hit = value.lower() in CSHARP_KEYWORDS
            else:
                hit = value in reserved_types
            if hit:
                result.add(
                    Severity.WARNING,
                    ErrorCodes.RESERVED_IDENTIFIER,
                    f"{key}={value!r} collides with a reserved identifier",
                    key=key,
                    value=value,
                )

    def _check_collisions(self, batch: GenerationBatch, result: ValidationResult) -> None:
        table = batch.table
        module = table.get("MODULE_NAME")
        entity = table.get("ENTITY_NAME")
        entity_plural = table.get("ENTITY_NAME_PLURAL")

        if module and module == entity:
            result.add(
                Severity.WARNING,
                ErrorCodes.NAME_COLLISION,
                f"Module and entity are both named {module!r}; "
                f"namespace and class names will clash",
                key="ENTITY_NAME",
            )
        elif module and module == entity_plural:
            result.add(
                Severity.WARNING,
                ErrorCodes.NAME_COLLISION,
                f"Entity plural {entity_plural!r} equals the module name; "
                f"namespace and folder names will clash",
                key="ENTITY_NAME_PLURAL",
            )

    def _check_plurals(self, batch: GenerationBatch, result: ValidationResult) -> None:
        seeds = batch.seeds
        pairs = (
            ("ENTITY_NAME", seeds.entity_name, seeds.entity_name_plural),
            ("MODULE_NAME", seeds.module_name, seeds.module_name_plural),
        )

        for key, name, override in pairs:
            forms = derive_forms(name, override)
            if forms.plural_overridden:
                if forms.plural == forms.pascal:
                    result.add(
                        Severity.WARNING,
                        ErrorCodes.PLURAL_EQUALS_SINGULAR,
                        f"Plural override for {name!r} equals the singular",
                        key=f"{key}_PLURAL",
                    )
            elif is_plural_suspect(name):
                result.add(
                    Severity.WARNING,
                    ErrorCodes.PLURAL_SUSPECT,
                    f"Derived plural {forms.plural!r} of {name!r} may be wrong; "
                    f"supply an explicit plural if needed",
                    key=f"{key}_PLURAL",
                    derived=forms.plural,
                )

    def _check_output_paths(self, batch: GenerationBatch, result: ValidationResult) -> None:
        owners: dict[str, list[str]] = {}
        for entry in batch.entries:
            if entry.output_path is not None:
                owners.setdefault(entry.output_path, []).append(entry.template.name)

        for path, templates in owners.items():
            if len(templates) < 2:
                continue
            for name in templates:
                result.add(
                    Severity.ERROR,
                    ErrorCodes.OUTPUT_PATH_COLLISION,
                    f"Output path {path} is produced by {len(templates)} templates: "
                    f"{', '.join(templates)}",
                    template=name,
                    path=path,
                    templates=templates,
                )
