"""
test_validate.py - 일관성 검사 테스트

DoD:
- 필수 누락 → error
- 하드코딩 id 타입 불일치 → ${ID_TYPE} 사용 시 error, 아니면 warning
- 예약어 / 이름 충돌 / 복수형 의심 → warning
- 출력 경로 충돌 → error
- strict → 경고도 blocking
"""

from pathlib import Path

import pytest

from crud_scaffold.core.placeholders import build_placeholder_table
from crud_scaffold.domain.errors import ErrorCodes
from crud_scaffold.domain.schemas import (
    BatchEntry,
    GenerationBatch,
    IdType,
    SeedParameters,
    Severity,
    Template,
)
from crud_scaffold.services.validate import ConsistencyValidator, find_hardcoded_id_types
from crud_scaffold.templates.scanner import detect_placeholders


def make_template(name: str, text: str, declared: frozenset[str] = frozenset()) -> Template:
    return Template(
        name=name,
        text=text,
        source="builtin",
        path=Path(f"{name}.template.cs"),
        output=f"{name}.cs",
        placeholders=tuple(detect_placeholders(text)),
        declared_optional=declared,
    )


def make_batch(seeds: SeedParameters, *templates: Template, paths: list[str] | None = None) -> GenerationBatch:
    table = build_placeholder_table(seeds)
    paths = paths or [t.output for t in templates]
    entries = [BatchEntry(template=t, output_path=p) for t, p in zip(templates, paths, strict=True)]
    return GenerationBatch(seeds=seeds, table=table, entries=entries)


def codes(result) -> list[str]:
    return [f.code for f in result.findings]


@pytest.fixture
def validator():
    return ConsistencyValidator()


class TestRequired:
    """필수 placeholder 검사."""

    def test_missing_required(self, validator, catalog_seeds):
        batch = make_batch(catalog_seeds, make_template("events/eto", "${ENTITY_NAME}${EVENT_NAME}Eto"))

        result = validator.validate(batch)

        assert codes(result) == [ErrorCodes.MISSING_REQUIRED_PLACEHOLDER]
        assert result.errors[0].key == "EVENT_NAME"
        assert result.errors[0].template == "events/eto"
        assert result.valid is False

    def test_block_does_not_satisfy_required(self, validator):
        """필수 키를 blocks로 넘김 → error (supplied_as=block)."""
        seeds = SeedParameters(
            namespace="Acme",
            module_name="Catalog",
            entity_name="Product",
            blocks={"EVENT_NAME": "Created Stuff; DROP"},
        )
        batch = make_batch(seeds, make_template("events/eto", "${ENTITY_NAME}${EVENT_NAME}Eto"))

        result = validator.validate(batch)

        assert codes(result) == [ErrorCodes.MISSING_REQUIRED_PLACEHOLDER]
        assert result.errors[0].key == "EVENT_NAME"
        assert result.errors[0].context["supplied_as"] == "block"
        assert result.valid is False

    def test_optional_blocks_not_required(self, validator, catalog_seeds):
        batch = make_batch(
            catalog_seeds,
            make_template("a/b", "${PROPERTIES}${ADDITIONAL_X}${EXTRA}", declared=frozenset(["EXTRA"])),
        )

        assert validator.validate(batch).findings == []

    def test_clean_batch(self, validator, catalog_seeds):
        batch = make_batch(catalog_seeds, make_template("a/b", "class ${ENTITY_NAME} {}"))

        result = validator.validate(batch)

        assert result.findings == []
        assert result.valid is True


class TestIdType:
    """식별자 타입 일관성 검사."""

    def test_detects_generic_and_parameter(self):
        assert find_hardcoded_id_types("class X : FullAuditedAggregateRoot<Guid>") == [IdType.GUID]
        assert find_hardcoded_id_types("Task GetAsync(Guid id);") == [IdType.GUID]
        assert find_hardcoded_id_types("IRepository<Product, long>") == [IdType.LONG]
        assert find_hardcoded_id_types("var id = Guid.NewGuid();") == [IdType.GUID]
        assert find_hardcoded_id_types("Task<long> GetCountAsync(int skipCount)") == []

    def test_matching_type_is_fine(self, validator, catalog_seeds):
        batch = make_batch(catalog_seeds, make_template("a/b", "Task GetAsync(Guid id);"))

        assert validator.validate(batch).findings == []

    def test_mismatch_warning(self, validator):
        seeds = SeedParameters(namespace="Acme", module_name="Catalog", entity_name="Product", id_type="int")
        batch = make_batch(seeds, make_template("api/controller-crud", "Task GetAsync(Guid id);"))

        result = validator.validate(batch)

        assert codes(result) == [ErrorCodes.ID_TYPE_MISMATCH]
        assert result.findings[0].severity == Severity.WARNING
        assert result.valid is True

    def test_mismatch_error_when_template_uses_id_type(self, validator):
        """${ID_TYPE}와 하드코딩 타입이 섞이면 error."""
        seeds = SeedParameters(namespace="Acme", module_name="Catalog", entity_name="Product", id_type="long")
        text = "class ${ENTITY_NAME}Dto : EntityDto<${ID_TYPE}> { void F(Guid id) {} }"
        batch = make_batch(seeds, make_template("application/dto-entity", text))

        result = validator.validate(batch)

        assert result.errors[0].code == ErrorCodes.ID_TYPE_MISMATCH
        assert result.errors[0].context["selected"] == "long"
        assert result.errors[0].context["hardcoded"] == ["Guid"]


class TestAdvisory:
    """권고 경고 검사."""

    def test_reserved_type_name(self, validator):
        seeds = SeedParameters(namespace="Acme", module_name="Catalog", entity_name="Task")

        result = validator.validate(make_batch(seeds))

        assert ErrorCodes.RESERVED_IDENTIFIER in codes(result)
        assert all(f.severity == Severity.WARNING for f in result.findings)

    def test_reserved_keyword_on_lower_form(self, validator):
        """camelCase 형태가 C# 키워드 → warning."""
        seeds = SeedParameters(namespace="Acme", module_name="Catalog", entity_name="Event")

        result = validator.validate(make_batch(seeds))

        keys = [f.key for f in result.findings if f.code == ErrorCodes.RESERVED_IDENTIFIER]
        assert "ENTITY_NAME_LOWER" in keys

    def test_extra_reserved(self):
        seeds = SeedParameters(namespace="Acme", module_name="Catalog", entity_name="Widget")

        result = ConsistencyValidator(reserved_extra=["Widget"]).validate(make_batch(seeds))

        assert codes(result) == [ErrorCodes.RESERVED_IDENTIFIER]

    def test_module_equals_entity(self, validator):
        seeds = SeedParameters(namespace="Acme", module_name="Product", entity_name="Product")

        assert ErrorCodes.NAME_COLLISION in codes(validator.validate(make_batch(seeds)))

    def test_plural_equals_module(self, validator):
        seeds = SeedParameters(namespace="Acme", module_name="Products", entity_name="Product")

        result = validator.validate(make_batch(seeds))

        assert [f.key for f in result.findings if f.code == ErrorCodes.NAME_COLLISION] == ["ENTITY_NAME_PLURAL"]

    def test_plural_suspect(self, validator):
        seeds = SeedParameters(namespace="Acme", module_name="Hr", entity_name="Person")

        result = validator.validate(make_batch(seeds))

        suspect = [f for f in result.findings if f.code == ErrorCodes.PLURAL_SUSPECT]
        assert suspect[0].context["derived"] == "Persons"

    def test_override_silences_suspect(self, validator):
        seeds = SeedParameters(
            namespace="Acme", module_name="Hr", entity_name="Person", entity_name_plural="People"
        )

        assert ErrorCodes.PLURAL_SUSPECT not in codes(validator.validate(make_batch(seeds)))

    def test_plural_equals_singular(self, validator):
        seeds = SeedParameters(
            namespace="Acme", module_name="Farm", entity_name="Sheep", entity_name_plural="Sheep"
        )

        assert ErrorCodes.PLURAL_EQUALS_SINGULAR in codes(validator.validate(make_batch(seeds)))

    def test_strict_makes_warnings_blocking(self, validator):
        seeds = SeedParameters(namespace="Acme", module_name="Hr", entity_name="Person")
        batch = make_batch(seeds)

        assert validator.validate(batch).valid is True
        assert validator.validate(batch, strict=True).valid is False


class TestOutputPaths:
    """출력 경로 충돌 검사."""

    def test_collision(self, validator, catalog_seeds):
        a = make_template("domain/entity", "x")
        b = make_template("domain/aggregate-root", "y")

        result = validator.validate(make_batch(catalog_seeds, a, b, paths=["P.cs", "P.cs"]))

        assert codes(result) == [ErrorCodes.OUTPUT_PATH_COLLISION] * 2
        assert result.blocked_templates() == {"domain/entity", "domain/aggregate-root"}

    def test_unrendered_path_ignored(self, validator, catalog_seeds):
        a = make_template("a/a", "x")
        b = make_template("a/b", "y")

        batch = make_batch(catalog_seeds, a, b)
        batch.entries[1].output_path = None

        assert validator.validate(batch).findings == []

    def test_batch_not_mutated(self, validator, catalog_seeds):
        batch = make_batch(catalog_seeds, make_template("a/b", "${EVENT_NAME}"))
        before = (batch.template_names, dict(batch.table))

        validator.validate(batch)

        assert (batch.template_names, dict(batch.table)) == before
