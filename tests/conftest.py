"""
Pytest fixtures for the scaffolding engine tests.

구성:
- seed 픽스처 (정상 / 필수 값 누락)
- 템플릿 루트 (builtin, 임시 custom)
- 출력 루트 (tmp_path)
"""

from pathlib import Path

import pytest

from crud_scaffold.core.placeholders import PlaceholderTable, build_placeholder_table
from crud_scaffold.domain.schemas import IdType, SeedParameters
from crud_scaffold.services.generate import ModuleGenerator
from crud_scaffold.templates.manager import BUILTIN_TEMPLATES_ROOT, TemplateManager

# =============================================================================
# Seed Fixtures
# =============================================================================


@pytest.fixture
def catalog_seeds() -> SeedParameters:
    """정상 케이스: Acme.Shop / Catalog / Product / Guid."""
    return SeedParameters(
        namespace="Acme.Shop",
        module_name="Catalog",
        entity_name="Product",
        id_type=IdType.GUID,
    )


@pytest.fixture
def missing_module_seeds() -> SeedParameters:
    """필수 값 누락 케이스: module_name 없음."""
    return SeedParameters(
        namespace="Acme.Shop",
        module_name="",
        entity_name="Product",
    )


@pytest.fixture
def catalog_table(catalog_seeds: SeedParameters) -> PlaceholderTable:
    return build_placeholder_table(catalog_seeds)


# =============================================================================
# Template Fixtures
# =============================================================================


@pytest.fixture
def builtin_root() -> Path:
    """내장 템플릿 코퍼스 경로."""
    return BUILTIN_TEMPLATES_ROOT


@pytest.fixture
def custom_root(tmp_path: Path) -> Path:
    """빈 custom 템플릿 루트."""
    root = tmp_path / "custom_templates"
    root.mkdir()
    return root


@pytest.fixture
def manager(custom_root: Path) -> TemplateManager:
    """builtin + 임시 custom 루트."""
    return TemplateManager(custom_root=custom_root)


def _write_template(root: Path, name: str, text: str, ext: str = "cs") -> Path:
    """템플릿 파일 직접 작성 (manager 우회)."""
    *dirs, leaf = name.split("/")
    path = root.joinpath(*dirs) / f"{leaf}.template.{ext}"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(text.encode("utf-8"))
    return path


@pytest.fixture
def write_template():
    """템플릿 파일 작성 함수."""
    return _write_template


@pytest.fixture
def mini_root(tmp_path: Path) -> Path:
    """
    작은 builtin 대체 코퍼스.

    포함:
    - demo/entity (필수만)
    - demo/with-block (선택 블록)
    - demo/other (다른 출력 경로)
    - demo/clash (demo/entity와 같은 출력 경로)
    """
    root = tmp_path / "mini_templates"
    _write_template(root, "demo/entity", "namespace ${NAMESPACE}.${MODULE_NAME}\nclass ${ENTITY_NAME} {}\n")
    _write_template(
        root,
        "demo/with-block",
        "class ${ENTITY_NAME}Dto\n{\n    ${PROPERTIES}\n    public int Count { get; set; }\n}\n",
    )
    _write_template(root, "demo/other", "// ${ENTITY_NAME_PLURAL}\n")
    _write_template(root, "demo/clash", "// clash ${ENTITY_NAME}\n")
    (root / "manifest.yaml").write_text(
        """
templates:
  demo/entity:
    description: Entity
    output: ${MODULE_NAME}/${ENTITY_NAME}.cs
  demo/with-block:
    output: ${MODULE_NAME}/${ENTITY_NAME}Dto.cs
    optional_blocks: [PROPERTIES]
  demo/other:
    output: ${MODULE_NAME}/${ENTITY_NAME_PLURAL}.txt
  demo/clash:
    output: ${MODULE_NAME}/${ENTITY_NAME}.cs
presets:
  basic: [demo/entity, demo/with-block]
  all: ["@basic", demo/other]
""",
        encoding="utf-8",
    )
    return root


@pytest.fixture
def mini_manager(mini_root: Path) -> TemplateManager:
    return TemplateManager(builtin_root=mini_root)


# =============================================================================
# Output Fixtures
# =============================================================================


@pytest.fixture
def output_root(tmp_path: Path) -> Path:
    """존재하는 빈 출력 루트."""
    root = tmp_path / "out"
    root.mkdir()
    return root


@pytest.fixture
def logs_dir(tmp_path: Path) -> Path:
    return tmp_path / "logs"


@pytest.fixture
def generator(logs_dir: Path) -> ModuleGenerator:
    """builtin 코퍼스 + run log 저장."""
    return ModuleGenerator(TemplateManager(), logs_dir=logs_dir)
