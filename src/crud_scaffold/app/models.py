"""
API 요청 모델 (Pydantic).
"""

from pydantic import BaseModel, Field

from crud_scaffold.domain.schemas import SeedParameters


class SeedModel(BaseModel):
    """seed 입력. 형식 검증은 엔진에서 (문제 전체를 issues로 보고)."""

    namespace: str = ""
    module_name: str = ""
    entity_name: str = ""
    id_type: str | None = Field(default=None, description="Guid, int, long, string (기본: 설정값)")
    entity_name_plural: str | None = None
    module_name_plural: str | None = None
    extras: dict[str, str] = Field(default_factory=dict)
    blocks: dict[str, str] = Field(default_factory=dict)

    def to_seeds(self, default_id_type: str) -> SeedParameters:
        return SeedParameters(
            namespace=self.namespace,
            module_name=self.module_name,
            entity_name=self.entity_name,
            id_type=self.id_type or default_id_type,
            entity_name_plural=self.entity_name_plural,
            module_name_plural=self.module_name_plural,
            extras=dict(self.extras),
            blocks=dict(self.blocks),
        )


class PreviewRequest(BaseModel):
    """렌더 미리보기 요청 (쓰기 없음)."""

    seeds: SeedModel
    templates: list[str] = Field(default_factory=list)
    preset: str | None = None
    strict: bool | None = None


class GenerateRequest(PreviewRequest):
    """생성 요청. 출력 루트는 서버 설정 (paths.output_root)."""

    overwrite: bool | None = None
    allow_partial: bool | None = None
    dry_run: bool = False


class TemplateCreateRequest(BaseModel):
    """custom 템플릿 등록."""

    name: str
    text: str
    description: str = ""
    output: str = ""
    optional_blocks: list[str] = Field(default_factory=list)
    extension: str = "cs"
    shadow_builtin: bool = False


class TemplateUpdateRequest(BaseModel):
    """custom 템플릿 교체 (None이면 기존 메타 유지)."""

    text: str
    description: str | None = None
    output: str | None = None
    optional_blocks: list[str] | None = None
