"""
Data schemas for the scaffolding engine.

규칙:
- seed는 호출 1회당 1번만 입력, 이후 불변
- 템플릿은 읽기 전용 (frozen)
- 리포트는 to_dict()로 JSON 직렬화 (run log)
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from crud_scaffold.core.placeholders import PlaceholderTable

# =============================================================================
# Enums
# =============================================================================


class IdType(str, Enum):
    """
    엔티티 식별자 타입.

    값은 생성 코드에 들어가는 철자 그대로.
    """

    GUID = "Guid"
    INT = "int"
    LONG = "long"
    STRING = "string"

    @classmethod
    def parse(cls, raw: "str | IdType") -> "IdType":
        """
        별칭 포함 파싱 (대소문자 무시).

        Raises:
            ValueError: 지원하지 않는 값
        """
        if isinstance(raw, IdType):
            return raw
        key = str(raw).strip().lower()
        try:
            return _ID_TYPE_ALIASES[key]
        except KeyError:
            supported = ", ".join(t.value for t in cls)
            raise ValueError(f"Unsupported id type '{raw}' (supported: {supported})") from None


_ID_TYPE_ALIASES = {
    "guid": IdType.GUID,
    "uuid": IdType.GUID,
    "int": IdType.INT,
    "int32": IdType.INT,
    "integer": IdType.INT,
    "long": IdType.LONG,
    "int64": IdType.LONG,
    "string": IdType.STRING,
    "str": IdType.STRING,
}


class PlaceholderKind(str, Enum):
    """placeholder 종류."""

    REQUIRED = "required"  # 값 없으면 에러
    OPTIONAL_BLOCK = "optional_block"  # 값 없으면 빈 문자열


class Severity(str, Enum):
    """검증 결과 심각도."""

    ERROR = "error"
    WARNING = "warning"


class OutputStatus(str, Enum):
    """출력 파일 처리 상태."""

    WRITTEN = "written"  # 디스크에 기록됨
    PLANNED = "planned"  # dry-run: 렌더만 완료
    SKIPPED = "skipped"  # 다른 템플릿 에러로 배치 전체 보류
    FAILED = "failed"  # 이 템플릿 자체가 실패


# =============================================================================
# Seed
# =============================================================================


@dataclass
class SeedParameters:
    """
    생성 1회분 seed 입력.

    필드명 ↔ placeholder:
    - namespace → NAMESPACE
    - module_name → MODULE_NAME (+ 파생형)
    - entity_name → ENTITY_NAME (+ 파생형)
    - id_type → ID_TYPE
    - extras → 추가 필수 값 (EVENT_NAME, VALUE_OBJECT_NAME 등)
    - blocks → 선택 블록 본문
    """

    namespace: str = ""
    module_name: str = ""
    entity_name: str = ""
    id_type: IdType | str = IdType.GUID

    entity_name_plural: str | None = None
    module_name_plural: str | None = None

    extras: dict[str, str] = field(default_factory=dict)
    blocks: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        id_type = self.id_type.value if isinstance(self.id_type, IdType) else self.id_type
        return {
            "namespace": self.namespace,
            "module_name": self.module_name,
            "entity_name": self.entity_name,
            "id_type": id_type,
            "entity_name_plural": self.entity_name_plural,
            "module_name_plural": self.module_name_plural,
            "extras": dict(self.extras),
            "blocks": sorted(self.blocks),  # 본문은 run log에 남기지 않음
        }


# =============================================================================
# Templates
# =============================================================================


@dataclass(frozen=True)
class Template:
    """
    로드된 템플릿 (불변).

    name은 파일 경로와 무관한 논리 이름 ("api/controller-crud").
    """

    name: str
    text: str
    source: str  # builtin | custom
    path: Path
    output: str = ""  # 출력 경로 패턴 (placeholder 포함)
    description: str = ""
    placeholders: tuple[str, ...] = ()  # 등장 순서
    declared_optional: frozenset[str] = frozenset()

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "source": self.source,
            "output": self.output,
            "description": self.description,
            "placeholders": list(self.placeholders),
            "declared_optional": sorted(self.declared_optional),
        }


@dataclass
class BatchEntry:
    """배치 항목: (템플릿, 출력 위치)."""

    template: Template
    output_path: str | None = None  # 경로 렌더 실패 시 None


@dataclass
class GenerationBatch:
    """
    모듈 스캐폴드 1회분 배치.

    모든 항목이 같은 placeholder 테이블을 공유 → 파일 간 이름 일관성 보장.
    """

    seeds: SeedParameters
    table: "PlaceholderTable"
    entries: list[BatchEntry] = field(default_factory=list)

    @property
    def template_names(self) -> list[str]:
        return [e.template.name for e in self.entries]


# =============================================================================
# Findings / Report
# =============================================================================


@dataclass
class Finding:
    """검증/생성 중 발견된 문제 1건."""

    severity: Severity
    code: str
    message: str
    template: str | None = None
    key: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    def to_dict(self) -> dict[str, Any]:
        return {
            "severity": self.severity.value,
            "code": self.code,
            "message": self.message,
            "template": self.template,
            "key": self.key,
            **({"context": self.context} if self.context else {}),
        }


@dataclass
class OutputResult:
    """출력 파일 1건의 처리 결과."""

    template: str
    path: str | None
    status: OutputStatus
    sha256: str | None = None
    size: int = 0
    content: str | None = None  # preview/dry-run용, 직렬화 기본 제외

    def to_dict(self, include_content: bool = False) -> dict[str, Any]:
        data: dict[str, Any] = {
            "template": self.template,
            "path": self.path,
            "status": self.status.value,
            "sha256": self.sha256,
            "size": self.size,
        }
        if include_content:
            data["content"] = self.content
        return data


@dataclass
class GenerationReport:
    """
    생성 1회분 리포트 (run log).

    첫 에러에서 멈추지 않고 배치 전체의 에러/경고를 모두 담는다.
    """

    run_id: str
    started_at: str
    seeds: dict[str, Any] = field(default_factory=dict)
    templates: list[str] = field(default_factory=list)
    output_root: str | None = None
    dry_run: bool = False
    strict: bool = False

    outputs: list[OutputResult] = field(default_factory=list)
    findings: list[Finding] = field(default_factory=list)

    finished_at: str | None = None
    result: str = "pending"  # pending, success, failed
    table_hash: str | None = None

    @property
    def errors(self) -> list[Finding]:
        return [f for f in self.findings if f.is_error]

    @property
    def warnings(self) -> list[Finding]:
        return [f for f in self.findings if f.severity == Severity.WARNING]

    @property
    def success(self) -> bool:
        return self.result == "success"

    def outputs_by_status(self, status: OutputStatus) -> list[OutputResult]:
        return [o for o in self.outputs if o.status == status]

    def to_dict(self, include_content: bool = False) -> dict[str, Any]:
        """JSON 직렬화용."""
        return {
            "run_id": self.run_id,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "result": self.result,
            "seeds": self.seeds,
            "templates": self.templates,
            "output_root": self.output_root,
            "dry_run": self.dry_run,
            "strict": self.strict,
            "table_hash": self.table_hash,
            "outputs": [o.to_dict(include_content) for o in self.outputs],
            "findings": [f.to_dict() for f in self.findings],
            "summary": {
                "errors": len(self.errors),
                "warnings": len(self.warnings),
                "written": len(self.outputs_by_status(OutputStatus.WRITTEN)),
                "planned": len(self.outputs_by_status(OutputStatus.PLANNED)),
                "skipped": len(self.outputs_by_status(OutputStatus.SKIPPED)),
                "failed": len(self.outputs_by_status(OutputStatus.FAILED)),
            },
        }
