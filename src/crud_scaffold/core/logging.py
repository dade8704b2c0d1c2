"""
Run logging: 생성 리포트 생성, finding 기록, 저장/조회.

규칙:
- 생성 1회 = run log 1개 (logs_dir/run_{run_id}.json)
- finding은 리포트에 누적 + 표준 logging으로도 출력
- 저장은 원자적 쓰기
"""

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from crud_scaffold.core.atomic import atomic_write_json
from crud_scaffold.core.ids import generate_run_id
from crud_scaffold.domain.constants import RUN_LOG_GLOB
from crud_scaffold.domain.schemas import Finding, GenerationReport, SeedParameters, Severity

logger = logging.getLogger(__name__)

# =============================================================================
# Report Management
# =============================================================================


def create_report(
    seeds: SeedParameters,
    output_root: Path | None = None,
    dry_run: bool = False,
    strict: bool = False,
) -> GenerationReport:
    """
    새 GenerationReport 생성.

    Args:
        seeds: 입력 seed
        output_root: 출력 루트
        dry_run: 쓰기 없이 계획만
        strict: 경고도 차단

    Returns:
        초기화된 GenerationReport
    """
    now = datetime.now(UTC).isoformat()
    run_id = generate_run_id(seeds.module_name or "", seeds.entity_name or "")

    return GenerationReport(
        run_id=run_id,
        started_at=now,
        seeds=seeds.to_dict(),
        output_root=str(output_root) if output_root is not None else None,
        dry_run=dry_run,
        strict=strict,
        result="pending",
    )


def emit_finding(
    report: GenerationReport,
    severity: Severity,
    code: str,
    message: str,
    template: str | None = None,
    key: str | None = None,
    **context: Any,
) -> Finding:
    """
    finding 기록.

    Args:
        report: GenerationReport 인스턴스
        severity: ERROR 또는 WARNING
        code: ErrorCodes 값
        message: 사람이 읽는 메시지
        template: 관련 템플릿 이름
        key: 관련 placeholder 키

    Returns:
        기록된 Finding
    """
    finding = Finding(
        severity=severity,
        code=code,
        message=message,
        template=template,
        key=key,
        context=context,
    )
    report.findings.append(finding)

    level = logging.ERROR if severity == Severity.ERROR else logging.WARNING
    where = f"{template}: " if template else ""
    logger.log(level, f"[{code}] {where}{message}")
    return finding


def complete_report(report: GenerationReport, success: bool, table_hash: str | None = None) -> None:
    """
    리포트 완료 처리.

    Args:
        report: GenerationReport 인스턴스
        success: 성공 여부
        table_hash: placeholder 테이블 해시
    """
    report.finished_at = datetime.now(UTC).isoformat()
    report.result = "success" if success else "failed"
    report.table_hash = table_hash


def save_report(report: GenerationReport, logs_dir: Path) -> Path:
    """
    리포트를 run log 파일로 저장.

    Args:
        report: GenerationReport 인스턴스
        logs_dir: logs/ 디렉터리 경로

    Returns:
        저장된 파일 경로
    """
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_path = logs_dir / f"run_{report.run_id}.json"
    atomic_write_json(log_path, report.to_dict())
    return log_path


def load_report(log_path: Path) -> dict[str, Any]:
    """
    run log 파일 로드.

    Args:
        log_path: 로그 파일 경로

    Returns:
        리포트 데이터 (dict)
    """
    data: dict[str, Any] = json.loads(log_path.read_text(encoding="utf-8"))
    return data


def list_reports(logs_dir: Path) -> list[Path]:
    """
    logs/ 디렉터리의 모든 run log 파일 목록.

    Args:
        logs_dir: logs/ 디렉터리 경로

    Returns:
        로그 파일 경로 목록 (최신순)
    """
    if not logs_dir.exists():
        return []

    logs = list(logs_dir.glob(RUN_LOG_GLOB))
    logs.sort(key=lambda p: p.stat().st_mtime, reverse=True)
    return logs
