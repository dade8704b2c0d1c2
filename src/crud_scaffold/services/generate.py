"""
Module Generator: seed + 템플릿 목록 → 출력 파일 배치.

흐름:
1. seed 검증 (실패 시 SeedValidationError, 템플릿은 하나도 로드하지 않음)
2. placeholder 테이블 생성 (배치 전체 공유)
3. 템플릿 로드 (실패는 해당 템플릿 finding)
4. 출력 경로 렌더 + 일관성 검사
5. 템플릿 렌더 (실패는 해당 템플릿만 중단)
6. 출력 루트/충돌 사전 검사 (배치 전체를 한 번에 보고)
7. 쓰기 정책: blocking finding이 있으면 쓰지 않음 (allow_partial 제외)
8. 리포트 반환 + run log 저장
"""

import logging
from collections.abc import Iterable
from pathlib import Path

from crud_scaffold.core.emitter import OutputEmitter
from crud_scaffold.core.hashing import compute_table_hash, compute_text_hash
from crud_scaffold.core.logging import complete_report, create_report, emit_finding, save_report
from crud_scaffold.core.placeholders import PlaceholderTable, build_placeholder_table
from crud_scaffold.domain.errors import ErrorCodes, OutputError, ScaffoldError
from crud_scaffold.domain.schemas import (
    BatchEntry,
    GenerationBatch,
    GenerationReport,
    OutputResult,
    OutputStatus,
    SeedParameters,
    Severity,
    Template,
)
from crud_scaffold.services.validate import ConsistencyValidator, ValidationResult
from crud_scaffold.templates.engine import render_path, render_template
from crud_scaffold.templates.manager import TemplateManager

logger = logging.getLogger(__name__)

DEFAULT_PRESET = "crud"


class ModuleGenerator:
    """
    모듈 스캐폴드 생성기.

    Usage:
        generator = ModuleGenerator(TemplateManager())
        report = generator.generate(seeds, preset="crud", output_root=Path("out"))
    """

    def __init__(
        self,
        manager: TemplateManager | None = None,
        validator: ConsistencyValidator | None = None,
        logs_dir: Path | None = None,
        default_preset: str = DEFAULT_PRESET,
    ):
        """
        Args:
            manager: 템플릿 관리자 (기본: builtin만)
            validator: 일관성 검사기
            logs_dir: run log 저장 디렉토리 (없으면 저장 안 함)
            default_preset: 템플릿/preset 미지정 시 사용할 preset
        """
        self.manager = manager or TemplateManager()
        self.validator = validator or ConsistencyValidator()
        self.logs_dir = logs_dir
        self.default_preset = default_preset

    def resolve_template_names(
        self,
        templates: Iterable[str] | None = None,
        preset: str | None = None,
    ) -> list[str]:
        """
        템플릿 목록 결정 (명시 목록 → preset → 기본 preset).

        Raises:
            TemplateError: UNKNOWN_PRESET
        """
        names = list(templates or [])
        if preset:
            names.extend(self.manager.resolve_preset(preset))
        if not names:
            names = self.manager.resolve_preset(self.default_preset)
        return list(dict.fromkeys(names))

    def preview(
        self,
        seeds: SeedParameters,
        templates: Iterable[str] | None = None,
        preset: str | None = None,
        strict: bool = False,
    ) -> GenerationReport:
        """출력 루트 없이 렌더 결과만 계산 (쓰기 없음)."""
        return self.generate(seeds, templates, preset, output_root=None, strict=strict, dry_run=True)

    def generate(
        self,
        seeds: SeedParameters,
        templates: Iterable[str] | None = None,
        preset: str | None = None,
        output_root: Path | None = None,
        overwrite: bool = False,
        strict: bool = False,
        allow_partial: bool = False,
        dry_run: bool = False,
    ) -> GenerationReport:
        """
        배치 생성.

        Args:
            seeds: 입력 seed
            templates: 템플릿 이름 목록
            preset: preset 이름 (templates와 합쳐짐)
            output_root: 출력 루트 (dry_run이 아니면 필수)
            overwrite: 기존 파일 교체 허용
            strict: 경고도 blocking으로 취급
            allow_partial: 실패한 템플릿만 건너뛰고 나머지는 쓰기
            dry_run: 쓰기 없이 계획만 (status=planned)

        Returns:
            GenerationReport (모든 finding + 출력별 결과)

        Raises:
            SeedValidationError: seed 검증 실패 (템플릿 로드 전)
            TemplateError: UNKNOWN_PRESET
            ValueError: dry_run이 아닌데 output_root 없음
        """
        if output_root is None and not dry_run:
            raise ValueError("output_root is required unless dry_run is set")

        # 1-2. seed → 테이블 (실패 시 여기서 중단)
        table = build_placeholder_table(seeds)
        names = self.resolve_template_names(templates, preset)

        report = create_report(seeds, output_root, dry_run=dry_run, strict=strict)
        report.templates = names
        logger.info(
            f"Run {report.run_id}: {seeds.namespace}.{seeds.module_name}/{seeds.entity_name} "
            f"({len(names)} templates)"
        )

        # 3-4. 로드 + 경로 + 검사
        batch = self._build_batch(seeds, table, names, report)
        validation = self.validator.validate(batch, strict=strict)
        for finding in validation.findings:
            emit_finding(
                report,
                finding.severity,
                finding.code,
                finding.message,
                template=finding.template,
                key=finding.key,
                **finding.context,
            )

        # 5. 렌더
        rendered = self._render_batch(batch, report)

        # 6. 출력 루트 + 충돌
        emitter = OutputEmitter(output_root) if output_root is not None else None
        if emitter is not None:
            self._precheck_outputs(emitter, batch, rendered, report, overwrite)

        # 7. 쓰기
        blocked, block_all = self._blocking(report, strict)
        if blocked and not allow_partial:
            block_all = True

        for entry in batch.entries:
            name = entry.template.name
            text = rendered.get(name)

            if text is None:
                report.outputs.append(
                    OutputResult(template=name, path=entry.output_path, status=OutputStatus.FAILED)
                )
                continue

            data_hash = compute_text_hash(text)
            size = len(text.encode("utf-8"))

            if block_all or name in blocked:
                status = OutputStatus.SKIPPED
            elif dry_run or emitter is None:
                status = OutputStatus.PLANNED
            else:
                report.outputs.append(self._write(emitter, entry, text, overwrite, report))
                continue

            report.outputs.append(
                OutputResult(
                    template=name,
                    path=entry.output_path,
                    status=status,
                    sha256=data_hash,
                    size=size,
                    content=text,
                )
            )

        # 8. 완료
        failed_writes = report.outputs_by_status(OutputStatus.FAILED)
        success = not blocked and not block_all and not failed_writes
        complete_report(report, success, table_hash=compute_table_hash(table))

        if self.logs_dir is not None:
            log_path = save_report(report, self.logs_dir)
            logger.info(f"Run log saved: {log_path}")

        logger.info(
            f"Run {report.run_id} {report.result}: "
            f"{len(report.errors)} errors, {len(report.warnings)} warnings"
        )
        return report

    # =========================================================================
    # Steps
    # =========================================================================

    def _build_batch(
        self,
        seeds: SeedParameters,
        table: PlaceholderTable,
        names: list[str],
        report: GenerationReport,
    ) -> GenerationBatch:
        batch = GenerationBatch(seeds=seeds, table=table)

        for name in names:
            try:
                template = self.manager.load(name)
            except ScaffoldError as e:
                emit_finding(
                    report,
                    Severity.ERROR,
                    e.code,
                    e.message,
                    template=name,
                    **{k: v for k, v in e.context.items() if k != "template"},
                )
                # 로드 실패 템플릿은 출력 결과에 FAILED로 남김
                report.outputs.append(
                    OutputResult(template=name, path=None, status=OutputStatus.FAILED)
                )
                continue

            output_path = self._render_output_path(template, table, report)
            batch.entries.append(BatchEntry(template=template, output_path=output_path))

        return batch

    @staticmethod
    def _render_output_path(
        template: Template,
        table: PlaceholderTable,
        report: GenerationReport,
    ) -> str | None:
        try:
            return render_path(template.output, table, template=template.name)
        except ScaffoldError as e:
            emit_finding(
                report,
                Severity.ERROR,
                e.code,
                f"Output path: {e.message}",
                template=template.name,
                pattern=template.output,
            )
            return None

    @staticmethod
    def _render_batch(batch: GenerationBatch, report: GenerationReport) -> dict[str, str]:
        """에러 finding이 없는 템플릿만 렌더."""
        failed = {f.template for f in report.errors if f.template}
        rendered: dict[str, str] = {}

        for entry in batch.entries:
            name = entry.template.name
            if name in failed or entry.output_path is None:
                continue
            try:
                rendered[name] = render_template(entry.template, batch.table)
            except ScaffoldError as e:
                emit_finding(
                    report,
                    Severity.ERROR,
                    e.code,
                    e.message,
                    template=name,
                    **{k: v for k, v in e.context.items() if k != "template"},
                )

        return rendered

    @staticmethod
    def _precheck_outputs(
        emitter: OutputEmitter,
        batch: GenerationBatch,
        rendered: dict[str, str],
        report: GenerationReport,
        overwrite: bool,
    ) -> None:
        try:
            emitter.check_root()
        except OutputError as e:
            emit_finding(report, Severity.ERROR, e.code, e.message, path=str(emitter.root))
            return

        if overwrite:
            return

        for entry in batch.entries:
            if entry.template.name not in rendered or entry.output_path is None:
                continue
            if emitter.exists(entry.output_path):
                emit_finding(
                    report,
                    Severity.ERROR,
                    ErrorCodes.OUTPUT_CONFLICT,
                    f"{entry.output_path} already exists. Use overwrite to replace it.",
                    template=entry.template.name,
                    path=entry.output_path,
                )

    @staticmethod
    def _blocking(report: GenerationReport, strict: bool) -> tuple[set[str], bool]:
        """
        blocking 판정 (검사 + 렌더 + 출력 사전 검사 finding 전체 기준).

        Returns:
            (blocking finding이 붙은 템플릿, 배치 전체 차단 여부)
        """
        result = ValidationResult(findings=report.findings, strict=strict)
        block_all = any(f.template is None for f in result.blocking)
        return result.blocked_templates(), block_all

    @staticmethod
    def _write(
        emitter: OutputEmitter,
        entry: BatchEntry,
        text: str,
        overwrite: bool,
        report: GenerationReport,
    ) -> OutputResult:
        name = entry.template.name
        path = entry.output_path or ""
        try:
            return emitter.emit(path, text, overwrite=overwrite, make_parents=True, template=name)
        except OutputError as e:
            emit_finding(report, Severity.ERROR, e.code, e.message, template=name, path=path)
            return OutputResult(template=name, path=path, status=OutputStatus.FAILED)
