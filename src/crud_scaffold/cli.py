"""
crud-scaffold CLI.

사용법:
    # 기본 CRUD preset 생성
    crud-scaffold generate --namespace Acme.Shop --module Catalog --entity Product

    # 쓰기 없이 계획만 + JSON 리포트
    crud-scaffold generate --namespace Acme.Shop --module Catalog --entity Product \\
        --preset full --dry-run --json

    # 불규칙 복수형 + 추가 값 + 선택 블록
    crud-scaffold generate --namespace Acme.Hr --module People --entity Person \\
        --plural People --preset events --set EVENT_NAME=Hired \\
        --block ADDITIONAL_PROPERTIES=@props.cs

    # 템플릿 목록 / 상세 / run log
    crud-scaffold templates --preset crud
    crud-scaffold show api/controller-crud
    crud-scaffold logs

종료 코드:
    0 성공, 1 finding으로 생성 차단, 2 seed/사용법/설정 오류
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from crud_scaffold.config import get_path, load_config
from crud_scaffold.core.logging import list_reports, load_report
from crud_scaffold.domain.errors import ConfigError, ScaffoldError, SeedValidationError
from crud_scaffold.domain.schemas import GenerationReport, OutputStatus, SeedParameters
from crud_scaffold.services.generate import ModuleGenerator
from crud_scaffold.services.validate import ConsistencyValidator
from crud_scaffold.templates.manager import TemplateManager
from crud_scaffold.templates.scanner import scan_template

logger = logging.getLogger("crud_scaffold")

EXIT_OK = 0
EXIT_BLOCKED = 1
EXIT_USAGE = 2

BLOCK_FILE_PREFIX = "@"


# =============================================================================
# Argument Helpers
# =============================================================================


def parse_assignments(items: list[str] | None, option: str) -> dict[str, str]:
    """
    KEY=VALUE 목록 파싱.

    Raises:
        argparse.ArgumentTypeError: '=' 없음
    """
    result: dict[str, str] = {}
    for item in items or []:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"{option} expects KEY=VALUE, got {item!r}")
        result[key.strip()] = value
    return result


def read_blocks(items: list[str] | None) -> dict[str, str]:
    """
    --block KEY=@file 또는 KEY=text 파싱.

    @file이면 파일 내용을 UTF-8로 그대로 읽는다.
    """
    blocks = parse_assignments(items, "--block")
    for key, value in blocks.items():
        if value.startswith(BLOCK_FILE_PREFIX):
            path = Path(value[len(BLOCK_FILE_PREFIX):]).expanduser()
            blocks[key] = path.read_bytes().decode("utf-8")
    return blocks


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="crud-scaffold",
        description="seed 몇 개로 레이어드 CRUD 모듈 소스 파일 생성",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--config", type=Path, help="설정 파일 (기본: ./crud-scaffold.yaml)")
    parser.add_argument("--verbose", "-v", action="store_true", help="DEBUG 로그 출력")

    sub = parser.add_subparsers(dest="command", required=True)

    # generate
    gen = sub.add_parser("generate", help="모듈 소스 생성")
    gen.add_argument("--namespace", required=True, help="루트 네임스페이스 (예: Acme.Shop)")
    gen.add_argument("--module", required=True, help="모듈 이름 (PascalCase)")
    gen.add_argument("--entity", required=True, help="엔티티 이름 (PascalCase)")
    gen.add_argument("--id-type", help="식별자 타입: Guid, int, long, string")
    gen.add_argument("--plural", help="엔티티 복수형 (불규칙 복수형용)")
    gen.add_argument("--module-plural", help="모듈 복수형")
    gen.add_argument("--set", action="append", metavar="KEY=VALUE", help="추가 placeholder 값")
    gen.add_argument(
        "--block",
        action="append",
        metavar="KEY=@FILE|TEXT",
        help="선택 블록 본문 (@로 시작하면 파일에서 읽음)",
    )
    gen.add_argument("--preset", help="템플릿 preset (기본: 설정의 default_preset)")
    gen.add_argument("--template", action="append", help="개별 템플릿 이름 (반복 가능)")
    gen.add_argument("--output", type=Path, help="출력 루트 (기본: 설정의 paths.output_root)")
    gen.add_argument("--overwrite", action="store_true", help="기존 파일 교체")
    gen.add_argument("--strict", action="store_true", help="경고도 생성 차단")
    gen.add_argument("--allow-partial", action="store_true", help="실패한 템플릿만 건너뜀")
    gen.add_argument("--dry-run", action="store_true", help="쓰기 없이 계획만")
    gen.add_argument("--json", action="store_true", help="리포트를 JSON으로 출력")

    # templates
    tpl = sub.add_parser("templates", help="템플릿 목록")
    tpl.add_argument("--preset", help="preset에 포함된 템플릿만")
    tpl.add_argument("--json", action="store_true", help="JSON으로 출력")

    # show
    show = sub.add_parser("show", help="템플릿 상세 (placeholder, 출력 경로)")
    show.add_argument("name", help="템플릿 이름 (예: api/controller-crud)")

    # logs
    logs = sub.add_parser("logs", help="run log 목록/조회")
    logs.add_argument("run_id", nargs="?", help="조회할 run id")
    logs.add_argument("--limit", type=int, default=20, help="목록 개수 (기본: 20)")

    return parser


# =============================================================================
# Commands
# =============================================================================


def _make_manager(config: dict[str, Any]) -> TemplateManager:
    return TemplateManager(custom_root=get_path(config, "custom_templates"))


def cmd_generate(args: argparse.Namespace, config: dict[str, Any]) -> int:
    gen_config = config["generation"]

    try:
        extras = parse_assignments(args.set, "--set")
        blocks = read_blocks(args.block)
    except (argparse.ArgumentTypeError, OSError, UnicodeDecodeError) as e:
        logger.error(str(e))
        return EXIT_USAGE

    seeds = SeedParameters(
        namespace=args.namespace,
        module_name=args.module,
        entity_name=args.entity,
        id_type=args.id_type or gen_config["default_id_type"],
        entity_name_plural=args.plural,
        module_name_plural=args.module_plural,
        extras=extras,
        blocks=blocks,
    )

    generator = ModuleGenerator(
        manager=_make_manager(config),
        validator=ConsistencyValidator(config["reserved_identifiers"]["extra"]),
        logs_dir=get_path(config, "logs_dir"),
        default_preset=gen_config["default_preset"],
    )

    try:
        report = generator.generate(
            seeds,
            templates=args.template,
            preset=args.preset,
            output_root=args.output or get_path(config, "output_root") or Path.cwd(),
            overwrite=args.overwrite or gen_config["overwrite"],
            strict=args.strict or gen_config["strict"],
            allow_partial=args.allow_partial or gen_config["allow_partial"],
            dry_run=args.dry_run,
        )
    except SeedValidationError as e:
        if args.json:
            print(json.dumps(e.to_dict(), indent=2, ensure_ascii=False))
        else:
            logger.error("Invalid seed parameters:")
            for issue in e.issues:
                logger.error(f"  - {issue}")
        return EXIT_USAGE
    except ScaffoldError as e:
        logger.error(str(e))
        return EXIT_USAGE

    if args.json:
        print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
    else:
        print_report(report)

    return EXIT_OK if report.success else EXIT_BLOCKED


def print_report(report: GenerationReport) -> None:
    """사람이 읽는 리포트 출력."""
    marks = {
        OutputStatus.WRITTEN: "+",
        OutputStatus.PLANNED: "~",
        OutputStatus.SKIPPED: "-",
        OutputStatus.FAILED: "!",
    }
    for output in report.outputs:
        print(f"  {marks[output.status]} {output.path or output.template}  [{output.status.value}]")

    for finding in report.findings:
        where = f" {finding.template}:" if finding.template else ""
        print(f"  {finding.severity.value.upper()} [{finding.code}]{where} {finding.message}")

    summary = report.to_dict()["summary"]
    print(
        f"{report.result}: {summary['written']} written, {summary['planned']} planned, "
        f"{summary['skipped']} skipped, {summary['failed']} failed, "
        f"{summary['errors']} errors, {summary['warnings']} warnings"
    )


def cmd_templates(args: argparse.Namespace, config: dict[str, Any]) -> int:
    manager = _make_manager(config)
    try:
        names = manager.resolve_preset(args.preset) if args.preset else manager.list_names()
        templates = [manager.load(name) for name in names]
    except ScaffoldError as e:
        logger.error(str(e))
        return EXIT_USAGE

    if args.json:
        print(json.dumps([t.to_dict() for t in templates], indent=2, ensure_ascii=False))
        return EXIT_OK

    for template in templates:
        print(f"{template.name:<45} {template.source:<8} {template.description}")
    return EXIT_OK


def cmd_show(args: argparse.Namespace, config: dict[str, Any]) -> int:
    manager = _make_manager(config)
    try:
        template = manager.load(args.name)
    except ScaffoldError as e:
        logger.error(str(e))
        return EXIT_USAGE

    scan = scan_template(template.text, template.declared_optional)

    print(f"name:        {template.name}")
    print(f"source:      {template.source} ({template.path})")
    print(f"description: {template.description}")
    print(f"output:      {template.output}")
    print(f"required:    {', '.join(scan.required) or '-'}")
    print(f"optional:    {', '.join(scan.optional) or '-'}")
    for token in scan.malformed:
        print(f"malformed:   byte {token.offset}: {token.snippet}")

    return EXIT_OK if scan.is_valid else EXIT_BLOCKED


def cmd_logs(args: argparse.Namespace, config: dict[str, Any]) -> int:
    logs_dir = get_path(config, "logs_dir")
    if logs_dir is None:
        logger.error("paths.logs_dir is not configured")
        return EXIT_USAGE

    paths = list_reports(logs_dir)

    if args.run_id:
        for path in paths:
            if path.stem == f"run_{args.run_id}":
                print(json.dumps(load_report(path), indent=2, ensure_ascii=False))
                return EXIT_OK
        logger.error(f"Run log not found: {args.run_id}")
        return EXIT_USAGE

    for path in paths[: args.limit]:
        data = load_report(path)
        print(f"{data['run_id']}  {data['result']:<8} {data['started_at']}  {len(data['outputs'])} outputs")
    return EXIT_OK


COMMANDS = {
    "generate": cmd_generate,
    "templates": cmd_templates,
    "show": cmd_show,
    "logs": cmd_logs,
}


# =============================================================================
# Entry Point
# =============================================================================


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        logging.basicConfig(format="%(asctime)s [%(levelname)s] %(message)s")
        logger.error(str(e))
        return EXIT_USAGE

    level = logging.DEBUG if args.verbose else config["logging"]["level"]
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    return COMMANDS[args.command](args, config)


if __name__ == "__main__":
    sys.exit(main())
