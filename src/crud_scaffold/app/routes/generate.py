"""
Generate Routes: 렌더 미리보기 + 생성.

- POST /api/generate/preview → 렌더 결과 + finding (쓰기 없음)
- POST /api/generate → 서버 설정의 출력 루트 아래에 쓰기
"""

from typing import Any

from fastapi import APIRouter, HTTPException, Request

from crud_scaffold.app.models import GenerateRequest, PreviewRequest
from crud_scaffold.config import get_path
from crud_scaffold.domain.errors import ErrorCodes, ScaffoldError, SeedValidationError
from crud_scaffold.services.generate import ModuleGenerator
from crud_scaffold.services.validate import ConsistencyValidator

api_router = APIRouter()


def _generator(request: Request) -> ModuleGenerator:
    config = request.app.state.config
    return ModuleGenerator(
        manager=request.app.state.template_manager,
        validator=ConsistencyValidator(config["reserved_identifiers"]["extra"]),
        logs_dir=get_path(config, "logs_dir"),
        default_preset=config["generation"]["default_preset"],
    )


def _http_error(e: ScaffoldError) -> HTTPException:
    if isinstance(e, SeedValidationError):
        return HTTPException(
            status_code=422,
            detail={"code": e.code, "message": e.message, "issues": e.issues},
        )
    status_code = 404 if e.code in (ErrorCodes.TEMPLATE_NOT_FOUND, ErrorCodes.UNKNOWN_PRESET) else 400
    return HTTPException(status_code=status_code, detail={"code": e.code, "message": e.message})


@api_router.post("/preview")
async def preview(request: Request, body: PreviewRequest) -> dict[str, Any]:
    """
    렌더 미리보기.

    Returns:
        리포트 (outputs[].content 포함)
    """
    config = request.app.state.config
    seeds = body.seeds.to_seeds(config["generation"]["default_id_type"])
    strict = config["generation"]["strict"] if body.strict is None else body.strict

    try:
        report = _generator(request).preview(
            seeds,
            templates=body.templates,
            preset=body.preset,
            strict=strict,
        )
    except ScaffoldError as e:
        raise _http_error(e) from e

    return report.to_dict(include_content=True)


@api_router.post("")
async def generate(request: Request, body: GenerateRequest) -> dict[str, Any]:
    """
    생성 요청.

    차단된 배치도 200 + result="failed" (finding으로 원인 보고).
    """
    config = request.app.state.config
    gen_config = config["generation"]
    seeds = body.seeds.to_seeds(gen_config["default_id_type"])

    output_root = get_path(config, "output_root")
    if output_root is None:
        raise HTTPException(
            status_code=500,
            detail={"code": ErrorCodes.CONFIG_INVALID, "message": "paths.output_root is not configured"},
        )

    try:
        report = _generator(request).generate(
            seeds,
            templates=body.templates,
            preset=body.preset,
            output_root=output_root,
            overwrite=gen_config["overwrite"] if body.overwrite is None else body.overwrite,
            strict=gen_config["strict"] if body.strict is None else body.strict,
            allow_partial=(
                gen_config["allow_partial"] if body.allow_partial is None else body.allow_partial
            ),
            dry_run=body.dry_run,
        )
    except ScaffoldError as e:
        raise _http_error(e) from e

    return report.to_dict(include_content=body.dry_run)
