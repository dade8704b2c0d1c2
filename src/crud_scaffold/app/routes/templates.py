"""
Templates Routes: 템플릿 조회 + custom 템플릿 관리.

- GET /api/templates (?preset, ?source)
- GET /api/templates/presets
- GET /api/templates/{name}
- POST /api/templates
- PUT /api/templates/{name}
- DELETE /api/templates/{name}
"""

from typing import Any

from fastapi import APIRouter, HTTPException, Request

from crud_scaffold.app.models import TemplateCreateRequest, TemplateUpdateRequest
from crud_scaffold.domain.errors import ErrorCodes, ScaffoldError
from crud_scaffold.templates.manager import TemplateManager
from crud_scaffold.templates.scanner import scan_template

api_router = APIRouter()

_STATUS_BY_CODE = {
    ErrorCodes.TEMPLATE_NOT_FOUND: 404,
    ErrorCodes.UNKNOWN_PRESET: 404,
    ErrorCodes.TEMPLATE_EXISTS: 409,
    ErrorCodes.BUILTIN_IMMUTABLE: 403,
    ErrorCodes.TEMPLATE_LOCK_TIMEOUT: 423,
}


def _manager(request: Request) -> TemplateManager:
    manager: TemplateManager = request.app.state.template_manager
    return manager


def _http_error(e: ScaffoldError) -> HTTPException:
    status_code = _STATUS_BY_CODE.get(e.code, 400)
    return HTTPException(status_code=status_code, detail={"code": e.code, "message": e.message})


# =============================================================================
# Read
# =============================================================================


@api_router.get("")
async def list_templates(
    request: Request,
    preset: str | None = None,
    source: str = "all",
) -> dict[str, Any]:
    """템플릿 목록."""
    manager = _manager(request)
    try:
        if preset:
            templates = [manager.load(name) for name in manager.resolve_preset(preset)]
        else:
            templates = manager.list_templates(source)
    except ScaffoldError as e:
        raise _http_error(e) from e

    return {
        "templates": [t.to_dict() for t in templates],
        "total": len(templates),
    }


@api_router.get("/presets")
async def list_presets(request: Request) -> dict[str, Any]:
    """preset 목록 (펼친 템플릿 이름 포함)."""
    manager = _manager(request)
    try:
        return {
            "presets": {name: manager.resolve_preset(name) for name in manager.list_presets()},
        }
    except ScaffoldError as e:
        raise _http_error(e) from e


@api_router.get("/{name:path}")
async def get_template(request: Request, name: str) -> dict[str, Any]:
    """템플릿 상세 (placeholder 분류 + 본문)."""
    try:
        template = _manager(request).load(name)
    except ScaffoldError as e:
        raise _http_error(e) from e

    scan = scan_template(template.text, template.declared_optional)
    return {
        **template.to_dict(),
        "required": scan.required,
        "optional": scan.optional,
        "malformed": [{"offset": m.offset, "snippet": m.snippet} for m in scan.malformed],
        "text": template.text,
    }


# =============================================================================
# Custom Template Management
# =============================================================================


@api_router.post("", status_code=201)
async def create_template(request: Request, body: TemplateCreateRequest) -> dict[str, Any]:
    """custom 템플릿 등록."""
    try:
        _manager(request).create(
            body.name,
            body.text,
            description=body.description,
            output=body.output,
            optional_blocks=body.optional_blocks,
            extension=body.extension,
            shadow_builtin=body.shadow_builtin,
        )
        template = _manager(request).load(body.name)
    except ScaffoldError as e:
        raise _http_error(e) from e

    return {"success": True, "template": template.to_dict()}


@api_router.put("/{name:path}")
async def update_template(
    request: Request,
    name: str,
    body: TemplateUpdateRequest,
) -> dict[str, Any]:
    """custom 템플릿 교체."""
    try:
        _manager(request).update(
            name,
            body.text,
            description=body.description,
            output=body.output,
            optional_blocks=body.optional_blocks,
        )
        template = _manager(request).load(name)
    except ScaffoldError as e:
        raise _http_error(e) from e

    return {"success": True, "template": template.to_dict()}


@api_router.delete("/{name:path}")
async def delete_template(request: Request, name: str) -> dict[str, Any]:
    """custom 템플릿 삭제."""
    try:
        _manager(request).delete(name)
    except ScaffoldError as e:
        raise _http_error(e) from e

    return {"success": True, "name": name}
