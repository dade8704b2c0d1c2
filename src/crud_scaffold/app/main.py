"""
FastAPI 애플리케이션 진입점.

실행:
- 개발: uvicorn crud_scaffold.app.main:app --reload
- 프로덕션: uvicorn crud_scaffold.app.main:app
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI

from crud_scaffold import __version__
from crud_scaffold.app.routes import generate, templates
from crud_scaffold.config import get_path, load_config
from crud_scaffold.templates.manager import TemplateManager

# =============================================================================
# App Factory
# =============================================================================


def create_app(config: dict[str, Any] | None = None) -> FastAPI:
    """
    앱 생성.

    Args:
        config: 설정 (없으면 시작 시 load_config())
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """
        시작 시: 설정 로드, 템플릿 관리자 초기화
        """
        app.state.config = config if config is not None else load_config()
        app.state.template_manager = TemplateManager(
            custom_root=get_path(app.state.config, "custom_templates"),
        )

        yield

    app = FastAPI(
        title="CRUD Scaffold",
        description="seed 몇 개 → 레이어드 CRUD 모듈 소스 생성",
        version=__version__,
        lifespan=lifespan,
    )

    # API 라우트
    app.include_router(templates.api_router, prefix="/api/templates", tags=["Templates API"])
    app.include_router(generate.api_router, prefix="/api/generate", tags=["Generate API"])

    @app.get("/health")
    async def health() -> dict[str, str]:
        """헬스 체크."""
        return {"status": "ok"}

    return app


app = create_app()


# =============================================================================
# CLI Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "crud_scaffold.app.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )
