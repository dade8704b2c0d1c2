"""
E2E 테스트용 FastAPI 클라이언트.

설정 항목:
- 출력 루트: tmp_path/out (생성됨)
- custom 템플릿 루트: tmp_path/custom (생성됨)
- run log: tmp_path/logs
"""

from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

from crud_scaffold.app.main import create_app
from crud_scaffold.config import load_config


@pytest.fixture
def api_config(tmp_path: Path, output_root: Path, custom_root: Path, logs_dir: Path) -> dict[str, Any]:
    """임시 경로를 가리키는 서버 설정."""
    path = tmp_path / "crud-scaffold.yaml"
    path.write_text(
        "paths:\n"
        f"  output_root: {output_root.as_posix()}\n"
        f"  custom_templates: {custom_root.as_posix()}\n"
        f"  logs_dir: {logs_dir.as_posix()}\n",
        encoding="utf-8",
    )
    return load_config(path, environ={})


@pytest.fixture
def client(api_config: dict[str, Any]) -> Generator[TestClient, None, None]:
    """FastAPI TestClient (lifespan 포함)."""
    with TestClient(create_app(api_config)) as client:
        yield client
