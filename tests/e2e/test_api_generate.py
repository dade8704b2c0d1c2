"""
test_api_generate.py - Generate API E2E 테스트

엔드포인트:
- POST /api/generate/preview
- POST /api/generate
"""

from pathlib import Path

from fastapi.testclient import TestClient

from crud_scaffold.app.main import create_app
from crud_scaffold.config import DEFAULT_CONFIG

SEEDS = {"namespace": "Acme.Shop", "module_name": "Catalog", "entity_name": "Product"}


def files_under(root: Path) -> list[str]:
    return sorted(p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file())


class TestPreview:
    """POST /api/generate/preview 테스트."""

    def test_preview_crud(self, client, output_root):
        response = client.post("/api/generate/preview", json={"seeds": SEEDS, "preset": "crud"})

        data = response.json()
        assert response.status_code == 200
        assert data["result"] == "success"
        assert data["summary"]["planned"] == 17
        controller = [o for o in data["outputs"] if o["template"] == "api/controller-crud"][0]
        assert controller["path"] == "src/Acme.Shop.Catalog.HttpApi/Products/ProductController.cs"
        assert "api/catalog/products" in controller["content"]
        assert files_under(output_root) == []

    def test_default_id_type_from_config(self, client):
        """id_type 미지정 → 설정 default_id_type (Guid)."""
        response = client.post(
            "/api/generate/preview",
            json={"seeds": SEEDS, "templates": ["application/dto-entity"]},
        )

        content = response.json()["outputs"][0]["content"]
        assert "EntityDto<Guid>" in content

    def test_id_type_mismatch_warning(self, client):
        seeds = {**SEEDS, "id_type": "int"}

        response = client.post(
            "/api/generate/preview",
            json={"seeds": seeds, "templates": ["api/controller-crud"]},
        )

        data = response.json()
        assert data["result"] == "success"
        assert [f["code"] for f in data["findings"]] == ["ID_TYPE_MISMATCH"]
        assert data["findings"][0]["severity"] == "warning"

    def test_seed_errors(self, client):
        response = client.post(
            "/api/generate/preview",
            json={"seeds": {"namespace": "Acme", "module_name": "", "entity_name": "product"}},
        )

        detail = response.json()["detail"]
        assert response.status_code == 422
        assert detail["code"] == "SEED_INVALID"
        assert len(detail["issues"]) == 2

    def test_unknown_preset(self, client):
        response = client.post("/api/generate/preview", json={"seeds": SEEDS, "preset": "nope"})

        assert response.status_code == 404


class TestGenerate:
    """POST /api/generate 테스트."""

    def test_generate(self, client, output_root, logs_dir):
        response = client.post("/api/generate", json={"seeds": SEEDS, "preset": "crud"})

        data = response.json()
        assert response.status_code == 200
        assert data["result"] == "success"
        assert data["summary"]["written"] == 17
        assert "content" not in data["outputs"][0]
        assert len(files_under(output_root)) == 17
        assert (logs_dir / f"run_{data['run_id']}.json").exists()

    def test_conflict_reported(self, client, output_root):
        client.post("/api/generate", json={"seeds": SEEDS, "templates": ["domain/entity"]})

        response = client.post("/api/generate", json={"seeds": SEEDS, "templates": ["domain/entity"]})

        data = response.json()
        assert response.status_code == 200
        assert data["result"] == "failed"
        assert [f["code"] for f in data["findings"]] == ["OUTPUT_CONFLICT"]

    def test_overwrite(self, client, output_root):
        body = {"seeds": SEEDS, "templates": ["domain/entity"]}
        client.post("/api/generate", json=body)

        response = client.post("/api/generate", json={**body, "overwrite": True})

        assert response.json()["result"] == "success"

    def test_dry_run_includes_content(self, client, output_root):
        response = client.post(
            "/api/generate",
            json={"seeds": SEEDS, "templates": ["domain/entity"], "dry_run": True},
        )

        data = response.json()
        assert data["outputs"][0]["status"] == "planned"
        assert "class Product" in data["outputs"][0]["content"]
        assert files_under(output_root) == []

    def test_custom_template_used(self, client, output_root):
        client.post(
            "/api/templates",
            json={
                "name": "extra/readme",
                "text": "# ${MODULE_NAME} / ${ENTITY_NAME_PLURAL}\n",
                "output": "docs/${MODULE_NAME}.md",
                "extension": "md",
            },
        )

        response = client.post("/api/generate", json={"seeds": SEEDS, "templates": ["extra/readme"]})

        assert response.json()["result"] == "success"
        assert (output_root / "docs" / "Catalog.md").read_text(encoding="utf-8") == "# Catalog / Products\n"

    def test_output_root_not_configured(self):
        config = {**DEFAULT_CONFIG, "paths": {**DEFAULT_CONFIG["paths"], "output_root": None}}

        with TestClient(create_app(config)) as client:
            response = client.post("/api/generate", json={"seeds": SEEDS})

        assert response.status_code == 500
        assert response.json()["detail"]["code"] == "CONFIG_INVALID"
