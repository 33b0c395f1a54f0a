"""Smoke test: a generated backend boots and serves CRUD for its models."""
import json
import os
import subprocess
import sys
import tempfile
from pathlib import Path

import pytest

from crmgen.generators.scaffold.generator import SAMPLE_SPEC, generate_project
from crmgen.generators.scaffold.smoke_payload import build_minimal_payload
from crmgen.schemas.generator import load_model_spec

# "db" names a handler get_db, the same name the route table imports the session from
DB_SPEC = {"modelName": "db", "fields": [{"name": "title", "type": "STRING", "required": True}]}

SMOKE_SCRIPT = """
import json
import sys

from fastapi.testclient import TestClient

import main

payload = json.loads(sys.argv[1])
with TestClient(main.app) as client:
    created = client.post("/api/v1/tasks", json=payload)
    assert created.status_code == 201, created.text
    item = created.json()["data"]
    assert item["status"] == "pending", item

    fetched = client.get(f"/api/v1/tasks/{item['id']}")
    assert fetched.status_code == 200, fetched.text

    listed = client.get("/api/v1/tasks")
    assert listed.json()["data"]["total"] == 1, listed.text

    updated = client.put(f"/api/v1/tasks/{item['id']}", json={"status": "done"})
    assert updated.json()["data"]["status"] == "done", updated.text

    missing = client.post("/api/v1/tasks", json={"status": "done"})
    assert missing.status_code == 400, missing.text

    bad_enum = client.post("/api/v1/tasks", json={"title": "Write docs", "status": "archived"})
    assert bad_enum.status_code == 400, bad_enum.text

    null_title = client.put(f"/api/v1/tasks/{item['id']}", json={"title": None})
    assert null_title.status_code == 400, null_title.text
    assert client.get(f"/api/v1/tasks/{item['id']}").json()["data"]["title"] == payload["title"]

    deleted = client.delete(f"/api/v1/tasks/{item['id']}")
    assert deleted.status_code == 200, deleted.text
    assert client.get(f"/api/v1/tasks/{item['id']}").status_code == 404

    db_item = client.post("/api/v1/dbs", json={"title": "a"})
    assert db_item.status_code == 201, db_item.text
    assert client.get(f"/api/v1/dbs/{db_item.json()['data']['id']}").status_code == 200
print("smoke ok")
"""


def test_generated_backend_serves_crud():
    pytest.importorskip("jwt")
    with tempfile.TemporaryDirectory() as temp_dir:
        out_dir = Path(temp_dir)
        generate_project([SAMPLE_SPEC, DB_SPEC], out_dir)
        payload = build_minimal_payload(load_model_spec(SAMPLE_SPEC))
        assert payload == {"title": "test"}

        env = dict(os.environ, BYPASS_AUTH="true", DATABASE_URL="sqlite:///./smoke.db")
        result = subprocess.run(
            [sys.executable, "-c", SMOKE_SCRIPT, json.dumps(payload)],
            cwd=out_dir,
            env=env,
            capture_output=True,
            text=True,
            timeout=120,
        )
        assert result.returncode == 0, f"generated backend failed:\n{result.stdout}\n{result.stderr}"
        assert "smoke ok" in result.stdout
