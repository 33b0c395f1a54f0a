"""API tests for ApiGenerator records: generation on create, teardown on delete."""
from crmgen.db.models import ApiGenerator

TASK_FIELDS = [
    {"name": "title", "type": "STRING", "required": True},
    {"name": "status", "type": "ENUM", "enumValues": ["pending", "done"], "defaultValue": "pending"},
]


def test_create_generates_files(client, output_dirs):
    response = client.post("/v1/api-generators", json={"module_name": "task", "fields": TASK_FIELDS})
    assert response.status_code == 201, response.text
    record = response.json()["data"]

    assert record["status"] == "generated"
    assert record["error_message"] is None
    files = record["generated_files"]["files"]
    assert files["model"] == "models/task_model.py"
    for path in files.values():
        assert (output_dirs["api"] / path).exists(), f"{path} was not generated"

    routes_index = (output_dirs["api"] / "routes/__init__.py").read_text(encoding="utf-8")
    assert "# model: task" in routes_index


def test_requirements_reach_the_generated_routes(client, output_dirs):
    payload = {"module_name": "task", "fields": TASK_FIELDS, "requirements": {"openRoutes": ["list"]}}
    response = client.post("/v1/api-generators", json=payload)
    assert response.status_code == 201, response.text

    routes = (output_dirs["api"] / "routes/task_routes.py").read_text(encoding="utf-8")
    assert routes.count("Depends(optional_user)") == 1


def test_collision_marks_record_failed(client, output_dirs, db):
    target = output_dirs["api"] / "models" / "task_model.py"
    target.parent.mkdir(parents=True)
    target.write_text("# hand written\n", encoding="utf-8")

    response = client.post("/v1/api-generators", json={"module_name": "task", "fields": TASK_FIELDS})
    assert response.status_code == 409
    assert "already exists" in response.json()["message"]

    record = db.query(ApiGenerator).filter_by(module_name="task").one()
    assert record.status == "failed"
    assert "models/task_model.py" in record.error_message
    assert target.read_text(encoding="utf-8") == "# hand written\n"


def test_invalid_fields_are_rejected_before_saving(client, db):
    response = client.post(
        "/v1/api-generators",
        json={"module_name": "task", "fields": [{"name": "id", "type": "STRING"}]},
    )
    assert response.status_code == 400
    assert any(e["field"].startswith("fields.0") for e in response.json()["errors"])
    assert db.query(ApiGenerator).count() == 0


def test_module_name_rules(client):
    for name in ("ab", "1task", "task_name"):
        response = client.post("/v1/api-generators", json={"module_name": name, "fields": TASK_FIELDS})
        assert response.status_code == 400, f"{name} should be rejected"


def test_module_name_unique(client):
    client.post("/v1/api-generators", json={"module_name": "task", "fields": TASK_FIELDS})
    response = client.post("/v1/api-generators", json={"module_name": "task", "fields": TASK_FIELDS})
    assert response.status_code == 400
    assert response.json()["message"] == "Module already exists"


def test_delete_tears_down_files(client, output_dirs):
    client.post("/v1/api-generators", json={"module_name": "note", "fields": [{"name": "body", "type": "TEXT"}]})
    record = client.post("/v1/api-generators", json={"module_name": "task", "fields": TASK_FIELDS}).json()["data"]

    response = client.delete(f"/v1/api-generators/{record['id']}")
    assert response.status_code == 200

    for path in record["generated_files"]["files"].values():
        assert not (output_dirs["api"] / path).exists(), f"{path} survived delete"
    routes_index = (output_dirs["api"] / "routes/__init__.py").read_text(encoding="utf-8")
    assert "# model: task" not in routes_index
    assert "# model: note" in routes_index
    assert client.get(f"/v1/api-generators/{record['id']}").status_code == 404


def test_delete_survives_files_removed_by_hand(client, output_dirs):
    record = client.post("/v1/api-generators", json={"module_name": "task", "fields": TASK_FIELDS}).json()["data"]
    (output_dirs["api"] / "routes/task_routes.py").unlink()

    assert client.delete(f"/v1/api-generators/{record['id']}").status_code == 200


def test_delete_failed_record_leaves_files(client, output_dirs):
    target = output_dirs["api"] / "models" / "task_model.py"
    target.parent.mkdir(parents=True)
    target.write_text("# hand written\n", encoding="utf-8")
    client.post("/v1/api-generators", json={"module_name": "task", "fields": TASK_FIELDS})

    record = client.get("/v1/api-generators", params={"status": "failed"}).json()["data"]["items"][0]
    assert client.delete(f"/v1/api-generators/{record['id']}").status_code == 200
    assert target.exists()


def test_update_does_not_regenerate(client, output_dirs):
    record = client.post("/v1/api-generators", json={"module_name": "task", "fields": TASK_FIELDS}).json()["data"]
    before = (output_dirs["api"] / "models/task_model.py").read_text(encoding="utf-8")

    response = client.put(
        f"/v1/api-generators/{record['id']}",
        json={"fields": TASK_FIELDS + [{"name": "notes", "type": "TEXT"}]},
    )
    assert response.status_code == 200, response.text
    assert len(response.json()["data"]["fields"]) == 3
    assert (output_dirs["api"] / "models/task_model.py").read_text(encoding="utf-8") == before


def test_relation_clash_is_rejected_before_saving(client, output_dirs, db):
    payload = {
        "module_name": "task",
        "fields": [{"name": "project_id", "type": "STRING"}],
        "requirements": {"relations": [{"model": "project", "type": "belongsTo"}]},
    }
    response = client.post("/v1/api-generators", json=payload)
    assert response.status_code == 400, response.text
    assert response.json()["errors"][0]["field"] == "relations.0"
    assert db.query(ApiGenerator).count() == 0
    assert not (output_dirs["api"] / "models" / "task_model.py").exists()


def test_update_rejects_relation_clash_with_stored_requirements(client, output_dirs, db):
    payload = {
        "module_name": "task",
        "fields": TASK_FIELDS,
        "requirements": {"relations": [{"model": "project", "type": "belongsTo"}]},
    }
    record = client.post("/v1/api-generators", json=payload).json()["data"]

    response = client.put(
        f"/v1/api-generators/{record['id']}",
        json={"fields": TASK_FIELDS + [{"name": "project_id", "type": "STRING"}]},
    )
    assert response.status_code == 400, response.text
    db.expire_all()
    assert len(db.get(ApiGenerator, record["id"]).fields) == 2
