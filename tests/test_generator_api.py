"""API tests for the standalone generator endpoints."""
import io
import zipfile

from crmgen.generators.scaffold.generator import SAMPLE_SPEC, TEMPLATES

NOTE_SPEC = {"modelName": "note", "fields": [{"name": "body", "type": "TEXT", "required": True}]}


def test_generate_returns_code(client, output_dirs):
    response = client.post("/v1/generator", json=SAMPLE_SPEC)
    assert response.status_code == 201, response.text
    data = response.json()["data"]

    assert data["modelName"] == "task"
    assert data["files"]["routes"] == "routes/task_routes.py"
    assert "class Task(CrudModel):" in data["code"]["model"]
    assert (output_dirs["generator"] / "routes/task_routes.py").exists()


def test_generate_twice_conflicts(client):
    assert client.post("/v1/generator", json=SAMPLE_SPEC).status_code == 201
    response = client.post("/v1/generator", json=SAMPLE_SPEC)
    assert response.status_code == 409
    assert response.json()["success"] is False


def test_generate_invalid_spec(client, output_dirs):
    response = client.post("/v1/generator", json={"modelName": "task", "fields": []})
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "fields"
    assert not output_dirs["generator"].exists()


def test_generate_with_bad_relations(client):
    spec = {
        "modelName": "task",
        "fields": [{"name": "project_id", "type": "STRING"}],
        "requirements": {"relations": [{"model": "project", "type": "belongsTo"}]},
    }
    response = client.post("/v1/generator", json=spec)
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "relations.0"


def test_download_returns_zip_without_persisting(client, output_dirs):
    response = client.post("/v1/generator/download", json=SAMPLE_SPEC)
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/zip"
    assert 'filename="task-files.zip"' in response.headers["content-disposition"]

    with zipfile.ZipFile(io.BytesIO(response.content)) as archive:
        assert sorted(archive.namelist()) == [
            "controllers/task_controller.py",
            "middlewares/task_validation.py",
            "models/task_model.py",
            "routes/task_routes.py",
        ]
    assert not output_dirs["generator"].exists()


def test_project_and_project_download(client):
    assert client.get("/v1/generator/project/download").status_code == 404

    response = client.post("/v1/generator/project", json={"models": [SAMPLE_SPEC, NOTE_SPEC]})
    assert response.status_code == 201, response.text
    names = [entry["model_name"] for entry in response.json()["data"]]
    assert names == ["task", "note", "__project__"]

    download = client.get("/v1/generator/project/download")
    assert download.status_code == 200
    with zipfile.ZipFile(io.BytesIO(download.content)) as archive:
        files = archive.namelist()
    assert "main.py" in files
    assert "models/note_model.py" in files
    assert "README.md" in files


def test_project_rejects_duplicate_models(client):
    response = client.post("/v1/generator/project", json={"models": [SAMPLE_SPEC, SAMPLE_SPEC]})
    assert response.status_code == 400


def test_remove_model(client, output_dirs):
    client.post("/v1/generator", json=SAMPLE_SPEC)
    response = client.delete("/v1/generator/task")
    assert response.status_code == 200
    assert len(response.json()["data"]["removed"]) == 4
    assert not (output_dirs["generator"] / "models/task_model.py").exists()

    # nothing left to remove is not an error
    again = client.delete("/v1/generator/task")
    assert again.status_code == 200
    assert again.json()["data"]["removed"] == []


def test_templates(client):
    listed = client.get("/v1/generator/templates").json()["data"]
    assert [t["name"] for t in listed] == list(TEMPLATES)

    model = client.get("/v1/generator/templates/model").json()["data"]
    assert model["template"] == "model"
    assert "class Task(CrudModel):" in model["content"]

    assert client.get("/v1/generator/templates/unknown").status_code == 404
