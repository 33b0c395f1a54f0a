"""Tests for the crmgen command line."""
import json
import tempfile
from pathlib import Path

import yaml

from crmgen.cli import main
from crmgen.generators.scaffold.generator import SAMPLE_SPEC


def test_generate_from_yaml(capsys):
    with tempfile.TemporaryDirectory() as temp_dir:
        temp_path = Path(temp_dir)
        spec_path = temp_path / "task.yaml"
        spec_path.write_text(yaml.safe_dump(SAMPLE_SPEC), encoding="utf-8")
        out_dir = temp_path / "out"

        assert main(["generate", str(spec_path), "-o", str(out_dir)]) == 0
        assert (out_dir / "models" / "task_model.py").exists()
        assert "created routes/task_routes.py" in capsys.readouterr().out

        # second run collides
        assert main(["generate", str(spec_path), "-o", str(out_dir)]) == 1

        assert main(["teardown", "task", "-o", str(out_dir)]) == 0
        assert not (out_dir / "models" / "task_model.py").exists()


def test_project_from_json():
    with tempfile.TemporaryDirectory() as temp_dir:
        temp_path = Path(temp_dir)
        spec_path = temp_path / "models.json"
        spec_path.write_text(json.dumps({
            "models": [SAMPLE_SPEC, {"modelName": "note", "fields": [{"name": "body", "type": "TEXT"}]}],
            "requirements": {"authentication": False},
        }), encoding="utf-8")
        out_dir = temp_path / "out"

        assert main(["project", str(spec_path), "-o", str(out_dir)]) == 0
        assert (out_dir / "README.md").exists()
        routes = (out_dir / "routes" / "note_routes.py").read_text(encoding="utf-8")
        assert "authenticate_user" not in routes


def test_invalid_spec_exit_code(capsys):
    with tempfile.TemporaryDirectory() as temp_dir:
        spec_path = Path(temp_dir) / "bad.yaml"
        spec_path.write_text("modelName: task\nfields: []\n", encoding="utf-8")

        assert main(["generate", str(spec_path), "-o", str(Path(temp_dir) / "out")]) == 2
        assert "error: fields:" in capsys.readouterr().err


def test_malformed_spec_file_exit_code(capsys):
    with tempfile.TemporaryDirectory() as temp_dir:
        temp_path = Path(temp_dir)
        yaml_path = temp_path / "broken.yaml"
        yaml_path.write_text("modelName: [task\n", encoding="utf-8")
        json_path = temp_path / "broken.json"
        json_path.write_text('{"modelName": "task",', encoding="utf-8")

        assert main(["generate", str(yaml_path), "-o", str(temp_path / "out")]) == 2
        assert "broken.yaml is not valid" in capsys.readouterr().err
        assert main(["project", str(json_path), "-o", str(temp_path / "out")]) == 2
        assert "broken.json is not valid" in capsys.readouterr().err
        assert not (temp_path / "out").exists()
