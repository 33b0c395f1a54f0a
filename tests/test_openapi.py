"""Test that the admin API publishes a valid OpenAPI document."""
import tempfile
from pathlib import Path

import yaml
from openapi_spec_validator import validate
from openapi_spec_validator.readers import read_from_filename

from crmgen.main import app

RESOURCES = ("roles", "users", "pipelines", "stages", "filters", "contacts", "leads", "api-generators")


def test_openapi_document_is_valid():
    """Dump the OpenAPI document to YAML and validate it."""
    with tempfile.TemporaryDirectory() as temp_dir:
        openapi_path = Path(temp_dir) / "openapi.yaml"
        openapi_path.write_text(yaml.safe_dump(app.openapi(), sort_keys=False), encoding="utf-8")

        spec_dict, spec_url = read_from_filename(str(openapi_path))
        validate(spec_dict)

        paths = spec_dict["paths"]
        for resource in RESOURCES:
            collection = f"/v1/{resource}"
            detail = f"/v1/{resource}/{{id}}"
            assert collection in paths, f"{collection} path not found"
            assert {"get", "post"} <= set(paths[collection]), f"{collection} is missing list or create"
            assert detail in paths, f"{detail} path not found"
            assert {"get", "put", "delete"} <= set(paths[detail]), f"{detail} is missing get, update or delete"

        assert "/v1/generator" in paths, "generator path not found"
        assert "/v1/generator/download" in paths, "download path not found"


def test_user_schema_never_exposes_password():
    schemas = app.openapi()["components"]["schemas"]
    assert "UserOut" in schemas, "UserOut schema not found"
    assert "password" not in schemas["UserOut"]["properties"]
    assert "password" in schemas["UserCreate"]["properties"]
