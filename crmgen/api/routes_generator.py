"""Standalone generator endpoints: generate, download, project, teardown and template preview."""
import logging
import tempfile
from pathlib import Path

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response

from crmgen.api.crud_router import envelope
from crmgen.core.config import settings
from crmgen.generators.scaffold.archive import build_archive
from crmgen.generators.scaffold.generator import (
    TEMPLATES,
    generate_model,
    generate_project,
    render_template,
    teardown_model,
)
from crmgen.schemas.generator import GenerateRequest, ProjectRequest

log = logging.getLogger(__name__)

router = APIRouter(prefix="/generator")


def _output_dir() -> Path:
    return Path(settings.generator_output_dir)


def _zip_response(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("", status_code=201)
def generate(req: GenerateRequest):
    out_dir = _output_dir()
    artifacts = generate_model(req, out_dir, req.requirements)
    code = {
        kind: (out_dir / path).read_text(encoding="utf-8")
        for kind, path in artifacts.files.items()
    }
    return envelope("Code generated successfully", {
        "modelName": req.model_name,
        "files": artifacts.files,
        "code": code,
    })


@router.post("/download")
def download(req: GenerateRequest):
    """Generate into a scratch directory and return the per-model files as a zip."""
    with tempfile.TemporaryDirectory() as temp_dir:
        root = Path(temp_dir)
        artifacts = generate_model(req, root, req.requirements)
        content = build_archive(artifacts.paths(), root)
    return _zip_response(content, f"{req.model_name}-files.zip")


@router.post("/project", status_code=201)
def project(req: ProjectRequest):
    results = generate_project(req.models, _output_dir(), req.requirements)
    return envelope("Project generated successfully", [a.to_dict() for a in results])


@router.get("/project/download")
def project_download():
    out_dir = _output_dir()
    if not out_dir.is_dir() or not any(p.is_file() for p in out_dir.rglob("*")):
        raise HTTPException(status_code=404, detail="Nothing has been generated yet")
    return _zip_response(build_archive(None, out_dir), "project.zip")


@router.delete("/{model_name}")
def remove(model_name: str):
    removed = teardown_model(model_name, _output_dir())
    return envelope(f"{model_name} removed", {"modelName": model_name, "removed": removed})


@router.get("/templates")
def list_templates():
    templates = [{"name": kind, "path": f"/v1/generator/templates/{kind}"} for kind in TEMPLATES]
    return envelope("Templates fetched successfully", templates)


@router.get("/templates/{kind}")
def get_template(kind: str):
    if kind not in TEMPLATES:
        raise HTTPException(status_code=404, detail="Template not found")
    return envelope("Template fetched successfully", {"template": kind, "content": render_template(kind)})
