"""Orchestrator for scaffold generation and teardown."""
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from crmgen.generators.scaffold.errors import ArtifactExistsError, ScaffoldError, SpecValidationError
from crmgen.generators.scaffold.index_patcher import register, unregister
from crmgen.generators.scaffold.render import (
    render_auth_middleware,
    render_base_model,
    render_crud_helpers,
    render_db_config,
    render_models_index,
    render_readme,
    render_requirements_txt,
    render_response_handler,
    render_routes_index,
    render_server,
    render_settings,
    shared_files,
    shared_index_paths,
)
from crmgen.generators.scaffold.render_entity import (
    render_controller,
    render_index_entries,
    render_model,
    render_routes,
    render_validation,
)
from crmgen.generators.scaffold.types import ArtifactKind, ArtifactSet, GeneratedFile, RelationType
from crmgen.generators.scaffold.utils import (
    controller_path,
    model_path,
    model_slug,
    routes_path,
    validation_path,
)
from crmgen.generators.scaffold.writer import remove_file, write_files, write_if_absent
from crmgen.schemas.generator import GeneratorRequirements, ModelSpec, load_model_spec, load_requirements

log = logging.getLogger(__name__)

PROJECT_ENTRY = "__project__"

SAMPLE_SPEC = {
    "modelName": "task",
    "fields": [
        {"name": "title", "type": "STRING", "required": True},
        {"name": "status", "type": "ENUM", "enumValues": ["pending", "done"], "defaultValue": "pending"},
        {"name": "notes", "type": "TEXT"},
    ],
}


def _as_spec(spec: Union[ModelSpec, Dict[str, Any]]) -> ModelSpec:
    if isinstance(spec, ModelSpec):
        return spec
    return load_model_spec(spec)


def _as_requirements(requirements: Union[GeneratorRequirements, Dict[str, Any], None]) -> GeneratorRequirements:
    if isinstance(requirements, GeneratorRequirements):
        return requirements
    return load_requirements(requirements)


def check_relations(spec: ModelSpec, requirements: GeneratorRequirements) -> None:
    """Reject relations whose generated attributes would clash with the model's fields."""
    taken = {f.name for f in spec.fields}
    errors = []
    for i, relation in enumerate(requirements.relations):
        names = []
        if relation.type == RelationType.BELONGS_TO:
            names.append(relation.foreign_key or f"{model_slug(relation.model)}_id")
        names.append(relation.as_ or model_slug(relation.model))
        for name in names:
            if name in taken:
                errors.append({"field": f"relations.{i}", "message": f"'{name}' is already defined on the model"})
            taken.add(name)
    if errors:
        raise SpecValidationError(errors)


def render_model_files(spec: ModelSpec, requirements: Optional[GeneratorRequirements] = None) -> List[GeneratedFile]:
    """Render the four per-model artifacts without touching the filesystem."""
    name = spec.model_name
    return [
        GeneratedFile(model_path(name), render_model(spec, requirements), ArtifactKind.MODEL.value),
        GeneratedFile(validation_path(name), render_validation(spec), ArtifactKind.VALIDATION.value),
        GeneratedFile(controller_path(name), render_controller(spec), ArtifactKind.CONTROLLER.value),
        GeneratedFile(routes_path(name), render_routes(spec, requirements), ArtifactKind.ROUTES.value),
    ]


def expected_artifacts(model_name: str) -> ArtifactSet:
    """The artifact set generation would record for ``model_name``."""
    return ArtifactSet(
        model_name=model_name,
        files={
            ArtifactKind.MODEL.value: model_path(model_name),
            ArtifactKind.VALIDATION.value: validation_path(model_name),
            ArtifactKind.CONTROLLER.value: controller_path(model_name),
            ArtifactKind.ROUTES.value: routes_path(model_name),
        },
        indexes=list(shared_index_paths().values()),
    )


def ensure_shared_files(out_dir: Path) -> List[str]:
    """Copy the shared utility files into ``out_dir`` if absent. Returns the paths written."""
    written = []
    for file in shared_files():
        if write_if_absent(out_dir / file.path, file.content):
            written.append(file.path)
    if written:
        log.info("Shared files written", extra={"count": len(written)})
    return written


def _check_collisions(files: List[GeneratedFile], out_dir: Path) -> None:
    for file in files:
        if (out_dir / file.path).exists():
            raise ArtifactExistsError(file.path)


def _register_model(spec: ModelSpec, out_dir: Path) -> List[str]:
    slug = model_slug(spec.model_name)
    indexes = []
    for index_path, entry in render_index_entries(spec).items():
        register(out_dir / index_path, slug, entry["import_line"], entry["registration_line"])
        indexes.append(index_path)
    return indexes


def generate_model(
    spec: Union[ModelSpec, Dict[str, Any]],
    out_dir: Path,
    requirements: Union[GeneratorRequirements, Dict[str, Any], None] = None,
) -> ArtifactSet:
    """
    Generate the CRUD backend files for one model.

    Args:
        spec: ModelSpec (or raw dict, validated here)
        out_dir: Root of the generated backend
        requirements: Authentication, open routes and relations

    Returns:
        ArtifactSet recording every per-model file and index registration

    Raises:
        SpecValidationError: before any file I/O
        ArtifactExistsError: a per-model file already exists; nothing is written
        ArtifactWriteError: a directory or file could not be written
    """
    spec = _as_spec(spec)
    requirements = _as_requirements(requirements)
    check_relations(spec, requirements)
    out_dir = Path(out_dir)

    files = render_model_files(spec, requirements)
    _check_collisions(files, out_dir)

    ensure_shared_files(out_dir)
    write_files(files, out_dir)
    indexes = _register_model(spec, out_dir)

    artifacts = ArtifactSet(
        model_name=spec.model_name,
        files={f.kind: f.path for f in files},
        indexes=indexes,
    )
    log.info("Model generated", extra={"model": spec.model_name, "files": len(files)})
    return artifacts


def generate_project(
    specs: List[Union[ModelSpec, Dict[str, Any]]],
    out_dir: Path,
    requirements: Union[GeneratorRequirements, Dict[str, Any], None] = None,
) -> List[ArtifactSet]:
    """
    Generate a complete backend for several models.

    Every model is rendered and collision-checked before anything is written.
    The returned list holds one ArtifactSet per model followed by one entry
    named ``PROJECT_ENTRY`` recording the server entry and database config.
    """
    specs = [_as_spec(s) for s in specs]
    requirements = _as_requirements(requirements)
    out_dir = Path(out_dir)

    seen = set()
    for spec in specs:
        key = model_slug(spec.model_name)
        if key in seen:
            raise SpecValidationError([{"field": "models", "message": f"duplicate model '{spec.model_name}'"}])
        seen.add(key)
        check_relations(spec, requirements)
        _check_collisions(render_model_files(spec, requirements), out_dir)

    results = [generate_model(spec, out_dir, requirements) for spec in specs]

    write_if_absent(out_dir / "README.md", render_readme([s.model_name for s in specs]))
    results.append(ArtifactSet(
        model_name=PROJECT_ENTRY,
        files={ArtifactKind.SERVER.value: "main.py", ArtifactKind.DB_CONFIG.value: "config/db.py"},
    ))
    log.info("Project generated", extra={"models": len(specs)})
    return results


def teardown(artifacts: ArtifactSet, out_dir: Path) -> List[str]:
    """
    Reverse a generation: delete the recorded files and unregister the model.

    Missing files and OS errors are logged and skipped. Never raises.

    Returns:
        Relative paths actually removed
    """
    out_dir = Path(out_dir)
    removed = []
    for path in artifacts.paths():
        if remove_file(out_dir / path):
            removed.append(path)

    if artifacts.model_name != PROJECT_ENTRY:
        slug = model_slug(artifacts.model_name)
        for index_path in artifacts.indexes or shared_index_paths().values():
            try:
                unregister(out_dir / index_path, slug)
            except (ScaffoldError, OSError) as e:
                log.warning(
                    "Failed to unregister model", extra={"model": artifacts.model_name, "error": str(e)}
                )

    log.info("Model torn down", extra={"model": artifacts.model_name, "removed": len(removed)})
    return removed


def teardown_model(model_name: str, out_dir: Path) -> List[str]:
    """Tear down a model by name using the conventional artifact paths."""
    return teardown(expected_artifacts(model_name), out_dir)


TEMPLATES: Dict[str, Callable[[ModelSpec], str]] = {
    ArtifactKind.MODEL.value: render_model,
    ArtifactKind.VALIDATION.value: render_validation,
    ArtifactKind.CONTROLLER.value: render_controller,
    ArtifactKind.ROUTES.value: render_routes,
    ArtifactKind.SERVER.value: lambda spec: render_server(),
    ArtifactKind.DB_CONFIG.value: lambda spec: render_db_config(),
    "settings": lambda spec: render_settings(),
    "base_model": lambda spec: render_base_model(),
    "response_handler": lambda spec: render_response_handler(),
    "auth_middleware": lambda spec: render_auth_middleware(),
    "crud_helpers": lambda spec: render_crud_helpers(),
    "requirements": lambda spec: render_requirements_txt(),
    "models_index": lambda spec: render_models_index(),
    "routes_index": lambda spec: render_routes_index(),
}


def render_template(kind: str, spec: Union[ModelSpec, Dict[str, Any], None] = None) -> str:
    """Render one artifact kind for ``spec`` (the sample task model by default)."""
    if kind not in TEMPLATES:
        raise KeyError(kind)
    return TEMPLATES[kind](_as_spec(spec or SAMPLE_SPEC))
