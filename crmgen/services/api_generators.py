"""API generator records: creating one generates a CRUD module into the host backend, deleting one removes it.

Status moves ``pending -> generated`` or ``pending -> failed``. Generation runs
as an after-create hook, so a failed generation leaves the record committed
with ``status=failed`` and ``error_message`` set before the error propagates.
Files written before the failure stay in place.
"""
import logging
from pathlib import Path

from crmgen.core.config import settings
from crmgen.db.models import ApiGenerator
from crmgen.generators.scaffold.generator import check_relations, generate_model, teardown
from crmgen.generators.scaffold.types import ArtifactSet
from crmgen.schemas.generator import load_model_spec, load_requirements
from crmgen.services.crud import CrudService, HookContext, LifecycleHooks, unique_together

log = logging.getLogger(__name__)

STATUS_PENDING = "pending"
STATUS_GENERATED = "generated"
STATUS_FAILED = "failed"

hooks = LifecycleHooks()


def output_dir() -> Path:
    return Path(settings.api_output_dir)


def record_spec(record: ApiGenerator) -> dict:
    return {"modelName": record.module_name, "fields": record.fields}


def validate_spec(ctx: HookContext) -> None:
    """Reject a spec whose relations clash with its fields before the row is written."""
    values = {**ctx.previous, **ctx.data}
    spec = load_model_spec({"modelName": values["module_name"], "fields": values["fields"]})
    check_relations(spec, load_requirements(values.get("requirements")))


for _event in ("before_create", "before_update"):
    hooks.register(_event, "unique_module_name",
                   unique_together(ApiGenerator, ("module_name",), "Module already exists"))
    hooks.register(_event, "valid_spec", validate_spec)


@hooks.on("before_create")
def start_pending(ctx: HookContext) -> None:
    ctx.item.status = STATUS_PENDING
    ctx.item.generated_files = None
    ctx.item.error_message = None


@hooks.on("after_create")
def generate_files(ctx: HookContext) -> None:
    record = ctx.item
    extra = {"model": record.module_name, "record_id": record.id}
    try:
        artifacts = generate_model(record_spec(record), output_dir(), record.requirements or None)
    except Exception as e:
        log.error("API generation failed: %s", e, extra=extra)
        record.status = STATUS_FAILED
        record.error_message = str(e)
        ctx.db.commit()
        raise

    record.status = STATUS_GENERATED
    record.generated_files = artifacts.to_dict()
    record.error_message = None
    ctx.db.commit()
    log.info("API generated", extra=extra)


@hooks.on("before_delete")
def remove_generated_files(ctx: HookContext) -> None:
    """Tear down what generation recorded. Teardown never raises, so the row is always deleted."""
    record = ctx.item
    if not record.generated_files:
        return
    removed = teardown(ArtifactSet.from_dict(record.generated_files), output_dir())
    log.info(
        "Generated files removed",
        extra={"model": record.module_name, "record_id": record.id, "removed": len(removed)},
    )


service = CrudService(ApiGenerator, "API generator", hooks=hooks, filter_fields=("status", "module_name"))
