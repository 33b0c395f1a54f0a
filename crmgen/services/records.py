"""CRUD services for the plain CRM records: roles, pipelines, filters, contacts and leads."""
from sqlalchemy import select

from crmgen.core.errors import HookError
from crmgen.db.models import Contact, Filter, Lead, Pipeline, Role, Stage
from crmgen.services.crud import CrudService, HookContext, LifecycleHooks, unique_together

FILTER_TYPES = ("category", "source", "tag", "label", "status")


def _register_unique(hooks: LifecycleHooks, model, fields, message: str) -> None:
    for event in ("before_create", "before_update"):
        hooks.register(event, "unique_" + "_".join(fields), unique_together(model, fields, message))


role_hooks = LifecycleHooks()
_register_unique(role_hooks, Role, ("role_name",), "Role already exists")
roles = CrudService(Role, "Role", hooks=role_hooks, filter_fields=("role_name",))


pipeline_hooks = LifecycleHooks()
_register_unique(pipeline_hooks, Pipeline, ("name",), "Pipeline already exists")


@pipeline_hooks.on("before_delete")
def pipeline_has_no_stages(ctx: HookContext) -> None:
    if ctx.db.scalar(select(Stage.id).where(Stage.pipeline == ctx.item.id).limit(1)) is not None:
        raise HookError("Pipeline still has stages")


pipelines = CrudService(Pipeline, "Pipeline", hooks=pipeline_hooks, filter_fields=("name",))


filter_hooks = LifecycleHooks()


def _unique_filter(ctx: HookContext) -> None:
    name = ctx.data.get("name", ctx.previous.get("name"))
    type_ = ctx.data.get("type", ctx.previous.get("type"))
    query = select(Filter.id).where(Filter.name == name, Filter.type == type_)
    if ctx.item.id is not None:
        query = query.where(Filter.id != ctx.item.id)
    if ctx.db.scalar(query.limit(1)) is not None:
        raise HookError(f'{type_} with name "{name}" already exists')


filter_hooks.register("before_create", "unique_name_per_type", _unique_filter)
filter_hooks.register("before_update", "unique_name_per_type", _unique_filter)
filters = CrudService(
    Filter, "Filter", hooks=filter_hooks, filter_fields=("type", "name"), order_by=[Filter.type, Filter.name]
)


contact_hooks = LifecycleHooks()
_register_unique(contact_hooks, Contact, ("email",), "Contact with this email already exists")
_register_unique(contact_hooks, Contact, ("phone",), "Contact with this phone number already exists")
contacts = CrudService(Contact, "Contact", hooks=contact_hooks, filter_fields=("email", "phone"))


lead_hooks = LifecycleHooks()


def _check_lead_refs(ctx: HookContext) -> None:
    pipeline = ctx.data.get("pipeline", ctx.previous.get("pipeline"))
    stage_id = ctx.data.get("stage", ctx.previous.get("stage"))
    if ctx.db.get(Pipeline, pipeline) is None:
        raise HookError("Pipeline not found")
    stage = ctx.db.get(Stage, stage_id)
    if stage is None or stage.pipeline != pipeline:
        raise HookError("Stage not found in pipeline")
    for key, expected in (("source", "source"), ("category", "category")):
        value = ctx.data.get(key, ctx.previous.get(key))
        row = ctx.db.get(Filter, value)
        if row is None or row.type != expected:
            raise HookError(f"{expected.capitalize()} not found")
    contact = ctx.data.get("contact", ctx.previous.get("contact"))
    if contact is not None and ctx.db.get(Contact, contact) is None:
        raise HookError("Contact not found")


lead_hooks.register("before_create", "check_references", _check_lead_refs)
lead_hooks.register("before_update", "check_references", _check_lead_refs)
leads = CrudService(
    Lead,
    "Lead",
    hooks=lead_hooks,
    filter_fields=("pipeline", "stage", "source", "category", "priority", "status", "contact", "is_converted"),
)
