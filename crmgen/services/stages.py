"""Stages: ordered steps of a pipeline, grouped by type (lead, proposal, ...).

Within one (pipeline, type) group the ``order`` values stay contiguous from 0
and at most one stage is the default.
"""
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from crmgen.core.errors import HookError
from crmgen.db.models import Pipeline, Stage
from crmgen.services.crud import CrudService, HookContext, LifecycleHooks, unique_together

hooks = LifecycleHooks()


def siblings(db: Session, pipeline: str, type_: str, exclude_id: Optional[str] = None) -> List[Stage]:
    query = select(Stage).where(Stage.pipeline == pipeline, Stage.type == type_)
    if exclude_id is not None:
        query = query.where(Stage.id != exclude_id)
    return list(db.scalars(query.order_by(Stage.order)))


def _target(ctx: HookContext, key: str):
    return ctx.data.get(key, ctx.previous.get(key))


def _check_pipeline(db: Session, pipeline_id: Optional[str]) -> None:
    if pipeline_id is None or db.get(Pipeline, pipeline_id) is None:
        raise HookError("Pipeline not found")


def _check_single_default(ctx: HookContext) -> None:
    if not ctx.data.get("is_default"):
        return
    query = select(Stage.id).where(
        Stage.pipeline == _target(ctx, "pipeline"),
        Stage.type == _target(ctx, "type"),
        Stage.is_default.is_(True),
    )
    if ctx.item.id is not None:
        query = query.where(Stage.id != ctx.item.id)
    if ctx.db.scalar(query.limit(1)) is not None:
        raise HookError("Default stage already exists")


@hooks.on("before_create")
def pipeline_exists(ctx: HookContext) -> None:
    _check_pipeline(ctx.db, ctx.data.get("pipeline"))


hooks.register("before_create", "unique_name_per_pipeline",
               unique_together(Stage, ("name", "pipeline"), "Stage already exists"))


@hooks.on("before_create")
def single_default(ctx: HookContext) -> None:
    _check_single_default(ctx)


@hooks.on("before_create")
def append_to_group(ctx: HookContext) -> None:
    ctx.item.order = len(siblings(ctx.db, ctx.item.pipeline, ctx.item.type))


@hooks.on("before_update")
def pipeline_exists_on_update(ctx: HookContext) -> None:
    if "pipeline" in ctx.data:
        _check_pipeline(ctx.db, ctx.data["pipeline"])


hooks.register("before_update", "unique_name_per_pipeline",
               unique_together(Stage, ("name", "pipeline"), "Stage already exists"))


@hooks.on("before_update")
def single_default_on_update(ctx: HookContext) -> None:
    _check_single_default(ctx)


@hooks.on("before_update")
def reorder(ctx: HookContext) -> None:
    """Keep sibling order contiguous when a stage moves within or between groups."""
    old_pipeline, old_type, old_order = ctx.previous["pipeline"], ctx.previous["type"], ctx.previous["order"]
    pipeline, type_ = _target(ctx, "pipeline"), _target(ctx, "type")

    if (pipeline, type_) != (old_pipeline, old_type):
        for stage in siblings(ctx.db, old_pipeline, old_type, exclude_id=ctx.item.id):
            if stage.order > old_order:
                stage.order -= 1
        ctx.data["order"] = len(siblings(ctx.db, pipeline, type_, exclude_id=ctx.item.id))
        return

    if ctx.data.get("order") is None:
        ctx.data.pop("order", None)
        return

    group = siblings(ctx.db, pipeline, type_, exclude_id=ctx.item.id)
    new_order = min(max(ctx.data["order"], 0), len(group))
    ctx.data["order"] = new_order
    if new_order < old_order:
        for stage in group:
            if new_order <= stage.order < old_order:
                stage.order += 1
    elif new_order > old_order:
        for stage in group:
            if old_order < stage.order <= new_order:
                stage.order -= 1


@hooks.on("before_delete")
def close_gap(ctx: HookContext) -> None:
    for stage in siblings(ctx.db, ctx.item.pipeline, ctx.item.type, exclude_id=ctx.item.id):
        if stage.order > ctx.item.order:
            stage.order -= 1


service = CrudService(
    Stage,
    "Stage",
    hooks=hooks,
    filter_fields=("pipeline", "type", "is_default"),
    order_by=[Stage.pipeline, Stage.type, Stage.order],
)
