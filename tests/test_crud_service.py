"""Tests for CrudService lifecycle hooks and the log formatter."""
import logging

import pytest

from crmgen.core.errors import HookError, ServiceError
from crmgen.core.logging import ContextFormatter
from crmgen.db.models import Pipeline
from crmgen.services.crud import CrudService, HookContext, LifecycleHooks, parse_limit


def test_hooks_run_in_registration_order(db):
    calls = []
    hooks = LifecycleHooks()
    hooks.register("before_create", "first", lambda ctx: calls.append("first"))
    hooks.register("before_create", "second", lambda ctx: calls.append("second"))
    hooks.register("after_create", "third", lambda ctx: calls.append(("after", ctx.item.id)))

    item = CrudService(Pipeline, "Pipeline", hooks=hooks).create(db, {"name": "Sales"}, user_id="u1")

    assert calls == ["first", "second", ("after", item.id)]
    assert hooks.names("before_create") == ["first", "second"]
    assert item.created_by == "u1"


def test_hook_registration_is_checked():
    hooks = LifecycleHooks()
    with pytest.raises(ValueError):
        hooks.register("before_launch", "x", lambda ctx: None)
    hooks.register("before_update", "x", lambda ctx: None)
    with pytest.raises(ValueError):
        hooks.register("before_update", "x", lambda ctx: None)


def test_failing_before_hook_rolls_back(db):
    hooks = LifecycleHooks()

    @hooks.on("before_create")
    def reject(ctx: HookContext) -> None:
        raise HookError("no thanks")

    service = CrudService(Pipeline, "Pipeline", hooks=hooks)
    with pytest.raises(HookError):
        service.create(db, {"name": "Sales"})
    assert service.list(db)["total"] == 0


def test_failing_after_hook_keeps_row(db):
    hooks = LifecycleHooks()

    @hooks.on("after_create")
    def explode(ctx: HookContext) -> None:
        raise RuntimeError("after commit")

    service = CrudService(Pipeline, "Pipeline", hooks=hooks)
    with pytest.raises(RuntimeError):
        service.create(db, {"name": "Sales"})
    assert service.list(db)["total"] == 1


def test_update_hooks_see_previous_values(db):
    seen = {}
    hooks = LifecycleHooks()

    @hooks.on("before_update")
    def remember(ctx: HookContext) -> None:
        seen["previous"] = ctx.previous["name"]
        seen["next"] = ctx.data["name"]

    service = CrudService(Pipeline, "Pipeline", hooks=hooks)
    item = service.create(db, {"name": "Sales"})
    service.update(db, item.id, {"name": "Revenue"})
    assert seen == {"previous": "Sales", "next": "Revenue"}


@pytest.mark.parametrize("raw, expected", [("10", 10), (5, 5), ("all", None), ("-1", None), (None, 10)])
def test_parse_limit(raw, expected):
    assert parse_limit(raw) == expected


@pytest.mark.parametrize("raw", ["abc", "0", "-5"])
def test_parse_limit_rejects(raw):
    with pytest.raises(ServiceError):
        parse_limit(raw)


def test_context_formatter_defaults_and_extras():
    formatter = ContextFormatter("[model=%(model)s record=%(record_id)s] %(message)s")
    record = logging.LogRecord("crmgen", logging.INFO, __file__, 1, "generated", None, None)
    record.files = 4
    assert formatter.format(record) == "[model=- record=-] generated (files=4)"

    record = logging.LogRecord("crmgen", logging.INFO, __file__, 1, "done", None, None)
    record.model = "task"
    record.record_id = "abc"
    assert formatter.format(record) == "[model=task record=abc] done"
