"""Generic CRUD service with named lifecycle hooks.

Hooks are registered per event in an explicit, ordered list. Before-hooks run
inside the unit of work: an exception rolls it back and nothing is committed.
After-hooks run once the row is committed; their exceptions reach the caller
but the committed row stays.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from crmgen.core.errors import HookError, NotFoundError, ServiceError

log = logging.getLogger(__name__)

EVENTS = (
    "before_find",
    "before_create",
    "after_create",
    "before_update",
    "after_update",
    "before_delete",
    "after_delete",
)

FETCH_ALL = ("all", "-1")


@dataclass
class HookContext:
    """What a hook sees: the session, the row being acted on, and the incoming data."""
    db: Session
    item: Any = None
    data: Dict[str, Any] = field(default_factory=dict)
    user_id: Optional[str] = None
    previous: Dict[str, Any] = field(default_factory=dict)  # column values before an update


Hook = Callable[[HookContext], None]


class LifecycleHooks:
    def __init__(self):
        self._hooks: Dict[str, List[Tuple[str, Hook]]] = {event: [] for event in EVENTS}

    def register(self, event: str, name: str, hook: Hook) -> None:
        if event not in self._hooks:
            raise ValueError(f"Unknown lifecycle event '{event}'")
        if name in self.names(event):
            raise ValueError(f"Hook '{name}' is already registered for {event}")
        self._hooks[event].append((name, hook))

    def on(self, event: str, name: Optional[str] = None):
        """Decorator form of ``register``; the hook name defaults to the function name."""
        def decorator(fn: Hook) -> Hook:
            self.register(event, name or fn.__name__, fn)
            return fn
        return decorator

    def names(self, event: str) -> List[str]:
        return [name for name, _ in self._hooks[event]]

    def run(self, event: str, ctx: HookContext) -> None:
        for name, hook in self._hooks[event]:
            log.debug("Running hook %s.%s", event, name)
            hook(ctx)


def parse_limit(limit: Any) -> Optional[int]:
    """``None`` means fetch everything."""
    if limit is None:
        return 10
    if str(limit) in FETCH_ALL:
        return None
    try:
        size = int(limit)
    except (TypeError, ValueError):
        raise ServiceError("limit must be a number, 'all' or -1")
    if size < 1:
        raise ServiceError("limit must be at least 1")
    return size


def page_meta(items: List[Any], total: int, page: int, size: Optional[int]) -> Dict[str, Any]:
    if size is None:
        return {
            "items": items,
            "total": total,
            "currentPage": 1,
            "totalPages": 1,
            "hasMore": False,
            "fetchedAll": True,
        }
    total_pages = math.ceil(total / size) if total else 0
    return {
        "items": items,
        "total": total,
        "currentPage": page,
        "totalPages": total_pages,
        "hasMore": page < total_pages,
        "fetchedAll": False,
    }


class CrudService:
    """Data access for one model, with lifecycle hooks around every write."""

    def __init__(
        self,
        model,
        label: str,
        hooks: Optional[LifecycleHooks] = None,
        filter_fields: Sequence[str] = (),
        hidden_fields: Sequence[str] = (),
        order_by: Optional[Sequence[Any]] = None,
    ):
        self.model = model
        self.label = label
        self.hooks = hooks or LifecycleHooks()
        self.filter_fields = tuple(filter_fields)
        self.hidden_fields = set(hidden_fields)
        self.order_by = order_by

    def serialize(self, item) -> Dict[str, Any]:
        return {
            column.name: getattr(item, column.name)
            for column in self.model.__table__.columns
            if column.name not in self.hidden_fields
        }

    def list(self, db: Session, page: int = 1, limit: Any = "10", filters: Optional[Dict[str, Any]] = None):
        size = parse_limit(limit)
        page = max(int(page or 1), 1)
        ctx = HookContext(db=db, data={k: v for k, v in (filters or {}).items() if v is not None})
        self.hooks.run("before_find", ctx)

        conditions = [
            getattr(self.model, name) == value
            for name, value in ctx.data.items()
            if name in self.filter_fields
        ]
        query = select(self.model).where(*conditions)
        order_by = self.order_by if self.order_by is not None else [self.model.created_at.desc()]
        query = query.order_by(*order_by)
        total = db.scalar(select(func.count()).select_from(self.model).where(*conditions)) or 0
        if size is not None:
            query = query.limit(size).offset((page - 1) * size)

        items = [self.serialize(row) for row in db.scalars(query)]
        return page_meta(items, total, page, size)

    def get(self, db: Session, id: str):
        item = db.get(self.model, id)
        if item is None:
            raise NotFoundError(f"{self.label} not found")
        return item

    def create(self, db: Session, data: Dict[str, Any], user_id: Optional[str] = None):
        item = self.model(**data)
        item.created_by = user_id
        ctx = HookContext(db=db, item=item, data=data, user_id=user_id)
        try:
            self.hooks.run("before_create", ctx)
            db.add(item)
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(item)
        log.info("%s created", self.label, extra={"model": self.label, "record_id": item.id})
        self.hooks.run("after_create", ctx)
        return item

    def update(self, db: Session, id: str, data: Dict[str, Any], user_id: Optional[str] = None):
        item = self.get(db, id)
        previous = {column.name: getattr(item, column.name) for column in self.model.__table__.columns}
        ctx = HookContext(db=db, item=item, data=data, user_id=user_id, previous=previous)
        try:
            self.hooks.run("before_update", ctx)
            for key, value in ctx.data.items():
                setattr(item, key, value)
            item.updated_by = user_id
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(item)
        log.info("%s updated", self.label, extra={"model": self.label, "record_id": item.id})
        self.hooks.run("after_update", ctx)
        return item

    def delete(self, db: Session, id: str, user_id: Optional[str] = None):
        item = self.get(db, id)
        ctx = HookContext(db=db, item=item, user_id=user_id, previous=self.serialize(item))
        try:
            self.hooks.run("before_delete", ctx)
            db.delete(item)
            db.commit()
        except Exception:
            db.rollback()
            raise
        log.info("%s deleted", self.label, extra={"model": self.label, "record_id": id})
        self.hooks.run("after_delete", ctx)
        return ctx.previous


def unique_together(model, fields: Sequence[str], message: str) -> Hook:
    """Build a before-create/update hook rejecting a second row with the same values for ``fields``."""
    def hook(ctx: HookContext) -> None:
        values = {name: ctx.data.get(name, ctx.previous.get(name)) for name in fields}
        if any(value is None for value in values.values()):
            return
        query = select(model.id).where(*[getattr(model, name) == value for name, value in values.items()])
        if ctx.item is not None and ctx.item.id is not None:
            query = query.where(model.id != ctx.item.id)
        if ctx.db.scalar(query.limit(1)) is not None:
            raise HookError(message)
    hook.__name__ = "unique_" + "_".join(fields)
    return hook
