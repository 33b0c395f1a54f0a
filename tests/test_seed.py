"""Tests for default data seeding."""
from sqlalchemy import func, select

from crmgen.core.config import settings
from crmgen.core.security import verify_password
from crmgen.db.models import Filter, Pipeline, Role, Stage, User
from crmgen.db.seed import DEFAULT_FILTERS, DEFAULT_PIPELINES, seed_defaults


def _count(db, model) -> int:
    return db.scalar(select(func.count()).select_from(model))


def test_seed_creates_defaults(db, monkeypatch):
    monkeypatch.setattr(settings, "admin_password", None)
    seed_defaults(db)

    assert _count(db, Role) == 1
    assert _count(db, User) == 0, "no admin user without a configured password"
    assert _count(db, Filter) == sum(len(names) for names in DEFAULT_FILTERS.values())
    assert _count(db, Pipeline) == len(DEFAULT_PIPELINES)

    sales = db.scalar(select(Pipeline).where(Pipeline.name == "Sales"))
    lead_stages = list(db.scalars(
        select(Stage).where(Stage.pipeline == sales.id, Stage.type == "lead").order_by(Stage.order)
    ))
    assert [s.name for s in lead_stages] == DEFAULT_PIPELINES["Sales"]["lead"]
    assert [s.order for s in lead_stages] == [0, 1, 2, 3]
    assert [s.is_default for s in lead_stages] == [True, False, False, False]


def test_seed_is_idempotent(db, monkeypatch):
    monkeypatch.setattr(settings, "admin_password", "changeme")
    seed_defaults(db)
    counts = [_count(db, m) for m in (Role, User, Filter, Pipeline, Stage)]

    seed_defaults(db)
    assert [_count(db, m) for m in (Role, User, Filter, Pipeline, Stage)] == counts


def test_seed_admin_user(db, monkeypatch):
    monkeypatch.setattr(settings, "admin_password", "changeme")
    seed_defaults(db)

    admin = db.scalar(select(User).where(User.username == settings.admin_username))
    assert admin is not None
    assert verify_password("changeme", admin.password)
    role = db.get(Role, admin.role_id)
    assert role.role_name == "Admin"
