"""Idempotent default data: admin role and user, filter lists, sample pipelines."""
import logging
from typing import Dict, List

from sqlalchemy import select
from sqlalchemy.orm import Session

from crmgen.core.config import settings
from crmgen.core.security import hash_password
from crmgen.db.models import Filter, Pipeline, Role, Stage, User

log = logging.getLogger(__name__)

SYSTEM = "SYSTEM"
ADMIN_ROLE = "Admin"

DEFAULT_FILTERS: Dict[str, List[str]] = {
    "category": ["Product", "Service", "Consulting", "Training", "Support"],
    "source": [
        "Website", "Referral", "Social Media", "Email Campaign",
        "Trade Show", "Cold Call", "Partner", "Advertisement",
    ],
    "tag": ["High Priority", "Low Priority", "Follow Up", "VIP", "New Client"],
    "label": ["Hot Lead", "Warm Lead", "Cold Lead", "Qualified", "Not Qualified"],
    "status": ["Active", "Inactive", "Pending", "On Hold", "Completed"],
}

# stage names per type, in display order
DEFAULT_PIPELINES: Dict[str, Dict[str, List[str]]] = {
    "Sales": {
        "lead": ["Lead Qualification", "Initial Contact", "Need Analysis", "Lead Nurturing"],
        "proposal": ["Proposal Draft", "Proposal Review", "Proposal Sent", "Negotiation"],
    },
    "Marketing": {
        "lead": ["Lead Generation", "Lead Scoring", "Campaign Planning", "Lead Nurturing"],
        "proposal": ["Campaign Proposal", "Budget Review", "Strategy Development", "Campaign Launch"],
    },
}


def _seed_admin(db: Session) -> None:
    role = db.scalar(select(Role).where(Role.role_name == ADMIN_ROLE))
    if role is None:
        role = Role(role_name=ADMIN_ROLE, permissions={"all": True}, created_by=SYSTEM)
        db.add(role)
        db.flush()
        log.info("Created admin role")

    if not settings.admin_password:
        log.info("No admin password configured, skipping admin user")
        return
    if db.scalar(select(User).where(User.username == settings.admin_username)) is not None:
        return
    db.add(User(
        username=settings.admin_username,
        password=hash_password(settings.admin_password),
        email=settings.admin_email,
        phone=settings.admin_phone,
        role_id=role.id,
        first_name="Admin",
        created_by=SYSTEM,
    ))
    log.info("Created admin user %s", settings.admin_username)


def _seed_filters(db: Session) -> int:
    created = 0
    for filter_type, names in DEFAULT_FILTERS.items():
        for name in names:
            exists = db.scalar(select(Filter).where(Filter.name == name, Filter.type == filter_type))
            if exists is None:
                db.add(Filter(name=name, type=filter_type, created_by=SYSTEM))
                created += 1
    return created


def _seed_pipelines(db: Session) -> int:
    created = 0
    for pipeline_name, groups in DEFAULT_PIPELINES.items():
        pipeline = db.scalar(select(Pipeline).where(Pipeline.name == pipeline_name))
        if pipeline is None:
            pipeline = Pipeline(name=pipeline_name, created_by=SYSTEM)
            db.add(pipeline)
            db.flush()
        for stage_type, names in groups.items():
            for order, name in enumerate(names):
                exists = db.scalar(select(Stage).where(
                    Stage.name == name, Stage.pipeline == pipeline.id, Stage.type == stage_type
                ))
                if exists is not None:
                    continue
                db.add(Stage(
                    name=name,
                    pipeline=pipeline.id,
                    type=stage_type,
                    order=order,
                    is_default=order == 0,
                    created_by=SYSTEM,
                ))
                created += 1
    return created


def seed_defaults(db: Session) -> None:
    """Insert default records that are not already present. Safe to run repeatedly."""
    try:
        _seed_admin(db)
        filters = _seed_filters(db)
        stages = _seed_pipelines(db)
        db.commit()
    except Exception:
        db.rollback()
        log.error("Seeding default data failed", exc_info=True)
        raise
    log.info("Default data seeded", extra={"filters": filters, "stages": stages})
