from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy import String, DateTime, Integer, Boolean, JSON, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from crmgen.db.session import Base


class AuditMixin:
    """Columns every admin entity carries."""
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    created_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    updated_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )


class Role(AuditMixin, Base):
    __tablename__ = "roles"

    role_name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    permissions: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)


class User(AuditMixin, Base):
    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)
    role_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("roles.id"), nullable=True)
    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), unique=True, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    last_login: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)


class Pipeline(AuditMixin, Base):
    __tablename__ = "pipelines"

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)


class Stage(AuditMixin, Base):
    __tablename__ = "stages"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    pipeline: Mapped[str] = mapped_column(String(36), ForeignKey("pipelines.id"), nullable=False)
    type: Mapped[str] = mapped_column(String(50), default="lead", nullable=False)
    is_default: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)


class Filter(AuditMixin, Base):
    __tablename__ = "filters"
    __table_args__ = (UniqueConstraint("name", "type", name="uq_filters_name_type"),)

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)


class Contact(AuditMixin, Base):
    __tablename__ = "contacts"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    phone: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)


class Lead(AuditMixin, Base):
    __tablename__ = "leads"

    lead_title: Mapped[str] = mapped_column(String(255), nullable=False)
    lead_value: Mapped[int] = mapped_column(Integer, nullable=False)
    pipeline: Mapped[str] = mapped_column(String(36), ForeignKey("pipelines.id"), nullable=False)
    stage: Mapped[str] = mapped_column(String(36), ForeignKey("stages.id"), nullable=False)
    source: Mapped[str] = mapped_column(String(36), ForeignKey("filters.id"), nullable=False)
    category: Mapped[str] = mapped_column(String(36), ForeignKey("filters.id"), nullable=False)
    priority: Mapped[str] = mapped_column(String(10), default="medium", nullable=False)
    status: Mapped[str] = mapped_column(String(10), default="open", nullable=False)
    contact: Mapped[str | None] = mapped_column(String(36), ForeignKey("contacts.id"), nullable=True)
    is_converted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


class ApiGenerator(AuditMixin, Base):
    __tablename__ = "api_generators"

    module_name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    fields: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    requirements: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="pending", nullable=False)
    generated_files: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
