"""create crm tables

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def audit_columns():
    return [
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("created_by", sa.String(length=64), nullable=True),
        sa.Column("updated_by", sa.String(length=64), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade():
    op.create_table(
        "roles",
        *audit_columns(),
        sa.Column("role_name", sa.String(length=100), nullable=False, unique=True),
        sa.Column("permissions", sa.JSON(), nullable=False),
    )
    op.create_table(
        "users",
        *audit_columns(),
        sa.Column("username", sa.String(length=100), nullable=False, unique=True),
        sa.Column("password", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True, unique=True),
        sa.Column("role_id", sa.String(length=36), sa.ForeignKey("roles.id"), nullable=True),
        sa.Column("first_name", sa.String(length=100), nullable=True),
        sa.Column("last_name", sa.String(length=100), nullable=True),
        sa.Column("phone", sa.String(length=50), nullable=True, unique=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("last_login", sa.DateTime(), nullable=True),
    )
    op.create_table(
        "pipelines",
        *audit_columns(),
        sa.Column("name", sa.String(length=100), nullable=False, unique=True),
    )
    op.create_table(
        "stages",
        *audit_columns(),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("pipeline", sa.String(length=36), sa.ForeignKey("pipelines.id"), nullable=False),
        sa.Column("type", sa.String(length=50), nullable=False),
        sa.Column("is_default", sa.Boolean(), nullable=False),
        sa.Column("order", sa.Integer(), nullable=False),
    )
    op.create_table(
        "filters",
        *audit_columns(),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.UniqueConstraint("name", "type", name="uq_filters_name_type"),
    )
    op.create_table(
        "contacts",
        *audit_columns(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("phone", sa.String(length=50), nullable=False, unique=True),
    )
    op.create_table(
        "leads",
        *audit_columns(),
        sa.Column("lead_title", sa.String(length=255), nullable=False),
        sa.Column("lead_value", sa.Integer(), nullable=False),
        sa.Column("pipeline", sa.String(length=36), sa.ForeignKey("pipelines.id"), nullable=False),
        sa.Column("stage", sa.String(length=36), sa.ForeignKey("stages.id"), nullable=False),
        sa.Column("source", sa.String(length=36), sa.ForeignKey("filters.id"), nullable=False),
        sa.Column("category", sa.String(length=36), sa.ForeignKey("filters.id"), nullable=False),
        sa.Column("priority", sa.String(length=10), nullable=False),
        sa.Column("status", sa.String(length=10), nullable=False),
        sa.Column("contact", sa.String(length=36), sa.ForeignKey("contacts.id"), nullable=True),
        sa.Column("is_converted", sa.Boolean(), nullable=False),
    )
    op.create_table(
        "api_generators",
        *audit_columns(),
        sa.Column("module_name", sa.String(length=50), nullable=False, unique=True),
        sa.Column("fields", sa.JSON(), nullable=False),
        sa.Column("requirements", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("generated_files", sa.JSON(), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
    )


def downgrade():
    for table in ("api_generators", "leads", "contacts", "filters", "stages", "pipelines", "users", "roles"):
        op.drop_table(table)
