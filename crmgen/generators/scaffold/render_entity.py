"""Per-model rendering functions: model, validation schemas, controller and route table."""
from typing import Any, Dict, List, Optional, Set

from crmgen.generators.scaffold.types import FieldType, RelationType
from crmgen.generators.scaffold.utils import (
    model_slug,
    pluralize,
    route_prefix,
    table_name,
    to_pascal_case,
)
from crmgen.schemas.generator import FieldSpec, GeneratorRequirements, ModelSpec, RelationSpec

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

SQLALCHEMY_TYPES = {
    FieldType.STRING: "String(255)",
    FieldType.TEXT: "Text",
    FieldType.INTEGER: "Integer",
    FieldType.FLOAT: "Float",
    FieldType.BOOLEAN: "Boolean",
    FieldType.DATE: "DateTime",
    FieldType.JSON: "JSON",
    FieldType.UUID: "Uuid",
}

PYTHON_TYPES = {
    FieldType.STRING: "str",
    FieldType.TEXT: "str",
    FieldType.INTEGER: "int",
    FieldType.FLOAT: "float",
    FieldType.BOOLEAN: "bool",
    FieldType.DATE: "datetime",
    FieldType.JSON: "Any",
    FieldType.ENUM: "str",
    FieldType.UUID: "UUID",
}


def _import_line(module: str, names: Set[str]) -> str:
    return f"from {module} import {', '.join(sorted(names))}"


def _default_expr(field: FieldSpec) -> str:
    """Python expression for a field's column default. Strings always go through repr()."""
    value = field.default_value
    if field.type == FieldType.DATE:
        return f"datetime.fromisoformat({value!r})"
    if field.type == FieldType.UUID:
        return f"UUID({value!r})"
    if field.type == FieldType.JSON and isinstance(value, (dict, list)):
        return f"lambda: {value!r}"
    return repr(value)


def _column_type(field: FieldSpec, slug: str) -> str:
    if field.type == FieldType.ENUM:
        values = ", ".join(repr(v) for v in field.enum_values)
        return f"Enum({values}, name={slug + '_' + field.name!r})"
    return SQLALCHEMY_TYPES[field.type]


def _validation_type(field: FieldSpec) -> str:
    if field.type == FieldType.ENUM:
        return "Literal[" + ", ".join(repr(v) for v in field.enum_values) + "]"
    return PYTHON_TYPES[field.type]


def _constraint_kwargs(field: FieldSpec) -> List[str]:
    """Translate a field's validation map into pydantic Field() keyword arguments."""
    rules = field.validation
    kwargs = []
    if "min" in rules:
        kwargs.append(f"ge={rules['min']!r}")
    if "max" in rules:
        kwargs.append(f"le={rules['max']!r}")

    min_length = rules.get("minLength")
    max_length = rules.get("maxLength")
    if "len" in rules:
        min_length, max_length = rules["len"]
    if rules.get("notEmpty") and not min_length:
        min_length = 1
    if min_length:
        kwargs.append(f"min_length={min_length!r}")
    if max_length is not None:
        kwargs.append(f"max_length={max_length!r}")

    pattern = rules.get("pattern") or rules.get("is")
    if pattern is None and rules.get("isEmail"):
        pattern = EMAIL_PATTERN
    if pattern is not None:
        kwargs.append(f"pattern={pattern!r}")
    return kwargs


def _schema_line(field: FieldSpec, required: bool) -> str:
    base_type = _validation_type(field)
    kwargs = _constraint_kwargs(field)
    if required:
        if kwargs:
            return f"    {field.name}: {base_type} = Field(..., {', '.join(kwargs)})"
        return f"    {field.name}: {base_type}"
    if kwargs:
        return f"    {field.name}: Optional[{base_type}] = Field(None, {', '.join(kwargs)})"
    return f"    {field.name}: Optional[{base_type}] = None"


def _relation_attribute(relation: RelationSpec) -> str:
    if relation.as_:
        return relation.as_
    target_slug = model_slug(relation.model)
    if relation.type in (RelationType.HAS_MANY, RelationType.BELONGS_TO_MANY):
        return pluralize(target_slug)
    return target_slug


def render_model(spec: ModelSpec, requirements: Optional[GeneratorRequirements] = None) -> str:
    """Generate the SQLAlchemy model for a spec."""
    class_name = to_pascal_case(spec.model_name)
    slug = model_slug(spec.model_name)
    relations = requirements.relations if requirements else []

    sqlalchemy_names: Set[str] = set()
    typing_names: Set[str] = {"Optional"}
    orm_names: Set[str] = {"Mapped", "mapped_column"}
    needs_datetime = False
    needs_uuid = False

    body: List[str] = []
    for field in spec.fields:
        column_type = _column_type(field, slug)
        sqlalchemy_names.add(column_type.split("(")[0])
        py_type = PYTHON_TYPES[field.type]
        if field.type == FieldType.JSON:
            typing_names.add("Any")
        if field.type == FieldType.DATE:
            needs_datetime = True
        if field.type == FieldType.UUID:
            needs_uuid = True

        annotation = py_type if field.required else f"Optional[{py_type}]"
        args = [column_type, f"nullable={not field.required}"]
        if field.unique:
            args.append("unique=True")
        if field.default_value is not None:
            args.append(f"default={_default_expr(field)}")
        body.append(f"    {field.name}: Mapped[{annotation}] = mapped_column({', '.join(args)})")

    association_names: Set[str] = set()
    association_tables: List[str] = []
    for relation in relations:
        target = to_pascal_case(relation.model)
        target_table = table_name(relation.model)
        attribute = _relation_attribute(relation)
        orm_names.add("relationship")
        if relation.type == RelationType.BELONGS_TO:
            fk = relation.foreign_key or f"{model_slug(relation.model)}_id"
            sqlalchemy_names.update({"ForeignKey", "String"})
            body.append(
                f"    {fk}: Mapped[Optional[str]] = mapped_column("
                f"String(36), ForeignKey({target_table + '.id'!r}), nullable=True)"
            )
            body.append(
                f"    {attribute}: Mapped[Optional[{target!r}]] = relationship({target!r}, foreign_keys=[{fk}])"
            )
        elif relation.type in (RelationType.HAS_ONE, RelationType.HAS_MANY):
            fk = relation.foreign_key or f"{slug}_id"
            join = f"{class_name}.id == foreign({target}.{fk})"
            if relation.type == RelationType.HAS_ONE:
                annotation = f"Optional[{target!r}]"
                extra = ", uselist=False"
            else:
                typing_names.add("List")
                annotation = f"List[{target!r}]"
                extra = ""
            body.append(
                f"    {attribute}: Mapped[{annotation}] = relationship("
                f"{target!r}, primaryjoin={join!r}, viewonly=True{extra})"
            )
        else:
            typing_names.add("List")
            sqlalchemy_names.update({"Column", "ForeignKey", "Table"})
            (left_slug, left), (right_slug, right) = sorted([
                (slug, table_name(spec.model_name)),
                (model_slug(relation.model), target_table),
            ])
            assoc = f"{left_slug}_{right}"
            assoc_var = f"{assoc}_table"
            if assoc_var not in association_names:
                association_names.add(assoc_var)
                association_tables.extend([
                    f"{assoc_var} = Table(",
                    f"    {assoc!r},",
                    "    CrudModel.metadata,",
                    f"    Column({left_slug + '_id'!r}, ForeignKey({left + '.id'!r}), primary_key=True),",
                    f"    Column({right_slug + '_id'!r}, ForeignKey({right + '.id'!r}), primary_key=True),",
                    "    extend_existing=True,",
                    ")",
                    "",
                    "",
                ])
            body.append(
                f"    {attribute}: Mapped[List[{target!r}]] = relationship({target!r}, secondary={assoc_var})"
            )

    lines = [f'"""{class_name} model."""']
    if needs_datetime:
        lines.append("from datetime import datetime")
    lines.append(_import_line("typing", typing_names))
    if needs_uuid:
        lines.append("from uuid import UUID")
    lines.append("")
    if sqlalchemy_names:
        lines.append(_import_line("sqlalchemy", sqlalchemy_names))
    lines.append(_import_line("sqlalchemy.orm", orm_names))
    lines.append("")
    lines.append("from models.base import CrudModel")
    lines.append("")
    lines.append("")
    lines.extend(association_tables)
    lines.append(f"class {class_name}(CrudModel):")
    lines.append(f"    __tablename__ = {table_name(spec.model_name)!r}")
    lines.append("")
    lines.extend(body)
    lines.append("")
    return "\n".join(lines)


def render_validation(spec: ModelSpec) -> str:
    """Generate the pydantic request/response schemas that validate input for a model."""
    class_name = to_pascal_case(spec.model_name)

    typing_names = {"Optional"}
    needs_datetime = True  # Out schema always carries timestamps
    needs_uuid = False
    needs_field = False
    for field in spec.fields:
        if field.type == FieldType.ENUM:
            typing_names.add("Literal")
        if field.type == FieldType.JSON:
            typing_names.add("Any")
        if field.type == FieldType.UUID:
            needs_uuid = True
        if _constraint_kwargs(field):
            needs_field = True

    required_names = [field.name for field in spec.fields if field.required]

    pydantic_names = {"BaseModel", "ConfigDict"}
    if needs_field:
        pydantic_names.add("Field")
    if required_names:
        pydantic_names.add("field_validator")

    lines = [f'"""Request validation for {class_name}. Unknown keys are rejected."""']
    if needs_datetime:
        lines.append("from datetime import datetime")
    lines.append(_import_line("typing", typing_names))
    if needs_uuid:
        lines.append("from uuid import UUID")
    lines.append("")
    lines.append(_import_line("pydantic", pydantic_names))
    lines.append("")
    lines.append("")

    lines.append(f"class {class_name}Create(BaseModel):")
    lines.append('    model_config = ConfigDict(extra="forbid")')
    lines.append("")
    for field in spec.fields:
        lines.append(_schema_line(field, field.required))
    lines.append("")
    lines.append("")

    lines.append(f"class {class_name}Update(BaseModel):")
    lines.append('    model_config = ConfigDict(extra="forbid")')
    lines.append("")
    for field in spec.fields:
        lines.append(_schema_line(field, False))
    if required_names:
        # omitted is fine, explicit null is not
        lines.append("")
        lines.append(f"    @field_validator({', '.join(repr(n) for n in required_names)})")
        lines.append("    @classmethod")
        lines.append("    def _not_null(cls, value):")
        lines.append("        if value is None:")
        lines.append('            raise ValueError("cannot be null")')
        lines.append("        return value")
    lines.append("")
    lines.append("")

    lines.append(f"class {class_name}Out(BaseModel):")
    lines.append("    model_config = ConfigDict(from_attributes=True)")
    lines.append("")
    lines.append("    id: str")
    for field in spec.fields:
        lines.append(f"    {field.name}: Optional[{_validation_type(field)}] = None")
    lines.append("    created_by: Optional[str] = None")
    lines.append("    updated_by: Optional[str] = None")
    lines.append("    created_at: Optional[datetime] = None")
    lines.append("    updated_at: Optional[datetime] = None")
    lines.append("")
    return "\n".join(lines)


def render_controller(spec: ModelSpec) -> str:
    """Generate the five CRUD handlers for a model, each wrapped in the response envelope."""
    class_name = to_pascal_case(spec.model_name)
    slug = model_slug(spec.model_name)
    plural = pluralize(slug)
    label = class_name

    return f'''"""CRUD handlers for {class_name}. Each handler wraps one data-access call in the response envelope."""
import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from middlewares.{slug}_validation import {class_name}Create, {class_name}Out, {class_name}Update
from models.{slug}_model import {class_name}
from utils.pagination import paginate
from utils.response_handler import created, error, not_found, success

log = logging.getLogger(__name__)


def _serialize(item: {class_name}) -> dict:
    return {class_name}Out.model_validate(item).model_dump(mode="json")


def list_{plural}(db: Session, page: int = 1, limit: str = "10"):
    try:
        fetch_all = limit in ("all", "-1")
        query = select({class_name}).order_by({class_name}.created_at.desc())
        total = db.scalar(select(func.count()).select_from({class_name})) or 0
        if not fetch_all:
            size = max(int(limit), 1)
            query = query.limit(size).offset((page - 1) * size)
        items = [_serialize(row) for row in db.scalars(query)]
        return success("{label}s fetched successfully", paginate(items, total, page, limit))
    except ValueError:
        return error("limit must be a number, 'all' or -1")
    except Exception as e:
        log.exception("Failed to list {plural}")
        return error(str(e), 500)


def get_{slug}(db: Session, id: str):
    try:
        item = db.get({class_name}, id)
        if item is None:
            return not_found("{label} not found")
        return success("{label} fetched successfully", _serialize(item))
    except Exception as e:
        log.exception("Failed to fetch {slug}")
        return error(str(e), 500)


def create_{slug}(db: Session, data: {class_name}Create, user_id: Optional[str] = None):
    try:
        item = {class_name}(**data.model_dump(exclude_unset=True), created_by=user_id)
        db.add(item)
        db.commit()
        db.refresh(item)
        return created("{label} created successfully", _serialize(item))
    except IntegrityError as e:
        db.rollback()
        return error(f"{label} violates a unique or reference constraint: {{e.orig}}", 409)
    except Exception as e:
        db.rollback()
        log.exception("Failed to create {slug}")
        return error(str(e), 500)


def update_{slug}(db: Session, id: str, data: {class_name}Update, user_id: Optional[str] = None):
    try:
        item = db.get({class_name}, id)
        if item is None:
            return not_found("{label} not found")
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(item, key, value)
        item.updated_by = user_id
        db.commit()
        db.refresh(item)
        return success("{label} updated successfully", _serialize(item))
    except IntegrityError as e:
        db.rollback()
        return error(f"{label} violates a unique or reference constraint: {{e.orig}}", 409)
    except Exception as e:
        db.rollback()
        log.exception("Failed to update {slug}")
        return error(str(e), 500)


def delete_{slug}(db: Session, id: str):
    try:
        item = db.get({class_name}, id)
        if item is None:
            return not_found("{label} not found")
        payload = _serialize(item)
        db.delete(item)
        db.commit()
        return success("{label} deleted successfully", payload)
    except Exception as e:
        db.rollback()
        log.exception("Failed to delete {slug}")
        return error(str(e), 500)
'''


def render_routes(spec: ModelSpec, requirements: Optional[GeneratorRequirements] = None) -> str:
    """Generate the APIRouter binding a model's handlers, guarded by the auth dependency."""
    requirements = requirements or GeneratorRequirements()
    class_name = to_pascal_case(spec.model_name)
    slug = model_slug(spec.model_name)
    plural = pluralize(slug)

    def guard(route: str) -> str:
        if requirements.authentication and route not in requirements.open_routes:
            return "authenticate_user"
        return "optional_user"

    auth_names = {guard(r) for r in ("list", "get", "create", "update", "delete")}

    lines = [
        f'"""Route table for {class_name}."""',
        "from typing import Optional",
        "",
        "from fastapi import APIRouter, Depends, Query",
        "from sqlalchemy.orm import Session",
        "",
        "from config.db import get_db as db_session",
        f"from controllers import {slug}_controller",
        _import_line("middlewares.auth", auth_names),
        f"from middlewares.{slug}_validation import {class_name}Create, {class_name}Update",
        "",
        f"router = APIRouter(prefix={route_prefix(spec.model_name)!r}, tags=[{class_name!r}])",
        "",
        "",
        '@router.get("")',
        f"def list_{plural}(",
        "    page: int = Query(1, ge=1),",
        '    limit: str = Query("10"),',
        "    db: Session = Depends(db_session),",
        f"    user: Optional[dict] = Depends({guard('list')}),",
        "):",
        f"    return {slug}_controller.list_{plural}(db, page=page, limit=limit)",
        "",
        "",
        '@router.get("/{id}")',
        f"def get_{slug}(id: str, db: Session = Depends(db_session), user: Optional[dict] = Depends({guard('get')})):",
        f"    return {slug}_controller.get_{slug}(db, id)",
        "",
        "",
        '@router.post("", status_code=201)',
        f"def create_{slug}(",
        f"    data: {class_name}Create,",
        "    db: Session = Depends(db_session),",
        f"    user: Optional[dict] = Depends({guard('create')}),",
        "):",
        f'    return {slug}_controller.create_{slug}(db, data, user_id=user.get("id") if user else None)',
        "",
        "",
        '@router.put("/{id}")',
        f"def update_{slug}(",
        "    id: str,",
        f"    data: {class_name}Update,",
        "    db: Session = Depends(db_session),",
        f"    user: Optional[dict] = Depends({guard('update')}),",
        "):",
        f'    return {slug}_controller.update_{slug}(db, id, data, user_id=user.get("id") if user else None)',
        "",
        "",
        '@router.delete("/{id}")',
        f"def delete_{slug}(id: str, db: Session = Depends(db_session), user: Optional[dict] = Depends({guard('delete')})):",
        f"    return {slug}_controller.delete_{slug}(db, id)",
        "",
    ]
    return "\n".join(lines)


def render_index_entries(spec: ModelSpec) -> Dict[str, Dict[str, Any]]:
    """Import and registration lines that register a model in the shared index files."""
    class_name = to_pascal_case(spec.model_name)
    slug = model_slug(spec.model_name)
    return {
        "models/__init__.py": {
            "import_line": f"from models.{slug}_model import {class_name}",
            "registration_line": None,
        },
        "routes/__init__.py": {
            "import_line": f"from routes.{slug}_routes import router as {slug}_router",
            "registration_line": f"{slug!r}: {slug}_router,",
        },
    }
