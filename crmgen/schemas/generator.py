"""Request models for the scaffold generator: field specs, model specs and generation requirements."""
import keyword
import re
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from crmgen.generators.scaffold.errors import SpecValidationError
from crmgen.generators.scaffold.types import CRUD_ROUTES, FieldType, RelationType

IDENTIFIER_PATTERN = r"^[A-Za-z][A-Za-z0-9_]*$"

# Base-model columns plus attributes SQLAlchemy declarative classes reserve
RESERVED_FIELD_NAMES = {"id", "created_by", "updated_by", "created_at", "updated_at", "metadata", "registry"}

# Names the generated modules import; a field with one of these names would shadow it in the class body
GENERATED_MODULE_NAMES = {
    "Any", "List", "Literal", "Optional", "UUID", "datetime",
    "str", "int", "float", "bool", "dict", "classmethod",
    "BaseModel", "ConfigDict", "Field", "field_validator",
    "Mapped", "mapped_column", "relationship", "foreign", "CrudModel",
    "Boolean", "Column", "DateTime", "Enum", "Float", "ForeignKey", "Integer", "JSON", "String", "Table", "Text", "Uuid",
}

NUMERIC_RULES = {"min", "max"}
STRING_RULES = {"minLength", "maxLength", "len", "pattern", "is", "isEmail", "notEmpty"}

STRING_TYPES = {FieldType.STRING, FieldType.TEXT}
NUMERIC_TYPES = {FieldType.INTEGER, FieldType.FLOAT}

ROUTE_ALIASES = {
    "findAll": "list",
    "getById": "get",
    "findOne": "get",
    "post": "create",
    "put": "update",
}


def _check_default(field_type: FieldType, value: Any, enum_values: Optional[List[str]]) -> Optional[str]:
    """Return an error message if ``value`` does not match ``field_type``."""
    if field_type in STRING_TYPES:
        ok = isinstance(value, str)
    elif field_type == FieldType.DATE:
        try:
            datetime.fromisoformat(value)
            ok = True
        except (TypeError, ValueError):
            return "defaultValue must be an ISO 8601 date"
    elif field_type == FieldType.UUID:
        try:
            uuid.UUID(value)
            ok = True
        except (AttributeError, TypeError, ValueError):
            return "defaultValue must be a UUID string"
    elif field_type == FieldType.ENUM:
        if not isinstance(value, str) or value not in (enum_values or []):
            return "defaultValue must be one of enumValues"
        ok = True
    elif field_type == FieldType.INTEGER:
        ok = isinstance(value, int) and not isinstance(value, bool)
    elif field_type == FieldType.FLOAT:
        ok = isinstance(value, (int, float)) and not isinstance(value, bool)
    elif field_type == FieldType.BOOLEAN:
        ok = isinstance(value, bool)
    else:
        ok = True
    if not ok:
        return f"defaultValue does not match type {field_type.value}"
    return None


def _check_rule(field_type: FieldType, rule: str, value: Any) -> Optional[str]:
    if rule in NUMERIC_RULES:
        if field_type not in NUMERIC_TYPES:
            return f"rule '{rule}' only applies to INTEGER and FLOAT fields"
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            return f"rule '{rule}' needs a number"
        return None
    if rule in STRING_RULES:
        if field_type not in STRING_TYPES:
            return f"rule '{rule}' only applies to STRING and TEXT fields"
        if rule in ("minLength", "maxLength"):
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                return f"rule '{rule}' needs a non-negative integer"
        elif rule == "len":
            if (not isinstance(value, list) or len(value) != 2
                    or not all(isinstance(v, int) and not isinstance(v, bool) for v in value)
                    or value[0] > value[1]):
                return "rule 'len' needs [min, max]"
        elif rule in ("pattern", "is"):
            if not isinstance(value, str):
                return f"rule '{rule}' needs a regular expression string"
            try:
                re.compile(value)
            except re.error as e:
                return f"rule '{rule}' is not a valid regular expression: {e}"
        elif not isinstance(value, bool):
            return f"rule '{rule}' needs true or false"
        return None
    return f"unknown validation rule '{rule}'"


class FieldSpec(BaseModel):
    """One field of a ModelSpec."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = Field(..., pattern=IDENTIFIER_PATTERN, examples=["title"])
    type: FieldType
    required: bool = False
    allow_null: Optional[bool] = Field(None, alias="allowNull")
    unique: bool = False
    default_value: Any = Field(None, alias="defaultValue")
    enum_values: Optional[List[str]] = Field(
        None, alias="enumValues", validation_alias=AliasChoices("enumValues", "enum_values", "values")
    )
    validation: Dict[str, Any] = Field(
        default_factory=dict, validation_alias=AliasChoices("validation", "validate")
    )

    @field_validator("type", mode="before")
    @classmethod
    def _upper_type(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("name")
    @classmethod
    def _usable_name(cls, v: str) -> str:
        if keyword.iskeyword(v):
            raise ValueError(f"'{v}' is a reserved word")
        if v in RESERVED_FIELD_NAMES:
            raise ValueError(f"'{v}' is managed by the base model")
        if v.startswith("model_"):
            raise ValueError("names starting with 'model_' are reserved by pydantic")
        if v in GENERATED_MODULE_NAMES:
            raise ValueError(f"'{v}' clashes with a name used by the generated code")
        return v

    @model_validator(mode="after")
    def _check_consistency(self) -> "FieldSpec":
        if self.allow_null is not None and "required" not in self.model_fields_set:
            self.required = not self.allow_null

        if self.type == FieldType.ENUM:
            if not self.enum_values:
                raise ValueError("ENUM fields need at least one enum value")
            if len(set(self.enum_values)) != len(self.enum_values):
                raise ValueError("enumValues must not repeat")
        elif self.enum_values is not None:
            raise ValueError("enumValues is only allowed for ENUM fields")

        if self.default_value is not None:
            message = _check_default(self.type, self.default_value, self.enum_values)
            if message:
                raise ValueError(message)

        for rule, value in self.validation.items():
            message = _check_rule(self.type, rule, value)
            if message:
                raise ValueError(message)
        if self.validation.get("isEmail") and ("pattern" in self.validation or "is" in self.validation):
            raise ValueError("isEmail cannot be combined with pattern")
        return self


class ModelSpec(BaseModel):
    """A model name plus its ordered field list: the generator's sole input."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore", protected_namespaces=())

    model_name: str = Field(
        ...,
        alias="modelName",
        validation_alias=AliasChoices("modelName", "model_name", "module_name"),
        pattern=r"^[A-Za-z][A-Za-z0-9_]*$",
        examples=["task"],
    )
    fields: List[FieldSpec] = Field(..., min_length=1)

    @field_validator("model_name")
    @classmethod
    def _not_keyword(cls, v: str) -> str:
        if keyword.iskeyword(v):
            raise ValueError(f"'{v}' is a reserved word")
        return v

    @model_validator(mode="after")
    def _unique_field_names(self) -> "ModelSpec":
        seen = set()
        for f in self.fields:
            if f.name in seen:
                raise ValueError(f"duplicate field name '{f.name}'")
            seen.add(f.name)
        return self


class RelationSpec(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    model: str = Field(..., pattern=r"^[A-Za-z][A-Za-z0-9_]*$")
    type: RelationType
    foreign_key: Optional[str] = Field(None, alias="foreignKey", pattern=IDENTIFIER_PATTERN)
    as_: Optional[str] = Field(None, alias="as", pattern=IDENTIFIER_PATTERN)


class GeneratorRequirements(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    authentication: bool = True
    open_routes: List[str] = Field(default_factory=list, alias="openRoutes")
    relations: List[RelationSpec] = Field(default_factory=list)

    @field_validator("open_routes")
    @classmethod
    def _known_routes(cls, v: List[str]) -> List[str]:
        routes: List[str] = []
        for name in v:
            canonical = ROUTE_ALIASES.get(name, name)
            if canonical not in CRUD_ROUTES:
                raise ValueError(f"unknown route '{name}', expected one of {', '.join(CRUD_ROUTES)}")
            if canonical not in routes:
                routes.append(canonical)
        return routes


class GenerateRequest(ModelSpec):
    """A ModelSpec plus the optional generation requirements."""
    requirements: GeneratorRequirements = Field(default_factory=GeneratorRequirements)


class ProjectRequest(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    models: List[ModelSpec] = Field(..., min_length=1)
    requirements: GeneratorRequirements = Field(default_factory=GeneratorRequirements)

    @model_validator(mode="after")
    def _unique_models(self) -> "ProjectRequest":
        names = [m.model_name.lower() for m in self.models]
        if len(set(names)) != len(names):
            raise ValueError("model names must be unique within a project")
        return self


def validation_errors(exc: ValidationError) -> List[Dict[str, str]]:
    """Flatten a pydantic ValidationError into ``[{field, message}]``."""
    errors = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        message = err.get("msg", "invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.append({"field": loc or "-", "message": message})
    return errors


def load_model_spec(data: Dict[str, Any]) -> ModelSpec:
    """Parse raw input into a ModelSpec, raising SpecValidationError with field-level messages."""
    try:
        return ModelSpec.model_validate(data)
    except ValidationError as e:
        raise SpecValidationError(validation_errors(e)) from e


def load_requirements(data: Optional[Dict[str, Any]]) -> GeneratorRequirements:
    try:
        return GeneratorRequirements.model_validate(data or {})
    except ValidationError as e:
        raise SpecValidationError(validation_errors(e)) from e
