"""Helper for building minimal create payloads for smoke testing generated APIs."""
from typing import Any, Dict

from crmgen.generators.scaffold.types import FieldType
from crmgen.schemas.generator import FieldSpec, ModelSpec

SAMPLE_UUID = "00000000-0000-4000-8000-000000000000"


def _sample_number(field: FieldSpec, fallback):
    rules = field.validation
    value = rules.get("min", fallback)
    if "max" in rules and value > rules["max"]:
        value = rules["max"]
    return float(value) if field.type == FieldType.FLOAT else int(value)


def _sample_string(field: FieldSpec) -> str:
    rules = field.validation
    if rules.get("isEmail"):
        return "test@example.com"
    min_length = rules.get("minLength", 0)
    max_length = rules.get("maxLength")
    if "len" in rules:
        min_length, max_length = rules["len"]
    value = "test"
    if len(value) < min_length:
        value = value + "x" * (min_length - len(value))
    if max_length is not None and len(value) > max_length:
        value = value[:max_length]
    return value


def sample_value(field: FieldSpec) -> Any:
    """A value the generated validation schema accepts for ``field``."""
    if field.default_value is not None:
        return field.default_value
    if field.type == FieldType.ENUM:
        return field.enum_values[0]
    if field.type in (FieldType.INTEGER, FieldType.FLOAT):
        return _sample_number(field, 1)
    if field.type == FieldType.BOOLEAN:
        return True
    if field.type == FieldType.DATE:
        return "2026-01-01T00:00:00Z"
    if field.type == FieldType.UUID:
        return SAMPLE_UUID
    if field.type == FieldType.JSON:
        return {}
    return _sample_string(field)


def build_minimal_payload(spec: ModelSpec) -> Dict[str, Any]:
    """
    Build the smallest POST payload the generated Create schema accepts.

    Only required fields are included. Fields with a ``pattern`` rule get their
    default value when one is set; otherwise the caller has to supply them.
    """
    payload = {}
    for field in spec.fields:
        if field.required:
            payload[field.name] = sample_value(field)
    return payload
