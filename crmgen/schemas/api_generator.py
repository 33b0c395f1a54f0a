from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from crmgen.schemas.common import CreateModel, PartialUpdate, RecordOut
from crmgen.schemas.generator import FieldSpec, GeneratorRequirements, ModelSpec

MODULE_NAME_PATTERN = r"^[a-zA-Z][a-zA-Z0-9]*$"

ApiGeneratorStatus = Literal["pending", "generated", "failed"]


def _dump_fields(fields: List[FieldSpec]) -> List[Dict[str, Any]]:
    return [f.model_dump(mode="json", by_alias=True, exclude_none=True) for f in fields]


def _check_spec(module_name: str, fields: List[FieldSpec]) -> None:
    # reuses the ModelSpec invariants (unique field names, keyword names)
    ModelSpec(modelName=module_name, fields=fields)


class ApiGeneratorCreate(CreateModel):
    module_name: str = Field(..., min_length=3, max_length=50, pattern=MODULE_NAME_PATTERN, examples=["task"])
    fields: List[FieldSpec] = Field(..., min_length=1)
    requirements: GeneratorRequirements = Field(default_factory=GeneratorRequirements)

    @model_validator(mode="after")
    def _valid_spec(self) -> "ApiGeneratorCreate":
        _check_spec(self.module_name, self.fields)
        return self

    def to_record(self) -> Dict[str, Any]:
        return {
            "module_name": self.module_name,
            "fields": _dump_fields(self.fields),
            "requirements": self.requirements.model_dump(mode="json", by_alias=True, exclude_none=True),
        }


class ApiGeneratorUpdate(PartialUpdate):
    """Updates the record only; already generated files are not regenerated."""
    module_name: Optional[str] = Field(None, min_length=3, max_length=50, pattern=MODULE_NAME_PATTERN)
    fields: Optional[List[FieldSpec]] = Field(None, min_length=1)
    requirements: Optional[GeneratorRequirements] = None

    @model_validator(mode="after")
    def _valid_spec(self) -> "ApiGeneratorUpdate":
        if self.fields is not None:
            _check_spec(self.module_name or "module", self.fields)
        return self

    def changes(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if "module_name" in self.model_fields_set:
            data["module_name"] = self.module_name
        if "fields" in self.model_fields_set:
            data["fields"] = _dump_fields(self.fields)
        if "requirements" in self.model_fields_set:
            data["requirements"] = self.requirements.model_dump(mode="json", by_alias=True, exclude_none=True)
        return data


class ApiGeneratorOut(RecordOut):
    module_name: str
    fields: List[Dict[str, Any]]
    requirements: Dict[str, Any] = {}
    status: ApiGeneratorStatus
    generated_files: Optional[Dict[str, Any]] = None
    error_message: Optional[str] = None


class ApiGeneratorFilters(BaseModel):
    status: Optional[ApiGeneratorStatus] = None
    module_name: Optional[str] = None
