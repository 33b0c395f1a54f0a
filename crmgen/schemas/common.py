from datetime import datetime
from typing import Any, ClassVar, Dict, FrozenSet, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, model_validator

T = TypeVar("T")

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    message: str
    data: Optional[T] = None


class ErrorDetail(BaseModel):
    field: str
    message: str


class ErrorEnvelope(BaseModel):
    success: bool = False
    message: str
    errors: Optional[List[ErrorDetail]] = None


class Page(BaseModel, Generic[T]):
    items: List[T]
    total: int
    currentPage: int
    totalPages: int
    hasMore: bool
    fetchedAll: bool


class RecordOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PartialUpdate(BaseModel):
    """Update payload: every field optional, explicit null only where the column allows it."""
    model_config = ConfigDict(extra="forbid")

    nullable_fields: ClassVar[FrozenSet[str]] = frozenset()

    @model_validator(mode="after")
    def _no_null_for_required(self) -> "PartialUpdate":
        for name in self.model_fields_set:
            if getattr(self, name) is None and name not in self.nullable_fields:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class CreateModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump()
