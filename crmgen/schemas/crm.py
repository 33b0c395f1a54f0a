"""Request and response models for the CRM admin resources."""
from datetime import datetime
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field

from crmgen.schemas.common import EMAIL_PATTERN, CreateModel, PartialUpdate, RecordOut

FilterType = Literal["category", "source", "tag", "label", "status"]
Priority = Literal["low", "medium", "high"]
LeadStatus = Literal["open", "closed"]


# Roles

class RoleCreate(CreateModel):
    role_name: str = Field(..., min_length=1, max_length=100, examples=["manager"])
    permissions: Dict[str, Any] = Field(default_factory=dict)


class RoleUpdate(PartialUpdate):
    role_name: Optional[str] = Field(None, min_length=1, max_length=100)
    permissions: Optional[Dict[str, Any]] = None


class RoleOut(RecordOut):
    role_name: str
    permissions: Dict[str, Any] = {}


class RoleFilters(BaseModel):
    role_name: Optional[str] = None


# Users

class UserCreate(CreateModel):
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=6)
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    role_id: Optional[str] = None
    is_active: bool = True


class UserUpdate(PartialUpdate):
    nullable_fields = frozenset({"email", "first_name", "last_name", "phone", "role_id", "last_login"})

    username: Optional[str] = Field(None, min_length=1, max_length=100)
    password: Optional[str] = Field(None, min_length=6)
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    role_id: Optional[str] = None
    is_active: Optional[bool] = None
    last_login: Optional[datetime] = None


class UserOut(RecordOut):
    username: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    role_id: Optional[str] = None
    is_active: bool = True
    last_login: Optional[datetime] = None


class UserFilters(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None
    role_id: Optional[str] = None
    is_active: Optional[bool] = None


# Pipelines

class PipelineCreate(CreateModel):
    name: str = Field(..., min_length=1, max_length=100, examples=["Sales"])


class PipelineUpdate(PartialUpdate):
    name: Optional[str] = Field(None, min_length=1, max_length=100)


class PipelineOut(RecordOut):
    name: str


class PipelineFilters(BaseModel):
    name: Optional[str] = None


# Stages

class StageCreate(CreateModel):
    name: str = Field(..., min_length=1, max_length=100)
    pipeline: str
    type: str = Field("lead", min_length=1, max_length=50)
    is_default: bool = False


class StageUpdate(PartialUpdate):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    pipeline: Optional[str] = None
    type: Optional[str] = Field(None, min_length=1, max_length=50)
    is_default: Optional[bool] = None
    order: Optional[int] = Field(None, ge=0)


class StageOut(RecordOut):
    name: str
    pipeline: str
    type: str
    is_default: bool
    order: int


class StageFilters(BaseModel):
    pipeline: Optional[str] = None
    type: Optional[str] = None
    is_default: Optional[bool] = None


# Filters

class FilterCreate(CreateModel):
    name: str = Field(..., min_length=1, max_length=100)
    type: FilterType


class FilterUpdate(PartialUpdate):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    type: Optional[FilterType] = None


class FilterOut(RecordOut):
    name: str
    type: str


class FilterFilters(BaseModel):
    type: Optional[FilterType] = None
    name: Optional[str] = None


# Contacts

class ContactCreate(CreateModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    phone: str = Field(..., min_length=3, max_length=50)


class ContactUpdate(PartialUpdate):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)
    phone: Optional[str] = Field(None, min_length=3, max_length=50)


class ContactOut(RecordOut):
    name: str
    email: str
    phone: str


class ContactFilters(BaseModel):
    email: Optional[str] = None
    phone: Optional[str] = None


# Leads

class LeadCreate(CreateModel):
    lead_title: str = Field(..., min_length=1, max_length=255)
    lead_value: int = Field(..., ge=0)
    pipeline: str
    stage: str
    source: str
    category: str
    contact: Optional[str] = None
    priority: Priority = "medium"
    status: LeadStatus = "open"


class LeadUpdate(PartialUpdate):
    nullable_fields = frozenset({"contact"})

    lead_title: Optional[str] = Field(None, min_length=1, max_length=255)
    lead_value: Optional[int] = Field(None, ge=0)
    pipeline: Optional[str] = None
    stage: Optional[str] = None
    source: Optional[str] = None
    category: Optional[str] = None
    contact: Optional[str] = None
    priority: Optional[Priority] = None
    status: Optional[LeadStatus] = None
    is_converted: Optional[bool] = None


class LeadOut(RecordOut):
    lead_title: str
    lead_value: int
    pipeline: str
    stage: str
    source: str
    category: str
    contact: Optional[str] = None
    priority: str
    status: str
    is_converted: bool


class LeadFilters(BaseModel):
    pipeline: Optional[str] = None
    stage: Optional[str] = None
    source: Optional[str] = None
    category: Optional[str] = None
    priority: Optional[Priority] = None
    status: Optional[LeadStatus] = None
    contact: Optional[str] = None
    is_converted: Optional[bool] = None
