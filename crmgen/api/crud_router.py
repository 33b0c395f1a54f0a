"""Builds the five CRUD endpoints for a CrudService."""
from typing import Optional, Type

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from crmgen.api.deps import current_user_id
from crmgen.db.session import get_db
from crmgen.schemas.common import CreateModel, Envelope, Page, PartialUpdate
from crmgen.services.crud import CrudService


def envelope(message: str, data=None) -> dict:
    return {"success": True, "message": message, "data": data}


def build_crud_router(
    service: CrudService,
    prefix: str,
    create_schema: Type[CreateModel],
    update_schema: Type[PartialUpdate],
    out_schema: Type[BaseModel],
    filters_schema: Type[BaseModel],
    plural: Optional[str] = None,
) -> APIRouter:
    router = APIRouter(prefix=prefix)
    label = service.label
    plural = plural or f"{label}s"

    @router.get("", response_model=Envelope[Page[out_schema]])
    def list_records(
        page: int = Query(1, ge=1),
        limit: str = Query("10", description="Page size, or 'all' / -1 for every record"),
        filters: filters_schema = Depends(),
        db: Session = Depends(get_db),
        user_id: Optional[str] = Depends(current_user_id),
    ):
        result = service.list(db, page=page, limit=limit, filters=filters.model_dump(exclude_none=True))
        return envelope(f"{plural} fetched successfully", result)

    @router.get("/{id}", response_model=Envelope[out_schema])
    def get_record(id: str, db: Session = Depends(get_db), user_id: Optional[str] = Depends(current_user_id)):
        return envelope(f"{label} fetched successfully", out_schema.model_validate(service.get(db, id)))

    @router.post("", status_code=201, response_model=Envelope[out_schema])
    def create_record(
        payload: create_schema,
        db: Session = Depends(get_db),
        user_id: Optional[str] = Depends(current_user_id),
    ):
        item = service.create(db, payload.to_record(), user_id=user_id)
        return envelope(f"{label} created successfully", out_schema.model_validate(item))

    @router.put("/{id}", response_model=Envelope[out_schema])
    def update_record(
        id: str,
        payload: update_schema,
        db: Session = Depends(get_db),
        user_id: Optional[str] = Depends(current_user_id),
    ):
        item = service.update(db, id, payload.changes(), user_id=user_id)
        return envelope(f"{label} updated successfully", out_schema.model_validate(item))

    @router.delete("/{id}", response_model=Envelope[out_schema])
    def delete_record(id: str, db: Session = Depends(get_db), user_id: Optional[str] = Depends(current_user_id)):
        previous = service.delete(db, id, user_id=user_id)
        return envelope(f"{label} deleted successfully", out_schema.model_validate(previous))

    return router
