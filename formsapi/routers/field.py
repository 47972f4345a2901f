from typing import Annotated, List

from fastapi import APIRouter, Depends, HTTPException

from formsapi.dependencies import get_field_repository
from formsapi.models.field import Field, FieldIn, FieldUpdateIn
from formsapi.repositories.field import FieldRepository

router = APIRouter()

Fields = Annotated[FieldRepository, Depends(get_field_repository)]


@router.get("/form/{form_id}", response_model=List[Field], status_code=200)
async def list_fields_for_form(form_id: int, fields: Fields):
    return await fields.list_by_form_id(form_id)


@router.get("/{field_id}", response_model=Field, status_code=200)
async def get_field(field_id: int, fields: Fields):
    field = await fields.get_by_id(field_id)
    if not field:
        raise HTTPException(status_code=404, detail="Field not found")
    return field


@router.post("", response_model=Field, status_code=201)
async def create_field(field: FieldIn, fields: Fields):
    return await fields.create(field)


@router.patch("/{field_id}", response_model=Field, status_code=200)
async def update_field(field_id: int, field: FieldUpdateIn, fields: Fields):
    updated = await fields.update(field_id, field)
    if not updated:
        raise HTTPException(status_code=404, detail="Field not found")
    return updated


@router.delete("/{field_id}", status_code=204)
async def delete_field(field_id: int, fields: Fields):
    await fields.delete(field_id)
