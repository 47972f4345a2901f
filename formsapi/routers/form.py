import logging
from typing import Annotated, List

from fastapi import APIRouter, Depends, HTTPException

from formsapi.dependencies import get_form_repository
from formsapi.models.form import Form, FormIn, FormUpdateIn
from formsapi.repositories.form import FormRepository

logger = logging.getLogger(__name__)
router = APIRouter()

Forms = Annotated[FormRepository, Depends(get_form_repository)]


@router.get("", response_model=List[Form], status_code=200)
async def list_forms(forms: Forms):
    return await forms.list_all()


@router.get("/{form_id}", response_model=Form, status_code=200)
async def get_form(form_id: int, forms: Forms):
    form = await forms.get_by_id(form_id)
    if not form:
        raise HTTPException(status_code=404, detail="Form not found")
    return form


@router.post("", response_model=Form, status_code=201)
async def create_form(form: FormIn, forms: Forms):
    created = await forms.create(form)
    logger.info(f"Created form {created.form_id} ({created.status})")
    return created


@router.patch("/{form_id}", response_model=Form, status_code=200)
async def update_form(form_id: int, form: FormUpdateIn, forms: Forms):
    updated = await forms.update(form_id, form)
    if not updated:
        raise HTTPException(status_code=404, detail="Form not found")
    return updated


@router.delete("/{form_id}", status_code=204)
async def delete_form(form_id: int, forms: Forms):
    # fields and clients of the form are left in place
    await forms.delete(form_id)
    logger.info(f"Deleted form {form_id}")
