from typing import Annotated, List

from fastapi import APIRouter, Depends, HTTPException

from formsapi.dependencies import get_response_repository
from formsapi.models.response import Response, ResponseIn, ResponseUpdateIn
from formsapi.repositories.response import ResponseRepository

router = APIRouter()

Responses = Annotated[ResponseRepository, Depends(get_response_repository)]


@router.get("/client/{client_id}", response_model=List[Response], status_code=200)
async def list_responses_for_client(client_id: int, responses: Responses):
    return await responses.list_by_client_id(client_id)


@router.get("/field/{field_id}", response_model=List[Response], status_code=200)
async def list_responses_for_field(field_id: int, responses: Responses):
    return await responses.list_by_field_id(field_id)


@router.get("/{response_id}", response_model=Response, status_code=200)
async def get_response(response_id: int, responses: Responses):
    response = await responses.get_by_id(response_id)
    if not response:
        raise HTTPException(status_code=404, detail="Response not found")
    return response


@router.post("", response_model=Response, status_code=201)
async def create_response(response: ResponseIn, responses: Responses):
    return await responses.create(response)


@router.patch("/{response_id}", response_model=Response, status_code=200)
async def update_response(response_id: int, response: ResponseUpdateIn, responses: Responses):
    updated = await responses.update(response_id, response)
    if not updated:
        raise HTTPException(status_code=404, detail="Response not found")
    return updated


@router.delete("/{response_id}", status_code=204)
async def delete_response(response_id: int, responses: Responses):
    await responses.delete(response_id)
