from typing import Annotated, List

from fastapi import APIRouter, Depends, HTTPException

from formsapi.dependencies import get_client_repository
from formsapi.models.client import Client, ClientIn, ClientUpdateIn
from formsapi.repositories.client import ClientRepository

router = APIRouter()

Clients = Annotated[ClientRepository, Depends(get_client_repository)]


@router.get("/form/{form_id}", response_model=List[Client], status_code=200)
async def list_clients_for_form(form_id: int, clients: Clients):
    return await clients.list_by_form_id(form_id)


@router.get("/{client_id}", response_model=Client, status_code=200)
async def get_client(client_id: int, clients: Clients):
    client = await clients.get_by_id(client_id)
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")
    return client


@router.post("", response_model=Client, status_code=201)
async def create_client(client: ClientIn, clients: Clients):
    return await clients.create(client)


@router.patch("/{client_id}", response_model=Client, status_code=200)
async def update_client(client_id: int, client: ClientUpdateIn, clients: Clients):
    updated = await clients.update(client_id, client)
    if not updated:
        raise HTTPException(status_code=404, detail="Client not found")
    return updated


@router.delete("/{client_id}", status_code=204)
async def delete_client(client_id: int, clients: Clients):
    await clients.delete(client_id)
