from typing import Annotated

from fastapi import Depends, Request

from formsapi.database import Store
from formsapi.repositories.client import ClientRepository
from formsapi.repositories.field import FieldRepository
from formsapi.repositories.form import FormRepository
from formsapi.repositories.response import ResponseRepository
from formsapi.submission import SubmissionService


def get_store(request: Request) -> Store:
    return request.app.state.store


StoreDep = Annotated[Store, Depends(get_store)]


def get_form_repository(store: StoreDep) -> FormRepository:
    return FormRepository(store)


def get_field_repository(store: StoreDep) -> FieldRepository:
    return FieldRepository(store)


def get_client_repository(store: StoreDep) -> ClientRepository:
    return ClientRepository(store)


def get_response_repository(store: StoreDep) -> ResponseRepository:
    return ResponseRepository(store)


def get_submission_service(store: StoreDep) -> SubmissionService:
    return SubmissionService(store)
