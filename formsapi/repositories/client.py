import re
from typing import Any, List, Optional

from formsapi.database import client_table, is_unique_violation
from formsapi.errors import ConflictFailure, StoreFailure, ValidationFailure
from formsapi.models.client import Client, ClientIn, ClientUpdateIn
from formsapi.repositories.base import (
    Repository,
    is_positive_int,
    provided,
    require_id,
    require_text,
)

# light check, enough for backend validation
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

DUPLICATE_MESSAGE = "A response with this email has already been submitted for this form"


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_RE.match(email))


def validate_email(email: str) -> str:
    if not is_valid_email(email):
        raise ValidationFailure("email must be a valid email address")
    return email


def optional_form_id(value: Any) -> Optional[int]:
    if value is not None and not is_positive_int(value):
        raise ValidationFailure("If provided, form_id must be a positive integer")
    return value


class ClientRepository(Repository[Client]):
    table = client_table
    key = "client_id"
    entity = Client
    name = "client"
    id_message = "client_id must be a positive integer"

    async def create(self, data: ClientIn) -> Client:
        values = {
            "name": require_text(data.name, "Client name is required"),
            "email": validate_email(require_text(data.email, "Client email is required")),
            "form_id": optional_form_id(data.form_id),
            "date_responded": require_text(data.date_responded, "date_responded is required"),
        }
        try:
            return await self.insert(values)
        except StoreFailure as e:
            if is_unique_violation(e):
                raise ConflictFailure(DUPLICATE_MESSAGE) from e
            raise

    async def list_by_form_id(self, form_id: int) -> List[Client]:
        require_id(form_id, "form_id must be a positive integer")
        # most recent respondent first
        return await self.list_where(
            client_table.c.form_id == form_id,
            client_table.c.date_responded.desc(),
            client_table.c.client_id.desc(),
        )

    async def get_by_email_and_form_id(self, email: str, form_id: int) -> Optional[Client]:
        email = require_text(email, "email is required")
        require_id(form_id, "form_id must be a positive integer")
        query = client_table.select().where(
            (client_table.c.email == email) & (client_table.c.form_id == form_id)
        )
        return self.to_entity(await self.store.fetch_one(query))

    async def update(self, client_id: int, data: ClientUpdateIn) -> Optional[Client]:
        require_id(client_id, self.id_message)
        sent = provided(data)

        changes = {}
        if "name" in sent:
            changes["name"] = require_text(
                sent["name"], "If provided, client name must be a non-empty string"
            )
        if "email" in sent:
            changes["email"] = validate_email(
                require_text(sent["email"], "If provided, email must be a non-empty string")
            )
        if "form_id" in sent:
            changes["form_id"] = optional_form_id(sent["form_id"])
        if "date_responded" in sent:
            changes["date_responded"] = require_text(
                sent["date_responded"], "If provided, date_responded must be a non-empty string"
            )

        try:
            return await self.apply_update(client_id, changes)
        except StoreFailure as e:
            if is_unique_violation(e):
                raise ConflictFailure(DUPLICATE_MESSAGE) from e
            raise
