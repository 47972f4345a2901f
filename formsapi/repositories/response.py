from typing import List, Optional

from formsapi.database import response_table
from formsapi.models.response import Response, ResponseIn, ResponseUpdateIn
from formsapi.repositories.base import Repository, provided, require_id, require_text


class ResponseRepository(Repository[Response]):
    table = response_table
    key = "response_id"
    entity = Response
    name = "response"
    id_message = "response_id must be a positive integer"

    async def create(self, data: ResponseIn) -> Response:
        values = {
            "client_id": require_id(data.client_id, "client_id must be a positive integer"),
            "field_id": require_id(data.field_id, "field_id must be a positive integer"),
            "response_text": require_text(data.response_text, "response_text is required"),
        }
        return await self.insert(values)

    async def list_by_client_id(self, client_id: int) -> List[Response]:
        require_id(client_id, "client_id must be a positive integer")
        return await self.list_where(
            response_table.c.client_id == client_id, response_table.c.response_id.asc()
        )

    async def list_by_field_id(self, field_id: int) -> List[Response]:
        require_id(field_id, "field_id must be a positive integer")
        return await self.list_where(
            response_table.c.field_id == field_id, response_table.c.response_id.asc()
        )

    async def update(self, response_id: int, data: ResponseUpdateIn) -> Optional[Response]:
        require_id(response_id, self.id_message)
        sent = provided(data)

        changes = {}
        if "response_text" in sent:
            changes["response_text"] = require_text(
                sent["response_text"], "If provided, response_text must be a non-empty string"
            )

        return await self.apply_update(response_id, changes)
