from typing import List, Optional

from formsapi.database import form_table
from formsapi.models.form import Form, FormIn, FormUpdateIn
from formsapi.repositories.base import (
    Repository,
    optional_text,
    provided,
    require_id,
    require_text,
    utc_now,
)

PUBLISHED = "published"


def is_published(form: Form) -> bool:
    return form.status.strip().lower() == PUBLISHED


class FormRepository(Repository[Form]):
    table = form_table
    key = "form_id"
    entity = Form
    name = "form"
    id_message = "Form id must be a positive integer"

    async def create(self, data: FormIn) -> Form:
        now = utc_now()
        values = {
            "name": require_text(data.name, "Form name is required"),
            "description": optional_text(data.description, "description must be a string"),
            "status": require_text(data.status, "Form status is required"),
            "date_created": now,
            "date_updated": now,
            "date_published": optional_text(data.date_published, "date_published must be a string"),
            "date_closed": optional_text(data.date_closed, "date_closed must be a string"),
        }
        return await self.insert(values)

    async def list_all(self) -> List[Form]:
        query = form_table.select().order_by(
            form_table.c.date_created.desc(), form_table.c.form_id.desc()
        )
        rows = await self.store.fetch_all(query)
        return [self.to_entity(row) for row in rows]

    async def update(self, form_id: int, data: FormUpdateIn) -> Optional[Form]:
        require_id(form_id, self.id_message)
        sent = provided(data)

        changes = {}
        if "name" in sent:
            changes["name"] = require_text(
                sent["name"], "If provided, form name must be a non-empty string"
            )
        if "description" in sent:
            changes["description"] = optional_text(sent["description"], "description must be a string")
        if "status" in sent:
            changes["status"] = require_text(
                sent["status"], "If provided, form status must be a non-empty string"
            )
        if "date_published" in sent:
            changes["date_published"] = optional_text(
                sent["date_published"], "date_published must be a string"
            )
        if "date_closed" in sent:
            changes["date_closed"] = optional_text(sent["date_closed"], "date_closed must be a string")

        # date_updated is bumped on every update, requested or not
        return await self.apply_update(form_id, changes, touch="date_updated")
