import json
from typing import Any, List, Optional

from formsapi.database import field_table
from formsapi.errors import ValidationFailure
from formsapi.models.field import Field, FieldIn, FieldUpdateIn
from formsapi.repositories.base import (
    Repository,
    provided,
    require_id,
    require_text,
    utc_now,
)


def validate_json_string(value: Any, field_name: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationFailure(f"{field_name} must be a JSON string")
    try:
        json.loads(value)
    except ValueError as e:
        raise ValidationFailure(f"{field_name} must be valid JSON") from e
    return value.strip()


class FieldRepository(Repository[Field]):
    table = field_table
    key = "field_id"
    entity = Field
    name = "field"
    id_message = "field_id must be a positive integer"
    empty_update_message = "No field properties to update"

    async def create(self, data: FieldIn) -> Field:
        values = {
            "form_id": require_id(data.form_id, "form_id must be a positive integer"),
            "question_text": require_text(data.question_text, "question_text is required"),
            "answer_type": require_text(data.answer_type, "answer_type is required"),
            "options_json": validate_json_string(data.options_json, "options_json"),
            "date_updated": utc_now(),
        }
        return await self.insert(values)

    async def list_by_form_id(self, form_id: int) -> List[Field]:
        require_id(form_id, "form_id must be a positive integer")
        # creation order is question order
        return await self.list_where(field_table.c.form_id == form_id, field_table.c.field_id.asc())

    async def update(self, field_id: int, data: FieldUpdateIn) -> Optional[Field]:
        require_id(field_id, self.id_message)
        sent = provided(data)

        changes = {}
        if "question_text" in sent:
            changes["question_text"] = require_text(
                sent["question_text"], "If provided, question_text must be a non-empty string"
            )
        if "answer_type" in sent:
            changes["answer_type"] = require_text(
                sent["answer_type"], "If provided, answer_type must be a non-empty string"
            )
        if "options_json" in sent:
            changes["options_json"] = validate_json_string(sent["options_json"], "options_json")

        return await self.apply_update(field_id, changes, touch="date_updated")
