from typing import Optional

from pydantic import BaseModel, StrictInt


class FieldIn(BaseModel):
    form_id: Optional[StrictInt] = None
    question_text: Optional[str] = None
    answer_type: Optional[str] = None
    options_json: Optional[str] = None  # JSON-encoded, e.g. '["Yes", "No"]'


class FieldUpdateIn(BaseModel):
    question_text: Optional[str] = None
    answer_type: Optional[str] = None
    options_json: Optional[str] = None


class Field(BaseModel):
    field_id: int
    form_id: int
    question_text: str
    answer_type: str
    options_json: Optional[str] = None
    date_updated: str
