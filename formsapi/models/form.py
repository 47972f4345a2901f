from typing import Optional

from pydantic import BaseModel


class FormIn(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    date_published: Optional[str] = None
    date_closed: Optional[str] = None


class FormUpdateIn(FormIn):
    pass


class Form(BaseModel):
    form_id: int
    name: str
    description: Optional[str] = None
    status: str
    date_created: str
    date_updated: str
    date_published: Optional[str] = None
    date_closed: Optional[str] = None
