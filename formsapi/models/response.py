from pydantic import BaseModel, StrictInt


class ResponseIn(BaseModel):
    client_id: StrictInt | None = None
    field_id: StrictInt | None = None
    response_text: str | None = None


class ResponseUpdateIn(BaseModel):
    response_text: str | None = None


class Response(BaseModel):
    response_id: int
    client_id: int
    field_id: int
    response_text: str
