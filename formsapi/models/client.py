from pydantic import BaseModel, StrictInt


class ClientIn(BaseModel):
    name: str | None = None
    email: str | None = None
    form_id: StrictInt | None = None
    date_responded: str | None = None


class ClientUpdateIn(ClientIn):
    pass


class Client(BaseModel):
    client_id: int
    name: str
    email: str
    form_id: int | None = None
    date_responded: str
