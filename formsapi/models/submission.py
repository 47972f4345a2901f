from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel


class SubmissionIn(BaseModel):
    name: Optional[Any] = None
    email: Optional[Any] = None
    # field id (as a string key) -> answer text, or a list of choices for checkboxes
    answers: Optional[Any] = None


class SubmissionState(str, Enum):
    NOT_FOUND = "rejected-not-found"
    NOT_PUBLISHED = "rejected-not-published"
    INVALID_INPUT = "rejected-invalid-input"
    DUPLICATE = "rejected-duplicate"
    INCOMPLETE = "rejected-incomplete"
    COMMITTED = "committed"


class SubmissionOutcome(BaseModel):
    state: SubmissionState
    client_id: Optional[int] = None
    error: Optional[str] = None
    missing: List[int] = []

    @property
    def accepted(self) -> bool:
        return self.state == SubmissionState.COMMITTED


class SubmissionReceipt(BaseModel):
    message: str
    client_id: int


class SubmissionError(BaseModel):
    error: str
    missing: Optional[List[int]] = None
