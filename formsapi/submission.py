"""Public form submission.

Turns one respondent's answers into a Client row plus one Response row per
field of the form. The checks run in a fixed order and nothing is written
until all of them pass:

1. the form exists and is published,
2. name, email and answers are well formed,
3. the email has not already been used for this form,
4. every field of the form has a non-blank answer.

The Client and its Responses are then written in one transaction. A second
submission racing past step 3 is stopped by the unique (email, form_id)
constraint on ``clients`` and reported as a duplicate.
"""
import logging
from typing import Any, List, Optional

from formsapi.database import Store
from formsapi.errors import ConflictFailure, ValidationFailure
from formsapi.models.client import ClientIn
from formsapi.models.response import ResponseIn
from formsapi.models.submission import SubmissionIn, SubmissionOutcome, SubmissionState
from formsapi.repositories.base import is_positive_int, utc_now
from formsapi.repositories.client import DUPLICATE_MESSAGE, ClientRepository, is_valid_email
from formsapi.repositories.field import FieldRepository
from formsapi.repositories.form import FormRepository, is_published
from formsapi.repositories.response import ResponseRepository

logger = logging.getLogger(__name__)

THANK_YOU_MESSAGE = "Thank you! Your response has been submitted."


class UnansweredField(ValidationFailure):
    def __init__(self, field_id: int):
        super().__init__(f"Answer required for question (field {field_id})")
        self.field_id = field_id


def render_answer(value: Any) -> Optional[str]:
    """Text stored for one answer, or None when the value is not an answer.

    Plain strings are trimmed. Lists (checkbox answers) keep their non-blank string
    entries, trimmed and joined with ", ".
    """
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (list, tuple)):
        entries = (entry.strip() for entry in value if isinstance(entry, str))
        return ", ".join(entry for entry in entries if entry)
    return None


def is_answered(value: Any) -> bool:
    return bool(render_answer(value))


class SubmissionService:
    def __init__(self, store: Store):
        self.store = store
        self.forms = FormRepository(store)
        self.fields = FieldRepository(store)
        self.clients = ClientRepository(store)
        self.responses = ResponseRepository(store)

    def reject(
        self, form_id: Any, state: SubmissionState, error: str, missing: Optional[List[int]] = None
    ) -> SubmissionOutcome:
        logger.info(f"Submission for form {form_id} rejected ({state.value}): {error}")
        return SubmissionOutcome(state=state, error=error, missing=missing or [])

    async def submit(self, form_id: Any, payload: SubmissionIn) -> SubmissionOutcome:
        if not is_positive_int(form_id):
            return self.reject(form_id, SubmissionState.INVALID_INPUT, "Invalid form id")

        form = await self.forms.get_by_id(form_id)
        if form is None:
            return self.reject(form_id, SubmissionState.NOT_FOUND, "Form not found")
        if not is_published(form):
            return self.reject(form_id, SubmissionState.NOT_PUBLISHED, "Form is not published")

        name, email, answers = payload.name, payload.email, payload.answers
        if not isinstance(name, str) or not name.strip():
            return self.reject(form_id, SubmissionState.INVALID_INPUT, "Name is required")
        if not isinstance(email, str) or not email.strip():
            return self.reject(form_id, SubmissionState.INVALID_INPUT, "Email is required")
        name, email = name.strip(), email.strip()
        if not is_valid_email(email):
            return self.reject(
                form_id, SubmissionState.INVALID_INPUT, "Please enter a valid email address"
            )
        if not isinstance(answers, dict):
            return self.reject(form_id, SubmissionState.INVALID_INPUT, "Answers are required")

        existing = await self.clients.get_by_email_and_form_id(email, form_id)
        if existing is not None:
            return self.reject(form_id, SubmissionState.DUPLICATE, DUPLICATE_MESSAGE)

        fields = await self.fields.list_by_form_id(form_id)
        missing = [
            field.field_id for field in fields if not is_answered(answers.get(str(field.field_id)))
        ]
        if missing:
            return self.reject(
                form_id, SubmissionState.INCOMPLETE, "All questions must be answered", missing
            )

        try:
            async with self.store.transaction():
                client = await self.clients.create(
                    ClientIn(name=name, email=email, form_id=form_id, date_responded=utc_now())
                )
                for field in fields:
                    text = render_answer(answers.get(str(field.field_id)))
                    if not text:
                        raise UnansweredField(field.field_id)
                    await self.responses.create(
                        ResponseIn(
                            client_id=client.client_id,
                            field_id=field.field_id,
                            response_text=text,
                        )
                    )
        except ConflictFailure as e:
            return self.reject(form_id, SubmissionState.DUPLICATE, e.message)
        except UnansweredField as e:
            return self.reject(form_id, SubmissionState.INCOMPLETE, e.message, [e.field_id])

        logger.info(
            f"Submission for form {form_id} committed: client {client.client_id}, "
            f"{len(fields)} response(s)"
        )
        return SubmissionOutcome(state=SubmissionState.COMMITTED, client_id=client.client_id)
