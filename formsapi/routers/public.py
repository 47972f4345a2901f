from typing import Annotated, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from formsapi.dependencies import get_submission_service
from formsapi.models.submission import (
    SubmissionError,
    SubmissionIn,
    SubmissionReceipt,
    SubmissionState,
)
from formsapi.submission import THANK_YOU_MESSAGE, SubmissionService

router = APIRouter()

STATUS_BY_STATE = {
    SubmissionState.NOT_FOUND: 404,
    SubmissionState.NOT_PUBLISHED: 400,
    SubmissionState.INVALID_INPUT: 400,
    SubmissionState.DUPLICATE: 409,
    SubmissionState.INCOMPLETE: 400,
}


@router.post(
    "/forms/{form_id}/submit",
    response_model=SubmissionReceipt,
    status_code=201,
    responses={
        400: {"model": SubmissionError},
        404: {"model": SubmissionError},
        409: {"model": SubmissionError},
    },
)
async def submit_form(
    form_id: int,
    service: Annotated[SubmissionService, Depends(get_submission_service)],
    submission: Optional[SubmissionIn] = None,
):
    outcome = await service.submit(form_id, submission or SubmissionIn())

    if not outcome.accepted:
        content = {"error": outcome.error}
        if outcome.state == SubmissionState.INCOMPLETE:
            content["missing"] = outcome.missing
        return JSONResponse(status_code=STATUS_BY_STATE[outcome.state], content=content)

    return SubmissionReceipt(message=THANK_YOU_MESSAGE, client_id=outcome.client_id)
