from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from voice_intake.errors import NotFoundError, ValidationError
from voice_intake.services import IntakeSubmissionService
from .deps import get_intake_service
from .schemas import ErrorResponse, IntakeSubmitRequest, IntakeSubmitResponse

router = APIRouter()

ERROR_RESPONSES: Dict[int | str, Dict[str, Any]] = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


@router.get(
    "/intake",
    responses={**ERROR_RESPONSES, 404: {"model": ErrorResponse}},
)
def get_intake(
    room_name: Optional[str] = Query(None, alias="roomName"),
    service: IntakeSubmissionService = Depends(get_intake_service),
) -> Dict[str, Any]:
    """
    Return the stored intake for the given room.
    """
    if not room_name:
        raise ValidationError("roomName query is required")

    intake = service.latest(room_name)
    if intake is None:
        raise NotFoundError(f"No intake found for room {room_name}")
    return intake


@router.post(
    "/intake",
    response_model=IntakeSubmitResponse,
    responses=ERROR_RESPONSES,
)
def submit_intake(
    payload: IntakeSubmitRequest,
    service: IntakeSubmissionService = Depends(get_intake_service),
) -> IntakeSubmitResponse:
    """
    Upsert the intake for the room and send the summary email once.

    Both the web client and the voice agent post here, often with the same
    data; only the first successful send per room produces an email.
    """
    service.submit(payload.room_name, payload.intake)
    return IntakeSubmitResponse(ok=True)
