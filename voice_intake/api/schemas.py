from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


class IntakeSubmitRequest(BaseModel):
    room_name: str = Field(..., alias="roomName", min_length=1)
    intake: Dict[str, Any]

    model_config = ConfigDict(populate_by_name=True, strict=True)


class IntakeSubmitResponse(BaseModel):
    ok: bool = True


class ErrorResponse(BaseModel):
    error: str
