# app/schemas/common.py
from pydantic import BaseModel
from typing import Optional
from datetime import datetime, timezone


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; stored values are always UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value

class ErrorResponse(BaseModel):
    success: bool = False
    data: Optional[dict] = None
    error: str

class MessageResponse(BaseModel):
    message: str
