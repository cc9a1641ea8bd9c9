# app/db/models/analysis/analysis.py
from typing import Any, Dict, List, Optional
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON, Text
from datetime import datetime, timezone
import uuid


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Analysis(SQLModel, table=True):
    __tablename__ = "analysis"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    file_path: str
    user_intent: str = Field(sa_column=Column(Text, nullable=False))
    ai_result: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    highlights: Optional[List[Dict[str, Any]]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    status: str = Field(default="pending", max_length=20)  # pending, processing, completed, failed
    created_at: datetime = Field(default_factory=utc_now, index=True)
