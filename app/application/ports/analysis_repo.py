from typing import Any, Dict, List, Optional, Protocol
from dataclasses import dataclass, field
from datetime import datetime


STATUS_PENDING = "pending"
STATUS_PROCESSING = "processing"
STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"


@dataclass
class AnalysisRecord:
    id: str
    owner_id: str
    image_path: str
    user_intent: str
    status: str
    created_at: datetime
    ai_result: Optional[str] = None
    highlights: Optional[List[Dict[str, Any]]] = field(default=None)


class AnalysisRepository(Protocol):
    def create(self, owner_id: str, image_path: str, user_intent: str, status: str) -> AnalysisRecord:
        ...

    def get(self, analysis_id: str) -> Optional[AnalysisRecord]:
        ...

    def get_for_owner(self, analysis_id: str, owner_id: str) -> Optional[AnalysisRecord]:
        ...

    def list_for_owner(self, owner_id: str) -> List[AnalysisRecord]:
        ...

    def finish(self, analysis_id: str, status: str, ai_result: Optional[str] = None,
               highlights: Optional[List[Dict[str, Any]]] = None) -> bool:
        """Write the terminal state of a processing record.

        Returns False when the record no longer exists or already left the
        processing state; nothing is written in that case.
        """
        ...

    def delete(self, analysis_id: str) -> None:
        ...
