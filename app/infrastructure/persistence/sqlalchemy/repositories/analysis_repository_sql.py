from typing import Any, Dict, List, Optional
from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from .....db.models import Analysis
from .....application.ports.analysis_repo import AnalysisRepository, AnalysisRecord, STATUS_PROCESSING


class SqlAnalysisRepository(AnalysisRepository):
    """Each call runs in its own short-lived session so the repository is safe
    to use from background tasks that outlive the request."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def _to_record(self, a: Analysis) -> AnalysisRecord:
        return AnalysisRecord(
            id=a.id,
            owner_id=a.user_id,
            image_path=a.file_path,
            user_intent=a.user_intent,
            status=a.status,
            created_at=a.created_at,
            ai_result=a.ai_result,
            highlights=a.highlights,
        )

    def create(self, owner_id: str, image_path: str, user_intent: str, status: str) -> AnalysisRecord:
        with Session(self.engine) as session:
            entry = Analysis(
                user_id=owner_id,
                file_path=image_path,
                user_intent=user_intent,
                status=status,
            )
            session.add(entry)
            session.commit()
            session.refresh(entry)
            return self._to_record(entry)

    def get(self, analysis_id: str) -> Optional[AnalysisRecord]:
        with Session(self.engine) as session:
            entry = session.get(Analysis, analysis_id)
            return self._to_record(entry) if entry else None

    def get_for_owner(self, analysis_id: str, owner_id: str) -> Optional[AnalysisRecord]:
        with Session(self.engine) as session:
            entry = session.exec(
                select(Analysis).where(Analysis.id == analysis_id, Analysis.user_id == owner_id)
            ).first()
            return self._to_record(entry) if entry else None

    def list_for_owner(self, owner_id: str) -> List[AnalysisRecord]:
        with Session(self.engine) as session:
            rows = session.exec(
                select(Analysis)
                .where(Analysis.user_id == owner_id)
                .order_by(Analysis.created_at.desc())
            ).all()
            return [self._to_record(r) for r in rows]

    def finish(self, analysis_id: str, status: str, ai_result: Optional[str] = None,
               highlights: Optional[List[Dict[str, Any]]] = None) -> bool:
        with Session(self.engine) as session:
            entry = session.get(Analysis, analysis_id)
            if not entry or entry.status != STATUS_PROCESSING:
                return False
            entry.status = status
            entry.ai_result = ai_result
            entry.highlights = highlights
            session.add(entry)
            session.commit()
            return True

    def delete(self, analysis_id: str) -> None:
        with Session(self.engine) as session:
            entry = session.get(Analysis, analysis_id)
            if not entry:
                return
            session.delete(entry)
            session.commit()
