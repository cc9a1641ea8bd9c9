import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Set

from fastapi import HTTPException

from ..ports.analysis_repo import (
    AnalysisRepository,
    AnalysisRecord,
    STATUS_COMPLETED,
    STATUS_FAILED,
    STATUS_PROCESSING,
)
from ..ports.ai_provider import AIProvider
from ..ports.storage_repo import StorageRepository
from .highlight_extractor import extract_highlights
from .prompt_builder import PromptBuilder
from ...media_utils import get_image_size

logger = logging.getLogger(__name__)


@dataclass
class AnalysisService:
    """Owns the lifecycle of analysis records.

    A record is created in ``processing`` state by :meth:`submit`; the AI call
    runs as a background task that ends with exactly one terminal write
    (``completed`` or ``failed``).
    """

    analysis_repo: AnalysisRepository
    ai_provider: AIProvider
    storage_repo: StorageRepository
    prompt_builder: PromptBuilder
    image_size_reader: Callable[[str], tuple] = get_image_size
    _tasks: Set[asyncio.Task] = field(default_factory=set, init=False, repr=False)

    async def submit(self, owner_id: str, image_path: Optional[str], user_intent: str) -> AnalysisRecord:
        if not image_path:
            raise HTTPException(status_code=400, detail="Please upload an image file")

        try:
            record = await self._run_sync(
                self.analysis_repo.create, owner_id, image_path, user_intent, STATUS_PROCESSING
            )
        except Exception:
            # No record points at the upload, so nothing else would remove it
            await self._run_sync(self._discard_image, image_path)
            raise
        logger.info(f"Analysis {record.id} created for user {owner_id}, starting AI analysis")

        task = asyncio.create_task(self.complete(record.id))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return record

    async def complete(self, analysis_id: str) -> None:
        try:
            record = await self._run_sync(self.analysis_repo.get, analysis_id)
            if record is None:
                logger.warning(f"Analysis {analysis_id} disappeared before AI analysis started")
                return

            width, height = await self._run_sync(self.image_size_reader, record.image_path)
            prompt = self.prompt_builder.build(record.user_intent, width, height)
            ai_result = await self.ai_provider.analyze(record.image_path, prompt)
            highlights = extract_highlights(ai_result)
        except Exception:
            logger.exception(f"AI analysis failed for analysis {analysis_id}")
            await self._finish(analysis_id, STATUS_FAILED)
            return

        logger.info(f"AI analysis {analysis_id} completed with {len(highlights)} highlights")
        await self._finish(analysis_id, STATUS_COMPLETED, ai_result=ai_result, highlights=highlights)

    async def _finish(self, analysis_id: str, status: str, ai_result: Optional[str] = None,
                      highlights: Optional[list] = None) -> None:
        try:
            written = await self._run_sync(
                self.analysis_repo.finish, analysis_id, status, ai_result, highlights
            )
        except Exception:
            logger.exception(f"Could not store final state '{status}' for analysis {analysis_id}")
            return
        if not written:
            logger.warning(
                f"Analysis {analysis_id} was deleted or already finished, dropping '{status}' result"
            )

    def list_for_owner(self, owner_id: str) -> List[AnalysisRecord]:
        return self.analysis_repo.list_for_owner(owner_id)

    def get(self, analysis_id: str, owner_id: str) -> AnalysisRecord:
        record = self.analysis_repo.get_for_owner(analysis_id, owner_id)
        if not record:
            raise HTTPException(status_code=404, detail="Analysis not found")
        return record

    def delete(self, analysis_id: str, owner_id: str) -> None:
        record = self.get(analysis_id, owner_id)

        self._discard_image(record.image_path)
        self.analysis_repo.delete(record.id)
        logger.info(f"Analysis {analysis_id} deleted by user {owner_id}")

    def _discard_image(self, image_path: str) -> None:
        try:
            self.storage_repo.delete(image_path)
        except OSError as e:
            logger.error(f"Error deleting image file {image_path}: {e}")

    @property
    def pending_tasks(self) -> List[asyncio.Task]:
        return list(self._tasks)

    async def wait_for_pending(self) -> None:
        """Wait until every in-flight analysis has written its final state."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    @staticmethod
    async def _run_sync(func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func, *args)
