import os
import tempfile

# Settings are read at import time, so the environment has to be in place first.
_TEST_DIR = tempfile.mkdtemp(prefix="ux-analysis-tests-")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("GEMINI_API_KEY", "test-gemini-key")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{os.path.join(_TEST_DIR, 'test.db')}")
os.environ.setdefault("UPLOAD_DIR", os.path.join(_TEST_DIR, "uploads"))
os.environ.setdefault("RATE_LIMIT_PER_MINUTE", "100000")

import asyncio
import dataclasses
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pytest

from app.application.ports.analysis_repo import AnalysisRecord, STATUS_PROCESSING
from app.application.ports.user_repo import UserDto
from app.application.services.analysis_service import AnalysisService
from app.application.services.prompt_builder import PromptBuilder


class FakeAnalysisRepo:
    def __init__(self):
        self.rows: Dict[str, AnalysisRecord] = {}
        self.finish_calls: List[Dict[str, Any]] = []
        self._clock = datetime(2025, 1, 1)

    def create(self, owner_id: str, image_path: str, user_intent: str, status: str) -> AnalysisRecord:
        self._clock += timedelta(seconds=1)
        rec = AnalysisRecord(
            id=str(uuid.uuid4()),
            owner_id=owner_id,
            image_path=image_path,
            user_intent=user_intent,
            status=status,
            created_at=self._clock,
        )
        self.rows[rec.id] = rec
        return dataclasses.replace(rec)

    def get(self, analysis_id: str) -> Optional[AnalysisRecord]:
        rec = self.rows.get(analysis_id)
        return dataclasses.replace(rec) if rec else None

    def get_for_owner(self, analysis_id: str, owner_id: str) -> Optional[AnalysisRecord]:
        rec = self.rows.get(analysis_id)
        if not rec or rec.owner_id != owner_id:
            return None
        return dataclasses.replace(rec)

    def list_for_owner(self, owner_id: str) -> List[AnalysisRecord]:
        rows = [dataclasses.replace(r) for r in self.rows.values() if r.owner_id == owner_id]
        return sorted(rows, key=lambda r: r.created_at, reverse=True)

    def finish(self, analysis_id, status, ai_result=None, highlights=None) -> bool:
        self.finish_calls.append({"id": analysis_id, "status": status})
        rec = self.rows.get(analysis_id)
        if not rec or rec.status != STATUS_PROCESSING:
            return False
        self.rows[analysis_id] = dataclasses.replace(rec, status=status, ai_result=ai_result, highlights=highlights)
        return True

    def delete(self, analysis_id: str) -> None:
        self.rows.pop(analysis_id, None)


class FakeStorage:
    def __init__(self, root: str):
        self.root = root
        self.deleted: List[str] = []
        self.fail_delete = False

    def save_bytes(self, extension: str, data: bytes) -> str:
        path = os.path.join(self.root, f"{uuid.uuid4().hex}.{extension.lstrip('.')}")
        with open(path, "wb") as f:
            f.write(data)
        return path

    def delete(self, path: str) -> None:
        if self.fail_delete:
            raise OSError("disk is read-only")
        self.deleted.append(path)
        os.remove(path)


class FakeAI:
    """Returns a canned response; optionally waits for ``release()`` first."""

    def __init__(self, response: str = "ok", error: Optional[Exception] = None, gated: bool = False):
        self.response = response
        self.error = error
        self.prompts: List[str] = []
        self.image_paths: List[str] = []
        self._gate = asyncio.Event() if gated else None

    def release(self):
        self._gate.set()

    async def analyze(self, image_path: str, prompt: str) -> str:
        self.image_paths.append(image_path)
        self.prompts.append(prompt)
        if self._gate is not None:
            await self._gate.wait()
        if self.error is not None:
            raise self.error
        return self.response


class FakeUserRepo:
    def __init__(self):
        self.users: Dict[str, UserDto] = {}

    def get_by_email(self, email: str) -> Optional[UserDto]:
        for u in self.users.values():
            if u.email == email:
                return u
        return None

    def get_by_id(self, user_id: str) -> Optional[UserDto]:
        return self.users.get(user_id)

    def create(self, email: str, name: str, password_hash: str, age: Optional[int]) -> UserDto:
        now = datetime.now(timezone.utc)
        user = UserDto(
            id=str(uuid.uuid4()), email=email, name=name, password_hash=password_hash,
            age=age, status="pending", created_at=now, updated_at=now,
        )
        self.users[user.id] = user
        return user

    def delete(self, user_id: str) -> None:
        self.users.pop(user_id, None)


class FakeAuditLogger:
    def __init__(self):
        self.entries: List[Dict[str, Any]] = []

    def log(self, action, email, user_id=None, ip_address=None, success=True, details=None):
        self.entries.append({"action": action, "email": email, "user_id": user_id, "success": success,
                             "details": details or {}})


TEMPLATE = "Intent: {USER_INTENT}, W={IMAGE_WIDTH}, H={IMAGE_HEIGHT}"


@pytest.fixture
def analysis_repo():
    return FakeAnalysisRepo()


@pytest.fixture
def storage(tmp_path):
    return FakeStorage(str(tmp_path))


@pytest.fixture
def image_file(tmp_path):
    path = tmp_path / "screen.png"
    path.write_bytes(b"\x89PNG fake image bytes")
    return str(path)


@pytest.fixture
def make_service(analysis_repo, storage):
    def _make(ai, size=(800, 600)):
        return AnalysisService(
            analysis_repo=analysis_repo,
            ai_provider=ai,
            storage_repo=storage,
            prompt_builder=PromptBuilder(template=TEMPLATE),
            image_size_reader=lambda path: size,
        )
    return _make
