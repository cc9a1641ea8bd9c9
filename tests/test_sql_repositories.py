import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine

from app.db.session import create_db_and_tables
from app.infrastructure.persistence.sqlalchemy.repositories.analysis_repository_sql import SqlAnalysisRepository
from app.infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository


@pytest.fixture
def engine():
    eng = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    create_db_and_tables(eng)
    return eng


@pytest.fixture
def users(engine):
    return SqlUserRepository(engine)


@pytest.fixture
def analyses(engine):
    return SqlAnalysisRepository(engine)


@pytest.fixture
def owner(users):
    return users.create(email="owner@example.com", name="Owner", password_hash="x", age=None)


def test_user_roundtrip_and_status(users, owner):
    assert users.get_by_email("owner@example.com").id == owner.id
    assert users.get_by_id(owner.id).status == "pending"

    users.set_status(owner.id, "approved")

    assert users.get_by_id(owner.id).status == "approved"
    assert users.get_by_email("missing@example.com") is None


def test_create_and_finish_analysis(analyses, owner):
    rec = analyses.create(owner.id, "uploads/a.png", "sign up fast", "processing")
    assert rec.status == "processing"
    assert rec.ai_result is None and rec.highlights is None

    highlights = [{"id": 1, "element": "button", "coordinates": {"x": 1, "y": 2, "width": 3, "height": 4}}]
    assert analyses.finish(rec.id, "completed", "report", highlights) is True

    stored = analyses.get(rec.id)
    assert stored.status == "completed"
    assert stored.ai_result == "report"
    assert stored.highlights == highlights


def test_finish_is_single_write(analyses, owner):
    rec = analyses.create(owner.id, "uploads/a.png", "intent", "processing")

    assert analyses.finish(rec.id, "failed") is True
    assert analyses.finish(rec.id, "completed", "late report", []) is False

    stored = analyses.get(rec.id)
    assert stored.status == "failed"
    assert stored.ai_result is None


def test_finish_after_delete_does_not_recreate(analyses, owner):
    rec = analyses.create(owner.id, "uploads/a.png", "intent", "processing")
    analyses.delete(rec.id)

    assert analyses.finish(rec.id, "completed", "report", []) is False
    assert analyses.get(rec.id) is None


def test_owner_scoping_and_ordering(analyses, users, owner):
    other = users.create(email="other@example.com", name="Other", password_hash="x", age=20)
    first = analyses.create(owner.id, "uploads/1.png", "one", "processing")
    second = analyses.create(owner.id, "uploads/2.png", "two", "processing")
    foreign = analyses.create(other.id, "uploads/3.png", "three", "processing")

    assert analyses.get_for_owner(foreign.id, owner.id) is None
    assert analyses.get_for_owner(first.id, owner.id).id == first.id
    assert [r.id for r in analyses.list_for_owner(owner.id)] == [second.id, first.id]


def test_deleting_user_removes_their_analyses(analyses, users, owner):
    rec = analyses.create(owner.id, "uploads/a.png", "intent", "processing")

    users.delete(owner.id)

    assert users.get_by_id(owner.id) is None
    assert analyses.get(rec.id) is None
