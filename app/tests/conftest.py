import json
from types import SimpleNamespace

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.db.base import Base
from app.db.session import get_db
from app.engine.attempt import AttemptRegistry
from app.main import app as fastapi_app
from app.models.assessment import Assessment
from app.models.candidate import Candidate
from app.models.college import College, CollegeCandidate
from app.services.ai import StructuredExtractor, get_extractor
from app.services.attempts import AttemptService, get_attempt_service
from app.services.mail import MailClient
from app.services.notifications import NotificationService, get_notification_service
from app.storage.object_store import LocalObjectStore, get_object_store

SECTIONS = [
    {
        "id": "s1",
        "title": "Basics",
        "questions": [
            {"id": "q1", "text": "Your name?", "type": "text"},
            {
                "id": "q2",
                "text": "Pick one",
                "type": "multiple-choice",
                "options": ["A", "B", "C"],
                "points": 5,
                "correct_answer": "B",
            },
        ],
    },
    {
        "id": "s2",
        "title": "Details",
        "questions": [
            {
                "id": "q3",
                "text": "Pick many",
                "type": "checkbox",
                "options": ["X", "Y", "Z"],
                "points": 3,
                "correct_answer": ["X", "Z"],
            },
            {"id": "q4", "text": "Upload your CV", "type": "file-upload"},
            {"id": "q5", "text": "Start date", "type": "date"},
        ],
    },
]


# -------------------------
# Database
# -------------------------

@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def make_assessment(db):
    def _make(**overrides):
        data = {
            "title": "Backend Engineer Screening",
            "passcode": None,
            "time_limit": None,
            "authentication": "none",
            "sections": SECTIONS,
        }
        data.update(overrides)
        row = Assessment(**data)
        db.add(row)
        db.commit()
        db.refresh(row)
        return row

    return _make


@pytest.fixture
def applicant(db):
    row = Candidate(full_name="Jane Doe", email="Jane@X.com", position="Backend Engineer")
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


@pytest.fixture
def college(db):
    row = College(name="City Institute of Technology", location="Pune")
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


@pytest.fixture
def college_candidate(db, college):
    row = CollegeCandidate(college_id=college.id, name="Ravi Kumar", email="ravi@college.edu")
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


# -------------------------
# Collaborators
# -------------------------

@pytest.fixture
def store(tmp_path):
    return LocalObjectStore(str(tmp_path / "storage"), "http://testserver")


class Outbox:
    """Records requests sent to the mail API; can reject chosen recipients."""

    def __init__(self):
        self.sent = []
        self.reject = set()

    def handler(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        address = payload["to"][0]["email_address"]["address"]
        if address in self.reject:
            return httpx.Response(500, json={"error": "rejected"})
        self.sent.append({"headers": dict(request.headers), "payload": payload})
        return httpx.Response(201, json={"data": [], "message": "OK"})


@pytest.fixture
def outbox():
    return Outbox()


@pytest.fixture
def mail_client(outbox):
    return MailClient(
        url="https://mail.test/",
        token="test-token",
        from_address="no-reply@test.local",
        from_name="Test Hiring",
        transport=httpx.MockTransport(outbox.handler),
    )


@pytest.fixture
def notifications(mail_client):
    return NotificationService(mail_client)


class FakeCompletions:
    def __init__(self, replies):
        self.replies = list(replies)
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        content = self.replies.pop(0)
        message = SimpleNamespace(content=content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _fake_llm(*replies):
    """Object shaped like ``openai.OpenAI`` for ``chat.completions.create``."""
    completions = FakeCompletions(replies)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


@pytest.fixture
def fake_llm():
    return _fake_llm


@pytest.fixture
def attempt_service(store, session_factory):
    return AttemptService(AttemptRegistry(), store, session_factory)


# -------------------------
# API client
# -------------------------

@pytest.fixture
def client(session_factory, attempt_service, store, notifications):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_attempt_service] = lambda: attempt_service
    fastapi_app.dependency_overrides[get_object_store] = lambda: store
    fastapi_app.dependency_overrides[get_notification_service] = lambda: notifications

    yield TestClient(fastapi_app)

    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def override_extractor():
    def _override(*replies):
        extractor = StructuredExtractor(client=_fake_llm(*replies), model="test-model")
        fastapi_app.dependency_overrides[get_extractor] = lambda: extractor
        return extractor

    return _override
