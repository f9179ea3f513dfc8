"""
Shared fixtures: an in-memory database, a signed-in instructor and
deterministic collaborators wired into the FastAPI app.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["OPENAI_API_KEY"] = ""

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.constants import QuestionType
from app.core.dependencies import (
    get_ai_service,
    get_current_active_user,
    get_db,
    get_exporter,
    get_file_storage,
    get_session_factory,
    get_text_extractor,
)
from app.core.exceptions import UpstreamUnavailableError
from app.core.helpers.extracter import MaterialTextExtractor
from app.main import app
from app.models import Base
from app.models.user import User
from app.services.ai_service import TemplateAIService
from app.services.export_service import QuizExporter
from app.services.file_service import LocalFileStorage

API = "/api/v1"


class FakeAIService(TemplateAIService):
    """Template generator with a recognizable model name and call log."""

    model_name = "fake-model"

    def __init__(self):
        self.question_calls = []

    def generate_question(self, question_type, objective_text, difficulty):
        self.question_calls.append((question_type, objective_text, difficulty))
        return super().generate_question(question_type, objective_text, difficulty)


class FailingAIService(TemplateAIService):
    """Every model call times out."""

    model_name = "failing-model"

    def generate_objectives(self, material_texts):
        raise UpstreamUnavailableError("AI provider timed out", "AI_GENERATION_ERROR")

    def generate_question(self, question_type, objective_text, difficulty):
        raise UpstreamUnavailableError("AI provider timed out", "AI_GENERATION_ERROR")


class FakeExtractor(MaterialTextExtractor):
    """Real file extraction, canned web pages."""

    pages = {
        "https://example.com/intro": "Students will understand recursion. Base cases stop the recursion.",
    }

    def extract_url(self, url: str) -> str:
        if url not in self.pages:
            raise ValueError(f"Failed to fetch URL: {url}")
        return self.pages[url]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory) -> Session:
    """Session for arranging data and asserting on it directly."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def _make_user(db: Session, email: str, username: str) -> User:
    user = User(email=email, username=username, full_name=username.title(), role="instructor", is_active=True)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def user(db) -> User:
    return _make_user(db, "instructor@example.com", "instructor")


@pytest.fixture
def other_user(db) -> User:
    return _make_user(db, "other@example.com", "other")


@pytest.fixture
def ai():
    return FakeAIService()


@pytest.fixture
def storage(tmp_path):
    return LocalFileStorage(base_dir=str(tmp_path / "uploads"))


@pytest.fixture
def exporter(tmp_path):
    return QuizExporter(export_dir=str(tmp_path / "exports"))


@pytest.fixture
def signed_in(user):
    """Mutable holder of the id the app treats as the caller."""
    return {"user_id": user.id}


@pytest.fixture
def client(session_factory, signed_in, ai, storage, exporter):
    state = signed_in

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    def override_current_user(session: Session = Depends(get_db)) -> User:
        return session.query(User).filter(User.id == state["user_id"]).one()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_active_user] = override_current_user
    app.dependency_overrides[get_ai_service] = lambda: ai
    app.dependency_overrides[get_file_storage] = lambda: storage
    app.dependency_overrides[get_exporter] = lambda: exporter
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_text_extractor] = lambda: FakeExtractor()

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def act_as(client, signed_in):
    """Switch the signed-in instructor for subsequent requests."""
    def _act_as(user: User) -> None:
        signed_in["user_id"] = user.id
    return _act_as


@pytest.fixture
def use_ai(client):
    """Replace the AI collaborator for subsequent requests."""
    def _use_ai(service) -> None:
        app.dependency_overrides[get_ai_service] = lambda: service
    return _use_ai


# Helpers building a quiz up to a given stage through the API

def create_folder(client, name="CS101"):
    response = client.post(f"{API}/folders/", json={"name": name})
    assert response.status_code == 201, response.text
    return response.json()


def create_text_material(client, folder_id, name="Notes", content="Students will understand recursion."):
    response = client.post(
        f"{API}/folders/{folder_id}/materials/text", json={"name": name, "content": content}
    )
    assert response.status_code == 201, response.text
    return response.json()


def create_quiz(client, folder_id, name="Quiz 1", **extra):
    response = client.post(f"{API}/folders/{folder_id}/quizzes", json={"name": name, **extra})
    assert response.status_code == 201, response.text
    return response.json()


def add_objectives(client, quiz_id, *texts):
    response = client.post(f"{API}/quizzes/{quiz_id}/objectives", json={"texts": list(texts)})
    assert response.status_code == 201, response.text
    return response.json()


def generate_plan(client, quiz_id, approach="support", questions_per_lo=3):
    response = client.post(
        f"{API}/quizzes/{quiz_id}/plans",
        json={"approach": approach, "questions_per_lo": questions_per_lo},
    )
    assert response.status_code == 201, response.text
    return response.json()


def approve_plan(client, plan_id):
    response = client.post(f"{API}/plans/{plan_id}/approve")
    assert response.status_code == 200, response.text
    return response.json()


def get_quiz(client, quiz_id):
    response = client.get(f"{API}/quizzes/{quiz_id}")
    assert response.status_code == 200, response.text
    return response.json()


def manual_question(client, quiz_id, objective_id, text="What is recursion?"):
    response = client.post(
        f"{API}/quizzes/{quiz_id}/questions",
        json={
            "learning_objective_id": objective_id,
            "type": QuestionType.FLASHCARD.value,
            "question_text": text,
            "content": {"front": text, "back": "A function calling itself"},
            "correct_answer": "A function calling itself",
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def quiz_with_objectives(client):
    """Folder CS101 with Quiz 1 holding two objectives."""
    folder = create_folder(client)
    quiz = create_quiz(client, folder["id"])
    objectives = add_objectives(
        client, quiz["id"], "Explain recursion", "Trace a recursive call stack"
    )
    return folder, quiz, objectives
