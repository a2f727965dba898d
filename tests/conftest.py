"""
Pytest fixtures: in-memory database, API client, and fakes for the two
external services (emission estimator and Gemini).
"""
import os

os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ.pop("GEMINI_API_KEY", None)
os.environ.pop("CLIMATE_API_KEY", None)

import pytest
import requests
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from ecopack.calculator import Co2eCalculator, get_calculator
from ecopack.config import get_settings
from ecopack.database import Base, get_db
from ecopack.gemini_client import GeminiError
from ecopack.main import app, get_gemini


class FakeEmissionService:
    """Stands in for ClimateServiceClient. ``value`` may be an exception to raise."""

    def __init__(self, value=None, configured=True):
        self.value = value
        self.configured = configured
        self.calls = []

    def estimate(self, category, activity, amount, unit):
        self.calls.append((category, activity, amount, unit))
        if isinstance(self.value, Exception):
            raise self.value
        return self.value


class FakeGemini:
    """Stands in for GeminiClient. ``replies`` maps model id -> text or exception."""

    def __init__(self, replies=None, configured=True):
        self.replies = replies or {}
        self.configured = configured
        self.calls = []

    def generate_text(self, prompt, model, **kwargs):
        self.calls.append(model)
        reply = self.replies.get(model, GeminiError(f"{model}: HTTP 404"))
        if isinstance(reply, Exception):
            raise reply
        return reply

    def probe_models(self, models):
        return {m: {"status": "success", "response": "hello"} for m in models}


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self.ok = 200 <= status_code < 300
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("no JSON")
        return self._payload


class FakeSession:
    """Minimal requests.Session double recording posts."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.posts = []

    def post(self, url, **kwargs):
        self.posts.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def db_session():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def gemini():
    return FakeGemini(configured=False)


@pytest.fixture
def calculator():
    return Co2eCalculator()


@pytest.fixture
def client(db_session, gemini, calculator):
    def _get_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_gemini] = lambda: gemini
    app.dependency_overrides[get_calculator] = lambda: calculator
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def auth_token(client):
    resp = client.post("/signup", json={
        "first_name": "Asha", "last_name": "Rao", "email": "asha@example.com", "password": "s3cret-pass",
    })
    assert resp.status_code == 200
    return resp.json()["token"]


@pytest.fixture
def network_error():
    return requests.ConnectionError("connection refused")
