"""Shared fixtures: in-memory SQLite, app client with get_db overridden, users and tokens."""

import os

# Must be set before minimind is imported; settings are cached on first use
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["OPENAI_API_KEY"] = "sk-test"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_123"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test"
os.environ["STRIPE_PRICE_ID"] = "price_plus"
os.environ["ANONYMOUS_RATE_LIMIT_BACKEND"] = "memory"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from minimind.config import get_settings
from minimind.core.plans import Plan
from minimind.core.security import create_access_token
from minimind.db.base import Base, engine
from minimind.db.models import Profile
from minimind.dependencies import get_db
from minimind.main import app
from minimind.services import llm_service
from minimind.services.auth_service import register
from minimind.services.rate_limiter import build_anonymous_limiter

TestingSession = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db():
    """Fresh schema per test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    """TestClient sharing the test session, with a fresh anonymous limiter."""

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.state.anonymous_limiter = build_anonymous_limiter(get_settings())
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _make_user(db, email: str, plan: Plan = Plan.FREE):
    user, profile, _, _ = register(db, email=email, password="password123", name=None)
    if plan != Plan.FREE:
        profile.plan = plan.value
        db.commit()
    return user


def auth_headers(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(str(user.id))}"}


@pytest.fixture
def free_user(db):
    return _make_user(db, "free@example.com")


@pytest.fixture
def plus_user(db):
    return _make_user(db, "plus@example.com", plan=Plan.PLUS)


@pytest.fixture
def make_user(db):
    def factory(email: str, plan: Plan = Plan.FREE):
        return _make_user(db, email, plan=plan)

    return factory


@pytest.fixture
def fake_llm(monkeypatch):
    """Replace the OpenAI call. Set `.reply` to control the raw output; calls are recorded."""

    class FakeLLM:
        def __init__(self):
            self.reply = '{"kid": "a", "parent": "b", "fun": "c"}'
            self.calls = []
            self.error = None

        def __call__(self, prompt, temperature):
            self.calls.append((prompt, temperature))
            if self.error is not None:
                raise self.error
            return self.reply

    fake = FakeLLM()
    monkeypatch.setattr(llm_service, "generate_text", fake)
    return fake


def set_profile_plan(db, user, plan: Plan) -> None:
    profile = db.query(Profile).filter(Profile.user_id == user.id).first()
    profile.plan = plan.value
    db.commit()
