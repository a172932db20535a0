import os
import tempfile
from datetime import datetime, timedelta, timezone

# settings are read at import time, so the test environment goes in first
_DB_DIR = tempfile.mkdtemp(prefix="fitcoach-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["ALGORITHM"] = "HS256"
os.environ["CLERK_WEBHOOK_SECRET"] = "whsec_MfKQ9r8GKYqrTwjUPD8ILPZIo2LaLaSw"
os.environ["AZURE_OPENAI_ENDPOINT"] = "https://example.invalid/"
os.environ["AZURE_OPENAI_KEY"] = "test-key"

import pytest
import sqlalchemy
from fastapi.testclient import TestClient
from jose import jwt

from fitcoach.core.exceptions import GenerationError
from fitcoach.database import Base, engine
from fitcoach.main import app
from fitcoach.utils import openai_client


@pytest.fixture(scope="session")
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(autouse=True)
def clean_tables(client):
    yield
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


class FakeGenerator:
    """Stands in for the chat-completions helpers; replies are served in order."""

    def __init__(self):
        self.json_replies = []
        self.text_replies = []
        self.calls = []

    async def generate_json(self, messages, temperature=0.4):
        self.calls.append(messages)
        if not self.json_replies:
            raise GenerationError("Text generation failed: no reply queued")
        reply = self.json_replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def generate_text(self, messages, temperature=0.4, max_tokens=1500):
        self.calls.append(messages)
        if not self.text_replies:
            raise GenerationError("Text generation failed: no reply queued")
        return self.text_replies.pop(0)


@pytest.fixture(autouse=True)
def llm(monkeypatch):
    fake = FakeGenerator()
    monkeypatch.setattr(openai_client, "generate_json", fake.generate_json)
    monkeypatch.setattr(openai_client, "generate_text", fake.generate_text)
    return fake


def create_access_token(data: dict, expires_minutes: int = 60) -> str:
    """Sign a token the way the identity provider does, with the test secret."""
    claims = {**data, "exp": datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)}
    return jwt.encode(claims, os.environ["SECRET_KEY"], algorithm=os.environ["ALGORITHM"])


def insert_row(table: str, **values) -> int:
    with engine.begin() as conn:
        result = conn.execute(sqlalchemy.insert(Base.metadata.tables[table]).values(**values))
        return result.inserted_primary_key[0]


def fetch_rows(table: str, **filters) -> list[dict]:
    model = Base.metadata.tables[table]
    query = sqlalchemy.select(model)
    for key, value in filters.items():
        query = query.where(model.c[key] == value)
    with engine.connect() as conn:
        return [dict(row._mapping) for row in conn.execute(query.order_by(model.c.id))]


@pytest.fixture
def user():
    user_id = insert_row(
        "users",
        external_id="user_test",
        name="Test User",
        email="test@example.com",
        weight_kg=80.0,
        height_cm=180.0,
        age=30,
        experience_level="intermediate",
        equipment_access='{"kind": "full_gym"}',
        injuries="[]",
    )
    return {"id": user_id, "external_id": "user_test"}


@pytest.fixture
def auth(user):
    token = create_access_token({"sub": user["external_id"]})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def catalog():
    """A small exercise catalog keyed by name."""
    exercises = [
        ("Bench Press", "chest", True),
        ("Incline Dumbbell Press", "chest", True),
        ("Chest Cable Fly", "chest", False),
        ("Barbell Row", "upper back", True),
        ("Face Pull", "upper back", False),
        ("Lat Pulldown", "lats", True),
        ("Straight Arm Pulldown", "lats", False),
        ("Squat", "quads", True),
        ("Leg Extension", "quads", False),
        ("Bicep Curl", "biceps", False),
    ]
    return {
        name: insert_row(
            "exercises", name=name, body_part=body_part, is_compound=compound, equipment="barbell", instructions="[]"
        )
        for name, body_part, compound in exercises
    }


@pytest.fixture
def meals():
    items = [
        ("Oatmeal Bowl", 450, '["breakfast"]'),
        ("Egg Scramble", 520, '["breakfast"]'),
        ("Chicken Rice", 650, '["lunch", "dinner"]'),
        ("Salmon Salad", 600, '["lunch", "dinner"]'),
        ("Protein Shake", 250, '["snack"]'),
        ("Greek Yogurt", 200, '["snack"]'),
    ]
    return {
        name: insert_row(
            "meals", name=name, foods='["food"]', calories=calories, instructions='["cook"]', meal_type=meal_type
        )
        for name, calories, meal_type in items
    }
