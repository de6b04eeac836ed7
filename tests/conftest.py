import json
import os
import sys
import time

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# Settings are read at import time
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from tortoise import Tortoise  # noqa: E402

TEST_SECRET = os.environ["SECRET_KEY"]


@pytest_asyncio.fixture(scope="function")
async def db() -> None:
    """Lightweight in-memory DB per test."""
    await Tortoise.init(
        db_url="sqlite://:memory:", modules={"models": ["linguaquest.database.models"]}
    )
    await Tortoise.generate_schemas()
    yield
    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def user(db):
    """Create a fresh learner (XP 0, levels 1, no streak)."""
    from linguaquest.database.models import User

    user = await User.create(email="learner@example.com", name="Learner")
    return user


@pytest_asyncio.fixture
async def grammar_exercise(db):
    from linguaquest.database.models import Exercise

    return await Exercise.create(
        type="grammar",
        difficulty="easy",
        title="Past simple in emails",
        content={"questions": []},
    )


@pytest_asyncio.fixture
async def exercises(db):
    """One exercise per type, keyed by type."""
    from linguaquest.database.models import Exercise

    created = {}
    for exercise_type in ("grammar", "vocabulary", "listening", "speaking", "reading", "writing"):
        created[exercise_type] = await Exercise.create(
            type=exercise_type,
            difficulty="medium",
            title=f"{exercise_type.capitalize()} practice",
            content={},
        )
    return created


def session_header(user_id: int, email: str = "learner@example.com", name: str = "Learner") -> dict:
    """Authorization header with valid signed session data."""
    from linguaquest.interfaces.api.auth import sign_session_data

    data = {
        "user": json.dumps({"id": user_id, "email": email, "name": name}),
        "auth_date": str(int(time.time())),
    }
    return {"Authorization": f"session {sign_session_data(data, TEST_SECRET)}"}


@pytest.fixture
def auth_header():
    """Factory for signed Authorization headers."""
    return session_header
