import json

import pytest
from fastapi.testclient import TestClient

from kitchen_stories.db import init_db
from kitchen_stories.main import create_app
from kitchen_stories.repository import RecipeRepository
from kitchen_stories.schemas import RecipeFields
from kitchen_stories.settings import Settings

ADMIN_PASSWORD = "test-secret"

# Smallest valid PNG (1x1 transparent pixel)
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c6360000002000100e221bc33000000"
    "0049454e44ae426082"
)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        database_url="sqlite://",
        upload_dir=str(tmp_path / "uploads"),
        public_dir=str(tmp_path / "public"),
        admin_password=ADMIN_PASSWORD,
        seed_sample_data=False,
        rate_limit_enabled=False,
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def context(app):
    ctx = app.state.context
    init_db(ctx.engine)
    return ctx


@pytest.fixture
def client(app):
    """Test client; entering it runs the lifespan (tables, upload dir)."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db_session(context):
    """Direct database session for setup and assertions."""
    session = context.session_factory()
    yield session
    session.close()


@pytest.fixture
def repo(db_session, context):
    return RecipeRepository(db_session, context.storage)


@pytest.fixture
def admin_headers():
    return {"X-Admin-Password": ADMIN_PASSWORD}


def _make_fields(**overrides) -> RecipeFields:
    data = {
        "title": "Tea",
        "description": "A calming cup",
        "category": "drinks",
        "difficulty": "Easy",
        "prep_time": "1 min",
        "cook_time": "4 mins",
        "servings": "1 cup",
    }
    data.update(overrides)
    return RecipeFields(**data)


def _recipe_form(ingredients=None, instructions=None, **overrides) -> dict:
    """Multipart form fields as the web client sends them."""
    form = _make_fields(**overrides).model_dump(exclude_none=True)
    form["ingredients"] = json.dumps(
        ingredients if ingredients is not None else [{"group": "", "items": ["Tea bag", "Water"]}]
    )
    form["instructions"] = json.dumps(
        instructions if instructions is not None else ["Boil water", "Steep"]
    )
    return form


@pytest.fixture
def make_fields():
    """Factory for RecipeFields; defaults describe a cup of tea."""
    return _make_fields


@pytest.fixture
def recipe_form():
    return _recipe_form


@pytest.fixture
def png_bytes():
    return PNG_BYTES
