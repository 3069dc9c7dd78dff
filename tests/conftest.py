import os
import sys

import pytest

# Ensure project root is on sys.path so 'sketchtunes' and 'tests' import correctly
_TESTS_DIR = os.path.dirname(__file__)
_ROOT_DIR = os.path.abspath(os.path.join(_TESTS_DIR, os.pardir))
if _ROOT_DIR not in sys.path:
    sys.path.insert(0, _ROOT_DIR)

# Settings are read on import, so the environment must be in place first
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("FRONTEND_URL", "http://localhost:3000")
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-supabase-key")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "4")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from fastapi.testclient import TestClient

from tests.support.fakes import FakeSupabaseService, FakeMediaProbe


@pytest.fixture
def supabase():
    return FakeSupabaseService()


@pytest.fixture
def media_probe():
    return FakeMediaProbe()


@pytest.fixture
def app(supabase, media_probe):
    from sketchtunes.dependencies import get_media_probe, get_supabase_service
    from sketchtunes.main import app as application

    application.dependency_overrides[get_supabase_service] = lambda: supabase
    application.dependency_overrides[get_media_probe] = lambda: media_probe
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def user(supabase):
    from sketchtunes.services.password_service import hash_password

    return supabase.add_user(name="Demo User", email="demo@example.com", hashed_password=hash_password("password123"))


@pytest.fixture
def auth_headers(user):
    from sketchtunes.services.jwt_service import create_access_token

    return {"Authorization": f"Bearer {create_access_token(user['id'])}"}


@pytest.fixture
def track(supabase, user):
    return supabase.add_track(
        title="Midnight Groove (WIP)",
        artist_id=user["id"],
        url="https://cdn.example.com/midnight-groove.mp3",
        genre="Lofi Hip-Hop",
        daw="Ableton Live",
        production_stage="Sketch",
        duration=185,
    )
