# tests/conftest.py
import io
import os
import shutil
import tempfile
from pathlib import Path

import pytest
from PIL import Image
from fastapi.testclient import TestClient

# point the module-level app at a throw-away directory before anything
# imports beautyshelf.main
_tmp_root = tempfile.mkdtemp(prefix="test_beautyshelf_")
os.environ["DATA_BACKEND"] = "file"
os.environ["DATA_DIR"] = str(Path(_tmp_root) / "data")
os.environ["STORAGE_DIR"] = str(Path(_tmp_root) / "storage")

from beautyshelf.config import Settings  # noqa: E402
from beautyshelf.core.security import create_access_token  # noqa: E402
from beautyshelf.main import create_app  # noqa: E402


def pytest_sessionfinish(session, exitstatus):
    shutil.rmtree(_tmp_root, ignore_errors=True)


@pytest.fixture
def settings(tmp_path):
    """Settings bound to an isolated data/storage directory, AI disabled."""
    return Settings(
        _env_file=None,
        ENV="development",
        DATA_BACKEND="file",
        DATA_DIR=tmp_path / "data",
        STORAGE_DIR=tmp_path / "storage",
        PUBLIC_BASE_URL="http://testserver",
        JWT_SECRET="test-secret",
        OPENAI_API_KEY=None,
        PHOTO_DEBUG=True,
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def photo_bucket(settings):
    """Create the default photo bucket on the local storage backend."""
    path = settings.STORAGE_DIR / "product-photos"
    path.mkdir(parents=True, exist_ok=True)
    return path


@pytest.fixture
def token_for(settings):
    """
    Issue a session token for a user id.
    Usage: token = token_for("user-1")
    """
    def _fn(user_id: str = "user-1", email=None):
        return create_access_token(settings, user_id, email=email or f"{user_id}@example.com")
    return _fn


@pytest.fixture
def auth_header(token_for):
    """
    Build an Authorization header for a user id.
    Usage: hdr = auth_header("user-1")
    """
    def _h(user_id: str = "user-1"):
        return {"Authorization": f"Bearer {token_for(user_id)}"}
    return _h


@pytest.fixture
def create_product(client, auth_header):
    """
    Create a product through the API and return the JSON body.
    Usage: p = create_product("Serum", brand="Ordinary", rating=5, user_id="u1")
    """
    def _fn(name: str, user_id: str = "user-1", **fields):
        payload = {"name": name, **fields}
        r = client.post("/api/products/", json=payload, headers=auth_header(user_id))
        assert r.status_code == 201, r.text
        return r.json()
    return _fn


@pytest.fixture
def make_sample_jpeg_bytes():
    """
    Return a callable that generates JPEG bytes for tests that need image uploads.
    Usage: jpg = make_sample_jpeg_bytes(size=(200,200))
    """
    def _fn(size=(200, 200), color=(180, 120, 60)):
        bio = io.BytesIO()
        im = Image.new("RGB", size, color)
        im.save(bio, format="JPEG", quality=85)
        bio.seek(0)
        return bio.read()
    return _fn
