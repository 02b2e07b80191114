import itertools
import os
import tempfile
from types import SimpleNamespace

# settings are read at import time
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["DATABASE_URL"] = ""
os.environ["SMTP_HOST"] = ""
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("UPLOAD_FOLDER", tempfile.mkdtemp(prefix="athletehub-uploads-"))

import mongomock
import pytest
from fastapi.testclient import TestClient

from athletehub import db
from athletehub.auth import get_password_hash
from athletehub.db_init import ensure_indexes
from athletehub.main import app
from athletehub.utils.serialize import utcnow

PASSWORD = "Passw0rd1"

ATHLETE_BODY = {
    "display_name": "Arjun Rao",
    "date_of_birth": "2001-04-12T00:00:00Z",
    "gender": "male",
    "sports": ["athletics"],
    "primary_sport": "athletics",
    "address": {"city": "Pune", "state": "Maharashtra", "country": "India"},
}


@pytest.fixture(autouse=True)
def mock_db():
    #replace mongodb with mongomock in-memory
    db.use_client(mongomock.MongoClient())
    ensure_indexes()
    yield db.get_db()
    db.use_client(None)


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    from athletehub.storage import uploads
    monkeypatch.setattr(uploads, "UPLOAD_FOLDER", str(tmp_path))
    return tmp_path


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def make_user(client):
    """Insert a verified user with the given role and log them in."""
    counter = itertools.count()

    def _make(role="athlete"):
        email = f"{role}{next(counter)}@example.com"
        now = utcnow()
        doc = {
            "first_name": "Test",
            "last_name": role.title(),
            "email": email,
            "password": get_password_hash(PASSWORD),
            "role": role,
            "is_verified": True,
            "is_active": True,
            "refresh_token": None,
            "created_at": now,
            "updated_at": now,
        }
        db.users().insert_one(doc)
        res = client.post("/api/auth/login", json={"email": email, "password": PASSWORD})
        assert res.status_code == 200, res.text
        data = res.json()["data"]
        return SimpleNamespace(
            id=str(doc["_id"]),
            email=email,
            role=role,
            refresh_token=data["refresh_token"],
            headers={"Authorization": f"Bearer {data['token']}"},
        )

    return _make


@pytest.fixture
def athlete(client, make_user):
    """An athlete user together with their profile."""
    user = make_user("athlete")
    res = client.post("/api/athletes/", json=ATHLETE_BODY, headers=user.headers)
    assert res.status_code == 201, res.text
    return SimpleNamespace(id=res.json()["data"]["athlete"]["_id"], user=user)


@pytest.fixture
def coach(client, make_user, athlete):
    """A coach assigned to `athlete`."""
    user = make_user("coach")
    res = client.post(
        f"/api/athletes/{athlete.id}/coaches",
        json={"coach_id": user.id},
        headers=athlete.user.headers,
    )
    assert res.status_code == 200, res.text
    return user
