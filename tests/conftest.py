import mongomock
import pytest
from fastapi.testclient import TestClient

from chatterbox.config import Settings
from chatterbox.database import Database
from chatterbox.main import create_app


class FakePayments:
    def __init__(self):
        self.calls = []

    def create_intent(self, email):
        self.calls.append(email)
        return "pi_123_secret_456"


@pytest.fixture
def settings():
    return Settings(jwt_secret="test-secret", environment="test", free_post_limit=5)


@pytest.fixture
def database(settings):
    return Database(settings.mongo_uri, settings.database_name, client=mongomock.MongoClient())


@pytest.fixture
def payments():
    return FakePayments()


@pytest.fixture
def client(settings, database, payments):
    app = create_app(settings=settings, database=database, payments=payments)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def login(client):
    def _login(email):
        client.cookies.clear()
        res = client.post("/authentication", json={"email": email})
        assert res.status_code == 200
    return _login


@pytest.fixture
def make_user(client, database):
    """Register a user, leaving the client signed in as them."""

    def _make(email, username="tester", role="user", membership="Free"):
        client.cookies.clear()
        res = client.post("/users", json={"email": email, "username": username})
        assert res.status_code == 200, res.json()
        database["users"].update_one(
            {"email": email}, {"$set": {"role": role, "membershipStatus": membership}}
        )
        return res.json()["insertedId"]

    return _make


@pytest.fixture
def create_post(client):
    """Create a post as the currently signed-in user."""

    def _create(email, **overrides):
        body = {
            "authorEmail": email,
            "authorName": "Tester",
            "authorImage": "https://example.com/avatar.png",
            "title": "Hello",
            "description": "First words",
            "tags": ["tech"],
        }
        body.update(overrides)
        res = client.post("/posts", json=body)
        assert res.status_code == 200, res.json()
        return res.json()["insertedId"]

    return _create


@pytest.fixture
def create_comment(client):
    def _create(email, post_id, text="Nice post"):
        body = {
            "authorEmail": email,
            "authorName": "Tester",
            "authorImage": "https://example.com/avatar.png",
            "postId": post_id,
            "comment": text,
        }
        res = client.post("/comments", json=body)
        assert res.status_code == 200, res.json()
        return res.json()["insertedId"]

    return _create
