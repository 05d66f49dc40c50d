import asyncio
import copy

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from movie_api.core.config import Settings
from movie_api.data_access.mongo_client import UserRepository
from movie_api.server import create_app

TEST_SECRET = "test-secret"

SILENCE_ID = ObjectId("65a000000000000000000001")
SHAWSHANK_ID = ObjectId("65a000000000000000000002")
INCEPTION_ID = ObjectId("65a000000000000000000003")

MOVIES = [
    {
        "_id": SILENCE_ID,
        "title": "Silence of the Lambs",
        "description": "An FBI cadet seeks the help of an imprisoned killer.",
        "genres": [
            {"name": "Thriller", "description": "Suspense."},
            {"name": "Crime", "description": "Criminals."},
        ],
        "director": {"name": "Jonathan Demme", "bio": "American director."},
        "imagePath": "silenceofthelambs.png",
        "featured": True,
    },
    {
        "_id": SHAWSHANK_ID,
        "title": "The Shawshank Redemption",
        "description": "Two imprisoned men bond over a number of years.",
        "genres": [{"name": "Drama", "description": "Realistic characters."}],
        "director": {"name": "Frank Darabont", "bio": "Hungarian-American director."},
        "imagePath": "shawshank.png",
        "featured": False,
    },
    {
        "_id": INCEPTION_ID,
        "title": "Inception",
        "description": "A thief plants an idea through dream-sharing.",
        "genres": [
            {"name": "Action", "description": "Stunts."},
            {"name": "Drama", "description": "Realistic characters."},
        ],
        "director": {"name": "Christopher Nolan", "bio": "British-American filmmaker."},
        "imagePath": "inception.png",
        "featured": True,
    },
]


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def settings():
    # Cheapest bcrypt work factor keeps the suite fast
    return Settings(_env_file=None, JWT_SECRET=TEST_SECRET, PASSWORD_HASH_ROUNDS=4)


@pytest.fixture
def db():
    database = AsyncMongoMockClient()["movie_api_test"]
    run(database["movies"].insert_many(copy.deepcopy(MOVIES)))
    run(UserRepository(database).ensure_indexes())
    return database


@pytest.fixture
def app(settings, db):
    application = create_app(settings)
    application.state.db = db
    return application


@pytest.fixture
def client(app):
    # Not used as a context manager: the lifespan would connect to a real MongoDB
    return TestClient(app)


def register(client, username="alice", password="secret1", email="alice@example.com", **extra):
    body = {"username": username, "password": password, "email": email, **extra}
    return client.post("/users", json=body)


def login(client, username="alice", password="secret1"):
    return client.post("/login", json={"username": username, "password": password})


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def alice(client):
    """Registered and logged-in user: (user json, auth headers)."""
    assert register(client).status_code == 201
    response = login(client)
    assert response.status_code == 200
    body = response.json()
    return body["user"], auth_header(body["token"])


@pytest.fixture
def bob(client):
    assert register(client, username="bob", password="hunter22", email="bob@example.com").status_code == 201
    body = login(client, username="bob", password="hunter22").json()
    return body["user"], auth_header(body["token"])
