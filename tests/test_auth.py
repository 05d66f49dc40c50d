import pytest
from pymongo.errors import PyMongoError

from movie_api.core.security import PasswordHasher
from movie_api.data_access.mongo_client import UserRepository
from movie_api.services.auth_service import LocalStrategy, LoginState, RejectReason

from .conftest import TEST_SECRET, login, register, run


@pytest.fixture
def strategy(db):
    return LocalStrategy(db=db, hasher=PasswordHasher(rounds=4))


def _insert_user(db, username="carol", password="pa55word"):
    hashed = PasswordHasher(rounds=4).hash(password)
    run(db["users"].insert_one({
        "username": username, "password": hashed, "email": f"{username}@example.com",
        "birthday": None, "favoriteMovies": [],
    }))


def test_local_strategy_authenticates(db, strategy):
    _insert_user(db)
    outcome = run(strategy.authenticate("carol", "pa55word"))
    assert outcome.state is LoginState.AUTHENTICATED
    assert outcome.authenticated
    assert outcome.user.username == "carol"
    assert outcome.reason is None


def test_local_strategy_rejects_unknown_user(strategy):
    outcome = run(strategy.authenticate("nobody", "pa55word"))
    assert outcome.state is LoginState.REJECTED
    assert outcome.reason is RejectReason.USER_NOT_FOUND
    assert outcome.user is None


def test_local_strategy_rejects_bad_password(db, strategy):
    _insert_user(db)
    outcome = run(strategy.authenticate("carol", "wrong"))
    assert outcome.state is LoginState.REJECTED
    assert outcome.reason is RejectReason.BAD_PASSWORD
    assert outcome.user is None


def test_login_returns_user_and_verifiable_token(app, client):
    register(client)
    response = login(client)
    assert response.status_code == 200
    body = response.json()
    assert body["user"]["username"] == "alice"
    identity = app.state.token_service.verify(body["token"])
    assert identity["sub"] == "alice"
    assert identity["username"] == "alice"


def test_token_payload_does_not_carry_password_hash(app, client):
    register(client)
    token = login(client).json()["token"]
    assert "password" not in app.state.token_service.verify(token)


def test_login_with_wrong_password_gives_no_token(client):
    register(client)
    response = login(client, password="not-it")
    assert response.status_code == 400
    assert "token" not in response.json()


def test_login_with_unknown_user_gives_no_token(client):
    response = login(client, username="ghost")
    assert response.status_code == 400
    assert "token" not in response.json()
    # Same message whichever check failed
    assert response.json() == login(client, username="ghost", password="x").json()


def test_login_requires_both_fields(client):
    response = client.post("/login", json={"username": "alice"})
    assert response.status_code == 422
    assert response.json()["errors"][0]["param"] == "password"


def test_login_store_failure_is_opaque(client, monkeypatch):
    async def broken(self, username):
        raise PyMongoError("connection reset by mongo-secret-host")

    monkeypatch.setattr(UserRepository, "find_by_username", broken)
    response = login(client)
    assert response.status_code == 500
    assert "mongo-secret-host" not in response.text


def test_token_from_another_secret_is_refused_by_api(client):
    from movie_api.core.security import TokenService

    forged = TokenService(secret=TEST_SECRET + "-other").issue({"username": "alice"})
    response = client.get("/users", headers={"Authorization": f"Bearer {forged}"})
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"
