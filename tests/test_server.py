from fastapi.testclient import TestClient

from movie_api.data_access.mongo_client import MovieRepository


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.text == "Welcome to the Movie-API!"


def test_documentation(client):
    response = client.get("/documentation")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "/users" in response.text


def test_request_without_origin_is_served(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "access-control-allow-origin" not in response.headers


def test_allowed_origin_gets_cors_header(client):
    response = client.get("/", headers={"Origin": "http://localhost:4200"})
    assert response.headers["access-control-allow-origin"] == "http://localhost:4200"


def test_unlisted_origin_gets_no_cors_header(client):
    response = client.get("/", headers={"Origin": "https://evil.example"})
    assert "access-control-allow-origin" not in response.headers


def test_origin_match_is_exact(client):
    response = client.get("/", headers={"Origin": "http://localhost:4200/"})
    assert "access-control-allow-origin" not in response.headers


def test_preflight_from_unlisted_origin_is_refused(client):
    response = client.options(
        "/movies",
        headers={"Origin": "https://evil.example", "Access-Control-Request-Method": "GET"},
    )
    assert response.status_code == 400


def test_missing_database_is_service_unavailable(app, client):
    app.state.db = None
    response = client.post("/users", json={"username": "alice", "password": "pw", "email": "a@b.com"})
    assert response.status_code == 503


def test_unhandled_error_is_generic_500(app, alice, monkeypatch):
    _, headers = alice

    async def broken(self):
        raise RuntimeError("unexpected internal state")

    monkeypatch.setattr(MovieRepository, "find_all", broken)
    client = TestClient(app, raise_server_exceptions=False)
    response = client.get("/movies", headers=headers)
    assert response.status_code == 500
    assert response.text == "Something broke!"
