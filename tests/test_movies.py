from datetime import datetime, timedelta, timezone

from pymongo.errors import PyMongoError

from movie_api.data_access.mongo_client import MovieRepository

from .conftest import INCEPTION_ID, SILENCE_ID, auth_header


def test_movies_require_token(client):
    response = client.get("/movies")
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"
    assert "Inception" not in response.text
    assert set(response.json()) == {"detail"}


def test_movies_reject_garbage_token(client):
    response = client.get("/movies", headers=auth_header("garbage"))
    assert response.status_code == 401
    assert "Inception" not in response.text


def test_movies_reject_expired_token(app, client, alice):
    user, _ = alice
    stale = app.state.token_service.issue(
        {"username": user["username"]},
        now=datetime.now(timezone.utc) - timedelta(days=8),
    )
    response = client.get("/movies", headers=auth_header(stale))
    assert response.status_code == 401
    assert response.json()["detail"] == "Token has expired"


def test_list_movies(client, alice):
    _, headers = alice
    response = client.get("/movies", headers=headers)
    assert response.status_code == 200
    movies = response.json()
    assert [m["title"] for m in movies] == ["Silence of the Lambs", "The Shawshank Redemption", "Inception"]
    assert movies[0]["id"] == str(SILENCE_ID)
    assert movies[0]["director"] == {"name": "Jonathan Demme", "bio": "American director."}
    assert movies[0]["featured"] is True


def test_get_movie_by_id(client, alice):
    _, headers = alice
    response = client.get(f"/movies/{INCEPTION_ID}", headers=headers)
    assert response.status_code == 200
    assert response.json()["title"] == "Inception"


def test_get_movie_by_title(client, alice):
    _, headers = alice
    response = client.get("/movies/The Shawshank Redemption", headers=headers)
    assert response.status_code == 200
    assert response.json()["director"]["name"] == "Frank Darabont"


def test_get_unknown_movie_returns_null(client, alice):
    _, headers = alice
    assert client.get("/movies/Nothing", headers=headers).json() is None
    assert client.get("/movies/65a0000000000000000000ff", headers=headers).json() is None


def test_get_genre_returns_genres_of_first_match(client, alice):
    _, headers = alice
    response = client.get("/movies/genres/Drama", headers=headers)
    assert response.status_code == 200
    assert response.json() == [{"name": "Drama", "description": "Realistic characters."}]


def test_get_genre_from_multi_genre_movie(client, alice):
    _, headers = alice
    response = client.get("/movies/genres/Crime", headers=headers)
    assert [g["name"] for g in response.json()] == ["Thriller", "Crime"]


def test_get_unknown_genre_is_not_found(client, alice):
    _, headers = alice
    response = client.get("/movies/genres/Western", headers=headers)
    assert response.status_code == 404


def test_get_director(client, alice):
    _, headers = alice
    response = client.get("/movies/directors/Christopher Nolan", headers=headers)
    assert response.status_code == 200
    assert response.json() == {"name": "Christopher Nolan", "bio": "British-American filmmaker."}


def test_get_unknown_director_is_not_found(client, alice):
    _, headers = alice
    response = client.get("/movies/directors/Nobody", headers=headers)
    assert response.status_code == 404


def test_genre_requires_token(client):
    assert client.get("/movies/genres/Drama").status_code == 401


def test_list_movies_store_failure(client, alice, monkeypatch):
    _, headers = alice

    async def broken(self):
        raise PyMongoError("secret detail")

    monkeypatch.setattr(MovieRepository, "find_all", broken)
    response = client.get("/movies", headers=headers)
    assert response.status_code == 500
    assert "secret detail" not in response.text
