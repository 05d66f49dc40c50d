import importlib.util
import json
from pathlib import Path

import mongomock
import pytest

SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "seed_movies.py"


@pytest.fixture(scope="module")
def seed():
    spec = importlib.util.spec_from_file_location("seed_movies", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_bundled_catalog_is_valid(seed):
    movies = seed.load_movies(seed.DEFAULT_MOVIES_FILE)
    assert len(movies) >= 3
    assert all(m["genres"] and m["director"]["name"] for m in movies)


def test_load_rejects_entries_without_description(seed, tmp_path):
    path = tmp_path / "movies.json"
    path.write_text(json.dumps([{"title": "Untitled"}]))
    with pytest.raises(ValueError):
        seed.load_movies(str(path))


def test_upsert_by_title_is_idempotent(seed):
    db = mongomock.MongoClient()["seed_test"]
    movies = seed.load_movies(seed.DEFAULT_MOVIES_FILE)
    assert seed.upsert_movies(db, movies) == len(movies)
    seed.upsert_movies(db, movies)
    assert db["movies"].count_documents({}) == len(movies)


def test_upsert_updates_existing_title(seed):
    db = mongomock.MongoClient()["seed_test"]
    movies = seed.load_movies(seed.DEFAULT_MOVIES_FILE)
    seed.upsert_movies(db, movies)
    changed = dict(movies[0], featured=not movies[0].get("featured", False))
    assert seed.upsert_movies(db, [changed]) == 1
    stored = db["movies"].find_one({"title": changed["title"]})
    assert stored["featured"] == changed["featured"]
    assert db["movies"].count_documents({}) == len(movies)


def test_main_without_connection_uri_fails(seed, monkeypatch):
    monkeypatch.delenv("CONNECTION_URI", raising=False)
    monkeypatch.delenv("MONGODB_URI", raising=False)
    assert seed.main([]) == 1
