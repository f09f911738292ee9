import asyncio

from fastapi.testclient import TestClient

from fact_feed.adapters.notify_log import CollectingNotifier
from fact_feed.adapters.store_json import JsonFileFactStore
from fact_feed.app.api import create_app
from fact_feed.domain.errors import StoreError
from fact_feed.use_cases.feed import FETCH_ALERT, FactFeed


def _client(tmp_path, seed=()):
    store = JsonFileFactStore(str(tmp_path / "facts.json"))
    for text, category in seed:
        asyncio.run(store.insert_fact(text, "https://example.com", category))
    feed = FactFeed(store, CollectingNotifier())
    return TestClient(create_app(feed=feed)), feed


def test_health_and_categories(tmp_path):
    client, _ = _client(tmp_path)
    with client:
        assert client.get("/health").json() == {"ok": True}
        cats = client.get("/categories").json()
        assert cats[0] == {"name": "technology", "color": "#3b82f6"}
        assert len(cats) == 8


def test_feed_is_loaded_on_startup_and_filtered(tmp_path):
    client, _ = _client(tmp_path, seed=[("a", "science"), ("b", "news"), ("c", "science")])
    with client:
        body = client.get("/feed").json()
        assert body["filter"] == "all"
        assert body["loading"] is False
        assert len(body["facts"]) == 3
        assert body["alerts"] == []

        r = client.post("/feed/filter", json={"category": "science"})
        assert r.status_code == 200
        assert r.json()["applied"] is True

        body = client.get("/feed").json()
        assert body["filter"] == "science"
        assert {f["category"] for f in body["facts"]} == {"science"}
        assert all(f["color"] == "#16a34a" for f in body["facts"])

        assert client.post("/feed/filter", json={"category": "astrology"}).status_code == 422


def test_submit_fact(tmp_path):
    client, feed = _client(tmp_path, seed=[("old", "news")])
    with client:
        r = client.post(
            "/facts",
            json={"text": "The sky is blue", "source": "https://example.com/proof", "category": "science"},
        )
        assert r.status_code == 201
        created = r.json()
        assert created["voteInteresting"] == 0

        facts = client.get("/feed").json()["facts"]
        assert facts[0]["id"] == created["id"]
        assert feed.form.is_open is False

        r = client.post("/facts", json={"text": "hi", "source": "not-a-url", "category": "science"})
        assert r.status_code == 422
        assert r.json()["detail"]["problems"] == ["source_invalid"]
        assert client.get("/feed").json()["form"]["text"] == "hi"
        assert len(feed.facts) == 2


def test_vote(tmp_path):
    client, _ = _client(tmp_path, seed=[("a", "science")])
    with client:
        fid = client.get("/feed").json()["facts"][0]["id"]

        r = client.post(f"/facts/{fid}/votes/interesting")
        assert r.status_code == 200
        assert r.json()["voteInteresting"] == 1

        r = client.post(f"/facts/{fid}/votes/voteInteresting")
        assert r.json()["voteInteresting"] == 2
        assert client.get("/feed").json()["facts"][0]["voteInteresting"] == 2

        assert client.post(f"/facts/{fid}/votes/boring").status_code == 422
        assert client.post("/facts/999/votes/interesting").status_code == 404


class _BrokenStore:
    async def fetch_facts(self, filter):
        raise StoreError("down", status=503)

    async def insert_fact(self, text, source, category):
        raise StoreError("down", status=503)

    async def increment_vote(self, fact_id, vote_field):
        raise StoreError("down", status=503)


def test_store_failures(tmp_path):
    notifier = CollectingNotifier()
    app = create_app(feed=FactFeed(_BrokenStore(), notifier))
    with TestClient(app) as client:
        body = client.get("/feed").json()
        assert body["alerts"] == [FETCH_ALERT]
        assert body["loading"] is False
        assert client.get("/feed").json()["alerts"] == []

        r = client.post("/facts", json={"text": "t", "source": "https://x.com", "category": "news"})
        assert r.status_code == 502
        assert client.get("/feed").json()["alerts"] == []
