from types import SimpleNamespace

import httpx
import pytest
from fastapi.testclient import TestClient
from openai import AsyncOpenAI, OpenAIError

from conftest import FakeResponse, FakeSession
from itineria.api import routes_chat, routes_itinerary, routes_places, routes_profile
from itineria.db.itinerary_store import ItineraryStore
from itineria.main import app
from itineria.services.chat_client import ChatClient
from itineria.services.places_client import PlacesClient
from itineria.services.profile_store import JsonFileBackend, ProfileStore


@pytest.fixture
def client(tmp_path, monkeypatch):
    store = ItineraryStore(tmp_path / "api.sqlite3")
    profile_store = ProfileStore(JsonFileBackend(tmp_path / "profile.json"))
    monkeypatch.setattr(routes_itinerary, "store", store)
    monkeypatch.setattr(routes_itinerary, "profile_store", profile_store)
    monkeypatch.setattr(routes_profile, "profile_store", profile_store)
    yield TestClient(app)
    store.close()


def _create(client, name="Japan", **extra):
    resp = client.post("/itineraries/", json={"trip_name": name, **extra})
    assert resp.status_code == 201
    return resp.json()


def test_root(client):
    assert client.get("/").json()["status"] == "ok"


def test_itinerary_crud(client):
    created = _create(client, trip_start_date="2024-01-01T00:00:00", trip_description="Cherry blossoms")
    assert "photo" not in created

    fetched = client.get(f"/itineraries/{created['id']}").json()
    assert fetched["trip_description"] == "Cherry blossoms"
    assert fetched["items"] == []

    patched = client.patch(f"/itineraries/{created['id']}", json={"trip_name": "Japan 2024"}).json()
    assert patched["trip_name"] == "Japan 2024"
    assert patched["trip_description"] == "Cherry blossoms"

    assert [i["id"] for i in client.get("/itineraries/", params={"name": "japan"}).json()] == [created["id"]]
    assert client.get("/itineraries/", params={"name": "peru"}).json() == []

    assert client.delete(f"/itineraries/{created['id']}").json()["ok"] is True
    assert client.get(f"/itineraries/{created['id']}").status_code == 404


def test_planner_items(client):
    itinerary = _create(client)
    resp = client.post(f"/itineraries/{itinerary['id']}/items", json={"destination": "Kyoto", "notes": "Temples"})
    assert resp.status_code == 201
    item = resp.json()
    assert item["itinerary_id"] == itinerary["id"]

    client.patch(f"/itineraries/items/{item['id']}", json={"notes": "Fushimi Inari"})
    items = client.get(f"/itineraries/{itinerary['id']}/items").json()
    assert [(i["destination"], i["notes"]) for i in items] == [("Kyoto", "Fushimi Inari")]

    client.delete(f"/itineraries/items/{item['id']}")
    assert client.get(f"/itineraries/{itinerary['id']}/items").json() == []
    assert client.patch("/itineraries/items/9999", json={"notes": "x"}).status_code == 404


def test_photos(client):
    itinerary = _create(client)
    item = client.post(f"/itineraries/{itinerary['id']}/items", json={"destination": "Osaka"}).json()

    assert client.get(f"/itineraries/{itinerary['id']}/photo").status_code == 404

    assert client.put(f"/itineraries/{itinerary['id']}/photo", content=b"cover-bytes").status_code == 204
    assert client.put(f"/itineraries/items/{item['id']}/photo", content=b"item-bytes").status_code == 204

    assert client.get(f"/itineraries/{itinerary['id']}/photo").content == b"cover-bytes"
    assert client.get(f"/itineraries/items/{item['id']}/photo").content == b"item-bytes"


def test_share(client):
    client.post("/profile/update", json={"name": "Daniel", "email": "daniel@icloud.com", "username": "d"})
    itinerary = _create(client, name="Japan")

    link = client.get(f"/itineraries/{itinerary['id']}/share").json()
    assert link["url"] == "https://www.itineria/plan/Daniel/Japan.com"


def test_profile_update_validates_email(client):
    resp = client.post("/profile/update", json={"name": "Daniel La", "email": "daniel@icloud.org", "username": "d"})
    assert resp.status_code == 400

    resp = client.post("/profile/update", json={"name": "Daniel La", "email": "daniel@icloud.com", "username": "d"})
    assert resp.status_code == 200
    assert resp.json()["initials"] == "DL"
    assert client.get("/profile/").json()["email"] == "daniel@icloud.com"


def test_places_routes(client, monkeypatch):
    session = FakeSession(
        FakeResponse(json_data={"results": []}),
        FakeResponse(json_data={"results": [{"place_id": "p", "name": "Park"}]}),
        FakeResponse(status_code=400),
    )
    monkeypatch.setattr(routes_places, "places", PlacesClient(api_key="KEY", session=session))

    assert client.get("/places/search", params={"query": "cafe", "lat": 1, "lng": 2}).json() == []
    assert client.get("/places/nearby", params={"lat": 1, "lng": 2}).json() == [
        {"id": "p", "name": "Park", "photo_reference": None}
    ]
    assert client.get("/places/photo", params={"reference": "bad"}).status_code == 404


def test_chat_route(client, monkeypatch):
    async def create(**kwargs):
        return SimpleNamespace(id="c1", choices=[SimpleNamespace(message=SimpleNamespace(content=" Go north. "))])

    fake = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
    monkeypatch.setattr(routes_chat, "chat_client", ChatClient(client=fake))

    resp = client.post("/chat", json={"messages": [{"role": "user", "content": "Where?"}]})
    assert resp.json() == {"id": "c1", "content": "Go north."}

    assert client.post("/chat", json={"messages": []}).status_code == 400


def test_chat_route_assistant_unavailable(client, monkeypatch):
    async def create(**kwargs):
        raise OpenAIError("down")

    fake = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
    monkeypatch.setattr(routes_chat, "chat_client", ChatClient(client=fake))

    resp = client.post("/chat", json={"messages": [{"role": "user", "content": "Where?"}]})
    assert resp.status_code == 502


def test_chat_route_malformed_completion_is_bad_gateway(client, monkeypatch):
    def handler(request):
        return httpx.Response(200, json={"id": "x", "choices": [{}]})

    openai_client = AsyncOpenAI(
        api_key="sk-test",
        base_url="https://chat.test/v1",
        max_retries=0,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )
    monkeypatch.setattr(routes_chat, "chat_client", ChatClient(client=openai_client))

    resp = client.post("/chat", json={"messages": [{"role": "user", "content": "Where?"}]})
    assert resp.status_code == 502


def test_place_photo_route_forwards_content_type(client, monkeypatch):
    session = FakeSession(FakeResponse(content=b"\x89PNG", headers={"Content-Type": "image/png"}))
    monkeypatch.setattr(routes_places, "places", PlacesClient(api_key="KEY", session=session))

    resp = client.get("/places/photo", params={"reference": "ref-1"})
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "image/png"
    assert resp.content == b"\x89PNG"
