import asyncio
import threading

from itineria.models.place_models import NearbyPlace
from itineria.services.place_search import PlaceSearchSession


class SlowFirstClient:
    """Blocks the 'slow' query until released so a later search finishes first."""

    def __init__(self):
        self.gate = threading.Event()

    def search_by_text(self, query, latitude, longitude):
        if query == "slow":
            self.gate.wait(5)
        return [query]

    def search_nearby(self, latitude, longitude):
        if latitude == 0:
            self.gate.wait(5)
        return [NearbyPlace(id=str(latitude), name="Place")]

    def fetch_photo(self, photo_reference):
        return None


def test_search_stores_latest_results():
    session = PlaceSearchSession(client=SlowFirstClient())

    result = asyncio.run(session.search("cafe", 1.0, 2.0))

    assert result == ["cafe"]
    assert session.places == ["cafe"]


def test_stale_search_does_not_overwrite_newer_results():
    client = SlowFirstClient()
    session = PlaceSearchSession(client=client)

    async def scenario():
        slow = asyncio.create_task(session.search("slow", 1.0, 2.0))
        await asyncio.sleep(0)
        await session.search("fast", 1.0, 2.0)
        client.gate.set()
        return await slow

    stale_return = asyncio.run(scenario())

    assert session.places == ["fast"]
    assert stale_return == ["fast"]


def test_stale_nearby_does_not_overwrite_newer_results():
    client = SlowFirstClient()
    session = PlaceSearchSession(client=client)

    async def scenario():
        slow = asyncio.create_task(session.load_nearby(0, 0))
        await asyncio.sleep(0)
        await session.load_nearby(5, 5)
        client.gate.set()
        await slow

    asyncio.run(scenario())

    assert [p.id for p in session.nearby_places] == ["5"]


def test_photo_failure_is_none():
    session = PlaceSearchSession(client=SlowFirstClient())
    assert asyncio.run(session.photo("invalid url")) is None
