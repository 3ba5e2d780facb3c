# backend/itineria/services/place_search.py

import asyncio
from typing import List, Optional

from itineria.core.logger import logger
from itineria.models.place_models import NearbyPlace, Place
from itineria.services.places_client import PlacesClient


class PlaceSearchSession:
    """
    Holds the latest search results for one caller (a map screen, an API session).

    Requests run off the event loop. Each request takes a ticket and its result
    is only applied while the ticket is still the newest of its kind, so a slow
    response can never overwrite the results of a later search.
    """

    def __init__(self, client: Optional[PlacesClient] = None):
        self.client = client or PlacesClient()
        self.places: List[Place] = []
        self.nearby_places: List[NearbyPlace] = []
        self._search_ticket = 0
        self._nearby_ticket = 0

    async def search(self, query: str, latitude: float, longitude: float) -> List[Place]:
        self._search_ticket += 1
        ticket = self._search_ticket

        places = await asyncio.to_thread(self.client.search_by_text, query, latitude, longitude)

        if ticket != self._search_ticket:
            logger.debug(f"Discarding stale text search results for query: {query}")
            return self.places
        self.places = places
        return places

    async def load_nearby(self, latitude: float, longitude: float) -> List[NearbyPlace]:
        self._nearby_ticket += 1
        ticket = self._nearby_ticket

        nearby = await asyncio.to_thread(self.client.search_nearby, latitude, longitude)

        if ticket != self._nearby_ticket:
            logger.debug(f"Discarding stale nearby results for ({latitude}, {longitude})")
            return self.nearby_places
        self.nearby_places = nearby
        return nearby

    async def photo(self, photo_reference: str) -> Optional[bytes]:
        return await asyncio.to_thread(self.client.fetch_photo, photo_reference)
