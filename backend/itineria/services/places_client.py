# backend/itineria/services/places_client.py

import math
import requests
from typing import List, Optional, Tuple
from urllib.parse import quote
from pydantic import ValidationError

from itineria.core.config_loader import settings
from itineria.core.logger import logger
from itineria.models.place_models import (
    NearbyPlace,
    NearbyPlacesResponse,
    Place,
    PlaceResponse,
)


class PlacesClient:
    """
    Google Places web service client (text search, nearby search, photos).

    Every call recovers locally: failures are logged and surface as an empty
    list or None, never as an exception.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        self.key = settings.GOOGLE_MAPS_API_KEY if api_key is None else api_key
        self.base_url = (base_url or settings.places_base_url).rstrip("/")
        self.timeout = settings.request_timeout
        self.session = session or requests.Session()

    # -------------------------------------------------------
    # URL BUILDERS
    # -------------------------------------------------------
    @staticmethod
    def _coordinates(latitude: float, longitude: float) -> Optional[str]:
        if not (math.isfinite(latitude) and math.isfinite(longitude)):
            return None
        return f"{latitude},{longitude}"

    def create_search_url(self, query: str, latitude: float, longitude: float) -> Optional[str]:
        location = self._coordinates(latitude, longitude)
        if location is None:
            return None
        return (
            f"{self.base_url}/textsearch/json"
            f"?query={quote(query, safe='')}"
            f"&location={location}"
            f"&key={quote(self.key, safe='')}"
        )

    def create_nearby_url(self, latitude: float, longitude: float) -> Optional[str]:
        location = self._coordinates(latitude, longitude)
        if location is None:
            return None
        return (
            f"{self.base_url}/nearbysearch/json"
            f"?location={location}"
            f"&radius={settings.nearby_radius}"
            f"&key={quote(self.key, safe='')}"
        )

    def create_photo_url(self, photo_reference: str) -> Optional[str]:
        # A reference is an opaque token; blanks or whitespace cannot form a valid URL
        if not photo_reference or any(ch.isspace() for ch in photo_reference):
            return None
        return (
            f"{self.base_url}/photo"
            f"?maxwidth={settings.photo_max_width}"
            f"&photoreference={quote(photo_reference, safe='')}"
            f"&key={quote(self.key, safe='')}"
        )

    # -------------------------------------------------------
    # TEXT SEARCH
    # -------------------------------------------------------
    def search_by_text(self, query: str, latitude: float, longitude: float) -> List[Place]:
        """
        Search places matching free text around a location.

        Args:
            query: Text query (e.g., "restaurants")
            latitude, longitude: location bias for the search

        Returns:
            List of Place objects, empty on any failure
        """
        url = self.create_search_url(query, latitude, longitude)
        if url is None:
            logger.error(f"Invalid URL for text search: query={query}, location=({latitude}, {longitude})")
            return []

        try:
            logger.debug(f"Searching places with query: {query}, location: ({latitude}, {longitude})")
            resp = self.session.get(url, timeout=self.timeout)
            resp.raise_for_status()

            places = PlaceResponse.model_validate(resp.json()).results
            logger.info(f"Found {len(places)} places for query: {query}")
            return places
        except requests.exceptions.HTTPError as e:
            logger.error(f"HTTP error searching places: {e}, Response: {e.response.text if e.response is not None else 'N/A'}")
            return []
        except (requests.exceptions.JSONDecodeError, ValidationError) as e:
            logger.error(f"Error decoding places response: {e}")
            return []
        except requests.exceptions.RequestException as e:
            logger.error(f"Request error searching places: {e}")
            return []
        except ValueError as e:
            logger.error(f"Error decoding places response: {e}")
            return []

    # -------------------------------------------------------
    # NEARBY SEARCH
    # -------------------------------------------------------
    def search_nearby(self, latitude: float, longitude: float) -> List[NearbyPlace]:
        url = self.create_nearby_url(latitude, longitude)
        if url is None:
            logger.error(f"Invalid URL for nearby search: location=({latitude}, {longitude})")
            return []

        try:
            logger.debug(f"Nearby search at ({latitude}, {longitude}), radius={settings.nearby_radius}")
            resp = self.session.get(url, timeout=self.timeout)
            resp.raise_for_status()

            result = NearbyPlacesResponse.model_validate(resp.json())
            nearby_places = [
                NearbyPlace(
                    id=r.place_id,
                    name=r.name,
                    photo_reference=r.photos[0].photo_reference if r.photos else None,
                )
                for r in result.results
            ]
            logger.info(f"Found {len(nearby_places)} nearby places")
            return nearby_places
        except requests.exceptions.HTTPError as e:
            logger.error(f"HTTP error fetching nearby places: {e}")
            return []
        except (requests.exceptions.JSONDecodeError, ValidationError) as e:
            logger.error(f"Failed to decode nearby places: {e}")
            return []
        except requests.exceptions.RequestException as e:
            logger.error(f"Request error fetching nearby places: {e}")
            return []
        except ValueError as e:
            logger.error(f"Failed to decode nearby places: {e}")
            return []

    # -------------------------------------------------------
    # PLACE PHOTO
    # -------------------------------------------------------
    def fetch_photo(self, photo_reference: str) -> Optional[bytes]:
        """Image bytes for a photo reference, or None when the photo cannot be fetched."""
        photo = self.fetch_photo_with_type(photo_reference)
        return photo[0] if photo else None

    def fetch_photo_with_type(self, photo_reference: str) -> Optional[Tuple[bytes, str]]:
        """Image bytes and the provider's Content-Type, or None on any failure."""
        url = self.create_photo_url(photo_reference)
        if url is None:
            logger.warning(f"Invalid photo reference: {photo_reference!r}")
            return None

        try:
            resp = self.session.get(url, timeout=self.timeout)
            resp.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.error(f"Error fetching place photo: {e}")
            return None

        content_type = resp.headers.get("Content-Type", "")
        if not content_type.startswith("image/") or not resp.content:
            logger.warning(f"Photo endpoint returned non-image payload ({content_type or 'no content type'})")
            return None
        return resp.content, content_type.split(";")[0].strip()
