# backend/itineria/api/routes_places.py

from fastapi import APIRouter, HTTPException, Query, Response
from typing import List

from itineria.models.place_models import NearbyPlace, Place
from itineria.services.places_client import PlacesClient

router = APIRouter(prefix="/places", tags=["places"])
places = PlacesClient()


@router.get("/search", response_model=List[Place])
def search_places(
    query: str = Query(..., min_length=1),
    lat: float = Query(...),
    lng: float = Query(...),
):
    return places.search_by_text(query, lat, lng)


@router.get("/nearby", response_model=List[NearbyPlace])
def nearby_places(lat: float, lng: float):
    return places.search_nearby(lat, lng)


@router.get("/photo")
def place_photo(reference: str):
    photo = places.fetch_photo_with_type(reference)
    if photo is None:
        raise HTTPException(404, "Photo not available")
    data, media_type = photo
    return Response(content=data, media_type=media_type)
