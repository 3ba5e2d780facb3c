# backend/itineria/models/place_models.py

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class Location(BaseModel):
    lat: float
    lng: float


class Viewport(BaseModel):
    northeast: Location
    southwest: Location


class PlaceGeometry(BaseModel):
    location: Location
    viewport: Viewport


# -------------------------
# Text search
# -------------------------
class Place(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="place_id")
    name: str
    formatted_address: str
    geometry: PlaceGeometry


class PlaceResponse(BaseModel):
    results: List[Place]


# -------------------------
# Nearby search
# -------------------------
class Photo(BaseModel):
    photo_reference: str


class NearbyPlaceResult(BaseModel):
    place_id: str
    name: str
    photos: Optional[List[Photo]] = None


class NearbyPlacesResponse(BaseModel):
    results: List[NearbyPlaceResult]


class NearbyPlace(BaseModel):
    id: str
    name: str
    photo_reference: Optional[str] = None
