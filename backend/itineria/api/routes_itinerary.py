# backend/itineria/api/routes_itinerary.py

from fastapi import APIRouter, HTTPException, Request, Response
from typing import List, Optional

from itineria.db.itinerary_store import ItineraryStore
from itineria.models.itinerary_models import (
    CreateItineraryIn,
    CreatePlannerItemIn,
    Itinerary,
    PlannerItem,
    ShareLink,
    UpdateItineraryIn,
    UpdatePlannerItemIn,
)
from itineria.api.routes_profile import profile_store
from itineria.services.share_service import build_share_link

router = APIRouter(prefix="/itineraries", tags=["itineraries"])
store = ItineraryStore()


def _get_itinerary(itinerary_id: str) -> Itinerary:
    itinerary = store.get_itinerary(itinerary_id)
    if not itinerary:
        raise HTTPException(404, "Itinerary not found")
    return itinerary


def _get_item(item_id: int) -> PlannerItem:
    item = store.get_planner_item(item_id)
    if not item:
        raise HTTPException(404, "Planner item not found")
    return item


def _photo_response(data: Optional[bytes]) -> Response:
    if data is None:
        raise HTTPException(404, "Photo not found")
    return Response(content=data, media_type="application/octet-stream")


# --------------------------
# Itineraries
# --------------------------
@router.get("/", response_model=List[Itinerary])
def list_itineraries(name: Optional[str] = None):
    return store.list_itineraries(name)


@router.post("/", response_model=Itinerary, status_code=201)
def create_itinerary(data: CreateItineraryIn):
    return store.create_itinerary(
        data.trip_name,
        data.trip_start_date,
        data.trip_end_date,
        data.trip_description,
    )


@router.get("/{itinerary_id}", response_model=Itinerary)
def get_itinerary(itinerary_id: str):
    return _get_itinerary(itinerary_id)


@router.patch("/{itinerary_id}", response_model=Itinerary)
def update_itinerary(itinerary_id: str, data: UpdateItineraryIn):
    itinerary = _get_itinerary(itinerary_id)
    return store.update_itinerary(itinerary, **data.model_dump(exclude_unset=True))


@router.delete("/{itinerary_id}")
def delete_itinerary(itinerary_id: str):
    itinerary = _get_itinerary(itinerary_id)
    store.delete_itinerary(itinerary)
    return {"ok": True, "message": "Itinerary deleted"}


@router.get("/{itinerary_id}/share", response_model=ShareLink)
def share_itinerary(itinerary_id: str):
    itinerary = _get_itinerary(itinerary_id)
    return build_share_link(profile_store.name, itinerary.trip_name)


# --------------------------
# Planner items
# --------------------------
@router.get("/{itinerary_id}/items", response_model=List[PlannerItem])
def list_planner_items(itinerary_id: str):
    return store.list_planner_items(_get_itinerary(itinerary_id))


@router.post("/{itinerary_id}/items", response_model=PlannerItem, status_code=201)
def add_planner_item(itinerary_id: str, data: CreatePlannerItemIn):
    itinerary = _get_itinerary(itinerary_id)
    return store.add_planner_item(
        itinerary,
        data.destination,
        data.start_date,
        data.end_date,
        data.notes,
    )


@router.patch("/items/{item_id}", response_model=PlannerItem)
def update_planner_item(item_id: int, data: UpdatePlannerItemIn):
    item = _get_item(item_id)
    return store.update_planner_item(item, **data.model_dump(exclude_unset=True))


@router.delete("/items/{item_id}")
def delete_planner_item(item_id: int):
    store.delete_planner_item(_get_item(item_id))
    return {"ok": True, "message": "Planner item deleted"}


# --------------------------
# Photos (raw request body)
# --------------------------
@router.put("/{itinerary_id}/photo", status_code=204)
async def put_itinerary_photo(itinerary_id: str, request: Request):
    itinerary = _get_itinerary(itinerary_id)
    store.update_photo(itinerary, await request.body() or None)
    return Response(status_code=204)


@router.get("/{itinerary_id}/photo")
def get_itinerary_photo(itinerary_id: str):
    return _photo_response(_get_itinerary(itinerary_id).photo)


@router.put("/items/{item_id}/photo", status_code=204)
async def put_planner_item_photo(item_id: int, request: Request):
    item = _get_item(item_id)
    store.update_photo(item, await request.body() or None)
    return Response(status_code=204)


@router.get("/items/{item_id}/photo")
def get_planner_item_photo(item_id: int):
    return _photo_response(_get_item(item_id).photo)
