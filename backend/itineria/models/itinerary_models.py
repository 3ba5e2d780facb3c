# backend/itineria/models/itinerary_models.py

from datetime import datetime
from pydantic import BaseModel, Field
from typing import List, Optional


# -------------------------
# Stored records
# -------------------------
class PlannerItem(BaseModel):
    id: int
    destination: str
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    notes: str = ""
    photo: Optional[bytes] = Field(default=None, exclude=True)
    itinerary_id: Optional[str] = None


class Itinerary(BaseModel):
    id: str
    trip_name: str
    trip_start_date: datetime
    trip_end_date: datetime
    trip_description: str = ""
    photo: Optional[bytes] = Field(default=None, exclude=True)
    items: List[PlannerItem] = []


# -------------------------
# API input
# -------------------------
class CreateItineraryIn(BaseModel):
    trip_name: str
    trip_start_date: Optional[datetime] = None
    trip_end_date: Optional[datetime] = None
    trip_description: str = ""


class UpdateItineraryIn(BaseModel):
    trip_name: Optional[str] = None
    trip_start_date: Optional[datetime] = None
    trip_end_date: Optional[datetime] = None
    trip_description: Optional[str] = None


class CreatePlannerItemIn(BaseModel):
    destination: str
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    notes: str = ""


class UpdatePlannerItemIn(BaseModel):
    destination: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    notes: Optional[str] = None


# -------------------------
# Share link
# -------------------------
class ShareLink(BaseModel):
    url: str
    subject: str
    message: str
