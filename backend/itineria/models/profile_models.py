# backend/itineria/models/profile_models.py

from pydantic import BaseModel


class Profile(BaseModel):
    name: str = ""
    initials: str = ""
    email: str = ""
    username: str = ""


class UpdateProfileIn(BaseModel):
    name: str
    email: str
    username: str
