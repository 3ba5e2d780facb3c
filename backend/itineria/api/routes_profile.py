# backend/itineria/api/routes_profile.py

from fastapi import APIRouter, HTTPException

from itineria.models.profile_models import Profile, UpdateProfileIn
from itineria.services.profile_store import ProfileStore, SQLiteKeyValueBackend, validate_email

router = APIRouter(prefix="/profile", tags=["profile"])
profile_store = ProfileStore(SQLiteKeyValueBackend())


# --------------------------------------------------------
# GET /profile  → View current profile
# --------------------------------------------------------
@router.get("/", response_model=Profile)
def get_profile():
    return profile_store.profile()


# --------------------------------------------------------
# POST /profile/update  → Update profile details
# --------------------------------------------------------
@router.post("/update", response_model=Profile)
def update_profile(data: UpdateProfileIn):
    if not validate_email(data.email):
        raise HTTPException(status_code=400, detail="Invalid email address")

    return profile_store.save(data.name, data.email, data.username)
