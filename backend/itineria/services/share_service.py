# backend/itineria/services/share_service.py

from urllib.parse import quote

from itineria.models.itinerary_models import ShareLink


SHARE_BASE_URL = "https://www.itineria/plan"


def build_share_link(profile_name: str, trip_name: str) -> ShareLink:
    url = f"{SHARE_BASE_URL}/{quote(profile_name, safe='')}/{quote(trip_name, safe='')}.com"
    return ShareLink(
        url=url,
        subject=trip_name,
        message=f"Check out {profile_name} {trip_name} Itinerary",
    )
