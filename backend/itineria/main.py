# backend/itineria/main.py

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from itineria.api.routes_itinerary import router as itinerary_router
from itineria.api.routes_places import router as places_router
from itineria.api.routes_chat import router as chat_router
from itineria.api.routes_profile import router as profile_router

from itineria.core.config_loader import settings


app = FastAPI(
    title="Itineria",
    description="Trip itineraries, planner items, Google Places search and a travel chat assistant",
    version="1.0.0"
)

# -------------------------------------------------------------
# CORS
# -------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # update to frontend domain in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -------------------------------------------------------------
# ROUTES
# -------------------------------------------------------------
app.include_router(itinerary_router)
app.include_router(places_router)
app.include_router(chat_router)
app.include_router(profile_router)


# -------------------------------------------------------------
# ROOT ENDPOINT
# -------------------------------------------------------------
@app.get("/")
def root():
    return {
        "status": "ok",
        "message": "Itineria backend is running",
        "env": settings.environment
    }


# -------------------------------------------------------------
# RUN LOCAL
# -------------------------------------------------------------
if __name__ == "__main__":
    uvicorn.run(
        "itineria.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
