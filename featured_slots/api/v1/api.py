# featured_slots/api/v1/api.py

from fastapi import APIRouter
from featured_slots.api.v1.endpoints import slots, internals

# This is the main router for the v1 API.
api_router = APIRouter()

api_router.include_router(slots.router)
api_router.include_router(internals.router)
