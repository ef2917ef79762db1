"""API router setup."""
from fastapi import APIRouter

from app.api.v1 import appointments, availability, plans, slots

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(slots.router)
api_router.include_router(appointments.router)
api_router.include_router(availability.router)
api_router.include_router(plans.router)
