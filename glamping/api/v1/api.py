# File: glamping/api/v1/api.py
from fastapi import APIRouter
from glamping.api.v1.endpoints import backup, bookings, dashboard, equipment, inventory, members, rooms, voice

# Create main API router
api_router = APIRouter()

api_router.include_router(
    rooms.router,
    prefix="/rooms",
    tags=["rooms"]
)

api_router.include_router(
    equipment.router,
    prefix="/equipment",
    tags=["equipment"]
)

api_router.include_router(
    bookings.router,
    prefix="/bookings",
    tags=["bookings"]
)

api_router.include_router(
    inventory.router,
    prefix="/inventory",
    tags=["kitchen-inventory"]
)

api_router.include_router(
    members.router,
    prefix="/members",
    tags=["members"]
)

api_router.include_router(
    voice.router,
    prefix="/voice",
    tags=["voice"]
)

api_router.include_router(
    dashboard.router,
    prefix="/dashboard",
    tags=["dashboard"]
)

api_router.include_router(
    backup.router,
    prefix="/backup",
    tags=["backup"]
)
