# spotlight/api/v1/api.py

from fastapi import APIRouter
from spotlight.api.v1.endpoints import (
    spotlight,
    redirect,
    quotes,
    promo,
    applications,
    portal,
    admin,
    health,
)

# This is the main router for the API.
# It includes every endpoint router; main.py mounts it under /api.
api_router = APIRouter()

api_router.include_router(spotlight.router)
api_router.include_router(redirect.router)
api_router.include_router(quotes.router)
api_router.include_router(promo.router)
api_router.include_router(applications.router)
api_router.include_router(portal.router)
api_router.include_router(admin.router)
api_router.include_router(health.router)
