"""
Main API router configuration.
"""

from fastapi import APIRouter
from app.api.endpoints import access, admin, auth, manager, support, wallet

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])
api_router.include_router(wallet.router, tags=["wallet"])
api_router.include_router(access.router, prefix="/access", tags=["access"])
api_router.include_router(support.router, prefix="/support", tags=["support"])
api_router.include_router(manager.router, prefix="/manager", tags=["manager"])
api_router.include_router(admin.router, prefix="/admin", tags=["administration"])
