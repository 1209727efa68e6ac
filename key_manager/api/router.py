"""
API router.
"""
from fastapi import APIRouter

from key_manager.api.endpoints import admin, api_keys, health, users

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
api_router.include_router(users.router, prefix="/user", tags=["users"])
api_router.include_router(api_keys.router, tags=["api-keys"])
