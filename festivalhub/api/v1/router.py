"""Main API router that includes all endpoint routers."""

from fastapi import APIRouter

from festivalhub.api.v1 import auth, festivals, performances, users

api_router = APIRouter()

# Authentication
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])

# Users
api_router.include_router(users.router, prefix="/users", tags=["Users"])

# Festivals
api_router.include_router(festivals.router, prefix="/festivals", tags=["Festivals"])

# Performances
api_router.include_router(performances.router, prefix="/performances", tags=["Performances"])
