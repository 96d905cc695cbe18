"""API v1 routes: public signup/login, guarded user routes, health."""

from fastapi import APIRouter

from userapi.api.v1 import auth, health, users

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, tags=["auth"])
router.include_router(users.router, tags=["users"])
