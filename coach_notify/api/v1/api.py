"""API router for version 1."""
from fastapi import APIRouter

from coach_notify.api.v1.endpoints import announcements, auth, group_chats, push


api_router = APIRouter()
api_router.include_router(auth.router)
api_router.include_router(push.router)
api_router.include_router(announcements.router)
api_router.include_router(group_chats.router)
