from fastapi import APIRouter

from app.api.api_v1.endpoints import shares

api_router = APIRouter()
api_router.include_router(shares.router, prefix="/share", tags=["share"])
