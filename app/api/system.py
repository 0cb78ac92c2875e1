"""
System / health routes.
"""

from fastapi import APIRouter, Depends

from app.config import Settings
from app.core.dependencies import get_settings

router = APIRouter(tags=["System"])

ROUTES = ["/health", "/detect"]


@router.get("/")
async def root(config: Settings = Depends(get_settings)):
    return {"ok": True, "service": config.service_name, "routes": ROUTES}


@router.get("/health")
async def health(config: Settings = Depends(get_settings)):
    return {"ok": True, "hasKey": config.has_api_key, "debug": config.is_debug}
