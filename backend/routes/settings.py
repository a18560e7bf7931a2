"""Health check, global settings and narrative connection check endpoints."""

import httpx
from fastapi import APIRouter

from backend import config

from .models import UpdateSettings

router = APIRouter()


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


@router.get("/settings")
async def get_settings():
    """Get global app settings (narrative service defaults)."""
    return config.get_config()


@router.patch("/settings")
async def update_settings(body: UpdateSettings):
    """Update global app settings (partial merge)."""
    return config.update_config(body.model_dump(exclude_none=True))


@router.post("/check-connection")
async def check_connection():
    """Quick reachability check against the configured narrative service URL."""
    url = config.get_config()["narrative_url"]
    if not url:
        return {"ok": False}
    try:
        async with httpx.AsyncClient(timeout=5) as client:
            resp = await client.options(url)
        return {"ok": resp.status_code < 500}
    except httpx.HTTPError:
        return {"ok": False}
