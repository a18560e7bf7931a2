"""FastAPI API endpoints under /api.

Endpoint groups: settings (health + global config), games (lifecycle, advance,
choices, log, per-game settings), characters and relations. Each game's child
resources are nested under /api/games/{slug}/.
"""

from fastapi import APIRouter

from .characters import router as characters_router
from .games import router as games_router
from .settings import router as settings_router

router = APIRouter()
router.include_router(settings_router)
router.include_router(games_router)
router.include_router(characters_router)
