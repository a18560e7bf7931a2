"""Game lifecycle, month advance, choices and log endpoints."""

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response

from backend import config
from backend.deps import game_lock, get_storage
from raising_sim import game
from raising_sim.models import GameState
from raising_sim.timeline import is_game_over

from .models import AdvanceBody, ChoiceBody, CreateGame, UpdateGameSettings

router = APIRouter()


def load_or_404(slug: str) -> GameState:
    state = get_storage().load_game(slug)
    if state is None:
        raise HTTPException(404, "Game not found")
    return state


@router.get("/games")
async def list_games():
    """List all saved games."""
    return get_storage().list_games()


@router.post("/games", status_code=201)
async def create_game(body: CreateGame):
    """Start a new game with one default character."""
    storage = get_storage()
    async with game_lock:
        slug = storage.unique_slug(body.title)
        state = game.new_game_state()
        storage.save_game(slug, state)
    return {"slug": slug, "state": state}


@router.get("/games/{slug}")
async def get_game(slug: str):
    """Get the full state of a game."""
    return load_or_404(slug)


@router.delete("/games/{slug}")
async def delete_game(slug: str):
    """Delete a saved game."""
    async with game_lock:
        if not get_storage().delete_game(slug):
            raise HTTPException(404, "Game not found")
    return {"ok": True}


@router.get("/games/{slug}/export")
async def export_game(slug: str):
    """Download the saved game document."""
    text = get_storage().export_game(slug)
    if text is None:
        raise HTTPException(404, "Game not found")
    return Response(
        content=text,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{slug}.json"'},
    )


@router.patch("/games/{slug}/settings")
async def update_game_settings(slug: str, body: UpdateGameSettings):
    """Toggle the narrative service or override its URL for one game."""
    async with game_lock:
        state = load_or_404(slug)
        settings = game.update_settings(state, body.model_dump(exclude_none=True))
        get_storage().save_game(slug, state)
    return settings


@router.post("/games/{slug}/advance")
async def advance(slug: str, body: AdvanceBody):
    """Run one month with the given schedules (character id → activity)."""
    async with game_lock:
        state = load_or_404(slug)
        if is_game_over(state.month_index):
            raise HTTPException(409, "The game is over")
        cfg = config.get_config()
        cards = await game.advance_month(
            get_storage(), slug, state, body.schedules,
            default_narrative_url=cfg["narrative_url"],
            narrative_timeout=cfg["narrative_timeout"],
        )
    return {
        "cards": cards,
        "month_index": state.month_index,
        "money": state.money,
    }


@router.post("/games/{slug}/log/{card_id}/choice")
async def submit_choice(slug: str, card_id: str, body: ChoiceBody):
    """Answer a card's choice. Each card accepts exactly one answer."""
    async with game_lock:
        state = load_or_404(slug)
        status = game.submit_choice(get_storage(), slug, state, card_id, body.tag)
    if status == "missing":
        raise HTTPException(404, "Log entry not found")
    if status == "already_chosen":
        raise HTTPException(409, "A choice was already made for this entry")
    if status == "invalid_tag":
        raise HTTPException(400, f"'{body.tag}' is not a choice of this entry")
    return {"ok": True, "money": state.money}


@router.delete("/games/{slug}/log")
async def clear_log(slug: str):
    """Empty the game log."""
    async with game_lock:
        state = load_or_404(slug)
        game.clear_log(state)
        get_storage().save_game(slug, state)
    return {"ok": True}
