"""Character and relationship setup endpoints."""

from fastapi import APIRouter, HTTPException

from backend.deps import game_lock, get_storage
from raising_sim import game
from raising_sim.models import MAX_CHARS

from .games import load_or_404
from .models import CreateCharacter, SetPreset, UpdateCharacter

router = APIRouter()


@router.get("/games/{slug}/characters")
async def list_characters(slug: str):
    """List the roster of a game."""
    return load_or_404(slug).characters


@router.post("/games/{slug}/characters", status_code=201)
async def create_character(slug: str, body: CreateCharacter):
    """Add a character during setup."""
    async with game_lock:
        state = load_or_404(slug)
        if not state.setup_unlocked:
            raise HTTPException(409, "Setup is locked once the game has started")
        if len(state.characters) >= MAX_CHARS:
            raise HTTPException(409, f"A game holds at most {MAX_CHARS} characters")
        char = game.add_character(
            state, body.name, body.birth_month, body.birth_day, body.personality
        )
        get_storage().save_game(slug, state)
    return char


@router.patch("/games/{slug}/characters/{char_id}")
async def update_character(slug: str, char_id: str, body: UpdateCharacter):
    """Update name, personality or birthday during setup."""
    async with game_lock:
        state = load_or_404(slug)
        if not state.setup_unlocked:
            raise HTTPException(409, "Setup is locked once the game has started")
        char = game.update_character(state, char_id, body.model_dump(exclude_none=True))
        if char is None:
            raise HTTPException(404, "Character not found")
        get_storage().save_game(slug, state)
    return char


@router.delete("/games/{slug}/characters/{char_id}")
async def delete_character(slug: str, char_id: str):
    """Remove a character during setup. The last character cannot be removed."""
    async with game_lock:
        state = load_or_404(slug)
        if state.get_character(char_id) is None:
            raise HTTPException(404, "Character not found")
        if not game.remove_character(state, char_id):
            raise HTTPException(409, "Character cannot be removed")
        get_storage().save_game(slug, state)
    return {"ok": True}


@router.get("/games/{slug}/relations")
async def list_relations(slug: str):
    """List all directed relationship records."""
    return load_or_404(slug).relations


@router.put("/games/{slug}/relations/{from_id}/{to_id}")
async def set_preset(slug: str, from_id: str, to_id: str, body: SetPreset):
    """Apply a preset to the from → to relationship during setup."""
    async with game_lock:
        state = load_or_404(slug)
        if not state.setup_unlocked:
            raise HTTPException(409, "Setup is locked once the game has started")
        if not game.set_relation_preset(state, from_id, to_id, body.preset):
            raise HTTPException(404, "Relationship not found")
        get_storage().save_game(slug, state)
    return state.get_relation(from_id, to_id)
