"""Game session boundary — setup operations, month advance, choice submission.

Everything outside the engine talks to a game through these functions. They
take the GameState explicitly; the ones that end a player action
(advance_month, submit_choice) also persist through a Storage.

Setup (characters, presets) is only editable until the first month runs.
Setup functions return None / False instead of raising when an operation is
not allowed or references something that does not exist.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Literal

from raising_sim.models import MAX_CHARS, Card, Character, GameState, Preset, Settings, new_id
from raising_sim.narrative import (
    HttpNarrativeService,
    NarrativeService,
    build_request,
    fetch_remote_cards,
    remote_card_count,
)
from raising_sim.pipeline import apply_choice, commit_month, run_one_month
from raising_sim.relations import apply_preset, drop_relations_for, ensure_relations
from raising_sim.rng import RandomSource
from raising_sim.storage import Storage
from raising_sim.timeline import is_game_over

logger = logging.getLogger(__name__)

ChoiceStatus = Literal["applied", "missing", "already_chosen", "invalid_tag"]


def new_game_state() -> GameState:
    """A fresh game: one default character, 100 money, setup unlocked."""
    state = GameState(characters=[Character(name="Hero", personality="INTJ")])
    ensure_relations(state)
    return state


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

def add_character(
    state: GameState,
    name: str | None = None,
    birth_month: Any = 1,
    birth_day: Any = 1,
    personality: str = "INFP",
) -> Character | None:
    """Add a character while setup is open and the roster has room."""
    if not state.setup_unlocked or len(state.characters) >= MAX_CHARS:
        return None
    char = Character.model_validate({
        "name": name or f"Character {len(state.characters) + 1}",
        "birthday": {"month": birth_month, "day": birth_day},
        "personality": personality,
    })
    state.characters.append(char)
    ensure_relations(state)
    return char


def update_character(
    state: GameState, char_id: str, fields: Mapping[str, Any]
) -> Character | None:
    """Update name, personality or birthday. The zodiac follows the birthday."""
    if not state.setup_unlocked:
        return None
    char = state.get_character(char_id)
    if char is None:
        return None

    patch = char.model_dump()
    if fields.get("name"):
        patch["name"] = fields["name"]
    if fields.get("personality") is not None:
        patch["personality"] = fields["personality"]
    if fields.get("birth_month") is not None:
        patch["birthday"]["month"] = fields["birth_month"]
    if fields.get("birth_day") is not None:
        patch["birthday"]["day"] = fields["birth_day"]

    updated = Character.model_validate(patch)
    char.name = updated.name
    char.personality = updated.personality
    char.birthday = updated.birthday
    return char


def remove_character(state: GameState, char_id: str) -> bool:
    """Remove a character and its relationships. The last character stays."""
    if not state.setup_unlocked or len(state.characters) <= 1:
        return False
    if state.get_character(char_id) is None:
        return False
    state.characters = [c for c in state.characters if c.id != char_id]
    drop_relations_for(state, char_id)
    ensure_relations(state)
    return True


def set_relation_preset(
    state: GameState, from_id: str, to_id: str, preset: Preset
) -> bool:
    """Apply a preset to the from → to record only."""
    if not state.setup_unlocked:
        return False
    ensure_relations(state)
    rel = state.get_relation(from_id, to_id)
    if rel is None:
        return False
    apply_preset(rel, preset)
    return True


def update_settings(state: GameState, fields: Mapping[str, Any]) -> Settings:
    merged = {**state.settings.model_dump(), **{k: v for k, v in fields.items() if v is not None}}
    state.settings = Settings.model_validate(merged)
    return state.settings


def clear_log(state: GameState) -> None:
    state.log.clear()


# ---------------------------------------------------------------------------
# Month advance
# ---------------------------------------------------------------------------

async def advance_month(
    storage: Storage,
    slug: str,
    state: GameState,
    schedules: Mapping[str, Any],
    *,
    rng: RandomSource | None = None,
    narrative: NarrativeService | None = None,
    default_narrative_url: str = "",
    narrative_timeout: float = 20.0,
) -> list[Card]:
    """Run one month, commit and persist it, then append optional remote cards.

    The month is saved before the remote service is contacted, so a slow or
    failing service never loses or delays the month itself.
    Returns every card added to the log.
    """
    if is_game_over(state.month_index):
        return []

    played = state.month_index
    result = run_one_month(state, schedules, rng)
    commit_month(state, result)
    storage.save_game(slug, state)
    added = list(result.new_entries)

    service = narrative
    if service is None and state.settings.use_narrative:
        url = state.settings.narrative_url or default_narrative_url
        if url:
            service = HttpNarrativeService(url, timeout=narrative_timeout)
        else:
            logger.warning("Narrative service enabled for %s but no URL configured", slug)

    if service is not None and state.settings.use_narrative:
        request = build_request(state, schedules, month_index=played)
        remote = await fetch_remote_cards(service, request, remote_card_count(state))
        if remote:
            _assign_unique_ids(state, remote)
            state.log.extend(remote)
            storage.save_game(slug, state)
            added.extend(remote)

    logger.info("Advanced %s to month %d (%d cards)", slug, state.month_index, len(added))
    return added


def _assign_unique_ids(state: GameState, remote: list[Card]) -> None:
    """Re-id remote cards that collide with the log or with each other."""
    seen = {c.id for c in state.log}
    for card in remote:
        if card.id in seen:
            logger.debug("Remote card id %s already used, reassigning", card.id)
            card.id = new_id("ai")
        seen.add(card.id)


# ---------------------------------------------------------------------------
# Choice submission
# ---------------------------------------------------------------------------

def submit_choice(
    storage: Storage,
    slug: str,
    state: GameState,
    card_id: str,
    tag: str,
    *,
    rng: RandomSource | None = None,
) -> ChoiceStatus:
    """Record and resolve a choice once. Second submissions change nothing."""
    card = state.find_card(card_id)
    if card is None:
        return "missing"
    if card.choice_made is not None:
        return "already_chosen"
    if tag not in card.choice_tags():
        return "invalid_tag"

    card.choice_made = tag
    applied = apply_choice(state, card, tag, rng)
    if not applied:
        logger.debug("Choice %s on %s had no effect", tag, card_id)
    storage.save_game(slug, state)
    return "applied"
