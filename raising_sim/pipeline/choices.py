"""Choice resolution — applies a player's A/B/C answer to a logged card.

Dispatches on card.meta.kind:

    personal      A morality +2, stress +1 │ B stress -3 │ C money +30, stress +3
    relationship  per flavor (bonding / argument / coop), then romance gates
                  and stage evolution on the from → to record
    tournament    A +80 money │ B +40 │ C nothing
    blessing      A grant the blessing flag │ B stress -3 │ C money +20
    birthday      every outgoing relation of the celebrant:
                  A affinity +3, trust +2, tension -1 │ B affinity +1, trust +1 │
                  C tension +4, trust -1

Unknown kinds, unknown tags and references to characters or relationships
that no longer exist are no-ops. The write-once guard on choice_made lives at
the submission boundary (raising_sim.game.submit_choice).
"""

from __future__ import annotations

import logging

from raising_sim import cards as card_builders
from raising_sim.models import Card, GameState, Relationship
from raising_sim.relations import (
    StageChange,
    adjust_relation,
    advance_romance,
    evolve_relation,
)
from raising_sim.rng import RandomSource, default_rng
from raising_sim.rules import adjust_money, adjust_stat
from raising_sim.timeline import year_month_to_month

logger = logging.getLogger(__name__)

TOURNAMENT_PRIZES = {"A": 80, "B": 40, "C": 0}

_RELATION_EFFECTS: dict[str, dict[str, dict[str, int]]] = {
    "bonding": {
        "A": {"trust": 4, "affinity": 3, "tension": -1},
        "B": {"trust": 2, "affinity": 1},
        "C": {"tension": 3, "trust": -1},
    },
    "argument": {
        "A": {"trust": 3, "tension": -2, "affinity": 1},
        "B": {"trust": 1, "tension": -1},
        "C": {"tension": 4, "trust": -2, "affinity": -2},
    },
    "coop": {
        "A": {"trust": 3, "affinity": 1, "tension": -1},
        "B": {"trust": 1},
        "C": {"tension": 2, "trust": -1},
    },
}

_BIRTHDAY_EFFECTS: dict[str, dict[str, int]] = {
    "A": {"affinity": 3, "trust": 2, "tension": -1},
    "B": {"affinity": 1, "trust": 1},
    "C": {"tension": 4, "trust": -1},
}


def apply_choice(
    state: GameState, card: Card, tag: str, rng: RandomSource | None = None
) -> bool:
    """Apply the effect of `tag` on `card`. Returns False when nothing applied."""
    rng = rng or default_rng()
    kind = card.meta.kind

    if tag not in ("A", "B", "C"):
        return False

    if kind == "personal":
        return _resolve_personal(state, card, tag)
    if kind == "relationship":
        return _resolve_relationship(state, card, tag, rng)
    if kind == "tournament":
        adjust_money(state, TOURNAMENT_PRIZES[tag])
        return True
    if kind == "blessing":
        return _resolve_blessing(state, card, tag)
    if kind == "birthday":
        return _resolve_birthday(state, card, tag)

    logger.debug("No resolver for card kind %r (card %s)", kind, card.id)
    return False


def _first_character(state: GameState, card: Card):
    if not card.meta.char_ids:
        return None
    return state.get_character(card.meta.char_ids[0])


def _resolve_personal(state: GameState, card: Card, tag: str) -> bool:
    char = _first_character(state, card)
    if char is None:
        return False
    if tag == "A":
        adjust_stat(char, "morality", 2)
        adjust_stat(char, "stress", 1)
    elif tag == "B":
        adjust_stat(char, "stress", -3)
    else:
        adjust_money(state, 30)
        adjust_stat(char, "stress", 3)
    return True


def _resolve_blessing(state: GameState, card: Card, tag: str) -> bool:
    char = _first_character(state, card)
    if char is None:
        return False
    if tag == "A":
        blessing = card.meta.payload.get("blessing")
        if not blessing:
            return False
        char.flags.blessing = blessing
    elif tag == "B":
        adjust_stat(char, "stress", -3)
    else:
        adjust_money(state, 20)
    return True


def _resolve_relationship(
    state: GameState, card: Card, tag: str, rng: RandomSource
) -> bool:
    from_id, to_id = card.meta.from_id, card.meta.to_id
    if (from_id is None or to_id is None) and len(card.meta.char_ids) == 2:
        from_id, to_id = card.meta.char_ids
    if from_id is None or to_id is None:
        return False
    rel = state.get_relation(from_id, to_id)
    if rel is None:
        return False

    flavor = card.meta.payload.get("flavor")
    if flavor not in card_builders.RELATION_FLAVORS:
        flavor = "bonding"
    effects = _RELATION_EFFECTS[flavor]
    adjust_relation(rel, **effects[tag])

    romance = advance_romance(rel, rng)
    evolved = evolve_relation(rel)
    _log_stage_change(state, card, rel, romance, evolved)
    return True


def _resolve_birthday(state: GameState, card: Card, tag: str) -> bool:
    char = _first_character(state, card)
    if char is None:
        return False
    for rel in state.relations_from(char.id):
        adjust_relation(rel, **_BIRTHDAY_EFFECTS[tag])
        evolved = evolve_relation(rel)
        _log_stage_change(state, card, rel, None, evolved)
    return True


def _log_stage_change(
    state: GameState,
    card: Card,
    rel: Relationship,
    first: StageChange | None,
    second: StageChange,
) -> None:
    """Append a stage-change card, stamped like the answered card, when the stage moved."""
    previous = first.previous if first is not None else second.previous
    if previous == rel.stage:
        return
    a = state.get_character(rel.from_id)
    b = state.get_character(rel.to_id)
    if a is None or b is None:
        return
    month_index = year_month_to_month(card.year, card.month)
    state.log.append(
        card_builders.stage_change_card(month_index, a, b, previous, rel.stage)
    )
