"""Relationship evolution — drift, stage transitions, presets, romance gates.

Relationships are directed: A→B and B→A are independent records.

Stage machine, checked in this order on every evolution:

    strangers → friends   affinity ≥ 15, trust ≥ 25
    friends   → close     affinity ≥ 35, trust ≥ 45, tension ≤ 50
    rivals    → friends   tension ≤ 25, affinity ≥ 10
    any       → broken    tension ≥ 85 or trust ≤ 10   (overrides the above)

family and broken are sticky: evolution never moves a record out of them.
crush → dating → partners only happens through advance_romance(), which the
choice resolver calls when a relationship card is answered.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from raising_sim.models import Character, GameState, Preset, Relationship, Stage
from raising_sim.rng import RandomSource, roll
from raising_sim.timeline import clamp

logger = logging.getLogger(__name__)

STICKY_STAGES: frozenset[str] = frozenset({"family", "broken"})

DATING_CHANCE = 0.20
PARTNERS_CHANCE = 0.15

# preset → (stage, score overrides)
PRESETS: dict[str, tuple[Stage, dict[str, int]]] = {
    "acquaintance": ("strangers", {}),
    "rival": ("rivals", {"tension": 40, "affinity": -5}),
    "family": ("family", {"affinity": 30, "trust": 60}),
    "one_sided_crush": ("crush", {"affinity": 20, "romance": 35}),
}


@dataclass(frozen=True)
class StageChange:
    changed: bool
    previous: str
    new: str


@dataclass(frozen=True)
class DriftContext:
    same_group: bool = False
    growth_gap: bool = False
    any_high_stress: bool = False
    is_rivals: bool = False


def new_relationship(from_id: str, to_id: str) -> Relationship:
    return Relationship(from_id=from_id, to_id=to_id)


def clamp_relation(rel: Relationship) -> None:
    rel.affinity = int(clamp(rel.affinity, -100, 100))
    rel.trust = int(clamp(rel.trust, 0, 100))
    rel.tension = int(clamp(rel.tension, 0, 100))
    rel.romance = int(clamp(rel.romance, 0, 100))


def adjust_relation(rel: Relationship, **deltas: int) -> None:
    """Add score deltas (affinity=, trust=, tension=, romance=) and re-clamp."""
    for name, delta in deltas.items():
        setattr(rel, name, getattr(rel, name) + delta)
    clamp_relation(rel)


def apply_preset(rel: Relationship, preset: Preset) -> Relationship:
    """Reset a record to the preset's stage and baseline scores."""
    stage, scores = PRESETS[preset]
    base = new_relationship(rel.from_id, rel.to_id)
    rel.preset = preset
    rel.stage = stage
    rel.affinity = scores.get("affinity", base.affinity)
    rel.trust = scores.get("trust", base.trust)
    rel.tension = scores.get("tension", base.tension)
    rel.romance = scores.get("romance", base.romance)
    return rel


def ensure_relations(state: GameState) -> int:
    """Create both directed records for every pair of roster characters.

    Records whose endpoints are no longer on the roster are dropped.
    Returns the number of records created.
    """
    ids = {c.id for c in state.characters}
    state.relations = [r for r in state.relations if r.from_id in ids and r.to_id in ids]
    created = 0
    for a in state.characters:
        for b in state.characters:
            if a.id == b.id or state.get_relation(a.id, b.id) is not None:
                continue
            state.relations.append(new_relationship(a.id, b.id))
            created += 1
    return created


def drop_relations_for(state: GameState, char_id: str) -> None:
    state.relations = [
        r for r in state.relations if r.from_id != char_id and r.to_id != char_id
    ]


def evolve_relation(rel: Relationship) -> StageChange:
    """Run the stage machine once. Scores must already be updated by the caller."""
    previous = rel.stage
    if previous in STICKY_STAGES:
        return StageChange(False, previous, previous)

    stage = previous
    if stage == "strangers" and rel.affinity >= 15 and rel.trust >= 25:
        stage = "friends"
    if stage == "friends" and rel.affinity >= 35 and rel.trust >= 45 and rel.tension <= 50:
        stage = "close"
    if stage == "rivals" and rel.tension <= 25 and rel.affinity >= 10:
        stage = "friends"
    if rel.tension >= 85 or rel.trust <= 10:
        stage = "broken"

    rel.stage = stage
    return StageChange(stage != previous, previous, stage)


def advance_romance(rel: Relationship, rng: RandomSource) -> StageChange:
    """Romance drift plus the probabilistic crush → dating → partners gates."""
    previous = rel.stage
    if previous in STICKY_STAGES:
        return StageChange(False, previous, previous)

    if rel.affinity >= 40 and rel.trust >= 50 and rel.tension <= 40:
        adjust_relation(rel, romance=2)

    if (
        rel.stage == "crush"
        and rel.romance >= 60
        and rel.trust >= 55
        and rel.affinity >= 45
        and rel.tension <= 35
        and roll(rng, DATING_CHANCE)
    ):
        rel.stage = "dating"
    elif rel.stage == "dating" and rel.romance >= 80 and rel.trust >= 70 and roll(rng, PARTNERS_CHANCE):
        rel.stage = "partners"

    return StageChange(rel.stage != previous, previous, rel.stage)


def monthly_relation_drift(rel: Relationship, ctx: DriftContext) -> None:
    if ctx.same_group:
        rel.trust += 2
        rel.affinity += 1
    if ctx.growth_gap:
        rel.tension += 2
    if ctx.any_high_stress:
        rel.tension += 2
        rel.trust -= 1
    if ctx.is_rivals:
        rel.tension += 1
        rel.affinity -= 1
    clamp_relation(rel)


def relation_summary(rel: Relationship, characters: list[Character]) -> dict:
    """Compact relationship description used in remote service requests."""
    names = {c.id: c.name for c in characters}
    return {
        "from": names.get(rel.from_id, rel.from_id),
        "to": names.get(rel.to_id, rel.to_id),
        "preset": rel.preset,
        "stage": rel.stage,
        "affinity": rel.affinity,
        "trust": rel.trust,
        "tension": rel.tension,
        "romance": rel.romance,
    }
