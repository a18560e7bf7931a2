"""Monthly step orchestrator — runs one month end-to-end.

Month flow:
  1. Schedules: apply each character's activity (default rest), action card.
  2. Birthdays: characters born this month get the birthday effect + card.
  3. Blessings: per character, zodiac blessing event with p = 0.20 (+0.12 when
     stress ≥ 70).
  4. Personal events: one per character, a second with p = 0.55.
  5. Relationships: for every ordered pair, preset nudges, drift, evolution.
     Every stage change produces a card; a flavor event fires with p = 0.35.
  6. December: year-end tournament roster + win/loss result (+120 on a win).
  7. The month index advances by one, clamped to the game length.

Characters, relationships and money are mutated in place. The returned
MonthResult carries the new cards; commit_month() appends them to the log and
moves the calendar forward. A failure inside one character or pair is logged
and skipped so the rest of the month still happens.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from raising_sim import cards as card_builders
from raising_sim.models import Activity, Card, Character, GameState
from raising_sim.relations import (
    DriftContext,
    adjust_relation,
    ensure_relations,
    evolve_relation,
    monthly_relation_drift,
)
from raising_sim.rng import RandomSource, default_rng, roll
from raising_sim.rules import (
    adjust_money,
    apply_birthday,
    apply_schedule,
    resolve_activity,
)
from raising_sim.timeline import (
    MAX_MONTHS,
    clamp,
    is_birthday_month,
    is_game_over,
    month_to_year_month,
)

logger = logging.getLogger(__name__)

BLESSING_CHANCE = 0.20
BLESSING_STRESS_BONUS = 0.12
BLESSING_STRESS_THRESHOLD = 70
SECOND_PERSONAL_CHANCE = 0.55
PRESET_NUDGE_CHANCE = 0.35
RELATION_EVENT_CHANCE = 0.35
HIGH_STRESS = 80
GROWTH_GAP = 4
TOURNAMENT_REWARD = 120
TOURNAMENT_MONTH = 12


@dataclass
class MonthResult:
    new_entries: list[Card] = field(default_factory=list)
    next_month_index: int = 0
    next_money: int = 0


def run_one_month(
    state: GameState,
    schedules: Mapping[str, Any],
    rng: RandomSource | None = None,
) -> MonthResult:
    """Execute one month and return the cards it produced."""
    rng = rng or default_rng()
    month_index = state.month_index

    if is_game_over(month_index):
        logger.info("Game already finished at month %d, nothing to run", month_index)
        return MonthResult([], MAX_MONTHS, state.money)

    ensure_relations(state)
    new_cards: list[Card] = []

    activities = {c.id: resolve_activity(schedules.get(c.id)) for c in state.characters}
    totals_before = {c.id: c.stats.total() for c in state.characters}

    # 1. Schedules
    for char in state.characters:
        try:
            outcome = apply_schedule(state, char, activities[char.id])
            if outcome:
                new_cards.append(card_builders.action_card(month_index, char, outcome))
        except Exception:
            logger.exception("Schedule phase failed for %s", char.id)

    # 2. Birthdays
    for char in state.characters:
        if not is_birthday_month(month_index, char.birthday.month):
            continue
        try:
            apply_birthday(state, char)
            celebrants = [c.name for c in state.characters if c.id != char.id]
            new_cards.append(card_builders.birthday_card(month_index, char, celebrants))
        except Exception:
            logger.exception("Birthday phase failed for %s", char.id)

    # 3. Zodiac blessings
    for char in state.characters:
        try:
            if roll(rng, blessing_chance(char)):
                new_cards.append(card_builders.blessing_card(month_index, char))
        except Exception:
            logger.exception("Blessing phase failed for %s", char.id)

    # 4. Personal events
    for char in state.characters:
        try:
            new_cards.append(_personal_event(month_index, char, rng))
            if roll(rng, SECOND_PERSONAL_CHANCE):
                new_cards.append(_personal_event(month_index, char, rng))
        except Exception:
            logger.exception("Personal event phase failed for %s", char.id)

    # 5. Relationships (ordered pairs)
    for a in state.characters:
        for b in state.characters:
            if a.id == b.id:
                continue
            try:
                new_cards.extend(
                    _update_pair(state, a, b, activities, totals_before, month_index, rng)
                )
            except Exception:
                logger.exception("Relationship phase failed for %s -> %s", a.id, b.id)

    # 6. Year-end tournament
    _, month = month_to_year_month(month_index)
    if month == TOURNAMENT_MONTH and state.characters:
        try:
            new_cards.extend(_run_tournament(state, month_index, rng))
        except Exception:
            logger.exception("Tournament phase failed at month %d", month_index)

    next_index = int(clamp(month_index + 1, 0, MAX_MONTHS))
    logger.debug("month %d done: %d cards, money=%d", month_index, len(new_cards), state.money)
    return MonthResult(new_cards, next_index, state.money)


def commit_month(state: GameState, result: MonthResult) -> None:
    """Append a month's cards to the log and move the calendar forward."""
    state.log.extend(result.new_entries)
    state.month_index = result.next_month_index
    state.money = result.next_money
    state.setup_unlocked = False
    state.last_run = datetime.now(timezone.utc)


def blessing_chance(char: Character) -> float:
    chance = BLESSING_CHANCE
    if char.stats.stress >= BLESSING_STRESS_THRESHOLD:
        chance += BLESSING_STRESS_BONUS
    return chance


def tournament_win_chance(best_score: int) -> float:
    return float(clamp(0.30 + (best_score - 200) / 300, 0.15, 0.75))


# ---------------------------------------------------------------------------
# Phase helpers
# ---------------------------------------------------------------------------

def _personal_event(month_index: int, char: Character, rng: RandomSource) -> Card:
    event = rng.choice(card_builders.PERSONAL_EVENTS)
    return card_builders.personal_card(month_index, char, event)


def _update_pair(
    state: GameState,
    a: Character,
    b: Character,
    activities: dict[str, Activity],
    totals_before: dict[str, int],
    month_index: int,
    rng: RandomSource,
) -> list[Card]:
    rel = state.get_relation(a.id, b.id)
    if rel is None:
        return []

    out: list[Card] = []
    same_group = activities[a.id] == activities[b.id] and activities[a.id] is not Activity.REST
    any_high_stress = a.stats.stress >= HIGH_STRESS or b.stats.stress >= HIGH_STRESS
    delta_a = a.stats.total() - totals_before.get(a.id, a.stats.total())
    delta_b = b.stats.total() - totals_before.get(b.id, b.stats.total())
    ctx = DriftContext(
        same_group=same_group,
        growth_gap=abs(delta_a - delta_b) >= GROWTH_GAP,
        any_high_stress=any_high_stress,
        is_rivals=rel.stage == "rivals",
    )

    if rel.preset == "one_sided_crush" and roll(rng, PRESET_NUDGE_CHANCE):
        adjust_relation(rel, romance=2)
    elif rel.preset == "rival" and roll(rng, PRESET_NUDGE_CHANCE):
        adjust_relation(rel, tension=2)

    monthly_relation_drift(rel, ctx)
    change = evolve_relation(rel)
    if change.changed:
        out.append(card_builders.stage_change_card(month_index, a, b, change.previous, change.new))

    if roll(rng, RELATION_EVENT_CHANCE):
        if any_high_stress:
            flavor = "argument"
        elif same_group:
            flavor = "coop"
        else:
            flavor = "bonding"
        out.append(card_builders.relation_card(month_index, a, b, flavor, rel))

    return out


def _run_tournament(state: GameState, month_index: int, rng: RandomSource) -> list[Card]:
    roster = card_builders.tournament_roster(state.characters)
    out = [card_builders.tournament_card(month_index, state.characters, roster)]

    champion = max(state.characters, key=lambda c: c.stats.tournament_score())
    best = champion.stats.tournament_score()
    chance = tournament_win_chance(best)
    won = roll(rng, chance)
    logger.info("Tournament month %d: best=%d chance=%.2f won=%s", month_index, best, chance, won)

    out.append(card_builders.tournament_result_card(
        month_index, champion,
        won=won, score=best, win_chance=chance, reward=TOURNAMENT_REWARD,
    ))
    if won:
        adjust_money(state, TOURNAMENT_REWARD)
    return out
