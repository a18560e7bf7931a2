"""Schedule rules — base effects, skill bonuses and leveling, birthday effect.

Base effects per activity (fixed):

    study  intellect +3, stress +2
    work   stress +3,    money +50
    rest   stress -4
    art    art +3, charm +1, stress +1
    train  strength +3, stress +2

Skill bonus is level // 2 (+1 at lv2, lv4, ...). It is added to every
non-stress, non-morality delta, and work earns an extra bonus × 10 money.
Each applied schedule grants +1 exp to that activity's skill; the next level
needs 6 + 2 × level exp, and at most one level is gained per application.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from raising_sim.models import Activity, Character, GameState, StatName
from raising_sim.timeline import clamp, clamp_money

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Schedule:
    label: str
    base: dict[StatName, int]
    money: int = 0


SCHEDULES: dict[Activity, Schedule] = {
    Activity.STUDY: Schedule("Study", {"intellect": 3, "stress": 2}),
    Activity.WORK: Schedule("Work", {"stress": 3}, money=50),
    Activity.REST: Schedule("Rest", {"stress": -4}),
    Activity.ART: Schedule("Art", {"art": 3, "charm": 1, "stress": 1}),
    Activity.TRAIN: Schedule("Train", {"strength": 3, "stress": 2}),
}

# stats that never receive the skill bonus
_NO_BONUS: frozenset[str] = frozenset({"stress", "morality"})

BIRTHDAY_STRESS = -6
BIRTHDAY_CHARM = 1
BIRTHDAY_COST = 20


@dataclass
class ScheduleOutcome:
    """What one application of a schedule changed, for the action card."""

    activity: Activity
    stat_deltas: dict[str, int] = field(default_factory=dict)
    money_delta: int = 0
    leveled_up: bool = False
    level: int = 0

    def as_payload(self) -> dict[str, Any]:
        return {
            "activity": self.activity.value,
            "stat_deltas": dict(self.stat_deltas),
            "money_delta": self.money_delta,
            "leveled_up": self.leveled_up,
            "level": self.level,
        }


def resolve_activity(value: Any) -> Activity:
    """Map a raw schedule selection to an Activity, defaulting to rest."""
    if isinstance(value, Activity):
        return value
    try:
        return Activity(str(value).lower())
    except ValueError:
        return Activity.REST


def exp_need(level: int) -> int:
    return 6 + level * 2


def skill_bonus(level: int) -> int:
    return level // 2


def adjust_stat(character: Character, stat: StatName, delta: int) -> int:
    """Add delta to a stat through the [0, 100] clamp. Returns the applied change."""
    before = character.stats.get(stat)
    after = int(clamp(before + delta, 0, 100))
    setattr(character.stats, stat, after)
    return after - before


def adjust_money(state: GameState, delta: int) -> int:
    before = state.money
    state.money = clamp_money(before + delta)
    return state.money - before


def apply_schedule(
    state: GameState, character: Character, activity: Activity | str
) -> ScheduleOutcome | None:
    """Apply one month of an activity. Returns None for unknown activities.

    The outcome is truthy on success, so callers that only care about the
    success flag can test it directly.
    """
    try:
        activity = Activity(activity)
    except ValueError:
        logger.warning("Unknown schedule %r for %s ignored", activity, character.id)
        return None

    schedule = SCHEDULES[activity]
    skill = character.skills[activity]
    bonus = skill_bonus(skill.level)
    outcome = ScheduleOutcome(activity=activity)

    for stat, base in schedule.base.items():
        delta = base if stat in _NO_BONUS else base + bonus
        outcome.stat_deltas[stat] = adjust_stat(character, stat, delta)

    money = schedule.money
    if activity is Activity.WORK:
        money += bonus * 10
    if money:
        outcome.money_delta = adjust_money(state, money)

    skill.exp += 1
    need = exp_need(skill.level)
    if skill.exp >= need:
        skill.exp -= need
        skill.level += 1
        outcome.leveled_up = True
    outcome.level = skill.level

    return outcome


def apply_birthday(state: GameState, character: Character) -> None:
    """Birthday month: a little less stress, a little more charm, cake costs money."""
    adjust_stat(character, "stress", BIRTHDAY_STRESS)
    adjust_stat(character, "charm", BIRTHDAY_CHARM)
    adjust_money(state, -BIRTHDAY_COST)
