"""Shared test doubles: deterministic random sources and a stub narrative service."""

from collections.abc import Sequence
from typing import Any

from raising_sim.models import Card, Character, GameState
from raising_sim.narrative import NarrativeError, parse_card
from raising_sim.relations import ensure_relations


class FixedRandom:
    """Every draw returns the same value; choice() always picks the first item.

    FixedRandom(0.0) makes every probabilistic branch fire,
    FixedRandom(0.99) makes none of them fire.
    """

    def __init__(self, value: float) -> None:
        self.value = value
        self.draws = 0

    def random(self) -> float:
        self.draws += 1
        return self.value

    def choice(self, seq: Sequence[Any]) -> Any:
        return seq[0]


class ScriptedRandom:
    """Returns the scripted values in order, then repeats the last one."""

    def __init__(self, values: Sequence[float]) -> None:
        self._values = list(values)
        self._i = 0

    def random(self) -> float:
        value = self._values[min(self._i, len(self._values) - 1)]
        self._i += 1
        return value

    def choice(self, seq: Sequence[Any]) -> Any:
        return seq[0]


class StubNarrative:
    """Plays back a list of responses: dicts become cards, exceptions are raised."""

    def __init__(self, responses: list[Any]) -> None:
        self._responses = list(responses)
        self.requests: list[dict] = []

    async def __call__(self, request: dict) -> Card:
        self.requests.append(request)
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        if item is None:
            raise NarrativeError("stub failure")
        return parse_card(item, request["year"], request["month"])


def make_state(*names: str, month_index: int = 0, money: int = 100, **char_fields: Any) -> GameState:
    """A game with the named characters (birthdays in June unless overridden)."""
    chars = []
    for i, name in enumerate(names or ("Hana",)):
        fields = {"id": f"c{i + 1}", "name": name, "birthday": {"month": 6, "day": 15}}
        fields.update(char_fields)
        chars.append(Character.model_validate(fields))
    state = GameState(characters=chars, month_index=month_index, money=money)
    ensure_relations(state)
    return state
