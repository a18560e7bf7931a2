"""Random source protocol.

Every probability draw in the engine goes through an injected object matching
RandomSource. `random.Random` already satisfies it, so production code passes
`random.Random()` (or nothing, and gets the module default) while tests pass a
scripted source to pin exact branches.
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from typing import Protocol, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    def random(self) -> float: ...

    def choice(self, seq: Sequence[T]) -> T: ...


_default = random.Random()


def default_rng() -> RandomSource:
    return _default


def roll(rng: RandomSource, probability: float) -> bool:
    """True with the given probability."""
    return rng.random() < probability
