"""Numeric and calendar helpers shared by every engine module.

The game runs for ten in-game years of twelve months each. Time is tracked as
a zero-based absolute month index:

    index 0   → year 1, month 1
    index 11  → year 1, month 12 (tournament month)
    index 119 → year 10, month 12 (last playable month)
    index 120 → game over
"""

from __future__ import annotations

YEARS = 10
MONTHS_PER_YEAR = 12
MAX_MONTHS = YEARS * MONTHS_PER_YEAR

MONEY_CEILING = 999_999

# (sign, month, first_day): a sign runs from its first day until the next entry
_ZODIAC_STARTS: list[tuple[str, int, int]] = [
    ("Capricorn", 1, 1),
    ("Aquarius", 1, 20),
    ("Pisces", 2, 19),
    ("Aries", 3, 21),
    ("Taurus", 4, 20),
    ("Gemini", 5, 21),
    ("Cancer", 6, 22),
    ("Leo", 7, 23),
    ("Virgo", 8, 23),
    ("Libra", 9, 23),
    ("Scorpio", 10, 23),
    ("Sagittarius", 11, 23),
    ("Capricorn", 12, 22),
]


def clamp(value: int | float, low: int | float, high: int | float) -> int | float:
    """Return value limited to the closed range [low, high]."""
    return max(low, min(high, value))


def clamp_money(value: int) -> int:
    return int(clamp(value, 0, MONEY_CEILING))


def month_to_year_month(month_index: int) -> tuple[int, int]:
    """Convert a zero-based month index to a one-based (year, month) pair."""
    return month_index // MONTHS_PER_YEAR + 1, month_index % MONTHS_PER_YEAR + 1


def year_month_to_month(year: int, month: int) -> int:
    return (year - 1) * MONTHS_PER_YEAR + (month - 1)


def is_game_over(month_index: int) -> bool:
    return month_index >= MAX_MONTHS


def is_birthday_month(month_index: int, birth_month: int) -> bool:
    """True when the month being played is the character's birthday month."""
    _, month = month_to_year_month(month_index)
    return month == birth_month


def zodiac_from_birthday(month: int, day: int) -> str:
    """Western zodiac sign for a birthday; out-of-range input is clamped first."""
    mm = int(clamp(month, 1, 12))
    dd = int(clamp(day, 1, 31))
    sign = _ZODIAC_STARTS[0][0]
    for name, start_month, start_day in _ZODIAC_STARTS:
        if (mm, dd) >= (start_month, start_day):
            sign = name
    return sign
