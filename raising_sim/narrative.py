"""Narrative service client — optional remote generator of highlight cards.

The game session injects a service callable matching the protocol:

    async def __call__(self, request: dict) -> Card: ...

`request` is built by build_request() from the game state after a month has
been committed. Implementations raise NarrativeError for every failure; the
session never lets that error escape (see fetch_remote_cards).

Two implementations are provided:

    HttpNarrativeService — real HTTP client, POSTs the request as JSON and
                           expects a card object back.
    StaticNarrative      — returns a fixed placeholder card. Useful for
                           smoke-testing the wiring without a running service.

Tests use StubNarrative (defined in the test helpers) instead.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Protocol

import httpx
from pydantic import ValidationError

from raising_sim.models import Card, GameState, new_id
from raising_sim.relations import relation_summary
from raising_sim.rules import resolve_activity
from raising_sim.timeline import month_to_year_month

logger = logging.getLogger(__name__)

MAX_RELATION_SUMMARIES = 12


# ---------------------------------------------------------------------------
# Protocol — every narrative service implementation must match this signature
# ---------------------------------------------------------------------------

class NarrativeService(Protocol):
    async def __call__(self, request: dict[str, Any]) -> Card: ...


# ---------------------------------------------------------------------------
# Request / response shaping
# ---------------------------------------------------------------------------

def build_request(
    state: GameState, schedules: Mapping[str, Any], month_index: int | None = None
) -> dict[str, Any]:
    """Context sent to the service: calendar, money, roster and relationship summaries."""
    index = state.month_index if month_index is None else month_index
    year, month = month_to_year_month(index)
    return {
        "kind": "event",
        "month_index": index,
        "year": year,
        "month": month,
        "money": state.money,
        "characters": [
            {
                "id": c.id,
                "name": c.name,
                "personality": c.personality,
                "zodiac": c.zodiac,
                "stats": c.stats.model_dump(),
                "schedule": resolve_activity(schedules.get(c.id)).value,
            }
            for c in state.characters
        ],
        "relations": [
            relation_summary(r, state.characters)
            for r in state.relations[:MAX_RELATION_SUMMARIES]
        ],
    }


def parse_card(data: Any, year: int, month: int) -> Card:
    """Validate a service response into a highlight Card stamped with year/month.

    Raises NarrativeError when the response is not a usable card.
    """
    if not isinstance(data, dict):
        raise NarrativeError(f"Card must be a JSON object, got {type(data).__name__}")
    meta = data.get("meta") if isinstance(data.get("meta"), dict) else {}
    try:
        return Card.model_validate({
            "id": data.get("id") or new_id("ai"),
            "type": "highlight",
            "year": year,
            "month": month,
            "title": data.get("title") or "Highlight",
            "narration": data.get("narration") or "",
            "dialogues": data.get("dialogues") or [],
            "choices": data.get("choices") or [],
            "meta": {**meta, "source": "remote"},
        })
    except ValidationError as e:
        raise NarrativeError(f"Malformed card from narrative service: {e}") from e


# ---------------------------------------------------------------------------
# HttpNarrativeService — connects to a real service
# ---------------------------------------------------------------------------

class HttpNarrativeService:
    """Async HTTP client for the narrative card service.

    POST {url}  body: build_request() output
    Response:   {"id"?, "title", "narration", "dialogues": [...],
                 "choices": [] | 3 × {"tag", "label"}, "meta"?}

    Args:
        url:     Endpoint URL.
        timeout: HTTP timeout in seconds. Defaults to 20.
    """

    def __init__(self, url: str, timeout: float = 20.0) -> None:
        self._url = url
        self._timeout = timeout

    async def __call__(self, request: dict[str, Any]) -> Card:
        logger.debug("narrative call url=%s chars=%d", self._url, len(request.get("characters", [])))

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(
                    self._url, json=request, headers={"Content-Type": "application/json"}
                )
                resp.raise_for_status()
        except httpx.ConnectError as e:
            raise NarrativeError(f"Cannot connect to narrative service at {self._url}") from e
        except httpx.HTTPStatusError as e:
            raise NarrativeError(
                f"Narrative service returned HTTP {e.response.status_code}"
            ) from e
        except httpx.TimeoutException as e:
            raise NarrativeError(f"Narrative service timed out after {self._timeout}s") from e
        except httpx.HTTPError as e:
            raise NarrativeError(f"Narrative service request failed: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise NarrativeError("Narrative service returned invalid JSON") from e

        card = parse_card(data, request.get("year", 1), request.get("month", 1))
        logger.debug("narrative card id=%s title=%r", card.id, card.title)
        return card


# ---------------------------------------------------------------------------
# StaticNarrative — no network calls
# ---------------------------------------------------------------------------

class StaticNarrative:
    """Returns a plain highlight card built from the request. No network calls."""

    async def __call__(self, request: dict[str, Any]) -> Card:
        names = ", ".join(c["name"] for c in request.get("characters", [])) or "Nobody"
        return parse_card(
            {"title": "This month's highlight", "narration": f"{names} got through the month."},
            request.get("year", 1),
            request.get("month", 1),
        )


# ---------------------------------------------------------------------------
# Fetching: failures degrade to fewer cards
# ---------------------------------------------------------------------------

async def fetch_remote_cards(
    service: NarrativeService, request: dict[str, Any], count: int
) -> list[Card]:
    """Ask the service for up to `count` cards. Failed calls are logged and dropped."""
    cards: list[Card] = []
    for _ in range(max(count, 0)):
        try:
            cards.append(await service(request))
        except NarrativeError as e:
            logger.warning("Narrative card skipped: %s", e)
        except Exception:
            logger.exception("Unexpected narrative service failure, card skipped")
    return cards


def remote_card_count(state: GameState) -> int:
    if state.settings.extra_cards is not None:
        return max(state.settings.extra_cards, 0)
    return 3 + min(3, len(state.characters))


# ---------------------------------------------------------------------------
# NarrativeError: raised by implementations for all failures
# ---------------------------------------------------------------------------

class NarrativeError(RuntimeError):
    """Raised when the narrative service cannot be reached or returns an unusable card."""
