"""JSON file storage for game states.

All state is stored in flat JSON files under a configurable base directory.
There is no database or ORM — reads and writes go through plain helper
methods that load and dump JSON.

Directory layout:

    {base}/
      games/
        {slug}.json           ← full GameState document

A saved document round-trips exactly. Zodiac signs are written for readers of
the file but never read back: they are re-derived from the stored birthday,
so documents from older versions with stale signs load correctly.
"""

from __future__ import annotations

import json
import logging
import re
import unicodedata
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from raising_sim.models import GameState

logger = logging.getLogger(__name__)


def slugify(title: str) -> str:
    """Convert a title to a filesystem-safe slug.

    "Summer of Year One" → "summer-of-year-one"
    """
    text = unicodedata.normalize("NFKD", title)
    text = text.encode("ascii", "ignore").decode("ascii")
    text = text.lower()
    text = re.sub(r"['\"]", "", text)  # strip apostrophes/quotes before hyphenation
    text = re.sub(r"[^a-z0-9]+", "-", text)
    text = text.strip("-")
    return text or "untitled"


def dump_state(state: GameState) -> dict[str, Any]:
    return state.model_dump(mode="json")


def load_state(data: dict[str, Any]) -> GameState:
    """Validate a stored document. Unknown legacy keys are ignored."""
    return GameState.model_validate(data)


class Storage:
    def __init__(self, base_path: Path) -> None:
        self._base = base_path
        self._games_root = base_path / "games"
        self._games_root.mkdir(parents=True, exist_ok=True)

    @property
    def base_path(self) -> Path:
        return self._base

    # ------------------------------------------------------------------
    # Internal path helpers
    # ------------------------------------------------------------------

    def _game_file(self, slug: str) -> Path:
        return self._games_root / f"{slug}.json"

    def _read_json(self, path: Path) -> Any:
        return json.loads(path.read_text(encoding="utf-8"))

    def _write_json(self, path: Path, data: Any) -> None:
        path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    # ------------------------------------------------------------------
    # Games
    # ------------------------------------------------------------------

    def unique_slug(self, title: str) -> str:
        """Slug for a new game, suffixed -2, -3, ... on collision."""
        base = slugify(title)
        slug = base
        n = 2
        while self._game_file(slug).exists():
            slug = f"{base}-{n}"
            n += 1
        return slug

    def save_game(self, slug: str, state: GameState) -> None:
        self._write_json(self._game_file(slug), dump_state(state))

    def load_game(self, slug: str) -> GameState | None:
        path = self._game_file(slug)
        if not path.is_file():
            return None
        try:
            return load_state(self._read_json(path))
        except (UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
            logger.warning("Unreadable game file %s: %s", path, e)
            return None

    def list_games(self) -> list[dict[str, Any]]:
        """Summaries of all saved games, sorted by slug."""
        results = []
        for path in sorted(self._games_root.glob("*.json"), key=lambda p: p.stem):
            state = self.load_game(path.stem)
            if state is None:
                continue
            results.append({
                "slug": path.stem,
                "month_index": state.month_index,
                "money": state.money,
                "characters": [c.name for c in state.characters],
                "last_run": state.last_run.isoformat() if state.last_run else None,
            })
        return results

    def delete_game(self, slug: str) -> bool:
        path = self._game_file(slug)
        if not path.is_file():
            return False
        path.unlink()
        return True

    def export_game(self, slug: str) -> str | None:
        """The stored document as pretty-printed JSON text."""
        state = self.load_game(slug)
        if state is None:
            return None
        return json.dumps(dump_state(state), indent=2)
