"""Global app configuration (narrative service connection defaults)."""

import json
import os
from pathlib import Path
from typing import Any

from .deps import data_dir


def _defaults() -> dict[str, Any]:
    return {
        "narrative_url": os.getenv("NARRATIVE_URL", ""),
        "narrative_timeout": float(os.getenv("NARRATIVE_TIMEOUT", "20")),
    }


def _config_path() -> Path:
    return data_dir() / "config.json"


def get_config() -> dict[str, Any]:
    """Read config, returning defaults merged with stored values."""
    config = _defaults()
    path = _config_path()
    if path.is_file():
        stored = json.loads(path.read_text())
        if stored.get("narrative_url"):
            config["narrative_url"] = stored["narrative_url"]
        if "narrative_timeout" in stored:
            config["narrative_timeout"] = float(stored["narrative_timeout"])
    return config


def update_config(fields: dict[str, Any]) -> dict[str, Any]:
    """Merge fields into config and persist. Returns full config."""
    config = get_config()
    if "narrative_url" in fields:
        config["narrative_url"] = str(fields["narrative_url"] or "")
    if "narrative_timeout" in fields:
        config["narrative_timeout"] = max(1.0, float(fields["narrative_timeout"]))
    _config_path().write_text(json.dumps(config, indent=2))
    return config
