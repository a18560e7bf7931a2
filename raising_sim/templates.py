"""Handlebars rendering for card text.

Card narration and dialogue lines are Handlebars templates rendered against a
small context (year, month, character names, tone words). Cards are plain
text, so templates use triple-stash `{{{name}}}` to skip HTML escaping.
"""

from collections.abc import Callable
from typing import Any

import pybars


_compiler = pybars.Compiler()
_cache: dict[str, Callable] = {}


class TemplateError(Exception):
    """Raised when a Handlebars template fails to compile or render."""


# ── Custom Handlebars helpers ────────────────────────────


def _helper_join(this, items, separator=", "):
    """{{join array ", "}} — join a list of strings."""
    return separator.join(str(i) for i in items or [])


def _helper_signed(this, value):
    """{{signed n}} — render a delta with an explicit sign (+3 / -2)."""
    return f"{int(value):+d}"


_HELPERS: dict[str, Callable] = {
    "join": _helper_join,
    "signed": _helper_signed,
}


def render(template_str: str, context: dict[str, Any]) -> str:
    """Compile and render a Handlebars template with the given context.

    Templates are cached by source string to avoid recompilation.
    """
    try:
        compiled = _cache.get(template_str)
        if compiled is None:
            compiled = _compiler.compile(template_str)
            _cache[template_str] = compiled
        return str(compiled(context, helpers=_HELPERS))
    except Exception as e:
        raise TemplateError(f"Template error: {e}") from e
