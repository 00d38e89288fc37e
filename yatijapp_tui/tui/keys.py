"""Key name helpers.

Textual names punctuation keys (``less_than_sign``, ``question_mark``...);
pages match on the printed character instead, so incoming key names are
normalised through :func:`normalize_key` first.
"""

from __future__ import annotations

from typing import Optional

_ALIASES = {
    "less_than_sign": "<",
    "greater_than_sign": ">",
    "question_mark": "?",
    "slash": "/",
    "ctrl+slash": "ctrl+/",
    # Most terminals send ctrl+/ as the ctrl+_ control code.
    "ctrl+underscore": "ctrl+/",
    "escape": "esc",
}

_FN_KEYS = tuple(f"f{n}" for n in range(1, 13))


def normalize_key(key: str, character: Optional[str] = None) -> str:
    """Map a Textual key name to the short form pages switch on."""
    if key in _ALIASES:
        return _ALIASES[key]
    if character and len(character) == 1 and character.isprintable() and key != "space":
        return character
    return key


def is_fn_key(key: str) -> bool:
    """``True`` for ``f1`` ... ``f12``."""
    return key in _FN_KEYS


def fn_key_number(key: str) -> int:
    """``"f3"`` -> ``3``; raises :class:`ValueError` for anything else."""
    if not is_fn_key(key):
        raise ValueError(f"not a function key: {key!r}")
    return int(key[1:])
