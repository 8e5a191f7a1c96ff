"""Text utility helpers."""

from __future__ import annotations

import re

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_whitespace(value: str) -> str:
    """Collapse repeated whitespace and trim ends."""
    return _WHITESPACE_RE.sub(" ", value).strip()


def parse_float(value: str | None) -> float | None:
    """Parse a string that is entirely a float literal, else return None."""
    if not value or not value.isascii() or value != value.strip() or "_" in value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def ellipsize(value: str, width: int) -> str:
    """Shorten long strings while preserving suffix visibility."""
    if width <= 0:
        return ""
    if len(value) <= width:
        return value
    if width <= 1:
        return "…"
    return f"{value[: width - 1]}…"
