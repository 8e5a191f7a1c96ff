"""HTML helpers built around justhtml."""

from __future__ import annotations

from typing import Any

from justhtml import JustHTML

from .text import normalize_whitespace

Node = Any


def parse_document(html: str) -> JustHTML:
    """Parse HTML without sanitization to preserve all structural tags."""
    return JustHTML(html, sanitize=False, safe=False)


def first(node: Node, selector: str) -> Node | None:
    """Return the first selector match or None."""
    matches = all_nodes(node, selector)
    return matches[0] if matches else None


def all_nodes(node: Node, selector: str) -> list[Node]:
    """Return all selector matches, guarding selector/runtime errors."""
    try:
        if hasattr(node, "query"):
            return list(node.query(selector))
    except Exception:
        return []
    return []


def text(node: Node | None) -> str:
    """Extract normalized text from a node."""
    if node is None:
        return ""
    try:
        if hasattr(node, "to_text"):
            return normalize_whitespace(node.to_text())
        if hasattr(node, "data") and isinstance(node.data, str):
            return normalize_whitespace(node.data)
    except Exception:
        return ""
    return ""


def fragment_text(fragment: str) -> str:
    """Flatten an HTML fragment (feature descriptions carry inline tags) to plain text."""
    if "<" not in fragment:
        return normalize_whitespace(fragment)
    body = first(parse_document(f"<html><body>{fragment}</body></html>"), "body")
    return text(body) or normalize_whitespace(fragment)
