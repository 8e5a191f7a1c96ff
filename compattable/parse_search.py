"""Search payload decoder for the caniuse query backend."""

from __future__ import annotations

from collections.abc import Sequence
import re

from .constants import SEARCH_QUERY_URL
from .exceptions import ContentError

_FEATURE_ID_RE = re.compile(r"^[a-z0-9_.-]+$")


def normalize_feature_ids(values: Sequence[str] | None) -> list[str]:
    """Strip, lower-case and de-duplicate feature ids, keeping order."""
    if not values:
        return []
    output: list[str] = []
    seen: set[str] = set()
    for value in values:
        feature_id = value.strip().lower()
        if not feature_id or feature_id in seen:
            continue
        if not _FEATURE_ID_RE.fullmatch(feature_id):
            continue
        seen.add(feature_id)
        output.append(feature_id)
    return output


def parse_search_payload(payload: object) -> list[str]:
    """Extract ordered feature ids from a ``query.php`` response."""
    if not isinstance(payload, dict):
        raise ContentError(SEARCH_QUERY_URL)

    raw_ids = payload.get("featureIds") or payload.get("feature_ids") or []
    if not isinstance(raw_ids, list):
        return []

    return normalize_feature_ids([item for item in raw_ids if isinstance(item, str)])
