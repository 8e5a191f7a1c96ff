"""Constants used across compattable."""

from __future__ import annotations

from typing import Final

BASE_URL: Final[str] = "https://caniuse.com"
SEARCH_QUERY_URL: Final[str] = f"{BASE_URL}/process/query.php"
FEATURE_DATA_URL: Final[str] = f"{BASE_URL}/process/get_feat_data.php"

STATUS_ICON_MAP: Final[dict[str, str]] = {
    "y": "✅",
    "n": "❌",
    "a": "🟨",
    "u": "❓",
}

STATUS_LABEL_MAP: Final[dict[str, str]] = {
    "y": "Supported",
    "n": "Not supported",
    "a": "Partial support",
    "u": "Unknown",
}

SUPPORTED_WORDS: Final[frozenset[str]] = frozenset({"y", "true"})
UNSUPPORTED_WORDS: Final[frozenset[str]] = frozenset({"n", "false"})
PARTIAL_WORDS: Final[frozenset[str]] = frozenset({"a", "partial"})

UNKNOWN_VERSION: Final[str] = "unknown"
NOTE_MARKER: Final[str] = "#"
NOTES_SUFFIX: Final[str] = " (see notes)"
NOTES_SEPARATOR: Final[str] = "\n"

# Record keys that are decoded into FeatureRecord fields; everything else is extra.
KNOWN_FEATURE_KEYS: Final[tuple[str, ...]] = (
    "title",
    "description",
    "spec",
    "status",
    "mdn_url",
    "support",
    "stats",
    "notes_by_num",
)

NO_DATA_LINE: Final[str] = "No compatibility data available."
NO_SELECTED_DATA_LINE: Final[str] = "No data for the selected browsers."

DEBUG_ENV_VAR: Final[str] = "COMPATTABLE_DEBUG"
DEFAULT_TIMEOUT_SECONDS: Final[float] = 10.0
DEFAULT_WORKERS: Final[int] = 4
