"""Support-data normalization: raw feature records to comparable table rows.

Everything here is pure. Callers hand in already-decoded records and get back
fresh value objects, so the functions are safe to call from worker threads.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import json
import re

from .constants import (
    NOTE_MARKER,
    NOTES_SUFFIX,
    PARTIAL_WORDS,
    SUPPORTED_WORDS,
    UNKNOWN_VERSION,
    UNSUPPORTED_WORDS,
)
from .exceptions import RecordDecodeError
from .model import (
    BooleanSupport,
    DetailSupport,
    FeatureRecord,
    FeatureTable,
    LabelSupport,
    NormalizedRow,
    SupportStatus,
    SupportValue,
)
from .util.text import parse_float

_NOTE_REF_RE = re.compile(rf"{re.escape(NOTE_MARKER)}([^\s{re.escape(NOTE_MARKER)}]+)")


def to_support_value(raw: object, *, feature_id: str = "", target: str = "") -> SupportValue:
    """Classify one decoded JSON support entry into its shape.

    Raises RecordDecodeError for anything that is not a bool, string or object.
    """
    if isinstance(raw, bool):
        return BooleanSupport(raw)
    if isinstance(raw, str):
        return LabelSupport(raw)
    if isinstance(raw, dict):
        return DetailSupport(dict(raw))
    raise RecordDecodeError(
        feature_id or "<unknown>",
        f"support entry for {target or '<unknown>'} is a {type(raw).__name__}",
    )


def _bool_text(value: bool) -> str:
    return "true" if value else "false"


def raw_version_string(value: SupportValue) -> str:
    """Return the textual support/version string for a SupportValue."""
    if isinstance(value, BooleanSupport):
        return _bool_text(value.value)
    if isinstance(value, LabelSupport):
        return value.text
    if isinstance(value, DetailSupport):
        version_added = value.fields.get("version_added")
        if isinstance(version_added, bool):
            return _bool_text(version_added)
        if isinstance(version_added, str):
            return version_added
        if isinstance(version_added, (int, float)):
            return json.dumps(version_added)
        return UNKNOWN_VERSION
    raise TypeError(f"Unsupported support value: {value!r}")


def _version_key(label: str) -> tuple[float, str]:
    parsed = parse_float(label)
    # NaN never compares as a maximum.
    if parsed is None or parsed != parsed:
        parsed = 0.0
    return parsed, label


def select_current_version(stats: Mapping[str, str]) -> tuple[str, str]:
    """Pick the (label, support) pair with the highest numeric version label.

    Unparseable labels count as 0.0. Equal values fall back to the
    lexicographically greatest label.
    """
    if not stats:
        return "", ""
    label = max(stats, key=_version_key)
    return label, stats[label]


def classify_support(raw: str) -> SupportStatus:
    if raw == "false":
        return "n"
    if parse_float(raw) is not None:
        return "y"
    lowered = raw.lower()
    if lowered in SUPPORTED_WORDS:
        return "y"
    if lowered in UNSUPPORTED_WORDS:
        return "n"
    if lowered in PARTIAL_WORDS:
        return "a"
    return "u"


def status_token(raw: str) -> str:
    """Return the leading non-footnote token of a support string."""
    for token in raw.split():
        if not token.startswith(NOTE_MARKER):
            return token
    return ""


def extract_note_refs(raw: str) -> list[str]:
    """Extract footnote numbers (``#1`` -> ``1``) in first-seen order."""
    refs: list[str] = []
    seen: set[str] = set()
    for match in _NOTE_REF_RE.finditer(raw):
        ref = match.group(1)
        if ref in seen:
            continue
        seen.add(ref)
        refs.append(ref)
    return refs


def resolve_notes(raw: str, notes: Mapping[str, str] | None) -> tuple[str, ...]:
    """Resolve footnote references against the notes index; unknown ones are dropped."""
    if not notes:
        return ()
    return tuple(f"#{ref}: {notes[ref]}" for ref in extract_note_refs(raw) if ref in notes)


def annotate_version(raw: str) -> str:
    if NOTE_MARKER in raw:
        return f"{raw}{NOTES_SUFFIX}"
    return raw


def _build_row(
    target: str,
    raw: str,
    notes: Mapping[str, str],
    *,
    version_label: str | None = None,
) -> NormalizedRow:
    return NormalizedRow(
        target=target,
        status=classify_support(status_token(raw)),
        support_text=annotate_version(raw),
        notes=resolve_notes(raw, notes),
        version_label=version_label,
    )


def _wanted(target: str, targets: frozenset[str] | None) -> bool:
    return targets is None or target.lower() in targets


def _target_filter(targets: Iterable[str] | None) -> frozenset[str] | None:
    if targets is None:
        return None
    cleaned = frozenset(item.strip().lower() for item in targets if item.strip())
    return cleaned or None


def build_rows(
    record: FeatureRecord,
    targets: Iterable[str] | None = None,
) -> list[NormalizedRow]:
    """Build one row per target, preferring the support map over stats."""
    wanted = _target_filter(targets)
    notes = record.notes_by_num

    if record.support is not None:
        return [
            _build_row(target, raw_version_string(value), notes)
            for target, value in record.support.items()
            if _wanted(target, wanted)
        ]

    if record.stats is not None:
        rows: list[NormalizedRow] = []
        for target, versions in record.stats.items():
            if not _wanted(target, wanted):
                continue
            label, support = select_current_version(versions)
            rows.append(_build_row(target, support, notes, version_label=label or None))
        return rows

    return []


def normalize_feature(
    record: FeatureRecord,
    targets: Iterable[str] | None = None,
) -> FeatureTable:
    """Normalize a record into rows plus its untouched extra-fields bag."""
    if record.support is not None:
        source = "support"
    elif record.stats is not None:
        source = "stats"
    else:
        source = None
    return FeatureTable(
        feature=record,
        rows=build_rows(record, targets),
        extra=record.extra,
        source=source,
    )
