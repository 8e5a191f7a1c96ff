"""Feature payload decoder: raw support-data JSON to FeatureRecord."""

from __future__ import annotations

from typing import cast

from .constants import KNOWN_FEATURE_KEYS
from .exceptions import RecordDecodeError
from .model import FeatureRecord, NotesIndex, StatsEntry, SupportValue
from .normalize import to_support_value


def _string_field(data: dict[str, object], key: str) -> str:
    value = data.get(key)
    if isinstance(value, str):
        return value
    return ""


def _parse_support(feature_id: str, raw: object) -> dict[str, SupportValue] | None:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise RecordDecodeError(feature_id, "'support' is not an object")
    return {
        str(target): to_support_value(value, feature_id=feature_id, target=str(target))
        for target, value in raw.items()
    }


def _parse_stats(feature_id: str, raw: object) -> dict[str, StatsEntry] | None:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise RecordDecodeError(feature_id, "'stats' is not an object")

    stats: dict[str, StatsEntry] = {}
    for target, versions in raw.items():
        if not isinstance(versions, dict):
            raise RecordDecodeError(feature_id, f"stats for {target} is not an object")
        entry: StatsEntry = {}
        for label, support in versions.items():
            if not isinstance(support, str):
                raise RecordDecodeError(
                    feature_id, f"stats value for {target} {label} is not a string"
                )
            entry[str(label)] = support
        stats[str(target)] = entry
    return stats


def _parse_notes(feature_id: str, raw: object) -> NotesIndex:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise RecordDecodeError(feature_id, "'notes_by_num' is not an object")
    notes: NotesIndex = {}
    for key, value in raw.items():
        if not isinstance(value, str):
            raise RecordDecodeError(feature_id, f"note {key} is not a string")
        notes[str(key).strip()] = value
    return notes


def unwrap_feature_payload(payload: object, feature_id: str) -> dict[str, object]:
    """Return the feature object from a support-data response.

    The endpoint answers with a list whose first element is the feature; a bare
    object is accepted as well.
    """
    if isinstance(payload, list):
        if not payload:
            raise RecordDecodeError(feature_id, "response list is empty")
        payload = payload[0]
    if not isinstance(payload, dict):
        raise RecordDecodeError(feature_id, f"expected an object, got {type(payload).__name__}")
    return cast(dict[str, object], payload)


def parse_feature_record(data: dict[str, object], feature_id: str) -> FeatureRecord:
    """Decode known fields strictly and keep every other key, in order, as extra."""
    return FeatureRecord(
        feature_id=feature_id,
        title=_string_field(data, "title"),
        description=_string_field(data, "description"),
        spec=_string_field(data, "spec"),
        status=_string_field(data, "status"),
        mdn_url=_string_field(data, "mdn_url"),
        support=_parse_support(feature_id, data.get("support")),
        stats=_parse_stats(feature_id, data.get("stats")),
        notes_by_num=_parse_notes(feature_id, data.get("notes_by_num")),
        extra={key: value for key, value in data.items() if key not in KNOWN_FEATURE_KEYS},
    )


def parse_feature_payload(payload: object, feature_id: str) -> FeatureRecord:
    return parse_feature_record(unwrap_feature_payload(payload, feature_id), feature_id)
