"""Data models for feature records and normalized support rows."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Union

from .constants import NOTES_SEPARATOR, STATUS_ICON_MAP, STATUS_LABEL_MAP

SupportStatus = Literal["y", "n", "a", "u"]
StatsEntry = dict[str, str]
NotesIndex = dict[str, str]


@dataclass(frozen=True)
class BooleanSupport:
    value: bool


@dataclass(frozen=True)
class LabelSupport:
    text: str


@dataclass(frozen=True)
class DetailSupport:
    """Free-form support object; only ``version_added`` is ever read."""

    fields: dict[str, object]


SupportValue = Union[BooleanSupport, LabelSupport, DetailSupport]


@dataclass(frozen=True)
class NormalizedRow:
    target: str
    status: SupportStatus
    support_text: str
    notes: tuple[str, ...] = ()
    version_label: str | None = None

    @property
    def icon(self) -> str:
        return STATUS_ICON_MAP.get(self.status, STATUS_ICON_MAP["u"])

    @property
    def label(self) -> str:
        return STATUS_LABEL_MAP.get(self.status, STATUS_LABEL_MAP["u"])

    @property
    def notes_text(self) -> str:
        return NOTES_SEPARATOR.join(self.notes)


@dataclass(frozen=True)
class FeatureRecord:
    feature_id: str
    title: str = ""
    description: str = ""
    spec: str = ""
    status: str = ""
    mdn_url: str = ""
    support: dict[str, SupportValue] | None = None
    stats: dict[str, StatsEntry] | None = None
    notes_by_num: NotesIndex = field(default_factory=dict)
    extra: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class FeatureTable:
    feature: FeatureRecord
    rows: list[NormalizedRow]
    extra: dict[str, object] = field(default_factory=dict)
    source: Literal["support", "stats"] | None = None

    @property
    def has_data(self) -> bool:
        return self.source is not None
