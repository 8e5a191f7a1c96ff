"""Console renderer for normalized feature tables."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import json

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .constants import NO_DATA_LINE, NO_SELECTED_DATA_LINE
from .model import FeatureTable, NormalizedRow
from .util.html import fragment_text
from .util.text import ellipsize

_EXTRA_VALUE_WIDTH = 200


def render_search_header(query: str, feature_ids: Sequence[str]) -> Group:
    """Render the search term and the feature ids it resolved to."""
    lines: list[Text] = [
        Text("🔍 Search term:", style="bold green"),
        Text(query, style="yellow"),
        Text(""),
        Text("🏷️  Selected feature IDs:", style="bold green"),
    ]
    lines.extend(Text(f"  • {feature_id}", style="yellow") for feature_id in feature_ids)
    return Group(*lines)


def support_table(rows: Sequence[NormalizedRow], *, show_version: bool = False) -> Table:
    table = Table(show_header=True, header_style="bold", show_lines=True)
    table.add_column("Browser", no_wrap=True)
    if show_version:
        table.add_column("Version", no_wrap=True)
    table.add_column("Support")
    table.add_column("Notes")

    for row in rows:
        cells = [Text(f"{row.icon} {row.target}")]
        if show_version:
            cells.append(Text(row.version_label or ""))
        cells.append(Text(row.support_text))
        cells.append(Text(row.notes_text))
        table.add_row(*cells)
    return table


def _note_sort_key(item: tuple[str, str]) -> tuple[int, str]:
    key = item[0].strip()
    if key.isdigit():
        return (0, f"{int(key):08d}")
    return (1, key)


def _notes_lines(notes_by_num: Mapping[str, str]) -> list[Text]:
    return [
        Text(f"  Note {num}: {note}")
        for num, note in sorted(notes_by_num.items(), key=_note_sort_key)
    ]


def _extra_value(value: object) -> str:
    if isinstance(value, str):
        text_value = value
    else:
        text_value = json.dumps(value, ensure_ascii=False, sort_keys=False)
    return ellipsize(text_value, _EXTRA_VALUE_WIDTH)


def _extra_lines(extra: Mapping[str, object]) -> list[Text]:
    lines: list[Text] = []
    for key, value in extra.items():
        line = Text("  ")
        line.append(f"{key}:", style="bold")
        line.append(f" {_extra_value(value)}")
        lines.append(line)
    return lines


def render_feature(table: FeatureTable, index: int = 1) -> Panel:
    """Render one normalized feature as a Rich panel."""
    feature = table.feature
    parts: list[RenderableType] = []

    parts.append(Text(f"📌 Title: {feature.title or feature.feature_id}", style="bold"))
    if feature.description:
        parts.append(Text(f"📝 Description: {fragment_text(feature.description)}"))
    if feature.spec:
        parts.append(Text(f"📘 Spec: {feature.spec}"))
    if feature.status:
        parts.append(Text(f"🚦 Status: {feature.status}"))
    if feature.mdn_url:
        parts.append(Text(f"🔗 MDN URL: {feature.mdn_url}"))

    parts.append(Text(""))
    parts.append(Text("🖥️  Browser Compatibility:", style="bold"))
    if table.rows:
        parts.append(support_table(table.rows, show_version=table.source == "stats"))
    elif table.has_data:
        parts.append(Text(f"  {NO_SELECTED_DATA_LINE}", style="dim"))
    else:
        parts.append(Text(f"  {NO_DATA_LINE}", style="dim"))

    if feature.notes_by_num:
        parts.append(Text(""))
        parts.append(Text("📓 Notes:", style="bold"))
        parts.extend(_notes_lines(feature.notes_by_num))

    extra_lines = _extra_lines(table.extra)
    if extra_lines:
        parts.append(Text(""))
        parts.append(Text("ℹ️  Extra information:", style="bold"))
        parts.extend(extra_lines)

    return Panel(
        Group(*parts),
        border_style="blue",
        title=f"🔹 Feature {index}: /{feature.feature_id}",
        title_align="left",
    )
