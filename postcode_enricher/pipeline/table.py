"""On-screen preview grid for enriched rows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Sequence

from postcode_enricher.common.constants import PREVIEW_ROW_LIMIT


@dataclass(frozen=True)
class TableView:
    header: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...]
    total_rows: int

    @property
    def truncated(self) -> bool:
        return self.total_rows > len(self.rows)


def _cell(value: object) -> str:
    return "" if value is None else str(value)


def render_table(
    rows: Sequence[Mapping[str, object]],
    header: Sequence[str],
    limit: int = PREVIEW_ROW_LIMIT,
) -> TableView | None:
    """None means the results view is hidden."""
    if not rows:
        return None
    grid = tuple(tuple(_cell(row.get(name)) for name in header) for row in rows[:limit])
    return TableView(header=tuple(header), rows=grid, total_rows=len(rows))


def format_table(view: TableView | None) -> str:
    if view is None:
        return ""
    widths = [len(name) for name in view.header]
    for row in view.rows:
        for idx, value in enumerate(row):
            widths[idx] = max(widths[idx], len(value))

    def _line(values: Sequence[str]) -> str:
        return " | ".join(value.ljust(widths[idx]) for idx, value in enumerate(values)).rstrip()

    lines = [_line(view.header), "-+-".join("-" * width for width in widths)]
    lines.extend(_line(row) for row in view.rows)
    if view.truncated:
        lines.append(f"… showing {len(view.rows)} of {view.total_rows} rows")
    return "\n".join(lines)
