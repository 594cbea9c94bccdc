r"""CSV serialisation of enriched rows.

Rows go through ``csv.writer`` with minimal quoting, which also quotes values
containing ``\r`` and writes a row made of a single empty value as ``""``.
Both still read back to the original values with a standard CSV reader.
"""

from __future__ import annotations

import csv
import io
from typing import Mapping, Sequence


def _serialize_value(value: object) -> str:
    if value is None:
        return ""
    return str(value)


def to_csv(rows: Sequence[Mapping[str, object]], header: Sequence[str]) -> str:
    """Header line as-is, then one quoted-as-needed line per row; no trailing newline."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    for row in rows:
        writer.writerow([_serialize_value(row.get(name)) for name in header])
    body = buffer.getvalue()
    if body.endswith("\n"):
        body = body[:-1]
    lines = [",".join(header)]
    if rows:
        lines.append(body)
    return "\n".join(lines)
