"""Data models used across the pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Sequence, Union

EnrichedRow = Mapping[str, str]


@dataclass(frozen=True)
class Matched:
    query: str
    fields: Mapping[str, Any] = field(default_factory=dict)

    @property
    def postcode(self) -> str:
        return str(self.fields.get("postcode") or self.query or "").upper()


@dataclass(frozen=True)
class Unmatched:
    query: str

    @property
    def postcode(self) -> str:
        return (self.query or "").upper()


LookupResult = Union[Matched, Unmatched]


def parse_lookup_item(item: Any, fallback_query: str = "") -> LookupResult:
    """Classify one element of the bulk lookup ``result`` array."""
    if not isinstance(item, Mapping):
        return Unmatched(query=fallback_query)
    query = item.get("query") or fallback_query
    result = item.get("result")
    if isinstance(result, Mapping):
        return Matched(query=query, fields=result)
    return Unmatched(query=query)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def to_row(result: LookupResult, fields: Sequence[str]) -> EnrichedRow:
    row = {"postcode": result.postcode}
    for name in fields:
        if isinstance(result, Matched):
            row[name] = _as_text(result.fields.get(name))
        else:
            row[name] = ""
    return MappingProxyType(row)
