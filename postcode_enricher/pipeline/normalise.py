"""Free-text postcode list parsing: compaction, validation and dedup."""

from __future__ import annotations

import re

UK_UNIT_POSTCODE_RE = re.compile(r"^([A-Z]{1,2}\d[A-Z\d]?)(\d[A-Z]{2})$")

_TOKEN_SPLIT_RE = re.compile(r",|\r?\n")
_NON_ALNUM_RE = re.compile(r"[^A-Z0-9]")


def normalise_postcode(token: str | None) -> str | None:
    """Return the canonical 'OUTWARD INWARD' form, or None for unusable tokens."""
    if token is None:
        return None

    compact = _NON_ALNUM_RE.sub("", token.strip().upper())
    if len(compact) < 5 or len(compact) > 8:
        return None

    match = UK_UNIT_POSTCODE_RE.match(compact)
    if match is None:
        return None
    return f"{match.group(1)} {match.group(2)}"


def parse_postcodes(raw: str) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for token in _TOKEN_SPLIT_RE.split(raw or ""):
        postcode = normalise_postcode(token)
        if postcode is None or postcode in seen:
            continue
        seen.add(postcode)
        out.append(postcode)
    return out
