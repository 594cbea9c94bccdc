"""UTC-focused helpers for run metadata."""

from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def utc_timestamp_iso() -> str:
    return utc_now().isoformat(timespec="milliseconds")


def filename_timestamp(moment: datetime) -> str:
    """'2026-10-19T08:15:02.123+00:00' -> '2026-10-19-08-15-02'."""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%d-%H-%M-%S")
