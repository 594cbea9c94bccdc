"""Downloadable CSV artifact with an explicit acquire/release lifecycle."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from postcode_enricher.common.constants import FILENAME_PREFIX
from postcode_enricher.common.errors import ArtifactReleasedError
from postcode_enricher.common.fs import write_bytes
from postcode_enricher.common.time_utils import filename_timestamp

DEFAULT_FILENAME = f"{FILENAME_PREFIX}.csv"


def artifact_filename(completed_at: datetime, prefix: str = FILENAME_PREFIX) -> str:
    return f"{prefix}_{filename_timestamp(completed_at)}.csv"


class CsvArtifact:
    """In-memory UTF-8 CSV document held until released."""

    media_type = "text/csv;charset=utf-8"

    def __init__(self, filename: str, csv_text: str) -> None:
        self.filename = filename or DEFAULT_FILENAME
        self._payload: bytes | None = csv_text.encode("utf-8")

    @property
    def released(self) -> bool:
        return self._payload is None

    def read(self) -> bytes:
        if self._payload is None:
            raise ArtifactReleasedError(f"Artifact {self.filename} has been released")
        return self._payload

    def save(self, dest_dir: Path) -> Path:
        out_path = dest_dir / self.filename
        write_bytes(out_path, self.read())
        return out_path

    def release(self) -> None:
        self._payload = None
