"""Run orchestration: one enrichment run at a time over an explicit state object."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Sequence

from postcode_enricher.common.constants import FILENAME_PREFIX, HEADER, PREVIEW_ROW_LIMIT
from postcode_enricher.common.errors import EnricherError
from postcode_enricher.common.ids import generate_run_id
from postcode_enricher.common.logging import log_event
from postcode_enricher.common.models import EnrichedRow
from postcode_enricher.common.time_utils import utc_now
from postcode_enricher.pipeline.artifact import CsvArtifact, artifact_filename
from postcode_enricher.pipeline.enrich import BatchEnricher
from postcode_enricher.pipeline.export import to_csv
from postcode_enricher.pipeline.normalise import parse_postcodes
from postcode_enricher.pipeline.table import TableView, render_table

STATUS_EMPTY_INPUT = "Please paste at least one postcode."
STATUS_RUNNING = "Enriching data..."
STATUS_FAILED = "Error enriching data. Please try again."


class Phase(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"


@dataclass
class AppState:
    phase: Phase = Phase.IDLE
    status: str = ""
    run_id: str | None = None
    rows: list[EnrichedRow] = field(default_factory=list)
    table: TableView | None = None
    artifact: CsvArtifact | None = None
    run_enabled: bool = True
    download_enabled: bool = False


class EnrichmentController:
    def __init__(
        self,
        enricher: BatchEnricher,
        *,
        header: Sequence[str] = HEADER,
        preview_row_limit: int = PREVIEW_ROW_LIMIT,
        filename_prefix: str = FILENAME_PREFIX,
        clock: Callable[[], datetime] = utc_now,
        on_status: Callable[[str], None] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.enricher = enricher
        self.header = tuple(header)
        self.preview_row_limit = preview_row_limit
        self.filename_prefix = filename_prefix
        self.clock = clock
        self.listener = on_status
        self.logger = logger or enricher.logger
        self.state = AppState()
        self.enricher.on_status = self.set_status

    def set_status(self, message: str) -> None:
        self.state.status = message
        if self.listener is not None:
            self.listener(message)

    def _release_artifact(self) -> None:
        artifact = self.state.artifact
        if artifact is None:
            return
        artifact.release()
        self.state.artifact = None
        log_event(
            self.logger,
            f"released artifact {artifact.filename}",
            run_id=self.state.run_id,
            stage="export",
            event="ARTIFACT_RELEASE",
            status="ok",
        )

    def _fail(self, error_code: str) -> None:
        self._release_artifact()
        self.state.phase = Phase.FAILED
        self.state.rows = []
        self.state.table = None
        self.state.download_enabled = False
        self.set_status(STATUS_FAILED)
        log_event(
            self.logger,
            "run failed",
            run_id=self.state.run_id,
            stage="run",
            event="RUN_FAIL",
            status="error",
            error_code=error_code,
        )

    def _complete(self, rows: list[EnrichedRow]) -> None:
        self.state.rows = rows
        self.state.table = render_table(rows, self.header, limit=self.preview_row_limit)
        csv_text = to_csv(rows, self.header)
        filename = artifact_filename(self.clock(), prefix=self.filename_prefix)

        self._release_artifact()
        self.state.artifact = CsvArtifact(filename, csv_text)
        self.state.download_enabled = True
        self.state.phase = Phase.DONE
        self.set_status(f"Enriched {len(rows)} postcodes")

    def run(self, raw_text: str) -> AppState:
        codes = parse_postcodes(raw_text)
        if not codes:
            self.set_status(STATUS_EMPTY_INPUT)
            return self.state

        run_id = generate_run_id()
        self.enricher.run_id = run_id
        self.state.run_id = run_id
        self.state.phase = Phase.RUNNING
        self.state.run_enabled = False
        self.state.download_enabled = False
        self.state.table = None
        self.set_status(STATUS_RUNNING)
        log_event(
            self.logger,
            "run start",
            run_id=run_id,
            stage="run",
            event="RUN_START",
            status="ok",
            rows_in=len(codes),
        )

        started = time.monotonic()
        try:
            rows = self.enricher.enrich(codes)
        except EnricherError as exc:
            self._fail(exc.error_code)
        except Exception:
            self.logger.exception("unexpected failure during enrichment")
            self._fail("UNEXPECTED_ERROR")
        else:
            self._complete(rows)
            log_event(
                self.logger,
                "run end",
                run_id=run_id,
                stage="run",
                event="RUN_END",
                status="ok",
                rows_in=len(codes),
                rows_out=len(rows),
                duration_ms=int((time.monotonic() - started) * 1000),
            )
        finally:
            self.state.run_enabled = True
        return self.state

    def download_payload(self) -> tuple[str, bytes] | None:
        artifact = self.state.artifact
        if not self.state.download_enabled or artifact is None:
            return None
        return artifact.filename, artifact.read()

    def download(self, dest_dir: Path) -> Path | None:
        """Write the current CSV into dest_dir; None when there is nothing to download."""
        if not self.state.download_enabled or self.state.artifact is None:
            return None
        return self.state.artifact.save(dest_dir)
