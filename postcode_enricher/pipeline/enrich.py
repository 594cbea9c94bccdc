"""Batched postcode enrichment against the bulk lookup API."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Sequence

from tenacity import RetryCallState, Retrying, retry_if_exception_type, stop_after_attempt

from postcode_enricher.common.constants import (
    API_URL,
    BATCH_PAUSE_MS,
    FIELDS,
    MAX_BATCH,
    RETRY_BACKOFF_MS,
    RETRY_MAX_ATTEMPTS,
)
from postcode_enricher.common.errors import BatchExhaustedError, HttpRequestError
from postcode_enricher.common.http import HttpClient
from postcode_enricher.common.logging import log_event
from postcode_enricher.common.models import EnrichedRow, Unmatched, parse_lookup_item, to_row

StatusCallback = Callable[[str], None]


def linear_backoff(step_ms: int) -> Callable[[int], float]:
    """Wait step_ms * attempt, in seconds."""

    def _wait(attempt: int) -> float:
        return step_ms * attempt / 1000.0

    return _wait


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = RETRY_MAX_ATTEMPTS
    backoff: Callable[[int], float] = field(default=linear_backoff(RETRY_BACKOFF_MS))


def chunked(items: Sequence[str], size: int) -> Iterator[tuple[int, list[str]]]:
    """Yield (offset, chunk) pairs of consecutive slices of at most size items."""
    if size <= 0:
        raise ValueError("size must be positive")
    for offset in range(0, len(items), size):
        yield offset, list(items[offset : offset + size])


def _ignore_status(_message: str) -> None:
    return None


class BatchEnricher:
    def __init__(
        self,
        client: HttpClient,
        *,
        api_url: str = API_URL,
        fields: Sequence[str] = FIELDS,
        batch_size: int = MAX_BATCH,
        pause_ms: int = BATCH_PAUSE_MS,
        retry: RetryPolicy | None = None,
        sleep: Callable[[float], None] | None = None,
        on_status: StatusCallback | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.client = client
        self.api_url = api_url
        self.fields = tuple(fields)
        self.batch_size = batch_size
        self.pause_ms = pause_ms
        self.retry = retry or RetryPolicy()
        self.sleep = sleep or time.sleep
        self.on_status = on_status or _ignore_status
        self.logger = logger or logging.getLogger("postcode_enricher")
        self.run_id: str | None = None

    def fetch_batch(self, chunk: Sequence[str]) -> list[Any]:
        payload = self.client.post_json(self.api_url, {"postcodes": list(chunk)})
        return payload.get("result") or []

    def _on_retry(self, start: int, end: int) -> Callable[[RetryCallState], None]:
        def _notify(retry_state: RetryCallState) -> None:
            attempt = retry_state.attempt_number
            self.on_status(f"Rate limited / error, retrying… ({attempt})")
            error = retry_state.outcome.exception() if retry_state.outcome else None
            log_event(
                self.logger,
                f"batch attempt failed: {error}",
                run_id=self.run_id,
                stage="enrich",
                event="BATCH_RETRY",
                status="warn",
                attempt=attempt,
                batch_start=start,
                batch_end=end,
                error_code=getattr(error, "error_code", None),
            )

        return _notify

    def _fetch_with_retry(self, chunk: list[str], start: int, end: int) -> list[Any]:
        retrying = Retrying(
            stop=stop_after_attempt(self.retry.max_attempts),
            wait=lambda retry_state: self.retry.backoff(retry_state.attempt_number),
            retry=retry_if_exception_type(HttpRequestError),
            sleep=self.sleep,
            before_sleep=self._on_retry(start, end),
            reraise=True,
        )
        try:
            return retrying(self.fetch_batch, chunk)
        except HttpRequestError as exc:
            log_event(
                self.logger,
                f"batch exhausted: {exc}",
                run_id=self.run_id,
                stage="enrich",
                event="BATCH_FAIL",
                status="error",
                attempt=self.retry.max_attempts,
                batch_start=start,
                batch_end=end,
                error_code=BatchExhaustedError.error_code,
            )
            raise BatchExhaustedError(start, end, self.retry.max_attempts) from exc

    def enrich(self, codes: Sequence[str]) -> list[EnrichedRow]:
        """Look up every code, one batch at a time, in input order.

        Raises BatchExhaustedError when any batch fails on every attempt; no
        rows are returned in that case.
        """
        rows: list[EnrichedRow] = []
        total = len(codes)
        for offset, chunk in chunked(codes, self.batch_size):
            start, end = offset + 1, min(offset + self.batch_size, total)
            self.on_status(f"Fetching {start}-{end} of {total}…")
            log_event(
                self.logger,
                "batch start",
                run_id=self.run_id,
                stage="enrich",
                event="BATCH_START",
                status="ok",
                batch_start=start,
                batch_end=end,
                rows_in=len(chunk),
            )
            started = time.monotonic()
            items = self._fetch_with_retry(chunk, start, end)

            for index, item in enumerate(items):
                fallback = chunk[index] if index < len(chunk) else ""
                rows.append(to_row(parse_lookup_item(item, fallback), self.fields))
            if len(items) < len(chunk):
                missing = chunk[len(items) :]
                log_event(
                    self.logger,
                    f"lookup returned {len(items)} results for {len(chunk)} postcodes; padding as unmatched",
                    run_id=self.run_id,
                    stage="enrich",
                    event="BATCH_SHORT",
                    status="warn",
                    batch_start=start,
                    batch_end=end,
                    rows_in=len(chunk),
                    rows_out=len(items),
                )
                rows.extend(to_row(Unmatched(query=code), self.fields) for code in missing)

            log_event(
                self.logger,
                "batch ok",
                run_id=self.run_id,
                stage="enrich",
                event="BATCH_OK",
                status="ok",
                batch_start=start,
                batch_end=end,
                rows_in=len(chunk),
                rows_out=len(items),
                duration_ms=int((time.monotonic() - started) * 1000),
            )
            self.sleep(self.pause_ms / 1000.0)

        self.on_status(f"Done. {len(rows)} rows.")
        return rows
