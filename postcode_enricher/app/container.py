"""Wires configuration into an HTTP client, enricher and controller."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from postcode_enricher.app.controller import EnrichmentController
from postcode_enricher.common.config_loader import EnricherConfig
from postcode_enricher.common.http import HttpClient, TimeoutConfig
from postcode_enricher.pipeline.enrich import BatchEnricher, RetryPolicy, linear_backoff


@dataclass(frozen=True)
class Container:
    config: EnricherConfig
    http: HttpClient
    enricher: BatchEnricher
    controller: EnrichmentController

    def close(self) -> None:
        self.http.close()


def build_container(
    config: EnricherConfig,
    *,
    logger: logging.Logger | None = None,
    on_status: Callable[[str], None] | None = None,
) -> Container:
    timeout = TimeoutConfig(*config.timeout) if config.timeout else None
    http = HttpClient(user_agent=config.user_agent, timeout=timeout)
    enricher = BatchEnricher(
        http,
        api_url=config.api_url,
        fields=config.fields,
        batch_size=config.batch_size,
        pause_ms=config.batch_pause_ms,
        retry=RetryPolicy(
            max_attempts=config.retry_max_attempts,
            backoff=linear_backoff(config.retry_backoff_ms),
        ),
        logger=logger,
    )
    controller = EnrichmentController(
        enricher,
        header=config.header,
        preview_row_limit=config.preview_row_limit,
        filename_prefix=config.filename_prefix,
        on_status=on_status,
        logger=logger,
    )
    return Container(config=config, http=http, enricher=enricher, controller=controller)
