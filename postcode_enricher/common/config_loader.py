"""Configuration loading and validation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from postcode_enricher.common import constants
from postcode_enricher.common.fs import read_yaml
from postcode_enricher.common.schema import validate_enricher_config

CONFIG_FILENAME = "enricher.yml"

DEFAULT_CONFIG: dict[str, Any] = {
    "api": {
        "url": constants.API_URL,
        "user_agent": constants.USER_AGENT,
        "timeout_seconds": None,
    },
    "batch": {"size": constants.MAX_BATCH, "pause_ms": constants.BATCH_PAUSE_MS},
    "retry": {
        "max_attempts": constants.RETRY_MAX_ATTEMPTS,
        "backoff_ms": constants.RETRY_BACKOFF_MS,
    },
    "preview": {"row_limit": constants.PREVIEW_ROW_LIMIT},
    "output": {"filename_prefix": constants.FILENAME_PREFIX},
    "fields": list(constants.FIELDS),
}


@dataclass(frozen=True)
class EnricherConfig:
    api_url: str = constants.API_URL
    user_agent: str = constants.USER_AGENT
    timeout: tuple[float, float] | None = None
    batch_size: int = constants.MAX_BATCH
    batch_pause_ms: int = constants.BATCH_PAUSE_MS
    retry_max_attempts: int = constants.RETRY_MAX_ATTEMPTS
    retry_backoff_ms: int = constants.RETRY_BACKOFF_MS
    preview_row_limit: int = constants.PREVIEW_ROW_LIMIT
    filename_prefix: str = constants.FILENAME_PREFIX
    fields: tuple[str, ...] = constants.FIELDS

    @property
    def header(self) -> tuple[str, ...]:
        return ("postcode", *self.fields)


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _read_optional_yaml(path: Path | None) -> dict:
    if path is None or not path.exists():
        return {}
    return read_yaml(path) or {}


def from_mapping(cfg: dict) -> EnricherConfig:
    timeout = cfg["api"]["timeout_seconds"]
    return EnricherConfig(
        api_url=cfg["api"]["url"],
        user_agent=cfg["api"]["user_agent"],
        timeout=(float(timeout["connect"]), float(timeout["read"])) if timeout else None,
        batch_size=cfg["batch"]["size"],
        batch_pause_ms=cfg["batch"]["pause_ms"],
        retry_max_attempts=cfg["retry"]["max_attempts"],
        retry_backoff_ms=cfg["retry"]["backoff_ms"],
        preview_row_limit=cfg["preview"]["row_limit"],
        filename_prefix=cfg["output"]["filename_prefix"],
        fields=tuple(cfg["fields"]),
    )


def load_config(
    config_dir: Path | None,
    *,
    overlay_config_dir: Path | None = None,
    allow_unknown: bool = False,
) -> EnricherConfig:
    """Defaults, then config_dir/enricher.yml, then the overlay copy of the same file."""
    merged = DEFAULT_CONFIG
    for directory in (config_dir, overlay_config_dir):
        if directory is None:
            continue
        merged = _deep_merge(merged, _read_optional_yaml(directory / CONFIG_FILENAME))
    return from_mapping(validate_enricher_config(merged, allow_unknown=allow_unknown))
