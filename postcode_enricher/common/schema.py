"""Minimal strict schema for the enricher YAML config."""

from __future__ import annotations

from postcode_enricher.common.constants import MAX_BATCH
from postcode_enricher.common.errors import ConfigError

_SECTION_KEYS = {
    "api": {"url", "user_agent", "timeout_seconds"},
    "batch": {"size", "pause_ms"},
    "retry": {"max_attempts", "backoff_ms"},
    "preview": {"row_limit"},
    "output": {"filename_prefix"},
}
_TOP_KNOWN = set(_SECTION_KEYS) | {"fields"}


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def _assert_positive_int(value: object, ctx: str, *, allow_zero: bool = False) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{ctx} must be an integer")
    if value < 0 or (value == 0 and not allow_zero):
        raise ConfigError(f"{ctx} must be {'non-negative' if allow_zero else 'positive'}")


def validate_enricher_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    if not isinstance(cfg, dict):
        raise ConfigError("enricher config must be a mapping")
    _assert_required_keys(cfg, _TOP_KNOWN, "enricher config")
    _assert_no_unknown_keys(cfg, _TOP_KNOWN, "enricher config", allow_unknown)

    for section, keys in _SECTION_KEYS.items():
        if not isinstance(cfg[section], dict):
            raise ConfigError(f"{section} must be a mapping")
        _assert_required_keys(cfg[section], keys, section)
        _assert_no_unknown_keys(cfg[section], keys, section, allow_unknown)

    timeout = cfg["api"]["timeout_seconds"]
    if timeout is not None:
        if not isinstance(timeout, dict):
            raise ConfigError("api.timeout_seconds must be a mapping with connect and read, or null")
        _assert_required_keys(timeout, {"connect", "read"}, "api.timeout_seconds")
        _assert_no_unknown_keys(timeout, {"connect", "read"}, "api.timeout_seconds", allow_unknown)
        for key in ("connect", "read"):
            value = timeout[key]
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                raise ConfigError(f"api.timeout_seconds.{key} must be a positive number")

    _assert_positive_int(cfg["batch"]["size"], "batch.size")
    if cfg["batch"]["size"] > MAX_BATCH:
        raise ConfigError(f"batch.size must not exceed {MAX_BATCH}")
    _assert_positive_int(cfg["batch"]["pause_ms"], "batch.pause_ms", allow_zero=True)
    _assert_positive_int(cfg["retry"]["max_attempts"], "retry.max_attempts")
    _assert_positive_int(cfg["retry"]["backoff_ms"], "retry.backoff_ms", allow_zero=True)
    _assert_positive_int(cfg["preview"]["row_limit"], "preview.row_limit")

    fields = cfg["fields"]
    if not isinstance(fields, list) or not fields:
        raise ConfigError("fields must be a non-empty list")
    if "postcode" in fields:
        raise ConfigError("fields must not repeat the postcode column")
    dupes = {name for name in fields if fields.count(name) > 1}
    if dupes:
        raise ConfigError(f"Duplicate fields: {', '.join(sorted(dupes))}")

    return cfg
