import json
import logging
from pathlib import Path

from postcode_enricher.common.ids import generate_run_id
from postcode_enricher.common.logging import JsonLineFormatter, build_logger, log_event
from postcode_enricher.common.time_utils import utc_timestamp_iso


def test_generate_run_id_prefix():
    assert generate_run_id().startswith("run-")


def test_utc_timestamp_iso_has_offset():
    assert utc_timestamp_iso().endswith("+00:00")


def test_json_line_formatter_emits_stable_schema():
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "batch ok", None, None)
    record.event = "BATCH_OK"
    record.rows_out = 3
    payload = json.loads(JsonLineFormatter().format(record))
    assert payload["event"] == "BATCH_OK"
    assert payload["rows_out"] == 3
    assert payload["run_id"] is None
    assert payload["message"] == "batch ok"


def test_build_logger_writes_jsonl_file(tmp_path: Path):
    logger = build_logger("run-test", log_dir=tmp_path)
    log_event(logger, "run start", run_id="run-test", event="RUN_START", status="ok")
    for handler in logger.handlers:
        handler.flush()

    lines = (tmp_path / "run-test.log.jsonl").read_text(encoding="utf-8").splitlines()
    assert json.loads(lines[-1])["event"] == "RUN_START"
