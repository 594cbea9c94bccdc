from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from postcode_enricher.app.controller import (
    STATUS_EMPTY_INPUT,
    STATUS_FAILED,
    EnrichmentController,
    Phase,
)
from postcode_enricher.common.errors import ArtifactReleasedError, RetryableHttpError
from postcode_enricher.pipeline.enrich import BatchEnricher


class ScriptedClient:
    def __init__(self):
        self.fail = False
        self.calls = 0

    def post_json(self, url, payload):
        self.calls += 1
        if self.fail:
            raise RetryableHttpError("HTTP status: 503")
        return {
            "result": [
                {"query": pc, "result": {"postcode": pc, "country": "England, UK", "region": "London"}}
                for pc in payload["postcodes"]
            ]
        }


class TickingClock:
    def __init__(self):
        self.second = 0

    def __call__(self) -> datetime:
        self.second += 1
        return datetime(2026, 10, 19, 12, 0, self.second, tzinfo=timezone.utc)


def _controller(client, statuses=None, preview_row_limit=500):
    enricher = BatchEnricher(client, fields=("country", "region"), sleep=lambda _s: None)
    return EnrichmentController(
        enricher,
        header=("postcode", "country", "region"),
        preview_row_limit=preview_row_limit,
        clock=TickingClock(),
        on_status=statuses.append if statuses is not None else None,
    )


@pytest.mark.integration
def test_run_success_renders_table_and_prepares_download(tmp_path: Path):
    statuses: list[str] = []
    controller = _controller(ScriptedClient(), statuses)
    assert controller.state.phase is Phase.IDLE
    assert controller.download(tmp_path) is None

    state = controller.run("sw1a1aa\nM1 1AE, sw1a 1aa")

    assert state.phase is Phase.DONE
    assert state.run_enabled and state.download_enabled
    assert [row["postcode"] for row in state.rows] == ["SW1A 1AA", "M1 1AE"]
    assert state.table.rows[0] == ("SW1A 1AA", "England, UK", "London")
    assert statuses[0] == "Enriching data..."
    assert statuses[-1] == "Enriched 2 postcodes"

    out = controller.download(tmp_path)
    assert out.name == "postcodes_enriched_2026-10-19-12-00-01.csv"
    assert out.read_text(encoding="utf-8") == (
        'postcode,country,region\nSW1A 1AA,"England, UK",London\nM1 1AE,"England, UK",London'
    )


@pytest.mark.integration
def test_run_with_no_valid_postcodes_is_a_no_op():
    client = ScriptedClient()
    controller = _controller(client)

    state = controller.run("AB, ???")

    assert state.phase is Phase.IDLE
    assert state.status == STATUS_EMPTY_INPUT
    assert client.calls == 0
    assert controller.download_payload() is None


@pytest.mark.integration
def test_new_run_releases_previous_artifact_before_exposing_new_one():
    controller = _controller(ScriptedClient())
    controller.run("M1 1AE")
    first = controller.state.artifact

    controller.run("B33 8TH")
    second = controller.state.artifact

    assert first.released
    with pytest.raises(ArtifactReleasedError):
        first.read()
    assert second is not first and not second.released
    assert second.filename != first.filename
    name, payload = controller.download_payload()
    assert name == second.filename
    assert payload.decode("utf-8").endswith("B33 8TH,\"England, UK\",London")


@pytest.mark.integration
def test_failed_run_hides_results_and_disables_download(tmp_path: Path):
    client = ScriptedClient()
    controller = _controller(client)
    controller.run("M1 1AE")
    previous = controller.state.artifact

    client.fail = True
    state = controller.run("B33 8TH")

    assert state.phase is Phase.FAILED
    assert state.status == STATUS_FAILED
    assert state.rows == [] and state.table is None
    assert state.run_enabled and not state.download_enabled
    assert previous.released
    assert controller.download(tmp_path) is None
    assert client.calls == 1 + 3


@pytest.mark.integration
def test_preview_is_capped_while_download_has_every_row():
    controller = _controller(ScriptedClient(), preview_row_limit=500)
    codes = [f"M{i} {d}AA" for i in range(1, 100) for d in range(1, 8)]

    state = controller.run("\n".join(codes))

    assert len(state.rows) == len(codes) == 693
    assert len(state.table.rows) == 500
    _name, payload = controller.download_payload()
    assert len(payload.decode("utf-8").split("\n")) == 693 + 1
