from postcode_enricher.common.models import Matched, Unmatched, parse_lookup_item, to_row


def test_parse_lookup_item_matched():
    item = {"query": "m11ae", "result": {"postcode": "M1 1AE", "country": "England"}}
    result = parse_lookup_item(item)
    assert isinstance(result, Matched)
    assert result.postcode == "M1 1AE"


def test_parse_lookup_item_unmatched_echoes_query():
    result = parse_lookup_item({"query": "zz9 9zz", "result": None})
    assert result == Unmatched(query="zz9 9zz")
    assert result.postcode == "ZZ9 9ZZ"


def test_parse_lookup_item_null_item_uses_fallback():
    assert parse_lookup_item(None, "AB1 2CD") == Unmatched(query="AB1 2CD")


def test_to_row_matched_fills_missing_and_null_fields_with_empty_string():
    result = Matched(query="M1 1AE", fields={"postcode": "M1 1AE", "country": "England", "parish": None, "latitude": 53.4})
    row = to_row(result, ["country", "parish", "region", "latitude"])
    assert dict(row) == {"postcode": "M1 1AE", "country": "England", "parish": "", "region": "", "latitude": "53.4"}


def test_to_row_matched_without_postcode_falls_back_to_query():
    row = to_row(Matched(query="m1 1ae", fields={}), ["country"])
    assert row["postcode"] == "M1 1AE"


def test_to_row_unmatched_has_only_postcode_populated():
    row = to_row(Unmatched(query="zz9 9zz"), ["country", "region"])
    assert dict(row) == {"postcode": "ZZ9 9ZZ", "country": "", "region": ""}
