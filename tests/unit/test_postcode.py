from postcode_enricher.pipeline.normalise import normalise_postcode, parse_postcodes


def test_normalise_happy_path():
    assert normalise_postcode("sw1a1aa") == "SW1A 1AA"


def test_normalise_removes_noise_and_whitespace():
    assert normalise_postcode(" ec-1a/1bb ") == "EC1A 1BB"


def test_normalise_rejects_empty_and_none():
    assert normalise_postcode(None) is None
    assert normalise_postcode("   ") is None


def test_normalise_rejects_too_short_or_long():
    assert normalise_postcode("AB") is None
    assert normalise_postcode("ABCDEFGHI") is None


def test_normalise_rejects_length_valid_but_malformed():
    assert normalise_postcode("12345") is None
    assert normalise_postcode("JEA 3AB") is None


def test_parse_dedupes_case_and_whitespace_variants():
    assert parse_postcodes("SW1A 1AA, sw1a1aa\nSW1A  1AA") == ["SW1A 1AA"]


def test_parse_too_short_yields_nothing():
    assert parse_postcodes("AB") == []
    assert parse_postcodes("") == []


def test_parse_keeps_first_seen_order():
    raw = "m1 1ae\r\nB33 8TH, m11ae\nCR2 6XH,,\n  b338th"
    assert parse_postcodes(raw) == ["M1 1AE", "B33 8TH", "CR2 6XH"]


def test_parse_skips_invalid_tokens_silently():
    assert parse_postcodes("DN55 1PT, not a postcode, W1A 0AX") == ["DN55 1PT", "W1A 0AX"]


def test_parse_treats_lone_carriage_return_as_noise():
    assert parse_postcodes("SW1A\r1AA") == ["SW1A 1AA"]
    assert parse_postcodes("M1 1AE\r\nB33 8TH\r") == ["M1 1AE", "B33 8TH"]
