from tradecheck.utils.normalize import format_value, normalize_text, parse_date_to_iso, parse_decimal, parse_number


def test_parse_decimal_separators():
    assert parse_decimal("8,850") == 8850.0
    assert parse_decimal("9,5") == 9.5
    assert parse_decimal("1.234,56") == 1234.56
    assert parse_decimal("USD 1,234.50") == 1234.5


def test_parse_decimal_rejects_non_numbers():
    assert parse_decimal(True) is None
    assert parse_decimal("") is None
    assert parse_decimal("abc") is None


def test_parse_number_keeps_integers():
    assert parse_number("500") == 500
    assert isinstance(parse_number("500"), int)
    assert parse_number("12.5") == 12.5


def test_parse_date_to_iso():
    assert parse_date_to_iso("03.11.2026") == "2026-11-03"
    assert parse_date_to_iso("2026/11/03") == "2026-11-03"
    assert parse_date_to_iso("next week") is None


def test_normalize_text():
    assert normalize_text("  FOB Incheon ") == "FOB Incheon"
    assert normalize_text("   ") is None
    assert normalize_text(30) == "30"
    assert normalize_text(["x"]) is None


def test_format_value():
    assert format_value(8850) == "8,850"
    assert format_value(12.5) == "12.5"
    assert format_value(None) == "-"
    assert format_value({"SKU001": 500}) == "SKU001=500"
