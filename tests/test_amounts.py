import pytest

from amounts import Amount, Convention, MalformedAmount, format_amount, parse_amount, vat_percent_of


@pytest.mark.parametrize("raw, convention, expected", [
    ("9.8", Convention.A, Amount(9, 80)),
    ("9.80", Convention.A, Amount(9, 80)),
    ("9.05", Convention.A, Amount(9, 5)),
    ("1,234.56", Convention.A, Amount(1234, 56)),
    ("42", Convention.A, Amount(42, 0)),
    ("1.234,56", Convention.B, Amount(1234, 56)),
    ("12,5", Convention.B, Amount(12, 5)),
    ("1.000", Convention.B, Amount(1000, 0)),
])
def test_parse_amount(raw, convention, expected):
    assert parse_amount(raw, convention) == expected


def test_blank_amount_is_absent():
    assert parse_amount("", Convention.A).is_absent
    assert parse_amount("  ", Convention.B).is_absent


@pytest.mark.parametrize("raw, convention", [
    ("1.2.3", Convention.A),
    ("1,2,3", Convention.B),
    ("abc", Convention.A),
    ("12.x5", Convention.A),
    ("-5.00", Convention.A),
    ("9.805", Convention.A),
    ("3,456", Convention.B),
])
def test_parse_amount_rejects_malformed(raw, convention):
    with pytest.raises(MalformedAmount):
        parse_amount(raw, convention)


def test_amount_rejects_minor_units_out_of_range():
    with pytest.raises(MalformedAmount):
        Amount(1, 100)


def test_format_amount_comma_decimal():
    assert format_amount(Amount(1234, 5)) == "1234,05"
    assert format_amount(Amount(0, 50)) == "0,50"


def test_format_absent_amount_is_empty():
    assert format_amount(Amount(0, 0)) == ""


@pytest.mark.parametrize("raw", ["12.34", "1,000.00", "0.99"])
def test_format_matches_canonical_form(raw):
    assert format_amount(parse_amount(raw, Convention.A)) == raw.replace(",", "").replace(".", ",")


def test_vat_percent_of_net_base():
    assert vat_percent_of(Amount(19, 0), Amount(119, 0)) == "19%"
    assert vat_percent_of(Amount(1, 60), Amount(9, 60)) == "20%"


def test_vat_percent_rounds_half_up():
    # 0,05 on a net of 0,10 is exactly 50%, 2,50 on 97,50 is 2.56%
    assert vat_percent_of(Amount(0, 5), Amount(0, 15)) == "50%"
    assert vat_percent_of(Amount(2, 50), Amount(100, 0)) == "3%"


def test_vat_percent_empty_when_zero():
    assert vat_percent_of(Amount(0, 0), Amount(50, 0)) == ""
    assert vat_percent_of(Amount(0, 1), Amount(100, 0)) == ""


def test_vat_percent_gross_equals_tax_is_empty():
    assert vat_percent_of(Amount(10, 0), Amount(10, 0)) == ""
    assert vat_percent_of(Amount(0, 0), Amount(0, 0)) == ""
