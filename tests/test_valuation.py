import itertools
from decimal import Decimal

import pytest

from jerp.models import Inclusion
from jerp.valuation import (
    compute_fine,
    compute_net_weight,
    normalize_decimal_input,
    parse_decimal,
    total_inclusion_weight,
    try_parse_decimal,
)


def test_total_inclusion_weight_empty_is_zero():
    assert total_inclusion_weight([]) == 0


def test_total_inclusion_weight_multiplies_weight_by_pieces():
    assert total_inclusion_weight([{"weight": "2", "pieces": "3"}]) == 6


def test_total_inclusion_weight_treats_blank_weight_as_zero():
    assert total_inclusion_weight([{"weight": "", "pieces": "3"}]) == 0


def test_total_inclusion_weight_accepts_inclusion_rows():
    rows = [Inclusion(weight="0.5", pieces="4"), Inclusion(weight="abc", pieces="2"), Inclusion()]
    assert total_inclusion_weight(rows) == Decimal("2.0")


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("3g", Decimal("3")),
        (".5", Decimal("0.5")),
        ("  12.25 ", Decimal("12.25")),
        ("1e3", Decimal("1000")),
        ("-2", Decimal("-2")),
        (2.5, Decimal("2.5")),
        (7, Decimal("7")),
    ],
)
def test_try_parse_decimal_reads_leading_number(raw, expected):
    assert try_parse_decimal(raw) == expected


@pytest.mark.parametrize("raw", ["", "abc", ".", "nan", "Infinity", None, Decimal("NaN"), True])
def test_try_parse_decimal_rejects_non_numbers(raw):
    assert try_parse_decimal(raw) is None
    assert parse_decimal(raw) == 0


def test_compute_net_weight_without_inclusions():
    assert compute_net_weight("10", [], []) == "10.000"


def test_compute_net_weight_adds_carats_as_grams():
    diamonds = [{"weight": "0.5", "pieces": "4"}]
    stones = [{"weight": "1", "pieces": "1"}]
    assert compute_net_weight("5", diamonds, stones) == "5.600"


def test_compute_net_weight_invalid_gross_counts_as_zero():
    assert compute_net_weight("abc", [], [{"weight": "1", "pieces": "1"}]) == "0.200"
    assert compute_net_weight("", [], []) == "0.000"


@pytest.mark.parametrize("gross", ["0", "1.25", "7", Decimal("3.3")])
def test_compute_net_weight_matches_formula(gross):
    diamonds = [{"weight": "0.35", "pieces": "3"}, {"weight": "0.1", "pieces": "12"}]
    stones = [{"weight": "2.2", "pieces": "1"}]
    expected = Decimal(str(gross)) + Decimal("0.2") * (
        total_inclusion_weight(diamonds) + total_inclusion_weight(stones)
    )
    assert compute_net_weight(gross, diamonds, stones) == f"{expected.quantize(Decimal('0.001')):f}"


def test_compute_net_weight_ignores_inclusion_order():
    diamonds = [
        {"weight": "0.5", "pieces": "4"},
        {"weight": "0.03", "pieces": "17"},
        {"weight": "", "pieces": "9"},
    ]
    stones = [{"weight": "1.1", "pieces": "2"}, {"weight": "0.7", "pieces": "1"}]
    results = {
        compute_net_weight("4.2", list(d_order), list(s_order))
        for d_order in itertools.permutations(diamonds)
        for s_order in itertools.permutations(stones)
    }
    assert results == {"5.282"}


@pytest.mark.parametrize(
    "net, percentage, expected",
    [
        ("10.000", "75", "7.50"),
        ("5.600", "91.6", "5.13"),
        ("5.200", "91.6", "4.76"),
        ("", "75", "0.00"),
        ("10", "", "0.00"),
        ("1.005", "100", "1.01"),
    ],
)
def test_compute_fine(net, percentage, expected):
    assert compute_fine(net, percentage) == expected


def test_compute_fine_is_monotonic_in_both_arguments():
    values = ["0", "0.5", "1", "2.345", "10", "91.6", "100", "250.75"]
    for a, b in itertools.combinations_with_replacement(values, 2):
        low, high = sorted((a, b), key=Decimal)
        for other in values:
            assert Decimal(compute_fine(low, other)) <= Decimal(compute_fine(high, other))
            assert Decimal(compute_fine(other, low)) <= Decimal(compute_fine(other, high))


@pytest.mark.parametrize(
    "raw, expected",
    [(".5", "0.5"), ("1.5", "1.5"), ("", ""), (".", "0."), ("abc", "abc")],
)
def test_normalize_decimal_input(raw, expected):
    assert normalize_decimal_input(raw) == expected


def test_large_values_format_exactly():
    assert compute_net_weight("1e30", [], []) == "1" + "0" * 30 + ".000"
    assert compute_net_weight("1" + "0" * 27, [], []) == "1" + "0" * 27 + ".000"
    assert compute_fine("1e30", "50") == "5" + "0" * 29 + ".00"


@pytest.mark.parametrize("gross", ["9e999999999999", "-9e999999999999"])
def test_values_too_large_to_format_degrade_to_zero(gross):
    assert compute_net_weight(gross, [], []) == "0.000"
    assert compute_fine(gross, "50") == "0.00"


def test_huge_inclusions_degrade_to_zero():
    huge = [{"weight": "9e999999999999", "pieces": "9e999999999999"}]
    assert compute_net_weight("5", huge, huge) == "0.000"
