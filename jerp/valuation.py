"""
Net weight and fine valuation for jewellery items.

All helpers are pure and fail-soft: a value that cannot be read as a number
contributes zero instead of raising, so the item form can recompute on every
keystroke regardless of what has been typed so far.
"""

import re
from collections.abc import Iterable, Mapping
from decimal import MAX_EMAX, MIN_EMIN, ROUND_HALF_UP, Context, Decimal, InvalidOperation, localcontext
from typing import Any

CARAT_TO_GRAMS = Decimal("0.2")
NET_WEIGHT_PLACES = Decimal("0.001")
FINE_PLACES = Decimal("0.01")

# Wide exponent range and no traps: results too large to format come back as NaN or Infinity.
_ARITHMETIC = Context(prec=100, rounding=ROUND_HALF_UP, Emax=MAX_EMAX, Emin=MIN_EMIN, traps=[])

_NUMERIC_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

NumberLike = str | int | float | Decimal | None


def try_parse_decimal(raw: NumberLike) -> Decimal | None:
    """Reads the leading number of `raw`, e.g. "3.5g" -> 3.5. Returns None when there is none."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, Decimal):
        return raw if raw.is_finite() else None
    if isinstance(raw, (int, float)):
        raw = str(raw)

    match = _NUMERIC_PREFIX.match(str(raw))
    if match is None:
        return None
    try:
        value = Decimal(match.group(1))
    except InvalidOperation:
        return None
    return value if value.is_finite() else None


def parse_decimal(raw: NumberLike) -> Decimal:
    parsed = try_parse_decimal(raw)
    return parsed if parsed is not None else Decimal(0)


def _format_places(value: Decimal, places: Decimal) -> str:
    with localcontext(_ARITHMETIC):
        quantized = value.quantize(places, rounding=ROUND_HALF_UP)
    if not quantized.is_finite():
        quantized = Decimal(0).quantize(places)
    elif quantized.is_zero():
        quantized = abs(quantized)
    return f"{quantized:f}"


def _inclusion_field(inclusion: Any, name: str) -> Any:
    if isinstance(inclusion, Mapping):
        return inclusion.get(name)
    return getattr(inclusion, name, None)


def total_inclusion_weight(items: Iterable[Any]) -> Decimal:
    """Sum of weight x pieces (carats) across diamond or stone rows."""
    total = Decimal(0)
    for inclusion in items:
        weight = parse_decimal(_inclusion_field(inclusion, "weight"))
        pieces = parse_decimal(_inclusion_field(inclusion, "pieces"))
        with localcontext(_ARITHMETIC):
            total += weight * pieces
    return total


def compute_net_weight(gross_weight: NumberLike, diamonds: Iterable[Any], stones: Iterable[Any]) -> str:
    gross = parse_decimal(gross_weight)
    diamond_carats = total_inclusion_weight(diamonds)
    stone_carats = total_inclusion_weight(stones)
    with localcontext(_ARITHMETIC):
        inclusion_carats = diamond_carats + stone_carats
        net = gross + CARAT_TO_GRAMS * inclusion_carats
    return _format_places(net, NET_WEIGHT_PLACES)


def compute_fine(net_weight: NumberLike, percentage: NumberLike) -> str:
    net = parse_decimal(net_weight)
    pct = parse_decimal(percentage)
    with localcontext(_ARITHMETIC):
        fine = net * (pct / Decimal(100))
    return _format_places(fine, FINE_PLACES)


def normalize_decimal_input(raw: str) -> str:
    if raw.startswith("."):
        return "0" + raw
    return raw
