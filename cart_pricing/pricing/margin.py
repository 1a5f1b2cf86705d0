"""
Margin and price-from-margin calculations.

margin(price, cost) = ((price - cost) / price) * 100, rounded.
price_from_margin(m, cost) = cost / (1 - m / 100), rounded.

Both round half-up on the decimal representation of the value so that
1.005 rounds to 1.01 rather than following the binary float artefact.
"""

import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any

import structlog

from ..errors import InvalidInputError, NonFiniteResultError

logger = structlog.get_logger(__name__)

CEILING_MARGIN_PCT = 100.0


def is_valid_number(value: Any) -> bool:
    """True for finite ints and floats; bools and NaN are not numbers here."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def round_half_up(value: float, decimals: int = 2) -> float:
    """Round to ``decimals`` places, halves away from zero. Non-finite values pass through."""
    value = float(value)
    if not math.isfinite(value):
        return value

    quantum = Decimal(1).scaleb(-decimals)
    with localcontext() as ctx:
        # Enough digits for the largest finite float at the requested precision
        ctx.prec = 330 + max(decimals, 0)
        return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def parse_amount(raw_value: Any) -> float:
    """
    Parse a user-typed price or margin into a finite float.

    Args:
        raw_value: Number or string as received from the input field

    Returns:
        Parsed value

    Raises:
        InvalidInputError: If the value is empty, not numeric or not finite
    """
    if isinstance(raw_value, bool):
        raise InvalidInputError("Boolean is not a number", raw_value=raw_value)

    if isinstance(raw_value, (int, float)):
        value = float(raw_value)
    elif isinstance(raw_value, (str, Decimal)):
        text = str(raw_value).strip().replace(",", "")
        if not text:
            raise InvalidInputError("Empty value", raw_value=raw_value)
        try:
            value = float(Decimal(text))
        except (InvalidOperation, ValueError) as e:
            raise InvalidInputError(f"Not a number: {raw_value!r}", raw_value=raw_value) from e
    else:
        raise InvalidInputError(
            f"Unsupported input type {type(raw_value).__name__}",
            raw_value=raw_value
        )

    if not math.isfinite(value):
        raise InvalidInputError(f"Not a finite number: {raw_value!r}", raw_value=raw_value)

    return value


def margin(price: Any, cost: Any, decimals: int = 2) -> float:
    """
    Profit margin percentage of ``price`` over ``cost``.

    Returns 0 when either input is not a valid number, the price is zero or
    the ratio overflows the float range.
    """
    if not is_valid_number(price) or not is_valid_number(cost) or price == 0:
        logger.debug("Invalid input or zero price, margin is 0", price=price, cost=cost)
        return 0.0

    raw = ((price - cost) / price) * 100
    if not math.isfinite(raw):
        logger.debug("Margin overflows, margin is 0", price=price, cost=cost)
        return 0.0

    return round_half_up(raw, decimals)


def price_from_margin(
    margin_pct: float,
    cost: float,
    decimals: int = 2,
    ceiling_policy: str = "reject",
    max_margin_pct: float = 99.99
) -> float:
    """
    Sale price that yields ``margin_pct`` over ``cost``.

    Args:
        margin_pct: Target margin as a percentage (e.g. 25 for 25%)
        cost: Unit cost of the item
        decimals: Rounding precision of the returned price
        ceiling_policy: "reject" raises at or above 100%, "clamp" caps the
            margin at ``max_margin_pct`` first
        max_margin_pct: Clamp target, must be below 100

    Raises:
        NonFiniteResultError: If no finite, non-negative price exists
    """
    if not is_valid_number(margin_pct) or not is_valid_number(cost):
        raise NonFiniteResultError(
            "Margin and cost must be finite numbers",
            margin_pct=margin_pct,
            cost=cost
        )

    if margin_pct >= CEILING_MARGIN_PCT:
        if ceiling_policy != "clamp":
            raise NonFiniteResultError(
                f"Margin of {margin_pct}% has no finite price",
                margin_pct=margin_pct,
                cost=cost
            )
        logger.info("Clamping margin below 100%", margin_pct=margin_pct, clamped_to=max_margin_pct)
        margin_pct = max_margin_pct

    fraction = margin_pct / 100
    price = cost / (1 - fraction)
    if not math.isfinite(price):
        raise NonFiniteResultError(
            f"Margin of {margin_pct}% over cost {cost} overflows the price",
            margin_pct=margin_pct,
            cost=cost
        )

    return round_half_up(price, decimals)
