"""
Parsers converting record source payloads into RawItem objects.

Two payload shapes are accepted:

* flat: ``{"id", "price", "cost", "pricing_restricted"}`` (``pricingRestricted``
  is accepted as an alias)
* nested, as produced by the cart record system:
  ``{"Id", "SalesPrice", "Product2": {"Product_Cost__c", "Agency_Pricing__c"}}``
"""

import math
from collections.abc import Mapping
from typing import Any

from .models import RawItem


class ParseError(Exception):
    """Raised when a record cannot be turned into a RawItem."""
    pass


def _first(record: Mapping, *keys: str) -> Any:
    for key in keys:
        if key in record:
            return record[key]
    return None


def _to_number(value: Any, name: str) -> float:
    # Missing or non-numeric values become NaN
    if value is None:
        return float("nan")
    if isinstance(value, bool):
        raise ParseError(f"{name} must be numeric, got bool")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return float("nan")
    raise ParseError(f"{name} must be numeric, got {type(value).__name__}")


def parse_raw_item(record: Any) -> RawItem:
    """
    Parse a single record into a RawItem.

    Raises:
        ParseError: If the record has no id, no finite price or carries unusable field types
    """
    if isinstance(record, RawItem):
        return record

    if not isinstance(record, Mapping):
        raise ParseError(f"Record must be a mapping, got {type(record).__name__}")

    item_id = _first(record, "id", "Id")
    if item_id is None or item_id == "":
        raise ParseError("Record has no id")

    product = record.get("Product2")
    if isinstance(product, Mapping):
        cost = product.get("Product_Cost__c")
        restricted = product.get("Agency_Pricing__c")
    else:
        cost = _first(record, "cost", "Cost")
        restricted = _first(record, "pricing_restricted", "pricingRestricted")

    price = _to_number(_first(record, "price", "SalesPrice"), "price")
    if not math.isfinite(price):
        raise ParseError(f"Record {item_id} has no usable price")

    return RawItem(
        id=str(item_id),
        price=price,
        cost=_to_number(cost, "cost"),
        pricing_restricted=bool(restricted),
    )
