"""
Price and margin arithmetic.

Pure functions converting between a line item's sale price and its profit
margin percentage for a fixed cost.
"""
from .margin import margin, parse_amount, price_from_margin, round_half_up

__all__ = ["margin", "parse_amount", "price_from_margin", "round_half_up"]
