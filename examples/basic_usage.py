#!/usr/bin/env python3
"""
Basic Usage Example - Cart Pricing Session

This script demonstrates the cart pricing session against an in-memory
record store. It shows how to:
- Load a cart's line items
- Edit prices and margins (debounced)
- Save the batch and handle a partial failure

Run: python examples/basic_usage.py
"""

import asyncio

from cart_pricing.adapters import InMemoryCartStore
from cart_pricing.logging import configure_logging
from cart_pricing.notify import StdoutNotifier
from cart_pricing.session import CartPricingSession


def create_sample_store() -> InMemoryCartStore:
    """Create a store holding one cart with three line items."""
    return InMemoryCartStore({
        "CART-001": [
            {"id": "item-1", "price": 10.0, "cost": 6.0, "pricing_restricted": False},
            {"id": "item-2", "price": 25.0, "cost": 20.0, "pricing_restricted": False},
            {"id": "item-3", "price": 99.0, "cost": 50.0, "pricing_restricted": True},
        ]
    })


def print_items(session: CartPricingSession, title: str) -> None:
    print(f"\n📦 {title}")
    for item in session.items:
        lock = " 🔒" if item.locked else ""
        print(f"  {item.id}: price={item.price:.2f} cost={item.cost:.2f} margin={item.margin:.2f}%{lock}")


async def main() -> None:
    configure_logging(level="WARNING")

    store = create_sample_store()
    session = CartPricingSession(
        store.fetch,
        store.write,
        notifier=StdoutNotifier(),
        shop_cart_id="CART-001",
    )

    await session.refresh()
    print_items(session, "Loaded cart")

    # A burst of keystrokes; only the last value commits
    for typed in ("1", "12", "12.5"):
        session.on_price_edit("item-1", typed)
        await asyncio.sleep(0.1)
    print(f"\n🔒 Editing a locked item: {session.on_price_edit('item-3', '120').value}")
    print(f"🚫 Editing margin to 100%: {session.on_margin_edit('item-2', '100').value}")
    session.on_margin_edit("item-2", "40")

    await asyncio.sleep(0.6)
    print_items(session, "After edits settle")

    result = await session.save()
    print(f"\n💾 Save: {result.status.value} ({result.succeeded}/{result.requested})")

    store.failing_ids.add("item-2")
    session.on_price_edit("item-1", "13")
    result = await session.save()
    print(f"\n💾 Save: {result.status.value} ({result.succeeded}/{result.requested}) error={session.error_msg}")
    print(f"  Stored price of item-1 is still {store.records('CART-001')[0]['price']} (no rollback)")


if __name__ == "__main__":
    asyncio.run(main())
