"""
End-to-end tests of a cart pricing session against the in-memory store.

Covers seeding, debounced edits, batch save with success and partial
failure, and refresh discarding pending edits.
"""

import asyncio
from pathlib import Path

import pytest

from cart_pricing.adapters.memory import InMemoryCartStore
from cart_pricing.config.defaults import DefaultConfig, SessionParams, get_default_config
from cart_pricing.data.models import EditStatus, Severity
from cart_pricing.notify import LogNotifier, StdoutNotifier
from cart_pricing.session import CartPricingSession


@pytest.fixture
def store(sample_records) -> InMemoryCartStore:
    return InMemoryCartStore({"CART-1": sample_records})


@pytest.fixture
def session(store, notifier, scheduler) -> CartPricingSession:
    session = CartPricingSession(
        store.fetch, store.write, notifier=notifier, scheduler=scheduler, shop_cart_id="CART-1"
    )
    asyncio.run(session.refresh())
    return session


def config_with(**session_params) -> DefaultConfig:
    defaults = get_default_config()
    return DefaultConfig(
        debounce=defaults.debounce,
        pricing=defaults.pricing,
        session=SessionParams(**session_params),
        notifications=defaults.notifications,
    )


class TestShopCartId:
    """Test suite for the cart id surface."""

    def test_defaults_to_empty_string(self, store) -> None:
        session = CartPricingSession(store.fetch, store.write)
        assert session.shop_cart_id == ""

        session.shop_cart_id = None
        assert session.shop_cart_id == ""

        session.shop_cart_id = "CART-1"
        assert session.shop_cart_id == "CART-1"

    def test_unknown_cart_reports_error(self, store, notifier, scheduler) -> None:
        session = CartPricingSession(store.fetch, store.write, notifier=notifier, scheduler=scheduler)

        assert asyncio.run(session.refresh()) is False
        assert session.items == ()
        assert session.error_msg == "Cart '' not found"
        assert notifier.sent[-1].message == "Error refreshing cart items"


class TestSessionFlow:
    """Test suite for edit, save and refresh flows."""

    def test_refresh_seeds_items(self, session) -> None:
        assert [item.id for item in session.items] == ["item-1", "item-2", "item-3"]
        assert session.items[0].margin == 40.0
        assert session.error_msg is None

    def test_save_writes_only_price(self, session, store, scheduler, notifier) -> None:
        session.on_price_edit("item-1", "12")
        scheduler.advance(0.5)

        result = asyncio.run(session.save())

        assert result.ok
        assert [request.to_dict() for request in store.writes] == [
            {"id": "item-1", "fields": {"price": 12.0}},
            {"id": "item-2", "fields": {"price": 20.0}},
            {"id": "item-3", "fields": {"price": 50.0}},
        ]
        assert notifier.sent[-1].title == "Success"
        assert notifier.sent[-1].message == "Changes saved successfully"
        assert notifier.sent[-1].severity == Severity.SUCCESS

    def test_save_refreshes_from_source(self, session, store, scheduler) -> None:
        fetches = store.fetch_count
        session.on_margin_edit("item-2", "50")
        scheduler.advance(0.5)

        asyncio.run(session.save())

        assert store.fetch_count == fetches + 1
        item = session.engine.get("item-2")
        assert item.price == 30.0
        assert item.margin == 50.0

    def test_save_without_refresh(self, store, notifier, scheduler) -> None:
        session = CartPricingSession(
            store.fetch, store.write, notifier=notifier, scheduler=scheduler,
            config=config_with(refresh_after_save=False), shop_cart_id="CART-1",
        )
        asyncio.run(session.refresh())
        fetches = store.fetch_count

        asyncio.run(session.save())
        assert store.fetch_count == fetches

    def test_save_flushes_pending_edits(self, session, store) -> None:
        session.on_price_edit("item-1", "11")

        asyncio.run(session.save())

        assert store.records("CART-1")[0]["price"] == 11.0
        assert session.engine.pending_edits() == []

    def test_save_can_leave_pending_edits(self, store, scheduler) -> None:
        session = CartPricingSession(
            store.fetch, store.write, scheduler=scheduler,
            config=config_with(flush_pending_on_save=False, refresh_after_save=False),
            shop_cart_id="CART-1",
        )
        asyncio.run(session.refresh())
        session.on_price_edit("item-1", "11")

        asyncio.run(session.save())

        assert store.records("CART-1")[0]["price"] == 10.0
        assert len(session.engine.pending_edits()) == 1

    def test_partial_failure(self, session, store, scheduler, notifier) -> None:
        store.failing_ids.add("item-2")
        session.on_price_edit("item-1", "12")
        session.on_price_edit("item-2", "22")
        scheduler.advance(0.5)
        fetches = store.fetch_count

        result = asyncio.run(session.save())

        assert not result.ok
        assert result.failed_ids == ["item-2"]
        assert session.error_msg == "Record item-2 is locked for editing"
        assert notifier.sent[-1].message == "Error saving changes"
        assert notifier.sent[-1].severity == Severity.ERROR
        # No rollback, no refresh: local state kept, successful write applied
        assert store.records("CART-1")[0]["price"] == 12.0
        assert store.records("CART-1")[1]["price"] == 20.0
        assert session.engine.get("item-2").price == 22.0
        assert store.fetch_count == fetches

    def test_successful_save_clears_previous_error(self, session, store) -> None:
        store.failing_ids.add("item-2")
        asyncio.run(session.save())
        assert session.error_msg is not None

        store.failing_ids.clear()
        assert asyncio.run(session.save()).ok
        assert session.error_msg is None

    def test_refresh_cancels_pending_edits(self, session, store, scheduler) -> None:
        session.on_price_edit("item-1", "99")
        session.on_margin_edit("item-2", "10")

        assert asyncio.run(session.refresh()) is True
        scheduler.advance(1.0)

        assert session.engine.get("item-1").price == 10.0
        assert session.engine.get("item-2").price == 20.0
        assert session.engine.pending_edits() == []

    def test_refresh_discards_committed_unsaved_edits(self, session, scheduler) -> None:
        session.on_price_edit("item-1", "99")
        scheduler.advance(0.5)
        assert session.engine.get("item-1").price == 99.0

        asyncio.run(session.refresh())
        assert session.engine.get("item-1").price == 10.0

    def test_record_without_price_is_never_saved(self, notifier, scheduler) -> None:
        store = InMemoryCartStore({"CART-2": [
            {"id": "a", "cost": 5.0},
            {"id": "b", "price": 8.0, "cost": 5.0},
        ]})
        session = CartPricingSession(
            store.fetch, store.write, notifier=notifier, scheduler=scheduler, shop_cart_id="CART-2"
        )
        asyncio.run(session.refresh())

        assert [item.id for item in session.items] == ["b"]
        assert asyncio.run(session.save()).ok
        assert [request.id for request in store.writes] == ["b"]
        assert "price" not in store.records("CART-2")[0]

    def test_locked_item_edit(self, session) -> None:
        before = session.items
        assert session.on_price_edit("item-3", "1") == EditStatus.FORBIDDEN
        assert session.items is before


class TestRealEventLoop:
    """Session driven by the asyncio loop's own timers."""

    def test_debounced_edits_on_event_loop(self, store) -> None:
        async def scenario():
            session = CartPricingSession(store.fetch, store.write, shop_cart_id="CART-1")
            await session.refresh()
            for typed in ("1", "15", "16.5"):
                session.on_price_edit("item-1", typed)
                await asyncio.sleep(0.01)
            await asyncio.sleep(0.6)
            return session

        session = asyncio.run(scenario())
        assert session.engine.get("item-1").price == 16.5
        assert session.engine.get("item-1").margin == 63.64

    def test_edit_outside_loop_requires_scheduler(self, store) -> None:
        session = CartPricingSession(store.fetch, store.write, shop_cart_id="CART-1")
        asyncio.run(session.refresh())

        with pytest.raises(RuntimeError, match="running event loop"):
            session.on_price_edit("item-1", "12")


class TestFromConfig:
    """Test suite for building a session from configuration files."""

    def test_from_config_reads_yaml(self, store, tmp_path: Path) -> None:
        (tmp_path / "pricing.yaml").write_text(
            "debounce:\n  quiet_period_ms: 100\nnotifications:\n  method: stdout\n"
        )
        session = CartPricingSession.from_config(store.fetch, store.write, config_dir=tmp_path)

        assert session.engine.debouncer.quiet_period_ms == 100
        assert isinstance(session.notifier, StdoutNotifier)

    def test_from_config_overrides_and_notifier(self, store, tmp_path: Path, notifier) -> None:
        session = CartPricingSession.from_config(
            store.fetch, store.write, config_dir=tmp_path,
            overrides={"session": {"refresh_after_save": False}}, notifier=notifier,
        )

        assert session.config.session.refresh_after_save is False
        assert session.notifier is notifier

    def test_default_notifier_is_log(self, store) -> None:
        assert isinstance(CartPricingSession(store.fetch, store.write).notifier, LogNotifier)
