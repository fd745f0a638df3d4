"""Tests for the notification dispatcher and the low-stock job."""
from marketplace.events import LOW_STOCK, NotificationDispatcher
from marketplace.jobs import LowStockNotifier
from marketplace.models import SessionOwner, UserOwner


def test_emit_reaches_every_listener():
    seen = []
    d = NotificationDispatcher()
    d.subscribe("ping", lambda p: seen.append(("a", p["n"])))
    d.subscribe("ping", lambda p: seen.append(("b", p["n"])))
    d.emit("ping", {"n": 1})
    assert seen == [("a", 1), ("b", 1)]


def test_failing_listener_is_isolated():
    seen = []

    def broken(payload):
        raise RuntimeError("mail server down")

    d = NotificationDispatcher()
    d.subscribe("ping", broken)
    d.subscribe("ping", lambda p: seen.append(p))
    d.emit("ping", {"n": 1})

    assert seen == [{"n": 1}]


def test_unsubscribe():
    seen = []
    d = NotificationDispatcher()
    listener = seen.append
    d.subscribe("ping", listener)
    d.unsubscribe("ping", listener)
    d.emit("ping", {})
    assert seen == []


def test_low_stock_alert_sent_once(cart_service, cart_db, product_db, dispatcher, events):
    cart_service.add_item(UserOwner(user_id="user-1"), "ITEM002", 1)  # stock 5
    cart_service.add_item(SessionOwner(session_id="guest"), "ITEM001", 1)  # stock 10
    notifier = LowStockNotifier(cart_db, product_db, dispatcher, threshold=5)

    assert notifier.run_once() == 1
    assert events == [
        (LOW_STOCK, {"owner": "user:user-1", "user_id": "user-1", "product_id": "ITEM002", "title": "Stand Mixer", "stock": 5}),
    ]

    assert notifier.run_once() == 0
    assert len(events) == 1


def test_low_stock_flag_resets_after_restock(cart_service, cart_db, product_db, dispatcher, events):
    owner = UserOwner(user_id="user-1")
    cart_service.add_item(owner, "ITEM002", 1)
    notifier = LowStockNotifier(cart_db, product_db, dispatcher, threshold=5)
    notifier.run_once()

    product_db.update_stock("ITEM002", 10)
    notifier.run_once()
    assert cart_db.find_by_owner(owner).items[0].low_stock_notified is False

    product_db.update_stock("ITEM002", -12)
    assert notifier.run_once() == 1
    assert len(events) == 2
