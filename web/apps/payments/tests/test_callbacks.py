"""Unit tests for the callback router.

Both delivery paths (browser redirect and server notification) must agree:
delivering the same feedback through either, or both, leaves exactly one
transaction per order of the group.
"""

from apps.payments.domain import Order, PaymentMethodInstance, TransactionStatus

from .factories import GROUP_ID, INSTANCE_ID, feedback_params, make_env


def _all_transactions(env):
    return sorted(env.transactions.rows.values(), key=lambda tx: tx.order_id)


# ---- server-to-server notification ----

def test_notification_creates_one_transaction_per_order(memory_env):
    result = memory_env.router.handle_notification(feedback_params())

    assert result is False
    txs = _all_transactions(memory_env)
    assert [tx.order_id for tx in txs] == [5, 7, 12]
    assert [tx.amount_cents for tx in txs] == [5000, 4000, 6000]
    assert all(tx.remote_id == "9988" for tx in txs)
    assert all(tx.currency == "EUR" for tx in txs)
    assert all(tx.status == TransactionStatus.SUCCESS for tx in txs)


def test_notification_never_navigates(memory_env):
    memory_env.router.handle_notification(feedback_params())
    assert memory_env.checkout.calls == []


def test_notification_redelivery_does_not_duplicate(memory_env):
    memory_env.router.handle_notification(feedback_params(STATUS="5"))
    memory_env.router.handle_notification(feedback_params(STATUS="9"))

    txs = _all_transactions(memory_env)
    assert len(txs) == 3
    assert all(tx.remote_status == "9" for tx in txs)


def test_notification_skips_order_without_gateway_method(group_orders):
    cash = PaymentMethodInstance("cash|default", "cash")
    orders = [
        o if o.id != 7 else Order(id=7, group_id=GROUP_ID, total_cents=4000, payment_method="cash|default")
        for o in group_orders
    ]
    env = make_env(orders, methods=[PaymentMethodInstance(INSTANCE_ID, "ogone"), cash])

    env.router.handle_notification(feedback_params())

    assert [tx.order_id for tx in _all_transactions(env)] == [5, 12]


def test_notification_skips_order_without_any_method(group_orders):
    orders = [
        o if o.id != 12 else Order(id=12, group_id=GROUP_ID, total_cents=6000, payment_method=None)
        for o in group_orders
    ]
    env = make_env(orders)

    env.router.handle_notification(feedback_params())

    assert [tx.order_id for tx in _all_transactions(env)] == [5, 7]


def test_notification_ignores_unknown_order_ids(memory_env):
    memory_env.router.handle_notification(feedback_params(orderID="5-7-12-404"))
    assert len(memory_env.transactions.rows) == 3


def test_notification_with_unparseable_reference_is_a_noop(memory_env):
    memory_env.router.handle_notification(feedback_params(orderID="5-seven-12"))
    assert memory_env.transactions.rows == {}


def test_notification_without_signature_is_discarded(memory_env):
    memory_env.router.handle_notification(feedback_params(SHASIGN=""))
    assert memory_env.transactions.rows == {}


def test_notification_with_missing_fields_is_discarded(memory_env):
    params = feedback_params()
    del params["PAYID"]
    memory_env.router.handle_notification(params)
    assert memory_env.transactions.rows == {}


def test_signature_is_checked_per_order(memory_env, monkeypatch):
    monkeypatch.setattr(
        memory_env.gateway, "verify", lambda order, method, feedback: order.id != 12
    )
    memory_env.router.handle_notification(feedback_params())
    assert [tx.order_id for tx in _all_transactions(memory_env)] == [5, 7]


# ---- redirect validation ----

def test_redirect_valid_feedback_processes_and_advances(memory_env, payment_method):
    order = memory_env.orders.get(7)

    assert memory_env.router.validate_redirect(order, payment_method, feedback_params()) is True

    txs = memory_env.transactions.for_order(7)
    assert len(txs) == 1 and txs[0].amount_cents == 4000
    assert memory_env.checkout.calls == [("advance", 7)]


def test_redirect_failure_status_retreats(memory_env, payment_method):
    order = memory_env.orders.get(7)
    assert memory_env.router.validate_redirect(order, payment_method, feedback_params(STATUS="93")) is True
    assert memory_env.checkout.calls == [("retreat", 7)]


def test_redirect_bad_signature_is_invalid(memory_env, payment_method):
    order = memory_env.orders.get(7)

    assert memory_env.router.validate_redirect(order, payment_method, feedback_params(SHASIGN="")) is False
    assert memory_env.transactions.rows == {}
    assert memory_env.checkout.calls == []


def test_redirect_malformed_feedback_is_invalid(memory_env, payment_method):
    order = memory_env.orders.get(7)
    assert memory_env.router.validate_redirect(order, payment_method, feedback_params(amount="12.50")) is False


def test_redirect_for_other_method_is_valid_but_untouched(memory_env):
    other = PaymentMethodInstance("ogone|vendor-7", "ogone")
    order = memory_env.orders.get(7)

    assert memory_env.router.validate_redirect(order, other, feedback_params()) is True
    assert memory_env.transactions.rows == {}
    assert memory_env.checkout.calls == []


# ---- both paths ----

def test_both_paths_deliver_same_feedback_once_per_order(memory_env, payment_method):
    for oid in (5, 7, 12):
        memory_env.router.validate_redirect(memory_env.orders.get(oid), payment_method, feedback_params())
    memory_env.router.handle_notification(feedback_params())

    txs = _all_transactions(memory_env)
    assert len(txs) == 3
    assert [tx.amount_cents for tx in txs] == [5000, 4000, 6000]


def test_notification_then_redirect_updates_in_place(memory_env, payment_method):
    memory_env.router.handle_notification(feedback_params(STATUS="91"))
    memory_env.router.validate_redirect(memory_env.orders.get(5), payment_method, feedback_params(STATUS="9"))

    by_order = {tx.order_id: tx for tx in _all_transactions(memory_env)}
    assert len(by_order) == 3
    assert by_order[5].status == TransactionStatus.SUCCESS
    assert by_order[7].status == TransactionStatus.PENDING


def test_redirect_through_non_gateway_method_is_invalid(group_orders):
    cash = PaymentMethodInstance("cash|default", "cash")
    orders = [
        o if o.id != 7 else Order(id=7, group_id=GROUP_ID, total_cents=4000, payment_method="cash|default")
        for o in group_orders
    ]
    env = make_env(orders, methods=[PaymentMethodInstance(INSTANCE_ID, "ogone"), cash])

    assert env.router.validate_redirect(env.orders.get(7), cash, feedback_params()) is False
    assert env.transactions.rows == {}
    assert env.checkout.calls == []
