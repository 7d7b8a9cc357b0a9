"""Unit tests for the feedback processor.

Covers create-or-update idempotency per (order, remote id), the amount
clamp, status mapping and checkout navigation, using in-memory stubs.
"""

import pytest

from apps.payments.domain import Order, TransactionStatus
from apps.payments.schemas import GatewayFeedback

from .factories import INSTANCE_ID, feedback_params


def _feedback(**overrides):
    fb = GatewayFeedback.from_params(feedback_params(**overrides))
    assert fb is not None
    return fb


def test_first_feedback_creates_transaction(memory_env, payment_method):
    order = memory_env.orders.get(12)

    tx = memory_env.processor.process(order, payment_method, _feedback())

    assert tx.id is not None
    assert tx.order_id == 12
    assert tx.payment_method == "ogone"
    assert tx.instance_id == INSTANCE_ID
    assert tx.remote_id == "9988"
    assert tx.currency == "EUR"
    assert tx.amount_cents == 6000  # clamped from 15000
    assert tx.remote_status == "9"
    assert tx.status == TransactionStatus.SUCCESS
    assert tx.message == "Payment requested"
    assert tx.payload["PAYID"] == "9988"
    assert tx.payload["ORDERID"] == "5-7-12"


def test_repeated_feedback_updates_in_place(memory_env, payment_method):
    order = memory_env.orders.get(5)

    first = memory_env.processor.process(order, payment_method, _feedback(STATUS="5"))
    second = memory_env.processor.process(order, payment_method, _feedback(STATUS="9"))

    txs = memory_env.transactions.for_order(5)
    assert len(txs) == 1
    assert first.id == second.id
    assert txs[0].status == TransactionStatus.SUCCESS
    assert txs[0].remote_status == "9"


def test_new_remote_id_creates_a_second_transaction(memory_env, payment_method):
    order = memory_env.orders.get(5)

    memory_env.processor.process(order, payment_method, _feedback(STATUS="2", PAYID="1111"))
    memory_env.processor.process(order, payment_method, _feedback(STATUS="9", PAYID="2222"))

    assert sorted(tx.remote_id for tx in memory_env.transactions.for_order(5)) == ["1111", "2222"]


@pytest.mark.parametrize(
    "feedback_amount, order_total, expected",
    [(15000, 5000, 5000), (3000, 5000, 3000), (5000, 5000, 5000), (0, 5000, 0), (10, 0, 0)],
)
def test_amount_is_clamped_to_order_total(memory_env, payment_method, feedback_amount, order_total, expected):
    order = Order(id=77, group_id="G-CLAMP", total_cents=order_total, payment_method=INSTANCE_ID)

    tx = memory_env.processor.process(order, payment_method, _feedback(amount=str(feedback_amount)))

    assert tx.amount_cents == expected


def test_one_remote_id_fans_out_to_every_order(memory_env, payment_method):
    fb = _feedback()
    for oid in (5, 7, 12):
        memory_env.processor.process(memory_env.orders.get(oid), payment_method, fb)

    assert len(memory_env.transactions.rows) == 3
    for oid in (5, 7, 12):
        tx_id = memory_env.transactions.find_by_order_and_remote_id("ogone", oid, "9988")
        assert memory_env.transactions.get(tx_id).order_id == oid


def test_success_advances_checkout(memory_env, payment_method):
    memory_env.processor.process(memory_env.orders.get(7), payment_method, _feedback())
    assert memory_env.checkout.calls == [("advance", 7)]


def test_pending_advances_checkout(memory_env, payment_method):
    tx = memory_env.processor.process(memory_env.orders.get(7), payment_method, _feedback(STATUS="51"))
    assert tx.status == TransactionStatus.PENDING
    assert memory_env.checkout.calls == [("advance", 7)]


@pytest.mark.parametrize("code", ["0", "1", "2", "93", "4242"])
def test_failure_retreats_checkout(memory_env, payment_method, code):
    tx = memory_env.processor.process(memory_env.orders.get(7), payment_method, _feedback(STATUS=code))
    assert tx.status == TransactionStatus.FAILURE
    assert memory_env.checkout.calls == [("retreat", 7)]


def test_unknown_status_message_names_the_code(memory_env, payment_method):
    tx = memory_env.processor.process(memory_env.orders.get(7), payment_method, _feedback(STATUS="4242"))
    assert tx.message == "Unknown gateway status 4242"


def test_no_navigation_when_disabled(memory_env, payment_method):
    memory_env.processor.process(memory_env.orders.get(7), payment_method, _feedback(), navigate=False)
    assert memory_env.checkout.calls == []
