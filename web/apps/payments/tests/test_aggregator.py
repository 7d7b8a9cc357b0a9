"""Unit tests for the order-group aggregator.

The group is paid with one gateway request in central routing mode only; in
direct mode each order is paid on its own.
"""

import pytest

from apps.payments.adapters import InMemoryOrderStore
from apps.payments.aggregator import build_group_payment_request, build_payment_request
from apps.payments.domain import (
    Order,
    OrderGroupInvariantError,
    RoutingMode,
    RoutingModeError,
)


def test_group_request_sorts_and_sums(group_orders):
    store = InMemoryOrderStore(group_orders)
    trigger = store.get(12)

    req = build_group_payment_request(trigger, RoutingMode.CENTRAL, store)

    assert req.reference == "5-7-12"
    assert req.order_ids == (5, 7, 12)
    assert req.amount_cents == 15000
    assert req.currency == "EUR"
    assert req.as_gateway_fields() == {"ORDERID": "5-7-12", "AMOUNT": "15000", "CURRENCY": "EUR"}


def test_group_request_ignores_other_groups(group_orders):
    other = Order(id=6, group_id="G-OTHER", total_cents=999, currency="EUR")
    store = InMemoryOrderStore(group_orders + [other])

    req = build_group_payment_request(store.get(5), RoutingMode.CENTRAL, store)

    assert 6 not in req.order_ids
    assert req.amount_cents == 15000


def test_group_request_reads_membership_fresh(group_orders):
    store = InMemoryOrderStore(group_orders)
    first = build_group_payment_request(store.get(5), "central", store)

    late = Order(id=3, group_id=group_orders[0].group_id, total_cents=1000, currency="EUR")
    store.orders[late.id] = late
    second = build_group_payment_request(store.get(5), "central", store)

    assert first.reference == "5-7-12"
    assert second.reference == "3-5-7-12"
    assert second.amount_cents == 16000


def test_group_request_refused_in_direct_mode(group_orders):
    store = InMemoryOrderStore(group_orders)
    with pytest.raises(RoutingModeError):
        build_group_payment_request(store.get(5), RoutingMode.DIRECT, store)


def test_empty_group_is_an_invariant_violation():
    trigger = Order(id=1, group_id="G-EMPTY", total_cents=100)
    with pytest.raises(OrderGroupInvariantError):
        build_group_payment_request(trigger, RoutingMode.CENTRAL, InMemoryOrderStore())


def test_group_without_trigger_is_an_invariant_violation(group_orders):
    trigger = Order(id=99, group_id=group_orders[0].group_id, total_cents=100)
    with pytest.raises(OrderGroupInvariantError):
        build_group_payment_request(trigger, RoutingMode.CENTRAL, InMemoryOrderStore(group_orders))


def test_mixed_currency_group_is_rejected(group_orders):
    usd = Order(id=20, group_id=group_orders[0].group_id, total_cents=100, currency="USD")
    store = InMemoryOrderStore(group_orders + [usd])
    with pytest.raises(ValueError) as e:
        build_group_payment_request(store.get(5), RoutingMode.CENTRAL, store)
    assert str(e.value) == "MIXED_CURRENCY_GROUP"


def test_direct_mode_pays_the_order_alone(group_orders):
    store = InMemoryOrderStore(group_orders)

    req = build_payment_request(store.get(12), RoutingMode.DIRECT, store)

    assert req.reference == "12"
    assert req.order_ids == (12,)
    assert req.amount_cents == 6000


def test_central_mode_entry_point_aggregates(group_orders):
    store = InMemoryOrderStore(group_orders)
    req = build_payment_request(store.get(7), RoutingMode.CENTRAL, store)
    assert req.reference == "5-7-12"
