"""Builds the single outbound payment request for a checkout group."""

import logging

from .domain import (
    Order,
    OrderGroupInvariantError,
    OrderStore,
    PaymentRequest,
    RoutingMode,
    RoutingModeError,
)
from .reference import build_reference

logger = logging.getLogger("payments")


def build_group_payment_request(order: Order, mode: RoutingMode, orders: OrderStore) -> PaymentRequest:
    """Aggregate every order of ``order``'s group into one payment request.

    The group is loaded fresh from ``orders`` and sorted by ascending id, so
    the composite reference is stable regardless of load order. Amounts are
    summed in minor units.

    Args:
        order: The order whose checkout triggered the payment.
        mode: Payment routing mode. Only ``RoutingMode.CENTRAL`` may
            aggregate; the gateway cannot settle split payments for one
            transaction.
        orders: Order lookups of the commerce core.

    Returns:
        PaymentRequest: Composite reference, summed amount and currency.

    Raises:
        RoutingModeError: If ``mode`` is not central.
        OrderGroupInvariantError: If the group is empty or does not contain
            the triggering order.
        ValueError: ``MIXED_CURRENCY_GROUP`` when the group's orders do not
            share one currency.
    """
    if RoutingMode(mode) is not RoutingMode.CENTRAL:
        raise RoutingModeError("ROUTING_MODE_NOT_CENTRAL")

    group = sorted(orders.by_group(order.group_id), key=lambda o: o.id)
    if not group:
        raise OrderGroupInvariantError(f"order group {order.group_id!r} resolved to no orders")
    if order.id not in {o.id for o in group}:
        raise OrderGroupInvariantError(
            f"order {order.id} is missing from its own group {order.group_id!r}"
        )

    currencies = {o.currency for o in group}
    if len(currencies) != 1:
        raise ValueError("MIXED_CURRENCY_GROUP")

    request = PaymentRequest(
        reference=build_reference(o.id for o in group),
        amount_cents=sum(o.total_cents for o in group),
        currency=currencies.pop(),
        order_ids=tuple(o.id for o in group),
    )
    logger.info(
        "group payment request built",
        extra={"group_id": order.group_id, "reference": request.reference, "amount_cents": request.amount_cents},
    )
    return request


def build_payment_request(order: Order, mode: RoutingMode, orders: OrderStore) -> PaymentRequest:
    """Build the payment request for ``order`` under the given routing mode.

    Central routing pays the whole group at once. Direct routing pays the
    order on its own and never looks at its siblings.
    """
    if RoutingMode(mode) is RoutingMode.CENTRAL:
        return build_group_payment_request(order, mode, orders)
    return PaymentRequest(
        reference=build_reference([order.id]),
        amount_cents=order.total_cents,
        currency=order.currency,
        order_ids=(order.id,),
    )
