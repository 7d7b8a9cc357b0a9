"""In-process stub adapters for the payments ports.

These stubs implement ``GatewayAdapter``, ``CheckoutFlow`` and the storage
ports without network calls or a database. They are used by unit tests and
local development where deterministic behavior is useful and neither the
commerce core nor the payment gateway is reachable.
"""

import itertools
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from .domain import (
    Order,
    PaymentMethodInstance,
    PaymentTransaction,
    TransactionStatus,
)

# Gateway status code -> (local status, message)
DEFAULT_STATUS_MAP: Dict[int, Tuple[TransactionStatus, str]] = {
    0: (TransactionStatus.FAILURE, "Invalid or incomplete"),
    1: (TransactionStatus.FAILURE, "Cancelled by customer"),
    2: (TransactionStatus.FAILURE, "Authorization refused"),
    5: (TransactionStatus.PENDING, "Authorized"),
    51: (TransactionStatus.PENDING, "Authorization waiting"),
    52: (TransactionStatus.PENDING, "Authorization not known"),
    9: (TransactionStatus.SUCCESS, "Payment requested"),
    91: (TransactionStatus.PENDING, "Payment processing"),
    92: (TransactionStatus.PENDING, "Payment uncertain"),
    93: (TransactionStatus.FAILURE, "Payment refused"),
}


def map_gateway_status(code: int) -> Tuple[TransactionStatus, str]:
    """Translate a gateway status code; unknown codes count as failures."""
    return DEFAULT_STATUS_MAP.get(
        int(code), (TransactionStatus.FAILURE, f"Unknown gateway status {code}")
    )


class GatewayStub:
    """Stub implementation of ``GatewayAdapter``.

    Accepts any feedback that carries a non-empty ``SHASIGN``. The real
    signature scheme belongs to the gateway integration plugged in through
    ``settings.PAYMENT_GATEWAY_ADAPTER``.
    """

    def __init__(self, name: str = "ogone"):
        self.name = name

    def verify(self, order: Order, payment_method: PaymentMethodInstance, feedback) -> bool:
        return bool(feedback is not None and feedback.signature)

    def map_status(self, code: int) -> Tuple[TransactionStatus, str]:
        return map_gateway_status(code)


class CheckoutFlowStub:
    """Stub implementation of ``CheckoutFlow`` that records the signals.

    Attributes:
        calls: ``(signal, order_id)`` tuples in emission order, where
            ``signal`` is ``"advance"`` or ``"retreat"``.
    """

    def __init__(self):
        self.calls: List[Tuple[str, int]] = []

    def advance(self, order: Order) -> None:
        self.calls.append(("advance", order.id))

    def retreat(self, order: Order) -> None:
        self.calls.append(("retreat", order.id))


class InMemoryOrderStore:
    """``OrderStore`` over a dict; for tests."""

    def __init__(self, orders: Iterable[Order] = ()):
        self.orders: Dict[int, Order] = {o.id: o for o in orders}

    def get(self, order_id: int) -> Optional[Order]:
        return self.orders.get(order_id)

    def by_ids(self, ids: Iterable[int]) -> List[Order]:
        return sorted((self.orders[i] for i in set(ids) if i in self.orders), key=lambda o: o.id)

    def by_group(self, group_id: str) -> List[Order]:
        return sorted((o for o in self.orders.values() if o.group_id == group_id), key=lambda o: o.id)


class InMemoryPaymentMethodResolver:
    """``PaymentMethodResolver`` over a dict of instances; for tests."""

    def __init__(self, methods: Iterable[PaymentMethodInstance] = ()):
        self.methods: Dict[str, PaymentMethodInstance] = {m.instance_id: m for m in methods}

    def get(self, instance_id: str) -> Optional[PaymentMethodInstance]:
        return self.methods.get(instance_id)

    def for_order(self, order: Order) -> Optional[PaymentMethodInstance]:
        return self.methods.get(order.payment_method or "")


class InMemoryTransactionRepository:
    """``TransactionRepository`` keeping copies of saved transactions.

    Inserts for an existing (payment_method, order, remote id) key update
    that record, mirroring the database unique constraint.
    """

    def __init__(self):
        self.rows: Dict[int, PaymentTransaction] = {}
        self._ids = itertools.count(1)

    def find_by_order_and_remote_id(
        self, payment_method: str, order_id: int, remote_id: str
    ) -> Optional[int]:
        matches = [
            tx.id
            for tx in self.rows.values()
            if (tx.payment_method, tx.order_id, tx.remote_id) == (payment_method, order_id, remote_id)
        ]
        return max(matches) if matches else None

    def get(self, transaction_id: int) -> PaymentTransaction:
        return _copy(self.rows[transaction_id])

    def for_order(self, order_id: int) -> List[PaymentTransaction]:
        return [_copy(tx) for _, tx in sorted(self.rows.items()) if tx.order_id == order_id]

    def save(self, tx: PaymentTransaction) -> PaymentTransaction:
        now = datetime.now(timezone.utc)
        if tx.id is None:
            tx.id = self.find_by_order_and_remote_id(tx.payment_method, tx.order_id, tx.remote_id)
        if tx.id is None:
            tx.id = next(self._ids)
            tx.created_at = now
        else:
            tx.created_at = self.rows[tx.id].created_at
        tx.changed_at = now
        self.rows[tx.id] = _copy(tx)
        return tx


def _copy(tx: PaymentTransaction) -> PaymentTransaction:
    return PaymentTransaction(**{**tx.__dict__, "payload": dict(tx.payload)})
