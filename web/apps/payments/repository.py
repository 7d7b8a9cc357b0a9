"""Django ORM repositories for payment methods and transactions.

``DjangoTransactionRepository`` is where the at-most-one transaction per
(gateway, order, remote id) rule is enforced. The unique constraint
``uniq_tx_method_order_remote`` serialises concurrent inserts: when a
redirect callback and a server notification race on the same payment, the
loser's insert fails with ``IntegrityError`` inside its own savepoint and is
replayed as an update of the winner's row.
"""

import logging
from typing import List, Optional

from django.db import IntegrityError, transaction

from .domain import (
    Order,
    PaymentMethodInstance,
    PaymentTransaction,
    TransactionRepository,
    TransactionStatus,
)
from .models import PaymentMethodModel, PaymentTransactionModel

logger = logging.getLogger("payments")

# Fields written on every create-or-update
_MUTABLE_FIELDS = (
    "instance_id",
    "currency",
    "amount_cents",
    "remote_status",
    "status",
    "message",
    "payload",
)


def _to_domain(obj: PaymentTransactionModel) -> PaymentTransaction:
    return PaymentTransaction(
        id=obj.id,
        order_id=int(obj.order_id),
        payment_method=obj.payment_method,
        instance_id=obj.instance_id,
        remote_id=obj.remote_id,
        currency=obj.currency,
        amount_cents=int(obj.amount_cents),
        remote_status=obj.remote_status,
        status=TransactionStatus(obj.status),
        message=obj.message,
        payload=dict(obj.payload or {}),
        created_at=obj.created_at,
        changed_at=obj.changed_at,
    )


def _values(tx: PaymentTransaction) -> dict:
    values = {name: getattr(tx, name) for name in _MUTABLE_FIELDS}
    values["status"] = TransactionStatus(tx.status).value
    return values


def find_existing_transaction(
    repo: TransactionRepository, gateway: str, order: Order, remote_id: str
) -> Optional[int]:
    """Return the id of ``order``'s transaction for ``remote_id``, or None.

    Scoping by order lets one remote payment id (shared by every order of a
    group paid together) map to one transaction per order.
    """
    return repo.find_by_order_and_remote_id(gateway, order.id, remote_id)


class DjangoTransactionRepository:
    """``TransactionRepository`` backed by ``PaymentTransactionModel``."""

    def find_by_order_and_remote_id(
        self, payment_method: str, order_id: int, remote_id: str
    ) -> Optional[int]:
        return (
            PaymentTransactionModel.objects.filter(
                payment_method=payment_method, order_id=order_id, remote_id=remote_id
            )
            .order_by("id")
            .values_list("id", flat=True)
            .last()
        )

    def get(self, transaction_id: int) -> PaymentTransaction:
        return _to_domain(PaymentTransactionModel.objects.get(pk=transaction_id))

    def for_order(self, order_id: int) -> List[PaymentTransaction]:
        return [
            _to_domain(o)
            for o in PaymentTransactionModel.objects.filter(order_id=order_id).order_by("id")
        ]

    def save(self, tx: PaymentTransaction) -> PaymentTransaction:
        """Insert or update ``tx``; see the module docstring for races."""
        values = _values(tx)

        if tx.id is not None:
            with transaction.atomic():
                obj = PaymentTransactionModel.objects.select_for_update().get(pk=tx.id)
                self._apply(obj, values)
            return self._refresh(tx, obj)

        try:
            # Nested savepoint: a unique violation only rolls back this insert.
            with transaction.atomic():
                obj = PaymentTransactionModel.objects.create(
                    payment_method=tx.payment_method,
                    order_id=tx.order_id,
                    remote_id=tx.remote_id,
                    **values,
                )
        except IntegrityError:
            with transaction.atomic():
                obj = (
                    PaymentTransactionModel.objects.select_for_update()
                    .filter(
                        payment_method=tx.payment_method,
                        order_id=tx.order_id,
                        remote_id=tx.remote_id,
                    )
                    .order_by("id")
                    .last()
                )
                if obj is None:
                    # Some other integrity failure: nothing to update.
                    raise
                self._apply(obj, values)
            logger.warning(
                "concurrent transaction insert replayed as update",
                extra={"order_id": tx.order_id, "remote_id": tx.remote_id, "transaction_id": obj.id},
            )
        return self._refresh(tx, obj)

    @staticmethod
    def _apply(obj: PaymentTransactionModel, values: dict) -> None:
        for name, value in values.items():
            setattr(obj, name, value)
        obj.save(update_fields=[*values.keys(), "changed_at"])

    @staticmethod
    def _refresh(tx: PaymentTransaction, obj: PaymentTransactionModel) -> PaymentTransaction:
        tx.id = obj.id
        tx.created_at = obj.created_at
        tx.changed_at = obj.changed_at
        return tx


class DjangoPaymentMethodResolver:
    """``PaymentMethodResolver`` backed by ``PaymentMethodModel``.

    Disabled or unknown instances resolve to None.
    """

    def get(self, instance_id: str) -> Optional[PaymentMethodInstance]:
        if not instance_id:
            return None
        obj = PaymentMethodModel.objects.filter(instance_id=instance_id, enabled=True).first()
        if obj is None:
            return None
        return PaymentMethodInstance(
            instance_id=obj.instance_id,
            method_id=obj.method_id,
            settings=dict(obj.settings or {}),
        )

    def for_order(self, order: Order) -> Optional[PaymentMethodInstance]:
        return self.get(order.payment_method or "")
