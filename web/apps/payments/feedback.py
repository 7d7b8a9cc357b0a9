"""Maps one gateway feedback onto one order's payment transaction.

A single gateway payment can cover a whole checkout group, so the same
feedback reaches ``FeedbackProcessor.process`` once per order, possibly
several times per order (gateway retries, or both the browser redirect and
the server notification delivering it). Each call creates the order's
transaction for the remote payment id, or updates it in place; it never
creates a second one.
"""

import logging

from .domain import (
    CheckoutFlow,
    GatewayAdapter,
    Order,
    PaymentMethodInstance,
    PaymentTransaction,
    TransactionRepository,
    TransactionStatus,
)
from .repository import find_existing_transaction
from .schemas import GatewayFeedback

logger = logging.getLogger("payments")


class FeedbackProcessor:
    """Create-or-update of the transaction for one (order, remote id) pair."""

    def __init__(
        self,
        gateway: GatewayAdapter,
        transactions: TransactionRepository,
        checkout: CheckoutFlow,
    ):
        self.gateway = gateway
        self.transactions = transactions
        self.checkout = checkout

    def process(
        self,
        order: Order,
        payment_method: PaymentMethodInstance,
        feedback: GatewayFeedback,
        navigate: bool = True,
    ) -> PaymentTransaction:
        """Record ``feedback`` against ``order`` and optionally navigate.

        The captured amount is ``min(feedback.amount, order.total_cents)``:
        the gateway reports the amount of the whole group, and only this
        order's share may be booked against it.

        Args:
            order: The order the transaction belongs to.
            payment_method: Payment method instance the feedback came through.
            feedback: Authenticated gateway feedback.
            navigate: Emit the checkout advance/retreat signal. False when
                there is no interactive session (server notifications).

        Returns:
            PaymentTransaction: The persisted transaction.
        """
        tx_id = find_existing_transaction(self.transactions, self.gateway.name, order, feedback.pay_id)
        if tx_id is None:
            tx = PaymentTransaction(order_id=order.id, payment_method=self.gateway.name)
        else:
            tx = self.transactions.get(tx_id)

        status, message = self.gateway.map_status(feedback.status)

        tx.instance_id = payment_method.instance_id
        tx.remote_id = feedback.pay_id
        tx.currency = feedback.currency
        tx.amount_cents = min(feedback.amount, order.total_cents)
        tx.remote_status = str(feedback.status)
        tx.status = status
        tx.message = message
        tx.payload = dict(feedback.raw)

        if feedback.amount > order.total_cents:
            logger.info(
                "feedback amount clamped to order total",
                extra={"order_id": order.id, "feedback_amount": feedback.amount, "order_total": order.total_cents},
            )

        tx = self.transactions.save(tx)
        logger.info(
            "payment transaction %s",
            "created" if tx_id is None else "updated",
            extra={
                "order_id": order.id,
                "transaction_id": tx.id,
                "remote_id": tx.remote_id,
                "status": tx.status.value,
            },
        )

        if navigate:
            if status is TransactionStatus.FAILURE:
                self.checkout.retreat(order)
            else:
                self.checkout.advance(order)
        return tx
