"""The two gateway callback paths.

The gateway reports a payment twice as a rule: it redirects the customer's
browser back to the shop (redirect validation) and it calls the shop
directly (server-to-server notification). Both paths authenticate the
feedback and hand it to the same ``FeedbackProcessor``, so they can run in
any order, or both, for the same payment.
"""

import logging
from typing import Mapping

from .domain import (
    GatewayAdapter,
    Order,
    OrderStore,
    PaymentMethodInstance,
    PaymentMethodResolver,
    RoutingMode,
)
from .feedback import FeedbackProcessor
from .reference import parse_reference
from .schemas import GatewayFeedback

logger = logging.getLogger("payments")


class CallbackRouter:
    """Entry points for gateway feedback delivery.

    Args:
        gateway: Gateway adapter used for signature checks.
        processor: Feedback processor shared by both paths.
        orders: Order lookups of the commerce core.
        payment_methods: Payment method resolution of the commerce core.
        mode: Payment routing mode of the platform.
    """

    def __init__(
        self,
        gateway: GatewayAdapter,
        processor: FeedbackProcessor,
        orders: OrderStore,
        payment_methods: PaymentMethodResolver,
        mode: RoutingMode = RoutingMode.CENTRAL,
    ):
        self.gateway = gateway
        self.processor = processor
        self.orders = orders
        self.payment_methods = payment_methods
        self.mode = RoutingMode(mode)

    def validate_redirect(
        self, order: Order, payment_method: PaymentMethodInstance, params: Mapping
    ) -> bool:
        """Handle the browser redirect back from the gateway for one order.

        The feedback is only processed when the order actually selected
        ``payment_method``; with direct routing an order paid through another
        method must not be touched. Instances of another payment method never
        belong to this gateway and are refused outright.

        Returns:
            bool: Whether the feedback was recognised and correctly signed,
            independent of whether a transaction was written.
        """
        if payment_method.method_id != self.gateway.name:
            logger.warning(
                "redirect feedback for a non-gateway payment method discarded",
                extra={"order_id": order.id, "instance_id": payment_method.instance_id},
            )
            return False

        feedback = GatewayFeedback.from_params(params)
        if feedback is None or not self.gateway.verify(order, payment_method, feedback):
            logger.warning(
                "redirect feedback discarded",
                extra={"order_id": order.id, "instance_id": payment_method.instance_id},
            )
            return False

        if order.payment_method == payment_method.instance_id:
            self.processor.process(order, payment_method, feedback, navigate=True)
        else:
            logger.info(
                "redirect feedback for another payment method ignored",
                extra={
                    "order_id": order.id,
                    "order_method": order.payment_method,
                    "instance_id": payment_method.instance_id,
                    "routing_mode": self.mode.value,
                },
            )
        return True

    def handle_notification(self, params: Mapping) -> bool:
        """Handle a server-to-server gateway notification.

        Every order named in the composite reference is processed on its
        own: an order without this gateway as payment method, or whose
        signature check fails, is skipped and the rest continue.

        Returns:
            bool: Always False; the gateway expects no follow-up action.
        """
        feedback = GatewayFeedback.from_params(params)
        if feedback is None:
            logger.warning("notification without usable feedback discarded")
            return False

        order_ids = parse_reference(feedback.order_ref)
        if not order_ids:
            logger.warning("notification reference unparseable", extra={"reference": feedback.order_ref})
            return False

        for order in self.orders.by_ids(order_ids):
            payment_method = self.payment_methods.for_order(order)
            if payment_method is None or payment_method.method_id != self.gateway.name:
                logger.info(
                    "notification skipped order without gateway payment method",
                    extra={"order_id": order.id, "order_method": order.payment_method},
                )
                continue
            if not self.gateway.verify(order, payment_method, feedback):
                logger.warning(
                    "notification signature rejected",
                    extra={"order_id": order.id, "remote_id": feedback.pay_id},
                )
                continue
            self.processor.process(order, payment_method, feedback, navigate=False)
        return False
