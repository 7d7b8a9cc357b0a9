"""Builders shared by the payments tests."""

from types import SimpleNamespace

from apps.payments.adapters import (
    CheckoutFlowStub,
    GatewayStub,
    InMemoryOrderStore,
    InMemoryPaymentMethodResolver,
    InMemoryTransactionRepository,
)
from apps.payments.callbacks import CallbackRouter
from apps.payments.domain import PaymentMethodInstance, RoutingMode
from apps.payments.feedback import FeedbackProcessor

INSTANCE_ID = "ogone|default"
GROUP_ID = "G-1001"

# ids deliberately out of order; totals sum to 15000
GROUP_TOTALS = {5: 5000, 12: 6000, 7: 4000}


def feedback_params(**overrides):
    """Signed success feedback for the ``GROUP_TOTALS`` group.

    Keys use the gateway's mixed casing on purpose.
    """
    params = {
        "orderID": "5-7-12",
        "PAYID": "9988",
        "STATUS": "9",
        "amount": "15000",
        "currency": "EUR",
        "SHASIGN": "A1B2C3",
    }
    params.update(overrides)
    return params


def make_env(orders, methods=None, mode=RoutingMode.CENTRAL):
    """Wire the payments core with in-process collaborators."""
    gateway = GatewayStub(name="ogone")
    transactions = InMemoryTransactionRepository()
    checkout = CheckoutFlowStub()
    processor = FeedbackProcessor(gateway=gateway, transactions=transactions, checkout=checkout)
    store = InMemoryOrderStore(orders)
    resolver = InMemoryPaymentMethodResolver(
        methods if methods is not None else [PaymentMethodInstance(INSTANCE_ID, "ogone")]
    )
    router = CallbackRouter(
        gateway=gateway,
        processor=processor,
        orders=store,
        payment_methods=resolver,
        mode=mode,
    )
    return SimpleNamespace(
        gateway=gateway,
        transactions=transactions,
        checkout=checkout,
        processor=processor,
        orders=store,
        payment_methods=resolver,
        router=router,
    )
