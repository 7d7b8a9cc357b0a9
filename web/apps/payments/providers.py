"""Wiring of the payments core with its collaborators.

The gateway adapter class is configured by dotted path in
``settings.PAYMENT_GATEWAY_ADAPTER`` and instantiated with the gateway name.
Outside DEBUG there is no default adapter.
The checkout flow uses the commerce core's HTTP API when
``settings.USE_HTTP_ADAPTERS`` is truthy, and an in-process stub otherwise.
Routing mode is read from settings here, once, and passed down explicitly.
"""

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string

from apps.orders.repository import DjangoOrderStore

from .adapters import CheckoutFlowStub
from .callbacks import CallbackRouter
from .domain import CheckoutFlow, GatewayAdapter, RoutingMode
from .feedback import FeedbackProcessor
from .http_adapters import HttpCheckoutFlowClient
from .repository import DjangoPaymentMethodResolver, DjangoTransactionRepository


def get_routing_mode() -> RoutingMode:
    return RoutingMode(getattr(settings, "PAYMENT_ROUTING_MODE", RoutingMode.CENTRAL.value))


def get_gateway() -> GatewayAdapter:
    """Instantiate the configured gateway adapter.

    Raises:
        ImproperlyConfigured: When no adapter is configured.
        ImportError: When the dotted path does not resolve.
    """
    path = getattr(settings, "PAYMENT_GATEWAY_ADAPTER", "")
    if not path:
        raise ImproperlyConfigured("PAYMENT_GATEWAY_ADAPTER is not set")
    adapter_cls = import_string(path)
    return adapter_cls(name=settings.PAYMENT_GATEWAY_NAME)


def get_checkout_flow() -> CheckoutFlow:
    if getattr(settings, "USE_HTTP_ADAPTERS", False):
        return HttpCheckoutFlowClient()
    return CheckoutFlowStub()


def get_callback_router() -> CallbackRouter:
    """Return a ``CallbackRouter`` wired with the configured collaborators."""
    gateway = get_gateway()
    processor = FeedbackProcessor(
        gateway=gateway,
        transactions=DjangoTransactionRepository(),
        checkout=get_checkout_flow(),
    )
    return CallbackRouter(
        gateway=gateway,
        processor=processor,
        orders=DjangoOrderStore(),
        payment_methods=DjangoPaymentMethodResolver(),
        mode=get_routing_mode(),
    )
