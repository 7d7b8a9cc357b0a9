"""HTTP views for the payments app.

Views stay small: they resolve the order and payment method, delegate to
the aggregator or to the ``CallbackRouter`` from ``get_callback_router()``,
and map the outcome to an HTTP response.

Callback endpoints accept GET and POST because the gateway sends its
feedback either as a query string (browser redirect) or as a form post
(server notification). They need no authentication: the feedback signature
is checked by the gateway adapter. DRF's ``APIView`` is CSRF exempt when no
session authentication is configured.
"""

import logging

import httpx
from rest_framework import status
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView

from apps.orders.repository import DjangoOrderStore

from .aggregator import build_payment_request
from .http_adapters import CircuitOpenError
from .providers import get_callback_router, get_routing_mode
from .repository import DjangoPaymentMethodResolver, DjangoTransactionRepository
from .schemas import PaymentRequestOut, TransactionReadDTO

logger = logging.getLogger("payments")


def _feedback_params(request) -> dict:
    """Merge query string and body fields; body wins on conflicts."""
    params = dict(request.query_params.items())
    data = request.data
    if hasattr(data, "items"):
        params.update((k, v) for k, v in data.items() if isinstance(v, (str, int)))
    return params


class PaymentRequestView(APIView):
    """Return the gateway request fields for an order.

    In central routing mode the fields cover every order of the order's
    checkout group; in direct mode only the order itself.
    """

    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "payments_request"

    def get(self, request, order_id: int):
        order = DjangoOrderStore().get(order_id)
        if order is None:
            return Response({"detail": "NOT_FOUND"}, status=status.HTTP_404_NOT_FOUND)

        mode = get_routing_mode()
        try:
            payment_request = build_payment_request(order, mode, DjangoOrderStore())
        except ValueError as e:
            # OrderGroupInvariantError is not a ValueError and propagates.
            return Response({"detail": str(e)}, status=status.HTTP_409_CONFLICT)

        body = PaymentRequestOut(
            order_id=order.id,
            routing_mode=mode.value,
            order_ids=list(payment_request.order_ids),
            fields=payment_request.as_gateway_fields(),
        )
        return Response(body.model_dump(), status=status.HTTP_200_OK)


class RedirectValidationView(APIView):
    """Browser redirect back from the gateway for one order.

    Returns:
        - 200 with {valid: true, order_id} when the feedback is recognised.
        - 400 with {valid: false} when it is malformed or badly signed.
        - 404 for an unknown order or payment method.
        - 503 with {detail: "UPSTREAM_UNAVAILABLE"} when the checkout flow
          could not be notified; the transaction is already stored then.
    """

    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "payments_callback"

    def get(self, request, order_id: int, instance_id: str):
        return self._handle(request, order_id, instance_id)

    def post(self, request, order_id: int, instance_id: str):
        return self._handle(request, order_id, instance_id)

    def _handle(self, request, order_id: int, instance_id: str):
        order = DjangoOrderStore().get(order_id)
        payment_method = DjangoPaymentMethodResolver().get(instance_id)
        if order is None or payment_method is None:
            return Response({"detail": "NOT_FOUND"}, status=status.HTTP_404_NOT_FOUND)

        try:
            valid = get_callback_router().validate_redirect(order, payment_method, _feedback_params(request))
        except (httpx.HTTPError, CircuitOpenError):
            logger.exception("checkout flow unreachable", extra={"order_id": order.id})
            return Response({"detail": "UPSTREAM_UNAVAILABLE"}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

        if not valid:
            return Response({"valid": False}, status=status.HTTP_400_BAD_REQUEST)
        return Response({"valid": True, "order_id": order.id}, status=status.HTTP_200_OK)


class NotificationView(APIView):
    """Server-to-server notification from the gateway.

    Always answers 204 with an empty body: acknowledgment is implicit and
    the gateway expects nothing back, whatever happened to each order.
    """

    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "payments_callback"

    def get(self, request):
        return self._handle(request)

    def post(self, request):
        return self._handle(request)

    def _handle(self, request):
        get_callback_router().handle_notification(_feedback_params(request))
        return Response(status=status.HTTP_204_NO_CONTENT)


class OrderTransactionsView(APIView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "payments_read"

    def get(self, request, order_id: int):
        if DjangoOrderStore().get(order_id) is None:
            return Response({"detail": "NOT_FOUND"}, status=status.HTTP_404_NOT_FOUND)

        results = [
            TransactionReadDTO(
                id=tx.id,
                order_id=tx.order_id,
                payment_method=tx.payment_method,
                instance_id=tx.instance_id,
                remote_id=tx.remote_id,
                currency=tx.currency,
                amount_cents=tx.amount_cents,
                remote_status=tx.remote_status,
                status=tx.status.value,
                message=tx.message,
            ).model_dump()
            for tx in DjangoTransactionRepository().for_order(order_id)
        ]
        return Response({"count": len(results), "results": results}, status=status.HTTP_200_OK)
