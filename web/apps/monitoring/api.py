"""Liveness probe: database reachability and payments configuration.

The signature-less stub gateway counts as misconfiguration outside DEBUG.
"""

import logging

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.db import DatabaseError, connection
from django.http import JsonResponse

from apps.payments.adapters import GatewayStub
from apps.payments.providers import get_gateway, get_routing_mode

logger = logging.getLogger("payments")


def health_view(_request):
    db_ok = True
    try:
        with connection.cursor() as cur:
            cur.execute("SELECT 1;")
    except DatabaseError:
        logger.exception("health check: database unreachable")
        db_ok = False

    payments = {"ok": True}
    try:
        payments["routing_mode"] = get_routing_mode().value
        gateway = get_gateway()
        payments["gateway"] = gateway.name
    except (ImportError, ImproperlyConfigured, ValueError) as e:
        logger.error("health check: payments misconfigured", extra={"error": str(e)})
        payments = {"ok": False}
    else:
        # The stub accepts unsigned feedback.
        if isinstance(gateway, GatewayStub) and not settings.DEBUG:
            logger.error("health check: stub gateway active outside DEBUG")
            payments["ok"] = False
            payments["detail"] = "GATEWAY_STUB_ACTIVE"

    ok = db_ok and payments["ok"]
    return JsonResponse(
        {"ok": ok, "components": {"db": {"ok": db_ok}, "payments": payments}},
        status=200 if ok else 503,
    )
