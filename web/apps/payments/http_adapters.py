"""HTTP client for the commerce core's checkout flow.

``HttpCheckoutFlowClient`` implements the ``CheckoutFlow`` port by posting
the advance/retreat signal for an order to the commerce core with ``httpx``.
It adds:

- Request correlation: propagates ``X-Request-ID`` from the ContextVar set
  by ``correlation.middleware.RequestIdMiddleware``.
- A circuit breaker so an unhealthy commerce core is not hammered while
  callbacks keep arriving, with HALF_OPEN probing after a timeout.
- Retries with exponential backoff for transport errors and 5xx responses.
"""

import logging
import threading
import time
from typing import Optional

import httpx
from django.conf import settings

from correlation.middleware import REQUEST_ID_CTX

from .domain import CheckoutFlow, Order

logger = logging.getLogger("payments")


# ---------------- Circuit Breaker ---------------- #

class CircuitOpenError(RuntimeError):
    """The breaker refused the call; the commerce core is considered down."""


class CircuitBreaker:
    """Minimal circuit breaker with CLOSED/OPEN/HALF_OPEN states.

    CLOSED opens after ``fail_threshold`` consecutive failures. OPEN turns
    HALF_OPEN once ``reset_timeout`` seconds have passed, letting a single
    probe through; the probe's outcome closes or reopens the breaker.
    Thread-safe through an internal lock.
    """

    def __init__(self, name: str, fail_threshold: int, reset_timeout: float):
        self.name = name
        self.fail_threshold = fail_threshold
        self.reset_timeout = reset_timeout
        self._lock = threading.RLock()
        self._failures = 0
        self._state = "CLOSED"
        self._opened_at = 0.0
        self._probe_in_flight = False

    @property
    def state(self) -> str:
        with self._lock:
            if self._state == "OPEN" and (time.monotonic() - self._opened_at) >= self.reset_timeout:
                self._state = "HALF_OPEN"
                self._probe_in_flight = False
            return self._state

    def before_call(self) -> str:
        """Return the state for this call, raising when calls are refused.

        Raises:
            CircuitOpenError: ``CIRCUIT_OPEN`` while open, ``CIRCUIT_HALF_OPEN_BUSY``
                while another HALF_OPEN probe is running.
        """
        with self._lock:
            st = self.state
            if st == "OPEN":
                raise CircuitOpenError("CIRCUIT_OPEN")
            if st == "HALF_OPEN":
                if self._probe_in_flight:
                    raise CircuitOpenError("CIRCUIT_HALF_OPEN_BUSY")
                self._probe_in_flight = True
            return st

    def on_success(self):
        with self._lock:
            self._failures = 0
            self._state = "CLOSED"
            self._probe_in_flight = False

    def on_failure(self):
        with self._lock:
            self._failures += 1
            if self._state == "HALF_OPEN" or (
                self._failures >= self.fail_threshold and self._state != "OPEN"
            ):
                self._state = "OPEN"
                self._opened_at = time.monotonic()
            self._probe_in_flight = False


_checkout_cb = CircuitBreaker(
    "commerce-checkout",
    getattr(settings, "HTTP_CIRCUIT_FAIL_THRESHOLD", 5),
    getattr(settings, "HTTP_CIRCUIT_RESET_TIMEOUT", 30.0),
)


# ---------------- Helpers ---------------- #

def _request_headers(extra: Optional[dict] = None) -> dict:
    headers: dict[str, str] = {}
    rid = REQUEST_ID_CTX.get()
    if rid and rid != "-":
        headers["X-Request-ID"] = rid
    if extra:
        headers.update(extra)
    return headers


def _retry_policy():
    """Return ``(max_attempts, backoff_base_seconds, max_sleep_seconds)``."""
    return (
        max(1, int(getattr(settings, "HTTP_RETRY_MAX", 3))),
        float(getattr(settings, "HTTP_RETRY_BACKOFF_BASE", 0.15)),
        float(getattr(settings, "HTTP_RETRY_MAX_SLEEP", 0.5)),
    )


def _should_retry(resp: Optional[httpx.Response], exc: Optional[Exception]) -> bool:
    if exc is not None:
        return True
    return resp is not None and 500 <= resp.status_code < 600


# ---------------- Checkout flow adapter ---------------- #

class HttpCheckoutFlowClient(CheckoutFlow):
    """Posts checkout navigation signals to the commerce core.

    ``POST {base_url}/checkout/{order_id}/advance`` and ``.../retreat``; any
    2xx is success. 404 and 409 are business answers (order gone, or no
    longer in checkout) that are logged and not retried.
    """

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        self.base_url = (base_url or settings.COMMERCE_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECS

    def advance(self, order: Order) -> None:
        self._signal(order, "advance")

    def retreat(self, order: Order) -> None:
        self._signal(order, "retreat")

    def _signal(self, order: Order, action: str) -> None:
        """Send one navigation signal with retries and the circuit breaker.

        Raises:
            CircuitOpenError: When the circuit breaker refuses the call.
            httpx.RequestError: For transport errors after all retries.
            httpx.HTTPStatusError: For non-retriable or exhausted non-2xx
                responses.
        """
        url = f"{self.base_url}/checkout/{order.id}/{action}"
        payload = {"order_id": order.id, "group_id": order.group_id}
        max_attempts, backoff, cap = _retry_policy()

        state = _checkout_cb.before_call()
        headers = _request_headers({"X-Circuit-State": state, "X-Retry-Count": "0"})
        tries = 0

        with httpx.Client(timeout=self.timeout) as client:
            while True:
                resp = None
                exc = None
                try:
                    resp = client.post(url, json=payload, headers=headers)
                    if 200 <= resp.status_code < 300:
                        _checkout_cb.on_success()
                        return
                    if resp.status_code in (404, 409):
                        _checkout_cb.on_success()
                        logger.warning(
                            "checkout %s refused by commerce core",
                            action,
                            extra={"order_id": order.id, "status_code": resp.status_code},
                        )
                        return
                except httpx.RequestError as e:
                    exc = e

                tries += 1
                headers["X-Retry-Count"] = str(tries)

                if tries >= max_attempts or not _should_retry(resp, exc):
                    _checkout_cb.on_failure()
                    if exc is not None:
                        raise exc
                    resp.raise_for_status()
                    return

                time.sleep(min(backoff * (2 ** (tries - 1)), cap))
