"""Domain types and ports for order-group payments.

One checkout can produce several orders, one per vendor, that share a
``group_id``. In central-store routing mode the whole group is paid with a
single gateway transaction, and the gateway's one feedback is fanned back
out into one ``PaymentTransaction`` per order.

The commerce core (orders, payment-method configuration, checkout flow) and
the payment gateway (signatures, status codes) are collaborators. They are
described here as ``Protocol`` ports so the payments core never depends on
their concrete implementations.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional, Protocol, Tuple


# ---- Enums ----
class RoutingMode(str, Enum):
    """How a checkout group is paid.

    ``CENTRAL`` routes every order through the platform's own merchant
    account with one combined gateway transaction. ``DIRECT`` lets each
    vendor collect its own order individually.
    """

    CENTRAL = "central"
    DIRECT = "direct"


class TransactionStatus(str, Enum):
    """Local payment transaction status taxonomy."""

    SUCCESS = "SUCCESS"
    PENDING = "PENDING"
    FAILURE = "FAILURE"


# ---- Errors ----
class RoutingModeError(ValueError):
    """Raised when group aggregation is attempted outside central routing."""


class OrderGroupInvariantError(RuntimeError):
    """A checkout group resolved to an impossible membership.

    This points at a data consistency bug upstream and is never retried.
    """


# ---- Entities / DTOs ----
@dataclass(frozen=True)
class Order:
    """Read-only view of a commerce-core order.

    Attributes:
        id: Positive integer order identifier.
        group_id: Identifier shared by the sibling orders of one checkout.
        total_cents: Order total in minor currency units.
        currency: ISO 4217 currency code.
        payment_method: Instance id of the payment method selected for the
            order, or None when none was selected.
    """

    id: int
    group_id: str
    total_cents: int
    currency: str = "EUR"
    payment_method: Optional[str] = None


@dataclass(frozen=True)
class PaymentMethodInstance:
    """A configured payment method, e.g. instance ``ogone|default`` of ``ogone``."""

    instance_id: str
    method_id: str
    settings: dict = field(default_factory=dict)


@dataclass
class PaymentTransaction:
    """One attempt to collect payment for one order.

    At most one transaction exists per (payment_method, order_id, remote_id).
    """

    order_id: int
    payment_method: str
    id: Optional[int] = None
    instance_id: str = ""
    remote_id: str = ""
    currency: str = ""
    amount_cents: int = 0
    remote_status: str = ""
    status: TransactionStatus = TransactionStatus.PENDING
    message: str = ""
    payload: dict = field(default_factory=dict)
    created_at: Optional[datetime] = None
    changed_at: Optional[datetime] = None


@dataclass(frozen=True)
class PaymentRequest:
    """Fields merged into the outbound gateway payment request."""

    reference: str
    amount_cents: int
    currency: str
    order_ids: Tuple[int, ...]

    def as_gateway_fields(self) -> dict:
        """Return the request fields under the gateway's own names.

        ``AMOUNT`` is sent in minor units without a decimal separator.
        """
        return {
            "ORDERID": self.reference,
            "AMOUNT": str(self.amount_cents),
            "CURRENCY": self.currency,
        }


# ---- Ports (DIP) ----
class OrderStore(Protocol):
    """Order lookups provided by the commerce core."""

    def get(self, order_id: int) -> Optional[Order]:
        raise NotImplementedError()

    def by_ids(self, ids: Iterable[int]) -> List[Order]:
        """Return the orders that exist among ``ids``, ascending by id."""
        raise NotImplementedError()

    def by_group(self, group_id: str) -> List[Order]:
        """Return every order of the group, read fresh from storage."""
        raise NotImplementedError()


class PaymentMethodResolver(Protocol):
    """Resolves the configured payment method instance of an order."""

    def for_order(self, order: Order) -> Optional[PaymentMethodInstance]:
        raise NotImplementedError()

    def get(self, instance_id: str) -> Optional[PaymentMethodInstance]:
        raise NotImplementedError()


class TransactionRepository(Protocol):
    """Storage for payment transactions."""

    def find_by_order_and_remote_id(
        self, payment_method: str, order_id: int, remote_id: str
    ) -> Optional[int]:
        """Return the id of the matching transaction, or None.

        When several records match, the most recently created one wins.
        """
        raise NotImplementedError()

    def get(self, transaction_id: int) -> PaymentTransaction:
        raise NotImplementedError()

    def save(self, tx: PaymentTransaction) -> PaymentTransaction:
        """Insert or update ``tx`` and return it with ``id`` populated.

        An insert that collides with an existing (payment_method, order,
        remote_id) record updates that record instead.
        """
        raise NotImplementedError()

    def for_order(self, order_id: int) -> List[PaymentTransaction]:
        raise NotImplementedError()


class GatewayAdapter(Protocol):
    """Capabilities of the payment gateway integration.

    Attributes:
        name: Gateway name; matches ``PaymentMethodInstance.method_id`` and
            is stored as ``PaymentTransaction.payment_method``.
    """

    name: str

    def verify(self, order: Order, payment_method: PaymentMethodInstance, feedback) -> bool:
        """Check the feedback signature for this order and method."""
        raise NotImplementedError()

    def map_status(self, code: int) -> Tuple[TransactionStatus, str]:
        """Translate a gateway status code into (local status, message)."""
        raise NotImplementedError()


class CheckoutFlow(Protocol):
    """Checkout navigation signals provided by the commerce core."""

    def advance(self, order: Order) -> None:
        raise NotImplementedError()

    def retreat(self, order: Order) -> None:
        raise NotImplementedError()
