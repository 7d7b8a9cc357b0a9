"""Pydantic schemas for gateway feedback and the payments read API.

Gateway feedback is untrusted, flat ``name -> string`` input. It is
validated here into a typed ``GatewayFeedback`` before anything else looks
at it; a feedback that does not validate is handled exactly like one with a
bad signature.
"""

import logging
import re
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger("payments")

CURRENCY_RE = re.compile(r"^[A-Z]{3}$")


class GatewayFeedback(BaseModel):
    """Typed view of one gateway feedback delivery.

    Attributes:
        order_ref: ``ORDERID``, the composite order-group reference echoed
            back by the gateway.
        pay_id: ``PAYID``, the gateway's remote payment identifier.
        status: ``STATUS``, the gateway status code.
        amount: ``AMOUNT`` in minor currency units.
        currency: ``CURRENCY``, upper-cased ISO 4217 code.
        signature: ``SHASIGN``, checked by the gateway adapter.
        raw: Every field received, keys upper-cased, kept for audit.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    order_ref: str = Field(alias="ORDERID", min_length=1)
    pay_id: str = Field(alias="PAYID", min_length=1, max_length=64)
    status: int = Field(alias="STATUS", ge=0)
    amount: int = Field(alias="AMOUNT", ge=0)
    currency: str = Field(alias="CURRENCY")
    signature: Optional[str] = Field(default=None, alias="SHASIGN")
    raw: dict = Field(default_factory=dict)

    @field_validator("order_ref", "pay_id")
    @classmethod
    def strip_value(cls, v: str) -> str:
        v2 = v.strip()
        if not v2:
            raise ValueError("Empty value")
        return v2

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        v2 = v.strip().upper()
        if not CURRENCY_RE.match(v2):
            raise ValueError("Invalid currency code")
        return v2

    @classmethod
    def from_params(cls, params: Mapping) -> Optional["GatewayFeedback"]:
        """Build a feedback from request parameters.

        The gateway mixes upper and lower case field names between its
        redirect and notification calls, so keys are upper-cased first.

        Args:
            params: Query string or form data of the callback request.

        Returns:
            GatewayFeedback | None: The validated feedback, or None when a
            required field is missing or malformed.
        """
        fields = {str(k).upper(): v for k, v in params.items()}
        try:
            return cls.model_validate({**fields, "raw": dict(fields)})
        except ValidationError as e:
            logger.info(
                "gateway feedback rejected",
                extra={"errors": [err["loc"] for err in e.errors()], "fields": sorted(fields)},
            )
            return None


class PaymentRequestOut(BaseModel):
    """Response body of the payment request endpoint."""

    order_id: int
    routing_mode: str
    order_ids: list[int]
    fields: dict[str, str]


class TransactionReadDTO(BaseModel):
    """Read model of a stored payment transaction."""

    id: int
    order_id: int
    payment_method: str
    instance_id: str
    remote_id: str
    currency: str
    amount_cents: int
    remote_status: str
    status: str
    message: str
