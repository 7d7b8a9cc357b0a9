"""Composite order-group reference.

The gateway receives one transaction reference for a whole checkout group
and echoes it back verbatim in its feedback. The reference is the ascending
list of order ids joined with ``-``, e.g. ``"5-7-12"``. Only integer ids are
used (never order numbers) so that the string always splits unambiguously.
"""

from typing import Iterable, List

SEPARATOR = "-"

# Largest id a PositiveBigIntegerField can hold.
MAX_ORDER_ID = 2**63 - 1
_MAX_ID_DIGITS = len(str(MAX_ORDER_ID))


def build_reference(order_ids: Iterable[int]) -> str:
    """Encode order ids as a composite reference.

    Args:
        order_ids: Positive integer order ids, in any order.

    Returns:
        str: The ids sorted ascending and joined with ``SEPARATOR``.

    Raises:
        ValueError: ``EMPTY_ORDER_GROUP`` when no ids are given,
            ``INVALID_ORDER_ID`` when an id is not a positive integer.
    """
    ids = list(order_ids)
    if not ids:
        raise ValueError("EMPTY_ORDER_GROUP")
    for oid in ids:
        if isinstance(oid, bool) or not isinstance(oid, int) or not 0 < oid <= MAX_ORDER_ID:
            raise ValueError("INVALID_ORDER_ID")
    return SEPARATOR.join(str(oid) for oid in sorted(ids))


def parse_reference(reference: str) -> List[int]:
    """Decode a composite reference back into its order ids.

    Malformed references (empty, non-numeric, zero or out-of-range tokens)
    decode to an empty list so callers degrade to a no-op.
    """
    if not reference:
        return []
    ids = []
    for token in reference.strip().split(SEPARATOR):
        if not token.isascii() or not token.isdigit() or len(token) > _MAX_ID_DIGITS:
            return []
        oid = int(token)
        if not 0 < oid <= MAX_ORDER_ID:
            return []
        ids.append(oid)
    return ids
