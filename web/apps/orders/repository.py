"""Repository layer over the local order mirror.

``DjangoOrderStore`` implements the payments ``OrderStore`` port with the
Django ORM and hands out frozen domain ``Order`` values, so the payments
core never holds ORM instances.
"""

from typing import Iterable, List, Optional

from apps.payments.domain import Order

from .models import OrderModel


def to_domain(obj: OrderModel) -> Order:
    """Map an ``OrderModel`` row to a domain ``Order``."""
    return Order(
        id=int(obj.id),
        group_id=obj.group_id,
        total_cents=int(obj.total_cents),
        currency=obj.currency,
        payment_method=obj.payment_method or None,
    )


class DjangoOrderStore:
    """Order lookups backed by ``OrderModel``.

    Every call queries the database; group membership is never cached
    because orders can change between payment request and feedback.
    """

    def get(self, order_id: int) -> Optional[Order]:
        obj = OrderModel.objects.filter(id=order_id).first()
        return to_domain(obj) if obj else None

    def by_ids(self, ids: Iterable[int]) -> List[Order]:
        ids = list(ids)
        if not ids:
            return []
        return [to_domain(o) for o in OrderModel.objects.filter(id__in=ids).order_by("id")]

    def by_group(self, group_id: str) -> List[Order]:
        return [to_domain(o) for o in OrderModel.objects.filter(group_id=group_id).order_by("id")]
