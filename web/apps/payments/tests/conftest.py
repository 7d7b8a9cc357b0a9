"""Fixtures for the payments tests.

``memory_env`` wires the payments core with the in-process adapters;
``db_group`` seeds the database with the three orders of one checkout group
and the gateway's payment method instance.
"""

import pytest

from apps.orders.models import OrderModel
from apps.payments.domain import Order, PaymentMethodInstance
from apps.payments.models import PaymentMethodModel

from .factories import GROUP_ID, GROUP_TOTALS, INSTANCE_ID, make_env


@pytest.fixture
def group_orders():
    return [
        Order(id=oid, group_id=GROUP_ID, total_cents=total, currency="EUR", payment_method=INSTANCE_ID)
        for oid, total in GROUP_TOTALS.items()
    ]


@pytest.fixture
def memory_env(group_orders):
    return make_env(group_orders)


@pytest.fixture
def payment_method():
    return PaymentMethodInstance(INSTANCE_ID, "ogone")


@pytest.fixture
def db_group(db):
    PaymentMethodModel.objects.create(instance_id=INSTANCE_ID, method_id="ogone")
    for oid, total in GROUP_TOTALS.items():
        OrderModel.objects.create(
            id=oid,
            group_id=GROUP_ID,
            vendor=f"vendor-{oid}",
            total_cents=total,
            currency="EUR",
            payment_method=INSTANCE_ID,
        )
    return GROUP_TOTALS
