from django.urls import path

from .views import (
    NotificationView,
    OrderTransactionsView,
    PaymentRequestView,
    RedirectValidationView,
)

app_name = "payments"

urlpatterns = [
    path("orders/<int:order_id>/request/", PaymentRequestView.as_view(), name="payment-request"),
    path(
        "orders/<int:order_id>/return/<str:instance_id>/",
        RedirectValidationView.as_view(),
        name="redirect-validation",
    ),
    path("orders/<int:order_id>/transactions/", OrderTransactionsView.as_view(), name="order-transactions"),
    path("notify/", NotificationView.as_view(), name="notify"),
]
