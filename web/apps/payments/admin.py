from django.contrib import admin

from .models import PaymentMethodModel, PaymentTransactionModel


@admin.register(PaymentMethodModel)
class PaymentMethodAdmin(admin.ModelAdmin):
    list_display = ("instance_id", "method_id", "enabled")
    list_filter = ("method_id", "enabled")


@admin.register(PaymentTransactionModel)
class PaymentTransactionAdmin(admin.ModelAdmin):
    list_display = ("id", "order", "payment_method", "remote_id", "status", "amount_cents", "currency", "changed_at")
    list_filter = ("payment_method", "status")
    search_fields = ("remote_id", "order__id", "order__group_id")

    # Transactions are written by gateway feedback only; the payload is audit data.
    def get_readonly_fields(self, request, obj=None):
        return [f.name for f in self.model._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
