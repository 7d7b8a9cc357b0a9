from django.contrib import admin

from .models import OrderModel


@admin.register(OrderModel)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id", "group_id", "vendor", "total_cents", "currency", "payment_method")
    list_filter = ("currency", "payment_method")
    search_fields = ("id", "group_id", "vendor")
