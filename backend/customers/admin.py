from django.contrib import admin
from .models import Address


@admin.register(Address)
class AddressAdmin(admin.ModelAdmin):
    list_display = ("id", "customer", "address_type", "address_line1", "city", "created_at")
    list_filter = ("address_type", "city")
    search_fields = ("address_line1", "address_line2", "city", "customer__email")
    readonly_fields = ("created_at", "updated_at")
    list_select_related = ("customer",)
