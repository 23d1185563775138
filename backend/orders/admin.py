from django.contrib import admin
from .models import Delivery, Order, OrderItem, Review


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    fields = ("product", "quantity", "unit_price", "subtotal", "special_instructions")
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """
    Admin configuration for the Order model.

    Orders are edited through the API so the lifecycle rules apply; the
    admin shows them read-only apart from notes.
    """

    list_display = (
        "order_number",
        "customer_name",
        "status",
        "payment_method",
        "payment_status",
        "source",
        "get_total_formatted",
        "order_date",
    )
    list_display_links = ("order_number",)
    search_fields = (
        "order_number",
        "customer__email",
        "customer__first_name",
        "customer__last_name",
    )
    list_filter = ("status", "payment_status", "payment_method", "source", "order_date")
    date_hierarchy = "order_date"
    list_select_related = ("customer",)
    inlines = [OrderItemInline]

    fieldsets = (
        (
            "Order Overview",
            {
                "fields": (
                    "id",
                    "order_number",
                    "customer",
                    "delivery_address",
                    "status",
                    "source",
                    "delivery_person",
                    "confirmed_by",
                    "notes",
                    "version",
                )
            },
        ),
        (
            "Financial Summary",
            {
                "fields": (
                    "get_subtotal_formatted",
                    "get_delivery_fee_formatted",
                    "get_tax_formatted",
                    "get_discount_formatted",
                    "get_total_formatted",
                    "payment_method",
                    "payment_status",
                    "transaction_id",
                ),
            },
        ),
        (
            "Timeline",
            {
                "classes": ("collapse",),
                "fields": (
                    "order_date",
                    "required_time",
                    "confirmation_time",
                    "preparation_start_time",
                    "ready_time",
                    "delivery_start_time",
                    "delivery_end_time",
                    "cancellation_time",
                    "created_at",
                    "updated_at",
                ),
            },
        ),
    )

    def get_readonly_fields(self, request, obj=None):
        editable = {"notes"}
        readonly = [
            field.name for field in self.model._meta.fields if field.name not in editable
        ]
        readonly += [
            "get_subtotal_formatted",
            "get_delivery_fee_formatted",
            "get_tax_formatted",
            "get_discount_formatted",
            "get_total_formatted",
        ]
        return tuple(readonly)

    def has_add_permission(self, request):
        return False

    @admin.display(description="Customer", ordering="customer__email")
    def customer_name(self, obj):
        return obj.customer_name

    def _format_currency(self, value):
        return f"${value:,.2f}" if value is not None else "$0.00"

    @admin.display(description="Subtotal")
    def get_subtotal_formatted(self, obj):
        return self._format_currency(obj.subtotal)

    @admin.display(description="Delivery Fee")
    def get_delivery_fee_formatted(self, obj):
        return self._format_currency(obj.delivery_fee)

    @admin.display(description="Tax")
    def get_tax_formatted(self, obj):
        return self._format_currency(obj.tax)

    @admin.display(description="Discount")
    def get_discount_formatted(self, obj):
        return f"-{self._format_currency(obj.discount)}"

    @admin.display(description="Total", ordering="total")
    def get_total_formatted(self, obj):
        return self._format_currency(obj.total)


@admin.register(Delivery)
class DeliveryAdmin(admin.ModelAdmin):
    list_display = ("get_order_number", "delivery_person", "status", "status_change_time")
    list_filter = ("status",)
    search_fields = ("order__order_number", "delivery_person__email")
    raw_id_fields = ("order", "delivery_person")
    list_select_related = ("order", "delivery_person")

    @admin.display(description="Order Number", ordering="order__order_number")
    def get_order_number(self, obj):
        return obj.order.order_number


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = (
        "get_order_number",
        "reviewer_name",
        "rating",
        "delivery_rating",
        "food_rating",
        "get_average_rating",
        "review_date",
    )
    list_filter = ("rating", "review_date")
    search_fields = ("order__order_number", "customer__email", "reviewer_name", "comment")
    raw_id_fields = ("order", "customer", "product")
    list_select_related = ("order",)
    date_hierarchy = "review_date"

    @admin.display(description="Order Number", ordering="order__order_number")
    def get_order_number(self, obj):
        return obj.order.order_number

    @admin.display(description="Avg. Rating")
    def get_average_rating(self, obj):
        return f"{obj.average_rating:.1f}"
