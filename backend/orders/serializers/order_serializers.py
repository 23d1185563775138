from rest_framework import serializers
from orders.models import Order, NOTES_MAX_LENGTH
from core_backend.base import BaseModelSerializer, MoneyField

from .order_item_serializers import OrderItemSerializer, OrderItemRequestSerializer


class OrderSerializer(BaseModelSerializer):
    """Full order projection with joined customer, address and delivery details."""

    status_display = serializers.CharField(read_only=True)
    customer_name = serializers.CharField(read_only=True)
    customer_address = serializers.CharField(source="delivery_address_display", read_only=True)
    delivery_person_name = serializers.CharField(read_only=True)
    confirmed_by_name = serializers.SerializerMethodField()
    payment_method_display = serializers.CharField(source="get_payment_method_display", read_only=True)
    source_display = serializers.CharField(source="get_source_display", read_only=True)
    item_count = serializers.IntegerField(read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "status",
            "status_display",
            "source",
            "source_display",
            "order_date",
            "required_time",
            "confirmation_time",
            "preparation_start_time",
            "ready_time",
            "delivery_start_time",
            "delivery_end_time",
            "cancellation_time",
            "customer",
            "customer_name",
            "delivery_address",
            "customer_address",
            "delivery_person",
            "delivery_person_name",
            "confirmed_by",
            "confirmed_by_name",
            "subtotal",
            "delivery_fee",
            "tax",
            "discount",
            "total",
            "estimated_delivery_minutes",
            "payment_method",
            "payment_method_display",
            "payment_status",
            "transaction_id",
            "notes",
            "item_count",
            "items",
            "version",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
        select_related_fields = ["customer", "delivery_address", "delivery_person", "confirmed_by"]
        prefetch_related_fields = ["items__product__category"]

    def get_confirmed_by_name(self, obj):
        return obj.confirmed_by.display_name if obj.confirmed_by_id else None


class OrderSummarySerializer(BaseModelSerializer):
    """Compact row for lists and queues."""

    status_display = serializers.CharField(read_only=True)
    customer_name = serializers.CharField(read_only=True)
    item_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "customer_name",
            "status",
            "status_display",
            "order_date",
            "required_time",
            "total",
            "item_count",
            "version",
        ]
        read_only_fields = fields
        select_related_fields = ["customer"]
        prefetch_related_fields = ["items"]


class OrderCreateSerializer(serializers.Serializer):
    """
    Input for placing an order. Customers order for themselves; staff may
    pass customer_id to place a phone order on a customer's behalf.
    """

    customer_id = serializers.IntegerField(required=False, min_value=1)
    address_id = serializers.IntegerField(min_value=1)
    items = OrderItemRequestSerializer(many=True, allow_empty=False)
    discount = MoneyField(required=False, default=0)
    tax = MoneyField(required=False, default=0)
    delivery_fee = MoneyField(required=False, default=0)
    notes = serializers.CharField(
        max_length=NOTES_MAX_LENGTH, required=False, allow_blank=True, default=""
    )
    source = serializers.ChoiceField(
        choices=Order.OrderSource.choices, required=False, default=Order.OrderSource.WEBSITE
    )
    required_time = serializers.DateTimeField(required=False, allow_null=True, default=None)


class OrderUpdateSerializer(serializers.Serializer):
    """Sparse patch: every field is optional and blank values are ignored."""

    status = serializers.ChoiceField(choices=Order.OrderStatus.choices, required=False, allow_blank=True)
    payment_status = serializers.ChoiceField(
        choices=Order.PaymentStatus.choices, required=False, allow_blank=True
    )
    delivery_person_id = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    notes = serializers.CharField(max_length=NOTES_MAX_LENGTH, required=False, allow_blank=True)
