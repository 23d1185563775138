from decimal import Decimal

from rest_framework import serializers
from orders.models import OrderItem, INSTRUCTIONS_MAX_LENGTH
from core_backend.base import BaseModelSerializer, MoneyField


class OrderItemSerializer(BaseModelSerializer):
    product_id = serializers.IntegerField(source="product.id", read_only=True)
    product_name = serializers.CharField(source="product.name", read_only=True)
    product_available = serializers.BooleanField(source="product.is_available", read_only=True)
    product_category = serializers.CharField(source="product.category_display_name", read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product_id",
            "product_name",
            "product_available",
            "product_category",
            "quantity",
            "unit_price",
            "subtotal",
            "special_instructions",
        ]
        read_only_fields = fields
        select_related_fields = ["product__category", "order"]


class OrderItemRequestSerializer(serializers.Serializer):
    """One requested line of a new order or an item being added."""

    product_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1, default=1)
    unit_price = MoneyField(required=False, allow_null=True, min_value=Decimal("0.01"))
    special_instructions = serializers.CharField(
        max_length=INSTRUCTIONS_MAX_LENGTH, required=False, allow_blank=True, default=""
    )


class AddItemSerializer(OrderItemRequestSerializer):
    pass
