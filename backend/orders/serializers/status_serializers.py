from rest_framework import serializers
from orders.models import Order, NOTES_MAX_LENGTH
from core_backend.base import MoneyField


class ConfirmOrderSerializer(serializers.Serializer):
    notes = serializers.CharField(max_length=NOTES_MAX_LENGTH, required=False, allow_blank=True)
    required_time = serializers.DateTimeField(required=False, allow_null=True)
    estimated_delivery_minutes = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    delivery_fee = MoneyField(required=False, allow_null=True)


class AssignDeliverySerializer(serializers.Serializer):
    delivery_person_id = serializers.IntegerField(min_value=1)


class CancelOrderSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")


class UpdateOrderStatusSerializer(serializers.Serializer):
    """
    Serializer specifically for validating an order's requested status.
    Transition rules are enforced by OrderStatusService.
    """

    status = serializers.ChoiceField(choices=Order.OrderStatus.choices)


class ProcessPaymentSerializer(serializers.Serializer):
    payment_method = serializers.ChoiceField(choices=Order.PaymentMethod.choices)


class UpdatePaymentStatusSerializer(serializers.Serializer):
    payment_status = serializers.ChoiceField(choices=Order.PaymentStatus.choices)
