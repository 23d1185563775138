"""
Orders serializers package - modular serializer layer.
"""

# Order item serializers
from .order_item_serializers import (
    OrderItemSerializer,
    OrderItemRequestSerializer,
    AddItemSerializer,
)

# Order serializers
from .order_serializers import (
    OrderSerializer,
    OrderSummarySerializer,
    OrderCreateSerializer,
    OrderUpdateSerializer,
)

# Status / payment action serializers
from .status_serializers import (
    ConfirmOrderSerializer,
    AssignDeliverySerializer,
    CancelOrderSerializer,
    UpdateOrderStatusSerializer,
    ProcessPaymentSerializer,
    UpdatePaymentStatusSerializer,
)

# Stats serializers
from .stats_serializers import OrderStatusCountSerializer, OrderStatsSerializer

# Review serializers
from .review_serializers import ReviewSerializer, SubmitReviewSerializer

__all__ = [
    # Order items
    'OrderItemSerializer',
    'OrderItemRequestSerializer',
    'AddItemSerializer',
    # Orders
    'OrderSerializer',
    'OrderSummarySerializer',
    'OrderCreateSerializer',
    'OrderUpdateSerializer',
    # Status
    'ConfirmOrderSerializer',
    'AssignDeliverySerializer',
    'CancelOrderSerializer',
    'UpdateOrderStatusSerializer',
    'ProcessPaymentSerializer',
    'UpdatePaymentStatusSerializer',
    # Stats
    'OrderStatusCountSerializer',
    'OrderStatsSerializer',
    # Reviews
    'ReviewSerializer',
    'SubmitReviewSerializer',
]
