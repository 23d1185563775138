"""
Orders services package - the order engine's service layer:
- OrderService: Lifecycle coordinator (create, confirm, dispatch, deliver, cancel, update, delete)
- OrderStatusService: Status machine and transition timestamps
- OrderItemService: Line-item editing while an order is New
- OrderPaymentService: Payment method / status handling
- OrderQueryService: Read-only queues, lookups and aggregates
- OrderReviewService: Customer reviews of delivered orders
"""

# Core order operations
from .order_service import OrderService

# Status machine
from .status_service import OrderStatusService

# Item management
from .item_service import OrderItemService

# Payments
from .payment_service import (
    OrderPaymentService,
    PaymentStrategyFactory,
    CashPaymentStrategy,
    OnlinePaymentStrategy,
)

# Queries
from .query_service import OrderQueryService

# Reviews
from .review_service import OrderReviewService

__all__ = [
    'OrderService',
    'OrderStatusService',
    'OrderItemService',
    'OrderPaymentService',
    'PaymentStrategyFactory',
    'CashPaymentStrategy',
    'OnlinePaymentStrategy',
    'OrderQueryService',
    'OrderReviewService',
]
