from abc import ABC, abstractmethod
import logging
import uuid  # For placeholder transaction IDs

from django.db import transaction

from orders.exceptions import InvalidOrderOperationError, OrderValidationError
from orders.models import Order

logger = logging.getLogger(__name__)

PAYMENT_FIELDS = ["payment_method", "payment_status", "transaction_id"]


class PaymentStrategy(ABC):
    """
    The Abstract Base Class for a payment strategy.
    Defines the common interface for all payment methods.
    """

    method = None

    @abstractmethod
    def process(self, order: Order) -> list:
        """
        Record the payment on the order (in memory) and return the changed fields.
        """
        pass


class CashPaymentStrategy(PaymentStrategy):
    """
    Cash is collected by the driver, so the payment stays Pending until the
    order is delivered.
    """

    method = Order.PaymentMethod.CASH

    def process(self, order: Order) -> list:
        order.payment_method = self.method
        order.payment_status = Order.PaymentStatus.PENDING
        order.transaction_id = None
        return list(PAYMENT_FIELDS)


class OnlinePaymentStrategy(PaymentStrategy):
    """
    Card payment taken online. No gateway is called; a UUID stands in for the
    provider's transaction reference.
    """

    method = Order.PaymentMethod.STRIPE

    def process(self, order: Order) -> list:
        order.payment_method = self.method
        order.payment_status = Order.PaymentStatus.COMPLETED
        order.transaction_id = str(uuid.uuid4())
        return list(PAYMENT_FIELDS)


class PaymentStrategyFactory:
    """
    A factory for creating payment strategy instances.
    """

    @staticmethod
    def get_strategy(method: str) -> PaymentStrategy:
        method = OrderPaymentService.parse_payment_method(method)
        if method == Order.PaymentMethod.CASH:
            return CashPaymentStrategy()
        elif method == Order.PaymentMethod.STRIPE:
            return OnlinePaymentStrategy()
        else:
            raise OrderValidationError(f"Unknown payment method: {method}")


class OrderPaymentService:
    """Payment operations on orders."""

    @staticmethod
    def _parse_choice(value, choices, label):
        text = str(value or "").strip()
        for choice in choices:
            if text.lower() in (choice.value.lower(), choice.name.lower()):
                return choice
        raise OrderValidationError(
            f"'{value}' is not a valid {label}.",
            details={"allowed": list(choices.values)},
        )

    @staticmethod
    def parse_payment_method(value) -> str:
        return OrderPaymentService._parse_choice(value, Order.PaymentMethod, "payment method")

    @staticmethod
    def parse_payment_status(value) -> str:
        return OrderPaymentService._parse_choice(value, Order.PaymentStatus, "payment status")

    @staticmethod
    @transaction.atomic
    def process_payment(order_id, payment_method, expected_version=None) -> Order:
        """
        Record how the order is being paid.

        Cash leaves the payment Pending (settled on delivery); online payment
        completes immediately and receives a transaction id.
        """
        from orders.services.query_service import OrderQueryService

        strategy = PaymentStrategyFactory.get_strategy(payment_method)
        order = Order.objects.get_for_update(order_id, expected_version)

        if order.status == Order.OrderStatus.CANCELED:
            raise InvalidOrderOperationError(
                f"Cannot take payment for canceled order {order.order_number}."
            )
        if order.payment_status == Order.PaymentStatus.COMPLETED:
            raise InvalidOrderOperationError(
                f"Order {order.order_number} has already been paid."
            )

        changed = strategy.process(order)
        order.save_versioned(changed)

        logger.info(
            f"Payment recorded for order {order.order_number}: "
            f"{order.payment_method} -> {order.payment_status}"
        )
        return OrderQueryService.get_order_by_id(order.pk)

    @staticmethod
    @transaction.atomic
    def update_payment_status(order_id, payment_status, expected_version=None) -> Order:
        from orders.services.query_service import OrderQueryService

        payment_status = OrderPaymentService.parse_payment_status(payment_status)
        order = Order.objects.get_for_update(order_id, expected_version)

        previous = order.payment_status
        order.payment_status = payment_status
        order.save_versioned(["payment_status"])

        logger.info(
            f"Payment status of order {order.order_number} changed {previous} -> {payment_status}"
        )
        return OrderQueryService.get_order_by_id(order.pk)

    @staticmethod
    def settle_cash_on_delivery(order: Order) -> list:
        """Mark a pending cash payment as collected. Returns changed fields."""
        if (
            order.payment_method == Order.PaymentMethod.CASH
            and order.payment_status == Order.PaymentStatus.PENDING
        ):
            order.payment_status = Order.PaymentStatus.COMPLETED
            logger.info(f"Cash collected on delivery for order {order.order_number}")
            return ["payment_status"]
        return []
