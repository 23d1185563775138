import logging

from django.conf import settings
from django.utils import timezone

from orders.exceptions import InvalidStatusTransitionError, OrderValidationError
from orders.models import Order

logger = logging.getLogger(__name__)

Status = Order.OrderStatus


class OrderStatusService:
    """
    Order state machine.

    Validates a requested status against the current one and applies the
    status together with its timestamp side effects. It only mutates the
    in-memory order; the caller persists it in the same write.
    """

    # Valid status transitions for order state machine
    VALID_STATUS_TRANSITIONS = {
        Status.NEW: [
            Status.CONFIRMED,
            Status.CANCELED,
        ],
        Status.CONFIRMED: [
            Status.PREPARING,
            Status.READY,
            Status.OUT_FOR_DELIVERY,
            Status.CANCELED,
        ],
        Status.PREPARING: [
            Status.READY,
            Status.OUT_FOR_DELIVERY,
            Status.CANCELED,
        ],
        Status.READY: [
            Status.OUT_FOR_DELIVERY,
            Status.CANCELED,
        ],
        Status.OUT_FOR_DELIVERY: [
            Status.DELIVERED,
            Status.CANCELED,
        ],
        Status.DELIVERED: [],
        Status.CANCELED: [],
    }

    # Timestamp field stamped when an order enters each status
    TIMESTAMP_FIELDS = {
        Status.CONFIRMED: "confirmation_time",
        Status.PREPARING: "preparation_start_time",
        Status.READY: "ready_time",
        Status.OUT_FOR_DELIVERY: "delivery_start_time",
        Status.DELIVERED: "delivery_end_time",
        Status.CANCELED: "cancellation_time",
    }

    @staticmethod
    def enforce_transitions() -> bool:
        return getattr(settings, "ORDERS_ENFORCE_STATUS_TRANSITIONS", True)

    @staticmethod
    def allow_cancel_terminal() -> bool:
        return getattr(settings, "ORDERS_ALLOW_CANCEL_TERMINAL", False)

    @staticmethod
    def parse_status(value) -> str:
        """Normalize a status value, accepting either the stored value or the enum name."""
        if isinstance(value, Status):
            return value
        text = str(value or "").strip()
        if text in Status.values:
            return Status(text)
        by_name = text.upper().replace("-", "_").replace(" ", "_")
        if by_name in Status.names:
            return Status[by_name]
        compact = text.replace("_", "").replace(" ", "").lower()
        for candidate in Status:
            if candidate.value.lower() == compact:
                return candidate
        raise OrderValidationError(
            f"'{value}' is not a valid order status.",
            details={"allowed": list(Status.values)},
        )

    @staticmethod
    def can_transition(current_status: str, new_status: str) -> bool:
        current_status, new_status = Status(current_status), Status(new_status)

        if new_status == Status.CANCELED and current_status in Order.TERMINAL_STATUSES:
            return OrderStatusService.allow_cancel_terminal()

        if current_status in Order.TERMINAL_STATUSES:
            return False

        if not OrderStatusService.enforce_transitions():
            return True

        return new_status in OrderStatusService.VALID_STATUS_TRANSITIONS.get(current_status, [])

    @staticmethod
    def validate_transition(order: Order, new_status: str) -> str:
        new_status = OrderStatusService.parse_status(new_status)
        if not OrderStatusService.can_transition(order.status, new_status):
            logger.warning(
                f"Rejected status change for order {order.order_number}: "
                f"{order.status} -> {new_status}"
            )
            if order.is_terminal:
                raise InvalidStatusTransitionError(
                    order.status,
                    new_status,
                    f"Order {order.order_number} is already {order.get_status_display()} "
                    f"and cannot be moved to {Status(new_status).label}.",
                )
            raise InvalidStatusTransitionError(order.status, new_status)
        return new_status

    @staticmethod
    def apply_transition(order: Order, new_status: str, when=None) -> list:
        """
        Move the order to new_status and stamp the matching timestamp.

        Returns the list of model fields that changed, so callers can
        persist exactly those.
        """
        new_status = OrderStatusService.validate_transition(order, new_status)
        when = when or timezone.now()

        previous = order.status
        order.status = new_status
        changed = ["status"]

        timestamp_field = OrderStatusService.TIMESTAMP_FIELDS.get(new_status)
        if timestamp_field:
            setattr(order, timestamp_field, when)
            changed.append(timestamp_field)

        logger.debug(f"Order {order.order_number} status {previous} -> {new_status}")
        return changed
