"""
Order engine errors.

All of them derive from the core_backend taxonomy, so the API exception
handler maps them to 404 / 400 / 409 without any view-level handling.
"""
from core_backend.exceptions import (
    ConflictError,
    InvalidOperationError,
    NotFoundError,
    ServiceValidationError,
)


class OrderNotFoundError(NotFoundError):
    code = "order_not_found"

    def __init__(self, order_id):
        self.order_id = order_id
        super().__init__(f"Order with ID {order_id} not found.")


class OrderItemNotFoundError(NotFoundError):
    code = "order_item_not_found"

    def __init__(self, order_id, product_id):
        self.order_id = order_id
        self.product_id = product_id
        super().__init__(f"Product {product_id} is not on order {order_id}.")


class ReviewNotFoundError(NotFoundError):
    code = "review_not_found"

    def __init__(self, order_id):
        self.order_id = order_id
        super().__init__(f"Order {order_id} has not been reviewed.")


class InvalidOrderOperationError(InvalidOperationError):
    code = "invalid_order_operation"


class InvalidStatusTransitionError(InvalidOrderOperationError):
    code = "invalid_status_transition"

    def __init__(self, current_status, new_status, message=None):
        self.current_status = current_status
        self.new_status = new_status
        super().__init__(
            message or f"Cannot transition order from {current_status} to {new_status}.",
            details={"current_status": current_status, "requested_status": new_status},
        )


class OrderValidationError(ServiceValidationError):
    code = "order_validation_error"


class OrderConflictError(ConflictError):
    code = "order_conflict"

    def __init__(self, order_id, expected_version=None, current_version=None):
        self.order_id = order_id
        self.expected_version = expected_version
        self.current_version = current_version
        details = None
        if expected_version is not None or current_version is not None:
            details = {"expected_version": expected_version, "current_version": current_version}
        super().__init__(
            f"Order {order_id} was modified by another request. Reload it and try again.",
            details=details,
        )
