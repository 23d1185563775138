from decimal import Decimal
from django.db import transaction
import logging

from orders.calculators import MAX_AMOUNT, OrderCalculator, line_subtotal, to_money
from orders.exceptions import (
    InvalidOrderOperationError,
    OrderItemNotFoundError,
    OrderValidationError,
)
from orders.models import Order, OrderItem, INSTRUCTIONS_MAX_LENGTH
from products.services import ProductService

logger = logging.getLogger(__name__)

TOTAL_FIELDS = ["subtotal", "delivery_fee", "tax", "discount", "total"]


class OrderItemService:
    """Service for managing order items - adding and removing lines while an order is New."""

    @staticmethod
    def recalculate_totals(order: Order) -> list:
        """
        Recompute the order's money fields from its saved line items.

        Returns the changed field names for save_versioned().

        Raises:
            InvalidOrderOperationError: the discount would push the total below zero
            OrderValidationError: the totals no longer fit the money columns
        """
        totals = OrderCalculator.for_order(order).calculate_totals()
        if totals["total"] < 0:
            raise InvalidOrderOperationError(
                f"Order total cannot be negative (discount {totals['discount']} exceeds "
                f"{totals['subtotal'] + totals['delivery_fee'] + totals['tax']})."
            )
        OrderItemService.ensure_storable(totals)
        order.apply_totals(totals)
        return list(TOTAL_FIELDS)

    @staticmethod
    def ensure_storable(totals):
        for field in ("subtotal", "total"):
            if totals[field] > MAX_AMOUNT:
                raise OrderValidationError(
                    f"Order {field} {totals[field]} exceeds the maximum of {MAX_AMOUNT}."
                )

    @staticmethod
    def _ensure_editable(order: Order):
        if not order.is_editable:
            logger.warning(
                f"Rejected item change on order {order.order_number} in status {order.status}"
            )
            raise InvalidOrderOperationError(
                "Cannot modify order items after order has been confirmed."
            )

    @staticmethod
    def validate_line(quantity, unit_price, special_instructions=""):
        """Structural checks shared by order creation and add_item."""
        try:
            quantity = int(quantity)
        except (TypeError, ValueError):
            raise OrderValidationError(f"Quantity '{quantity}' is not a whole number.")
        if quantity < 1:
            raise OrderValidationError("Quantity must be at least 1.")

        try:
            unit_price = to_money(unit_price)
        except ValueError as e:
            raise OrderValidationError(str(e))
        if unit_price <= Decimal("0.00"):
            raise OrderValidationError("Unit price must be greater than 0.")
        if unit_price > MAX_AMOUNT:
            raise OrderValidationError(f"Unit price cannot exceed {MAX_AMOUNT}.")
        try:
            line_total = line_subtotal(quantity, unit_price)
        except ValueError:
            line_total = None
        if line_total is None or line_total > MAX_AMOUNT:
            raise OrderValidationError(
                f"Line total for {quantity} x {unit_price} exceeds the maximum of {MAX_AMOUNT}."
            )

        if special_instructions and len(special_instructions) > INSTRUCTIONS_MAX_LENGTH:
            raise OrderValidationError(
                f"Special instructions cannot exceed {INSTRUCTIONS_MAX_LENGTH} characters."
            )
        return quantity, unit_price

    @staticmethod
    @transaction.atomic
    def add_item(
        order_id,
        product_id,
        quantity: int = 1,
        unit_price=None,
        special_instructions: str = "",
        expected_version=None,
    ) -> Order:
        """
        Append a line item to a New order and recompute its totals.

        Args:
            order_id: Order to modify
            product_id: Product being ordered
            quantity: Quantity (>= 1)
            unit_price: Price to capture; defaults to the product's current price
            special_instructions: Optional kitchen notes for the line
            expected_version: Optional optimistic-concurrency token

        Returns:
            Order: the refreshed order
        """
        from orders.services.query_service import OrderQueryService

        order = Order.objects.get_for_update(order_id, expected_version)
        OrderItemService._ensure_editable(order)

        product = ProductService.get_product_by_id(product_id)
        if not product.is_available:
            raise InvalidOrderOperationError(f"'{product.name}' is currently unavailable.")

        if unit_price is None:
            unit_price = product.price
        quantity, unit_price = OrderItemService.validate_line(
            quantity, unit_price, special_instructions
        )

        item = OrderItem.objects.create(
            order=order,
            product=product,
            quantity=quantity,
            unit_price=unit_price,
            subtotal=line_subtotal(quantity, unit_price),
            special_instructions=special_instructions or "",
        )

        changed = OrderItemService.recalculate_totals(order)
        order.save_versioned(changed)

        logger.info(
            f"Added {quantity} x '{product.name}' to order {order.order_number} "
            f"(item {item.pk}, total now {order.total})"
        )
        return OrderQueryService.get_order_by_id(order.pk)

    @staticmethod
    @transaction.atomic
    def remove_item(order_id, product_id, expected_version=None) -> Order:
        """
        Remove the first line for product_id from a New order and recompute its totals.
        """
        from orders.services.query_service import OrderQueryService

        order = Order.objects.get_for_update(order_id, expected_version)
        OrderItemService._ensure_editable(order)

        item = order.items.filter(product_id=product_id).order_by("id").first()
        if item is None:
            raise OrderItemNotFoundError(order.pk, product_id)

        item.delete()

        changed = OrderItemService.recalculate_totals(order)
        order.save_versioned(changed)

        logger.info(
            f"Removed product {product_id} from order {order.order_number} "
            f"(total now {order.total})"
        )
        return OrderQueryService.get_order_by_id(order.pk)
