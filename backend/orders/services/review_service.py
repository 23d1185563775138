from django.db import transaction
import logging

from orders.exceptions import (
    InvalidOrderOperationError,
    OrderNotFoundError,
    OrderValidationError,
    ReviewNotFoundError,
)
from orders.models import Order, Review, REVIEW_COMMENT_MAX_LENGTH, REVIEWER_NAME_MAX_LENGTH

logger = logging.getLogger(__name__)


class OrderReviewService:
    """
    Customer reviews of delivered orders.

    A review is its own row next to the order, so submitting one does not
    bump the order's version.
    """

    @staticmethod
    def _validate_rating(value, name, required=False):
        if value is None:
            if required:
                raise OrderValidationError(f"{name} is required.")
            return None
        try:
            rating = int(value)
        except (TypeError, ValueError):
            raise OrderValidationError(f"{name} '{value}' is not a whole number.")
        if not 1 <= rating <= 5:
            raise OrderValidationError(f"{name} must be between 1 and 5.")
        return rating

    @staticmethod
    @transaction.atomic
    def submit_review(
        order_id,
        customer_id,
        rating,
        delivery_rating=None,
        food_rating=None,
        comment: str = "",
        product_id=None,
        reviewer_name: str = "",
    ) -> Review:
        """
        Record the customer's review of a delivered order.

        Raises:
            OrderNotFoundError: unknown order, or one that belongs to someone else
            InvalidOrderOperationError: the order is not Delivered or already reviewed
            OrderValidationError: ratings outside 1-5, comment too long, or a
                product that is not on the order
        """
        order = Order.objects.get_for_update(order_id)
        if order.customer_id != customer_id:
            raise OrderNotFoundError(order_id)
        if order.status != Order.OrderStatus.DELIVERED:
            raise InvalidOrderOperationError(
                f"Only delivered orders can be reviewed (order is {order.status})."
            )
        if Review.objects.filter(order=order).exists():
            raise InvalidOrderOperationError(f"Order {order.order_number} has already been reviewed.")

        rating = OrderReviewService._validate_rating(rating, "Rating", required=True)
        delivery_rating = OrderReviewService._validate_rating(delivery_rating, "Delivery rating")
        food_rating = OrderReviewService._validate_rating(food_rating, "Food rating")

        comment = (comment or "").strip()
        if len(comment) > REVIEW_COMMENT_MAX_LENGTH:
            raise OrderValidationError(
                f"Comment cannot exceed {REVIEW_COMMENT_MAX_LENGTH} characters."
            )

        if product_id is not None and not order.items.filter(product_id=product_id).exists():
            raise OrderValidationError(f"Product {product_id} is not on order {order.order_number}.")

        name = (reviewer_name or "").strip() or order.customer.display_name or ""
        review = Review.objects.create(
            order=order,
            customer_id=customer_id,
            product_id=product_id,
            reviewer_name=name[:REVIEWER_NAME_MAX_LENGTH],
            rating=rating,
            delivery_rating=delivery_rating,
            food_rating=food_rating,
            comment=comment,
        )
        logger.info(f"Order {order.order_number} reviewed by customer {customer_id}: {rating}/5")
        return review

    @staticmethod
    def get_review_for_order(order_id) -> Review:
        review = (
            Review.objects.select_related("order", "customer", "product")
            .filter(order_id=order_id)
            .first()
        )
        if review is None:
            raise ReviewNotFoundError(order_id)
        return review

    @staticmethod
    def get_reviews_by_product(product_id):
        return Review.objects.select_related("order", "customer", "product").filter(
            product_id=product_id
        )

    @staticmethod
    def get_reviews_by_customer(customer_id):
        return Review.objects.select_related("order", "customer", "product").filter(
            customer_id=customer_id
        )
