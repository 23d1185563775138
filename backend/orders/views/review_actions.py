from rest_framework import status
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.request import Request
from rest_framework.response import Response

from core_backend.exceptions import ServiceValidationError
from orders.serializers import ReviewSerializer, SubmitReviewSerializer
from orders.services import OrderReviewService
from users.models import User


class ReviewActionsMixin:
    """
    Customer reviews: one per delivered order, plus lookups by product or customer.
    """

    def _int_param(self, request: Request, name):
        raw = request.query_params.get(name)
        if raw in (None, ""):
            return None
        try:
            return int(raw)
        except ValueError:
            raise ServiceValidationError(f"Invalid {name} '{raw}'.")

    @action(detail=True, methods=["get", "post"], url_path="review")
    def review(self, request: Request, pk=None) -> Response:
        """GET the order's review, or POST one as the ordering customer."""
        order = self.get_object()
        if request.method == "GET":
            review = OrderReviewService.get_review_for_order(order.pk)
            return Response(ReviewSerializer(review).data)

        if request.user.role != User.Role.CUSTOMER:
            raise PermissionDenied("Only the ordering customer can review an order.")

        serializer = SubmitReviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        review = OrderReviewService.submit_review(
            order.pk,
            request.user.pk,
            rating=data["rating"],
            delivery_rating=data.get("delivery_rating"),
            food_rating=data.get("food_rating"),
            comment=data["comment"],
            product_id=data.get("product_id"),
            reviewer_name=data["reviewer_name"],
        )
        return Response(ReviewSerializer(review).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["get"], url_path="reviews")
    def reviews(self, request: Request) -> Response:
        """
        Reviews for ?product_id= or ?customer_id=. Product reviews are open to
        everyone; customers may only list their own reviews by customer.
        """
        product_id = self._int_param(request, "product_id")
        customer_id = self._int_param(request, "customer_id")
        is_customer = request.user.role == User.Role.CUSTOMER

        if product_id is not None:
            queryset = OrderReviewService.get_reviews_by_product(product_id)
        else:
            if customer_id is None:
                if not is_customer:
                    raise ServiceValidationError("product_id or customer_id is required.")
                customer_id = request.user.pk
            if is_customer and customer_id != request.user.pk:
                raise PermissionDenied("You can only view your own reviews.")
            queryset = OrderReviewService.get_reviews_by_customer(customer_id)

        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(ReviewSerializer(page, many=True).data)
        return Response(ReviewSerializer(queryset, many=True).data)
