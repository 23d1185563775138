from rest_framework import serializers

from core_backend.base import BaseModelSerializer
from orders.models import Review, REVIEW_COMMENT_MAX_LENGTH, REVIEWER_NAME_MAX_LENGTH


class ReviewSerializer(BaseModelSerializer):
    order_number = serializers.CharField(source="order.order_number", read_only=True)
    product_name = serializers.CharField(source="product.name", read_only=True, default=None)
    average_rating = serializers.FloatField(read_only=True)

    class Meta:
        model = Review
        fields = [
            "id",
            "order",
            "order_number",
            "customer",
            "reviewer_name",
            "product",
            "product_name",
            "rating",
            "delivery_rating",
            "food_rating",
            "average_rating",
            "comment",
            "review_date",
        ]
        read_only_fields = fields
        select_related_fields = ["order", "customer", "product"]


class SubmitReviewSerializer(serializers.Serializer):
    rating = serializers.IntegerField(min_value=1, max_value=5)
    delivery_rating = serializers.IntegerField(
        min_value=1, max_value=5, required=False, allow_null=True
    )
    food_rating = serializers.IntegerField(
        min_value=1, max_value=5, required=False, allow_null=True
    )
    comment = serializers.CharField(
        max_length=REVIEW_COMMENT_MAX_LENGTH, required=False, allow_blank=True, default=""
    )
    product_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    reviewer_name = serializers.CharField(
        max_length=REVIEWER_NAME_MAX_LENGTH, required=False, allow_blank=True, default=""
    )
