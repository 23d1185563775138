from decimal import Decimal

from rest_framework import serializers


class BaseModelSerializer(serializers.ModelSerializer):
    """
    Base serializer for every model serializer in the project.

    Subclasses may declare `select_related_fields` / `prefetch_related_fields`
    on their Meta; BaseViewSet applies them to the queryset.
    """

    class Meta:
        select_related_fields = []
        prefetch_related_fields = []


class MoneyField(serializers.DecimalField):
    """Decimal field with the project's monetary precision (2 places, non-negative)."""

    def __init__(self, **kwargs):
        kwargs.setdefault("max_digits", 10)
        kwargs.setdefault("decimal_places", 2)
        kwargs.setdefault("min_value", Decimal("0"))
        super().__init__(**kwargs)
