import django_filters
from core_backend.base.filters import BaseFilterSet, FlexibleDateTimeFilter
from .models import Order


class OrderFilter(BaseFilterSet):
    """
    Order list filters.

    order_date_after / order_date_before accept a date or a datetime; a bare
    date covers the whole day.
    """

    status = django_filters.MultipleChoiceFilter(choices=Order.OrderStatus.choices)
    payment_status = django_filters.ChoiceFilter(choices=Order.PaymentStatus.choices)
    source = django_filters.ChoiceFilter(choices=Order.OrderSource.choices)
    customer = django_filters.NumberFilter(field_name="customer_id")
    delivery_person = django_filters.NumberFilter(field_name="delivery_person_id")
    order_number = django_filters.CharFilter(lookup_expr="icontains")

    order_date_after = FlexibleDateTimeFilter(field_name="order_date", lookup_expr="gte")
    order_date_before = FlexibleDateTimeFilter(field_name="order_date", lookup_expr="lte")

    class Meta:
        model = Order
        fields = [
            "status",
            "payment_status",
            "source",
            "customer",
            "delivery_person",
            "order_number",
        ]
