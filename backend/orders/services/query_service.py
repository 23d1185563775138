import datetime
import logging
from decimal import Decimal

from django.db.models import Count, Sum

from orders.calculators import to_money
from orders.exceptions import OrderNotFoundError
from orders.models import Order

logger = logging.getLogger(__name__)


class OrderQueryService:
    """
    Read-only access to orders for staff, kitchen and delivery screens.

    Every method returns querysets or plain values; nothing here mutates.
    """

    @staticmethod
    def base_queryset():
        return Order.objects.with_details()

    @staticmethod
    def get_order_by_id(order_id) -> Order:
        order = OrderQueryService.base_queryset().filter(pk=order_id).first()
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    @staticmethod
    def get_all_orders():
        return OrderQueryService.base_queryset().order_by("-order_date", "-id")

    @staticmethod
    def get_orders_by_status(status):
        from orders.services.status_service import OrderStatusService

        status = OrderStatusService.parse_status(status)
        return OrderQueryService.base_queryset().with_status(status).order_by("-order_date", "-id")

    @staticmethod
    def get_orders_by_customer(customer_id):
        return OrderQueryService.base_queryset().for_customer(customer_id).order_by("-order_date", "-id")

    @staticmethod
    def get_orders_by_delivery_person(user_id):
        return OrderQueryService.base_queryset().for_delivery_person(user_id).order_by("-order_date", "-id")

    @staticmethod
    def get_pending_delivery_orders():
        return OrderQueryService.base_queryset().pending_delivery()

    @staticmethod
    def get_kitchen_queue():
        return OrderQueryService.base_queryset().kitchen_queue()

    @staticmethod
    def get_orders_by_date_range(start, end):
        """Orders placed in [start, end]. Date-only bounds cover whole UTC days."""
        queryset = OrderQueryService.base_queryset()
        if start:
            queryset = queryset.filter(order_date__gte=_as_utc_datetime(start, is_end=False))
        if end:
            queryset = queryset.filter(order_date__lte=_as_utc_datetime(end, is_end=True))
        return queryset.order_by("order_date", "id")

    @staticmethod
    def get_order_count_by_status(status) -> int:
        from orders.services.status_service import OrderStatusService

        status = OrderStatusService.parse_status(status)
        return Order.objects.filter(status=status).count()

    @staticmethod
    def get_status_counts() -> list:
        """
        One entry per status, including statuses with no orders.

        Returns:
            list of {status, status_display, count, percentage}
        """
        rows = {
            row["status"]: row["count"]
            for row in Order.objects.order_by().values("status").annotate(count=Count("id"))
        }
        grand_total = sum(rows.values())

        results = []
        for status in Order.OrderStatus:
            count = rows.get(status.value, 0)
            percentage = (
                to_money(Decimal(count) * 100 / Decimal(grand_total)) if grand_total else Decimal("0.00")
            )
            results.append(
                {
                    "status": status.value,
                    "status_display": status.label,
                    "count": count,
                    "percentage": percentage,
                }
            )
        return results

    @staticmethod
    def get_daily_revenue(day) -> Decimal:
        """
        Sum of totals for orders placed on the given UTC day whose payment
        completed and which were not canceled.
        """
        day = _as_date(day)
        result = Order.objects.placed_on(day).revenue_eligible().aggregate(revenue=Sum("total"))
        return to_money(result["revenue"] or 0)

    @staticmethod
    def get_total_revenue() -> Decimal:
        result = Order.objects.revenue_eligible().aggregate(revenue=Sum("total"))
        return to_money(result["revenue"] or 0)

    @staticmethod
    def get_order_stats(day=None) -> dict:
        day = _as_date(day) if day else datetime.datetime.now(datetime.timezone.utc).date()
        status_counts = OrderQueryService.get_status_counts()
        return {
            "date": day,
            "total_orders": sum(row["count"] for row in status_counts),
            "orders_today": Order.objects.placed_on(day).count(),
            "status_counts": status_counts,
            "total_revenue": OrderQueryService.get_total_revenue(),
            "daily_revenue": OrderQueryService.get_daily_revenue(day),
        }


def _as_date(value) -> datetime.date:
    if isinstance(value, datetime.datetime):
        if value.tzinfo is not None:
            value = value.astimezone(datetime.timezone.utc)
        return value.date()
    if isinstance(value, datetime.date):
        return value
    from django.utils.dateparse import parse_date
    from orders.exceptions import OrderValidationError

    try:
        parsed = parse_date(str(value)) if value else None
    except ValueError:
        parsed = None
    if parsed is None:
        raise OrderValidationError(f"'{value}' is not a valid date (expected YYYY-MM-DD).")
    return parsed


def _as_utc_datetime(value, is_end=False) -> datetime.datetime:
    from core_backend.base.filters import normalize_datetime_value
    from orders.exceptions import OrderValidationError

    if isinstance(value, datetime.date) and not isinstance(value, datetime.datetime):
        value = value.isoformat()
    normalized = normalize_datetime_value(value, is_end=is_end)
    if normalized is None:
        raise OrderValidationError(f"'{value}' is not a valid date or datetime.")
    return normalized
