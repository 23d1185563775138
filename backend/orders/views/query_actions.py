from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.request import Request
from rest_framework.response import Response

from core_backend.exceptions import ServiceValidationError
from orders.serializers import OrderSerializer, OrderStatsSerializer
from orders.services import OrderQueryService, OrderStatusService
from users.models import User


class QueryActionsMixin:
    """
    Read-only collection endpoints for the kitchen, dispatch and reporting screens.
    """

    def _paginated(self, queryset) -> Response:
        page = self.paginate_queryset(queryset)
        context = self.get_serializer_context()
        if page is not None:
            serializer = OrderSerializer(page, many=True, context=context)
            return self.get_paginated_response(serializer.data)
        serializer = OrderSerializer(queryset, many=True, context=context)
        return Response(serializer.data)

    @action(detail=False, methods=["get"], url_path="kitchen-queue")
    def kitchen_queue(self, request: Request) -> Response:
        """Confirmed and Preparing orders, most urgent first."""
        return self._paginated(OrderQueryService.get_kitchen_queue())

    @action(detail=False, methods=["get"], url_path="pending-delivery")
    def pending_delivery(self, request: Request) -> Response:
        return self._paginated(OrderQueryService.get_pending_delivery_orders())

    @action(detail=False, methods=["get"], url_path="my-deliveries")
    def my_deliveries(self, request: Request) -> Response:
        return self._paginated(OrderQueryService.get_orders_by_delivery_person(request.user.pk))

    @action(detail=False, methods=["get"], url_path="by-customer")
    def by_customer(self, request: Request) -> Response:
        """
        Orders for one customer. A customer may only ask for their own;
        without ?customer_id= they get their own list.
        """
        raw = request.query_params.get("customer_id")
        is_customer = request.user.role == User.Role.CUSTOMER

        if raw in (None, ""):
            if not is_customer:
                raise ServiceValidationError("customer_id is required.")
            customer_id = request.user.pk
        else:
            try:
                customer_id = int(raw)
            except ValueError:
                raise ServiceValidationError(f"Invalid customer_id '{raw}'.")

        if is_customer and customer_id != request.user.pk:
            raise PermissionDenied("You can only view your own orders.")

        return self._paginated(OrderQueryService.get_orders_by_customer(customer_id))

    @action(detail=False, methods=["get"], url_path="stats/count")
    def stats_count(self, request: Request) -> Response:
        status_param = request.query_params.get("status")
        if not status_param:
            raise ServiceValidationError("status is required.")
        order_status = OrderStatusService.parse_status(status_param)
        count = OrderQueryService.get_order_count_by_status(order_status)
        return Response({"status": order_status, "count": count})

    @action(detail=False, methods=["get"], url_path="stats/revenue")
    def stats_revenue(self, request: Request) -> Response:
        day = request.query_params.get("date")
        if not day:
            raise ServiceValidationError("date is required (YYYY-MM-DD).")
        revenue = OrderQueryService.get_daily_revenue(day)
        return Response({"date": day, "revenue": str(revenue)})

    @action(detail=False, methods=["get"], url_path="stats")
    def stats(self, request: Request) -> Response:
        stats = OrderQueryService.get_order_stats(request.query_params.get("date"))
        return Response(OrderStatsSerializer(stats).data)
