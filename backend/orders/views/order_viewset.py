from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
import logging

from core_backend.base import BaseViewSet, ExpectedVersionMixin
from core_backend.exceptions import ServiceValidationError
from orders.filters import OrderFilter
from orders.models import Order
from orders.permissions import (
    IsOrderOwnerOrAdmin,
    IsOrderOwnerOrAdminOrChef,
    IsOrderOwnerOrStaff,
)
from orders.serializers import (
    OrderCreateSerializer,
    OrderSerializer,
    OrderSummarySerializer,
    OrderUpdateSerializer,
)
from orders.services import OrderService
from users.models import User
from users.permissions import (
    IsAdmin,
    IsAdminOrChef,
    IsCustomer,
    IsDeliveryPerson,
    IsDispatchStaff,
    IsKitchenStaff,
)

from .query_actions import QueryActionsMixin
from .review_actions import ReviewActionsMixin
from .status_actions import StatusActionsMixin

logger = logging.getLogger(__name__)


class OrderViewSet(
    ExpectedVersionMixin,
    StatusActionsMixin,
    QueryActionsMixin,
    ReviewActionsMixin,
    BaseViewSet,
):
    """
    ViewSet for managing orders.

    This viewset combines:
    - CRUD over orders, delegated to OrderService
    - Lifecycle transitions and payments (StatusActionsMixin)
    - Kitchen, dispatch and reporting queries (QueryActionsMixin)
    - Customer reviews of delivered orders (ReviewActionsMixin)

    Customers only ever see their own orders. Mutations accept an If-Match
    header carrying the version the client last read.
    """

    queryset = Order.objects.all()
    serializer_class = OrderSerializer
    filterset_class = OrderFilter
    ordering_fields = ["order_date", "required_time", "total", "id"]
    lookup_value_regex = r"\d+"
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    # action -> permission classes; anything unlisted needs authentication only
    action_permissions = {
        "create": [IsCustomer | IsAdminOrChef],
        "list": [IsAdminOrChef | IsCustomer],
        "retrieve": [IsOrderOwnerOrStaff],
        "partial_update": [IsAdminOrChef],
        "destroy": [IsAdmin],
        "kitchen_queue": [IsKitchenStaff],
        "pending_delivery": [IsDispatchStaff],
        "my_deliveries": [IsDeliveryPerson],
        "by_customer": [IsAdminOrChef | IsCustomer],
        "stats_count": [IsAdmin],
        "stats_revenue": [IsAdmin],
        "stats": [IsAdmin],
        "confirm": [IsAdminOrChef],
        "start_preparation": [IsKitchenStaff],
        "prepared": [IsKitchenStaff],
        "assign_delivery": [IsAdminOrChef],
        "delivered": [IsDispatchStaff],
        "cancel": [IsOrderOwnerOrAdminOrChef],
        "payment": [IsOrderOwnerOrAdmin],
        "payment_status": [IsAdmin],
        "update_status": [IsAdminOrChef],
        "review": [IsOrderOwnerOrStaff],
        "reviews": [IsAuthenticated],
    }

    def get_permissions(self):
        classes = self.action_permissions.get(self.action, [IsAuthenticated])
        return [permission() for permission in classes]

    def get_queryset(self):
        queryset = super().get_queryset()
        user = self.request.user
        if user.is_authenticated and user.role == User.Role.CUSTOMER:
            queryset = queryset.for_customer(user.pk)
        return queryset

    def get_serializer_class(self):
        if self.action == "create":
            return OrderCreateSerializer
        if self.action == "partial_update":
            return OrderUpdateSerializer
        if self.action == "list":
            return OrderSummarySerializer
        return OrderSerializer

    def order_response(self, order: Order, status_code=status.HTTP_200_OK) -> Response:
        """Serialize the order and expose its version as an ETag."""
        serializer = OrderSerializer(order, context=self.get_serializer_context())
        return Response(
            serializer.data,
            status=status_code,
            headers={"ETag": f'"{order.version}"'},
        )

    def retrieve(self, request: Request, *args, **kwargs) -> Response:
        return self.order_response(self.get_object())

    def create(self, request: Request, *args, **kwargs) -> Response:
        """
        Place an order. Customers always order for themselves; staff taking a
        phone order must name the customer.
        """
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if request.user.role == User.Role.CUSTOMER:
            customer_id = request.user.pk
        else:
            customer_id = data.get("customer_id")
            if customer_id is None:
                raise ServiceValidationError("customer_id is required when ordering for a customer.")

        order = OrderService.create_order(
            customer_id=customer_id,
            address_id=data["address_id"],
            items=data["items"],
            discount=data["discount"],
            tax=data["tax"],
            delivery_fee=data["delivery_fee"],
            notes=data["notes"],
            source=data["source"],
            required_time=data["required_time"],
        )
        return self.order_response(order, status_code=status.HTTP_201_CREATED)

    def partial_update(self, request: Request, *args, **kwargs) -> Response:
        order = self.get_object()
        serializer = self.get_serializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        updated = OrderService.update_order(
            order.pk,
            status=data.get("status"),
            payment_status=data.get("payment_status"),
            delivery_person_id=data.get("delivery_person_id"),
            notes=data.get("notes"),
            expected_version=self.get_expected_version(),
        )
        return self.order_response(updated)

    def destroy(self, request: Request, *args, **kwargs) -> Response:
        order = self.get_object()
        OrderService.delete_order(order.pk)
        return Response(status=status.HTTP_204_NO_CONTENT)
