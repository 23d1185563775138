from rest_framework import status, viewsets
from rest_framework.request import Request
from rest_framework.response import Response
import logging

from core_backend.base import ExpectedVersionMixin
from orders.exceptions import OrderNotFoundError
from orders.models import Order
from orders.permissions import IsOrderOwnerOrAdminOrChef
from orders.serializers import AddItemSerializer, OrderItemSerializer, OrderSerializer
from orders.services import OrderItemService
from users.models import User

logger = logging.getLogger(__name__)


class OrderItemViewSet(ExpectedVersionMixin, viewsets.GenericViewSet):
    """
    Line items of a single order, nested under /orders/{order_pk}/items/.

    Adding and removing items returns the whole updated order. The item
    route's key is the product id, so DELETE .../items/{product_id}/ removes
    the first line for that product.
    """

    serializer_class = OrderItemSerializer
    permission_classes = [IsOrderOwnerOrAdminOrChef]
    lookup_value_regex = r"\d+"

    def get_serializer_class(self):
        if self.action == "create":
            return AddItemSerializer
        return OrderItemSerializer

    def _get_order(self) -> Order:
        queryset = Order.objects.all()
        user = self.request.user
        if user.role == User.Role.CUSTOMER:
            queryset = queryset.for_customer(user.pk)
        order = queryset.filter(pk=self.kwargs["order_pk"]).first()
        if order is None:
            raise OrderNotFoundError(self.kwargs["order_pk"])
        self.check_object_permissions(self.request, order)
        return order

    def _order_response(self, order: Order, status_code=status.HTTP_200_OK) -> Response:
        serializer = OrderSerializer(order, context=self.get_serializer_context())
        return Response(serializer.data, status=status_code, headers={"ETag": f'"{order.version}"'})

    def list(self, request: Request, order_pk=None) -> Response:
        order = self._get_order()
        items = order.items.select_related("product__category")
        return Response(OrderItemSerializer(items, many=True).data)

    def create(self, request: Request, order_pk=None) -> Response:
        """Adds a line to a New order and returns the updated order."""
        order = self._get_order()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        updated = OrderItemService.add_item(
            order.pk,
            data["product_id"],
            quantity=data["quantity"],
            unit_price=data.get("unit_price"),
            special_instructions=data["special_instructions"],
            expected_version=self.get_expected_version(),
        )
        return self._order_response(updated, status_code=status.HTTP_201_CREATED)

    def destroy(self, request: Request, order_pk=None, pk=None) -> Response:
        order = self._get_order()
        updated = OrderItemService.remove_item(
            order.pk, int(pk), expected_version=self.get_expected_version()
        )
        return self._order_response(updated)
