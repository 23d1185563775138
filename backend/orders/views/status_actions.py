from rest_framework import status
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.request import Request
from rest_framework.response import Response
import logging

from orders.serializers import (
    AssignDeliverySerializer,
    CancelOrderSerializer,
    ConfirmOrderSerializer,
    ProcessPaymentSerializer,
    UpdateOrderStatusSerializer,
    UpdatePaymentStatusSerializer,
)
from orders.services import OrderPaymentService, OrderService
from users.models import User

logger = logging.getLogger(__name__)


class StatusActionsMixin:
    """
    Mixin for order lifecycle actions.

    This mixin provides action methods for OrderViewSet. Each action checks
    object access with get_object(), validates its input, then hands the
    order id to the service layer, which locks and re-reads the row.
    """

    def _validated(self, serializer_class, request):
        serializer = serializer_class(data=request.data)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data

    @action(detail=True, methods=["post"], url_path="confirm")
    def confirm(self, request: Request, pk=None) -> Response:
        """Confirms a New order."""
        order = self.get_object()
        data = self._validated(ConfirmOrderSerializer, request)
        updated = OrderService.confirm_order(
            order.pk,
            confirmed_by=request.user,
            notes=data.get("notes") or None,
            required_time=data.get("required_time"),
            estimated_delivery_minutes=data.get("estimated_delivery_minutes"),
            delivery_fee=data.get("delivery_fee"),
            expected_version=self.get_expected_version(),
        )
        return self.order_response(updated)

    @action(detail=True, methods=["post"], url_path="start-preparation")
    def start_preparation(self, request: Request, pk=None) -> Response:
        """Moves the order into the kitchen (Preparing)."""
        return self._handle_status_change(request, OrderService.start_preparation)

    @action(detail=True, methods=["post"], url_path="prepared")
    def prepared(self, request: Request, pk=None) -> Response:
        """Marks the order Ready."""
        return self._handle_status_change(request, OrderService.mark_as_prepared)

    @action(detail=True, methods=["post"], url_path="assign-delivery")
    def assign_delivery(self, request: Request, pk=None) -> Response:
        order = self.get_object()
        data = self._validated(AssignDeliverySerializer, request)
        updated = OrderService.assign_delivery_person(
            order.pk,
            data["delivery_person_id"],
            expected_version=self.get_expected_version(),
        )
        return self.order_response(updated)

    @action(detail=True, methods=["post"], url_path="delivered")
    def delivered(self, request: Request, pk=None) -> Response:
        order = self.get_object()
        # Drivers may only close their own deliveries
        if request.user.role == User.Role.DELIVERY and order.delivery_person_id != request.user.pk:
            raise PermissionDenied("This order is assigned to another delivery person.")
        updated = OrderService.mark_as_delivered(
            order.pk, expected_version=self.get_expected_version()
        )
        return self.order_response(updated)

    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request: Request, pk=None) -> Response:
        """Cancels the order, recording the reason in its notes."""
        order = self.get_object()
        data = self._validated(CancelOrderSerializer, request)
        updated = OrderService.cancel_order(
            order.pk, data.get("reason", ""), expected_version=self.get_expected_version()
        )
        return self.order_response(updated)

    @action(detail=True, methods=["post"], url_path="payment")
    def payment(self, request: Request, pk=None) -> Response:
        order = self.get_object()
        data = self._validated(ProcessPaymentSerializer, request)
        updated = OrderPaymentService.process_payment(
            order.pk, data["payment_method"], expected_version=self.get_expected_version()
        )
        return self.order_response(updated)

    @action(detail=True, methods=["post"], url_path="payment-status")
    def payment_status(self, request: Request, pk=None) -> Response:
        order = self.get_object()
        data = self._validated(UpdatePaymentStatusSerializer, request)
        updated = OrderPaymentService.update_payment_status(
            order.pk, data["payment_status"], expected_version=self.get_expected_version()
        )
        return self.order_response(updated)

    @action(detail=True, methods=["post"], url_path="status")
    def update_status(self, request: Request, pk=None) -> Response:
        """
        Updates the status of an order, ensuring valid transitions via OrderService.
        """
        order = self.get_object()
        data = self._validated(UpdateOrderStatusSerializer, request)
        updated = OrderService.update_order_status(
            order.pk, data["status"], expected_version=self.get_expected_version()
        )
        return self.order_response(updated)

    def _handle_status_change(self, request: Request, service_method) -> Response:
        """Generic handler for status-changing actions without a body."""
        order = self.get_object()
        updated = service_method(order.pk, expected_version=self.get_expected_version())
        return self.order_response(updated, status_code=status.HTTP_200_OK)
