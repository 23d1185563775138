"""
Custom queryset for the Order model.

Holds the eager-loading recipe for order projections, the named queues the
staff screens read from, and the locking lookup every mutation starts with.
"""
import datetime

from django.db import models
from django.db.models import Prefetch


class OrderQuerySet(models.QuerySet):

    def with_details(self):
        """Eager-load everything an order projection touches."""
        from orders.models import OrderItem

        return self.select_related(
            "customer",
            "delivery_address",
            "delivery_person",
            "confirmed_by",
        ).prefetch_related(
            Prefetch("items", queryset=OrderItem.objects.select_related("product__category").order_by("id"))
        )

    def with_status(self, *statuses):
        return self.filter(status__in=statuses)

    def for_customer(self, customer_id):
        return self.filter(customer_id=customer_id)

    def for_delivery_person(self, user_id):
        return self.filter(delivery_person_id=user_id)

    def kitchen_queue(self):
        """Confirmed or preparing, soonest required first, then oldest."""
        Status = self.model.OrderStatus
        return self.with_status(Status.CONFIRMED, Status.PREPARING).order_by(
            models.F("required_time").asc(nulls_last=True), "order_date", "id"
        )

    def pending_delivery(self):
        """Confirmed but not yet delivered, soonest required first."""
        Status = self.model.OrderStatus
        return self.with_status(
            Status.CONFIRMED,
            Status.PREPARING,
            Status.READY,
            Status.OUT_FOR_DELIVERY,
        ).order_by(models.F("required_time").asc(nulls_last=True), "order_date", "id")

    def revenue_eligible(self):
        """Orders whose payment was collected and which were not canceled."""
        return self.filter(payment_status=self.model.PaymentStatus.COMPLETED).exclude(
            status=self.model.OrderStatus.CANCELED
        )

    def placed_on(self, day: datetime.date):
        """Orders whose order_date falls on the given UTC calendar day."""
        start = datetime.datetime.combine(day, datetime.time.min, tzinfo=datetime.timezone.utc)
        return self.filter(order_date__gte=start, order_date__lt=start + datetime.timedelta(days=1))

    def get_for_update(self, order_id, expected_version=None):
        """
        Load and row-lock an order inside the caller's transaction.

        Raises:
            OrderNotFoundError: no order with that id
            OrderConflictError: expected_version given and stale
        """
        from orders.exceptions import OrderConflictError, OrderNotFoundError

        order = self.select_for_update().filter(pk=order_id).first()
        if order is None:
            raise OrderNotFoundError(order_id)
        if expected_version is not None and order.version != int(expected_version):
            raise OrderConflictError(order.pk, int(expected_version), order.version)
        return order
