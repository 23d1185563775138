"""
Order Query Tests

Kitchen and dispatch queues, per-person listings, counts and revenue.
"""
import datetime
import pytest
from decimal import Decimal
from django.utils import timezone

from orders.exceptions import OrderNotFoundError, OrderValidationError
from orders.models import Order
from orders.services import OrderPaymentService, OrderQueryService, OrderService

Status = Order.OrderStatus


def _place(customer, address, product, **kwargs):
    return OrderService.create_order(
        customer.pk, address.pk, [{'product_id': product.pk}], **kwargs
    )


@pytest.mark.django_db
class TestLookups:

    def test_get_order_by_id(self, order):
        fetched = OrderQueryService.get_order_by_id(order.pk)
        assert fetched.order_number == order.order_number
        assert fetched.customer_name == 'Jane Doe'
        assert fetched.delivery_address_display == '12 Main Street, Apt 4, Springfield'
        assert fetched.item_count == 3

    def test_missing_order(self, db):
        with pytest.raises(OrderNotFoundError):
            OrderQueryService.get_order_by_id(424242)

    def test_by_status(self, order, confirmed_order):
        # confirmed_order is the same order, now Confirmed
        assert list(OrderQueryService.get_orders_by_status('New')) == []
        assert list(OrderQueryService.get_orders_by_status('confirmed')) == [confirmed_order]

    def test_by_customer(self, order, other_customer, other_customer_address, pizza):
        other = _place(other_customer, other_customer_address, pizza)
        assert list(OrderQueryService.get_orders_by_customer(other_customer.pk)) == [other]

    def test_by_delivery_person(self, dispatched_order, delivery_user, other_delivery_user):
        assert list(OrderQueryService.get_orders_by_delivery_person(delivery_user.pk)) == [dispatched_order]
        assert list(OrderQueryService.get_orders_by_delivery_person(other_delivery_user.pk)) == []


@pytest.mark.django_db
class TestQueues:

    def test_kitchen_queue_orders_by_required_time(
        self, customer_user, customer_address, pizza, chef_user
    ):
        now = timezone.now()
        later = _place(customer_user, customer_address, pizza, required_time=now + datetime.timedelta(hours=3))
        sooner = _place(customer_user, customer_address, pizza, required_time=now + datetime.timedelta(hours=1))
        unscheduled = _place(customer_user, customer_address, pizza)
        still_new = _place(customer_user, customer_address, pizza)

        for placed in (later, sooner, unscheduled):
            OrderService.confirm_order(placed.pk, confirmed_by=chef_user)
        OrderService.start_preparation(later.pk)

        queue = list(OrderQueryService.get_kitchen_queue())
        assert queue == [sooner, later, unscheduled]
        assert still_new not in queue

    def test_ready_orders_leave_kitchen_queue(self, ready_order):
        assert ready_order not in OrderQueryService.get_kitchen_queue()
        assert ready_order in OrderQueryService.get_pending_delivery_orders()

    def test_pending_delivery_excludes_new_and_terminal(
        self, customer_user, customer_address, pizza, dispatched_order
    ):
        new_order = _place(customer_user, customer_address, pizza)
        canceled = _place(customer_user, customer_address, pizza)
        OrderService.cancel_order(canceled.pk)

        pending = list(OrderQueryService.get_pending_delivery_orders())
        assert pending == [dispatched_order]
        assert new_order not in pending

    def test_date_range(self, order):
        today = timezone.now().date()
        assert order in OrderQueryService.get_orders_by_date_range(today, today)
        assert order in OrderQueryService.get_orders_by_date_range(str(today), None)
        tomorrow = today + datetime.timedelta(days=1)
        assert order not in OrderQueryService.get_orders_by_date_range(tomorrow, None)

    def test_date_range_rejects_garbage(self, db):
        with pytest.raises(OrderValidationError):
            list(OrderQueryService.get_orders_by_date_range('yesterday', None))


@pytest.mark.django_db
class TestStats:

    def test_status_counts_cover_every_status(self, order):
        counts = OrderQueryService.get_status_counts()
        assert [row['status'] for row in counts] == list(Status.values)

        new_row = next(row for row in counts if row['status'] == Status.NEW)
        assert new_row['count'] == 1
        assert new_row['percentage'] == Decimal('100.00')
        assert new_row['status_display'] == 'New'

    def test_status_counts_empty(self, db):
        counts = OrderQueryService.get_status_counts()
        assert all(row['count'] == 0 and row['percentage'] == Decimal('0.00') for row in counts)

    def test_count_by_status(self, order, customer_user, customer_address, pizza):
        _place(customer_user, customer_address, pizza)
        assert OrderQueryService.get_order_count_by_status('New') == 2
        assert OrderQueryService.get_order_count_by_status(Status.DELIVERED) == 0

    def test_revenue_counts_completed_payments_only(
        self, order, customer_user, customer_address, pizza
    ):
        paid = _place(customer_user, customer_address, pizza, delivery_fee=Decimal('3.00'))
        OrderPaymentService.process_payment(paid.pk, 'Stripe')

        paid_then_canceled = _place(customer_user, customer_address, pizza)
        OrderPaymentService.process_payment(paid_then_canceled.pk, 'Stripe')
        OrderService.cancel_order(paid_then_canceled.pk)

        today = timezone.now().astimezone(datetime.timezone.utc).date()
        assert OrderQueryService.get_daily_revenue(today) == Decimal('15.50')
        assert OrderQueryService.get_daily_revenue(today.isoformat()) == Decimal('15.50')
        assert OrderQueryService.get_total_revenue() == Decimal('15.50')
        assert OrderQueryService.get_daily_revenue(today - datetime.timedelta(days=1)) == Decimal('0.00')

    def test_revenue_rejects_bad_date(self, db):
        with pytest.raises(OrderValidationError):
            OrderQueryService.get_daily_revenue('2025-02-30')

    def test_order_stats(self, order):
        OrderPaymentService.process_payment(order.pk, 'Stripe')
        stats = OrderQueryService.get_order_stats()

        assert stats['total_orders'] == 1
        assert stats['orders_today'] == 1
        assert stats['total_revenue'] == Decimal('34.70')
        assert stats['daily_revenue'] == Decimal('34.70')
        assert len(stats['status_counts']) == len(Status.values)
