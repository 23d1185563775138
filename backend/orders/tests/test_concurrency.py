"""
Concurrency Tests

Every mutation bumps the order's version. A caller that passes a stale
expected_version, or whose compare-and-swap loses a race, gets a conflict
and nothing is written.
"""
import pytest

from orders.exceptions import OrderConflictError
from orders.models import Order
from orders.services import OrderItemService, OrderPaymentService, OrderService


@pytest.mark.django_db
class TestExpectedVersion:

    def test_matching_version_succeeds(self, order, chef_user):
        updated = OrderService.confirm_order(order.pk, confirmed_by=chef_user, expected_version=1)
        assert updated.version == 2

    def test_stale_version_rejected(self, order, chef_user, soda):
        OrderItemService.add_item(order.pk, soda.pk)

        with pytest.raises(OrderConflictError) as exc_info:
            OrderService.confirm_order(order.pk, confirmed_by=chef_user, expected_version=1)

        assert exc_info.value.details == {'expected_version': 1, 'current_version': 2}
        order.refresh_from_db()
        assert order.status == Order.OrderStatus.NEW

    @pytest.mark.parametrize(
        'mutation',
        [
            lambda order_id, v: OrderService.cancel_order(order_id, 'x', expected_version=v),
            lambda order_id, v: OrderService.update_order(order_id, notes='x', expected_version=v),
            lambda order_id, v: OrderPaymentService.process_payment(order_id, 'Cash', expected_version=v),
            lambda order_id, v: OrderItemService.remove_item(order_id, 1, expected_version=v),
        ],
    )
    def test_every_mutation_checks_version(self, order, mutation):
        with pytest.raises(OrderConflictError):
            mutation(order.pk, 99)
        order.refresh_from_db()
        assert order.version == 1


@pytest.mark.django_db
class TestCompareAndSwap:

    def test_lost_update_detected(self, order):
        """Two copies loaded at the same version: the second write loses."""
        first = Order.objects.get(pk=order.pk)
        second = Order.objects.get(pk=order.pk)

        first.notes = 'from first'
        first.save_versioned(['notes'])
        assert first.version == 2

        second.notes = 'from second'
        with pytest.raises(OrderConflictError):
            second.save_versioned(['notes'])

        order.refresh_from_db()
        assert order.notes == 'from first'
        assert order.version == 2

    def test_versions_increase_by_one(self, order, chef_user):
        versions = [order.version]
        versions.append(OrderService.confirm_order(order.pk, confirmed_by=chef_user).version)
        versions.append(OrderService.start_preparation(order.pk).version)
        versions.append(OrderService.cancel_order(order.pk).version)
        assert versions == [1, 2, 3, 4]
