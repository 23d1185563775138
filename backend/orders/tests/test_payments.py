"""
Payment Tests

Cash stays pending until the driver hands the order over; online payment
completes immediately with a transaction reference.
"""
import pytest

from orders.exceptions import InvalidOrderOperationError, OrderValidationError
from orders.models import Order
from orders.services import (
    CashPaymentStrategy,
    OnlinePaymentStrategy,
    OrderPaymentService,
    OrderService,
    PaymentStrategyFactory,
)


class TestPaymentStrategyFactory:

    @pytest.mark.parametrize('method', ['Cash', 'cash', 'CASH'])
    def test_cash(self, method):
        assert isinstance(PaymentStrategyFactory.get_strategy(method), CashPaymentStrategy)

    @pytest.mark.parametrize('method', ['Stripe', 'stripe'])
    def test_online(self, method):
        assert isinstance(PaymentStrategyFactory.get_strategy(method), OnlinePaymentStrategy)

    def test_unknown_method(self):
        with pytest.raises(OrderValidationError):
            PaymentStrategyFactory.get_strategy('bitcoin')


@pytest.mark.django_db
class TestProcessPayment:

    def test_cash_payment_stays_pending(self, order):
        updated = OrderPaymentService.process_payment(order.pk, 'Cash')
        assert updated.payment_method == Order.PaymentMethod.CASH
        assert updated.payment_status == Order.PaymentStatus.PENDING
        assert updated.transaction_id is None
        assert updated.version == 2

    def test_online_payment_completes(self, order):
        updated = OrderPaymentService.process_payment(order.pk, 'Stripe')
        assert updated.payment_method == Order.PaymentMethod.STRIPE
        assert updated.payment_status == Order.PaymentStatus.COMPLETED
        assert updated.transaction_id

    def test_cannot_pay_twice(self, order):
        OrderPaymentService.process_payment(order.pk, 'Stripe')
        with pytest.raises(InvalidOrderOperationError):
            OrderPaymentService.process_payment(order.pk, 'Cash')

    def test_cannot_pay_canceled_order(self, order):
        OrderService.cancel_order(order.pk)
        with pytest.raises(InvalidOrderOperationError):
            OrderPaymentService.process_payment(order.pk, 'Stripe')

    def test_cash_can_switch_to_online(self, order):
        OrderPaymentService.process_payment(order.pk, 'Cash')
        updated = OrderPaymentService.process_payment(order.pk, 'Stripe')
        assert updated.payment_status == Order.PaymentStatus.COMPLETED

    def test_cash_settled_on_delivery(self, order, chef_user, delivery_user):
        OrderPaymentService.process_payment(order.pk, 'Cash')
        OrderService.confirm_order(order.pk, confirmed_by=chef_user)
        OrderService.assign_delivery_person(order.pk, delivery_user.pk)

        delivered = OrderService.mark_as_delivered(order.pk)
        assert delivered.payment_status == Order.PaymentStatus.COMPLETED

    def test_unpaid_order_stays_pending_on_delivery(self, dispatched_order):
        delivered = OrderService.mark_as_delivered(dispatched_order.pk)
        assert delivered.payment_status == Order.PaymentStatus.PENDING


@pytest.mark.django_db
class TestUpdatePaymentStatus:

    def test_set_failed(self, order):
        updated = OrderPaymentService.update_payment_status(order.pk, 'Failed')
        assert updated.payment_status == Order.PaymentStatus.FAILED

    def test_invalid_status(self, order):
        with pytest.raises(OrderValidationError):
            OrderPaymentService.update_payment_status(order.pk, 'Refunded')
