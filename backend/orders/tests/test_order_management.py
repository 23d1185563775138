"""
Order Management Tests

These tests verify that order creation and line-item editing keep the
stored totals consistent with the items on the order.
"""
import datetime
import re
import pytest
from decimal import Decimal
from django.utils import timezone

from customers.exceptions import AddressNotFoundError, CustomerNotFoundError
from orders.exceptions import (
    InvalidOrderOperationError,
    OrderItemNotFoundError,
    OrderValidationError,
)
from orders.models import Order, OrderItem
from orders.services import OrderItemService, OrderService
from products.exceptions import ProductNotFoundError


ORDER_NUMBER_RE = re.compile(r'^ORD-\d{8}-[A-Z0-9]{4}$')


@pytest.mark.django_db
class TestOrderCreation:
    """Test order creation with items"""

    def test_create_order_calculates_totals(self, order, pizza, soda):
        assert order.status == Order.OrderStatus.NEW
        assert order.payment_status == Order.PaymentStatus.PENDING
        assert order.subtotal == Decimal('27.00')
        assert order.delivery_fee == Decimal('5.00')
        assert order.tax == Decimal('2.70')
        assert order.total == Decimal('34.70')
        assert order.version == 1

        items = list(order.items.all())
        assert [item.product_id for item in items] == [pizza.pk, soda.pk]
        assert items[0].unit_price == Decimal('12.50')
        assert items[0].subtotal == Decimal('25.00')

    def test_order_number_format(self, order):
        assert ORDER_NUMBER_RE.match(order.order_number), order.order_number
        today = timezone.now().astimezone(datetime.timezone.utc).strftime('%Y%m%d')
        assert order.order_number[4:12] == today

    def test_order_numbers_are_unique(self, customer_user, customer_address, pizza):
        numbers = {
            OrderService.create_order(
                customer_user.pk, customer_address.pk, [{'product_id': pizza.pk}]
            ).order_number
            for _ in range(5)
        }
        assert len(numbers) == 5

    def test_duplicate_product_requests_are_merged(self, customer_user, customer_address, pizza):
        order = OrderService.create_order(
            customer_user.pk,
            customer_address.pk,
            [
                {'product_id': pizza.pk, 'quantity': 1, 'special_instructions': 'extra basil'},
                {'product_id': pizza.pk, 'quantity': 2, 'special_instructions': 'ignored'},
            ],
        )

        assert order.items.count() == 1
        item = order.items.get()
        assert item.quantity == 3
        assert item.special_instructions == 'extra basil'
        assert order.subtotal == Decimal('37.50')

    def test_duplicate_requests_keep_first_price(self, customer_user, customer_address, pizza):
        order = OrderService.create_order(
            customer_user.pk,
            customer_address.pk,
            [
                {'product_id': pizza.pk, 'quantity': 2, 'unit_price': '10.00'},
                {'product_id': pizza.pk, 'quantity': 3, 'unit_price': '99.00'},
            ],
        )

        assert [(item.quantity, item.unit_price) for item in order.items.all()] == [
            (5, Decimal('10.00'))
        ]
        assert order.subtotal == Decimal('50.00')

    def test_group_line_requests(self):
        lines = OrderService.group_line_requests(
            [
                {'product_id': 7, 'quantity': 2, 'unit_price': '10.00'},
                {'product_id': 3},
                {'product_id': '7', 'quantity': 3, 'unit_price': '99.00'},
            ]
        )

        assert lines == [
            {'product_id': 7, 'quantity': 5, 'unit_price': '10.00', 'special_instructions': ''},
            {'product_id': 3, 'quantity': 1, 'unit_price': None, 'special_instructions': ''},
        ]

    def test_group_line_requests_rejects_bad_product_id(self):
        with pytest.raises(OrderValidationError):
            OrderService.group_line_requests([{'product_id': 'pizza'}])

    def test_string_product_ids_resolve(self, customer_user, customer_address, pizza):
        order = OrderService.create_order(
            customer_user.pk,
            customer_address.pk,
            [{'product_id': str(pizza.pk)}, {'product_id': pizza.pk}],
        )
        assert order.items.get().quantity == 2

    def test_explicit_unit_price_is_captured(self, customer_user, customer_address, pizza):
        order = OrderService.create_order(
            customer_user.pk,
            customer_address.pk,
            [{'product_id': pizza.pk, 'quantity': 2, 'unit_price': Decimal('10.00')}],
        )
        assert order.items.get().unit_price == Decimal('10.00')
        assert order.subtotal == Decimal('20.00')

    def test_price_snapshot_survives_menu_change(self, order, pizza):
        pizza.price = Decimal('99.00')
        pizza.save()

        order.refresh_from_db()
        assert order.items.get(product=pizza).unit_price == Decimal('12.50')
        assert order.subtotal == Decimal('27.00')

    def test_discount_reduces_total(self, customer_user, customer_address, pizza):
        order = OrderService.create_order(
            customer_user.pk,
            customer_address.pk,
            [{'product_id': pizza.pk}],
            discount=Decimal('2.50'),
        )
        assert order.total == Decimal('10.00')

    def test_source_and_required_time(self, customer_user, customer_address, pizza):
        required = timezone.now() + datetime.timedelta(hours=2)
        order = OrderService.create_order(
            customer_user.pk,
            customer_address.pk,
            [{'product_id': pizza.pk}],
            source='phone',
            required_time=required,
        )
        assert order.source == Order.OrderSource.PHONE
        assert order.required_time == required

    def test_empty_items_rejected(self, customer_user, customer_address):
        with pytest.raises(OrderValidationError):
            OrderService.create_order(customer_user.pk, customer_address.pk, [])
        assert Order.objects.count() == 0

    def test_unavailable_product_rejected(
        self, customer_user, customer_address, pizza, unavailable_product
    ):
        with pytest.raises(InvalidOrderOperationError):
            OrderService.create_order(
                customer_user.pk,
                customer_address.pk,
                [{'product_id': pizza.pk}, {'product_id': unavailable_product.pk}],
            )
        assert Order.objects.count() == 0
        assert OrderItem.objects.count() == 0

    def test_unknown_product_rejected(self, customer_user, customer_address):
        with pytest.raises(ProductNotFoundError):
            OrderService.create_order(
                customer_user.pk, customer_address.pk, [{'product_id': 999999}]
            )

    def test_unknown_customer_rejected(self, customer_address, pizza):
        with pytest.raises(CustomerNotFoundError):
            OrderService.create_order(999999, customer_address.pk, [{'product_id': pizza.pk}])

    def test_address_must_belong_to_customer(
        self, customer_user, other_customer_address, pizza
    ):
        with pytest.raises(AddressNotFoundError):
            OrderService.create_order(
                customer_user.pk, other_customer_address.pk, [{'product_id': pizza.pk}]
            )

    def test_negative_fee_rejected(self, customer_user, customer_address, pizza):
        with pytest.raises(OrderValidationError):
            OrderService.create_order(
                customer_user.pk,
                customer_address.pk,
                [{'product_id': pizza.pk}],
                delivery_fee=Decimal('-1.00'),
            )

    def test_discount_larger_than_order_rejected(self, customer_user, customer_address, pizza):
        with pytest.raises(OrderValidationError):
            OrderService.create_order(
                customer_user.pk,
                customer_address.pk,
                [{'product_id': pizza.pk}],
                discount=Decimal('50.00'),
            )

    def test_zero_quantity_rejected(self, customer_user, customer_address, pizza):
        with pytest.raises(OrderValidationError):
            OrderService.create_order(
                customer_user.pk, customer_address.pk, [{'product_id': pizza.pk, 'quantity': 0}]
            )

    def test_notes_too_long_rejected(self, customer_user, customer_address, pizza):
        with pytest.raises(OrderValidationError):
            OrderService.create_order(
                customer_user.pk,
                customer_address.pk,
                [{'product_id': pizza.pk}],
                notes='x' * 1001,
            )

    @pytest.mark.parametrize('fee', ['NaN', 'Infinity', '1e40', 'abc'])
    def test_malformed_fee_rejected(self, customer_user, customer_address, pizza, fee):
        with pytest.raises(OrderValidationError):
            OrderService.create_order(
                customer_user.pk,
                customer_address.pk,
                [{'product_id': pizza.pk}],
                delivery_fee=fee,
            )
        assert not Order.objects.exists()

    def test_fee_beyond_column_precision_rejected(self, customer_user, customer_address, pizza):
        with pytest.raises(OrderValidationError, match='cannot exceed'):
            OrderService.create_order(
                customer_user.pk,
                customer_address.pk,
                [{'product_id': pizza.pk}],
                delivery_fee='9999999999.99',
            )

    def test_total_beyond_column_precision_rejected(self, customer_user, customer_address, pizza):
        with pytest.raises(OrderValidationError, match='total'):
            OrderService.create_order(
                customer_user.pk,
                customer_address.pk,
                [{'product_id': pizza.pk, 'unit_price': '99999999.00'}],
                delivery_fee='5.00',
            )

    def test_line_beyond_column_precision_rejected(self, customer_user, customer_address, pizza):
        with pytest.raises(OrderValidationError, match='Line total'):
            OrderService.create_order(
                customer_user.pk,
                customer_address.pk,
                [{'product_id': pizza.pk, 'quantity': 2, 'unit_price': '99999999.99'}],
            )


@pytest.mark.django_db
class TestOrderItemEditing:
    """Adding and removing lines while an order is New"""

    def test_add_item_appends_line_and_recalculates(self, order, soda):
        updated = OrderItemService.add_item(order.pk, soda.pk, quantity=2)

        assert updated.items.count() == 3
        assert updated.items.filter(product=soda).count() == 2
        assert updated.subtotal == Decimal('31.00')
        assert updated.total == Decimal('38.70')
        assert updated.version == order.version + 1

    def test_add_item_with_instructions(self, order, pizza):
        updated = OrderItemService.add_item(
            order.pk, pizza.pk, special_instructions='well done'
        )
        last = updated.items.order_by('-id').first()
        assert last.special_instructions == 'well done'
        assert last.unit_price == pizza.price

    def test_remove_item_removes_first_line(self, order, soda):
        OrderItemService.add_item(order.pk, soda.pk, quantity=3)
        updated = OrderItemService.remove_item(order.pk, soda.pk)

        remaining = updated.items.filter(product=soda)
        assert remaining.count() == 1
        assert remaining.get().quantity == 3
        assert updated.subtotal == Decimal('31.00')

    def test_remove_missing_product_raises(self, order, unavailable_product):
        with pytest.raises(OrderItemNotFoundError):
            OrderItemService.remove_item(order.pk, unavailable_product.pk)

    def test_items_frozen_after_confirmation(self, confirmed_order, soda):
        with pytest.raises(InvalidOrderOperationError, match='after order has been confirmed'):
            OrderItemService.add_item(confirmed_order.pk, soda.pk)
        with pytest.raises(InvalidOrderOperationError):
            OrderItemService.remove_item(confirmed_order.pk, soda.pk)

    def test_add_unavailable_product_rejected(self, order, unavailable_product):
        with pytest.raises(InvalidOrderOperationError):
            OrderItemService.add_item(order.pk, unavailable_product.pk)
        order.refresh_from_db()
        assert order.version == 1

    def test_removing_last_item_leaves_fees(self, customer_user, customer_address, pizza):
        order = OrderService.create_order(
            customer_user.pk,
            customer_address.pk,
            [{'product_id': pizza.pk}],
            delivery_fee=Decimal('4.00'),
        )
        updated = OrderItemService.remove_item(order.pk, pizza.pk)
        assert updated.items.count() == 0
        assert updated.subtotal == Decimal('0.00')
        assert updated.total == Decimal('4.00')

    def test_removal_rejected_when_discount_exceeds_remaining(
        self, customer_user, customer_address, pizza, soda
    ):
        order = OrderService.create_order(
            customer_user.pk,
            customer_address.pk,
            [{'product_id': pizza.pk}, {'product_id': soda.pk}],
            discount=Decimal('10.00'),
        )
        with pytest.raises(InvalidOrderOperationError):
            OrderItemService.remove_item(order.pk, pizza.pk)
        assert order.items.count() == 2

    @pytest.mark.parametrize('price', ['NaN', 'Infinity', '1e40'])
    def test_add_item_malformed_price_rejected(self, order, soda, price):
        with pytest.raises(OrderValidationError):
            OrderItemService.add_item(order.pk, soda.pk, unit_price=price)
        order.refresh_from_db()
        assert order.version == 1

    def test_add_item_overflowing_total_rolls_back(self, order, soda):
        with pytest.raises(OrderValidationError, match='exceeds the maximum'):
            OrderItemService.add_item(order.pk, soda.pk, unit_price='99999990.00')

        order.refresh_from_db()
        assert order.items.count() == 2
        assert order.total == Decimal('34.70')
        assert order.version == 1
