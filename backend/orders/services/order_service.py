from decimal import Decimal
from django.db import transaction
from django.utils import timezone
import logging

from customers.services import AddressService, CustomerService
from orders.calculators import MAX_AMOUNT, OrderCalculator, line_subtotal, to_money
from orders.exceptions import InvalidOrderOperationError, OrderNotFoundError, OrderValidationError
from orders.models import Delivery, Order, OrderItem, NOTES_MAX_LENGTH
from orders.services.item_service import OrderItemService
from orders.services.payment_service import OrderPaymentService
from orders.services.query_service import OrderQueryService
from orders.services.status_service import OrderStatusService
from products.services import ProductService
from users.services import UserService

logger = logging.getLogger(__name__)

Status = Order.OrderStatus


class OrderService:
    """
    Core service for the order lifecycle - creating, confirming, dispatching,
    delivering and canceling orders.

    Every mutation runs in one transaction: the order row is locked, the
    optional expected_version is checked, and the write is a compare-and-swap
    on version. Each method returns the refreshed order.
    """

    # --- Validation helpers ---

    @staticmethod
    def _validate_fee(value, name) -> Decimal:
        try:
            amount = to_money(value)
        except ValueError as e:
            raise OrderValidationError(str(e))
        if amount < 0:
            raise OrderValidationError(f"{name} cannot be negative.")
        if amount > MAX_AMOUNT:
            raise OrderValidationError(f"{name} cannot exceed {MAX_AMOUNT}.")
        return amount

    @staticmethod
    def _validate_notes(notes):
        if notes and len(notes) > NOTES_MAX_LENGTH:
            raise OrderValidationError(f"Notes cannot exceed {NOTES_MAX_LENGTH} characters.")
        return notes

    @staticmethod
    def _parse_source(source):
        if not source:
            return Order.OrderSource.WEBSITE
        text = str(source).strip().lower()
        for choice in Order.OrderSource:
            if text in (choice.value.lower(), choice.name.lower()):
                return choice
        raise OrderValidationError(
            f"'{source}' is not a valid order source.",
            details={"allowed": list(Order.OrderSource.values)},
        )

    @staticmethod
    def group_line_requests(items) -> list:
        """
        Merge requests for the same product.

        Product ids are normalized to int, then quantities are summed; the
        first request's unit price and special instructions win. Order of
        first appearance is preserved.
        """
        grouped = {}
        for raw in items:
            product_id = raw.get("product_id")
            if product_id is None:
                raise OrderValidationError("Every item needs a product_id.")
            try:
                product_id = int(product_id)
            except (TypeError, ValueError):
                raise OrderValidationError(f"Product id '{product_id}' is not a whole number.")
            try:
                quantity = int(raw.get("quantity", 1))
            except (TypeError, ValueError):
                raise OrderValidationError(f"Quantity '{raw.get('quantity')}' is not a whole number.")
            if quantity < 1:
                raise OrderValidationError("Quantity must be at least 1.")

            if product_id in grouped:
                grouped[product_id]["quantity"] += quantity
            else:
                grouped[product_id] = {
                    "product_id": product_id,
                    "quantity": quantity,
                    "unit_price": raw.get("unit_price"),
                    "special_instructions": raw.get("special_instructions") or "",
                }
        return list(grouped.values())

    # --- Creation ---

    @staticmethod
    @transaction.atomic
    def create_order(
        customer_id,
        address_id,
        items,
        discount=0,
        tax=0,
        delivery_fee=0,
        notes: str = "",
        source=None,
        required_time=None,
    ) -> Order:
        """
        Create an order with its line items in one unit.

        Args:
            customer_id: Ordering customer
            address_id: One of the customer's addresses
            items: list of {product_id, quantity, unit_price?, special_instructions?}
            discount, tax, delivery_fee: caller-supplied amounts
            notes: Optional free text
            source: Website (default), Phone or ThirdParty
            required_time: Optional requested delivery time

        Raises:
            OrderValidationError: empty or malformed input
            CustomerNotFoundError / AddressNotFoundError / ProductNotFoundError
            InvalidOrderOperationError: an unavailable product was requested
        """
        if not items:
            raise OrderValidationError("An order needs at least one item.")

        discount = OrderService._validate_fee(discount, "Discount")
        tax = OrderService._validate_fee(tax, "Tax")
        delivery_fee = OrderService._validate_fee(delivery_fee, "Delivery fee")
        notes = OrderService._validate_notes(notes or "")
        source = OrderService._parse_source(source)

        customer = CustomerService.get_customer_by_id(customer_id)
        address = AddressService.get_address_by_id(address_id, customer=customer)

        lines = OrderService.group_line_requests(items)
        products = ProductService.get_products_by_ids([line["product_id"] for line in lines])

        for line in lines:
            product = products[line["product_id"]]
            if not product.is_available:
                raise InvalidOrderOperationError(f"'{product.name}' is currently unavailable.")
            if line["unit_price"] is None:
                line["unit_price"] = product.price
            line["quantity"], line["unit_price"] = OrderItemService.validate_line(
                line["quantity"], line["unit_price"], line["special_instructions"]
            )

        calculator = OrderCalculator(
            lines, delivery_fee=delivery_fee, tax=tax, discount=discount
        )
        totals = calculator.calculate_totals()
        if totals["total"] < 0:
            raise OrderValidationError(
                f"Discount {discount} exceeds the order value "
                f"{totals['subtotal'] + delivery_fee + tax}."
            )
        OrderItemService.ensure_storable(totals)

        order = Order(
            customer=customer,
            delivery_address=address,
            notes=notes,
            source=source,
            required_time=required_time,
        )
        order.apply_totals(totals)
        order.save()

        OrderItem.objects.bulk_create(
            [
                OrderItem(
                    order=order,
                    product=products[line["product_id"]],
                    quantity=line["quantity"],
                    unit_price=line["unit_price"],
                    subtotal=line_subtotal(line["quantity"], line["unit_price"]),
                    special_instructions=line["special_instructions"],
                )
                for line in lines
            ]
        )

        logger.info(
            f"Order {order.order_number} created for customer {customer.pk} "
            f"with {totals['item_count']} item(s), total {order.total}"
        )
        return OrderQueryService.get_order_by_id(order.pk)

    # --- Status transitions ---

    @staticmethod
    def _transition(order: Order, new_status, when=None) -> list:
        """
        Apply a status change plus the side effects that go with it.

        Returns the changed order fields. Delivery-record writes happen here
        too and roll back with the caller's transaction.
        """
        when = when or timezone.now()
        changed = OrderStatusService.apply_transition(order, new_status, when=when)
        new_status = order.status

        if new_status == Status.OUT_FOR_DELIVERY and order.delivery_person_id:
            Delivery.objects.update_or_create(
                order=order,
                defaults={
                    "delivery_person_id": order.delivery_person_id,
                    "status": Delivery.DeliveryStatus.ON_THE_WAY,
                    "delivery_start_time": when,
                    "delivery_end_time": None,
                    "status_change_time": when,
                },
            )
        elif new_status == Status.DELIVERED:
            changed += OrderPaymentService.settle_cash_on_delivery(order)
            Delivery.objects.filter(order=order).update(
                status=Delivery.DeliveryStatus.DELIVERED,
                delivery_end_time=when,
                status_change_time=when,
            )
        elif new_status == Status.CANCELED:
            Delivery.objects.filter(order=order).exclude(
                status=Delivery.DeliveryStatus.DELIVERED
            ).update(
                status=Delivery.DeliveryStatus.CANCELED,
                status_change_time=when,
            )
        return changed

    @staticmethod
    @transaction.atomic
    def confirm_order(
        order_id,
        confirmed_by=None,
        notes=None,
        required_time=None,
        estimated_delivery_minutes=None,
        delivery_fee=None,
        expected_version=None,
    ) -> Order:
        """
        Confirm a New order.

        notes and required_time overwrite the stored values when given. A
        delivery_fee is persisted and the total recomputed, so the returned
        order and the stored row always agree.
        """
        if confirmed_by is not None and not hasattr(confirmed_by, "pk"):
            staff_id = confirmed_by
            confirmed_by = UserService.get_user_by_id(staff_id)
            if confirmed_by is None:
                raise OrderValidationError(f"Staff user {staff_id} does not exist.")

        order = Order.objects.get_for_update(order_id, expected_version)
        changed = OrderService._transition(order, Status.CONFIRMED)

        order.confirmed_by = confirmed_by
        changed.append("confirmed_by")

        if notes:
            order.notes = OrderService._validate_notes(notes)
            changed.append("notes")
        if required_time is not None:
            order.required_time = required_time
            changed.append("required_time")
        if estimated_delivery_minutes is not None:
            if int(estimated_delivery_minutes) < 0:
                raise OrderValidationError("Estimated delivery minutes cannot be negative.")
            order.estimated_delivery_minutes = int(estimated_delivery_minutes)
            changed.append("estimated_delivery_minutes")
        if delivery_fee is not None:
            order.delivery_fee = OrderService._validate_fee(delivery_fee, "Delivery fee")
            changed += OrderItemService.recalculate_totals(order)

        order.save_versioned(changed)
        logger.info(
            f"Order {order.order_number} confirmed by "
            f"{getattr(confirmed_by, 'pk', None) or 'system'}"
        )
        return OrderQueryService.get_order_by_id(order.pk)

    @staticmethod
    @transaction.atomic
    def start_preparation(order_id, expected_version=None) -> Order:
        order = Order.objects.get_for_update(order_id, expected_version)
        changed = OrderService._transition(order, Status.PREPARING)
        order.save_versioned(changed)
        logger.info(f"Order {order.order_number} preparation started")
        return OrderQueryService.get_order_by_id(order.pk)

    @staticmethod
    @transaction.atomic
    def mark_as_prepared(order_id, expected_version=None) -> Order:
        """Kitchen finished the order; it is Ready for dispatch."""
        order = Order.objects.get_for_update(order_id, expected_version)
        changed = OrderService._transition(order, Status.READY)
        order.save_versioned(changed)
        logger.info(f"Order {order.order_number} is ready")
        return OrderQueryService.get_order_by_id(order.pk)

    @staticmethod
    @transaction.atomic
    def assign_delivery_person(order_id, delivery_person_id, expected_version=None) -> Order:
        """
        Hand the order to a delivery person and move it to OutForDelivery.

        An order that is already out for delivery is reassigned without a
        second status change.
        """
        order = Order.objects.get_for_update(order_id, expected_version)
        delivery_person = UserService.get_delivery_person_by_id(delivery_person_id)

        order.delivery_person = delivery_person
        if order.status == Status.OUT_FOR_DELIVERY:
            Delivery.objects.update_or_create(
                order=order,
                defaults={
                    "delivery_person": delivery_person,
                    "status": Delivery.DeliveryStatus.ON_THE_WAY,
                    "status_change_time": timezone.now(),
                },
            )
            changed = ["delivery_person"]
            logger.info(
                f"Order {order.order_number} reassigned to delivery person {delivery_person.pk}"
            )
        else:
            changed = OrderService._transition(order, Status.OUT_FOR_DELIVERY)
            changed.append("delivery_person")
            logger.info(
                f"Order {order.order_number} out for delivery with {delivery_person.pk}"
            )

        order.save_versioned(changed)
        return OrderQueryService.get_order_by_id(order.pk)

    @staticmethod
    @transaction.atomic
    def mark_as_delivered(order_id, expected_version=None) -> Order:
        order = Order.objects.get_for_update(order_id, expected_version)
        changed = OrderService._transition(order, Status.DELIVERED)
        order.save_versioned(changed)
        logger.info(f"Order {order.order_number} delivered")
        return OrderQueryService.get_order_by_id(order.pk)

    @staticmethod
    @transaction.atomic
    def cancel_order(order_id, reason: str = "", expected_version=None) -> Order:
        """Cancel the order and append the reason to its notes."""
        order = Order.objects.get_for_update(order_id, expected_version)
        changed = OrderService._transition(order, Status.CANCELED)

        if reason and reason.strip():
            order.append_note(f"Cancellation Reason: {reason.strip()}")
            changed.append("notes")

        order.save_versioned(changed)
        logger.info(f"Order {order.order_number} canceled: {reason or 'no reason given'}")
        return OrderQueryService.get_order_by_id(order.pk)

    @staticmethod
    @transaction.atomic
    def update_order_status(order_id, new_status, expected_version=None) -> Order:
        """Generic transition through the status machine."""
        order = Order.objects.get_for_update(order_id, expected_version)
        previous = order.status
        changed = OrderService._transition(order, new_status)
        order.save_versioned(changed)
        logger.info(f"Order {order.order_number} status {previous} -> {order.status}")
        return OrderQueryService.get_order_by_id(order.pk)

    # --- Sparse update / delete ---

    @staticmethod
    @transaction.atomic
    def update_order(
        order_id,
        status=None,
        payment_status=None,
        delivery_person_id=None,
        notes=None,
        expected_version=None,
    ) -> Order:
        """
        Apply only the fields that were supplied.

        A delivery person is validated and set before a status change, so a
        single patch can dispatch an order. Empty strings count as not supplied.
        """
        order = Order.objects.get_for_update(order_id, expected_version)
        changed = []

        if delivery_person_id not in (None, ""):
            order.delivery_person = UserService.get_delivery_person_by_id(delivery_person_id)
            changed.append("delivery_person")

        if status not in (None, ""):
            changed += OrderService._transition(order, status)

        if payment_status not in (None, ""):
            order.payment_status = OrderPaymentService.parse_payment_status(payment_status)
            changed.append("payment_status")

        if notes not in (None, ""):
            order.notes = OrderService._validate_notes(notes)
            changed.append("notes")

        if not changed:
            logger.debug(f"Update of order {order.order_number} carried no fields")
            return OrderQueryService.get_order_by_id(order.pk)

        order.save_versioned(changed)
        logger.info(f"Order {order.order_number} updated: {', '.join(sorted(set(changed)))}")
        return OrderQueryService.get_order_by_id(order.pk)

    @staticmethod
    @transaction.atomic
    def delete_order(order_id) -> None:
        order = Order.objects.select_for_update().filter(pk=order_id).first()
        if order is None:
            raise OrderNotFoundError(order_id)
        order_number = order.order_number
        order.delete()
        logger.info(f"Order {order_number} deleted")
