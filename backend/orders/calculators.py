"""
Order financial calculator.

Pure computation of order totals from line items and fee inputs. No database
access, no side effects: callers pass the current line items (model instances,
dicts or (quantity, unit_price) tuples) and the fee fields, and apply the
returned totals to the order themselves.

Usage:
    from orders.calculators import OrderCalculator

    calculator = OrderCalculator(order.items.all(), delivery_fee=order.delivery_fee,
                                 tax=order.tax, discount=order.discount)
    totals = calculator.calculate_totals()

    # or, for an order already in memory
    totals = OrderCalculator.for_order(order).calculate_totals()
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Any, Dict, Iterable, Optional, Tuple, Union

MONEY_QUANT = Decimal("0.01")
ZERO = Decimal("0.00")
# Largest value a DecimalField(max_digits=10, decimal_places=2) column holds
MAX_AMOUNT = Decimal("99999999.99")

Number = Union[Decimal, int, float, str]


def to_money(value: Optional[Number]) -> Decimal:
    """
    Convert a number to a 2-place Decimal.

    Floats go through str() first so 0.1 becomes Decimal("0.10") rather than
    its binary expansion. None is treated as zero.
    NaN, infinities and amounts too large to quantize raise ValueError.
    """
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        try:
            value = Decimal(str(value))
        except InvalidOperation:
            raise ValueError(f"'{value}' is not a valid monetary amount.")
    if not value.is_finite():
        raise ValueError(f"'{value}' is not a valid monetary amount.")
    try:
        return value.quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValueError(f"'{value}' is too large for a monetary amount.")


def line_subtotal(quantity: int, unit_price: Number) -> Decimal:
    """Subtotal of a single line: quantity x unit price."""
    return to_money(Decimal(int(quantity)) * to_money(unit_price))


class OrderCalculator:
    """
    Calculator for order totals.

    subtotal = sum(quantity * unit_price)
    total    = subtotal + delivery_fee + tax - discount
    """

    def __init__(
        self,
        items: Iterable[Any] = (),
        delivery_fee: Optional[Number] = None,
        tax: Optional[Number] = None,
        discount: Optional[Number] = None,
    ):
        self.lines = [self._normalize_line(item) for item in items]
        self.delivery_fee = to_money(delivery_fee)
        self.tax = to_money(tax)
        self.discount = to_money(discount)

    @classmethod
    def for_order(cls, order, items: Optional[Iterable[Any]] = None) -> "OrderCalculator":
        """Build a calculator from an order's fee fields and (by default) its saved items."""
        if items is None:
            items = order.items.all()
        return cls(
            items,
            delivery_fee=order.delivery_fee,
            tax=order.tax,
            discount=order.discount,
        )

    @staticmethod
    def _normalize_line(item) -> Tuple[int, Decimal]:
        if isinstance(item, dict):
            quantity, unit_price = item["quantity"], item["unit_price"]
        elif isinstance(item, (tuple, list)):
            quantity, unit_price = item
        else:
            quantity, unit_price = item.quantity, item.unit_price
        return int(quantity), to_money(unit_price)

    def calculate_subtotal(self) -> Decimal:
        return to_money(
            sum((line_subtotal(qty, price) for qty, price in self.lines), ZERO)
        )

    def calculate_item_count(self) -> int:
        return sum(qty for qty, _ in self.lines)

    def calculate_total(self, subtotal: Optional[Decimal] = None) -> Decimal:
        if subtotal is None:
            subtotal = self.calculate_subtotal()
        return to_money(subtotal + self.delivery_fee + self.tax - self.discount)

    def calculate_totals(self) -> Dict[str, Any]:
        """
        Calculate every monetary field of the order.

        Returns:
            dict with subtotal, delivery_fee, tax, discount, total, item_count
        """
        subtotal = self.calculate_subtotal()
        return {
            "subtotal": subtotal,
            "delivery_fee": self.delivery_fee,
            "tax": self.tax,
            "discount": self.discount,
            "total": self.calculate_total(subtotal),
            "item_count": self.calculate_item_count(),
        }
