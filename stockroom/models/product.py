"""Product data model."""

import math
from dataclasses import dataclass, replace

from ..utils.exceptions import InvalidValueError


DEFAULT_LOW_STOCK_THRESHOLD = 10

# Quantity is persisted as a 4-byte signed integer
MAX_QUANTITY = 2 ** 31 - 1


def _check_quantity(quantity: int) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidValueError(
            "Quantity must be a whole number",
            details={"quantity": quantity}
        )
    if quantity < 0:
        raise InvalidValueError("Quantity cannot be negative", details={"quantity": quantity})
    if quantity > MAX_QUANTITY:
        raise InvalidValueError(
            f"Quantity cannot exceed {MAX_QUANTITY}",
            details={"quantity": quantity}
        )
    return quantity


def _check_price(price: float) -> float:
    if isinstance(price, bool) or not isinstance(price, (int, float)):
        raise InvalidValueError("Price must be a number", details={"price": price})
    try:
        value = float(price)
    except OverflowError:
        raise InvalidValueError("Price must be a finite number", details={"price": price})
    if math.isnan(value):
        raise InvalidValueError("Price must be a number", details={"price": price})
    if math.isinf(value):
        raise InvalidValueError("Price must be a finite number", details={"price": price})
    if value < 0:
        raise InvalidValueError("Price cannot be negative", details={"price": price})
    return value


@dataclass
class Product:
    """Represents a product record in the inventory."""

    name: str
    product_id: str
    quantity: int = 0
    price: float = 0.0

    def __post_init__(self):
        """Validate numeric fields."""
        self.quantity = _check_quantity(self.quantity)
        self.price = _check_price(self.price)

    @property
    def total_value(self) -> float:
        """Stock value of this product (quantity x price)."""
        return self.quantity * self.price

    def is_low_stock(self, threshold: int = DEFAULT_LOW_STOCK_THRESHOLD) -> bool:
        """Check whether quantity is at or below the threshold."""
        return self.quantity <= threshold

    def set_quantity(self, quantity: int) -> None:
        """
        Set a new quantity.

        Raises:
            InvalidValueError: If quantity is negative; the current value is kept
        """
        self.quantity = _check_quantity(quantity)

    def set_price(self, price: float) -> None:
        """
        Set a new price.

        Raises:
            InvalidValueError: If price is negative; the current value is kept
        """
        self.price = _check_price(price)

    def copy(self) -> "Product":
        """Return an independent copy of this product."""
        return replace(self)
