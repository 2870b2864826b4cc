"""
Cart metrics.
"""

from typing import Callable, Iterable, Optional

from .models import Cart, CartLine


MetricStrategy = Callable[[Iterable[Optional[Cart]]], int]


def _line_quantity(line: CartLine, product_id: str) -> int:
    return line.quantity * int(line.product.product_id == product_id)


def aggregate_product_quantity(carts: Iterable[Optional[Cart]], product_id: str) -> int:
    """Sum the quantity of ``product_id`` across carts.

    Missing carts, missing lines and lines without a product contribute 0.
    """
    total = 0
    for cart in carts or ():
        if cart is None:
            continue
        total += sum(
            _line_quantity(line, product_id)
            for line in (cart.lines or ())
            if line is not None and line.product is not None
        )
    return total


def product_quantity_metric(product_id: str) -> MetricStrategy:
    """Build a metric strategy counting one product."""
    def metric(carts: Iterable[Optional[Cart]]) -> int:
        return aggregate_product_quantity(carts, product_id)

    metric.__name__ = f"product_quantity[{product_id}]"
    return metric
