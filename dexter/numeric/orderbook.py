"""Order book sorting."""

from typing import Iterable, List

from dexter.models.order import Order, OrderBook


def sort_orders(orders: Iterable[Order], descending: bool) -> List[Order]:
    """Stable sort on exact effective price; equal prices keep their input order."""
    return sorted(orders, key=lambda o: o.effective_price, reverse=descending)


def build_order_book(token_id: str, orders: Iterable[Order]) -> OrderBook:
    orders = list(orders)
    return OrderBook(
        token_id=token_id,
        buy_orders=tuple(sort_orders((o for o in orders if o.is_buy), descending=True)),
        sell_orders=tuple(sort_orders((o for o in orders if not o.is_buy), descending=False)),
    )
