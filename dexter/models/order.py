"""Order book models."""

from dataclasses import dataclass
from fractions import Fraction
from typing import Tuple

from dexter.types import Token


@dataclass(frozen=True)
class Order:
    """A resting order for `asset`, priced in lovelace per `price_denominator` units."""
    asset: Token
    amount: int
    price: int
    price_denominator: int
    is_buy: bool
    utxo_id: str = ""
    dex_identifier: str = ""

    def __post_init__(self):
        if self.price_denominator <= 0:
            raise ValueError(f"price denominator must be positive, got {self.price_denominator}")
        if self.amount < 0:
            raise ValueError(f"order amount must be non-negative, got {self.amount}")

    @property
    def effective_price(self) -> Fraction:
        return Fraction(self.price, self.price_denominator)


@dataclass(frozen=True)
class OrderBook:
    """Buy orders best (highest) first, sell orders best (lowest) first."""
    token_id: str
    buy_orders: Tuple[Order, ...] = ()
    sell_orders: Tuple[Order, ...] = ()

    @property
    def best_bid(self):
        return self.buy_orders[0] if self.buy_orders else None

    @property
    def best_ask(self):
        return self.sell_orders[0] if self.sell_orders else None

    def __len__(self) -> int:
        return len(self.buy_orders) + len(self.sell_orders)
