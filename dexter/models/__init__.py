"""Domain models produced by the protocol decoders."""

from .order import Order, OrderBook
from .pool import ConcentratedPool, LiquidityPool, StablePool
from .rate import Rate
from .utxo import Unit, Utxo

__all__ = [
    "Unit", "Utxo",
    "LiquidityPool", "StablePool", "ConcentratedPool",
    "Order", "OrderBook", "Rate",
]
