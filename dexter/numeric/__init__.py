"""Numeric engines: constant product, StableSwap and concentrated liquidity."""

from .concentrated import TickRange, active_ranges, aggregate_reserves, tick_to_price
from .pricing import constant_product_in, constant_product_out, pair_label, spot_price
from .stableswap import compute_d, compute_y, invariant_residual, stable_swap_out

__all__ = [
    "TickRange", "active_ranges", "aggregate_reserves", "tick_to_price",
    "constant_product_in", "constant_product_out", "pair_label", "spot_price",
    "compute_d", "compute_y", "invariant_residual", "stable_swap_out",
]
