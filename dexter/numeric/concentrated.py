"""Concentrated-liquidity range aggregation."""

from dataclasses import dataclass
from typing import Iterable, Tuple

TICK_BASE = 1.0001


@dataclass(frozen=True)
class TickRange:
    """Liquidity position between two ticks, with the reserves it contributes."""
    lower_tick: int
    upper_tick: int
    reserve_a: int
    reserve_b: int

    def __post_init__(self):
        if self.lower_tick >= self.upper_tick:
            raise ValueError(f"empty tick range [{self.lower_tick}, {self.upper_tick})")
        if self.reserve_a < 0 or self.reserve_b < 0:
            raise ValueError("range reserves must be non-negative")

    def brackets(self, tick: int) -> bool:
        return self.lower_tick <= tick < self.upper_tick


def tick_to_price(tick: int) -> float:
    return TICK_BASE ** tick


def active_ranges(ranges: Iterable[TickRange], current_tick: int) -> Tuple[TickRange, ...]:
    """Ranges whose bounds bracket the current tick. Others are excluded."""
    return tuple(r for r in ranges if r.brackets(current_tick))


def aggregate_reserves(ranges: Iterable[TickRange], current_tick: int) -> Tuple[int, int]:
    active = active_ranges(ranges, current_tick)
    return sum(r.reserve_a for r in active), sum(r.reserve_b for r in active)
