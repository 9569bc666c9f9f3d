"""Liquidity pool models."""

import hashlib
from dataclasses import dataclass
from typing import Tuple

from dexter.numeric.concentrated import TickRange, tick_to_price
from dexter.numeric.pricing import (
    canonical_order,
    constant_product_in,
    constant_product_out,
    pair_label,
    spot_price,
)
from dexter.numeric.stableswap import stable_swap_out
from dexter.types import Token


@dataclass(frozen=True)
class LiquidityPool:
    """Two-asset pool snapshot. Reserves are in base units."""

    dex_identifier: str
    asset_a: Token
    asset_b: Token
    reserve_a: int
    reserve_b: int
    address: str
    pool_id: str
    pool_fee_percent: float
    total_lp_tokens: int = 0
    utxo_id: str = ""

    def __post_init__(self):
        if self.reserve_a < 0 or self.reserve_b < 0:
            raise ValueError(f"negative reserves ({self.reserve_a}, {self.reserve_b})")
        if not 0 <= self.pool_fee_percent < 100:
            raise ValueError(f"fee percent {self.pool_fee_percent} outside [0, 100)")

    def price(self) -> float:
        """reserve_b / reserve_a. Raises UndefinedPrice when reserve_a is zero."""
        return spot_price(self.reserve_a, self.reserve_b)

    def adjusted_price(self) -> float:
        """Spot price after applying each token's decimals."""
        return spot_price(self.reserve_a, self.reserve_b) * 10 ** (self.asset_a.decimals - self.asset_b.decimals)

    def pair(self) -> str:
        return pair_label(self.asset_a, self.asset_b)

    @property
    def uuid(self) -> str:
        first, second = canonical_order(self.asset_a, self.asset_b)
        return f"{self.dex_identifier}.{first.identifier()}.{second.identifier()}.{self.pool_id}"

    @property
    def identity_hash(self) -> str:
        return hashlib.sha3_256(self.uuid.encode()).hexdigest()

    def contains_token(self, token: Token) -> bool:
        return token == self.asset_a or token == self.asset_b

    def other_token(self, token: Token) -> Token:
        if token == self.asset_a:
            return self.asset_b
        if token == self.asset_b:
            return self.asset_a
        raise ValueError(f"Token {token} not in pool")

    def get_reserves(self, input_token: Token) -> Tuple[int, int]:
        """Get (reserve_in, reserve_out) for given input token."""
        if input_token == self.asset_a:
            return self.reserve_a, self.reserve_b
        if input_token == self.asset_b:
            return self.reserve_b, self.reserve_a
        raise ValueError(f"Token {input_token} not in pool")

    def pool_out(self, input_token: Token, input_amount: int) -> int:
        """Calculate output amount for given input."""
        r_in, r_out = self.get_reserves(input_token)
        return constant_product_out(r_in, r_out, input_amount, self.pool_fee_percent)

    def pool_in(self, output_token: Token, output_amount: int) -> int:
        """Calculate required input for desired output."""
        r_out, r_in = self.get_reserves(output_token)
        return constant_product_in(r_in, r_out, output_amount, self.pool_fee_percent)

    def __str__(self) -> str:
        return f"{self.dex_identifier} {self.pair()} ({self.reserve_a}/{self.reserve_b})"


@dataclass(frozen=True)
class StablePool(LiquidityPool):
    """StableSwap pool. total_liquidity is the D invariant."""

    amplification_coefficient: int = 1
    total_liquidity: int = 0

    def __post_init__(self):
        super().__post_init__()
        if self.amplification_coefficient < 1:
            raise ValueError(f"amplification coefficient {self.amplification_coefficient} < 1")

    def stable_price(self) -> float:
        """Marginal price dy/dx on the StableSwap curve."""
        x, y = self.reserve_a, self.reserve_b
        a, d = self.amplification_coefficient, self.total_liquidity
        if x == 0 or d == 0:
            return self.price()
        return (y / x) * (1 + a * x / d) / (1 + a * y / d)

    def pool_out(self, input_token: Token, input_amount: int) -> int:
        index_in = 0 if input_token == self.asset_a else 1
        if not self.contains_token(input_token):
            raise ValueError(f"Token {input_token} not in pool")
        return stable_swap_out(
            [self.reserve_a, self.reserve_b], self.amplification_coefficient,
            index_in, 1 - index_in, input_amount, self.pool_fee_percent,
        )


@dataclass(frozen=True)
class ConcentratedPool(LiquidityPool):
    """Pool whose reserves are the sum of the ranges bracketing current_tick."""

    current_tick: int = 0
    active_ranges: Tuple[TickRange, ...] = ()

    def tick_price(self) -> float:
        return tick_to_price(self.current_tick)
