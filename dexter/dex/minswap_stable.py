"""Minswap stable pools - StableSwap curve, one known pool address per pair."""

import logging
from dataclasses import dataclass
from typing import ClassVar, List, Optional

from pycardano import PlutusData

from dexter.errors import PoolNotFound
from dexter.models import LiquidityPool, StablePool, Unit, Utxo
from dexter.numeric.stableswap import compute_d
from dexter.types import Token
from .base import BaseDex, token_from_unit

logger = logging.getLogger(__name__)

IDENTIFIER = "MinswapStable"


@dataclass
class MinswapStablePoolDatum(PlutusData):
    """Pool datum: balances, total_liquidity, amp, order_hash."""
    balances: List[int]
    total_liquidity: int
    amp: int
    order_hash: bytes
    CONSTR_ID: ClassVar[int] = 0


class MinswapStable(BaseDex):
    """
    Stable pools are not discoverable by pattern. Each adapter instance is
    bound to one pool address and the pair that pool trades.
    """
    IDENTIFIER: ClassVar[str] = IDENTIFIER
    FEE_PERCENT: ClassVar[float] = 0.1

    def __init__(self, fetcher, pool_address: str, asset_a: str, asset_b: str, decimals_a: int = 0, decimals_b: int = 0):
        super().__init__(fetcher)
        self.pool_address = pool_address
        self.asset_a = token_from_unit(asset_a, decimals_a)
        self.asset_b = token_from_unit(asset_b, decimals_b)

    @property
    def pool_addresses(self) -> List[str]:
        return [self.pool_address]

    def full_pool_id(self, pool_id: str) -> str:
        return pool_id

    def pool_from_utxo(self, utxo: Utxo, pool_id: str = "") -> Optional[LiquidityPool]:
        if not utxo.has_datum or utxo.address != self.pool_address:
            return None
        pool = self.build_pool(
            utxo,
            Unit(self.asset_a.identifier(), utxo.quantity(self.asset_a.identifier())),
            Unit(self.asset_b.identifier(), utxo.quantity(self.asset_b.identifier())),
            pool_id=self.pool_address,
        )
        return self.with_fields(pool, asset_a=self.asset_a, asset_b=self.asset_b)

    def parse_datum(self, datum_cbor: bytes) -> MinswapStablePoolDatum:
        return MinswapStablePoolDatum.from_cbor(datum_cbor)

    def apply_datum(self, pool: LiquidityPool, utxo: Utxo, datum: MinswapStablePoolDatum) -> StablePool:
        if len(datum.balances) < 2:
            raise ValueError(f"expected two balances, got {len(datum.balances)}")
        reserve_a, reserve_b = datum.balances[0], datum.balances[1]
        d = compute_d([reserve_a, reserve_b], datum.amp)
        return self.promote(
            pool,
            StablePool,
            reserve_a=reserve_a,
            reserve_b=reserve_b,
            total_lp_tokens=datum.total_liquidity,
            amplification_coefficient=datum.amp,
            total_liquidity=d,
        )

    async def get_pool(self) -> StablePool:
        """Current state of the bound pool."""
        return await self.pool_from_pool_id(self.pool_address)

    async def _pools_from_token_pair(self, token_a: Token, token_b: Token) -> List[LiquidityPool]:
        if {token_a, token_b} != {self.asset_a, self.asset_b}:
            raise PoolNotFound(f"{IDENTIFIER} pool at {self.pool_address} does not trade {token_a}/{token_b}")
        return [await self.get_pool()]
