"""Minswap V1 - constant product AMM with 0.3% fee."""

from dataclasses import dataclass
from typing import ClassVar, List, Optional

from pycardano import Datum, PlutusData

from dexter.errors import PoolNotFound
from dexter.fetching import ScanOutcome
from dexter.models import LiquidityPool, Utxo
from dexter.utils import asset_pattern
from .base import BaseDex
from .plutus_common import PlutusToken

# Constants
IDENTIFIER = "MINSWAP"
POOL_NFT_POLICY = "0be55d262b29f564998ff81efe21bdc0022621c12f15af08d0f2ddb1"
POOL_TOKEN_POLICY = "13aa2accf2e1561723aa26871e071fdf32c867cff7e7d50ad470d62f"
POOL_VALIDITY_ASSET = f"{POOL_TOKEN_POLICY}.4d494e53574150"  # "MINSWAP"
LP_TOKEN_POLICY = "e4214b7cce62ac6fbba385d164df48e157eae5863521b4b67ca71d86"


# Datum structures
@dataclass
class MinswapV1PoolDatum(PlutusData):
    """Pool datum: token_a, token_b, total_liquidity, root_k_last, fee_sharing."""
    token_a: PlutusToken
    token_b: PlutusToken
    total_liquidity: int
    root_k_last: int
    fee_sharing: Datum
    CONSTR_ID: ClassVar[int] = 0


class MinswapV1(BaseDex):
    """Pools are found by the MINSWAP validity token; the pool NFT is the pool id."""
    IDENTIFIER: ClassVar[str] = IDENTIFIER
    POOL_ADDRESSES: ClassVar[List[str]] = [POOL_VALIDITY_ASSET]
    LP_TOKEN_POLICY_ID: ClassVar[str] = LP_TOKEN_POLICY
    POOL_ID_POLICY: ClassVar[str] = POOL_NFT_POLICY
    IGNORED_POLICIES: ClassVar[List[str]] = [POOL_NFT_POLICY, POOL_TOKEN_POLICY]
    FEE_PERCENT: ClassVar[float] = 0.3

    def pool_from_utxo(self, utxo: Utxo, pool_id: str = "") -> Optional[LiquidityPool]:
        if not utxo.has_datum:
            return None
        nfts = utxo.units_with_policy(POOL_NFT_POLICY)
        pair = self.pick_pair(self.relevant_assets(utxo))
        if not nfts or pair is None:
            return None
        return self.build_pool(utxo, *pair, pool_id=nfts[0].unit)

    def parse_datum(self, datum_cbor: bytes) -> MinswapV1PoolDatum:
        return MinswapV1PoolDatum.from_cbor(datum_cbor)

    def apply_datum(self, pool: LiquidityPool, utxo: Utxo, datum: MinswapV1PoolDatum) -> LiquidityPool:
        return self.with_fields(pool, total_lp_tokens=datum.total_liquidity)

    async def _pool_from_pool_id(self, pool_id: str) -> LiquidityPool:
        # The NFT is unique, so query it directly instead of scanning every pool
        utxos = await self.fetcher.utxos(asset_pattern(pool_id))
        outcomes = await self.fetcher.scan(utxos, self.pool_from_utxo_extend)
        pools = [p for p in ScanOutcome.collect(outcomes) if p.pool_id == pool_id]
        if not pools:
            raise PoolNotFound(f"{IDENTIFIER}: no pool with id {pool_id}")
        return pools[0]
