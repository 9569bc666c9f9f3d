"""Minswap V2 - constant product AMM with reserves and fee tracked in the datum."""

from dataclasses import dataclass
from typing import ClassVar, List, Optional

from pycardano import Datum, PlutusData

from dexter.models import LiquidityPool, Utxo
from .base import BaseDex
from .plutus_common import PlutusToken

# Constants
IDENTIFIER = "MINSWAPV2"
LP_TOKEN_POLICY = "f5808c2c990d86da54bfc97d89cee6efa20cd8461616359478d96b4c"
POOL_VALIDITY_ASSET = f"{LP_TOKEN_POLICY}4d5350"  # "MSP"
POOL_SCRIPT_HASH_BECH32 = "script1agrmwv7exgffcdu27cn5xmnuhsh0p0ukuqpkhdgm800xksw7e2w"


@dataclass
class MinswapV2PoolDatum(PlutusData):
    pool_batching_stake_credential: Datum
    asset_a: PlutusToken
    asset_b: PlutusToken
    total_liquidity: int
    reserve_a: int
    reserve_b: int
    base_fee_a_numerator: int
    base_fee_b_numerator: int
    fee_sharing_numerator: Datum
    allow_dynamic_fee: Datum
    CONSTR_ID: ClassVar[int] = 0


class MinswapV2(BaseDex):
    IDENTIFIER: ClassVar[str] = IDENTIFIER
    POOL_ADDRESSES: ClassVar[List[str]] = [f"{POOL_SCRIPT_HASH_BECH32}/*"]
    LP_TOKEN_POLICY_ID: ClassVar[str] = LP_TOKEN_POLICY

    def pool_from_utxo(self, utxo: Utxo, pool_id: str = "") -> Optional[LiquidityPool]:
        if not utxo.has_datum:
            return None
        pair = self.pick_pair(self.relevant_assets(utxo))
        if pair is None:
            return None
        lp_units = [u.unit for u in utxo.units_with_policy(LP_TOKEN_POLICY) if u.unit != POOL_VALIDITY_ASSET]
        return self.build_pool(utxo, *pair, pool_id=lp_units[0] if lp_units else pool_id)

    def parse_datum(self, datum_cbor: bytes) -> MinswapV2PoolDatum:
        return MinswapV2PoolDatum.from_cbor(datum_cbor)

    def apply_datum(self, pool: LiquidityPool, utxo: Utxo, datum: MinswapV2PoolDatum) -> Optional[LiquidityPool]:
        if datum.asset_b.unit().startswith(LP_TOKEN_POLICY):
            return None  # zap pool
        reserve_a, reserve_b = datum.reserve_a, datum.reserve_b
        if datum.asset_a.unit() != pool.asset_a.identifier():
            reserve_a, reserve_b = reserve_b, reserve_a
        return self.with_fields(
            pool,
            reserve_a=reserve_a,
            reserve_b=reserve_b,
            total_lp_tokens=datum.total_liquidity,
            pool_fee_percent=datum.base_fee_a_numerator / 100,
        )
