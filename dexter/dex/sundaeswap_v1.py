"""SundaeSwap V1 - constant product AMM, fee fraction stored in the datum."""

from dataclasses import dataclass
from typing import ClassVar, List, Optional

from pycardano import Datum, PlutusData

from dexter.models import LiquidityPool, Utxo
from .base import BaseDex

IDENTIFIER = "SUNDAESWAPV1"
POOL_ADDRESS = "addr1w9qzpelu9hn45pefc0xr4ac4kdxeswq7pndul2vuj59u8tqaxdznu"
LP_TOKEN_POLICY = "0029cb7c88c7567b63d1a512c0ed626aa169688ec980730c0473b913"


@dataclass
class SundaeSwapFee(PlutusData):
    numerator: int
    denominator: int
    CONSTR_ID: ClassVar[int] = 0


@dataclass
class SundaeSwapV1PoolDatum(PlutusData):
    coin_pair: Datum
    pool_ident: bytes
    circulating_lp: int
    fee: SundaeSwapFee
    CONSTR_ID: ClassVar[int] = 0


class SundaeSwapV1(BaseDex):
    IDENTIFIER: ClassVar[str] = IDENTIFIER
    POOL_ADDRESSES: ClassVar[List[str]] = [POOL_ADDRESS]
    LP_TOKEN_POLICY_ID: ClassVar[str] = LP_TOKEN_POLICY

    def pool_from_utxo(self, utxo: Utxo, pool_id: str = "") -> Optional[LiquidityPool]:
        if not utxo.has_datum:
            return None
        relevant = self.relevant_assets(utxo)
        if len(relevant) not in (2, 3):
            return None
        lp_units = utxo.units_with_policy(LP_TOKEN_POLICY)
        return self.build_pool(utxo, *self.pick_pair(relevant), pool_id=lp_units[-1].unit if lp_units else pool_id)

    def parse_datum(self, datum_cbor: bytes) -> SundaeSwapV1PoolDatum:
        return SundaeSwapV1PoolDatum.from_cbor(datum_cbor)

    def apply_datum(self, pool: LiquidityPool, utxo: Utxo, datum: SundaeSwapV1PoolDatum) -> LiquidityPool:
        fee = datum.fee
        fee_percent = fee.numerator / fee.denominator * 100 if fee.denominator > 0 else self.FEE_PERCENT
        return self.with_fields(pool, total_lp_tokens=datum.circulating_lp, pool_fee_percent=fee_percent)
