"""CSwap - constant product AMM; the LP token is the policy unit named "c"."""

from dataclasses import dataclass
from typing import ClassVar, List, Optional

from pycardano import Datum, PlutusData

from dexter.models import LiquidityPool, Utxo
from dexter.utils import POLICY_ID_LENGTH
from .base import BaseDex

IDENTIFIER = "CSWAP"
POOL_ADDRESS = "addr1z8ke0c9p89rjfwmuh98jpt8ky74uy5mffjft3zlcld9h7ml3lmln3mwk0y3zsh3gs3dzqlwa9rjzrxawkwm4udw9axhs6fuu6e"
LP_TOKEN_NAME_HEX = "63"


@dataclass
class CSwapPoolDatum(PlutusData):
    total_lp: int
    lp_fee: int
    asset_a_policy: bytes
    asset_a_name: bytes
    asset_b_policy: bytes
    asset_b_name: bytes
    config: Datum
    CONSTR_ID: ClassVar[int] = 0


def is_lp_token(unit: str) -> bool:
    return len(unit) > POLICY_ID_LENGTH and unit[POLICY_ID_LENGTH:] == LP_TOKEN_NAME_HEX


class CSwap(BaseDex):
    IDENTIFIER: ClassVar[str] = IDENTIFIER
    POOL_ADDRESSES: ClassVar[List[str]] = [POOL_ADDRESS]

    def full_pool_id(self, pool_id: str) -> str:
        return pool_id

    def relevant_assets(self, utxo: Utxo):
        return [u for u in utxo.amount if not is_lp_token(u.unit)]

    def pool_from_utxo(self, utxo: Utxo, pool_id: str = "") -> Optional[LiquidityPool]:
        if not utxo.has_datum:
            return None
        relevant = self.relevant_assets(utxo)
        if len(relevant) not in (2, 3):
            return None
        lp_units = [u.unit for u in utxo.amount if is_lp_token(u.unit)]
        return self.build_pool(utxo, *self.pick_pair(relevant), pool_id=lp_units[-1] if lp_units else pool_id)

    def parse_datum(self, datum_cbor: bytes) -> CSwapPoolDatum:
        return CSwapPoolDatum.from_cbor(datum_cbor)

    def apply_datum(self, pool: LiquidityPool, utxo: Utxo, datum: CSwapPoolDatum) -> LiquidityPool:
        return self.with_fields(pool, total_lp_tokens=datum.total_lp, pool_fee_percent=datum.lp_fee / 100)
