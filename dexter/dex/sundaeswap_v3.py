"""SundaeSwap V3 - constant product AMM with protocol fees held in lovelace."""

from typing import Any, ClassVar, List, Optional

from dexter.models import LiquidityPool, Utxo
from .base import BaseDex
from .plutus_common import as_int, constr_fields

IDENTIFIER = "SUNDAESWAPV3"
POOL_ADDRESSES = [
    "addr1x8srqftqemf0mjlukfszd97ljuxdp44r372txfcr75wrz26rnxqnmtv3hdu2t6chcfhl2zzjh36a87nmd6dwsu3jenqsslnz7e",
    "addr1z8srqftqemf0mjlukfszd97ljuxdp44r372txfcr75wrz2auzrlrz2kdd83wzt9u9n9qt2swgvhrmmn96k55nq6yuj4qw992w9",
]
LP_TOKEN_POLICY = "e0302560ced2fdcbfcb2602697df970cd0d6a38f94b32703f51c312b"


class SundaeSwapV3(BaseDex):
    IDENTIFIER: ClassVar[str] = IDENTIFIER
    POOL_ADDRESSES: ClassVar[List[str]] = POOL_ADDRESSES
    LP_TOKEN_POLICY_ID: ClassVar[str] = LP_TOKEN_POLICY

    def pool_from_utxo(self, utxo: Utxo, pool_id: str = "") -> Optional[LiquidityPool]:
        if not utxo.has_datum:
            return None
        relevant = self.relevant_assets(utxo)
        if len(relevant) not in (2, 3):
            return None
        lp_units = utxo.units_with_policy(LP_TOKEN_POLICY)
        return self.build_pool(utxo, *self.pick_pair(relevant), pool_id=lp_units[-1].unit if lp_units else pool_id)

    def apply_datum(self, pool: LiquidityPool, utxo: Utxo, datum: Any) -> LiquidityPool:
        # identifier, assets, circulating_lp, bid_fee, ask_fee, fee_manager,
        # market_open, protocol_fees
        fields = constr_fields(datum, 8)
        changes = dict(total_lp_tokens=as_int(fields[2]), pool_fee_percent=as_int(fields[4]) / 100)
        # Accrued protocol fees sit in the lovelace balance but are not liquidity
        deduction = abs(as_int(fields[7]))
        if pool.asset_a.is_ada:
            changes["reserve_a"] = max(pool.reserve_a - deduction, 0)
        elif pool.asset_b.is_ada:
            changes["reserve_b"] = max(pool.reserve_b - deduction, 0)
        return self.with_fields(pool, **changes)
