"""WingRiders V1 - constant product AMM with 0.35% fee and treasury held in the pool."""

from typing import Any, ClassVar, List, Optional

from dexter.models import LiquidityPool, Utxo
from dexter.utils import LOVELACE
from .base import BaseDex
from .plutus_common import as_int, constr_fields

IDENTIFIER = "WINGRIDER"
POOL_VALIDITY_POLICY = "026a18d04a0c642759bb3d83b12e3344894e5c1c7b2aeb1a2113a570"
POOL_VALIDITY_ASSET = f"{POOL_VALIDITY_POLICY}4c"  # "L"
MIN_POOL_ADA = 3_000_000


def pool_id_from_utxo(utxo: Utxo, validity_policy: str, validity_asset: str, default: str) -> str:
    units = [u.unit for u in utxo.units_with_policy(validity_policy) if u.unit != validity_asset]
    return units[0] if units else default


class WingRiders(BaseDex):
    """The ADA side of every pool carries a 3 ADA deposit that is not liquidity."""
    IDENTIFIER: ClassVar[str] = IDENTIFIER
    POOL_ADDRESSES: ClassVar[List[str]] = [f"{POOL_VALIDITY_POLICY}.4c"]
    LP_TOKEN_POLICY_ID: ClassVar[str] = POOL_VALIDITY_POLICY
    FEE_PERCENT: ClassVar[float] = 0.35

    def pool_from_utxo(self, utxo: Utxo, pool_id: str = "") -> Optional[LiquidityPool]:
        if not utxo.has_datum:
            return None
        pair = self.pick_pair(self.relevant_assets(utxo))
        if pair is None:
            return None
        pool = self.build_pool(
            utxo, *pair,
            pool_id=pool_id_from_utxo(utxo, POOL_VALIDITY_POLICY, POOL_VALIDITY_ASSET, pool_id),
        )
        return self.with_fields(
            pool,
            reserve_a=without_deposit(pair[0].unit, pool.reserve_a),
            reserve_b=without_deposit(pair[1].unit, pool.reserve_b),
        )

    def apply_datum(self, pool: LiquidityPool, utxo: Utxo, datum: Any) -> LiquidityPool:
        # Constr[request_validator_hash, Constr[asset_a, asset_b, treasury_a, treasury_b, ...]]
        inner = constr_fields(constr_fields(datum, 2)[1], 4)
        return self.with_fields(
            pool,
            reserve_a=max(pool.reserve_a - as_int(inner[2]), 0),
            reserve_b=max(pool.reserve_b - as_int(inner[3]), 0),
        )


def without_deposit(unit: str, quantity: int) -> int:
    return max(quantity - MIN_POOL_ADA, 0) if unit == LOVELACE else quantity
