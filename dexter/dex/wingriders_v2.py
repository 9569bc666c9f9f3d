"""WingRiders V2 - constant product and stable pools behind one validity token."""

import logging
from typing import Any, ClassVar, List, Optional

from dexter.models import LiquidityPool, StablePool, Utxo
from dexter.numeric.stableswap import compute_d
from .base import BaseDex
from .plutus_common import as_int, constr_fields, is_nonempty_constr
from .wingriders import pool_id_from_utxo, without_deposit

logger = logging.getLogger(__name__)

IDENTIFIER = "WINGRIDERV2"
POOL_VALIDITY_POLICY = "6fdc63a1d71dc2c65502b79baae7fb543185702b12c3c5fb639ed737"
POOL_VALIDITY_ASSET = f"{POOL_VALIDITY_POLICY}4c"  # "L"
STABLE_VARIANT_FIELD = 20


class WingRidersV2(BaseDex):
    """
    Datum fields used:
        5..8    swap, protocol, project and reserve fees (basis points)
        12, 13  treasury a / b
        14, 15  project treasury a / b (optional)
        20      pool variant; a non-empty constructor is a stable pool
                whose first field is the amplification coefficient
    """
    IDENTIFIER: ClassVar[str] = IDENTIFIER
    POOL_ADDRESSES: ClassVar[List[str]] = [f"{POOL_VALIDITY_POLICY}.4c"]
    LP_TOKEN_POLICY_ID: ClassVar[str] = POOL_VALIDITY_POLICY

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
        fields = constr_fields(datum, 14)
        fee_basis_points = sum(as_int(f) for f in fields[5:9])
        project_a = as_int(fields[14]) if len(fields) > 14 else 0
        project_b = as_int(fields[15]) if len(fields) > 15 else 0
        pool = self.with_fields(
            pool,
            reserve_a=max(pool.reserve_a - as_int(fields[12]) - project_a, 0),
            reserve_b=max(pool.reserve_b - as_int(fields[13]) - project_b, 0),
            pool_fee_percent=fee_basis_points / 100,
        )
        if len(fields) > STABLE_VARIANT_FIELD and is_nonempty_constr(fields[STABLE_VARIANT_FIELD]):
            return self.stable_pool(pool, constr_fields(fields[STABLE_VARIANT_FIELD], 1))
        return pool

    def stable_pool(self, pool: LiquidityPool, variant: List[Any]) -> StablePool:
        amplification = as_int(variant[0])
        d = compute_d([pool.reserve_a, pool.reserve_b], amplification)
        logger.debug(f"{pool.pool_id}: stable pool A={amplification} D={d}")
        return self.promote(pool, StablePool, amplification_coefficient=amplification, total_liquidity=d)
