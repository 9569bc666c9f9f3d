"""Concentrated-liquidity pools - reserves come from the tick ranges around the current price."""

import logging
from typing import Any, ClassVar, List, Optional

from dexter.models import ConcentratedPool, LiquidityPool, Utxo
from dexter.numeric.concentrated import TickRange, active_ranges
from .base import BaseDex, token_from_unit
from .plutus_common import as_int, as_list, asset_unit, constr_fields

logger = logging.getLogger(__name__)

IDENTIFIER = "Concentrated"


def parse_range(value: Any) -> TickRange:
    lower, upper, reserve_a, reserve_b = (as_int(f) for f in constr_fields(value, 4)[:4])
    return TickRange(lower_tick=lower, upper_tick=upper, reserve_a=reserve_a, reserve_b=reserve_b)


class ConcentratedLiquidity(BaseDex):
    """
    Pool datum:
        Constr[asset_a, asset_b, fee_basis_points, current_tick,
               [Constr[lower_tick, upper_tick, reserve_a, reserve_b], ...],
               total_lp]

    Only ranges with lower_tick <= current_tick < upper_tick make up the
    reserves. The pool is identified by the unit of `pool_id_policy` it holds.
    """
    IDENTIFIER: ClassVar[str] = IDENTIFIER

    def __init__(self, fetcher, pool_address: str, pool_id_policy: str, identifier: str = IDENTIFIER):
        super().__init__(fetcher)
        self.pool_address = pool_address
        self.pool_id_policy = pool_id_policy
        self._identifier = identifier

    @property
    def identifier(self) -> str:
        return self._identifier

    @property
    def pool_addresses(self) -> List[str]:
        return [self.pool_address]

    @property
    def lp_token_policy_id(self) -> str:
        return self.pool_id_policy

    def full_pool_id(self, pool_id: str) -> str:
        return pool_id if pool_id.startswith(self.pool_id_policy) else self.pool_id_policy + pool_id

    def relevant_assets(self, utxo: Utxo):
        return [u for u in utxo.amount if not u.unit.startswith(self.pool_id_policy)]

    def pool_from_utxo(self, utxo: Utxo, pool_id: str = "") -> Optional[LiquidityPool]:
        if not utxo.has_datum:
            return None
        ids = utxo.units_with_policy(self.pool_id_policy)
        pair = self.pick_pair(self.relevant_assets(utxo))
        if not ids or pair is None:
            return None
        return self.build_pool(utxo, *pair, pool_id=ids[0].unit)

    def apply_datum(self, pool: LiquidityPool, utxo: Utxo, datum: Any) -> ConcentratedPool:
        fields = constr_fields(datum, 6)
        unit_a, unit_b = asset_unit(fields[0]), asset_unit(fields[1])
        if {unit_a, unit_b} != {pool.asset_a.identifier(), pool.asset_b.identifier()}:
            raise ValueError(f"datum pair {unit_a}/{unit_b} does not match pool balances")
        current_tick = as_int(fields[3])
        active = active_ranges((parse_range(r) for r in as_list(fields[4])), current_tick)
        logger.debug(f"{pool.pool_id}: {len(active)} ranges active at tick {current_tick}")
        return self.promote(
            pool,
            ConcentratedPool,
            asset_a=token_from_unit(unit_a),
            asset_b=token_from_unit(unit_b),
            reserve_a=sum(r.reserve_a for r in active),
            reserve_b=sum(r.reserve_b for r in active),
            pool_fee_percent=as_int(fields[2]) / 100,
            total_lp_tokens=as_int(fields[5]),
            current_tick=current_tick,
            active_ranges=active,
        )
