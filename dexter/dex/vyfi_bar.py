"""VyFi Bar - exchange rate between a staked base asset and its derived token."""

from dataclasses import dataclass
from typing import ClassVar, List, Optional

from pycardano import PlutusData

from dexter.errors import DatumDecodeFailure, PoolNotFound
from dexter.fetching import Fetcher, with_deadline
from dexter.models import Rate, Utxo
from dexter.utils import LOVELACE

IDENTIFIER = "VyfiBar"


@dataclass
class BarReserve(PlutusData):
    reserve_a: int
    CONSTR_ID: ClassVar[int] = 0


@dataclass
class VyfiBarDatum(PlutusData):
    """Bar datum: Constr[Constr[ReserveA]]."""
    reserve: BarReserve
    CONSTR_ID: ClassVar[int] = 0


def kupo_pattern(pool_identifier: str) -> str:
    """`policy.` or `policy` -> `policy.*`; `policy.name` is kept."""
    policy_id, _, name = pool_identifier.partition(".")
    return f"{policy_id}.{name or '*'}"


class VyfiBar:
    IDENTIFIER: ClassVar[str] = IDENTIFIER

    def __init__(self, fetcher: Fetcher):
        self.fetcher = fetcher

    @property
    def identifier(self) -> str:
        return IDENTIFIER

    @property
    def pool_addresses(self) -> List[str]:
        return []

    @property
    def lp_token_policy_id(self) -> str:
        return ""

    def decode(self, utxo: Utxo, datum_cbor: Optional[bytes], pool_identifier: str = "") -> Optional[Rate]:
        """Base asset is the first non-lovelace unit outside the bar's own policy."""
        if datum_cbor is None:
            return None
        policy_id = pool_identifier.split(".")[0]
        base = next(
            (u for u in utxo.amount if u.unit != LOVELACE and not (policy_id and u.unit.startswith(policy_id))),
            None,
        )
        if base is None:
            raise DatumDecodeFailure(utxo.utxo_id, f"no base asset for {pool_identifier}")
        try:
            datum = VyfiBarDatum.from_cbor(datum_cbor)
        except Exception as e:
            raise DatumDecodeFailure(utxo.utxo_id, str(e) or repr(e)) from e
        return Rate(pool_identifier=pool_identifier, base_asset=base.quantity, derived_asset=datum.reserve.reserve_a)

    async def rate(self, pool_identifier: str, timeout: Optional[float] = None) -> Rate:
        return await with_deadline(self._rate(pool_identifier), timeout)

    async def _rate(self, pool_identifier: str) -> Rate:
        utxos = await self.fetcher.utxos(kupo_pattern(pool_identifier))
        if not utxos:
            raise PoolNotFound(f"{IDENTIFIER}: no UTxO for {pool_identifier}")
        utxo = utxos[0]
        rate = self.decode(utxo, await self.fetcher.datum(utxo), pool_identifier)
        if rate is None:
            raise PoolNotFound(f"{IDENTIFIER}: UTxO {utxo.utxo_id} has no datum")
        return rate
