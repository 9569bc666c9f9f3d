"""Base classes for DEX adapters."""

import logging
from abc import ABC, abstractmethod
from dataclasses import fields, replace
from typing import Any, ClassVar, List, Optional, Protocol, Tuple, Type, TypeVar, runtime_checkable

from dexter.errors import DatumDecodeFailure, InvariantSolveDidNotConverge, PoolNotFound, UndefinedPrice
from dexter.fetching import Fetcher, ScanOutcome, matches_pair, with_deadline
from dexter.models import LiquidityPool, Unit, Utxo
from dexter.types import Token, TokenLike
from dexter.utils import LOVELACE
from .plutus_common import decode_datum

logger = logging.getLogger(__name__)

P = TypeVar("P", bound=LiquidityPool)


@runtime_checkable
class Decoder(Protocol):
    """Capabilities every protocol adapter exposes."""
    identifier: str
    pool_addresses: List[str]
    lp_token_policy_id: str

    def decode(self, utxo: Utxo, datum_cbor: Optional[bytes]) -> Any: ...


class BaseDex(ABC):
    """
    Base class for AMM pool adapters.

    Subclasses build the balance-only pool in `pool_from_utxo` and fold
    datum fields in with `apply_datum`. Scanning, pair matching and the
    datum lookups are shared.
    """
    IDENTIFIER: ClassVar[str] = ""
    POOL_ADDRESSES: ClassVar[List[str]] = []
    LP_TOKEN_POLICY_ID: ClassVar[str] = ""
    POOL_ID_POLICY: ClassVar[str] = ""  # defaults to LP_TOKEN_POLICY_ID
    IGNORED_POLICIES: ClassVar[List[str]] = []
    FEE_PERCENT: ClassVar[float] = 0.3

    def __init__(self, fetcher: Fetcher):
        self.fetcher = fetcher

    @property
    def identifier(self) -> str:
        return self.IDENTIFIER

    @property
    def pool_addresses(self) -> List[str]:
        return self.POOL_ADDRESSES

    @property
    def lp_token_policy_id(self) -> str:
        return self.LP_TOKEN_POLICY_ID

    # ----- decoding -----

    @abstractmethod
    def pool_from_utxo(self, utxo: Utxo, pool_id: str = "") -> Optional[LiquidityPool]:
        """Pool from UTxO balances alone. None if the UTxO is not one of ours."""

    def parse_datum(self, datum_cbor: bytes) -> Any:
        return decode_datum(datum_cbor)

    def apply_datum(self, pool: LiquidityPool, utxo: Utxo, datum: Any) -> Optional[LiquidityPool]:
        return pool

    def decode(self, utxo: Utxo, datum_cbor: Optional[bytes], pool_id: str = "") -> Optional[LiquidityPool]:
        """Balance pool with datum fields applied. Raises DatumDecodeFailure; solver errors propagate."""
        pool = self.pool_from_utxo(utxo, pool_id)
        if pool is None or datum_cbor is None:
            return pool
        try:
            return self.apply_datum(pool, utxo, self.parse_datum(datum_cbor))
        except (DatumDecodeFailure, InvariantSolveDidNotConverge, UndefinedPrice):
            raise
        except Exception as e:
            raise DatumDecodeFailure(utxo.utxo_id, str(e) or repr(e)) from e

    async def pool_from_utxo_extend(self, utxo: Utxo, pool_id: str = "") -> Optional[LiquidityPool]:
        """Pool with datum fields, fetching the datum by hash when it is not inline."""
        if self._try_pool_from_utxo(utxo, pool_id) is None:
            return None
        datum_cbor = await self.fetcher.datum(utxo)
        if datum_cbor is None:
            logger.debug(f"No datum for {utxo.utxo_id}")
            return None
        return self.decode(utxo, datum_cbor, pool_id)

    def _try_pool_from_utxo(self, utxo: Utxo, pool_id: str = "") -> Optional[LiquidityPool]:
        try:
            return self.pool_from_utxo(utxo, pool_id)
        except (ValueError, DatumDecodeFailure) as e:
            logger.debug(f"Failed to parse pool {utxo.utxo_id}: {e}")
            return None

    # ----- shared helpers for pool_from_utxo -----

    def relevant_assets(self, utxo: Utxo) -> List[Unit]:
        """UTxO units minus LP, NFT and validity tokens."""
        ignored = [p for p in [self.LP_TOKEN_POLICY_ID, *self.IGNORED_POLICIES] if p]
        return [u for u in utxo.amount if not any(u.unit.startswith(p) for p in ignored)]

    @staticmethod
    def pick_pair(assets: List[Unit]) -> Optional[Tuple[Unit, Unit]]:
        """With two units they are the pair; with more the first is spare lovelace."""
        if len(assets) < 2:
            return None
        if len(assets) == 2:
            return assets[0], assets[1]
        return assets[1], assets[2]

    def build_pool(
        self,
        utxo: Utxo,
        unit_a: Unit,
        unit_b: Unit,
        pool_id: str,
        **kwargs,
    ) -> LiquidityPool:
        kwargs.setdefault("pool_fee_percent", self.FEE_PERCENT)
        return LiquidityPool(
            dex_identifier=self.identifier,
            asset_a=token_from_unit(unit_a.unit),
            asset_b=token_from_unit(unit_b.unit),
            reserve_a=unit_a.quantity,
            reserve_b=unit_b.quantity,
            address=utxo.address,
            pool_id=pool_id,
            utxo_id=utxo.utxo_id,
            **kwargs,
        )

    @staticmethod
    def with_fields(pool: LiquidityPool, **changes) -> LiquidityPool:
        return replace(pool, **changes)

    @staticmethod
    def promote(pool: LiquidityPool, pool_cls: Type[P], **extra) -> P:
        """Rebuild a balance pool as a richer pool model."""
        values = {f.name: getattr(pool, f.name) for f in fields(pool)}
        values.update(extra)
        return pool_cls(**values)

    # ----- queries -----

    async def all_pool_utxos(self) -> List[Utxo]:
        """Every UTxO at the pool addresses, in indexer order."""
        return await self.fetcher.utxos_at(self.pool_addresses)

    def full_pool_id(self, pool_id: str) -> str:
        policy = self.POOL_ID_POLICY or self.LP_TOKEN_POLICY_ID
        if policy and not pool_id.startswith(policy):
            return policy + pool_id
        return pool_id

    async def pool_from_pool_id(self, pool_id: str, timeout: Optional[float] = None) -> LiquidityPool:
        return await with_deadline(self._pool_from_pool_id(self.full_pool_id(pool_id)), timeout)

    async def _pool_from_pool_id(self, pool_id: str) -> LiquidityPool:
        for utxo in await self.all_pool_utxos():
            base = self._try_pool_from_utxo(utxo, pool_id)
            if base is None or base.pool_id != pool_id:
                continue
            outcome, = await self.fetcher.scan([utxo], lambda u: self.pool_from_utxo_extend(u, pool_id))
            if outcome.decoded:
                return outcome.value
        raise PoolNotFound(f"{self.identifier}: no pool with id {pool_id}")

    async def pools_from_token_pair(
        self,
        token_a: TokenLike,
        token_b: TokenLike,
        timeout: Optional[float] = None,
    ) -> List[LiquidityPool]:
        """Pools trading the unordered pair. Raises PoolNotFound when there are none."""
        return await with_deadline(
            self._pools_from_token_pair(Token.coerce(token_a), Token.coerce(token_b)), timeout
        )

    async def _pools_from_token_pair(self, token_a: Token, token_b: Token) -> List[LiquidityPool]:
        candidates = []
        for utxo in await self.all_pool_utxos():
            base = self._try_pool_from_utxo(utxo)
            if base is not None and matches_pair(base, token_a, token_b):
                candidates.append(utxo)
        outcomes = await self.fetcher.scan(candidates, self.pool_from_utxo_extend)
        pools = [p for p in ScanOutcome.collect(outcomes) if matches_pair(p, token_a, token_b)]
        if not pools:
            raise PoolNotFound(f"{self.identifier}: no pools for {token_a}/{token_b}")
        logger.info(f"{self.identifier}: {len(pools)} pools for {pools[0].pair()}")
        return pools

    async def all_pools(self, timeout: Optional[float] = None) -> List[LiquidityPool]:
        """Every decodable pool, datum fields included."""
        return await with_deadline(self._all_pools(), timeout)

    async def _all_pools(self) -> List[LiquidityPool]:
        outcomes = await self.fetcher.scan(await self.all_pool_utxos(), self.pool_from_utxo_extend)
        return ScanOutcome.collect(outcomes)


def token_from_unit(unit: str, decimals: int = 0) -> Token:
    return Token.ada() if unit == LOVELACE else Token.from_identifier(unit, decimals)
