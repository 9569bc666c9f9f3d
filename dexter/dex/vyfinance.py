"""VyFinance - constant product AMM; pools are listed by the VyFi API, not by address."""

import json
import logging
from typing import Any, ClassVar, Dict, List, Optional

import aiohttp
from pydantic import BaseModel, Field, ValidationError

from dexter.cache import MetadataCache, PoolMetadata
from dexter.errors import IndexerHTTPError, PoolNotFound
from dexter.fetching import ScanOutcome, matches_pair, with_deadline, with_retry
from dexter.models import LiquidityPool, Utxo
from dexter.types import Token, TokenLike
from dexter.utils import LOVELACE, asset_pattern, join_policy_id
from .base import BaseDex
from .plutus_common import as_int, constr_fields

logger = logging.getLogger(__name__)

IDENTIFIER = "VYFINANCE"
VYFI_API_URL = "https://api.vyfi.io/lp?networkId=1&v2=true"


class VyfiPoolEntry(BaseModel):
    """One entry of the VyFi pool list. `json` is a JSON document in a string."""
    pool_json: str = Field(alias="json")
    units_pair: Optional[str] = Field(default=None, alias="unitsPair")
    pool_address: Optional[str] = Field(default=None, alias="poolValidatorUtxoAddress")
    lp_token: Optional[str] = Field(default=None, alias="lpPolicyId-assetId")
    decimals_a: Optional[int] = Field(default=None, alias="tokenADecimals")
    decimals_b: Optional[int] = Field(default=None, alias="tokenBDecimals")

    def to_metadata(self) -> Optional[PoolMetadata]:
        try:
            nft = json.loads(self.pool_json).get("mainNFT") or {}
        except (ValueError, AttributeError):
            return None
        if not nft.get("currencySymbol") or not self.units_pair or "/" not in self.units_pair:
            return None
        unit_a, unit_b = (join_policy_id(u) or LOVELACE for u in self.units_pair.split("/", 1))
        return PoolMetadata(
            pool_id=nft["currencySymbol"] + nft.get("tokenName", ""),
            asset_a=unit_a,
            asset_b=unit_b,
            decimals_a=self.decimals_a or 0,
            decimals_b=self.decimals_b or 0,
            pool_address=self.pool_address,
            lp_token=join_policy_id(self.lp_token) if self.lp_token else None,
        )


def parse_pool_list(entries: List[Dict[str, Any]]) -> Dict[str, PoolMetadata]:
    """Metadata keyed by pool NFT unit. Unusable entries are skipped."""
    metadata = {}
    for raw in entries:
        try:
            meta = VyfiPoolEntry.model_validate(raw).to_metadata()
        except ValidationError as e:
            logger.debug(f"Skipping VyFi entry: {e.error_count()} validation errors")
            continue
        if meta is not None:
            metadata[meta.pool_id] = meta
    return metadata


class VyFinance(BaseDex):
    """
    Each pool UTxO is found by its main NFT. Bar fees accrued in the pool are
    not liquidity and are removed from the reserves.
    """
    IDENTIFIER: ClassVar[str] = IDENTIFIER

    def __init__(self, fetcher, api_url: str = VYFI_API_URL, session: Optional[aiohttp.ClientSession] = None):
        super().__init__(fetcher)
        self.api_url = api_url
        self._session = session
        self.metadata: Dict[str, PoolMetadata] = {}

    @property
    def pool_addresses(self) -> List[str]:
        return sorted({m.pool_address for m in self.metadata.values() if m.pool_address})

    # ----- metadata -----

    async def fetch_pool_metadata(self) -> Dict[str, PoolMetadata]:
        """Full pool list from the VyFi API."""
        entries = await with_retry(self._get_pool_list, self.fetcher.retry_policy, f"GET {self.api_url}")
        if not isinstance(entries, list):
            raise ValueError(f"VyFi API returned {type(entries).__name__}, expected a list")
        metadata = parse_pool_list(entries)
        logger.info(f"VyFi API lists {len(metadata)} pools")
        return metadata

    async def _get_pool_list(self) -> Any:
        if self._session is not None:
            return await self._request(self._session)
        async with aiohttp.ClientSession() as session:
            return await self._request(session)

    async def _request(self, session: aiohttp.ClientSession) -> Any:
        async with session.get(self.api_url) as response:
            body = await response.text()
            if response.status >= 400:
                raise IndexerHTTPError(response.status, self.api_url, body)
        return json.loads(body)

    async def ensure_metadata(self) -> Dict[str, PoolMetadata]:
        if not self.metadata:
            self.metadata.update(await self.fetch_pool_metadata())
        return self.metadata

    # ----- decoding -----

    def full_pool_id(self, pool_id: str) -> str:
        return join_policy_id(pool_id)

    def pool_from_utxo(self, utxo: Utxo, pool_id: str = "") -> Optional[LiquidityPool]:
        if not utxo.has_datum:
            return None
        nft = pool_id if pool_id and utxo.has_unit(pool_id) else next(
            (u for u in utxo.units if u in self.metadata), None
        )
        if nft is None:
            return None
        pair = self.pick_pair([u for u in utxo.amount if u.unit != nft])
        if pair is None:
            return None
        pool = self.build_pool(utxo, *pair, pool_id=nft)
        meta = self.metadata.get(nft)
        if meta is None:
            return pool
        return self.with_fields(
            pool,
            asset_a=pool.asset_a if pool.asset_a.is_ada else pool.asset_a.with_decimals(meta.decimals_of(pair[0].unit)),
            asset_b=pool.asset_b if pool.asset_b.is_ada else pool.asset_b.with_decimals(meta.decimals_of(pair[1].unit)),
        )

    def apply_datum(self, pool: LiquidityPool, utxo: Utxo, datum: Any) -> LiquidityPool:
        # bar_fee_a, bar_fee_b, total_lp, ...
        fields = constr_fields(datum, 3)
        return self.with_fields(
            pool,
            reserve_a=max(pool.reserve_a - as_int(fields[0]), 0),
            reserve_b=max(pool.reserve_b - as_int(fields[1]), 0),
            total_lp_tokens=as_int(fields[2]),
        )

    # ----- queries -----

    async def all_pool_utxos(self) -> List[Utxo]:
        """First UTxO holding each listed pool NFT."""
        metadata = await self.ensure_metadata()
        outcomes = await self.fetcher.scan(list(metadata), self._pool_utxo)
        return ScanOutcome.collect(outcomes)

    async def _pool_utxo(self, nft: str) -> Optional[Utxo]:
        utxos = await self.fetcher.utxos(asset_pattern(nft))
        return utxos[0] if utxos else None

    async def _pool_for_nft(self, nft: str) -> Optional[LiquidityPool]:
        utxo = await self._pool_utxo(nft)
        if utxo is None:
            return None
        return await self.pool_from_utxo_extend(utxo, nft)

    async def _pool_from_pool_id(self, pool_id: str) -> LiquidityPool:
        outcome, = await self.fetcher.scan([pool_id], self._pool_for_nft)
        if not outcome.decoded:
            raise PoolNotFound(f"{IDENTIFIER}: no pool with id {pool_id}")
        return outcome.value

    async def _pools_from_token_pair(self, token_a: Token, token_b: Token) -> List[LiquidityPool]:
        metadata = await self.ensure_metadata()
        return await self._pools_for(
            [m.pool_id for m in metadata.values() if m.trades(token_a, token_b)], token_a, token_b
        )

    async def _pools_for(self, nfts: List[str], token_a: Token, token_b: Token) -> List[LiquidityPool]:
        outcomes = await self.fetcher.scan(nfts, self._pool_for_nft)
        pools = [p for p in ScanOutcome.collect(outcomes) if matches_pair(p, token_a, token_b)]
        if not pools:
            raise PoolNotFound(f"{IDENTIFIER}: no pools for {token_a}/{token_b}")
        return pools

    async def pools_from_token_pair_cached(
        self,
        token_a: TokenLike,
        token_b: TokenLike,
        cache: MetadataCache,
        timeout: Optional[float] = None,
    ) -> List[LiquidityPool]:
        """
        Same as pools_from_token_pair, but pool metadata comes from `cache`.

        The VyFi API is only called when the cache has no pool for the pair;
        the identifiers it returns that the cache lacks are merged in.
        """
        token_a, token_b = Token.coerce(token_a), Token.coerce(token_b)
        return await with_deadline(self._pools_from_token_pair_cached(token_a, token_b, cache), timeout)

    async def _pools_from_token_pair_cached(self, token_a: Token, token_b: Token, cache: MetadataCache) -> List[LiquidityPool]:
        entries = [m for m in cache.values() if m.trades(token_a, token_b)]
        if not entries:
            added = cache.merge(await self.fetch_pool_metadata())
            logger.info(f"Added {added} pools to metadata cache")
            entries = [m for m in cache.values() if m.trades(token_a, token_b)]
        self.metadata.update(cache.as_dict())
        return await self._pools_for([m.pool_id for m in entries], token_a, token_b)
