"""Retried indexer access and fault tolerant fan-out over UTxOs."""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, Iterable, List, Optional, Sequence, TypeVar

from dexter.errors import DatumDecodeFailure, DeadlineExceeded, IndexerUnavailable
from dexter.models import LiquidityPool, Utxo
from dexter.types import Token
from .client import IndexerClient
from .retry import DEFAULT_RETRY_POLICY, RetryPolicy, with_retry

logger = logging.getLogger(__name__)

T = TypeVar("T")
V = TypeVar("V")

DEFAULT_CONCURRENCY = 5


class OutcomeStatus(str, Enum):
    DECODED = "decoded"
    SKIPPED = "skipped"
    ERRORED = "errored"


@dataclass(frozen=True)
class ScanOutcome(Generic[T, V]):
    """What happened to one scanned item. Only decoded outcomes carry a value."""
    item: T
    status: OutcomeStatus
    value: Optional[V] = None
    error: Optional[Exception] = None

    @property
    def decoded(self) -> bool:
        return self.status is OutcomeStatus.DECODED

    @staticmethod
    def collect(outcomes: Iterable["ScanOutcome"]) -> List[Any]:
        return [o.value for o in outcomes if o.decoded]


def matches_pair(pool: LiquidityPool, token_a: Token, token_b: Token) -> bool:
    """Unordered pair match."""
    return {pool.asset_a, pool.asset_b} == {token_a, token_b}


async def with_deadline(operation: Awaitable[T], timeout: Optional[float]) -> T:
    """Await `operation`, cancelling everything it started once `timeout` seconds pass."""
    if timeout is None:
        return await operation
    try:
        return await asyncio.wait_for(operation, timeout)
    except asyncio.TimeoutError as e:
        raise DeadlineExceeded(f"Deadline of {timeout}s exceeded") from e


class Fetcher:
    """Wraps an IndexerClient with retries and bounded concurrency."""

    def __init__(
        self,
        client: IndexerClient,
        retry_policy: RetryPolicy = DEFAULT_RETRY_POLICY,
        concurrency: int = DEFAULT_CONCURRENCY,
    ):
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.client = client
        self.retry_policy = retry_policy
        self.concurrency = concurrency

    async def utxos(self, pattern: str, unspent: bool = True) -> List[Utxo]:
        return await with_retry(
            lambda: self.client.get_utxos(pattern, unspent),
            self.retry_policy,
            f"match {pattern}",
        )

    async def utxos_at(self, patterns: Sequence[str]) -> List[Utxo]:
        """Query several patterns concurrently; results keep pattern order."""
        results = await asyncio.gather(*(self.utxos(p) for p in patterns))
        return [utxo for batch in results for utxo in batch]

    async def datum(self, utxo: Utxo) -> Optional[bytes]:
        """Get datum CBOR from UTxO (inline or by hash)."""
        if utxo.inline_datum:
            try:
                return bytes.fromhex(utxo.inline_datum)
            except ValueError as e:
                raise DatumDecodeFailure(utxo.utxo_id, f"inline datum is not hex: {e}") from e
        if utxo.datum_hash:
            return await with_retry(
                lambda: self.client.get_datum(utxo.datum_hash),
                self.retry_policy,
                f"datum {utxo.datum_hash}",
            )
        return None

    async def scan(
        self,
        items: Sequence[T],
        decode: Callable[[T], Awaitable[Optional[V]]],
        timeout: Optional[float] = None,
    ) -> List[ScanOutcome]:
        """
        Decode every item with at most `concurrency` decodes in flight.

        A decode failure or failed lookup only drops its own item. The
        outcomes come back in input order.
        """
        semaphore = asyncio.Semaphore(self.concurrency)

        async def run(item: T) -> ScanOutcome:
            async with semaphore:
                try:
                    value = await decode(item)
                except (DatumDecodeFailure, IndexerUnavailable) as e:
                    logger.debug(f"Dropping {getattr(item, 'utxo_id', item)}: {e}")
                    return ScanOutcome(item, OutcomeStatus.ERRORED, error=e)
            if value is None:
                return ScanOutcome(item, OutcomeStatus.SKIPPED)
            return ScanOutcome(item, OutcomeStatus.DECODED, value=value)

        outcomes = await with_deadline(asyncio.gather(*(run(i) for i in items)), timeout)
        errored = sum(1 for o in outcomes if o.status is OutcomeStatus.ERRORED)
        if errored:
            logger.info(f"Scanned {len(outcomes)} items, {errored} failed to decode")
        return outcomes
