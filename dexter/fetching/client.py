"""Indexer client protocol for fetching UTxOs."""

from typing import List, Optional, Protocol, runtime_checkable

from dexter.models import Utxo


@runtime_checkable
class IndexerClient(Protocol):
    """
    Interface for UTxO indexers (Kupo, or an in-memory fake in tests).

    Patterns follow Kupo's match syntax: an address, `policy.name`,
    `policy.*` or `{credential}/*`.
    """

    async def get_utxos(self, pattern: str, unspent: bool = True) -> List[Utxo]:
        """Fetch UTxOs matching a pattern, in indexer order."""
        ...

    async def get_datum(self, datum_hash: str) -> Optional[bytes]:
        """Fetch datum CBOR by hash. None when the indexer does not know it."""
        ...
