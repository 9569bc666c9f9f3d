"""Error kinds raised by the library."""

from typing import Optional


class DexterError(Exception):
    """Base exception for dexter errors."""


class InvalidTokenId(DexterError, ValueError):
    """Token identifier is not `lovelace` or policy id + hex asset name."""

    def __init__(self, identifier: str, reason: str):
        super().__init__(f"Invalid token identifier {identifier!r}: {reason}")
        self.identifier = identifier
        self.reason = reason


class IndexerHTTPError(DexterError):
    """Indexer answered with a non-success HTTP status."""

    def __init__(self, status: int, url: str, body: str = ""):
        super().__init__(f"HTTP {status} from {url}" + (f": {body[:200]}" if body else ""))
        self.status = status
        self.url = url
        self.body = body


class IndexerUnavailable(DexterError):
    """
    Indexer call failed for good.

    Raised after retries are exhausted for a transient error, or immediately
    for a permanent one. The message is the last error's text.
    """

    def __init__(self, description: str, last_error: BaseException, attempts: int):
        super().__init__(str(last_error) or repr(last_error))
        self.description = description
        self.last_error = last_error
        self.attempts = attempts


class DatumDecodeFailure(DexterError):
    """A single UTxO's datum could not be decoded into the protocol's layout."""

    def __init__(self, utxo_id: str, reason: str):
        super().__init__(f"Cannot decode datum of {utxo_id}: {reason}")
        self.utxo_id = utxo_id
        self.reason = reason


class PoolNotFound(DexterError, LookupError):
    """Requested pool or pair is absent after a full scan."""


class CacheIOError(DexterError):
    """Metadata cache could not be read or written."""

    def __init__(self, path: str, reason: str, cause: Optional[BaseException] = None):
        super().__init__(f"Metadata cache {path}: {reason}")
        self.path = path
        self.cause = cause


class InvariantSolveDidNotConverge(DexterError, ArithmeticError):
    """Iterative invariant solver hit its iteration bound."""


class UndefinedPrice(DexterError, ZeroDivisionError):
    """Spot price requested for a pool with an empty base reserve."""


class DeadlineExceeded(DexterError, TimeoutError):
    """Caller deadline elapsed before all lookups finished."""
