"""
File-backed pool metadata cache.

Maps pool identifiers to metadata that only an external API knows
(asset decimals, pool address, LP token). The file is plain JSON and is
replaced atomically on save.
"""

import logging
import os
import tempfile
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, TypeAdapter, ValidationError

from dexter.errors import CacheIOError
from dexter.types import Token

logger = logging.getLogger(__name__)


class PoolMetadata(BaseModel):
    pool_id: str
    asset_a: str
    asset_b: str
    decimals_a: int = 0
    decimals_b: int = 0
    pool_address: Optional[str] = None
    lp_token: Optional[str] = None

    def trades(self, token_a: Token, token_b: Token) -> bool:
        return {self.asset_a, self.asset_b} == {token_a.identifier(), token_b.identifier()}

    def decimals_of(self, identifier: str) -> int:
        if identifier == self.asset_a:
            return self.decimals_a
        if identifier == self.asset_b:
            return self.decimals_b
        return 0


_ENTRIES = TypeAdapter(Dict[str, PoolMetadata])


class MetadataCache:
    """Metadata keyed by pool id. Use `MetadataCache.open(path)` to load and save around one run."""

    def __init__(self, path: str, entries: Optional[Dict[str, PoolMetadata]] = None):
        self.path = path
        self._entries: Dict[str, PoolMetadata] = dict(entries or {})
        self.dirty = False

    @classmethod
    def load(cls, path: str) -> "MetadataCache":
        """A missing file is an empty cache; an unreadable or invalid one raises CacheIOError."""
        if not os.path.exists(path):
            logger.info(f"No metadata cache at {path}, starting empty")
            return cls(path)
        try:
            with open(path, "rb") as f:
                entries = _ENTRIES.validate_json(f.read())
        except OSError as e:
            raise CacheIOError(path, f"cannot read: {e}", e) from e
        except ValidationError as e:
            raise CacheIOError(path, f"invalid contents: {e.error_count()} errors", e) from e
        logger.info(f"Loaded {len(entries)} pools from {path}")
        return cls(path, entries)

    def save(self) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(prefix=".metadata-", suffix=".tmp", dir=directory)
            with os.fdopen(fd, "wb") as f:
                f.write(_ENTRIES.dump_json(self._entries, indent=2))
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise CacheIOError(self.path, f"cannot write: {e}", e) from e
        self.dirty = False
        logger.info(f"Saved {len(self._entries)} pools to {self.path}")

    @classmethod
    def open(cls, path: str) -> "MetadataCache":
        return cls.load(path)

    def __enter__(self) -> "MetadataCache":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None and self.dirty:
            self.save()

    def get(self, pool_id: str) -> Optional[PoolMetadata]:
        return self._entries.get(pool_id)

    def __contains__(self, pool_id: str) -> bool:
        return pool_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def values(self) -> List[PoolMetadata]:
        return list(self._entries.values())

    def missing(self, pool_ids: Iterable[str]) -> List[str]:
        return [p for p in pool_ids if p not in self._entries]

    def merge(self, entries: Dict[str, PoolMetadata]) -> int:
        """Add entries whose ids are absent. Returns how many were added."""
        added = {k: v for k, v in entries.items() if k not in self._entries}
        if added:
            self._entries.update(added)
            self.dirty = True
        return len(added)

    def as_dict(self) -> Dict[str, PoolMetadata]:
        return dict(self._entries)
