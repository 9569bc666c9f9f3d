"""Kupo HTTP client."""

import json
import logging
from typing import Any, Dict, List, Optional

import aiohttp

from dexter.errors import IndexerHTTPError
from dexter.models import Unit, Utxo
from dexter.utils import LOVELACE, join_policy_id

logger = logging.getLogger(__name__)


def utxo_from_kupo(match: Dict[str, Any]) -> Utxo:
    """Normalise one Kupo match object. Raises ValueError on a malformed match."""
    try:
        value = match["value"]
        amount = [Unit(LOVELACE, int(value["coins"]))]
        for unit, quantity in (value.get("assets") or {}).items():
            amount.append(Unit(join_policy_id(unit), int(quantity)))
        return Utxo(
            address=match["address"],
            tx_hash=match["transaction_id"],
            tx_index=int(match.get("transaction_index", match["output_index"])),
            output_index=int(match["output_index"]),
            amount=tuple(amount),
            block=(match.get("created_at") or {}).get("header_hash", ""),
            datum_hash=match.get("datum_hash"),
            script_hash=match.get("script_hash"),
        )
    except (KeyError, TypeError, AttributeError) as e:
        raise ValueError(f"Malformed Kupo match: {e!r}") from e


class KupoClient:
    """Async client for the Kupo HTTP API."""

    def __init__(self, url: str = "http://localhost:1442", timeout: float = 300.0, session: Optional[aiohttp.ClientSession] = None):
        self.url = url.rstrip("/")
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None

    async def connect(self) -> None:
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout))
            self._owns_session = True
            logger.info(f"Using Kupo at {self.url}")

    async def disconnect(self) -> None:
        if self._session and self._owns_session:
            await self._session.close()
        self._session = None

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()

    async def _get_json(self, path: str, params: Optional[Dict[str, str]] = None) -> Any:
        if self._session is None:
            await self.connect()
        url = f"{self.url}{path}"
        async with self._session.get(url, params=params) as response:
            body = await response.text()
            if response.status >= 400:
                raise IndexerHTTPError(response.status, url, body)
        try:
            return json.loads(body)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON from {url}: {e}") from e

    async def get_utxos(self, pattern: str, unspent: bool = True) -> List[Utxo]:
        # Kupo treats `?unspent` as a flag; its value is ignored
        matches = await self._get_json(f"/matches/{pattern}", {"unspent": ""} if unspent else None)
        if not isinstance(matches, list):
            raise ValueError(f"Expected a list of matches for {pattern}, got {type(matches).__name__}")
        logger.debug(f"Kupo returned {len(matches)} matches for {pattern}")
        return [utxo_from_kupo(m) for m in matches]

    async def get_datum(self, datum_hash: str) -> Optional[bytes]:
        result = await self._get_json(f"/datums/{datum_hash}")
        if not result or not result.get("datum"):
            return None
        return bytes.fromhex(result["datum"])
