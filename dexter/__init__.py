"""
Read-only access to Cardano DEX state through a Kupo indexer.

Structure:
    dexter/
    ├── types.py          # Token
    ├── errors.py         # Error kinds
    ├── models/           # Utxo, pools, orders, rates
    ├── fetching/         # Kupo client, retries, fan-out
    ├── numeric/          # Constant product, StableSwap, tick ranges
    ├── dex/              # Protocol adapters
    └── cache.py          # Pool metadata cache

Usage:
    from dexter import Token, ADA
    from dexter.fetching import Fetcher, KupoClient
    from dexter.dex import MinswapV2

    async with KupoClient(url) as kupo:
        pools = await MinswapV2(Fetcher(kupo)).pools_from_token_pair("lovelace", token_id)
"""

from .types import ADA, Token

__all__ = [
    # Types
    "Token",
    "ADA",
]
