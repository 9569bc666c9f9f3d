#!/usr/bin/env python3
"""
Dexter - query Cardano DEX state through Kupo

Usage:
    python main.py pools minswap-v2 lovelace <token_id>
    python main.py pool minswap <pool_id>
    python main.py export sundaeswap
    python main.py orders <token_id>
    python main.py orders --all
    python main.py rate <pool_identifier>
    python main.py vyfi lovelace <token_id> [--cache vyfi_pools.json]
"""

import argparse
import asyncio
import dataclasses
import json
import logging
import sys
from fractions import Fraction

from config import settings
from dexter.cache import MetadataCache
from dexter.dex import POOL_SCANNERS, ChadSwap, VyfiBar, VyFinance, create_dex
from dexter.errors import DexterError
from dexter.fetching import Fetcher, KupoClient, RetryPolicy

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def to_json(value) -> str:
    def default(obj):
        if dataclasses.is_dataclass(obj):
            return dataclasses.asdict(obj)
        if isinstance(obj, Fraction):
            return str(obj)
        raise TypeError(f"Cannot serialise {type(obj).__name__}")
    return json.dumps(value, default=default, indent=2)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Query Cardano DEX state through Kupo")
    parser.add_argument("--kupo", default=settings.kupo_url, help="Kupo URL")
    parser.add_argument("--timeout", type=float, default=None, help="Overall deadline in seconds")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("pools", help="Pools for a token pair")
    p.add_argument("dex", choices=POOL_SCANNERS)
    p.add_argument("token_a")
    p.add_argument("token_b")

    p = sub.add_parser("pool", help="Pool by id")
    p.add_argument("dex", choices=POOL_SCANNERS)
    p.add_argument("pool_id")

    p = sub.add_parser("export", help="Every pool of a DEX")
    p.add_argument("dex", choices=POOL_SCANNERS)

    p = sub.add_parser("orders", help="ChadSwap order book")
    p.add_argument("token_id", nargs="?")
    p.add_argument("--all", action="store_true", help="Books for every tracked token")

    p = sub.add_parser("rate", help="VyFi Bar rate")
    p.add_argument("pool_identifier")

    p = sub.add_parser("vyfi", help="VyFinance pools through the metadata cache")
    p.add_argument("token_a")
    p.add_argument("token_b")
    p.add_argument("--cache", default=settings.metadata_cache_path)

    args = parser.parse_args(argv)
    if args.command == "orders" and not args.all and not args.token_id:
        parser.error("orders needs a token_id or --all")
    return args


async def run(args: argparse.Namespace):
    policy = RetryPolicy(
        max_attempts=settings.retry_attempts,
        base_delay=settings.retry_base_delay,
        max_delay=settings.retry_max_delay,
    )
    async with KupoClient(args.kupo, timeout=settings.kupo_timeout) as kupo:
        fetcher = Fetcher(kupo, policy, settings.concurrency)

        if args.command == "pools":
            return await create_dex(args.dex, fetcher).pools_from_token_pair(args.token_a, args.token_b, args.timeout)
        if args.command == "pool":
            return await create_dex(args.dex, fetcher).pool_from_pool_id(args.pool_id, args.timeout)
        if args.command == "export":
            return await create_dex(args.dex, fetcher).all_pools(args.timeout)
        if args.command == "orders":
            chadswap = ChadSwap(fetcher)
            if args.all:
                return await chadswap.all_order_books(args.timeout)
            return await chadswap.orders_by_token(args.token_id, args.timeout)
        if args.command == "rate":
            return await VyfiBar(fetcher).rate(args.pool_identifier, args.timeout)
        if args.command == "vyfi":
            vyfinance = VyFinance(fetcher, api_url=settings.vyfi_api_url)
            with MetadataCache.open(args.cache) as cache:
                return await vyfinance.pools_from_token_pair_cached(args.token_a, args.token_b, cache, args.timeout)
    raise ValueError(f"Unknown command {args.command}")


async def main():
    """Main entry point"""
    args = parse_args()
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    try:
        result = await run(args)
    except DexterError as e:
        logger.error(f"{type(e).__name__}: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        sys.exit(130)
    print(to_json(result))
    sys.exit(0)


if __name__ == "__main__":
    asyncio.run(main())
