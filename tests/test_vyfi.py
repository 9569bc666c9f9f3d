import json
from fractions import Fraction

import pytest

from dexter.cache import MetadataCache, PoolMetadata
from dexter.dex import VyfiBar, VyFinance
from dexter.dex.vyfi_bar import kupo_pattern
from dexter.dex.vyfinance import parse_pool_list
from dexter.errors import PoolNotFound
from dexter.types import ADA, Token
from dexter.utils import asset_pattern
from tests.factories import HOSKY, HOSKY_POLICY, MIN, FakeSession, cbor, constr, make_utxo

BAR_POLICY = "b" * 56
NFT = "f" * 56 + "01"
API_URL = "https://vyfi.test/lp"
ENTRY = PoolMetadata(pool_id=NFT, asset_a="lovelace", asset_b=HOSKY, decimals_b=2, pool_address="addr1vyfi")
API_ENTRIES = [
    {
        "json": json.dumps({"mainNFT": {"currencySymbol": "f" * 56, "tokenName": "01"}}),
        "unitsPair": f"lovelace/{HOSKY_POLICY}.484f534b59",
        "poolValidatorUtxoAddress": "addr1vyfi",
        "lpPolicyId-assetId": "a" * 56 + ".02",
        "tokenADecimals": 6,
        "tokenBDecimals": None,
    },
    {"json": "not json", "unitsPair": "lovelace/x"},
    {"unitsPair": "lovelace/x"},
]


class TestVyfiBar:
    @pytest.mark.parametrize("identifier, pattern", [
        (BAR_POLICY, f"{BAR_POLICY}.*"),
        (f"{BAR_POLICY}.", f"{BAR_POLICY}.*"),
        (f"{BAR_POLICY}.01", f"{BAR_POLICY}.01"),
    ])
    def test_kupo_pattern(self, identifier, pattern):
        assert kupo_pattern(identifier) == pattern

    @pytest.mark.asyncio
    async def test_rate(self, indexer, fetcher):
        utxo = make_utxo("addr1bar", [("lovelace", 2_000_000), (BAR_POLICY + "01", 1), (MIN, 1_000_000)])
        indexer.add(f"{BAR_POLICY}.*", utxo, cbor(constr(0, constr(0, 1_100_000))))
        rate = await VyfiBar(fetcher).rate(f"{BAR_POLICY}.")
        assert rate.base_asset == 1_000_000
        assert rate.derived_asset == 1_100_000
        assert rate.ratio == Fraction(11, 10)

    @pytest.mark.asyncio
    async def test_unknown_bar(self, fetcher):
        with pytest.raises(PoolNotFound):
            await VyfiBar(fetcher).rate(BAR_POLICY)

    @pytest.mark.asyncio
    async def test_bar_without_datum(self, indexer, fetcher):
        indexer.add(f"{BAR_POLICY}.*", make_utxo("addr1bar", [("lovelace", 1), (MIN, 1)]))
        with pytest.raises(PoolNotFound):
            await VyfiBar(fetcher).rate(BAR_POLICY)


def add_vyfi_pool(indexer):
    utxo = make_utxo("addr1vyfi", [("lovelace", 10_000_000), (HOSKY, 5_000), (NFT, 1)])
    return indexer.add(asset_pattern(NFT), utxo, cbor(constr(0, 1_000, 50, 999, 0)))


class TestVyFinance:
    def test_parse_pool_list(self):
        metadata = parse_pool_list(API_ENTRIES)
        assert list(metadata) == [NFT]
        meta = metadata[NFT]
        assert (meta.asset_a, meta.asset_b) == ("lovelace", HOSKY)
        assert (meta.decimals_a, meta.decimals_b) == (6, 0)
        assert meta.lp_token == "a" * 56 + "02"

    @pytest.mark.asyncio
    async def test_cached_pair_skips_api(self, indexer, fetcher, tmp_path):
        add_vyfi_pool(indexer)
        dex = VyFinance(fetcher, api_url=API_URL)
        api_calls = []

        async def fetch_pool_metadata():
            api_calls.append(1)
            return {}

        dex.fetch_pool_metadata = fetch_pool_metadata
        cache = MetadataCache(str(tmp_path / "pools.json"), {NFT: ENTRY})
        pool, = await dex.pools_from_token_pair_cached(ADA, HOSKY, cache)
        assert api_calls == []
        assert (pool.reserve_a, pool.reserve_b) == (9_999_000, 4_950)
        assert pool.total_lp_tokens == 999
        assert pool.asset_b.decimals == 2
        assert pool.pool_id == NFT
        assert pool.dex_identifier == "VYFINANCE"
        assert not cache.dirty

    @pytest.mark.asyncio
    async def test_cache_miss_calls_api_once(self, indexer, fetcher, tmp_path):
        add_vyfi_pool(indexer)
        session = FakeSession(body=json.dumps(API_ENTRIES))
        dex = VyFinance(fetcher, api_url=API_URL, session=session)
        cache = MetadataCache(str(tmp_path / "pools.json"))
        pools = await dex.pools_from_token_pair_cached(Token.from_identifier(HOSKY), ADA, cache)
        assert len(pools) == 1
        assert session.requests == [(API_URL, None)]
        assert NFT in cache
        assert cache.dirty

    @pytest.mark.asyncio
    async def test_pair_missing_from_api(self, indexer, fetcher, tmp_path):
        dex = VyFinance(fetcher, api_url=API_URL, session=FakeSession(body=json.dumps(API_ENTRIES)))
        with pytest.raises(PoolNotFound):
            await dex.pools_from_token_pair_cached(ADA, MIN, MetadataCache(str(tmp_path / "pools.json")))

    @pytest.mark.asyncio
    async def test_all_pools(self, indexer, fetcher):
        add_vyfi_pool(indexer)
        dex = VyFinance(fetcher, api_url=API_URL, session=FakeSession(body=json.dumps(API_ENTRIES)))
        pool, = await dex.all_pools()
        assert pool.pool_id == NFT
        assert dex.pool_addresses == ["addr1vyfi"]

    @pytest.mark.asyncio
    async def test_pool_by_id(self, indexer, fetcher):
        add_vyfi_pool(indexer)
        pool = await VyFinance(fetcher).pool_from_pool_id(f"{'f' * 56}.01")
        assert pool.pool_id == NFT
        assert (pool.reserve_a, pool.reserve_b) == (9_999_000, 4_950)
