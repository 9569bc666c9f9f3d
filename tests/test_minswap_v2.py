import pytest

from dexter.dex import MinswapV2
from dexter.dex.minswap_v2 import LP_TOKEN_POLICY, POOL_VALIDITY_ASSET
from dexter.errors import DeadlineExceeded, IndexerUnavailable, PoolNotFound
from dexter.types import ADA, Token
from tests.factories import HOSKY, MIN, asset, cbor, constr, make_utxo

PATTERN = MinswapV2.POOL_ADDRESSES[0]
ADDRESS = "addr1z84q0denmyep98ph3tmzwsmw0j7zau9ljmsqx6a4rvaau66j2c79gy9l76sdg0xwhd7r0c0kna0tycz4y5s6mlenh8pq777e2a"


def lp_unit(n: int) -> str:
    return LP_TOKEN_POLICY + f"{n:064x}"


def pool_datum(unit_a, unit_b, reserve_a, reserve_b, total_lp=5_000, fee=30):
    stake_credential = constr(0, constr(0, b"\x01" * 28))
    return cbor(constr(
        0, stake_credential, asset(unit_a), asset(unit_b), total_lp,
        reserve_a, reserve_b, fee, fee, constr(1), constr(1),
    ))


def add_pool(indexer, n, unit_b=MIN, reserve_a=10_000_000, reserve_b=20_000_000, datum=None):
    utxo = make_utxo(
        ADDRESS,
        [("lovelace", reserve_a + 2_000_000), (unit_b, reserve_b), (POOL_VALIDITY_ASSET, 1), (lp_unit(n), 1)],
        n=n,
    )
    return indexer.add(PATTERN, utxo, datum or pool_datum("lovelace", unit_b, reserve_a, reserve_b))


@pytest.mark.asyncio
async def test_pools_for_pair(indexer, fetcher):
    add_pool(indexer, 1)
    add_pool(indexer, 2, unit_b=HOSKY)
    pools = await MinswapV2(fetcher).pools_from_token_pair("lovelace", MIN)
    assert len(pools) == 1
    pool = pools[0]
    assert pool.dex_identifier == "MINSWAPV2"
    assert pool.asset_a == ADA
    assert pool.asset_b == Token.from_identifier(MIN)
    # Datum reserves win over the balance, which also holds the min ADA
    assert (pool.reserve_a, pool.reserve_b) == (10_000_000, 20_000_000)
    assert pool.total_lp_tokens == 5_000
    assert pool.pool_fee_percent == pytest.approx(0.3)
    assert pool.pool_id == lp_unit(1)
    assert pool.price() == 2.0


@pytest.mark.asyncio
async def test_pair_order_does_not_matter(indexer, fetcher):
    for n in range(1, 4):
        add_pool(indexer, n)
    dex = MinswapV2(fetcher)
    forward = await dex.pools_from_token_pair("lovelace", MIN)
    backward = await dex.pools_from_token_pair(Token.from_identifier(MIN), ADA)
    assert [p.uuid for p in forward] == [p.uuid for p in backward]
    assert len(forward) == 3


@pytest.mark.asyncio
async def test_one_bad_datum_only_drops_its_pool(indexer, fetcher):
    for n in range(1, 11):
        add_pool(indexer, n)
    add_pool(indexer, 11, datum=cbor(constr(0, 1, 2)))
    pools = await MinswapV2(fetcher).all_pools()
    assert len(pools) == 10
    assert lp_unit(11) not in {p.pool_id for p in pools}


@pytest.mark.asyncio
async def test_datum_assets_in_other_order(indexer, fetcher):
    utxo = make_utxo(ADDRESS, [(MIN, 300), ("lovelace", 100), (POOL_VALIDITY_ASSET, 1), (lp_unit(1), 1)])
    indexer.add(PATTERN, utxo, pool_datum("lovelace", MIN, 100, 300))
    pool, = await MinswapV2(fetcher).all_pools()
    assert pool.asset_a == Token.from_identifier(MIN)
    assert (pool.reserve_a, pool.reserve_b) == (300, 100)


@pytest.mark.asyncio
async def test_zap_pool_is_skipped(indexer, fetcher):
    add_pool(indexer, 1)
    add_pool(indexer, 2, datum=pool_datum("lovelace", lp_unit(9), 1, 1))
    pools = await MinswapV2(fetcher).all_pools()
    assert [p.pool_id for p in pools] == [lp_unit(1)]


@pytest.mark.asyncio
async def test_unknown_pair(indexer, fetcher):
    add_pool(indexer, 1)
    with pytest.raises(PoolNotFound):
        await MinswapV2(fetcher).pools_from_token_pair("lovelace", HOSKY)


@pytest.mark.asyncio
async def test_pool_by_id(indexer, fetcher):
    add_pool(indexer, 1)
    add_pool(indexer, 2)
    dex = MinswapV2(fetcher)
    pool = await dex.pool_from_pool_id(lp_unit(2))
    assert pool.pool_id == lp_unit(2)
    # The LP policy prefix may be left out
    assert (await dex.pool_from_pool_id(f"{2:064x}")).uuid == pool.uuid
    with pytest.raises(PoolNotFound):
        await dex.pool_from_pool_id(lp_unit(3))


@pytest.mark.asyncio
async def test_deadline(indexer, fetcher):
    add_pool(indexer, 1)
    indexer.datum_delay = 1.0
    with pytest.raises(DeadlineExceeded):
        await MinswapV2(fetcher).pools_from_token_pair("lovelace", MIN, timeout=0.05)


@pytest.mark.asyncio
async def test_indexer_down(indexer, fetcher):
    indexer.fail(PATTERN, *[ConnectionError("refused")] * 3)
    with pytest.raises(IndexerUnavailable) as info:
        await MinswapV2(fetcher).pools_from_token_pair("lovelace", MIN)
    assert str(info.value) == "refused"
