import pytest

from dexter.dex import ChadSwap
from dexter.dex.chadswap import ORDER_ADDRESSES
from dexter.errors import DatumDecodeFailure, InvalidTokenId
from dexter.models import OrderBook
from tests.factories import HOSKY, MIN, cbor, constr, make_utxo

ADDRESS = ORDER_ADDRESSES[0]


def order_datum(unit, price, amount, denominator=None):
    price_denominator = constr(1) if denominator is None else constr(0, denominator)
    address = constr(0, constr(0, b"\x04" * 28))
    info = constr(0, address, constr(0), bytes.fromhex(unit[:56]), bytes.fromhex(unit[56:]), price, price_denominator, constr(1), constr(1))
    return cbor(constr(0, info, constr(0, amount, 0)))


def add_sell(indexer, n, unit, price, denominator=None, amount=100):
    utxo = make_utxo(ADDRESS, [("lovelace", 2_000_000), (unit, amount)], n=n)
    return indexer.add(ADDRESS, utxo, order_datum(unit, price, amount, denominator))


def add_buy(indexer, n, unit, price, denominator=None, amount=100):
    utxo = make_utxo(ADDRESS, [("lovelace", 2_000_000 + price * amount)], n=n)
    return indexer.add(ADDRESS, utxo, order_datum(unit, price, amount, denominator))


@pytest.fixture
def book_indexer(indexer):
    add_sell(indexer, 1, HOSKY, 5)
    add_sell(indexer, 2, HOSKY, 3, denominator=1)
    add_sell(indexer, 3, HOSKY, 8, denominator=2)
    add_buy(indexer, 4, HOSKY, 2)
    add_buy(indexer, 5, HOSKY, 1)
    add_sell(indexer, 6, MIN, 40)
    indexer.add(ADDRESS, make_utxo(ADDRESS, [("lovelace", 1)], n=7), cbor(constr(0, 1)))
    return indexer


@pytest.mark.asyncio
async def test_orders_by_token(book_indexer, fetcher):
    book = await ChadSwap(fetcher).orders_by_token(HOSKY)
    assert isinstance(book, OrderBook)
    assert book.token_id == HOSKY
    assert [o.effective_price for o in book.sell_orders] == [3, 4, 5]
    assert [o.price for o in book.buy_orders] == [2, 1]
    assert all(o.asset.identifier() == HOSKY for o in book.buy_orders + book.sell_orders)
    assert book.buy_orders[0].price_denominator == 1
    assert book.sell_orders[0].amount == 100


@pytest.mark.asyncio
async def test_all_order_books(book_indexer, fetcher):
    books = await ChadSwap(fetcher).all_order_books()
    assert set(books) == {HOSKY, MIN}
    assert len(books[HOSKY]) == 5
    assert books[MIN].best_ask.price == 40
    assert books[MIN].buy_orders == ()


@pytest.mark.asyncio
async def test_token_without_orders(book_indexer, fetcher):
    book = await ChadSwap(fetcher).orders_by_token(MIN[:56] + "00")
    assert len(book) == 0


@pytest.mark.asyncio
async def test_invalid_token_id(indexer, fetcher):
    with pytest.raises(InvalidTokenId):
        await ChadSwap(fetcher).orders_by_token("HOSKY")
    assert indexer.calls == []


def test_decode_rejects_malformed_datum(fetcher):
    utxo = make_utxo(ADDRESS, [("lovelace", 1)])
    with pytest.raises(DatumDecodeFailure):
        ChadSwap(fetcher).decode(utxo, cbor(constr(0, constr(0, 1), constr(0, 1))))


def test_decode_without_datum(fetcher):
    assert ChadSwap(fetcher).decode(make_utxo(ADDRESS, [("lovelace", 1)]), None) is None
