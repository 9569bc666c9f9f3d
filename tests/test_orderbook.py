from dexter.models import Order
from dexter.numeric.orderbook import build_order_book, sort_orders
from dexter.types import Token
from tests.factories import MIN

TOKEN = Token.from_identifier(MIN)


def order(price, denominator=1, is_buy=True, utxo_id=""):
    return Order(asset=TOKEN, amount=100, price=price, price_denominator=denominator, is_buy=is_buy, utxo_id=utxo_id)


def test_buys_sorted_descending():
    book = build_order_book(MIN, [order(10), order(5), order(8)])
    assert [o.price for o in book.buy_orders] == [10, 8, 5]
    assert book.sell_orders == ()


def test_sells_sorted_ascending():
    book = build_order_book(MIN, [order(p, is_buy=False) for p in (10, 5, 8)])
    assert [o.price for o in book.sell_orders] == [5, 8, 10]
    assert book.best_ask.price == 5


def test_sorting_uses_effective_price():
    # 10/4 = 2.5 sits between 2 and 3
    orders = [order(3), order(10, 4), order(2)]
    assert [o.effective_price for o in sort_orders(orders, descending=True)] == [3, 2.5, 2]


def test_equal_prices_keep_input_order():
    orders = [order(4, utxo_id="a"), order(8, 2, utxo_id="b"), order(12, 3, utxo_id="c")]
    assert [o.utxo_id for o in sort_orders(orders, descending=True)] == ["a", "b", "c"]
    assert [o.utxo_id for o in sort_orders(orders, descending=False)] == ["a", "b", "c"]


def test_split_into_sides():
    book = build_order_book(MIN, [order(1), order(2, is_buy=False), order(3)])
    assert len(book) == 3
    assert book.best_bid.price == 3
    assert len(book.sell_orders) == 1


def test_empty_book():
    book = build_order_book(MIN, [])
    assert len(book) == 0
    assert book.best_bid is None and book.best_ask is None
