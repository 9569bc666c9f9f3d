"""ChadSwap - on-chain limit order book (token against ADA)."""

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List, Optional, Union

from pycardano import Datum, PlutusData

from dexter.errors import DatumDecodeFailure
from dexter.fetching import Fetcher, ScanOutcome, with_deadline
from dexter.models import Order, OrderBook, Utxo
from dexter.numeric.orderbook import build_order_book
from dexter.types import Token
from dexter.utils import LOVELACE
from .plutus_common import as_hex, constr_fields, decode_datum

logger = logging.getLogger(__name__)

IDENTIFIER = "ChadSwap"
ORDER_ADDRESSES = [
    "addr1wxxxdudv3dtaa09tngrm8wds54v45kkhdcau4e6keqh0uncksc7pn",
    "addr1w84q0y2wwfj5efd9ch3x492edeh6pdwycvt7g030jfzhagg5ftr54",
]


@dataclass
class PriceDenominator(PlutusData):
    value: int
    CONSTR_ID: ClassVar[int] = 0


@dataclass
class NoPriceDenominator(PlutusData):
    CONSTR_ID: ClassVar[int] = 1


@dataclass
class ChadSwapOrderInfo(PlutusData):
    address: Datum
    direction: Datum
    token_policy: bytes
    token_name: bytes
    unit_price: int
    price_denominator: Union[PriceDenominator, NoPriceDenominator]
    reserved_1: Datum
    reserved_2: Datum
    CONSTR_ID: ClassVar[int] = 0


@dataclass
class ChadSwapOrderState(PlutusData):
    remaining: int
    filled: int
    CONSTR_ID: ClassVar[int] = 0


def sell_side_unit(utxo: Utxo) -> str:
    """The unit an order locks: its token for a sell order, lovelace for a buy order."""
    tokens = utxo.non_lovelace_units()
    return tokens[0].unit if tokens else LOVELACE


class ChadSwap:
    """
    Order datum:
        Constr[ChadSwapOrderInfo, ChadSwapOrderState, ...]

    Fields after the order state vary between orders and are ignored.
    """
    IDENTIFIER: ClassVar[str] = IDENTIFIER

    def __init__(self, fetcher: Fetcher):
        self.fetcher = fetcher

    @property
    def identifier(self) -> str:
        return IDENTIFIER

    @property
    def pool_addresses(self) -> List[str]:
        return ORDER_ADDRESSES

    @property
    def lp_token_policy_id(self) -> str:
        return ""

    def decode(self, utxo: Utxo, datum_cbor: Optional[bytes], token_id: Optional[str] = None) -> Optional[Order]:
        """
        Order from its UTxO and datum. It is a sell order when the UTxO locks
        the queried token (by default the token named in the datum).
        """
        if datum_cbor is None:
            return None
        try:
            return self._decode(utxo, decode_datum(datum_cbor), token_id)
        except Exception as e:
            raise DatumDecodeFailure(utxo.utxo_id, str(e) or repr(e)) from e

    def _decode(self, utxo: Utxo, datum: Any, token_id: Optional[str]) -> Order:
        outer = constr_fields(datum, 2)
        info = ChadSwapOrderInfo.from_primitive(outer[0])
        state = ChadSwapOrderState.from_primitive(outer[1])
        denominator = info.price_denominator
        asset = Token.from_identifier(as_hex(info.token_policy) + as_hex(info.token_name))
        return Order(
            asset=asset,
            amount=state.remaining,
            price=info.unit_price,
            price_denominator=denominator.value if isinstance(denominator, PriceDenominator) else 1,
            is_buy=sell_side_unit(utxo) != (token_id or asset.identifier()),
            utxo_id=utxo.utxo_id,
            dex_identifier=IDENTIFIER,
        )

    async def all_order_utxos(self) -> List[Utxo]:
        return await self.fetcher.utxos_at(ORDER_ADDRESSES)

    async def order_from_utxo_extend(self, utxo: Utxo, token_id: Optional[str] = None) -> Optional[Order]:
        if not utxo.has_datum:
            return None
        return self.decode(utxo, await self.fetcher.datum(utxo), token_id)

    async def _orders(self, token_id: Optional[str] = None) -> List[Order]:
        utxos = await self.all_order_utxos()
        outcomes = await self.fetcher.scan(utxos, lambda u: self.order_from_utxo_extend(u, token_id))
        return ScanOutcome.collect(outcomes)

    async def orders_by_token(self, token_id: str, timeout: Optional[float] = None) -> OrderBook:
        """Book for one token. Buys best (highest) first, sells best (lowest) first."""
        Token.from_identifier(token_id)
        orders = await with_deadline(self._orders(token_id), timeout)
        book = build_order_book(token_id, (o for o in orders if o.asset.identifier() == token_id))
        logger.info(f"{IDENTIFIER}: {len(book.buy_orders)} buys, {len(book.sell_orders)} sells for {token_id}")
        return book

    async def all_order_books(self, timeout: Optional[float] = None) -> Dict[str, OrderBook]:
        """Every tracked token's book from a single scan, keyed by token identifier."""
        by_token: Dict[str, List[Order]] = defaultdict(list)
        for order in await with_deadline(self._orders(), timeout):
            by_token[order.asset.identifier()].append(order)
        return {token_id: build_order_book(token_id, orders) for token_id, orders in by_token.items()}
