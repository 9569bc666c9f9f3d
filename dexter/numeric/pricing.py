"""Constant-product (x * y = k) pricing."""

from fractions import Fraction

from dexter.errors import UndefinedPrice
from dexter.types import Token

NO_LIQUIDITY = 10 ** 18


def spot_price(reserve_a: int, reserve_b: int) -> float:
    """Units of B per unit of A."""
    if reserve_a == 0:
        raise UndefinedPrice("reserve_a is zero, spot price is undefined")
    return reserve_b / reserve_a


def fee_multiplier(fee_percent: float) -> Fraction:
    """Share of the input kept after the fee, e.g. 0.3 -> 997/1000."""
    return 1 - Fraction(str(fee_percent)) / 100


def constant_product_out(reserve_in: int, reserve_out: int, amount_in: int, fee_percent: float) -> int:
    """output = (input * f * reserve_out) / (reserve_in + input * f)"""
    if amount_in <= 0 or reserve_in <= 0 or reserve_out <= 0:
        return 0
    amt_with_fee = amount_in * fee_multiplier(fee_percent)
    return int((amt_with_fee * reserve_out) / (reserve_in + amt_with_fee))


def constant_product_in(reserve_in: int, reserve_out: int, amount_out: int, fee_percent: float) -> int:
    """input = (reserve_in * output) / ((reserve_out - output) * f) + 1"""
    if amount_out >= reserve_out:
        return NO_LIQUIDITY
    if amount_out <= 0:
        return 0
    return int(Fraction(reserve_in * amount_out) / ((reserve_out - amount_out) * fee_multiplier(fee_percent))) + 1


def canonical_order(token_a: Token, token_b: Token) -> tuple:
    """Native coin first, otherwise ordered by identifier."""
    if token_b.is_ada or (not token_a.is_ada and token_b.identifier() < token_a.identifier()):
        return token_b, token_a
    return token_a, token_b


def pair_label(token_a: Token, token_b: Token) -> str:
    first, second = canonical_order(token_a, token_b)
    return f"{first.display_name}/{second.display_name}"
