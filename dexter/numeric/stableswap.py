"""
StableSwap invariant solver.

    A * n^n * sum(x) + D = A * D * n^n + D^(n+1) / (n^n * prod(x))

D is found by Newton iteration on integers and is considered converged once
two successive estimates differ by at most one unit.
"""

from fractions import Fraction
from math import prod
from typing import Sequence

from dexter.errors import InvariantSolveDidNotConverge

MAX_ITERATIONS = 255


def _check(reserves: Sequence[int], amplification: int) -> None:
    if len(reserves) < 2:
        raise ValueError("stable invariant needs at least two reserves")
    if amplification < 1:
        raise ValueError(f"amplification coefficient must be >= 1, got {amplification}")
    if any(r < 0 for r in reserves):
        raise ValueError("reserves must be non-negative")


def compute_d(reserves: Sequence[int], amplification: int, max_iterations: int = MAX_ITERATIONS) -> int:
    """Solve the invariant for D. Zero total liquidity gives D = 0."""
    _check(reserves, amplification)
    n = len(reserves)
    total = sum(reserves)
    if total == 0:
        return 0
    if any(r == 0 for r in reserves):
        raise ValueError("stable invariant is undefined with an empty reserve")

    nn = n ** n
    ann = amplification * nn
    denominator = nn * prod(reserves)
    d = total
    for _ in range(max_iterations):
        # One floor per step; flooring per reserve makes the result order dependent
        d_p = d ** (n + 1) // denominator
        d_prev = d
        d = (ann * total + d_p * n) * d // ((ann - 1) * d + (n + 1) * d_p)
        if abs(d - d_prev) <= 1:
            return d
    raise InvariantSolveDidNotConverge(
        f"D did not converge in {max_iterations} iterations (reserves={list(reserves)}, A={amplification})"
    )


def invariant_residual(reserves: Sequence[int], amplification: int, d: int) -> Fraction:
    """Left side minus right side of the invariant, exactly."""
    _check(reserves, amplification)
    n = len(reserves)
    nn = n ** n
    lhs = amplification * nn * sum(reserves) + d
    rhs = amplification * d * nn + Fraction(d ** (n + 1), nn * prod(reserves))
    return lhs - rhs


def compute_y(
    reserves: Sequence[int],
    amplification: int,
    index_in: int,
    index_out: int,
    new_reserve_in: int,
    d: int,
    max_iterations: int = MAX_ITERATIONS,
) -> int:
    """Reserve of `index_out` that keeps D constant once `index_in` holds `new_reserve_in`."""
    n = len(reserves)
    ann = amplification * n ** n
    c = d
    s = 0
    for k, r in enumerate(reserves):
        if k == index_out:
            continue
        x = new_reserve_in if k == index_in else r
        s += x
        c = c * d // (x * n)
    c = c * d // (ann * n)
    b = s + d // ann

    y = d
    for _ in range(max_iterations):
        y_prev = y
        y = (y * y + c) // (2 * y + b - d)
        if abs(y - y_prev) <= 1:
            return y
    raise InvariantSolveDidNotConverge(f"y did not converge in {max_iterations} iterations")


def stable_swap_out(
    reserves: Sequence[int],
    amplification: int,
    index_in: int,
    index_out: int,
    amount_in: int,
    fee_percent: float,
) -> int:
    if amount_in <= 0:
        return 0
    d = compute_d(reserves, amplification)
    y = compute_y(reserves, amplification, index_in, index_out, reserves[index_in] + amount_in, d)
    dy = reserves[index_out] - y - 1
    if dy <= 0:
        return 0
    fee = Fraction(str(fee_percent)) / 100
    return int(dy * (1 - fee))
