"""Bonding-curve price functions mirroring the CurveAMM contract.

All amounts are integers in wei so previews reconcile with on-chain math.
The simulator is a fallback: callers should prefer the contract's own
``previewBuyCost``/``previewSellRefund`` whenever those are reachable.
"""

from __future__ import annotations

from typing import Callable, Dict, Protocol

from app.domain import UnknownCurveError

PRICE_SCALE = 10**15
CURVE_STEEPNESS = 1000


def _sum_of_integers(n: int) -> int:
    if n <= 0:
        return 0
    return n * (n + 1) // 2


def _sum_of_squares(n: int) -> int:
    if n <= 0:
        return 0
    return n * (n + 1) * (2 * n + 1) // 6


class BondingCurve(Protocol):
    """Price of the n-th token as a pure function of its ordinal."""

    name: str

    def price(self, token_number: int) -> int:
        """Return the wei price of token ``token_number`` (1-indexed)."""
        raise NotImplementedError

    def total_price(self, first: int, last: int) -> int:
        """Return the sum of ``price(n)`` for ``first <= n <= last``."""
        raise NotImplementedError


class QuadraticCurve:
    """``price(n) = n² × scale / steepness`` with integer floor division."""

    name = "quadratic"

    def __init__(self, *, price_scale: int = PRICE_SCALE, steepness: int = CURVE_STEEPNESS) -> None:
        if price_scale <= 0 or steepness <= 0:
            raise ValueError("price_scale and steepness must be positive")
        self.price_scale = price_scale
        self.steepness = steepness

    def price(self, token_number: int) -> int:
        if token_number <= 0:
            return 0
        return (token_number * token_number * self.price_scale) // self.steepness

    def total_price(self, first: int, last: int) -> int:
        first = max(first, 1)
        if last < first:
            return 0
        if self.price_scale % self.steepness:
            # Per-term flooring does not distribute over the sum.
            return sum(self.price(n) for n in range(first, last + 1))
        per_square = self.price_scale // self.steepness
        return per_square * (_sum_of_squares(last) - _sum_of_squares(first - 1))


class LinearCurve:
    """``price(n) = n × scale``."""

    name = "linear"

    def __init__(self, *, price_scale: int = PRICE_SCALE, steepness: int | None = None) -> None:
        if price_scale <= 0:
            raise ValueError("price_scale must be positive")
        self.price_scale = price_scale

    def price(self, token_number: int) -> int:
        if token_number <= 0:
            return 0
        return token_number * self.price_scale

    def total_price(self, first: int, last: int) -> int:
        first = max(first, 1)
        if last < first:
            return 0
        return self.price_scale * (_sum_of_integers(last) - _sum_of_integers(first - 1))


def cost_to_buy(curve: BondingCurve, amount: int, tokens_sold: int) -> int:
    """Total wei paid for the next ``amount`` tokens after ``tokens_sold``."""

    if amount <= 0:
        return 0
    return curve.total_price(tokens_sold + 1, tokens_sold + amount)


def refund_from_sell(curve: BondingCurve, amount: int, tokens_sold: int) -> int:
    """Total wei returned for selling ``amount`` tokens back from ``tokens_sold``.

    Ordinals at or below zero contribute nothing, so over-selling is not
    detected here; callers must bound ``amount`` by ``tokens_sold``.
    """

    if amount <= 0 or tokens_sold <= 0:
        return 0
    return curve.total_price(tokens_sold - amount + 1, tokens_sold)


CurveFactory = Callable[..., BondingCurve]

_CURVES: Dict[str, CurveFactory] = {}


def register_curve(name: str, factory: CurveFactory) -> None:
    """Register or replace a curve factory under ``name``."""

    _CURVES[name.lower()] = factory


def available_curves() -> tuple[str, ...]:
    return tuple(sorted(_CURVES))


def build_curve(
    name: str,
    *,
    price_scale: int = PRICE_SCALE,
    steepness: int = CURVE_STEEPNESS,
) -> BondingCurve:
    """Instantiate the curve registered under ``name``."""

    try:
        factory = _CURVES[name.lower()]
    except KeyError as exc:
        raise UnknownCurveError(
            f"Bonding curve '{name}' is not registered (available: {', '.join(available_curves())})"
        ) from exc
    return factory(price_scale=price_scale, steepness=steepness)


register_curve(QuadraticCurve.name, QuadraticCurve)
register_curve(LinearCurve.name, LinearCurve)


__all__ = [
    "CURVE_STEEPNESS",
    "PRICE_SCALE",
    "BondingCurve",
    "LinearCurve",
    "QuadraticCurve",
    "available_curves",
    "build_curve",
    "cost_to_buy",
    "refund_from_sell",
    "register_curve",
]
