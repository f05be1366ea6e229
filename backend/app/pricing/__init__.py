"""Bonding-curve simulation and chart synthesis."""

from .chart import INITIAL_PRICE, PRICE_STEP, synthesize_price_history
from .curve import (
    CURVE_STEEPNESS,
    PRICE_SCALE,
    BondingCurve,
    LinearCurve,
    QuadraticCurve,
    available_curves,
    build_curve,
    cost_to_buy,
    refund_from_sell,
    register_curve,
)

__all__ = [
    "CURVE_STEEPNESS",
    "INITIAL_PRICE",
    "PRICE_SCALE",
    "PRICE_STEP",
    "BondingCurve",
    "LinearCurve",
    "QuadraticCurve",
    "available_curves",
    "build_curve",
    "cost_to_buy",
    "refund_from_sell",
    "register_curve",
    "synthesize_price_history",
]
