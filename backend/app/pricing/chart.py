"""Synthetic price history for the market chart.

The series is a visual approximation built by stepping a running price on
each trade. It does not reconstruct real curve state and must be presented
as illustrative.
"""

from __future__ import annotations

import time
from decimal import Decimal
from typing import Callable, Iterable

from app.domain import ClassifiedTransaction, PricePoint, TransactionType

INITIAL_PRICE = Decimal("0.001")
PRICE_STEP = Decimal("0.0001")
PLACEHOLDER_SPACING_SECONDS = 3600


def _placeholder_series(
    *,
    initial_price: Decimal,
    price_step: Decimal,
    now: int,
) -> list[PricePoint]:
    start = now - 2 * PLACEHOLDER_SPACING_SECONDS
    return [
        PricePoint(timestamp=start, price=0.0, token_number=0, type=TransactionType.MARKET_CREATED),
        PricePoint(
            timestamp=start + PLACEHOLDER_SPACING_SECONDS,
            price=float(initial_price),
            token_number=0,
            type=TransactionType.MARKET_CREATED,
        ),
        PricePoint(
            timestamp=now,
            price=float(initial_price + price_step),
            token_number=1,
            type=TransactionType.BUY,
        ),
    ]


def synthesize_price_history(
    transactions: Iterable[ClassifiedTransaction],
    *,
    initial_price: Decimal = INITIAL_PRICE,
    price_step: Decimal = PRICE_STEP,
    clock: Callable[[], float] = time.time,
) -> list[PricePoint]:
    """Replay trades oldest-first into chart points.

    The price starts at ``initial_price`` and ``market_created`` resets it
    there; buys add ``price_step``; sells subtract it without dropping
    below ``initial_price``. Unclassified events are skipped. With no trades at
    all a three-point placeholder ending at ``clock()`` is returned.
    """

    ordered = sorted(transactions, key=lambda tx: tx.timestamp)
    # A page may start after the creation event; trades then step from the floor.
    current_price = initial_price
    token_number = 0
    points: list[PricePoint] = []

    for tx in ordered:
        if tx.transaction_type is TransactionType.MARKET_CREATED:
            current_price = initial_price
        elif tx.transaction_type is TransactionType.BUY:
            current_price += price_step
            token_number += 1
        elif tx.transaction_type is TransactionType.SELL:
            current_price = max(current_price - price_step, initial_price)
            token_number = max(token_number - 1, 0)
        else:
            continue
        points.append(
            PricePoint(
                timestamp=tx.timestamp,
                price=float(current_price),
                token_number=token_number,
                type=tx.transaction_type,
            )
        )

    if not points:
        return _placeholder_series(
            initial_price=initial_price,
            price_step=price_step,
            now=int(clock()),
        )
    return points
