"""Display helpers for wei amounts and addresses."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

WEI_PER_ETH = Decimal(10) ** 18
_DUST_THRESHOLD = Decimal("0.0001")


def wei_to_eth(wei: int | str | Decimal) -> Decimal:
    return Decimal(str(wei)) / WEI_PER_ETH


def wei_to_eth_string(wei: int | str | Decimal, places: int = 6) -> str:
    """Scale ``wei`` to ETH and render it with exactly ``places`` decimals."""

    quantum = Decimal(1).scaleb(-places)
    return str(wei_to_eth(wei).quantize(quantum, rounding=ROUND_HALF_UP))


def format_eth(wei: int) -> str:
    eth = wei_to_eth(wei)
    if eth < _DUST_THRESHOLD:
        return "< 0.0001"
    return wei_to_eth_string(wei, 6)


def shorten_address(address: str) -> str:
    if len(address) <= 10:
        return address
    return f"{address[:6]}...{address[-4:]}"
