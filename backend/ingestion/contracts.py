"""Typed boundary to the CurveAMM contract.

Only the read surface and result decoding live here; the contract
logic itself is external and reached through whatever RPC adapter
implements :class:`CurveAmmReader`.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol

from loguru import logger

from app.domain import ZERO_ADDRESS, CurveMarket, MarketDecodeError

MARKET_INFO_FIELDS = (
    "total_supply",
    "tokens_for_sale",
    "tokens_sold",
    "eth_reserve",
    "current_price",
    "is_active",
    "creator",
    "created_at",
    "token_contract",
)


class CurveAmmReader(Protocol):
    """Read functions exposed by the CurveAMM contract."""

    def get_market_info(self, bond_id: int) -> Sequence[Any]:
        raise NotImplementedError

    def preview_buy_cost(self, bond_id: int, amount: int) -> int:
        raise NotImplementedError

    def preview_sell_refund(self, bond_id: int, amount: int) -> int:
        raise NotImplementedError

    def get_bond_token_contract(self, bond_id: int) -> str:
        raise NotImplementedError

    def get_token_balance(self, bond_id: int, user: str) -> int:
        raise NotImplementedError


def _as_int(value: Any) -> int:
    if value is None:
        return 0
    return int(value)


def _as_address(value: Any) -> str:
    if isinstance(value, str) and value:
        return value
    return ZERO_ADDRESS


def decode_market_info(
    bond_id: int,
    result: Any,
    *,
    token_contract: str | None = None,
) -> CurveMarket:
    """Build a :class:`CurveMarket` from ``getMarketInfo``'s positional tuple.

    Short tuples are padded with zero values. ``token_contract`` fills the
    token address when the tuple predates that field.
    """

    if isinstance(result, (str, bytes)) or not isinstance(result, Sequence):
        raise MarketDecodeError(f"Market {bond_id} returned an unexpected result type")
    values = list(result)
    if len(values) < len(MARKET_INFO_FIELDS):
        logger.warning(
            "Market {} returned {} of {} fields; padding missing values",
            bond_id,
            len(values),
            len(MARKET_INFO_FIELDS),
        )
        values.extend([None] * (len(MARKET_INFO_FIELDS) - len(values)))
    fields = dict(zip(MARKET_INFO_FIELDS, values))

    try:
        market = CurveMarket(
            bond_id=bond_id,
            total_supply=_as_int(fields["total_supply"]),
            tokens_for_sale=_as_int(fields["tokens_for_sale"]),
            tokens_sold=_as_int(fields["tokens_sold"]),
            eth_reserve=_as_int(fields["eth_reserve"]),
            current_price=_as_int(fields["current_price"]),
            is_active=bool(fields["is_active"]),
            creator=_as_address(fields["creator"]),
            created_at=_as_int(fields["created_at"]),
            token_contract=_as_address(fields["token_contract"] or token_contract),
        )
    except (TypeError, ValueError) as exc:
        raise MarketDecodeError(f"Market {bond_id} has non-numeric fields") from exc
    return market

