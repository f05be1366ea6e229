"""Trade previews that prefer the contract's own figures over simulation."""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from app.domain import (
    ZERO_ADDRESS,
    CurveMarket,
    InvalidAmountError,
    MarketUnavailableError,
    TradeSide,
)
from app.pricing import BondingCurve, cost_to_buy, refund_from_sell
from ingestion.contracts import CurveAmmReader, decode_market_info

SOURCE_CONTRACT = "contract"
SOURCE_SIMULATED = "simulated"


@dataclass(slots=True)
class Quote:
    side: TradeSide
    amount: int
    amount_wei: int
    source: str
    curve: str
    bond_id: int | None = None

    @property
    def is_live(self) -> bool:
        return self.source == SOURCE_CONTRACT


def validate_trade(side: TradeSide, amount: int, *, tokens_sold: int, tokens_available: int | None = None) -> None:
    """Reject trade sizes the market cannot honour."""

    if amount <= 0:
        raise InvalidAmountError("Trade amount must be a positive number of tokens")
    if side is TradeSide.SELL and amount > tokens_sold:
        raise InvalidAmountError(
            f"Cannot sell {amount} tokens when only {tokens_sold} have been sold"
        )
    if side is TradeSide.BUY and tokens_available is not None and amount > tokens_available:
        raise InvalidAmountError(
            f"Cannot buy {amount} tokens when only {tokens_available} remain for sale"
        )


class MarketQuoteService:
    """Quote buys and sells, falling back to the local curve when the chain is unavailable."""

    def __init__(self, curve: BondingCurve, reader: CurveAmmReader | None = None):
        self._curve = curve
        self._reader = reader

    @property
    def curve_name(self) -> str:
        return self._curve.name

    def load_market(self, bond_id: int) -> CurveMarket:
        if self._reader is None:
            raise RuntimeError("No CurveAMM reader configured")
        result = self._reader.get_market_info(bond_id)
        market = decode_market_info(bond_id, result)
        if market.token_contract == ZERO_ADDRESS:
            market.token_contract = self._reader.get_bond_token_contract(bond_id) or market.token_contract
        return market

    def simulate(self, side: TradeSide, amount: int, tokens_sold: int, *, bond_id: int | None = None) -> Quote:
        validate_trade(side, amount, tokens_sold=tokens_sold)
        return Quote(
            side=side,
            amount=amount,
            amount_wei=self._simulated_amount(side, amount, tokens_sold),
            source=SOURCE_SIMULATED,
            curve=self._curve.name,
            bond_id=bond_id,
        )

    def quote(self, market: CurveMarket, side: TradeSide, amount: int) -> Quote:
        validate_trade(
            side,
            amount,
            tokens_sold=market.tokens_sold,
            tokens_available=market.tokens_available,
        )
        live = self._live_amount(market.bond_id, side, amount)
        if live is not None:
            return Quote(
                side=side,
                amount=amount,
                amount_wei=live,
                source=SOURCE_CONTRACT,
                curve=self._curve.name,
                bond_id=market.bond_id,
            )
        return Quote(
            side=side,
            amount=amount,
            amount_wei=self._simulated_amount(side, amount, market.tokens_sold),
            source=SOURCE_SIMULATED,
            curve=self._curve.name,
            bond_id=market.bond_id,
        )

    def preview(
        self,
        side: TradeSide,
        amount: int,
        *,
        bond_id: int | None = None,
        tokens_sold: int | None = None,
    ) -> Quote:
        """Quote against the live market when it can be read, else against ``tokens_sold``."""

        market = self._try_load_market(bond_id) if bond_id is not None else None
        if market is not None:
            return self.quote(market, side, amount)
        if tokens_sold is None:
            if bond_id is None:
                raise MarketUnavailableError("Either bondId or tokensSold is required")
            raise MarketUnavailableError(
                f"Market {bond_id} could not be read; pass tokensSold to simulate"
            )
        return self.simulate(side, amount, tokens_sold, bond_id=bond_id)

    def _try_load_market(self, bond_id: int) -> CurveMarket | None:
        if self._reader is None:
            return None
        try:
            return self.load_market(bond_id)
        except Exception as exc:  # RPC adapters raise transport-specific errors
            logger.warning("Market read failed bond={}; using simulated curve: {}", bond_id, exc)
            return None

    def _simulated_amount(self, side: TradeSide, amount: int, tokens_sold: int) -> int:
        if side is TradeSide.BUY:
            return cost_to_buy(self._curve, amount, tokens_sold)
        return refund_from_sell(self._curve, amount, tokens_sold)

    def _live_amount(self, bond_id: int, side: TradeSide, amount: int) -> int | None:
        if self._reader is None:
            return None
        try:
            if side is TradeSide.BUY:
                return int(self._reader.preview_buy_cost(bond_id, amount))
            return int(self._reader.preview_sell_refund(bond_id, amount))
        except Exception as exc:  # RPC adapters raise transport-specific errors
            logger.warning(
                "Contract preview failed bond={} side={} amount={}; using simulated curve: {}",
                bond_id,
                side.value,
                amount,
                exc,
            )
            return None
