"""Typed domain representations shared by ingestion, pricing and the API."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


class TransactionType(str, Enum):
    BUY = "buy"
    SELL = "sell"
    MARKET_CREATED = "market_created"
    UNKNOWN = "unknown"


class TradeSide(str, Enum):
    BUY = "buy"
    SELL = "sell"


@dataclass(slots=True, frozen=True)
class TokenAction:
    """Single token transfer reported inside a history event."""

    address: str | None
    standard: str | None
    direction: str | None
    from_address: str | None
    to_address: str | None
    amount: int | None


@dataclass(slots=True, frozen=True)
class RawLedgerEvent:
    """One history envelope as returned by the indexer, before classification."""

    tx_hash: str | None
    block_number: int | None
    time_ms: int | None
    from_address: str | None
    to_address: str | None
    input: str | None
    status: str | None
    token_actions: tuple[TokenAction, ...] = ()
    event_name: str | None = None
    raw_data: dict[str, Any] | None = field(default=None, compare=False)


@dataclass(slots=True, frozen=True)
class ClassifiedTransaction:
    """Ledger event annotated with its inferred bond-market meaning."""

    tx_hash: str
    block_number: int | None
    timestamp: int
    from_address: str | None
    to_address: str | None
    input: str | None
    status: str | None
    transaction_type: TransactionType
    bond_id: int | None
    eth_amount: str | None
    method_id: str | None
    event_name: str | None = None


@dataclass(slots=True, frozen=True)
class PricePoint:
    """Synthetic chart point; illustrative only."""

    timestamp: int
    price: float
    token_number: int
    type: TransactionType


@dataclass(slots=True)
class CurveMarket:
    """Snapshot of one bonding-curve market read from the AMM contract."""

    bond_id: int
    total_supply: int
    tokens_for_sale: int
    tokens_sold: int
    eth_reserve: int
    current_price: int
    is_active: bool
    creator: str
    created_at: int
    token_contract: str = ZERO_ADDRESS

    @property
    def tokens_available(self) -> int:
        return self.tokens_for_sale - self.tokens_sold

    @property
    def eth_per_token(self) -> int:
        if self.tokens_sold == 0:
            return 0
        return self.eth_reserve // self.tokens_sold


@dataclass(slots=True)
class NFTAsset:
    """Canonical NFT record regardless of which provider reported it."""

    chain_id: int
    contract_address: str
    token_id: str
    name: str
    image_url: str | None
    collection_name: str | None
    collection_slug: str | None = None
    max_offer: str | None = None
    max_offer_bidder: str | None = None
    provider: str = "1inch"
    raw_data: dict[str, Any] | None = None

    @property
    def key(self) -> tuple[int, str, str]:
        return (self.chain_id, self.contract_address.lower(), self.token_id)


@dataclass(slots=True, frozen=True)
class BestOffer:
    max_offer: str | None = None
    max_offer_bidder: str | None = None
