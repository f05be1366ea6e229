"""Bond activity feed built from the 1inch history API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from loguru import logger

from app.domain import ClassifiedTransaction, PricePoint
from app.pricing import synthesize_price_history
from app.pricing.formatting import shorten_address
from ingestion.classify import classify_events
from ingestion.client import OneInchClient
from ingestion.normalize import extract_history_items, normalize_history_item


@dataclass(slots=True)
class TransactionHistoryQuery:
    contract_address: str
    chain_id: int
    limit: int = 100
    offset: int = 0
    from_timestamp: int | None = None
    to_timestamp: int | None = None
    bond_id: int | None = None

    def to_request_params(self) -> dict[str, Any]:
        """Echo of the caller's parameters, keyed as the frontend sends them."""

        return {
            "chainId": self.chain_id,
            "limit": self.limit,
            "offset": self.offset,
            "fromTimestamp": self.from_timestamp,
            "toTimestamp": self.to_timestamp,
            "bondId": self.bond_id,
        }


@dataclass(slots=True)
class TransactionHistoryResult:
    query: TransactionHistoryQuery
    transactions: Sequence[ClassifiedTransaction]

    @property
    def total_count(self) -> int:
        return len(self.transactions)


class TransactionHistoryService:
    """Fetch one page of raw history and classify it for a bond feed."""

    def __init__(self, client: OneInchClient, *, market_creation_selectors: frozenset[str]):
        self._client = client
        self._selectors = market_creation_selectors

    def history(self, query: TransactionHistoryQuery) -> TransactionHistoryResult:
        payload = self._client.fetch_history(
            query.contract_address,
            chain_id=query.chain_id,
            limit=query.limit,
            offset=query.offset,
            from_timestamp=query.from_timestamp,
            to_timestamp=query.to_timestamp,
        )
        events = [normalize_history_item(item) for item in extract_history_items(payload)]
        transactions = classify_events(
            events,
            query.contract_address,
            market_creation_selectors=self._selectors,
            bond_id=query.bond_id,
        )
        logger.info(
            "Classified {} of {} history events contract={} bond={}",
            len(transactions),
            len(events),
            shorten_address(query.contract_address),
            query.bond_id,
        )
        return TransactionHistoryResult(query=query, transactions=transactions)

    def price_chart(self, query: TransactionHistoryQuery) -> list[PricePoint]:
        result = self.history(query)
        return synthesize_price_history(result.transactions)
