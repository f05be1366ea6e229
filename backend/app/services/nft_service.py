"""NFT inventory assembled from 1inch and enriched with OpenSea offers."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Sequence

from loguru import logger

from app.domain import BestOffer, NFTAsset, UpstreamFetchError
from app.pricing.formatting import shorten_address
from ingestion.client import OneInchClient, OpenSeaClient
from ingestion.normalize import (
    empty_offer,
    is_known_collection,
    normalize_nft_payload,
    normalize_opensea_account_nfts,
    parse_best_offer_value,
    parse_order_maker,
)

from .scheduler import BatchScheduler


@dataclass(slots=True)
class OfferRequest:
    contract_address: str | None
    token_id: str | None
    slug: str | None


@dataclass(slots=True)
class OfferLookup:
    request: OfferRequest
    offer: BestOffer
    error: str | None = None


class NFTService:
    """Read-only facade over the NFT providers used by the inventory views."""

    def __init__(
        self,
        oneinch: OneInchClient,
        opensea: OpenSeaClient,
        scheduler: BatchScheduler,
        *,
        enrichment_limit: int = 10,
        best_offers_limit: int = 10,
    ):
        self._oneinch = oneinch
        self._opensea = opensea
        self._scheduler = scheduler
        self._enrichment_limit = enrichment_limit
        self._best_offers_limit = best_offers_limit

    def list_assets(
        self,
        owner: str,
        *,
        chain_id: int,
        limit: int = 50,
        offset: int = 0,
    ) -> list[NFTAsset]:
        """Return the owner's NFTs with best offers, minus unnamed collections."""

        payload = self._oneinch.fetch_nfts_by_owner(owner, chain_id=chain_id, limit=limit, offset=offset)
        assets = normalize_nft_payload(payload, chain_id)
        logger.info("Found {} NFTs from 1inch owner={} chain={}", len(assets), shorten_address(owner), chain_id)

        enriched = self._enrich(owner, assets)
        known = [asset for asset in enriched if is_known_collection(asset)]
        if len(known) != len(enriched):
            logger.debug("Filtered {} NFTs from unnamed collections", len(enriched) - len(known))
        return known

    def _slug_map(self, owner: str, chain_id: int) -> dict[str, str]:
        try:
            payload = self._opensea.fetch_account_nfts(owner)
        except UpstreamFetchError as exc:
            logger.warning("OpenSea account lookup failed, offers skipped: {}", exc)
            return {}
        mapping = {
            asset.contract_address.lower(): asset.collection_slug
            for asset in normalize_opensea_account_nfts(payload, chain_id)
            if asset.collection_slug
        }
        logger.debug("Created {} contract-to-slug mappings", len(mapping))
        return mapping

    def _enrich(self, owner: str, assets: Sequence[NFTAsset]) -> list[NFTAsset]:
        head = list(assets[: self._enrichment_limit])
        tail = list(assets[self._enrichment_limit :])
        if not head:
            return tail

        slugs = self._slug_map(owner, head[0].chain_id)
        head = [
            replace(asset, collection_slug=asset.collection_slug or slugs.get(asset.contract_address.lower()))
            for asset in head
        ]

        def lookup(asset: NFTAsset) -> BestOffer:
            if not asset.collection_slug:
                return empty_offer()
            return self.best_offer(asset.collection_slug, asset.token_id)

        offers = self._scheduler.run(lookup, head, on_error=lambda asset, exc: empty_offer())
        enriched = [
            replace(asset, max_offer=offer.max_offer, max_offer_bidder=offer.max_offer_bidder)
            for asset, offer in zip(head, offers)
        ]
        return enriched + [replace(asset, max_offer=None, max_offer_bidder=None) for asset in tail]

    def best_offer(self, slug: str, token_id: str) -> BestOffer:
        """Best offer for one NFT; provider failures resolve to an empty offer."""

        try:
            payload = self._opensea.fetch_best_offer(slug, token_id)
        except UpstreamFetchError as exc:
            logger.info("Could not fetch best offer for {}/{}: {}", slug, token_id, exc)
            return empty_offer()

        max_offer, order_hash = parse_best_offer_value(payload)
        bidder = None
        if order_hash:
            try:
                bidder = parse_order_maker(self._opensea.fetch_order(order_hash))
            except UpstreamFetchError as exc:
                logger.info("Could not fetch order details for bidder info: {}", exc)
        return BestOffer(max_offer=max_offer, max_offer_bidder=bidder)

    def best_offers(self, requests: Sequence[OfferRequest]) -> list[OfferLookup]:
        accepted = list(requests[: self._best_offers_limit])
        if len(requests) > len(accepted):
            logger.warning(
                "Best-offer batch truncated from {} to {} items", len(requests), len(accepted)
            )

        def lookup(request: OfferRequest) -> OfferLookup:
            if not request.slug or not request.token_id:
                return OfferLookup(request=request, offer=empty_offer(), error="Missing slug or tokenId")
            return OfferLookup(request=request, offer=self.best_offer(request.slug, request.token_id))

        return self._scheduler.run(
            lookup,
            accepted,
            on_error=lambda request, exc: OfferLookup(request=request, offer=empty_offer(), error=str(exc)),
        )

    def collection(self, contract_address: str) -> Any:
        return self._opensea.fetch_collection(contract_address)
