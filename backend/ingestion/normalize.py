from __future__ import annotations

from enum import Enum
from typing import Any, Callable

from dateutil import parser as date_parser
from loguru import logger

from app.domain import BestOffer, NFTAsset, RawLedgerEvent, TokenAction
from app.pricing.formatting import wei_to_eth_string

_UNKNOWN_COLLECTION_MARKERS = ("unknown", "unnamed", "untitled")


def _parse_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        text = str(value).strip()
        if text.lower().startswith("0x"):
            return int(text, 16)
        return int(text)
    except (TypeError, ValueError):
        try:
            return int(float(value))
        except (TypeError, ValueError):
            return None


def _parse_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _parse_timestamp_ms(value: Any) -> int | None:
    """Accept epoch milliseconds or an ISO-8601 string."""

    parsed = _parse_int(value)
    if parsed is not None:
        return parsed
    if not value:
        return None
    try:
        moment = date_parser.isoparse(str(value))
    except (ValueError, TypeError):
        return None
    return int(moment.timestamp() * 1000)


def _normalize_token_action(raw_action: dict[str, Any]) -> TokenAction:
    return TokenAction(
        address=_parse_str(raw_action.get("address")),
        standard=_parse_str(raw_action.get("standard")),
        direction=_parse_str(raw_action.get("direction")),
        from_address=_parse_str(raw_action.get("fromAddress")),
        to_address=_parse_str(raw_action.get("toAddress")),
        amount=_parse_int(raw_action.get("amount")),
    )


def normalize_history_item(raw_item: dict[str, Any]) -> RawLedgerEvent:
    """Flatten a 1inch history item (``timeMs`` + ``details``) into a ledger event."""

    details = raw_item.get("details")
    if not isinstance(details, dict):
        details = {}

    raw_actions = details.get("tokenActions")
    actions = tuple(
        _normalize_token_action(action)
        for action in (raw_actions if isinstance(raw_actions, list) else [])
        if isinstance(action, dict)
    )

    time_ms = _parse_timestamp_ms(raw_item.get("timeMs"))
    if time_ms is None:
        time_ms = _parse_timestamp_ms(details.get("timestamp") or raw_item.get("timestamp"))

    return RawLedgerEvent(
        tx_hash=_parse_str(details.get("txHash")),
        block_number=_parse_int(details.get("blockNumber")),
        time_ms=time_ms,
        from_address=_parse_str(details.get("fromAddress")),
        to_address=_parse_str(details.get("toAddress")),
        input=_parse_str(details.get("input")),
        status=_parse_str(details.get("status")),
        token_actions=actions,
        event_name=_parse_str(details.get("eventName") or raw_item.get("eventName")),
        raw_data=raw_item,
    )


def extract_history_items(payload: Any) -> list[dict[str, Any]]:
    if isinstance(payload, dict):
        items = payload.get("items")
        if isinstance(items, list):
            return [item for item in items if isinstance(item, dict)]
    logger.warning("1inch history payload has no items list; treating as empty")
    return []


class NFTPayloadShape(str, Enum):
    """Envelope variants observed from the NFT-by-owner providers."""

    ASSETS = "assets"
    DATA_TOKENS = "data.tokens"
    DATA_NFTS = "data.nfts"
    TOKENS = "tokens"
    NFTS = "nfts"
    BARE_LIST = "list"
    UNKNOWN = "unknown"


def detect_nft_payload_shape(payload: Any) -> tuple[NFTPayloadShape, list[Any]]:
    """Identify which envelope ``payload`` uses and return its record list."""

    if isinstance(payload, list):
        return NFTPayloadShape.BARE_LIST, payload
    if not isinstance(payload, dict):
        return NFTPayloadShape.UNKNOWN, []

    if isinstance(payload.get("assets"), list):
        return NFTPayloadShape.ASSETS, payload["assets"]
    data = payload.get("data")
    if isinstance(data, dict):
        if isinstance(data.get("tokens"), list):
            return NFTPayloadShape.DATA_TOKENS, data["tokens"]
        if isinstance(data.get("nfts"), list):
            return NFTPayloadShape.DATA_NFTS, data["nfts"]
    if isinstance(payload.get("tokens"), list):
        return NFTPayloadShape.TOKENS, payload["tokens"]
    if isinstance(payload.get("nfts"), list):
        return NFTPayloadShape.NFTS, payload["nfts"]
    return NFTPayloadShape.UNKNOWN, []


def _parse_asset_record(record: dict[str, Any], chain_id: int) -> NFTAsset | None:
    # OpenSea v1 style, optionally wrapped in a ``token`` object.
    source = record
    nested = record.get("token")
    if not isinstance(record.get("asset_contract"), dict) and isinstance(nested, dict):
        source = nested
    contract = source.get("asset_contract") if isinstance(source.get("asset_contract"), dict) else {}
    collection = source.get("collection") if isinstance(source.get("collection"), dict) else {}

    contract_address = _parse_str(contract.get("address"))
    token_id = _parse_str(source.get("token_id"))
    if not contract_address or token_id is None:
        return None

    name = _parse_str(source.get("name"))
    collection_name = (
        _parse_str(record.get("collection_name"))
        or _parse_str(collection.get("name"))
        or _parse_str(contract.get("name"))
        or name
    )
    return NFTAsset(
        chain_id=chain_id,
        contract_address=contract_address,
        token_id=token_id,
        name=name or "Unnamed NFT",
        image_url=_parse_str(source.get("image_url")),
        collection_name=collection_name,
        collection_slug=_parse_str(record.get("collection_slug") or collection.get("slug")),
        max_offer=_parse_str(record.get("max_offer")),
        max_offer_bidder=_parse_str(record.get("max_offer_bidder")),
        provider="1inch",
        raw_data=record,
    )


def _parse_token_record(record: dict[str, Any], chain_id: int) -> NFTAsset | None:
    # 1inch token style: camelCase keys, flat contract address.
    contract_address = _parse_str(record.get("tokenAddress") or record.get("contractAddress"))
    token_id = _parse_str(record.get("tokenId"))
    if not contract_address or token_id is None:
        return None
    name = _parse_str(record.get("name"))
    return NFTAsset(
        chain_id=_parse_int(record.get("chainId")) or chain_id,
        contract_address=contract_address,
        token_id=token_id,
        name=name or "Unnamed NFT",
        image_url=_parse_str(record.get("image") or record.get("imageUrl")),
        collection_name=_parse_str(record.get("collectionName")) or name,
        collection_slug=_parse_str(record.get("collectionSlug")),
        provider="1inch",
        raw_data=record,
    )


def _parse_opensea_nft(record: dict[str, Any], chain_id: int) -> NFTAsset | None:
    # OpenSea v2 account NFT: ``collection`` is the slug.
    contract_address = _parse_str(record.get("contract"))
    token_id = _parse_str(record.get("identifier"))
    if not contract_address or token_id is None:
        return None
    name = _parse_str(record.get("name"))
    slug = _parse_str(record.get("collection"))
    return NFTAsset(
        chain_id=chain_id,
        contract_address=contract_address,
        token_id=token_id,
        name=name or "Unnamed NFT",
        image_url=_parse_str(record.get("image_url") or record.get("display_image_url")),
        collection_name=name or slug,
        collection_slug=slug,
        provider="opensea",
        raw_data=record,
    )


_RECORD_PARSERS: dict[NFTPayloadShape, Callable[[dict[str, Any], int], NFTAsset | None]] = {
    NFTPayloadShape.ASSETS: _parse_asset_record,
    NFTPayloadShape.BARE_LIST: _parse_asset_record,
    NFTPayloadShape.DATA_TOKENS: _parse_token_record,
    NFTPayloadShape.TOKENS: _parse_token_record,
    NFTPayloadShape.DATA_NFTS: _parse_opensea_nft,
    NFTPayloadShape.NFTS: _parse_opensea_nft,
}


def normalize_nft_payload(payload: Any, chain_id: int) -> list[NFTAsset]:
    """Parse any supported NFT envelope into unique canonical assets."""

    shape, records = detect_nft_payload_shape(payload)
    parser = _RECORD_PARSERS.get(shape)
    if parser is None:
        logger.warning("Unrecognised NFT payload shape; returning no assets")
        return []

    assets: list[NFTAsset] = []
    seen: set[tuple[int, str, str]] = set()
    for record in records:
        if not isinstance(record, dict):
            continue
        asset = parser(record, chain_id)
        if asset is None:
            logger.debug("Dropping NFT record without contract/token id shape={}", shape.value)
            continue
        if asset.key in seen:
            continue
        seen.add(asset.key)
        assets.append(asset)
    return assets


def normalize_opensea_account_nfts(payload: Any, chain_id: int) -> list[NFTAsset]:
    if not isinstance(payload, dict) or not isinstance(payload.get("nfts"), list):
        return []
    return normalize_nft_payload({"nfts": payload["nfts"]}, chain_id)


def is_known_collection(asset: NFTAsset) -> bool:
    name = (asset.collection_name or "").strip().lower()
    if not name:
        return False
    return not any(marker in name for marker in _UNKNOWN_COLLECTION_MARKERS)


def parse_best_offer_value(payload: Any) -> tuple[str | None, str | None]:
    """Return ``(max_offer_eth, order_hash)`` from an OpenSea best-offer body."""

    if not isinstance(payload, dict):
        return None, None
    max_offer: str | None = None
    price = payload.get("price")
    if isinstance(price, dict):
        current = price.get("current") if isinstance(price.get("current"), dict) else {}
        value = _parse_int(current.get("value") or price.get("value"))
        if value:
            max_offer = wei_to_eth_string(value, 5)
    return max_offer, _parse_str(payload.get("order_hash"))


def parse_order_maker(payload: Any) -> str | None:
    if not isinstance(payload, dict):
        return None
    order = payload.get("order")
    if not isinstance(order, dict):
        return None
    return _parse_str(order.get("maker"))


def empty_offer() -> BestOffer:
    return BestOffer(max_offer=None, max_offer_bidder=None)
