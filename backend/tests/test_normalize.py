from __future__ import annotations

from ingestion.normalize import (
    NFTPayloadShape,
    detect_nft_payload_shape,
    extract_history_items,
    is_known_collection,
    normalize_history_item,
    normalize_nft_payload,
    normalize_opensea_account_nfts,
    parse_best_offer_value,
    parse_order_maker,
)


def test_normalize_history_item_flattens_details(sample_history_payload):
    raw = extract_history_items(sample_history_payload)[1]

    event = normalize_history_item(raw)

    assert event.tx_hash.endswith("0002")
    assert event.block_number == 15000301
    assert event.time_ms == 1717000600000
    assert event.status == "completed"
    assert len(event.token_actions) == 1
    action = event.token_actions[0]
    assert action.standard == "Native"
    assert action.amount == 5_000_000_000_000
    assert event.raw_data == raw


def test_normalize_history_item_tolerates_missing_details():
    event = normalize_history_item({"timeMs": "1700000000000"})

    assert event.tx_hash is None
    assert event.time_ms == 1_700_000_000_000
    assert event.token_actions == ()


def test_normalize_history_item_parses_iso_timestamp_fallback():
    event = normalize_history_item(
        {"details": {"txHash": "0x1", "timestamp": "2024-06-01T00:00:00Z"}}
    )

    assert event.time_ms == 1_717_200_000_000


def test_extract_history_items_ignores_unexpected_payloads():
    assert extract_history_items([]) == []
    assert extract_history_items({"items": [{"a": 1}, "junk"]}) == [{"a": 1}]


def test_detect_nft_payload_shapes():
    assert detect_nft_payload_shape({"assets": []})[0] is NFTPayloadShape.ASSETS
    assert detect_nft_payload_shape({"data": {"tokens": []}})[0] is NFTPayloadShape.DATA_TOKENS
    assert detect_nft_payload_shape({"data": {"nfts": []}})[0] is NFTPayloadShape.DATA_NFTS
    assert detect_nft_payload_shape({"tokens": []})[0] is NFTPayloadShape.TOKENS
    assert detect_nft_payload_shape({"nfts": []})[0] is NFTPayloadShape.NFTS
    assert detect_nft_payload_shape([])[0] is NFTPayloadShape.BARE_LIST
    assert detect_nft_payload_shape({"unexpected": 1})[0] is NFTPayloadShape.UNKNOWN
    assert detect_nft_payload_shape("nope")[0] is NFTPayloadShape.UNKNOWN


def test_normalize_nft_payload_dedupes_and_drops_incomplete(sample_nft_payload):
    assets = normalize_nft_payload(sample_nft_payload, chain_id=1)

    assert [asset.token_id for asset in assets] == ["1234", "5678", "77"]
    ape = assets[0]
    assert ape.collection_name == "Bored Ape Yacht Club"
    assert ape.contract_address == "0xBC4CA0EdA7647A8aB7C2061c2E118A18a936f13D"
    assert ape.chain_id == 1
    assert ape.provider == "1inch"


def test_normalize_nft_payload_token_variant():
    payload = {
        "data": {
            "tokens": [
                {
                    "tokenAddress": "0xabc0000000000000000000000000000000000001",
                    "tokenId": "5",
                    "name": "Base Punk #5",
                    "image": "https://example.invalid/5.png",
                    "collectionName": "Base Punks",
                    "chainId": 8453,
                }
            ]
        }
    }

    (asset,) = normalize_nft_payload(payload, chain_id=1)

    assert asset.chain_id == 8453
    assert asset.collection_name == "Base Punks"
    assert asset.image_url == "https://example.invalid/5.png"


def test_normalize_nft_payload_nested_token_record():
    payload = [
        {
            "token": {
                "name": "Wrapped #1",
                "token_id": "1",
                "image_url": None,
                "asset_contract": {"address": "0xdef0000000000000000000000000000000000002", "name": "Wraps"},
            }
        }
    ]

    (asset,) = normalize_nft_payload(payload, chain_id=8453)

    assert asset.collection_name == "Wraps"
    assert asset.token_id == "1"


def test_unknown_payload_yields_no_assets():
    assert normalize_nft_payload({"error": "boom"}, chain_id=1) == []


def test_opensea_account_nfts_expose_slug(sample_opensea_account_payload):
    (asset,) = normalize_opensea_account_nfts(sample_opensea_account_payload, chain_id=1)

    assert asset.collection_slug == "boredapeyachtclub"
    assert asset.provider == "opensea"


def test_is_known_collection_filters_placeholders(sample_nft_payload):
    assets = normalize_nft_payload(sample_nft_payload, chain_id=1)

    assert [is_known_collection(asset) for asset in assets] == [True, True, False]


def test_parse_best_offer_value_scales_wei():
    payload = {"price": {"current": {"value": "12500000000000000000"}}, "order_hash": "0xfeed"}

    assert parse_best_offer_value(payload) == ("12.50000", "0xfeed")
    assert parse_best_offer_value({"price": {"value": "1000000000000000"}}) == ("0.00100", None)
    assert parse_best_offer_value({}) == (None, None)


def test_parse_order_maker():
    assert parse_order_maker({"order": {"maker": "0xbidder"}}) == "0xbidder"
    assert parse_order_maker({"order": None}) is None
