from __future__ import annotations

from app.domain import ClassifiedTransaction, PricePoint, TradeSide, TransactionType
from app.schemas import BestOffersRequest, ClassifiedTransaction as ClassifiedTransactionSchema
from app.schemas import PricePoint as PricePointSchema
from app.schemas import Quote


def test_classified_transaction_serializes_camel_case():
    """Verify domain transactions validate from attributes and dump with frontend keys."""
    tx = ClassifiedTransaction(
        tx_hash="0xabc",
        block_number=10,
        timestamp=1_717_000_000_000,
        from_address="0x1",
        to_address="0x2",
        input="0x3610724e",
        status="completed",
        transaction_type=TransactionType.BUY,
        bond_id=1,
        eth_amount="0.000005",
        method_id="0x3610724e",
    )

    payload = ClassifiedTransactionSchema.model_validate(tx).model_dump(by_alias=True, mode="json")

    assert payload["hash"] == "0xabc"
    assert "txHash" not in payload
    assert payload["transactionType"] == "buy"
    assert payload["ethAmount"] == "0.000005"
    assert payload["eventName"] is None


def test_price_point_keeps_float_price():
    point = PricePoint(timestamp=1, price=0.0011, token_number=1, type=TransactionType.BUY)

    payload = PricePointSchema.model_validate(point).model_dump(by_alias=True, mode="json")

    assert payload == {"timestamp": 1, "price": 0.0011, "tokenNumber": 1, "type": "buy"}


def test_quote_serializes_wei_as_string():
    quote = Quote(
        side=TradeSide.SELL,
        amount=2,
        amount_wei=10**30,
        amount_eth="1000000000000.000000",
        amount_display="1000000000000.000000",
        source="simulated",
        curve="quadratic",
        is_live=False,
    )

    payload = quote.model_dump(by_alias=True, mode="json")

    assert payload["amountWei"] == str(10**30)
    assert payload["side"] == "sell"
    assert payload["isLive"] is False


def test_best_offers_request_accepts_camel_and_snake_keys():
    body = BestOffersRequest.model_validate(
        {"nfts": [{"contractAddress": "0xa", "tokenId": "1"}, {"token_id": "2", "slug": "apes"}]}
    )

    assert body.nfts[0].contract_address == "0xa"
    assert body.nfts[0].token_id == "1"
    assert body.nfts[1].token_id == "2"
    assert body.nfts[1].slug == "apes"


def test_best_offer_item_accepts_numeric_token_id():
    item = BestOffersRequest.model_validate({"nfts": [{"tokenId": 1234, "slug": "apes"}]}).nfts[0]

    assert item.token_id == "1234"
