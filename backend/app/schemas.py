from typing import Any

from pydantic import BaseModel, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from app.domain import TradeSide, TransactionType

_CAMEL_CONFIG = {"from_attributes": True, "populate_by_name": True, "alias_generator": to_camel}


class ClassifiedTransaction(BaseModel):
    tx_hash: str = Field(serialization_alias="hash")
    block_number: int | None = None
    timestamp: int
    from_address: str | None = None
    to_address: str | None = None
    input: str | None = None
    status: str | None = None
    transaction_type: TransactionType
    bond_id: int | None = None
    eth_amount: str | None = None
    method_id: str | None = None
    event_name: str | None = None

    model_config = _CAMEL_CONFIG


class TransactionHistoryResponse(BaseModel):
    transactions: list[ClassifiedTransaction]
    processed: bool = True
    contract_address: str
    chain_id: int
    total_count: int
    request_params: dict[str, Any]

    model_config = _CAMEL_CONFIG


class PricePoint(BaseModel):
    timestamp: int
    price: float
    token_number: int
    type: TransactionType

    model_config = _CAMEL_CONFIG


class PriceChartResponse(BaseModel):
    contract_address: str
    bond_id: int | None = None
    illustrative: bool = Field(
        True, description="Points are a stepped approximation, not real curve state"
    )
    points: list[PricePoint]

    model_config = _CAMEL_CONFIG


class NFTAsset(BaseModel):
    chain_id: int
    contract_address: str
    token_id: str
    name: str
    image_url: str | None = None
    collection_name: str | None = None
    collection_slug: str | None = None
    max_offer: str | None = None
    max_offer_bidder: str | None = None
    provider: str

    model_config = {"from_attributes": True}


class NFTAssetList(BaseModel):
    assets: list[NFTAsset]


class BestOffer(BaseModel):
    max_offer: str | None = None
    max_offer_bidder: str | None = None

    model_config = _CAMEL_CONFIG


class BestOfferItem(BaseModel):
    contract_address: str | None = None
    token_id: str | None = None
    slug: str | None = None

    model_config = _CAMEL_CONFIG

    @field_validator("token_id", mode="before")
    @classmethod
    def _token_id_as_text(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class BestOffersRequest(BaseModel):
    nfts: list[BestOfferItem]


class BestOfferResult(BestOfferItem):
    max_offer: str | None = None
    max_offer_bidder: str | None = None
    error: str | None = None


class BestOffersResponse(BaseModel):
    results: list[BestOfferResult]


class Quote(BaseModel):
    side: TradeSide
    amount: int
    amount_wei: int
    amount_eth: str
    amount_display: str
    source: str
    curve: str
    is_live: bool
    bond_id: int | None = None

    model_config = _CAMEL_CONFIG

    @field_serializer("amount_wei")
    def _serialize_wei(self, value: int) -> str:
        # Wei amounts overflow JavaScript numbers.
        return str(value)


class ErrorResponse(BaseModel):
    error: str
    details: str | None = None
