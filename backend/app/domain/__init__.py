"""Domain models representing bond markets, ledger activity and NFTs."""

from .errors import (
    InvalidAmountError,
    MarketDecodeError,
    MarketUnavailableError,
    UnknownCurveError,
    UpstreamFetchError,
)
from .models import (
    ZERO_ADDRESS,
    BestOffer,
    ClassifiedTransaction,
    CurveMarket,
    NFTAsset,
    PricePoint,
    RawLedgerEvent,
    TokenAction,
    TradeSide,
    TransactionType,
)

__all__ = [
    "ZERO_ADDRESS",
    "BestOffer",
    "ClassifiedTransaction",
    "CurveMarket",
    "InvalidAmountError",
    "MarketDecodeError",
    "MarketUnavailableError",
    "NFTAsset",
    "PricePoint",
    "RawLedgerEvent",
    "TokenAction",
    "TradeSide",
    "TransactionType",
    "UnknownCurveError",
    "UpstreamFetchError",
]
