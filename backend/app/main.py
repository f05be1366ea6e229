from __future__ import annotations

from collections.abc import Generator
from typing import Annotated

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse
from loguru import logger

from . import schemas
from .core.config import settings
from .domain import (
    InvalidAmountError,
    MarketUnavailableError,
    TradeSide,
    UnknownCurveError,
    UpstreamFetchError,
)
from .pricing import build_curve
from .pricing.formatting import format_eth, wei_to_eth_string
from .services.nft_service import NFTService, OfferRequest
from .services.quote_service import MarketQuoteService
from .services.scheduler import BatchScheduler
from .services.transaction_service import TransactionHistoryQuery, TransactionHistoryService
from ingestion.client import OneInchClient, OpenSeaClient
from ingestion.contracts import CurveAmmReader

app = FastAPI(title="BUNDSX API", version="0.1.0", debug=settings.debug)


@app.on_event("startup")
def on_startup() -> None:
    """Log the resolved runtime configuration when the API boots."""

    logger.info(
        "BUNDSX API starting environment={} chain={} curve={} amm={}",
        settings.environment,
        settings.default_chain_id,
        settings.curve_shape,
        settings.curve_amm_address,
    )


@app.exception_handler(UpstreamFetchError)
def _upstream_error_handler(request: Request, exc: UpstreamFetchError) -> JSONResponse:
    logger.error("Upstream failure on {}: {}", request.url.path, exc.details)
    payload = schemas.ErrorResponse(error=f"Failed to fetch data from {exc.provider}", details=exc.details)
    return JSONResponse(status_code=500, content=payload.model_dump())


@app.exception_handler(InvalidAmountError)
@app.exception_handler(UnknownCurveError)
@app.exception_handler(MarketUnavailableError)
def _bad_request_handler(request: Request, exc: Exception) -> JSONResponse:
    payload = schemas.ErrorResponse(error="Invalid request", details=str(exc))
    return JSONResponse(status_code=400, content=payload.model_dump())


@app.get("/", tags=["system"])
def root() -> dict[str, str]:
    return {"message": "Welcome to BUNDSX Backend API"}


@app.get("/healthz", tags=["system"])
def healthcheck() -> dict[str, str]:
    """Basic readiness probe consumed by infrastructure monitors."""

    return {"status": "ok"}


def _oneinch_client() -> Generator[OneInchClient, None, None]:
    with OneInchClient() as client:
        yield client


def _opensea_client() -> Generator[OpenSeaClient, None, None]:
    with OpenSeaClient() as client:
        yield client


def _transaction_service(client: OneInchClient = Depends(_oneinch_client)) -> TransactionHistoryService:
    """Provide the history service wired with a 1inch client."""

    return TransactionHistoryService(client, market_creation_selectors=settings.market_creation_selector_set)


def _nft_service(
    oneinch: OneInchClient = Depends(_oneinch_client),
    opensea: OpenSeaClient = Depends(_opensea_client),
) -> NFTService:
    scheduler = BatchScheduler(
        batch_size=settings.enrichment_batch_size,
        max_workers=settings.enrichment_max_workers,
        delay_seconds=settings.enrichment_delay_seconds,
    )
    return NFTService(
        oneinch,
        opensea,
        scheduler,
        enrichment_limit=settings.enrichment_limit,
        best_offers_limit=settings.best_offers_limit,
    )


def _curve_amm_reader() -> CurveAmmReader | None:
    """CurveAMM RPC adapter; none is bundled, so quotes fall back to simulation."""

    return None


def _quote_service(
    curve: Annotated[str | None, Query(description="Curve shape (quadratic|linear)")] = None,
    reader: CurveAmmReader | None = Depends(_curve_amm_reader),
) -> MarketQuoteService:
    return MarketQuoteService(
        build_curve(
            curve or settings.curve_shape,
            price_scale=settings.price_scale,
            steepness=settings.curve_steepness,
        ),
        reader,
    )


def _history_query(
    contract_address: str,
    *,
    chain_id: Annotated[int | None, Query(alias="chainId", description="EVM chain id")] = None,
    limit: Annotated[int, Query(ge=0, le=1000)] = 100,
    offset: Annotated[int, Query(ge=0)] = 0,
    from_timestamp: Annotated[int | None, Query(alias="fromTimestamp", ge=0)] = None,
    to_timestamp: Annotated[int | None, Query(alias="toTimestamp", ge=0)] = None,
    bond_id: Annotated[int | None, Query(alias="bondId", ge=0)] = None,
) -> TransactionHistoryQuery:
    """Normalize shared history query parameters."""

    return TransactionHistoryQuery(
        contract_address=contract_address,
        chain_id=chain_id if chain_id is not None else settings.default_chain_id,
        limit=limit,
        offset=offset,
        from_timestamp=from_timestamp,
        to_timestamp=to_timestamp,
        bond_id=bond_id,
    )


@app.get(
    "/api/transactions/history/{contract_address}",
    response_model=schemas.TransactionHistoryResponse,
    responses={500: {"model": schemas.ErrorResponse}},
    tags=["transactions"],
)
def transaction_history(
    *,
    query: TransactionHistoryQuery = Depends(_history_query),
    service: TransactionHistoryService = Depends(_transaction_service),
):
    """Classified buy/sell/market-created activity for the AMM contract, newest first."""

    result = service.history(query)
    return schemas.TransactionHistoryResponse(
        transactions=[schemas.ClassifiedTransaction.model_validate(tx) for tx in result.transactions],
        processed=True,
        contract_address=query.contract_address,
        chain_id=query.chain_id,
        total_count=result.total_count,
        request_params=query.to_request_params(),
    )


@app.get(
    "/api/transactions/chart/{contract_address}",
    response_model=schemas.PriceChartResponse,
    responses={500: {"model": schemas.ErrorResponse}},
    tags=["transactions"],
)
def transaction_chart(
    *,
    query: TransactionHistoryQuery = Depends(_history_query),
    service: TransactionHistoryService = Depends(_transaction_service),
):
    """Illustrative price series replayed from the bond's activity."""

    points = service.price_chart(query)
    return schemas.PriceChartResponse(
        contract_address=query.contract_address,
        bond_id=query.bond_id,
        points=[schemas.PricePoint.model_validate(point) for point in points],
    )


@app.get("/api/nft/tokens/{address}", response_model=schemas.NFTAssetList, tags=["nft"])
def nft_tokens(
    address: str,
    *,
    chain_id: Annotated[int, Query(alias="chainId")] = 1,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
    service: NFTService = Depends(_nft_service),
):
    """NFTs held by ``address`` with OpenSea best offers attached."""

    assets = service.list_assets(address, chain_id=chain_id, limit=limit, offset=offset)
    return schemas.NFTAssetList(assets=[schemas.NFTAsset.model_validate(asset) for asset in assets])


@app.get("/api/opensea/best-offer/{slug}/{token_id}", response_model=schemas.BestOffer, tags=["opensea"])
def best_offer(slug: str, token_id: str, service: NFTService = Depends(_nft_service)):
    offer = service.best_offer(slug, token_id)
    return schemas.BestOffer.model_validate(offer)


@app.get("/api/opensea/collection/{contract_address}", tags=["opensea"])
def collection_info(contract_address: str, service: NFTService = Depends(_nft_service)):
    return service.collection(contract_address)


@app.post("/api/opensea/best-offers", response_model=schemas.BestOffersResponse, tags=["opensea"])
def best_offers(body: schemas.BestOffersRequest, service: NFTService = Depends(_nft_service)):
    requests = [
        OfferRequest(contract_address=item.contract_address, token_id=item.token_id, slug=item.slug)
        for item in body.nfts
    ]
    lookups = service.best_offers(requests)
    return schemas.BestOffersResponse(
        results=[
            schemas.BestOfferResult(
                contract_address=lookup.request.contract_address,
                token_id=lookup.request.token_id,
                slug=lookup.request.slug,
                max_offer=lookup.offer.max_offer,
                max_offer_bidder=lookup.offer.max_offer_bidder,
                error=lookup.error,
            )
            for lookup in lookups
        ]
    )


@app.get("/api/pricing/quote", response_model=schemas.Quote, tags=["pricing"])
def pricing_quote(
    *,
    amount: Annotated[int, Query(description="Number of whole tokens to trade")],
    side: Annotated[TradeSide, Query()] = TradeSide.BUY,
    tokens_sold: Annotated[int | None, Query(alias="tokensSold", ge=0)] = None,
    bond_id: Annotated[int | None, Query(alias="bondId", ge=0)] = None,
    service: MarketQuoteService = Depends(_quote_service),
):
    """Cost or refund for a trade, from the contract preview when the market can be read."""

    quote = service.preview(side, amount, bond_id=bond_id, tokens_sold=tokens_sold)
    return schemas.Quote(
        side=quote.side,
        amount=quote.amount,
        amount_wei=quote.amount_wei,
        amount_eth=wei_to_eth_string(quote.amount_wei, 6),
        amount_display=format_eth(quote.amount_wei),
        source=quote.source,
        curve=quote.curve,
        is_live=quote.is_live,
        bond_id=quote.bond_id,
    )
