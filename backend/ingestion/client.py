from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from app.core.config import settings
from app.domain import UpstreamFetchError


def _get_json(
    client: httpx.Client,
    provider: str,
    path: str,
    params: dict[str, Any] | None = None,
) -> Any:
    """GET ``path`` and decode JSON, translating failures to :class:`UpstreamFetchError`."""

    try:
        response = client.get(path, params=params)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code
        body = exc.response.text
        logger.error("{} GET {} failed status={} body={}", provider, path, status, body[:200])
        raise UpstreamFetchError(
            provider,
            f"{provider} request failed with status {status}",
            status_code=status,
            body=body,
        ) from exc
    except httpx.HTTPError as exc:
        logger.error("{} GET {} failed: {}", provider, path, exc)
        raise UpstreamFetchError(provider, f"{provider} request failed: {exc}") from exc

    try:
        return response.json()
    except ValueError as exc:
        raise UpstreamFetchError(
            provider,
            f"{provider} returned a non-JSON body",
            status_code=response.status_code,
            body=response.text,
        ) from exc


class OneInchClient:
    """Thin wrapper around the 1inch history and NFT endpoints."""

    provider = "1inch"

    def __init__(
        self,
        *,
        base_url: str | None = None,
        api_key: str | None = None,
        history_path: str | None = None,
        nft_path: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url or str(settings.oneinch_base_url)
        self.history_path = history_path or settings.oneinch_history_path
        self.nft_path = nft_path or settings.oneinch_nft_path
        self.timeout = timeout or settings.http_timeout_seconds
        self.client = httpx.Client(
            base_url=self.base_url,
            timeout=self.timeout,
            headers={
                "Authorization": f"Bearer {api_key or settings.oneinch_api_key}",
                "Accept": "application/json",
            },
            transport=transport,
        )

    def fetch_history(
        self,
        address: str,
        *,
        chain_id: int,
        limit: int,
        offset: int = 0,
        from_timestamp: int | None = None,
        to_timestamp: int | None = None,
    ) -> Any:
        """Return one page of history events; timestamps are given in seconds."""

        params: dict[str, Any] = {"chainId": chain_id, "limit": limit}
        if offset:
            params["offset"] = offset
        if from_timestamp is not None:
            params["fromTimestampMs"] = from_timestamp * 1000
        if to_timestamp is not None:
            params["toTimestampMs"] = to_timestamp * 1000
        path = self.history_path.format(address=address)
        logger.info("1inch GET {} params={}", path, params)
        return _get_json(self.client, self.provider, path, params)

    def fetch_nfts_by_owner(
        self,
        address: str,
        *,
        chain_id: int,
        limit: int = 50,
        offset: int = 0,
    ) -> Any:
        params = {"chainIds": chain_id, "address": address, "limit": limit, "offset": offset}
        logger.info("1inch GET {} params={}", self.nft_path, params)
        return _get_json(self.client, self.provider, self.nft_path, params)

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "OneInchClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class OpenSeaClient:
    """Thin wrapper around the OpenSea v2 endpoints used for offers and collections."""

    provider = "opensea"

    def __init__(
        self,
        *,
        base_url: str | None = None,
        api_key: str | None = None,
        chain: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url or str(settings.opensea_base_url)
        self.chain = chain or settings.opensea_chain
        self.timeout = timeout or settings.http_timeout_seconds
        self.client = httpx.Client(
            base_url=self.base_url,
            timeout=self.timeout,
            headers={
                "accept": "application/json",
                "x-api-key": api_key or settings.opensea_api_key,
            },
            transport=transport,
        )

    def fetch_account_nfts(self, address: str, *, limit: int = 50) -> Any:
        path = f"/api/v2/chain/{self.chain}/account/{address}/nfts"
        logger.info("OpenSea GET {}", path)
        return _get_json(self.client, self.provider, path, {"limit": limit})

    def fetch_best_offer(self, slug: str, token_id: str) -> Any:
        path = f"/api/v2/offers/collection/{slug}/nfts/{token_id}/best"
        logger.info("OpenSea GET {}", path)
        return _get_json(self.client, self.provider, path)

    def fetch_order(self, order_hash: str) -> Any:
        path = f"/api/v2/orders/{self.chain}/seaport/{order_hash}"
        return _get_json(self.client, self.provider, path)

    def fetch_collection(self, contract_address: str) -> Any:
        path = f"/api/v2/collections/{self.chain}/{contract_address}"
        logger.info("OpenSea GET {}", path)
        return _get_json(self.client, self.provider, path)

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "OpenSeaClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
