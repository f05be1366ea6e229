from functools import lru_cache
from typing import Any

from pydantic import AnyUrl, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_MARKET_CREATION_SELECTORS = ("0x6c7d13e2",)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    debug: bool = Field(False, description="Enable FastAPI debug mode")
    environment: str = Field(
        default="development",
        description="Runtime environment (development|staging|production)",
    )
    oneinch_base_url: AnyUrl = Field(
        default="https://api.1inch.dev",
        description="Base URL for the 1inch developer portal APIs",
    )
    oneinch_api_key: str = Field(
        ...,
        min_length=1,
        description="Bearer token for the 1inch NFT and history APIs",
    )
    oneinch_history_path: str = Field(
        default="/history/v2.0/history/{address}/events",
        description="Relative path template for the 1inch history endpoint",
    )
    oneinch_nft_path: str = Field(
        default="/nft/v2/byaddress",
        description="Relative path for the 1inch NFTs-by-owner endpoint",
    )
    opensea_base_url: AnyUrl = Field(
        default="https://api.opensea.io",
        description="Base URL for the OpenSea v2 API",
    )
    opensea_api_key: str = Field(
        ...,
        min_length=1,
        description="API key sent as x-api-key to OpenSea",
    )
    opensea_chain: str = Field(
        default="ethereum",
        description="OpenSea chain slug used for account, order and collection lookups",
    )
    http_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout applied to every outbound provider request",
        gt=0,
    )
    default_chain_id: int = Field(
        default=8453,
        description="Chain id used when requests omit one (Base mainnet)",
    )
    curve_amm_address: str = Field(
        default="0xe7e4325Be5bE18897d4a5a3B7eCDf4809676FeA9",
        description="Deployed CurveAMM contract whose activity feed is served",
    )
    curve_shape: str = Field(
        default="quadratic",
        description="Bonding curve shape mirrored by the simulator (quadratic|linear)",
    )
    price_scale: int = Field(
        default=10**15,
        description="Wei scale applied to the curve ordinal",
        gt=0,
    )
    curve_steepness: int = Field(
        default=1000,
        description="Divisor of the quadratic curve",
        gt=0,
    )
    market_creation_selectors: list[str] | str = Field(
        default_factory=lambda: list(DEFAULT_MARKET_CREATION_SELECTORS),
        description=(
            "Method selectors that identify createMarket calls; accepts a list or a "
            "comma-separated string"
        ),
    )
    enrichment_limit: int = Field(
        default=10,
        description="Number of NFTs per inventory request enriched with OpenSea offers",
        ge=0,
    )
    enrichment_batch_size: int = Field(
        default=2,
        description="Number of OpenSea offer lookups issued per batch",
        ge=1,
    )
    enrichment_max_workers: int = Field(
        default=2,
        description="Upper bound on concurrent OpenSea lookups within a batch",
        ge=1,
    )
    enrichment_delay_seconds: float = Field(
        default=0.2,
        description="Pause between OpenSea lookup batches to respect rate limits",
        ge=0,
    )
    best_offers_limit: int = Field(
        default=10,
        description="Maximum number of items honoured by the batch best-offers endpoint",
        ge=1,
    )

    @field_validator("curve_shape")
    @classmethod
    def _normalize_curve_shape(cls, value: str) -> str:
        candidate = value.strip().lower()
        if candidate not in {"quadratic", "linear"}:
            raise ValueError("curve_shape must be either 'quadratic' or 'linear'")
        return candidate

    @field_validator("market_creation_selectors", mode="after")
    @classmethod
    def _parse_selectors(cls, value: Any) -> list[str]:
        if value in (None, "", []):
            return list(DEFAULT_MARKET_CREATION_SELECTORS)
        if isinstance(value, str):
            value = [part for part in (item.strip() for item in value.split(",")) if part]
        if isinstance(value, (list, tuple, set)):
            selectors: list[str] = []
            for item in value:
                selector = str(item).strip().lower()
                if not selector.startswith("0x"):
                    selector = "0x" + selector
                if len(selector) != 10:
                    raise ValueError(
                        "MARKET_CREATION_SELECTORS entries must be 4-byte hex selectors"
                    )
                selectors.append(selector)
            return selectors
        raise ValueError(
            "MARKET_CREATION_SELECTORS must be provided as a list or comma-separated string"
        )

    @property
    def market_creation_selector_set(self) -> frozenset[str]:
        return frozenset(self.market_creation_selectors)


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
