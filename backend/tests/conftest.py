from __future__ import annotations

import json
import os
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

# Provider keys are mandatory; tests never reach the real providers.
os.environ.setdefault("ONEINCH_API_KEY", "test-oneinch-key")
os.environ.setdefault("OPENSEA_API_KEY", "test-opensea-key")

import pytest

from app.core.config import Settings

DATA_DIR = Path(__file__).parent / "data"
AMM_ADDRESS = "0xe7e4325be5be18897d4a5a3b7ecdf4809676fea9"


def _load(name: str) -> dict[str, object]:
    return json.loads((DATA_DIR / name).read_text(encoding="utf-8"))


@pytest.fixture
def amm_address() -> str:
    return AMM_ADDRESS


@pytest.fixture
def sample_history_payload() -> dict[str, object]:
    return _load("sample_history.json")


@pytest.fixture
def sample_nft_payload() -> dict[str, object]:
    return _load("sample_nfts.json")


@pytest.fixture
def sample_opensea_account_payload() -> dict[str, object]:
    return _load("sample_opensea_account.json")


@pytest.fixture
def test_settings(monkeypatch) -> Settings:
    settings = Settings(
        oneinch_api_key="test-oneinch-key",
        opensea_api_key="test-opensea-key",
        enrichment_delay_seconds=0,
    )
    monkeypatch.setattr("app.core.config.get_settings", lambda: settings)
    monkeypatch.setattr("app.core.config.settings", settings)
    return settings
