from __future__ import annotations

from dataclasses import replace

import pytest

from app.domain import ClassifiedTransaction, RawLedgerEvent, TokenAction, TransactionType
from ingestion.classify import (
    NATIVE_TOKEN_ADDRESS,
    classify_event,
    classify_events,
    extract_bond_id,
    filter_by_bond,
    method_selector,
)
from ingestion.normalize import extract_history_items, normalize_history_item

SELECTORS = frozenset({"0x6c7d13e2"})
USER = "0x1111111111111111111111111111111111111111"


def _word(value: int) -> str:
    return f"{value:064x}"


def _native(from_address: str, to_address: str, amount: int) -> TokenAction:
    return TokenAction(
        address=NATIVE_TOKEN_ADDRESS,
        standard="Native",
        direction=None,
        from_address=from_address,
        to_address=to_address,
        amount=amount,
    )


def _event(tx_hash: str | None = "0xabc", **overrides) -> RawLedgerEvent:
    base = RawLedgerEvent(
        tx_hash=tx_hash,
        block_number=1,
        time_ms=1_700_000_000_000,
        from_address=USER,
        to_address=None,
        input=None,
        status="completed",
    )
    return replace(base, **overrides)


@pytest.fixture
def sample_events(sample_history_payload):
    return [normalize_history_item(item) for item in extract_history_items(sample_history_payload)]


def test_sample_history_is_classified_newest_first(sample_events, amm_address):
    transactions = classify_events(sample_events, amm_address, market_creation_selectors=SELECTORS)

    assert [tx.transaction_type for tx in transactions] == [
        TransactionType.SELL,
        TransactionType.BUY,
        TransactionType.BUY,
        TransactionType.MARKET_CREATED,
    ]
    assert [tx.bond_id for tx in transactions] == [1, 2, 1, 1]
    assert [tx.eth_amount for tx in transactions] == ["0.000004", "0.001000", "0.000005", None]
    assert transactions[0].timestamp == 1_717_001_800
    assert transactions[-1].method_id == "0x6c7d13e2"


def test_events_without_hash_are_dropped(amm_address):
    events = [
        _event("0x1"),
        _event(None),
        _event("0x3"),
        _event(""),
        _event("0x5"),
    ]

    transactions = classify_events(events, amm_address, market_creation_selectors=SELECTORS)

    assert len(transactions) == 3


def test_incoming_native_transfer_is_a_buy(amm_address):
    event = _event(token_actions=(_native(USER, amm_address.upper().replace("0X", "0x"), 10**18),))

    tx = classify_event(event, amm_address, market_creation_selectors=SELECTORS)

    assert tx.transaction_type is TransactionType.BUY
    assert tx.eth_amount == "1.000000"


def test_outgoing_native_transfer_is_a_sell(amm_address):
    event = _event(token_actions=(_native(amm_address, USER, 2 * 10**17),))

    tx = classify_event(event, amm_address, market_creation_selectors=SELECTORS)

    assert tx.transaction_type is TransactionType.SELL
    assert tx.eth_amount == "0.200000"


def test_incoming_leg_wins_when_both_directions_present(amm_address):
    event = _event(
        token_actions=(
            _native(amm_address, USER, 3),
            _native(USER, amm_address, 7 * 10**12),
        )
    )

    tx = classify_event(event, amm_address, market_creation_selectors=SELECTORS)

    assert tx.transaction_type is TransactionType.BUY
    assert tx.eth_amount == "0.000007"


def test_non_native_transfers_are_ignored(amm_address):
    erc20 = TokenAction(
        address="0x833589fcd6edb6e08f4c7c32d4f71b54bda02913",
        standard="ERC20",
        direction="In",
        from_address=USER,
        to_address=amm_address,
        amount=1000,
    )

    tx = classify_event(_event(token_actions=(erc20,)), amm_address, market_creation_selectors=SELECTORS)

    assert tx.transaction_type is TransactionType.UNKNOWN
    assert tx.eth_amount is None


def test_market_creation_selector_overrides_buy(amm_address):
    event = _event(
        input="0x6c7d13e2" + "0" * 64,
        token_actions=(_native(USER, amm_address, 10**15),),
    )

    tx = classify_event(event, amm_address, market_creation_selectors=SELECTORS)

    assert tx.transaction_type is TransactionType.MARKET_CREATED


def test_market_created_event_name_overrides_sell(amm_address):
    event = _event(
        event_name="MarketCreated(uint256,address)",
        token_actions=(_native(amm_address, USER, 10**15),),
    )

    tx = classify_event(event, amm_address, market_creation_selectors=SELECTORS)

    assert tx.transaction_type is TransactionType.MARKET_CREATED


def test_classification_is_idempotent(sample_events, amm_address):
    first = [classify_event(e, amm_address, market_creation_selectors=SELECTORS) for e in sample_events]
    second = [classify_event(e, amm_address, market_creation_selectors=SELECTORS) for e in sample_events]

    assert first == second


def test_method_selector_requires_full_prefix():
    assert method_selector("0x6C7D13E2ff") == "0x6c7d13e2"
    assert method_selector("0x6c7d") is None
    assert method_selector(None) is None


def test_extract_bond_id_reads_first_word():
    assert extract_bond_id("0x3610724e" + _word(42) + _word(7)) == 42


def test_extract_bond_id_requires_enough_payload():
    # A single word is shorter than the 74 hex characters required after the selector.
    assert extract_bond_id("0x6c7d13e2" + _word(42)) is None
    assert extract_bond_id("0x") is None


def test_extract_bond_id_rejects_non_hex():
    assert extract_bond_id("0x3610724e" + "z" * 64 + _word(1)) is None


def test_bond_id_falls_back_to_requested_filter(amm_address):
    tx = classify_event(_event(input="0x1234"), amm_address, market_creation_selectors=SELECTORS, bond_id_hint=9)

    assert tx.bond_id == 9


def test_bond_filter_keeps_only_matching_ids():
    def tx(bond_id: int | None) -> ClassifiedTransaction:
        return ClassifiedTransaction(
            tx_hash=f"0x{bond_id}",
            block_number=None,
            timestamp=0,
            from_address=None,
            to_address=None,
            input=None,
            status=None,
            transaction_type=TransactionType.UNKNOWN,
            bond_id=bond_id,
            eth_amount=None,
            method_id=None,
        )

    transactions = [tx(1), tx(2), tx(1), tx(None)]

    filtered = filter_by_bond(transactions, 1)

    assert len(filtered) == 2
    assert all(item.bond_id == 1 for item in filtered)
    assert filter_by_bond(transactions, None) == transactions


def test_classify_events_applies_bond_filter(sample_events, amm_address):
    transactions = classify_events(
        sample_events, amm_address, market_creation_selectors=SELECTORS, bond_id=2
    )

    assert len(transactions) == 1
    assert transactions[0].eth_amount == "0.001000"
