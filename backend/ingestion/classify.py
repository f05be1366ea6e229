"""Infer bond-market meaning from raw 1inch history events."""

from __future__ import annotations

from collections.abc import Collection, Iterable, Sequence

from loguru import logger

from app.domain import ClassifiedTransaction, RawLedgerEvent, TokenAction, TransactionType
from app.pricing.formatting import wei_to_eth_string

NATIVE_TOKEN_ADDRESS = "0xeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee"
NATIVE_STANDARD = "native"
MARKET_CREATED_EVENT = "MarketCreated"

SELECTOR_LENGTH = 10
# One ABI word (64 hex chars) plus ten more; shorter payloads are not trusted.
MIN_PARAMETER_HEX = 74
WORD_HEX = 64


def method_selector(call_input: str | None) -> str | None:
    if not call_input or len(call_input) < SELECTOR_LENGTH:
        return None
    return call_input[:SELECTOR_LENGTH].lower()


def extract_bond_id(call_input: str | None) -> int | None:
    """Decode the first 32-byte argument of ``call_input`` as an unsigned integer."""

    if not call_input or len(call_input) < SELECTOR_LENGTH + MIN_PARAMETER_HEX:
        return None
    word = call_input[SELECTOR_LENGTH : SELECTOR_LENGTH + WORD_HEX]
    try:
        return int(word, 16)
    except ValueError:
        return None


def _is_native(action: TokenAction) -> bool:
    return (
        (action.address or "").lower() == NATIVE_TOKEN_ADDRESS
        and (action.standard or "").lower() == NATIVE_STANDARD
    )


def match_native_transfer(
    actions: Iterable[TokenAction], contract_address: str
) -> tuple[TransactionType, TokenAction | None]:
    """Find the ETH leg of a trade relative to ``contract_address``.

    ETH flowing into the contract is a buy and ETH flowing out of it is a
    sell. When both exist the incoming leg wins.
    """

    target = contract_address.lower()
    native = [action for action in actions if _is_native(action)]
    incoming = next((a for a in native if (a.to_address or "").lower() == target), None)
    if incoming is not None:
        return TransactionType.BUY, incoming
    outgoing = next((a for a in native if (a.from_address or "").lower() == target), None)
    if outgoing is not None:
        return TransactionType.SELL, outgoing
    return TransactionType.UNKNOWN, None


def classify_event(
    event: RawLedgerEvent,
    contract_address: str,
    *,
    market_creation_selectors: Collection[str],
    bond_id_hint: int | None = None,
) -> ClassifiedTransaction | None:
    """Classify one event, or return ``None`` when it has no transaction hash."""

    if not event.tx_hash:
        return None

    selector = method_selector(event.input)
    transaction_type, transfer = match_native_transfer(event.token_actions, contract_address)

    if (selector is not None and selector in market_creation_selectors) or (
        event.event_name and MARKET_CREATED_EVENT in event.event_name
    ):
        transaction_type = TransactionType.MARKET_CREATED

    bond_id = extract_bond_id(event.input)
    if bond_id is None:
        # Falls back to the requested bond; may mislabel events whose input
        # could not be decoded.
        bond_id = bond_id_hint

    eth_amount = None
    if transfer is not None and transfer.amount is not None:
        eth_amount = wei_to_eth_string(transfer.amount, 6)

    return ClassifiedTransaction(
        tx_hash=event.tx_hash,
        block_number=event.block_number,
        timestamp=(event.time_ms or 0) // 1000,
        from_address=event.from_address,
        to_address=event.to_address,
        input=event.input,
        status=event.status,
        transaction_type=transaction_type,
        bond_id=bond_id,
        eth_amount=eth_amount,
        method_id=selector,
        event_name=event.event_name,
    )


def filter_by_bond(
    transactions: Iterable[ClassifiedTransaction], bond_id: int | None
) -> list[ClassifiedTransaction]:
    if bond_id is None:
        return list(transactions)
    return [tx for tx in transactions if tx.bond_id == bond_id]


def classify_events(
    events: Sequence[RawLedgerEvent],
    contract_address: str,
    *,
    market_creation_selectors: Collection[str],
    bond_id: int | None = None,
) -> list[ClassifiedTransaction]:
    """Classify, sort newest-first and optionally restrict to one bond."""

    selectors = {selector.lower() for selector in market_creation_selectors}
    classified: list[ClassifiedTransaction] = []
    dropped = 0
    for event in events:
        result = classify_event(
            event,
            contract_address,
            market_creation_selectors=selectors,
            bond_id_hint=bond_id,
        )
        if result is None:
            dropped += 1
            continue
        classified.append(result)

    if dropped:
        logger.debug("Dropped {} history events without a transaction hash", dropped)

    classified.sort(key=lambda tx: tx.timestamp, reverse=True)
    return filter_by_bond(classified, bond_id)
