"""Parsing of raw transaction JSON into swap events."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

from mev_relay.domain import (
    H160,
    H256,
    BlockInfo,
    EventSource,
    ProtocolInfo,
    SwapDetails,
    SwapEvent,
    TransactionInfo,
)
from mev_relay.protocol import ProtocolDetectionService

log = logging.getLogger(__name__)

_DECIMAL = re.compile(r"\+?[0-9]+")
_HEX = re.compile(r"\+?[0-9a-fA-F]+")
_ZERO_ADDRESS = H160(bytes(20))


class ParseError(ValueError):
    """Raised when transaction data is missing fields or malformed."""


def _required_str(tx_data: Mapping[str, Any], name: str) -> str:
    value = tx_data.get(name)
    if not isinstance(value, str):
        raise ParseError(f"Missing {name} field")
    return value


def _parse_quantity(text: str, bits: int, name: str) -> int:
    """Parse a 0x hex or plain decimal quantity that fits in an unsigned integer."""
    if text.startswith("0x"):
        digits = text[2:]
        if not digits:
            return 0
        if not _HEX.fullmatch(digits):
            raise ParseError(f"Invalid hex value for {name}: {text}")
        value = int(digits, 16)
    else:
        if not _DECIMAL.fullmatch(text):
            raise ParseError(f"Invalid number for {name}: {text}")
        value = int(text)
    if value >= 1 << bits:
        raise ParseError(f"Value for {name} out of range: {text}")
    return value


def _parse_address(text: str, name: str) -> H160:
    try:
        return H160.from_hex(text)
    except ValueError as exc:
        raise ParseError(f"Invalid {name} address: {exc}") from exc


class EventParser:
    """Turns raw mempool and bundle transactions into swap events."""

    def __init__(self, protocol_detector: ProtocolDetectionService | None = None) -> None:
        self.protocol_detector = (
            protocol_detector if protocol_detector is not None else ProtocolDetectionService()
        )

    def parse_mempool_transaction(
        self, tx_data: Mapping[str, Any], block_info: BlockInfo
    ) -> list[SwapEvent]:
        """Return the swap events found in one mempool transaction."""
        return self._parse_transaction(tx_data, block_info, EventSource.MEMPOOL)

    def parse_flashbots_bundle(
        self, bundle_data: Mapping[str, Any], block_info: BlockInfo
    ) -> list[SwapEvent]:
        """Return the swap events found in the transactions of a bundle."""
        transactions = bundle_data.get("transactions")
        if not isinstance(transactions, list):
            return []
        return [
            event
            for tx_data in transactions
            for event in self._parse_transaction(tx_data, block_info, EventSource.FLASHBOTS)
        ]

    def _parse_transaction(
        self, tx_data: Mapping[str, Any], block_info: BlockInfo, source: EventSource
    ) -> list[SwapEvent]:
        transaction = self.extract_transaction_info(tx_data)
        if not self.is_swap_transaction(tx_data):
            return []
        event = self._create_swap_event(transaction, block_info, source)
        return [event] if event is not None else []

    def is_swap_transaction(self, tx_data: Mapping[str, Any]) -> bool:
        """True if the transaction carries call data and goes to a known protocol."""
        input_data = tx_data.get("input")
        if not isinstance(input_data, str) or len(input_data) < 10:
            return False
        to = tx_data.get("to")
        if not isinstance(to, str):
            return False
        try:
            address = H160.from_hex(to)
        except ValueError:
            return False
        return self.protocol_detector.is_known_protocol(address)

    def extract_transaction_info(self, tx_data: Mapping[str, Any]) -> TransactionInfo:
        """Read the basic transaction fields; raise ParseError if any is bad."""
        hash_text = _required_str(tx_data, "hash")
        try:
            tx_hash = H256.from_hex(hash_text)
        except ValueError as exc:
            raise ParseError(f"Invalid hash: {exc}") from exc
        sender = _parse_address(_required_str(tx_data, "from"), "from")
        to_text = tx_data.get("to")
        to = _parse_address(to_text, "to") if isinstance(to_text, str) else None

        return TransactionInfo(
            hash=tx_hash,
            sender=sender,
            to=to,
            value=_parse_quantity(_required_str(tx_data, "value"), 128, "value"),
            gas_price=_parse_quantity(_required_str(tx_data, "gasPrice"), 128, "gasPrice"),
            gas_limit=_parse_quantity(_required_str(tx_data, "gas"), 64, "gas"),
            gas_used=0,
            nonce=_parse_quantity(_required_str(tx_data, "nonce"), 64, "nonce"),
        )

    def _create_swap_event(
        self, transaction: TransactionInfo, block_info: BlockInfo, source: EventSource
    ) -> SwapEvent | None:
        if transaction.to is None:
            return None

        known = self.protocol_detector.get_protocol(transaction.to)
        if known is not None:
            protocol = ProtocolInfo(
                name=known.name, version=known.version, address=known.router_address
            )
        else:
            protocol = ProtocolInfo(name="unknown", version="unknown", address=transaction.to)

        # Call data is not decoded, so token and amount fields stay empty.
        swap_details = SwapDetails(
            token_in=_ZERO_ADDRESS,
            token_out=_ZERO_ADDRESS,
            amount_in=0,
            amount_out=0,
        )
        block = BlockInfo(
            number=block_info.number, hash=block_info.hash, timestamp=block_info.timestamp
        )
        log.debug("Created %s swap event for transaction %s", source, transaction.hash)
        return SwapEvent.create(transaction, swap_details, block, source, protocol)