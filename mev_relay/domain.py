"""Core domain model for swap events observed in the mempool, bundles and blocks."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from enum import Enum


def now_seconds() -> int:
    """Current Unix time in whole seconds."""
    return int(time.time())


def _checked_bytes(kind: str, value: object, size: int) -> bytes:
    if not isinstance(value, (bytes, bytearray)):
        raise TypeError(f"{kind} expects bytes")
    if len(value) != size:
        raise ValueError(f"{kind} needs {size} bytes, got {len(value)}")
    return bytes(value)


def _hex_bytes(kind: str, text: str, size: int) -> bytes:
    digits = text[2:] if text[:2] in ("0x", "0X") else text
    if len(digits) != size * 2:
        raise ValueError(f"{kind} needs {size * 2} hex digits, got {len(digits)}")
    return bytes.fromhex(digits)


@dataclass(frozen=True)
class H160:
    """A 20-byte Ethereum address, shown as 0x-prefixed lower-case hex."""

    value: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", _checked_bytes("H160", self.value, 20))

    @classmethod
    def from_hex(cls, text: str) -> H160:
        """Parse a hex string, with or without a 0x prefix."""
        return cls(_hex_bytes("H160", text, 20))

    def is_zero(self) -> bool:
        return not any(self.value)

    def __str__(self) -> str:
        return "0x" + self.value.hex()


@dataclass(frozen=True)
class H256:
    """A 32-byte hash, shown as 0x-prefixed lower-case hex."""

    value: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", _checked_bytes("H256", self.value, 32))

    @classmethod
    def from_hex(cls, text: str) -> H256:
        """Parse a hex string, with or without a 0x prefix."""
        return cls(_hex_bytes("H256", text, 32))

    def is_zero(self) -> bool:
        return not any(self.value)

    def __str__(self) -> str:
        return "0x" + self.value.hex()


class EventValidationError(ValueError):
    """Raised when a swap event fails validation."""


@dataclass(frozen=True)
class EventId:
    """Unique identifier of an event."""

    value: str

    @classmethod
    def generate(cls) -> EventId:
        return cls(str(uuid.uuid4()))

    def __str__(self) -> str:
        return self.value


class EventSource(Enum):
    MEMPOOL = "Mempool"
    FLASHBOTS = "Flashbots"
    BLOCK = "Block"

    def __str__(self) -> str:
        return self.value


@dataclass
class TransactionInfo:
    hash: H256
    sender: H160
    to: H160 | None
    value: int
    gas_price: int
    gas_limit: int
    gas_used: int
    nonce: int


@dataclass
class SwapDetails:
    token_in: H160
    token_out: H160
    amount_in: int
    amount_out: int
    pool_address: H160 | None = None
    fee_tier: int | None = None


@dataclass
class BlockInfo:
    number: int
    hash: H256
    timestamp: int


@dataclass
class ProtocolInfo:
    name: str
    version: str
    address: H160


@dataclass
class EventMetadata:
    created_at: int = field(default_factory=now_seconds)
    processed_at: int | None = None
    tags: list[str] = field(default_factory=list)

    def mark_processed(self) -> None:
        self.processed_at = now_seconds()

    def add_tag(self, tag: str) -> None:
        """Add a tag unless it is already present."""
        if tag not in self.tags:
            self.tags.append(tag)


_ZERO_ADDRESS = H160(bytes(20))
_ZERO_HASH = H256(bytes(32))


@dataclass
class SwapEvent:
    """A swap observed on chain or in transit."""

    id: EventId
    transaction: TransactionInfo
    swap_details: SwapDetails
    block_info: BlockInfo
    source: EventSource
    protocol: ProtocolInfo
    metadata: EventMetadata = field(default_factory=EventMetadata)

    @classmethod
    def create(
        cls,
        transaction: TransactionInfo,
        swap_details: SwapDetails,
        block_info: BlockInfo,
        source: EventSource,
        protocol: ProtocolInfo,
    ) -> SwapEvent:
        """Build an event with a fresh id and fresh metadata."""
        return cls(
            id=EventId.generate(),
            transaction=transaction,
            swap_details=swap_details,
            block_info=block_info,
            source=source,
            protocol=protocol,
            metadata=EventMetadata(),
        )

    @classmethod
    def blank(cls) -> SwapEvent:
        """An event with zeroed fields; it does not pass validation."""
        return cls(
            id=EventId.generate(),
            transaction=TransactionInfo(
                hash=_ZERO_HASH,
                sender=_ZERO_ADDRESS,
                to=_ZERO_ADDRESS,
                value=0,
                gas_price=0,
                gas_limit=0,
                gas_used=0,
                nonce=0,
            ),
            swap_details=SwapDetails(
                token_in=_ZERO_ADDRESS,
                token_out=_ZERO_ADDRESS,
                amount_in=0,
                amount_out=0,
            ),
            block_info=BlockInfo(number=0, hash=_ZERO_HASH, timestamp=0),
            source=EventSource.MEMPOOL,
            protocol=ProtocolInfo(name="unknown", version="unknown", address=_ZERO_ADDRESS),
            metadata=EventMetadata(),
        )

    def mark_processed(self) -> None:
        self.metadata.mark_processed()

    def add_tag(self, tag: str) -> None:
        self.metadata.add_tag(tag)

    def is_from_mempool(self) -> bool:
        return self.source is EventSource.MEMPOOL

    def is_from_flashbots(self) -> bool:
        return self.source is EventSource.FLASHBOTS

    def age_seconds(self) -> int:
        """Seconds since creation; zero if the creation time lies in the future."""
        return max(0, now_seconds() - self.metadata.created_at)

    def validate(self) -> None:
        """Raise EventValidationError if the event is not well formed."""
        tx = self.transaction
        if tx.hash.is_zero():
            raise EventValidationError("Invalid transaction hash")
        if tx.sender.is_zero():
            raise EventValidationError("Invalid from address")
        if tx.to is None:
            raise EventValidationError("Missing to address")
        if tx.to.is_zero():
            raise EventValidationError("Invalid to address")
        if self.block_info.number == 0:
            raise EventValidationError("Invalid block number")