"""Normalization of swap events into a consistent, validated form."""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable
from dataclasses import dataclass

from mev_relay.domain import EventValidationError, SwapEvent, now_seconds

log = logging.getLogger(__name__)

_MAX_BLOCK_SKEW_SECONDS = 3600
_MAX_CREATED_SKEW_SECONDS = 60
_HIGH_NONCE = 1_000_000


class NormalizationError(ValueError):
    """Raised when an event cannot be normalized."""


@dataclass
class NormalizationOptions:
    normalize_addresses: bool = True
    normalize_timestamps: bool = True
    validate_events: bool = True


@dataclass
class NormalizationStats:
    total_events_processed: int = 0
    successful_normalizations: int = 0
    failed_normalizations: int = 0
    validation_errors: int = 0


class EventNormalizer:
    """Validates swap events and brings their fields into a standard form."""

    def __init__(self, options: NormalizationOptions | None = None) -> None:
        self.options = options if options is not None else NormalizationOptions()
        self._stats = NormalizationStats()

    def normalize_event(self, event: SwapEvent) -> SwapEvent:
        """Return a normalized copy of the event, tagged as processed."""
        self._stats.total_events_processed += 1
        try:
            normalized = self._normalize(event)
        except NormalizationError:
            self._stats.failed_normalizations += 1
            raise
        self._stats.successful_normalizations += 1
        return normalized

    def _normalize(self, event: SwapEvent) -> SwapEvent:
        if self.options.validate_events:
            try:
                event.validate()
            except EventValidationError as exc:
                self._stats.validation_errors += 1
                raise NormalizationError(f"Event validation failed: {exc}") from exc

        event = copy.deepcopy(event)

        if self.options.normalize_addresses:
            self._check_addresses(event)
        if self.options.normalize_timestamps:
            self._clamp_timestamps(event)

        event.add_tag("normalized")
        event.add_tag("processed")
        log.info("Event %s normalized successfully", event.id)
        return event

    def normalize_events(self, events: Iterable[SwapEvent]) -> list[SwapEvent]:
        """Normalize each event, skipping (and logging) those that fail."""
        normalized: list[SwapEvent] = []
        failures = 0
        for event in events:
            try:
                normalized.append(self.normalize_event(event))
            except NormalizationError as exc:
                failures += 1
                log.warning("Failed to normalize event: %s", exc)
        if failures:
            log.warning("Failed to normalize %d events", failures)
        log.info("Normalized %d events successfully", len(normalized))
        return normalized

    @staticmethod
    def _check_addresses(event: SwapEvent) -> None:
        tx = event.transaction
        if tx.sender.is_zero():
            raise NormalizationError("Invalid from address")
        if tx.to is None:
            raise NormalizationError("Missing to address")
        if tx.to.is_zero():
            raise NormalizationError("Invalid to address")
        if event.swap_details.token_in.is_zero():
            raise NormalizationError("Invalid token_in address")
        if event.swap_details.token_out.is_zero():
            raise NormalizationError("Invalid token_out address")

    @staticmethod
    def _clamp_timestamps(event: SwapEvent) -> None:
        now = now_seconds()
        if event.block_info.timestamp > now + _MAX_BLOCK_SKEW_SECONDS:
            log.warning(
                "Block timestamp %d is in the future, adjusting", event.block_info.timestamp
            )
            event.block_info.timestamp = now
        if event.metadata.created_at > now + _MAX_CREATED_SKEW_SECONDS:
            log.warning(
                "Created timestamp %d is in the future, adjusting", event.metadata.created_at
            )
            event.metadata.created_at = now

    def validate_event_consistency(self, event: SwapEvent) -> None:
        """Raise NormalizationError if amounts or gas values are implausible."""
        if event.swap_details.amount_in == 0:
            raise NormalizationError("Amount in cannot be zero")
        if event.swap_details.amount_out == 0:
            raise NormalizationError("Amount out cannot be zero")
        if event.transaction.gas_price == 0:
            raise NormalizationError("Gas price cannot be zero")
        if event.transaction.gas_limit == 0:
            raise NormalizationError("Gas limit cannot be zero")
        if event.transaction.nonce > _HIGH_NONCE:
            log.warning("Unusually high nonce: %d", event.transaction.nonce)

    def stats(self) -> NormalizationStats:
        return copy.copy(self._stats)

    def configure(self, options: NormalizationOptions) -> None:
        self.options = options