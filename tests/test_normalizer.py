import pytest

from mev_relay.domain import (
    H160,
    H256,
    BlockInfo,
    EventSource,
    ProtocolInfo,
    SwapDetails,
    SwapEvent,
    TransactionInfo,
    now_seconds,
)
from mev_relay.normalizer import (
    EventNormalizer,
    NormalizationError,
    NormalizationOptions,
)


def make_event(**overrides):
    tx = TransactionInfo(
        hash=H256(bytes([1] * 32)),
        sender=H160(bytes([1] * 20)),
        to=H160(bytes([2] * 20)),
        value=0,
        gas_price=20_000_000_000,
        gas_limit=100_000,
        gas_used=100_000,
        nonce=1,
    )
    details = SwapDetails(
        token_in=H160(bytes([3] * 20)),
        token_out=H160(bytes([4] * 20)),
        amount_in=10**18,
        amount_out=95 * 10**16,
    )
    block = BlockInfo(number=12345678, hash=H256(bytes([6] * 32)), timestamp=1234567890)
    protocol = ProtocolInfo(name="Uniswap V2", version="2.0", address=H160(bytes([7] * 20)))
    event = SwapEvent.create(tx, details, block, EventSource.MEMPOOL, protocol)
    for key, value in overrides.items():
        obj, attr = key.split("__")
        setattr(getattr(event, obj), attr, value)
    return event


def test_event_normalizer_creation():
    normalizer = EventNormalizer()
    assert normalizer.options.normalize_addresses
    assert normalizer.options.normalize_timestamps
    assert normalizer.options.validate_events


def test_normalization_options():
    normalizer = EventNormalizer()
    normalizer.configure(
        NormalizationOptions(
            normalize_addresses=False, normalize_timestamps=False, validate_events=False
        )
    )
    assert not normalizer.options.normalize_addresses
    assert not normalizer.options.normalize_timestamps
    assert not normalizer.options.validate_events


def test_event_validation_consistency_fails_on_blank():
    normalizer = EventNormalizer()
    with pytest.raises(NormalizationError):
        normalizer.validate_event_consistency(SwapEvent.blank())


def test_normalization_stats_start_at_zero():
    stats = EventNormalizer().stats()
    assert stats.total_events_processed == 0
    assert stats.successful_normalizations == 0


def test_normalize_event_adds_tags():
    normalized = EventNormalizer().normalize_event(make_event())
    assert normalized.metadata.tags == ["normalized", "processed"]


def test_normalize_event_rejects_invalid_event():
    with pytest.raises(NormalizationError, match="Event validation failed: Invalid transaction hash"):
        EventNormalizer().normalize_event(SwapEvent.blank())


def test_normalize_event_rejects_zero_token():
    event = make_event(swap_details__token_in=H160(bytes(20)))
    with pytest.raises(NormalizationError, match="Invalid token_in address"):
        EventNormalizer().normalize_event(event)


def test_address_check_runs_without_validation():
    normalizer = EventNormalizer(NormalizationOptions(validate_events=False))
    with pytest.raises(NormalizationError, match="Invalid from address"):
        normalizer.normalize_event(SwapEvent.blank())


def test_all_checks_disabled_accepts_blank_event():
    normalizer = EventNormalizer(
        NormalizationOptions(
            normalize_addresses=False, normalize_timestamps=False, validate_events=False
        )
    )
    normalized = normalizer.normalize_event(SwapEvent.blank())
    assert "normalized" in normalized.metadata.tags


def test_future_block_timestamp_is_clamped():
    future = now_seconds() + 100_000
    event = make_event(block_info__timestamp=future)
    normalized = EventNormalizer().normalize_event(event)
    assert normalized.block_info.timestamp <= now_seconds()


def test_future_created_at_is_clamped():
    event = make_event(metadata__created_at=now_seconds() + 10_000)
    normalized = EventNormalizer().normalize_event(event)
    assert normalized.metadata.created_at <= now_seconds()


def test_reasonable_timestamp_is_kept():
    normalized = EventNormalizer().normalize_event(make_event())
    assert normalized.block_info.timestamp == 1234567890


def test_normalize_events_skips_failures_and_counts():
    normalizer = EventNormalizer()
    result = normalizer.normalize_events([make_event(), SwapEvent.blank(), make_event()])
    assert len(result) == 2
    stats = normalizer.stats()
    assert stats.total_events_processed == 3
    assert stats.successful_normalizations == 2
    assert stats.failed_normalizations == 1
    assert stats.validation_errors == 1


@pytest.mark.parametrize(
    "override, message",
    [
        ({"swap_details__amount_in": 0}, "Amount in cannot be zero"),
        ({"swap_details__amount_out": 0}, "Amount out cannot be zero"),
        ({"transaction__gas_price": 0}, "Gas price cannot be zero"),
        ({"transaction__gas_limit": 0}, "Gas limit cannot be zero"),
    ],
)
def test_consistency_errors(override, message):
    with pytest.raises(NormalizationError, match=message):
        EventNormalizer().validate_event_consistency(make_event(**override))


def test_consistency_accepts_high_nonce():
    event = make_event(transaction__nonce=5_000_000)
    assert EventNormalizer().validate_event_consistency(event) is None
    assert event.transaction.nonce == 5_000_000