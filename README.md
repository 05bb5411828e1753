# mev_relay

A library of building blocks for watching decentralised-exchange swaps seen
in the mempool and in bundles: a swap event model, detection of known DEX
routers, pool/token filtering, event normalisation and an in-memory event
store. It has no third-party dependencies.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

### `mev_relay.domain`

- `H160` (20 bytes) and `H256` (32 bytes): immutable, hashable byte values.
  `from_hex()` accepts text with or without a `0x` prefix; `is_zero()`;
  `str()` gives `0x`-prefixed lower-case hex.
- `SwapEvent`, made of `EventId`, `TransactionInfo` (the sending address is
  the field `sender`), `SwapDetails`, `BlockInfo`, `EventSource`
  (`MEMPOOL`, `FLASHBOTS`, `BLOCK`), `ProtocolInfo` and `EventMetadata`.
  - `SwapEvent.create(...)` gives the event a fresh UUID id and fresh
    metadata; `SwapEvent.blank()` gives an all-zero event, which does not
    validate.
  - `validate()` raises `EventValidationError` for a zero transaction hash,
    a zero sender, a missing or zero `to` address, or block number 0.
  - `add_tag()` ignores duplicates; `mark_processed()` stamps
    `metadata.processed_at`; `age_seconds()` never goes below zero.
- `now_seconds()`: the current Unix time in whole seconds.

### `mev_relay.protocol`

- `Protocol`: name, version, router and factory addresses, swap signatures
  and fee tiers; `matches_swap(input_data)` compares the first 10 characters
  of call data against the signatures.
- `ProtocolRegistry`: keyed by router address, with Uniswap V2, Uniswap V3
  and SushiSwap registered unless `with_defaults=False`. Lookups by router
  or factory, `detect_from_transaction()` and `all_protocols()`.
- `ProtocolDetectionService`: wraps a registry; `is_known_protocol()` is
  true for a known router or factory address.

### `mev_relay.filter`

- `FilteringConfig`: enabled flag, pool, token and excluded-contract address
  lists, included protocol names, `min_liquidity_eth` (100.0) and
  `min_volume_24h_eth` (1000.0). Invalid addresses in it are logged and
  skipped.
- `PoolFilter.should_include_event()` rejects an event sent from or to an
  excluded contract, with a pool address not in the pool set, with a token
  not in the token set, with a protocol name not in `include_protocols`, or
  whose `amount_in` in ether is below `min_volume_24h_eth / 1000`. When
  filtering is disabled every event passes.
- `filter_events()`, `stats()` (a `FilterStats`), `update_config()`,
  `add_pool_address()`, `remove_pool_address()`, `is_pool_filtered()`,
  `is_token_filtered()`.
- `parse_address(text)` requires `0x` plus 40 hex digits and raises
  `ValueError` otherwise; `wei_to_eth(wei)`.

### `mev_relay.normalizer`

- `EventNormalizer.normalize_event()` validates the event, checks that
  sender, recipient and both tokens are non-zero, pulls block timestamps
  more than an hour ahead (and creation times more than a minute ahead)
  back to now, and returns a copy tagged `normalized` and `processed`.
  Failures raise `NormalizationError`.
- `normalize_events()` returns the events that normalised, logging and
  skipping the rest.
- `validate_event_consistency()` rejects zero amounts, zero gas price or
  zero gas limit.
- Each step can be switched off with `NormalizationOptions` via
  `configure()`; `stats()` returns `NormalizationStats` counters.

### `mev_relay.parser`

- `EventParser.parse_mempool_transaction(tx_data, block_info)` and
  `parse_flashbots_bundle(bundle_data, block_info)` take JSON-RPC style
  dictionaries (a bundle holds them under `"transactions"`) and return lists
  of `SwapEvent`.
- A transaction counts as a swap when its `input` is at least 10 characters
  long and its `to` is a known router or factory.
- `extract_transaction_info()` reads `hash`, `from`, `to`, `value`,
  `gasPrice`, `gas` and `nonce` (hex with `0x` or decimal) and raises
  `ParseError` for missing or malformed fields.

### `mev_relay.repository`

- `EventRepository`: abstract interface for event stores.
- `InMemoryEventRepository`: `store()`, `store_batch()`, `get_by_id()`,
  `get_by_source()` (a name such as `"Mempool"` or an `EventSource`),
  `get_by_protocol()`, `get_by_time_range()` (inclusive, on block
  timestamp), `all_events()`, `clear()` and `stats()`, a snapshot of
  `RepositoryStats` with per-source and per-protocol counts.

## Example

```python
from mev_relay.domain import BlockInfo, H256
from mev_relay.parser import EventParser
from mev_relay.repository import InMemoryEventRepository

parser = EventParser()
block = BlockInfo(number=12345, hash=H256(bytes([1]) * 32), timestamp=1234567890)
tx = {
    "hash": "0x" + "ab" * 32,
    "from": "0x" + "11" * 20,
    "to": "0x7a250d5630b4cf539739df2c5dacb4c659f2488d",
    "value": "0x0",
    "gasPrice": "0x4a817c800",
    "gas": "0x186a0",
    "nonce": "0x0",
    "input": "0x38ed1739" + "00" * 28,
}
events = parser.parse_mempool_transaction(tx, block)

repo = InMemoryEventRepository()
repo.store_batch(events)
print(repo.stats().events_by_source)  # Counter({'Mempool': 1})
```

## What it does not do

- It does not connect to a node, a mempool feed or a bundle relay; the
  caller supplies transaction dictionaries.
- The parser does not decode call data: token addresses and amounts of
  parsed events are left at zero, and the pool address and fee tier unset.
- The filter does not look up pool reserves, so `min_liquidity_eth` never
  rejects an event.
- Events are kept in memory only; there is no persistent store and no
  command-line program.