"""Filtering of swap events by pool, token, protocol and volume."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from mev_relay.domain import H160, SwapEvent

log = logging.getLogger(__name__)

WEI_PER_ETH = 10**18

_DEFAULT_POOLS = (
    "0xA0b86a33E6441b8c4C8C3C8C3C8C3C8C3C8C3C8C",
    "0xB4e16d0168e52d35CaCD2c6185b44281Ec28C9Dc",
    "0x0d4a11d5EEaaC28EC3F61d100daF4d40471f1852",
)

_DEFAULT_TOKENS = (
    "0xA0b86a33E6441b8c4C8C3C8C3C8C3C8C3C8C3C8C",
    "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2",
    "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
    "0xdAC17F958D2ee523a2206206994597C13D831ec7",
)

_DEFAULT_PROTOCOLS = ("Uniswap V2", "Uniswap V3", "SushiSwap")


@dataclass
class FilteringConfig:
    """Settings that decide which swap events are kept."""

    enabled: bool = True
    pool_addresses: list[str] = field(default_factory=lambda: list(_DEFAULT_POOLS))
    token_addresses: list[str] = field(default_factory=lambda: list(_DEFAULT_TOKENS))
    exclude_contracts: list[str] = field(default_factory=list)
    include_protocols: list[str] = field(default_factory=lambda: list(_DEFAULT_PROTOCOLS))
    min_liquidity_eth: float = 100.0
    min_volume_24h_eth: float = 1000.0


@dataclass(frozen=True)
class FilterStats:
    total_pools: int
    total_tokens: int
    excluded_contracts: int
    min_liquidity_eth: float
    min_volume_24h_eth: float
    included_protocols: list[str]


def parse_address(text: str) -> H160:
    """Parse a 0x-prefixed, 40-digit hex address; raise ValueError otherwise."""
    if len(text) != 42 or not text.startswith("0x"):
        raise ValueError(f"Invalid address format: {text}")
    try:
        raw = bytes.fromhex(text[2:])
    except ValueError as exc:
        raise ValueError(f"Invalid hex: {exc}") from exc
    return H160(raw)


def wei_to_eth(wei: int) -> float:
    """Convert an amount in wei to ether."""
    return wei / WEI_PER_ETH


def _parse_set(addresses: Iterable[str], kind: str) -> set[H160]:
    parsed: set[H160] = set()
    for text in addresses:
        try:
            parsed.add(parse_address(text))
        except ValueError:
            log.warning("Invalid %s in config: %s", kind, text)
        else:
            log.debug("Added %s to filter: %s", kind, text)
    return parsed


class PoolFilter:
    """Decides whether swap events pass the configured filters."""

    def __init__(self, config: FilteringConfig | None = None) -> None:
        self.config = config if config is not None else FilteringConfig()
        self._pool_addresses: set[H160] = set()
        self._token_addresses: set[H160] = set()
        self._exclude_contracts: set[H160] = set()
        self._load_sets()

    def _load_sets(self) -> None:
        self._pool_addresses = _parse_set(self.config.pool_addresses, "pool address")
        self._token_addresses = _parse_set(self.config.token_addresses, "token address")
        self._exclude_contracts = _parse_set(self.config.exclude_contracts, "exclude contract")
        log.info(
            "Pool filter initialized with %d pools, %d tokens, %d excluded contracts",
            len(self._pool_addresses),
            len(self._token_addresses),
            len(self._exclude_contracts),
        )

    def should_include_event(self, event: SwapEvent) -> bool:
        if not self.config.enabled:
            return True

        tx = event.transaction
        details = event.swap_details

        if tx.sender in self._exclude_contracts:
            log.debug("Excluding event from excluded contract: %s", tx.sender)
            return False
        if tx.to is not None and tx.to in self._exclude_contracts:
            log.debug("Excluding event to excluded contract: %s", tx.to)
            return False
        if details.pool_address is not None and details.pool_address not in self._pool_addresses:
            log.debug("Excluding event from non-filtered pool: %s", details.pool_address)
            return False
        if details.token_in not in self._token_addresses:
            log.debug("Excluding event with non-filtered token_in: %s", details.token_in)
            return False
        if details.token_out not in self._token_addresses:
            log.debug("Excluding event with non-filtered token_out: %s", details.token_out)
            return False
        if event.protocol.name not in self.config.include_protocols:
            log.debug("Excluding event from non-included protocol: %s", event.protocol.name)
            return False
        if details.pool_address is not None and not self._meets_minimum_liquidity(
            details.pool_address
        ):
            log.debug("Excluding event from low liquidity pool: %s", details.pool_address)
            return False
        if not self._meets_minimum_volume(event):
            log.debug("Excluding event with low volume")
            return False

        log.debug("Event passed all filters: %s", event.id)
        return True

    def filter_events(self, events: Iterable[SwapEvent]) -> list[SwapEvent]:
        events = list(events)
        if not self.config.enabled:
            return events

        kept = [event for event in events if self.should_include_event(event)]
        dropped = len(events) - len(kept)
        if dropped:
            log.info(
                "Filtered %d events, kept %d events (%d%% filtered)",
                dropped,
                len(kept),
                int(dropped / len(events) * 100),
            )
        return kept

    def _meets_minimum_liquidity(self, pool_address: H160) -> bool:
        # Pool reserves are not looked up, so no pool is rejected for liquidity.
        return True

    def _meets_minimum_volume(self, event: SwapEvent) -> bool:
        amount_in_eth = wei_to_eth(event.swap_details.amount_in)
        return amount_in_eth >= self.config.min_volume_24h_eth / 1000.0

    def stats(self) -> FilterStats:
        return FilterStats(
            total_pools=len(self._pool_addresses),
            total_tokens=len(self._token_addresses),
            excluded_contracts=len(self._exclude_contracts),
            min_liquidity_eth=self.config.min_liquidity_eth,
            min_volume_24h_eth=self.config.min_volume_24h_eth,
            included_protocols=list(self.config.include_protocols),
        )

    def update_config(self, config: FilteringConfig) -> None:
        self.config = config
        self._load_sets()
        log.info("Pool filter configuration updated")

    def add_pool_address(self, address: H160) -> None:
        self._pool_addresses.add(address)
        log.info("Added pool address to filter: %s", address)

    def remove_pool_address(self, address: H160) -> None:
        if address in self._pool_addresses:
            self._pool_addresses.discard(address)
            log.info("Removed pool address from filter: %s", address)

    def is_pool_filtered(self, address: H160) -> bool:
        return address in self._pool_addresses

    def is_token_filtered(self, address: H160) -> bool:
        return address in self._token_addresses