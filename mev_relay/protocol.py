"""Known DEX protocols and detection of swaps sent to them."""

from __future__ import annotations

from dataclasses import dataclass

from mev_relay.domain import H160

UNISWAP_V2_ROUTER = "0x7a250d5630B4cF539739dF2C5dAcb4c659F2488D"
UNISWAP_V2_FACTORY = "0x5C69bEe701ef814a2B6a3EDD4B1652CB9cc5aA6f"
UNISWAP_V3_ROUTER = "0xE592427A0AEce92De3Edee1F18E0157C05861564"
UNISWAP_V3_FACTORY = "0x1F98431c8aD98523631AE4a59f267346ea31F984"
SUSHISWAP_ROUTER = "0xd9e1cE17f2641f24aE83637ab66a2cca9C378B9F"
SUSHISWAP_FACTORY = "0xC0AEe478e3658e2610c5F7A4A2E1777cE9e4f2Ac"

_V2_SWAP_SIGNATURES = (
    "0xd78ad95fa46c994b6551d0da85fc275fe613ce37657fb8d5e3d130840159d822",  # Swap event
    "0x38ed173900000000000000000000000000000000000000000000000000000000",  # swapExactTokensForTokens
    "0x7ff36ab500000000000000000000000000000000000000000000000000000000",  # swapExactETHForTokens
    "0x18cbafe500000000000000000000000000000000000000000000000000000000",  # swapExactTokensForETH
)

_V3_SWAP_SIGNATURES = (
    "0xc42079f94a6350d7e6235f29174924f928cc2ac818eb64fed8004e3fb1d3e1fe",  # Swap event
    "0x414bf389000000000000000000000000000000000000000000000000000000000",  # exactInputSingle
    "0x5c11d795000000000000000000000000000000000000000000000000000000000",  # exactInput
    "0xdb3e219800000000000000000000000000000000000000000000000000000000",  # exactOutputSingle
)


@dataclass(frozen=True)
class Protocol:
    """A DEX protocol identified by its router and factory."""

    name: str
    version: str
    router_address: H160
    factory_address: H160
    swap_signatures: tuple[str, ...] = ()
    fee_tiers: tuple[int, ...] = ()

    def matches_swap(self, input_data: str) -> bool:
        """True if the call data starts with one of the swap selectors."""
        if len(input_data) < 10:
            return False
        selector = input_data[:10]
        return any(sig.startswith(selector) for sig in self.swap_signatures)


def _default_protocols() -> list[Protocol]:
    return [
        Protocol(
            name="Uniswap",
            version="V2",
            router_address=H160.from_hex(UNISWAP_V2_ROUTER),
            factory_address=H160.from_hex(UNISWAP_V2_FACTORY),
            swap_signatures=_V2_SWAP_SIGNATURES,
            fee_tiers=(3000,),
        ),
        Protocol(
            name="Uniswap",
            version="V3",
            router_address=H160.from_hex(UNISWAP_V3_ROUTER),
            factory_address=H160.from_hex(UNISWAP_V3_FACTORY),
            swap_signatures=_V3_SWAP_SIGNATURES,
            fee_tiers=(100, 500, 3000, 10000),
        ),
        Protocol(
            name="SushiSwap",
            version="V2",
            router_address=H160.from_hex(SUSHISWAP_ROUTER),
            factory_address=H160.from_hex(SUSHISWAP_FACTORY),
            swap_signatures=_V2_SWAP_SIGNATURES,
            fee_tiers=(3000,),
        ),
    ]


class ProtocolRegistry:
    """Registry of known protocols, keyed by router address."""

    def __init__(self, with_defaults: bool = True) -> None:
        self._protocols: dict[H160, Protocol] = {}
        if with_defaults:
            for protocol in _default_protocols():
                self.register(protocol)

    def register(self, protocol: Protocol) -> None:
        self._protocols[protocol.router_address] = protocol

    def get_by_router(self, address: H160) -> Protocol | None:
        return self._protocols.get(address)

    def get_by_factory(self, address: H160) -> Protocol | None:
        return next(
            (p for p in self._protocols.values() if p.factory_address == address), None
        )

    def is_known_router(self, address: H160) -> bool:
        return address in self._protocols

    def is_known_factory(self, address: H160) -> bool:
        return any(p.factory_address == address for p in self._protocols.values())

    def all_protocols(self) -> list[Protocol]:
        return list(self._protocols.values())

    def detect_from_transaction(self, to_address: H160, input_data: str) -> Protocol | None:
        """The router's protocol if the call data is one of its swaps."""
        protocol = self.get_by_router(to_address)
        if protocol is not None and protocol.matches_swap(input_data):
            return protocol
        return None

    def __len__(self) -> int:
        return len(self._protocols)


class ProtocolDetectionService:
    """Detects which protocol a transaction is addressed to."""

    def __init__(self, registry: ProtocolRegistry | None = None) -> None:
        self.registry = registry if registry is not None else ProtocolRegistry()

    def detect_protocol(self, to_address: H160, input_data: str) -> Protocol | None:
        return self.registry.detect_from_transaction(to_address, input_data)

    def get_protocol(self, router_address: H160) -> Protocol | None:
        return self.registry.get_by_router(router_address)

    def is_known_protocol(self, address: H160) -> bool:
        return self.registry.is_known_router(address) or self.registry.is_known_factory(address)

    def all_protocols(self) -> list[Protocol]:
        return self.registry.all_protocols()