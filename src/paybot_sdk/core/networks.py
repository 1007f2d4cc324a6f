"""
Static registry of the chains PayBot can settle on.

Both tables are keyed by CAIP-2 identifier and are read-only. Lookups on an
unknown identifier return ``None`` rather than a fallback entry.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

__all__ = [
    "DEFAULT_NETWORK",
    "DEFAULT_TOKEN_CONTRACT",
    "EIP3009_TYPES",
    "EIP712_DOMAINS",
    "NETWORKS",
    "USDC_CONFIG",
    "NetworkConfig",
    "SigningDomain",
    "get_explorer_url",
    "get_network",
    "get_signing_domain",
    "get_supported_networks",
]


@dataclass(frozen=True)
class NetworkConfig:
    name: str
    chain_id: int
    caip2: str
    rpc_url: str
    usdc_address: str
    explorer_url: str
    is_testnet: bool


@dataclass(frozen=True)
class SigningDomain:
    """EIP-712 domain separator of a USDC deployment."""

    name: str
    version: str
    chain_id: int
    verifying_contract: str

    def as_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "chainId": self.chain_id,
            "verifyingContract": self.verifying_contract,
        }


DEFAULT_NETWORK = "eip155:84532"
DEFAULT_TOKEN_CONTRACT = "0x036CbD53842c5426634e7929541eC2318f3dCF7e"

NETWORKS: Mapping[str, NetworkConfig] = MappingProxyType(
    {
        "eip155:8453": NetworkConfig(
            name="Base Mainnet",
            chain_id=8453,
            caip2="eip155:8453",
            rpc_url="https://mainnet.base.org",
            usdc_address="0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",
            explorer_url="https://basescan.org",
            is_testnet=False,
        ),
        "eip155:84532": NetworkConfig(
            name="Base Sepolia",
            chain_id=84532,
            caip2="eip155:84532",
            rpc_url="https://sepolia.base.org",
            usdc_address=DEFAULT_TOKEN_CONTRACT,
            explorer_url="https://sepolia.basescan.org",
            is_testnet=True,
        ),
    }
)

EIP712_DOMAINS: Mapping[str, SigningDomain] = MappingProxyType(
    {
        "eip155:84532": SigningDomain(
            name="USDC",
            version="2",
            chain_id=84532,
            verifying_contract=DEFAULT_TOKEN_CONTRACT,
        ),
        "eip155:8453": SigningDomain(
            name="USDC",
            version="2",
            chain_id=8453,
            verifying_contract="0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",
        ),
    }
)

USDC_CONFIG: Mapping[str, Any] = MappingProxyType(
    {"symbol": "USDC", "decimals": 6, "name": "USD Coin"}
)

# ERC-3009 TransferWithAuthorization schema.
EIP3009_TYPES: Mapping[str, Any] = MappingProxyType(
    {
        "TransferWithAuthorization": (
            {"name": "from", "type": "address"},
            {"name": "to", "type": "address"},
            {"name": "value", "type": "uint256"},
            {"name": "validAfter", "type": "uint256"},
            {"name": "validBefore", "type": "uint256"},
            {"name": "nonce", "type": "bytes32"},
        ),
    }
)


def get_network(caip2: str) -> Optional[NetworkConfig]:
    return NETWORKS.get(caip2)


def get_supported_networks() -> List[str]:
    return list(NETWORKS.keys())


def get_signing_domain(caip2: str) -> Optional[SigningDomain]:
    return EIP712_DOMAINS.get(caip2)


def get_explorer_url(tx_hash: str, caip2: str) -> Optional[str]:
    """Return the block explorer link for ``tx_hash``, or ``None`` for unknown chains."""
    network = get_network(caip2)
    if network is None:
        return None
    return f"{network.explorer_url}/tx/{tx_hash}"
