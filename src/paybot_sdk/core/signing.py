"""
Structured-data (EIP-712) signing capability.

The authorization builder only needs "an address plus a way to sign typed
data", so any backend satisfying :class:`TypedDataSigner` can be plugged in:
local key material, a hardware wallet, or a remote signing service.
"""

from __future__ import annotations

import secrets
from typing import Any, Dict, Mapping, Protocol, runtime_checkable

from eth_account import Account
from eth_account.messages import encode_typed_data
from eth_utils import to_hex

from .errors import ConfigError

__all__ = [
    "EIP712_DOMAIN_FIELDS",
    "LocalAccountSigner",
    "TypedDataSigner",
    "generate_nonce",
    "normalize_private_key",
]

EIP712_DOMAIN_FIELDS = [
    {"name": "name", "type": "string"},
    {"name": "version", "type": "string"},
    {"name": "chainId", "type": "uint256"},
    {"name": "verifyingContract", "type": "address"},
]


@runtime_checkable
class TypedDataSigner(Protocol):
    @property
    def address(self) -> str:
        ...

    def sign_typed_data(
        self,
        domain: Mapping[str, Any],
        types: Mapping[str, Any],
        primary_type: str,
        message: Mapping[str, Any],
    ) -> str:
        """Return the 0x-prefixed hex signature over ``message``."""
        ...


def generate_nonce() -> bytes:
    """Fresh random bytes32 nonce for ERC-3009 authorizations."""
    return secrets.token_bytes(32)


def normalize_private_key(raw_key: str) -> str:
    key = raw_key.strip()
    if not key:
        raise ConfigError("PAYBOT_WALLET_PRIVATE_KEY must not be empty")
    if not key.startswith("0x"):
        key = "0x" + key
    if len(key) != 66:
        raise ConfigError("PAYBOT_WALLET_PRIVATE_KEY must be 32 bytes (64 hex chars)")
    return key


class LocalAccountSigner:
    """Signs with a private key held in process memory."""

    def __init__(self, private_key: str) -> None:
        self._account = Account.from_key(normalize_private_key(private_key))

    def __repr__(self) -> str:
        return f"LocalAccountSigner(address={self.address!r})"

    @property
    def address(self) -> str:
        return self._account.address

    def sign_typed_data(
        self,
        domain: Mapping[str, Any],
        types: Mapping[str, Any],
        primary_type: str,
        message: Mapping[str, Any],
    ) -> str:
        full_types: Dict[str, Any] = {"EIP712Domain": EIP712_DOMAIN_FIELDS}
        full_types.update({name: list(fields) for name, fields in types.items()})
        typed_data = {
            "types": full_types,
            "primaryType": primary_type,
            "domain": dict(domain),
            "message": dict(message),
        }
        signable = encode_typed_data(full_message=typed_data)
        signature = self._account.sign_message(signable).signature
        return to_hex(signature)
