"""
Helpers for constructing the JSON payloads sent to the PayBot facilitator.
"""

from __future__ import annotations

import json
import re
import time
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Literal, Optional, Union

from eth_utils import is_hex_address, to_checksum_address
from hexbytes import HexBytes

from .errors import InvalidAmountError, UnknownSigningDomainError
from .networks import EIP3009_TYPES, USDC_CONFIG, get_signing_domain
from .signing import TypedDataSigner, generate_nonce

__all__ = [
    "AUTHORIZATION_VALIDITY_SECONDS",
    "AuthorizationProof",
    "MAX_TIMEOUT_SECONDS",
    "MockProof",
    "SignedAuthorization",
    "X402_VERSION",
    "base_units_to_decimal",
    "build_authorization",
    "build_payment_wrapper",
    "build_requirements",
    "decimal_to_base_units",
]

X402_VERSION = 1
MAX_TIMEOUT_SECONDS = 300
AUTHORIZATION_VALIDITY_SECONDS = 3600

_TOKEN_DECIMALS: int = USDC_CONFIG["decimals"]
_DECIMAL_AMOUNT = re.compile(r"^([0-9]*)(?:\.([0-9]*))?$")


def decimal_to_base_units(amount: str) -> str:
    """
    Convert a human decimal string (``"10.00"``) into token base units (``"10000000"``).

    The conversion is textual so no rounding can creep in. Fractional digits
    beyond the token precision are truncated.
    """
    text = amount.strip() if isinstance(amount, str) else ""
    match = _DECIMAL_AMOUNT.match(text)
    if match is None or not (match.group(1) or match.group(2)):
        raise InvalidAmountError(f"Invalid payment amount: {amount!r}")

    whole = match.group(1) or "0"
    fraction = (match.group(2) or "").ljust(_TOKEN_DECIMALS, "0")[:_TOKEN_DECIMALS]
    return f"{whole}{fraction}".lstrip("0") or "0"


def base_units_to_decimal(value: Union[str, int]) -> Decimal:
    return Decimal(f"{int(value)}e-{_TOKEN_DECIMALS}")


@dataclass(frozen=True)
class MockProof:
    """Trust-based proof: the facilitator authenticates the bot by API key."""

    bot_id: str
    kind: Literal["mock"] = field(default="mock", init=False)

    def serialize(self) -> str:
        return f"payer:{self.bot_id}"


@dataclass(frozen=True)
class SignedAuthorization:
    """A signed ERC-3009 TransferWithAuthorization."""

    from_address: str
    to: str
    value: str
    valid_after: str
    valid_before: str
    nonce: str
    signature: str
    kind: Literal["signed"] = field(default="signed", init=False)

    def as_dict(self) -> Dict[str, str]:
        return {
            "from": self.from_address,
            "to": self.to,
            "value": self.value,
            "validAfter": self.valid_after,
            "validBefore": self.valid_before,
            "nonce": self.nonce,
            "signature": self.signature,
        }

    def serialize(self) -> str:
        return json.dumps(self.as_dict(), separators=(",", ":"))


AuthorizationProof = Union[MockProof, SignedAuthorization]


def build_authorization(
    pay_to: str,
    value_base_units: str,
    network: str,
    *,
    bot_id: str,
    signer: Optional[TypedDataSigner] = None,
    now: Optional[int] = None,
    nonce: Optional[bytes] = None,
) -> AuthorizationProof:
    """
    Build the proof attached to a payment.

    Without a signer this is a :class:`MockProof`. With one, an ERC-3009
    authorization is signed against the network's USDC domain; the
    authorization is valid from the epoch until one hour after ``now``.
    """
    if signer is None:
        return MockProof(bot_id=bot_id)

    domain = get_signing_domain(network)
    if domain is None:
        raise UnknownSigningDomainError(network)

    if not is_hex_address(pay_to):
        raise ValueError(f"Invalid payee address: {pay_to!r}")

    now = int(time.time()) if now is None else now
    nonce_bytes = bytes(nonce) if nonce is not None else generate_nonce()
    valid_after = 0
    valid_before = now + AUTHORIZATION_VALIDITY_SECONDS
    value = int(value_base_units)

    message = {
        "from": signer.address,
        "to": to_checksum_address(pay_to),
        "value": value,
        "validAfter": valid_after,
        "validBefore": valid_before,
        "nonce": HexBytes(nonce_bytes),
    }
    signature = signer.sign_typed_data(
        domain.as_dict(),
        EIP3009_TYPES,
        "TransferWithAuthorization",
        message,
    )

    return SignedAuthorization(
        from_address=signer.address,
        to=pay_to,
        value=str(value),
        valid_after=str(valid_after),
        valid_before=str(valid_before),
        nonce="0x" + nonce_bytes.hex(),
        signature=signature,
    )


def build_requirements(
    network: str,
    token_contract: str,
    amount_base_units: str,
    pay_to: str,
) -> Dict[str, Any]:
    return {
        "scheme": "exact",
        "network": network,
        "asset": f"{network}/erc20:{token_contract}",
        "amount": amount_base_units,
        "payTo": pay_to,
        "maxTimeoutSeconds": MAX_TIMEOUT_SECONDS,
    }


def build_payment_wrapper(resource: str, proof: AuthorizationProof) -> Dict[str, Any]:
    """Build the payload wrapper shared by ``/verify`` and ``/settle``."""
    return {
        "x402Version": X402_VERSION,
        "resource": resource,
        "accepted": True,
        "payload": proof.serialize(),
    }
