"""
Exceptions raised by the PayBot SDK.

Payment execution never raises; it reports failures through
:class:`paybot_sdk.core.client.PaymentResult`. Everything here is for
configuration errors, account endpoints and auto-pay policy violations.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:  # pragma: no cover
    from .client import PaymentResult

__all__ = [
    "AutoPayLimitExceededError",
    "ConfigError",
    "InvalidAmountError",
    "PayBotApiError",
    "PayBotError",
    "PaymentFailedError",
    "UnknownSigningDomainError",
    "get_error_message",
]


class PayBotError(Exception):
    """Base class for every error raised by the SDK."""


class ConfigError(PayBotError):
    """Raised when the supplied configuration is invalid."""


class InvalidAmountError(PayBotError, ValueError):
    """Raised when a decimal amount string cannot be converted to base units."""


class UnknownSigningDomainError(PayBotError, LookupError):
    def __init__(self, network: str) -> None:
        super().__init__(f"No EIP-712 domain for network: {network}")
        self.network = network


class PayBotApiError(PayBotError):
    """
    Raised by the account endpoints on transport failures and non-2xx responses.

    ``status_code`` is ``0`` when the facilitator could not be reached.
    """

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details


class AutoPayLimitExceededError(PayBotError):
    def __init__(self, amount: Decimal, limit: Decimal) -> None:
        super().__init__(
            f"x402: Payment of ${amount:.2f} exceeds auto-pay limit of ${limit}"
        )
        self.amount = amount
        self.limit = limit


class PaymentFailedError(PayBotError):
    def __init__(self, result: "PaymentResult") -> None:
        super().__init__(f"x402: Payment failed: {result.error}")
        self.result = result


def get_error_message(error: Any) -> str:
    if isinstance(error, BaseException):
        message = str(error)
        return message or error.__class__.__name__
    if isinstance(error, str):
        return error
    return "Unknown error"
