"""
Public facade for the PayBot SDK.

The module re-exports the most useful pieces for integrators so they can
``from paybot_sdk import ...`` without navigating the package.
"""

from .api import create_payment_client, create_x402_handler, pay
from .core import (
    AutoPayLimitExceededError,
    ClientConfig,
    ClientParameters,
    ConfigError,
    InvalidAmountError,
    LocalAccountSigner,
    MockProof,
    PayBotApiError,
    PayBotClient,
    PayBotError,
    PaymentFailedError,
    PaymentRequest,
    PaymentResult,
    SignedAuthorization,
    TypedDataSigner,
    UnknownSigningDomainError,
    X402Handler,
    build_authorization,
    decimal_to_base_units,
    get_network,
    get_supported_networks,
    load_client_config,
)

__all__ = (
    "AutoPayLimitExceededError",
    "ClientConfig",
    "ClientParameters",
    "ConfigError",
    "InvalidAmountError",
    "LocalAccountSigner",
    "MockProof",
    "PayBotApiError",
    "PayBotClient",
    "PayBotError",
    "PaymentFailedError",
    "PaymentRequest",
    "PaymentResult",
    "SignedAuthorization",
    "TypedDataSigner",
    "UnknownSigningDomainError",
    "X402Handler",
    "build_authorization",
    "create_payment_client",
    "create_x402_handler",
    "decimal_to_base_units",
    "get_network",
    "get_supported_networks",
    "load_client_config",
    "pay",
)

__version__ = "0.1.0"
