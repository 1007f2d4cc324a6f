"""
Core primitives that implement the PayBot payment lifecycle.
"""

from .client import PayBotClient, PaymentRequest, PaymentResult
from .config import ClientConfig, ClientParameters, load_client_config
from .environment import ClientEnvironment, build_environment, load_env_file
from .errors import (
    AutoPayLimitExceededError,
    ConfigError,
    InvalidAmountError,
    PayBotApiError,
    PayBotError,
    PaymentFailedError,
    UnknownSigningDomainError,
)
from .handler import PaymentChallenge, X402Handler, parse_payment_challenge
from .networks import (
    DEFAULT_NETWORK,
    NetworkConfig,
    SigningDomain,
    get_network,
    get_signing_domain,
    get_supported_networks,
)
from .payloads import (
    MockProof,
    SignedAuthorization,
    base_units_to_decimal,
    build_authorization,
    decimal_to_base_units,
)
from .signing import LocalAccountSigner, TypedDataSigner, generate_nonce

__all__ = [
    "AutoPayLimitExceededError",
    "ClientConfig",
    "ClientEnvironment",
    "ClientParameters",
    "ConfigError",
    "DEFAULT_NETWORK",
    "InvalidAmountError",
    "LocalAccountSigner",
    "MockProof",
    "NetworkConfig",
    "PayBotApiError",
    "PayBotClient",
    "PayBotError",
    "PaymentChallenge",
    "PaymentFailedError",
    "PaymentRequest",
    "PaymentResult",
    "SignedAuthorization",
    "SigningDomain",
    "TypedDataSigner",
    "UnknownSigningDomainError",
    "X402Handler",
    "base_units_to_decimal",
    "build_authorization",
    "build_environment",
    "decimal_to_base_units",
    "generate_nonce",
    "get_network",
    "get_signing_domain",
    "get_supported_networks",
    "load_client_config",
    "load_env_file",
    "parse_payment_challenge",
]
