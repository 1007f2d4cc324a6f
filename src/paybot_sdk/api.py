"""
Public, high-level helpers for interacting with the PayBot facilitator.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Mapping, Optional

import requests

from .core.client import PayBotClient, PaymentRequest, PaymentResult
from .core.config import ClientConfig, ClientParameters, load_client_config
from .core.handler import X402Handler
from .core.signing import TypedDataSigner

__all__ = [
    "create_payment_client",
    "create_x402_handler",
    "pay",
]


def _resolve_config(
    config: Optional[ClientConfig],
    *,
    env_file: Optional[str],
    overrides: Optional[Mapping[str, str]],
    base: Optional[Mapping[str, str]],
    parameters: Optional[ClientParameters],
    api_key: Optional[str],
    bot_id: Optional[str],
    facilitator_url: Optional[str],
    wallet_private_key: Optional[str],
    network: Optional[str],
    max_auto_pay: Optional[Decimal | str | float | int],
    timeout_seconds: Optional[float | int | str],
) -> ClientConfig:
    extras = (
        overrides,
        base,
        parameters,
        api_key,
        bot_id,
        facilitator_url,
        wallet_private_key,
        network,
        max_auto_pay,
        timeout_seconds,
    )
    if config is not None:
        if any(item is not None and item != {} for item in extras):
            raise ValueError(
                "Provide either a pre-built ClientConfig or individual parameters, not both."
            )
        return config

    return load_client_config(
        env_file=env_file,
        overrides=overrides,
        base=base,
        parameters=parameters,
        api_key=api_key,
        bot_id=bot_id,
        facilitator_url=facilitator_url,
        wallet_private_key=wallet_private_key,
        network=network,
        max_auto_pay=max_auto_pay,
        timeout_seconds=timeout_seconds,
    )


def create_payment_client(
    *,
    config: Optional[ClientConfig] = None,
    session: Optional[requests.Session] = None,
    signer: Optional[TypedDataSigner] = None,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
    parameters: Optional[ClientParameters] = None,
    api_key: Optional[str] = None,
    bot_id: Optional[str] = None,
    facilitator_url: Optional[str] = None,
    wallet_private_key: Optional[str] = None,
    network: Optional[str] = None,
    max_auto_pay: Optional[Decimal | str | float | int] = None,
    timeout_seconds: Optional[float | int | str] = None,
) -> PayBotClient:
    """
    Construct a :class:`PayBotClient`.

    Callers can either supply a ready-made :class:`ClientConfig` or let the
    helper assemble one from environment data.
    """
    cfg = _resolve_config(
        config,
        env_file=env_file,
        overrides=overrides,
        base=base,
        parameters=parameters,
        api_key=api_key,
        bot_id=bot_id,
        facilitator_url=facilitator_url,
        wallet_private_key=wallet_private_key,
        network=network,
        max_auto_pay=max_auto_pay,
        timeout_seconds=timeout_seconds,
    )
    return PayBotClient(cfg, session=session, signer=signer)


def create_x402_handler(
    *,
    config: Optional[ClientConfig] = None,
    session: Optional[requests.Session] = None,
    signer: Optional[TypedDataSigner] = None,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
    parameters: Optional[ClientParameters] = None,
    api_key: Optional[str] = None,
    bot_id: Optional[str] = None,
    facilitator_url: Optional[str] = None,
    wallet_private_key: Optional[str] = None,
    network: Optional[str] = None,
    max_auto_pay: Optional[Decimal | str | float | int] = None,
    timeout_seconds: Optional[float | int | str] = None,
) -> X402Handler:
    """
    Build an :class:`X402Handler` that pays for 402 responses and retries.

    Example::

        handler = create_x402_handler(api_key="pb_test_...", bot_id="my-bot")
        response = handler.get("https://api.example.com/paid-endpoint")
    """
    client = create_payment_client(
        config=config,
        session=session,
        signer=signer,
        env_file=env_file,
        overrides=overrides,
        base=base,
        parameters=parameters,
        api_key=api_key,
        bot_id=bot_id,
        facilitator_url=facilitator_url,
        wallet_private_key=wallet_private_key,
        network=network,
        max_auto_pay=max_auto_pay,
        timeout_seconds=timeout_seconds,
    )
    return X402Handler(client)


def pay(
    resource: str,
    amount: str,
    pay_to: str,
    *,
    token_contract: Optional[str] = None,
    network: Optional[str] = None,
    config: Optional[ClientConfig] = None,
    session: Optional[requests.Session] = None,
    env_file: Optional[str] = ".env",
) -> PaymentResult:
    """
    One-shot verify + settle. Like :meth:`PayBotClient.pay` it never raises
    for a failed payment; configuration errors still propagate.
    """
    client = create_payment_client(config=config, session=session, env_file=env_file)
    return client.pay(
        PaymentRequest(
            resource=resource,
            amount=amount,
            pay_to=pay_to,
            token_contract=token_contract,
            network=network,
        )
    )
