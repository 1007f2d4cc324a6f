"""
Configuration objects and helpers for the PayBot client.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Mapping, Optional, Union

from .environment import ClientEnvironment, build_environment
from .errors import ConfigError
from .networks import DEFAULT_NETWORK

__all__ = [
    "ClientConfig",
    "ClientParameters",
    "DEFAULT_FACILITATOR_URL",
    "DEFAULT_MAX_AUTO_PAY",
    "DEFAULT_TIMEOUT_SECONDS",
    "load_client_config",
]

DEFAULT_FACILITATOR_URL = "http://localhost:3000"
DEFAULT_MAX_AUTO_PAY = Decimal("1.00")
DEFAULT_TIMEOUT_SECONDS = 30.0

_PARAMETER_TO_ENV_KEY = {
    "api_key": "PAYBOT_API_KEY",
    "bot_id": "PAYBOT_BOT_ID",
    "facilitator_url": "PAYBOT_FACILITATOR_URL",
    "wallet_private_key": "PAYBOT_WALLET_PRIVATE_KEY",
    "network": "PAYBOT_NETWORK",
    "max_auto_pay": "PAYBOT_MAX_AUTO_PAY",
    "timeout_seconds": "PAYBOT_TIMEOUT_SECONDS",
}


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass(frozen=True)
class ClientParameters:
    """
    Explicit parameter bundle for constructing :class:`ClientConfig`.

    Callers can either instantiate this helper or pass the individual keyword
    arguments directly to :func:`load_client_config`.
    """

    api_key: Optional[str] = None
    bot_id: Optional[str] = None
    facilitator_url: Optional[str] = None
    wallet_private_key: Optional[str] = None
    network: Optional[str] = None
    max_auto_pay: Optional[Decimal | str | float | int] = None
    timeout_seconds: Optional[float | int | str] = None

    def as_overrides(self) -> Dict[str, str]:
        overrides: Dict[str, str] = {}
        for field_name, env_key in _PARAMETER_TO_ENV_KEY.items():
            value = getattr(self, field_name)
            if value is None:
                continue
            overrides[env_key] = _stringify(value)
        return overrides


def _collect_parameter_overrides(
    parameters: Optional[ClientParameters],
    explicit: Mapping[str, Any],
) -> Dict[str, str]:
    overrides: Dict[str, str] = {}
    if parameters is not None:
        overrides.update(parameters.as_overrides())

    for key, value in explicit.items():
        if value is None:
            continue
        try:
            env_key = _PARAMETER_TO_ENV_KEY[key]
        except KeyError as exc:  # pragma: no cover - guarded by the call sites
            raise TypeError(f"Unknown client parameter '{key}'") from exc
        overrides[env_key] = _stringify(value)
    return overrides


def _require(environment: ClientEnvironment, key: str) -> str:
    value = environment.get(key, "").strip()
    if not value:
        raise ConfigError(f"{key} must be provided")
    return value


def _parse_max_auto_pay(raw: str) -> Decimal:
    try:
        value = Decimal(raw)
    except InvalidOperation as exc:
        raise ConfigError(
            f"PAYBOT_MAX_AUTO_PAY must be a valid decimal number, got '{raw}'"
        ) from exc
    if not value.is_finite() or value < 0:
        raise ConfigError("PAYBOT_MAX_AUTO_PAY must be a non-negative amount")
    return value


def _parse_timeout(raw: str) -> float:
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(
            f"PAYBOT_TIMEOUT_SECONDS must be a number, got '{raw}'"
        ) from exc
    if value <= 0:
        raise ConfigError("PAYBOT_TIMEOUT_SECONDS must be greater than zero")
    return value


@dataclass(frozen=True)
class ClientConfig:
    api_key: str
    bot_id: str
    facilitator_url: str = DEFAULT_FACILITATOR_URL
    wallet_private_key: Optional[str] = None
    network: str = DEFAULT_NETWORK
    max_auto_pay: Decimal = DEFAULT_MAX_AUTO_PAY
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    def __repr__(self) -> str:
        return (
            f"ClientConfig(bot_id={self.bot_id!r}, "
            f"facilitator_url={self.facilitator_url!r}, network={self.network!r}, "
            f"signing={'yes' if self.wallet_private_key else 'no'})"
        )

    @property
    def base_url(self) -> str:
        return self.facilitator_url.rstrip("/")

    @classmethod
    def from_mapping(
        cls, values: Union[Mapping[str, str], ClientEnvironment]
    ) -> "ClientConfig":
        environment = (
            values if isinstance(values, ClientEnvironment) else ClientEnvironment(values)
        )
        api_key = _require(environment, "PAYBOT_API_KEY")
        bot_id = _require(environment, "PAYBOT_BOT_ID")

        facilitator_url = (
            environment.get("PAYBOT_FACILITATOR_URL", DEFAULT_FACILITATOR_URL)
            .strip()
            .rstrip("/")
        )

        wallet_private_key = (
            environment.get("PAYBOT_WALLET_PRIVATE_KEY", "").strip() or None
        )

        network = environment.get("PAYBOT_NETWORK", DEFAULT_NETWORK).strip()

        max_auto_pay = _parse_max_auto_pay(
            environment.get("PAYBOT_MAX_AUTO_PAY", str(DEFAULT_MAX_AUTO_PAY))
        )
        timeout_seconds = _parse_timeout(
            environment.get("PAYBOT_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS))
        )

        return cls(
            api_key=api_key,
            bot_id=bot_id,
            facilitator_url=facilitator_url,
            wallet_private_key=wallet_private_key,
            network=network,
            max_auto_pay=max_auto_pay,
            timeout_seconds=timeout_seconds,
        )

    @classmethod
    def from_env(
        cls,
        *,
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
    ) -> "ClientConfig":
        parameter_overrides = _collect_parameter_overrides(
            parameters,
            {
                "api_key": api_key,
                "bot_id": bot_id,
                "facilitator_url": facilitator_url,
                "wallet_private_key": wallet_private_key,
                "network": network,
                "max_auto_pay": max_auto_pay,
                "timeout_seconds": timeout_seconds,
            },
        )
        merged_overrides = dict(overrides or {})
        merged_overrides.update(parameter_overrides)

        environment = build_environment(
            env_file=env_file,
            base=base,
            overrides=merged_overrides,
        )
        return cls.from_mapping(environment)


def load_client_config(
    *,
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
) -> ClientConfig:
    """
    Convenience wrapper that mirrors :meth:`ClientConfig.from_env`.

    The configuration can be provided entirely through environment variables,
    a ``.env`` file, direct keyword arguments, or any combination of the three.
    """
    return ClientConfig.from_env(
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
