"""
Command-line interface for exercising the PayBot APIs.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Iterable, Sequence, Tuple

import requests

from .api import create_payment_client
from .core.client import PayBotClient, PaymentRequest
from .core.config import load_client_config
from .core.errors import ConfigError, PayBotError
from .core.handler import X402Handler
from .core.networks import NETWORKS


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )


def _env_override(value: str) -> Tuple[str, str]:
    if "=" not in value:
        raise argparse.ArgumentTypeError("Overrides must look like KEY=VALUE")
    key, val = value.split("=", 1)
    key = key.strip()
    if not key:
        raise argparse.ArgumentTypeError("Override key must not be empty")
    return key, val


def _collect_overrides(pairs: Iterable[Tuple[str, str]]) -> dict[str, str]:
    overrides: dict[str, str] = {}
    for key, value in pairs:
        overrides[key] = value
    return overrides


def _emit(payload: Any) -> None:
    json.dump(payload, sys.stdout, indent=2, default=str)
    sys.stdout.write("\n")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="paybot",
        description="Pay for x402-protected resources through a PayBot facilitator",
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to the .env file containing PAYBOT_* settings (default: .env)",
    )
    parser.add_argument(
        "--set",
        action="append",
        type=_env_override,
        metavar="KEY=VALUE",
        default=None,
        help="Override an environment variable without editing the .env file",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Python logging level (default: INFO)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    pay = commands.add_parser("pay", help="Run a single verify + settle payment")
    pay.add_argument("--resource", required=True, help="URL of the resource being paid for")
    pay.add_argument("--amount", required=True, help="Amount in USDC, e.g. 0.05")
    pay.add_argument("--pay-to", required=True, help="Recipient wallet address")
    pay.add_argument("--token-contract", help="ERC-20 contract (default: network USDC)")
    pay.add_argument("--network", help="CAIP-2 network id (default: PAYBOT_NETWORK)")

    fetch = commands.add_parser("fetch", help="Fetch a URL, paying for it if required")
    fetch.add_argument("url")
    fetch.add_argument("--method", default="GET")

    commands.add_parser("balance", help="Show trust status and remaining budget")

    history = commands.add_parser("history", help="List recent transactions")
    history.add_argument("--limit", type=int, default=50)

    commands.add_parser("health", help="Check facilitator health")

    register = commands.add_parser("register", help="Register this bot")
    register.add_argument("--trust-level", type=int, default=1)

    commands.add_parser("networks", help="List supported networks")
    return parser


def _run_command(args: argparse.Namespace, client: PayBotClient) -> int:
    if args.command == "pay":
        result = client.pay(
            PaymentRequest(
                resource=args.resource,
                amount=args.amount,
                pay_to=args.pay_to,
                token_contract=args.token_contract,
                network=args.network,
            )
        )
        _emit(result.as_dict())
        if not result.success:
            logging.error("Payment failed: %s", result.error)
            return 1
        return 0

    if args.command == "fetch":
        response = X402Handler(client).request(args.method.upper(), args.url)
        logging.info("%s %s -> %s", args.method.upper(), args.url, response.status_code)
        sys.stdout.write(response.text)
        return 0 if response.ok else 1

    if args.command == "balance":
        _emit(client.balance())
    elif args.command == "history":
        _emit(client.history(limit=args.limit))
    elif args.command == "health":
        _emit(client.health())
    elif args.command == "register":
        _emit(client.register(trust_level=args.trust_level))
    return 0


def run_cli(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    if args.command == "networks":
        _emit({key: network.name for key, network in NETWORKS.items()})
        return 0

    overrides = _collect_overrides(args.set or ())
    try:
        config = load_client_config(env_file=args.env_file, overrides=overrides)
    except (ConfigError, ValueError) as exc:
        logging.error("Invalid configuration: %s", exc)
        return 1

    try:
        client = create_payment_client(config=config, session=requests.Session())
        return _run_command(args, client)
    except PayBotError as exc:
        logging.error("%s", exc)
        return 1
    except requests.RequestException as exc:
        logging.error("Request failed: %s", exc)
        return 1


def main() -> None:
    sys.exit(run_cli())


if __name__ == "__main__":
    main()
