"""
Minimal script that uses the public API to fetch an x402-protected resource.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Iterable, Tuple

from paybot_sdk import (
    AutoPayLimitExceededError,
    ConfigError,
    PaymentFailedError,
    create_x402_handler,
    load_client_config,
)


def _override(value: str) -> Tuple[str, str]:
    if "=" not in value:
        raise argparse.ArgumentTypeError("Overrides must look like KEY=VALUE")
    key, val = value.split("=", 1)
    key = key.strip()
    if not key:
        raise argparse.ArgumentTypeError("Override key must not be empty")
    return key, val


def _build_overrides(pairs: Iterable[Tuple[str, str]]) -> dict[str, str]:
    return {key: value for key, value in pairs}


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fetch a paid resource using the PayBot SDK")
    parser.add_argument("url", help="Resource to fetch")
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to the .env file containing PAYBOT_* settings",
    )
    parser.add_argument(
        "--set",
        action="append",
        type=_override,
        metavar="KEY=VALUE",
        default=None,
        help="Override an environment variable without editing the .env file",
    )
    parser.add_argument(
        "--max-auto-pay",
        help="Largest amount in USDC paid without asking (default: PAYBOT_MAX_AUTO_PAY)",
    )
    parser.add_argument(
        "--wallet-private-key",
        help="Sign ERC-3009 authorizations with this key instead of mock proofs",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Python logging level (default: INFO)",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )

    try:
        config = load_client_config(
            env_file=args.env_file,
            overrides=_build_overrides(args.set or ()),
            max_auto_pay=args.max_auto_pay,
            wallet_private_key=args.wallet_private_key,
        )
    except ConfigError as exc:
        logging.error("Invalid configuration: %s", exc)
        return 1

    handler = create_x402_handler(config=config)
    try:
        response = handler.get(args.url)
    except AutoPayLimitExceededError as exc:
        logging.error("Refusing to pay: %s", exc)
        return 1
    except PaymentFailedError as exc:
        logging.error("%s (code: %s)", exc, exc.result.error_code)
        return 1

    logging.info("GET %s -> %s", args.url, response.status_code)
    print(response.text)
    return 0 if response.ok else 1


if __name__ == "__main__":
    sys.exit(main())
