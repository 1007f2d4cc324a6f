"""
Automatic handling of HTTP 402 Payment Required responses.

:class:`X402Handler` wraps a :class:`requests.Session`. When a request comes
back with 402 it reads the payment terms, checks them against the auto-pay
ceiling, pays through :class:`PayBotClient` and replays the request once
with the payment proof attached.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional, Union

import requests

from .client import PayBotClient, PaymentRequest
from .config import _parse_max_auto_pay
from .errors import AutoPayLimitExceededError, PaymentFailedError
from .payloads import base_units_to_decimal

__all__ = [
    "FACILITATOR_HEADER",
    "FACILITATOR_NAME",
    "PAYMENT_PROOF_HEADER",
    "PaymentChallenge",
    "X402Handler",
    "parse_payment_challenge",
]

PAYMENT_REQUIRED = 402
PAYMENT_PROOF_HEADER = "X-Payment-Proof"
FACILITATOR_HEADER = "X-Payment-Facilitator"
FACILITATOR_NAME = "paybot"
AMOUNT_HEADER = "X-Payment-Amount"
ADDRESS_HEADER = "X-Payment-Address"

_BASE_UNITS = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class PaymentChallenge:
    """Payment terms advertised by a 402 response. ``amount`` is in base units."""

    amount: str
    pay_to: str

    @property
    def amount_decimal(self) -> Decimal:
        return base_units_to_decimal(self.amount)


def _challenge_from_body(body: Any) -> Optional[PaymentChallenge]:
    if not isinstance(body, dict):
        return None

    requirements = body.get("paymentRequirements")
    if requirements:
        if not isinstance(requirements, dict):
            return None
        amount = requirements.get("amount")
        pay_to = requirements.get("payTo")
        return PaymentChallenge(
            amount="0" if amount is None else str(amount),
            pay_to="" if pay_to is None else str(pay_to),
        )

    if body.get("amount") and body.get("payTo"):
        return PaymentChallenge(amount=str(body["amount"]), pay_to=str(body["payTo"]))
    return None


def parse_payment_challenge(response: requests.Response) -> Optional[PaymentChallenge]:
    """
    Extract the payment terms from a 402 response, or ``None`` if none are found.

    Recognized, in order: a ``paymentRequirements`` object in the JSON body,
    top-level ``amount``/``payTo`` body fields, and the ``X-Payment-Amount``/
    ``X-Payment-Address`` headers. Challenges whose amount is not a whole
    number of base units are treated as unrecognized.
    """
    try:
        body = response.json()
    except ValueError:
        body = None

    challenge = _challenge_from_body(body)
    if challenge is None:
        header_amount = response.headers.get(AMOUNT_HEADER)
        header_pay_to = response.headers.get(ADDRESS_HEADER)
        if header_amount and header_pay_to:
            challenge = PaymentChallenge(amount=header_amount, pay_to=header_pay_to)

    if challenge is None or not _BASE_UNITS.fullmatch(challenge.amount.strip()):
        return None
    return PaymentChallenge(amount=challenge.amount.strip(), pay_to=challenge.pay_to)


class X402Handler:
    """
    Fetch URLs, paying for them automatically when the server asks.

    At most one retry is made per call. If the replayed request gets another
    402, that response is returned as-is.
    """

    def __init__(
        self,
        client: PayBotClient,
        *,
        max_auto_pay: Union[Decimal, str, None] = None,
        network: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.client = client
        self.max_auto_pay = (
            client.config.max_auto_pay
            if max_auto_pay is None
            else _parse_max_auto_pay(str(max_auto_pay))
        )
        self.network = network or client.config.network
        self.session = session or client.session

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        kwargs.setdefault("timeout", self.client.config.timeout_seconds)
        response = self.session.request(method, url, **kwargs)
        if response.status_code != PAYMENT_REQUIRED:
            return response

        challenge = parse_payment_challenge(response)
        if challenge is None:
            logging.info("Received 402 from %s without recognizable payment terms", url)
            return response

        amount = challenge.amount_decimal
        if amount > self.max_auto_pay:
            raise AutoPayLimitExceededError(amount, self.max_auto_pay)

        logging.info("Paying %s USDC to %s for %s", amount, challenge.pay_to, url)
        result = self.client.pay(
            PaymentRequest(
                resource=url,
                amount=f"{amount:.6f}",
                pay_to=challenge.pay_to,
                network=self.network,
            )
        )
        if not result.success:
            raise PaymentFailedError(result)

        retry_headers = dict(kwargs.get("headers") or {})
        retry_headers[PAYMENT_PROOF_HEADER] = result.tx_hash or ""
        retry_headers[FACILITATOR_HEADER] = FACILITATOR_NAME
        kwargs["headers"] = retry_headers
        return self.session.request(method, url, **kwargs)

    def get(self, url: str, **kwargs: Any) -> requests.Response:
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> requests.Response:
        return self.request("POST", url, **kwargs)

    def put(self, url: str, **kwargs: Any) -> requests.Response:
        return self.request("PUT", url, **kwargs)

    def delete(self, url: str, **kwargs: Any) -> requests.Response:
        return self.request("DELETE", url, **kwargs)

