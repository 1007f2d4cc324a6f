"""
HTTP client for the PayBot facilitator.

:meth:`PayBotClient.pay` drives the two-phase ``/verify`` then ``/settle``
exchange and always returns a :class:`PaymentResult`; a declined payment is
an ordinary outcome, not an exception. The account endpoints (balance,
history, limits, registration, health) raise :class:`PayBotApiError` instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

import requests

from .config import ClientConfig
from .errors import PayBotApiError, get_error_message
from .networks import DEFAULT_TOKEN_CONTRACT, get_network
from .payloads import (
    build_authorization,
    build_payment_wrapper,
    build_requirements,
    decimal_to_base_units,
)
from .signing import LocalAccountSigner, TypedDataSigner

__all__ = [
    "PayBotClient",
    "PaymentRequest",
    "PaymentResult",
]


@dataclass(frozen=True)
class PaymentRequest:
    """
    A single payment for ``resource``.

    ``amount`` is a human decimal string such as ``"0.05"``. ``network`` and
    ``token_contract`` fall back to the client's network and that network's
    USDC deployment.
    """

    resource: str
    amount: str
    pay_to: str
    token_contract: Optional[str] = None
    network: Optional[str] = None


@dataclass(frozen=True)
class PaymentResult:
    success: bool
    gross_amount: str = "0"
    net_amount: str = "0"
    commission_amount: str = "0"
    commission_rate: float = 0.0
    tx_hash: Optional[str] = None
    network: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    error_details: Optional[Dict[str, Any]] = None

    @classmethod
    def failure(
        cls,
        error: str,
        *,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> "PaymentResult":
        return cls(success=False, error=error, error_code=code, error_details=details)

    @classmethod
    def from_settlement(
        cls,
        settle_payload: Mapping[str, Any],
        commission: Optional[Mapping[str, Any]],
    ) -> "PaymentResult":
        commission = commission or {}
        return cls(
            success=True,
            tx_hash=settle_payload.get("transaction"),
            network=settle_payload.get("network"),
            gross_amount=_amount_field(commission, "grossAmount"),
            net_amount=_amount_field(commission, "netAmount"),
            commission_amount=_amount_field(commission, "commissionAmount"),
            commission_rate=_rate_field(commission, "commissionRate"),
        )

    def as_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "success": self.success,
            "grossAmount": self.gross_amount,
            "netAmount": self.net_amount,
            "commissionAmount": self.commission_amount,
            "commissionRate": self.commission_rate,
        }
        optional = {
            "txHash": self.tx_hash,
            "network": self.network,
            "error": self.error,
            "errorCode": self.error_code,
            "errorDetails": self.error_details,
        }
        data.update({key: value for key, value in optional.items() if value is not None})
        return data


@dataclass(frozen=True)
class _VerifyOutcome:
    settlement_token: Optional[str] = None
    commission: Optional[Dict[str, Any]] = None
    modified_requirements: Optional[Dict[str, Any]] = None
    failure: Optional[PaymentResult] = None


def _amount_field(payload: Mapping[str, Any], key: str) -> str:
    value = payload.get(key)
    return "0" if value is None else str(value)


def _rate_field(payload: Mapping[str, Any], key: str) -> float:
    try:
        return float(payload.get(key) or 0)
    except (TypeError, ValueError):
        return 0.0


def _is_success(response: requests.Response) -> bool:
    return 200 <= response.status_code < 300


def _json_object(response: requests.Response) -> Dict[str, Any]:
    try:
        payload = response.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


def _failure_from_response(response: requests.Response, fallback: str) -> PaymentResult:
    error_data = _json_object(response)
    error = error_data.get("error")
    details = error_data.get("details")
    return PaymentResult.failure(
        str(error) if error is not None else fallback,
        code=error_data.get("code"),
        details=details if isinstance(details, dict) else None,
    )


def _default_token_contract(network: str) -> str:
    config = get_network(network)
    return config.usdc_address if config is not None else DEFAULT_TOKEN_CONTRACT


class PayBotClient:
    """
    SDK entry point for bot developers.

    Without a wallet key (or explicit ``signer``) payments use the trust-based
    mock proof; with one, every payment carries a signed ERC-3009
    authorization.
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        session: Optional[requests.Session] = None,
        signer: Optional[TypedDataSigner] = None,
    ) -> None:
        self.config = config
        self.session = session or requests.Session()
        if signer is None and config.wallet_private_key:
            signer = LocalAccountSigner(config.wallet_private_key)
        self.signer = signer

    def _headers(self, *, with_body: bool) -> Dict[str, str]:
        headers = {"X-API-Key": self.config.api_key}
        if with_body:
            headers["Content-Type"] = "application/json"
        return headers

    def _post(self, path: str, body: Dict[str, Any]) -> requests.Response:
        url = f"{self.config.base_url}{path}"
        logging.info("Submitting payment to %s", url)
        return self.session.post(
            url,
            json=body,
            headers=self._headers(with_body=True),
            timeout=self.config.timeout_seconds,
        )

    # ------------------------------------------------------------------
    # Payments
    # ------------------------------------------------------------------

    def pay(self, request: PaymentRequest) -> PaymentResult:
        """Execute a payment through the facilitator. Never raises."""
        try:
            return self._pay(request)
        except Exception as exc:  # noqa: BLE001
            logging.warning("Payment for %s failed: %s", request.resource, exc)
            return PaymentResult.failure(get_error_message(exc))

    def _pay(self, request: PaymentRequest) -> PaymentResult:
        network = request.network or self.config.network
        token_contract = request.token_contract or _default_token_contract(network)
        amount_base_units = decimal_to_base_units(request.amount)

        proof = build_authorization(
            request.pay_to,
            amount_base_units,
            network,
            bot_id=self.config.bot_id,
            signer=self.signer,
        )
        wrapper = build_payment_wrapper(request.resource, proof)
        requirements = build_requirements(
            network, token_contract, amount_base_units, request.pay_to
        )

        verified = self._verify(wrapper, requirements)
        if verified.failure is not None:
            logging.warning("Facilitator rejected payment: %s", verified.failure.error)
            return verified.failure

        settle_requirements = (
            verified.modified_requirements
            if verified.modified_requirements is not None
            else requirements
        )
        return self._settle(
            verified.settlement_token,
            wrapper,
            settle_requirements,
            verified.commission,
        )

    def _verify(
        self,
        wrapper: Dict[str, Any],
        requirements: Dict[str, Any],
    ) -> _VerifyOutcome:
        response = self._post(
            "/verify",
            {
                "botId": self.config.bot_id,
                "payload": wrapper,
                "requirements": requirements,
            },
        )
        if not _is_success(response):
            return _VerifyOutcome(
                failure=_failure_from_response(response, f"HTTP {response.status_code}")
            )

        verify_data = _json_object(response)
        settlement_token = verify_data.get("settlementToken")
        if not settlement_token:
            return _VerifyOutcome(
                failure=PaymentResult.failure("Verify response missing settlement token")
            )

        commission = verify_data.get("commission")
        modified = verify_data.get("modifiedRequirements")
        return _VerifyOutcome(
            settlement_token=settlement_token,
            commission=commission if isinstance(commission, dict) else None,
            modified_requirements=modified if isinstance(modified, dict) else None,
        )

    def _settle(
        self,
        settlement_token: Optional[str],
        wrapper: Dict[str, Any],
        requirements: Dict[str, Any],
        commission: Optional[Dict[str, Any]] = None,
    ) -> PaymentResult:
        body: Dict[str, Any] = {
            "botId": self.config.bot_id,
            "settlementToken": settlement_token,
            "payload": wrapper,
            "requirements": requirements,
        }
        if commission is not None:
            body["commission"] = commission

        response = self._post("/settle", body)
        if not _is_success(response):
            result = _failure_from_response(
                response, f"Settlement HTTP {response.status_code}"
            )
            logging.warning("Settlement failed: %s", result.error)
            return result

        settle_data = response.json()
        result = PaymentResult.from_settlement(
            settle_data if isinstance(settle_data, dict) else {}, commission
        )
        logging.info(
            "Payment settled on %s. Transaction hash: %s",
            result.network,
            result.tx_hash,
        )
        return result

    # ------------------------------------------------------------------
    # Account endpoints
    # ------------------------------------------------------------------

    def _request(
        self,
        path: str,
        *,
        method: str = "GET",
        body: Optional[Dict[str, Any]] = None,
        query: Optional[Dict[str, str]] = None,
    ) -> Any:
        url = f"{self.config.base_url}{path}"
        try:
            response = self.session.request(
                method,
                url,
                params=query,
                json=body,
                headers=self._headers(with_body=body is not None),
                timeout=self.config.timeout_seconds,
            )
        except requests.RequestException as exc:
            raise PayBotApiError(
                f"Network error: {get_error_message(exc)}", "NETWORK_ERROR", 0
            ) from exc

        if not _is_success(response):
            error_data = _json_object(response)
            details = error_data.get("details")
            raise PayBotApiError(
                str(error_data.get("error") or f"HTTP {response.status_code}"),
                str(error_data.get("code") or "HTTP_ERROR"),
                response.status_code,
                details if isinstance(details, dict) else None,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise PayBotApiError(
                f"Failed to parse JSON from facilitator at {url}",
                "INVALID_RESPONSE",
                response.status_code,
            ) from exc

    def balance(self) -> Dict[str, Any]:
        """Current trust status and remaining budget for this bot."""
        return self._request("/balance", query={"botId": self.config.bot_id})

    def history(self, limit: int = 50) -> List[Dict[str, Any]]:
        return self._request(
            "/history",
            query={"botId": self.config.bot_id, "limit": str(limit)},
        )

    def set_limits(self, limits: Mapping[str, Any]) -> None:
        self._request(
            "/limits",
            method="PUT",
            body={"botId": self.config.bot_id, **limits},
        )

    def register(self, trust_level: int = 1) -> Dict[str, Any]:
        """Register this bot. A 409 means it already exists."""
        return self._request(
            "/bots",
            method="POST",
            body={"botId": self.config.bot_id, "trustLevel": trust_level},
        )

    def health(self) -> Dict[str, Any]:
        return self._request("/health")
