import json
from dataclasses import replace

import pytest
import requests

from conftest import FACILITATOR, PAYEE, StubSession, StubSigner, make_response
from paybot_sdk.core.client import PayBotClient, PaymentRequest, PaymentResult
from paybot_sdk.core.errors import PayBotApiError

COMMISSION = {
    "grossAmount": "10000",
    "netAmount": "9900",
    "commissionAmount": "100",
    "commissionRate": 0.01,
}


def _request(**overrides):
    values = {"resource": "https://api.test/item", "amount": "0.01", "pay_to": PAYEE}
    values.update(overrides)
    return PaymentRequest(**values)


def _facilitator(verify, settle=None):
    def handler(call):
        if call.url == f"{FACILITATOR}/verify":
            return verify(call) if callable(verify) else verify
        if call.url == f"{FACILITATOR}/settle":
            return settle(call) if callable(settle) else settle
        raise AssertionError(f"unexpected call to {call.url}")

    return StubSession(handler)


def test_pay_success_runs_verify_then_settle(config):
    session = _facilitator(
        make_response(200, {"settlementToken": "tok-1", "commission": COMMISSION}),
        make_response(200, {"transaction": "0xfeed", "network": "eip155:84532"}),
    )
    result = PayBotClient(config, session=session).pay(_request())

    assert result == PaymentResult(
        success=True,
        gross_amount="10000",
        net_amount="9900",
        commission_amount="100",
        commission_rate=0.01,
        tx_hash="0xfeed",
        network="eip155:84532",
    )
    assert [call.url for call in session.calls] == [
        f"{FACILITATOR}/verify",
        f"{FACILITATOR}/settle",
    ]

    verify_call, settle_call = session.calls
    assert verify_call.headers["X-API-Key"] == "pb_test_key"
    assert verify_call.kwargs["timeout"] == config.timeout_seconds
    assert verify_call.json == {
        "botId": "bot-1",
        "payload": {
            "x402Version": 1,
            "resource": "https://api.test/item",
            "accepted": True,
            "payload": "payer:bot-1",
        },
        "requirements": {
            "scheme": "exact",
            "network": "eip155:84532",
            "asset": "eip155:84532/erc20:0x036CbD53842c5426634e7929541eC2318f3dCF7e",
            "amount": "10000",
            "payTo": PAYEE,
            "maxTimeoutSeconds": 300,
        },
    }
    assert settle_call.json["settlementToken"] == "tok-1"
    assert settle_call.json["payload"] == verify_call.json["payload"]
    assert settle_call.json["requirements"] == verify_call.json["requirements"]
    assert settle_call.json["commission"] == COMMISSION


def test_settle_uses_modified_requirements(config):
    modified = {"scheme": "exact", "amount": "9900", "payTo": PAYEE}
    session = _facilitator(
        make_response(200, {"settlementToken": "tok", "modifiedRequirements": modified}),
        make_response(200, {"transaction": "0x1"}),
    )
    result = PayBotClient(config, session=session).pay(_request())

    assert result.success
    assert session.calls_to("/settle")[0].json["requirements"] == modified
    assert "commission" not in session.calls_to("/settle")[0].json
    assert result.gross_amount == "0"
    assert result.commission_rate == 0.0


def test_request_network_and_token_override(config):
    session = _facilitator(make_response(400, {"error": "nope"}))
    PayBotClient(config, session=session).pay(
        _request(network="eip155:8453", token_contract="0xToken")
    )
    requirements = session.calls[0].json["requirements"]
    assert requirements["network"] == "eip155:8453"
    assert requirements["asset"] == "eip155:8453/erc20:0xToken"


def test_mainnet_defaults_to_mainnet_usdc(config):
    session = _facilitator(make_response(400, {}))
    PayBotClient(config, session=session).pay(_request(network="eip155:8453"))
    asset = session.calls[0].json["requirements"]["asset"]
    assert asset == "eip155:8453/erc20:0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"


def test_verify_rejection_skips_settle(config):
    session = _facilitator(
        make_response(
            403,
            {"error": "Budget exceeded", "code": "BUDGET_EXCEEDED", "details": {"remaining": "0"}},
        )
    )
    result = PayBotClient(config, session=session).pay(_request())

    assert result == PaymentResult.failure(
        "Budget exceeded", code="BUDGET_EXCEEDED", details={"remaining": "0"}
    )
    assert result.gross_amount == result.net_amount == result.commission_amount == "0"
    assert session.calls_to("/settle") == []


def test_verify_error_without_json_body(config):
    session = _facilitator(make_response(500, content=b"<html>oops</html>"))
    result = PayBotClient(config, session=session).pay(_request())

    assert not result.success
    assert result.error == "HTTP 500"
    assert result.error_code is None
    assert session.calls_to("/settle") == []


def test_verify_missing_settlement_token(config):
    session = _facilitator(make_response(200, {"commission": COMMISSION}))
    result = PayBotClient(config, session=session).pay(_request())

    assert not result.success
    assert result.error == "Verify response missing settlement token"
    assert session.calls_to("/settle") == []


def test_settle_failure_has_no_transaction(config):
    session = _facilitator(
        make_response(200, {"settlementToken": "tok", "commission": COMMISSION}),
        make_response(502, content=b"bad gateway"),
    )
    result = PayBotClient(config, session=session).pay(_request())

    assert not result.success
    assert result.tx_hash is None
    assert result.error == "Settlement HTTP 502"
    assert result.gross_amount == "0"


def test_settle_failure_surfaces_server_error(config):
    session = _facilitator(
        make_response(200, {"settlementToken": "tok"}),
        make_response(409, {"error": "Token already used", "code": "TOKEN_REUSED"}),
    )
    result = PayBotClient(config, session=session).pay(_request())

    assert result.error == "Token already used"
    assert result.error_code == "TOKEN_REUSED"


def test_transport_failure_becomes_failed_result(config):
    session = _facilitator(requests.ConnectionError("connection refused"))
    result = PayBotClient(config, session=session).pay(_request())

    assert not result.success
    assert result.error == "connection refused"


def test_transport_failure_during_settle(config):
    session = _facilitator(
        make_response(200, {"settlementToken": "tok"}),
        requests.Timeout("read timed out"),
    )
    result = PayBotClient(config, session=session).pay(_request())

    assert not result.success
    assert result.error == "read timed out"


def test_undecodable_settle_response(config):
    session = _facilitator(
        make_response(200, {"settlementToken": "tok"}),
        make_response(200, content=b"not json"),
    )
    result = PayBotClient(config, session=session).pay(_request())
    assert not result.success
    assert result.error


def test_non_numeric_commission_rate_still_settles(config):
    session = _facilitator(
        make_response(
            200,
            {"settlementToken": "tok", "commission": {"grossAmount": "10000", "commissionRate": "1%"}},
        ),
        make_response(200, {"transaction": "0xsettled"}),
    )
    result = PayBotClient(config, session=session).pay(_request())

    assert result.success
    assert result.tx_hash == "0xsettled"
    assert result.gross_amount == "10000"
    assert result.commission_rate == 0.0
    assert len(session.calls_to(f"{FACILITATOR}/settle")) == 1


def test_settle_body_that_is_not_an_object_still_settles(config):
    session = _facilitator(
        make_response(200, {"settlementToken": "tok"}),
        make_response(200, ["queued"]),
    )
    result = PayBotClient(config, session=session).pay(_request())

    assert result.success
    assert result.tx_hash is None


def test_invalid_amount_fails_without_network(config):
    session = _facilitator(make_response(200, {}))
    result = PayBotClient(config, session=session).pay(_request(amount="-5"))

    assert not result.success
    assert "Invalid payment amount" in result.error
    assert session.calls == []


def test_unknown_signing_domain_fails_without_network(config):
    session = _facilitator(make_response(200, {}))
    client = PayBotClient(config, session=session, signer=StubSigner())
    result = client.pay(_request(network="eip155:1"))

    assert not result.success
    assert result.error == "No EIP-712 domain for network: eip155:1"
    assert session.calls == []


def test_signed_payment_payload(config):
    session = _facilitator(make_response(400, {"error": "stop"}))
    signer = StubSigner()
    PayBotClient(config, session=session, signer=signer).pay(_request(amount="0.25"))

    proof = json.loads(session.calls[0].json["payload"]["payload"])
    assert proof["from"] == signer.address
    assert proof["to"] == PAYEE
    assert proof["value"] == "250000"
    assert proof["validAfter"] == "0"
    assert proof["signature"] == "0x" + "11" * 65


def test_wallet_key_in_config_enables_signing(config):
    keyed = replace(config, wallet_private_key="4c" * 32)
    client = PayBotClient(keyed, session=_facilitator(None))
    assert client.signer is not None
    assert client.signer.address.startswith("0x")


def test_result_as_dict():
    failure = PaymentResult.failure("declined", code="TRUST_TOO_LOW")
    assert failure.as_dict() == {
        "success": False,
        "grossAmount": "0",
        "netAmount": "0",
        "commissionAmount": "0",
        "commissionRate": 0.0,
        "error": "declined",
        "errorCode": "TRUST_TOO_LOW",
    }


# ----------------------------------------------------------------------
# Account endpoints
# ----------------------------------------------------------------------


def test_balance_sends_bot_id(config):
    session = StubSession(lambda call: make_response(200, {"trustLevel": 2}))
    assert PayBotClient(config, session=session).balance() == {"trustLevel": 2}

    call = session.calls[0]
    assert call.method == "GET"
    assert call.url == f"{FACILITATOR}/balance"
    assert call.kwargs["params"] == {"botId": "bot-1"}
    assert call.headers == {"X-API-Key": "pb_test_key"}


def test_history_limit(config):
    session = StubSession(lambda call: make_response(200, [{"id": "t1"}]))
    assert PayBotClient(config, session=session).history(limit=5) == [{"id": "t1"}]
    assert session.calls[0].kwargs["params"] == {"botId": "bot-1", "limit": "5"}


def test_set_limits(config):
    session = StubSession(lambda call: make_response(200, {"success": True}))
    PayBotClient(config, session=session).set_limits({"dailyLimit": "5.00"})

    call = session.calls[0]
    assert call.method == "PUT"
    assert call.json == {"botId": "bot-1", "dailyLimit": "5.00"}
    assert call.headers["Content-Type"] == "application/json"


def test_register_conflict_raises(config):
    session = StubSession(
        lambda call: make_response(409, {"error": "Bot already registered", "code": "CONFLICT"})
    )
    with pytest.raises(PayBotApiError) as excinfo:
        PayBotClient(config, session=session).register(trust_level=3)

    assert session.calls[0].json == {"botId": "bot-1", "trustLevel": 3}
    assert excinfo.value.code == "CONFLICT"
    assert excinfo.value.status_code == 409
    assert str(excinfo.value) == "Bot already registered"


def test_http_error_without_body(config):
    session = StubSession(lambda call: make_response(503, content=b""))
    with pytest.raises(PayBotApiError) as excinfo:
        PayBotClient(config, session=session).health()

    assert excinfo.value.code == "HTTP_ERROR"
    assert excinfo.value.message == "HTTP 503"
    assert excinfo.value.details is None


def test_network_error(config):
    session = StubSession(lambda call: requests.ConnectionError("unreachable"))
    with pytest.raises(PayBotApiError) as excinfo:
        PayBotClient(config, session=session).health()

    assert excinfo.value.code == "NETWORK_ERROR"
    assert excinfo.value.status_code == 0
    assert str(excinfo.value) == "Network error: unreachable"
