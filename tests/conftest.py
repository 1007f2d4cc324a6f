import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from paybot_sdk.core.config import ClientConfig

PAYEE = "0x" + "ab" * 20
FACILITATOR = "http://fac.test"


def make_response(
    status: int,
    json_body: Any = None,
    *,
    content: Optional[bytes] = None,
    headers: Optional[Dict[str, str]] = None,
) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    if content is None:
        content = b"" if json_body is None else json.dumps(json_body).encode()
    response._content = content
    response.encoding = "utf-8"
    response.headers = CaseInsensitiveDict(headers or {})
    return response


@dataclass
class Call:
    method: str
    url: str
    kwargs: Dict[str, Any]

    @property
    def json(self) -> Any:
        return self.kwargs.get("json")

    @property
    def headers(self) -> Dict[str, str]:
        return self.kwargs.get("headers") or {}


@dataclass
class StubSession:
    """Stands in for ``requests.Session``; ``handler`` maps a call to a response."""

    handler: Callable[[Call], Any]
    calls: List[Call] = field(default_factory=list)

    def request(self, method, url, **kwargs):
        call = Call(method, url, kwargs)
        self.calls.append(call)
        result = self.handler(call)
        if isinstance(result, Exception):
            raise result
        return result

    def post(self, url, **kwargs):
        return self.request("POST", url, **kwargs)

    def calls_to(self, suffix: str) -> List[Call]:
        return [call for call in self.calls if call.url.split("?")[0].endswith(suffix)]


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(api_key="pb_test_key", bot_id="bot-1", facilitator_url=FACILITATOR)


class StubSigner:
    """Cheap signer for tests that only care about the proof envelope."""

    address = "0x" + "cd" * 20

    def __init__(self) -> None:
        self.calls: List[Dict[str, Any]] = []

    def sign_typed_data(self, domain, types, primary_type, message):
        self.calls.append(
            {"domain": domain, "types": types, "primary_type": primary_type, "message": message}
        )
        return "0x" + "11" * 65
