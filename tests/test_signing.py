import pytest
from eth_account import Account

from conftest import StubSigner
from paybot_sdk.core.errors import ConfigError
from paybot_sdk.core.signing import (
    LocalAccountSigner,
    TypedDataSigner,
    generate_nonce,
    normalize_private_key,
)

PRIVATE_KEY = "4c" * 32


def test_private_key_is_normalized():
    assert normalize_private_key(f"  {PRIVATE_KEY}\n") == "0x" + PRIVATE_KEY


@pytest.mark.parametrize("raw", ["", "   ", "0x1234"])
def test_private_key_validation(raw):
    with pytest.raises(ConfigError):
        normalize_private_key(raw)


def test_local_signer_address():
    signer = LocalAccountSigner(PRIVATE_KEY)
    assert signer.address == Account.from_key("0x" + PRIVATE_KEY).address
    assert PRIVATE_KEY not in repr(signer)


def test_signers_satisfy_protocol():
    assert isinstance(LocalAccountSigner(PRIVATE_KEY), TypedDataSigner)
    assert isinstance(StubSigner(), TypedDataSigner)


def test_generate_nonce():
    first, second = generate_nonce(), generate_nonce()
    assert len(first) == 32
    assert first != second
