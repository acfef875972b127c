"""Shared fixtures."""

import copy

import pytest

from hawki_client_backend.crypto import HybridCrypto
from hawki_client_backend.keys import AsymmetricCrypto, private_key_from_bytes

from .test_vectors import (
    APP_PRIVATE_KEY_HEX,
    BROWSER_PRIVATE_KEY_HEX,
    CONNECTION_DATA,
    USER_PRIVATE_KEY_HEX,
)


def _keypair(hex_value: str):
    private_key = private_key_from_bytes(bytes.fromhex(hex_value))
    return private_key, private_key.public_key()


@pytest.fixture
def app_keys():
    """The app's key pair, registered in HAWKI."""
    return _keypair(APP_PRIVATE_KEY_HEX)


@pytest.fixture
def user_keys():
    """The HAWKI user's key pair."""
    return _keypair(USER_PRIVATE_KEY_HEX)


@pytest.fixture
def browser_keys():
    """The browser session's key pair."""
    return _keypair(BROWSER_PRIVATE_KEY_HEX)


@pytest.fixture
def app_private_key_string(app_keys):
    return AsymmetricCrypto().export_private_key(app_keys[0])


@pytest.fixture
def browser_public_key_string(browser_keys):
    return AsymmetricCrypto().export_public_key_for_web(browser_keys[1])


@pytest.fixture
def encrypted_connection_data(app_keys, user_keys):
    """CONNECTION_DATA with secrets encrypted the way HAWKI encrypts them."""
    _, app_public = app_keys
    user_private, user_public = user_keys
    hybrid = HybridCrypto()
    asymmetric = AsymmetricCrypto()

    data = copy.deepcopy(CONNECTION_DATA)
    data["secrets"] = {
        "privateKey": hybrid.encrypt(asymmetric.export_private_key(user_private), app_public).to_string(),
        "passkey": hybrid.encrypt(CONNECTION_DATA["secrets"]["passkey"], user_public).to_string(),
        "apiToken": hybrid.encrypt(CONNECTION_DATA["secrets"]["apiToken"], app_public).to_string(),
    }
    return data
