"""Tests for connections and client configs."""

import copy
import json

import pytest

from hawki_client_backend.crypto import HybridCrypto
from hawki_client_backend.envelope import HybridCiphertext
from hawki_client_backend.models import (
    ClientConfig,
    ClientConfigType,
    Connection,
    ConnectionRequest,
    EncryptedClientConfig,
)
from hawki_client_backend.types import (
    ConnectionNotDecryptedError,
    FailedToDecryptSecretsError,
    SerializationError,
)
from .test_vectors import CONNECTION_DATA, CONNECTION_REQUEST_DATA


class CountingHybridCrypto(HybridCrypto):
    """Records every decrypt call."""

    def __init__(self) -> None:
        self.decrypt_calls = []

    def decrypt(self, value, private_key):
        self.decrypt_calls.append(value)
        return super().decrypt(value, private_key)


class TestConnectionDecryption:
    """Test unlocking the secrets of a connection."""

    def test_decrypts_secrets(self, encrypted_connection_data, app_keys) -> None:
        """Passkey and API token are decrypted, the private key is dropped."""
        connection = Connection(encrypted_connection_data)

        result = connection.decrypt(HybridCrypto(), app_keys[0])

        assert result is connection
        assert connection.is_decrypted
        assert connection.to_dict() == CONNECTION_DATA
        assert "privateKey" not in connection.to_dict()["secrets"]

    def test_does_not_decrypt_twice(self, encrypted_connection_data, app_keys) -> None:
        """A second decrypt is a no-op and calls no crypto."""
        connection = Connection(encrypted_connection_data)
        crypto = CountingHybridCrypto()

        connection.decrypt(crypto, app_keys[0])
        first = connection.to_dict()
        result = connection.decrypt(crypto, app_keys[0])

        assert result is connection
        assert len(crypto.decrypt_calls) == 3
        assert connection.to_dict() == first

    def test_does_not_mutate_input(self, encrypted_connection_data, app_keys) -> None:
        original = copy.deepcopy(encrypted_connection_data)

        Connection(encrypted_connection_data).decrypt(HybridCrypto(), app_keys[0])

        assert encrypted_connection_data == original

    def test_passkey_needs_user_key(self, encrypted_connection_data, app_keys) -> None:
        """A passkey encrypted for the app key instead of the user key is rejected."""
        _, app_public = app_keys
        data = copy.deepcopy(encrypted_connection_data)
        data["secrets"]["passkey"] = HybridCrypto().encrypt("user-passkey", app_public).to_string()

        with pytest.raises(FailedToDecryptSecretsError) as exc_info:
            Connection(data).decrypt(HybridCrypto(), app_keys[0])

        assert exc_info.value.secret_name == "passkey"

    def test_api_token_needs_app_key(self, encrypted_connection_data, app_keys, user_keys) -> None:
        """An API token encrypted for the user key instead of the app key is rejected."""
        _, user_public = user_keys
        data = copy.deepcopy(encrypted_connection_data)
        data["secrets"]["apiToken"] = HybridCrypto().encrypt("user-api-token", user_public).to_string()

        with pytest.raises(FailedToDecryptSecretsError) as exc_info:
            Connection(data).decrypt(HybridCrypto(), app_keys[0])

        assert exc_info.value.secret_name == "apiToken"

    def test_wrong_app_key(self, encrypted_connection_data, browser_keys) -> None:
        with pytest.raises(FailedToDecryptSecretsError) as exc_info:
            Connection(encrypted_connection_data).decrypt(HybridCrypto(), browser_keys[0])

        assert exc_info.value.secret_name == "privateKey"

    def test_failed_decryption_stays_locked(self, encrypted_connection_data, app_keys) -> None:
        """After a failure the connection is still locked and can be retried."""
        data = copy.deepcopy(encrypted_connection_data)
        data["secrets"]["apiToken"] = "corrupt"
        connection = Connection(data)

        with pytest.raises(FailedToDecryptSecretsError):
            connection.decrypt(HybridCrypto(), app_keys[0])

        assert not connection.is_decrypted
        with pytest.raises(ConnectionNotDecryptedError):
            connection.to_dict()

    def test_user_private_key_not_a_key(self, encrypted_connection_data, app_keys) -> None:
        data = copy.deepcopy(encrypted_connection_data)
        data["secrets"]["privateKey"] = HybridCrypto().encrypt("not a key", app_keys[1]).to_string()

        with pytest.raises(FailedToDecryptSecretsError) as exc_info:
            Connection(data).decrypt(HybridCrypto(), app_keys[0])

        assert exc_info.value.secret_name == "privateKey"


class TestConnectionSecretValidation:
    """Test field-specific errors for malformed secrets."""

    def test_missing_secrets(self, app_keys) -> None:
        with pytest.raises(FailedToDecryptSecretsError) as exc_info:
            Connection({"foo": "bar"}).decrypt(HybridCrypto(), app_keys[0])

        assert exc_info.value.secret_name == "secrets"
        assert "missing or not a mapping" in str(exc_info.value)

    @pytest.mark.parametrize("secrets", ["a string", ["a", "list"], 42, None])
    def test_secrets_not_a_mapping(self, app_keys, secrets) -> None:
        with pytest.raises(FailedToDecryptSecretsError) as exc_info:
            Connection({"secrets": secrets}).decrypt(HybridCrypto(), app_keys[0])

        assert exc_info.value.secret_name == "secrets"

    @pytest.mark.parametrize("field_name", ["privateKey", "passkey", "apiToken"])
    def test_missing_field(self, encrypted_connection_data, app_keys, field_name: str) -> None:
        data = copy.deepcopy(encrypted_connection_data)
        del data["secrets"][field_name]

        with pytest.raises(FailedToDecryptSecretsError) as exc_info:
            Connection(data).decrypt(HybridCrypto(), app_keys[0])

        assert exc_info.value.secret_name == field_name
        assert str(exc_info.value) == (
            f"Failed to decrypt secret '{field_name}': the field is missing or an empty string"
        )

    @pytest.mark.parametrize("field_name", ["privateKey", "passkey", "apiToken"])
    @pytest.mark.parametrize("value", ["", 123, None, {"nested": "value"}])
    def test_empty_or_non_string_field(
        self, encrypted_connection_data, app_keys, field_name: str, value
    ) -> None:
        data = copy.deepcopy(encrypted_connection_data)
        data["secrets"][field_name] = value

        with pytest.raises(FailedToDecryptSecretsError) as exc_info:
            Connection(data).decrypt(HybridCrypto(), app_keys[0])

        assert exc_info.value.secret_name == field_name


class TestConnectionExport:
    """Test exporting connections."""

    @pytest.mark.parametrize("data", [{}, CONNECTION_DATA, {"secrets": "x"}])
    def test_locked_connection_cannot_be_exported(self, data) -> None:
        connection = Connection(data)

        with pytest.raises(ConnectionNotDecryptedError, match="must be decrypted"):
            connection.to_dict()

    def test_export_is_a_copy(self, encrypted_connection_data, app_keys) -> None:
        connection = Connection(encrypted_connection_data).decrypt(HybridCrypto(), app_keys[0])

        exported = connection.to_dict()
        exported["secrets"]["passkey"] = "changed"

        assert connection.to_dict()["secrets"]["passkey"] == "user-passkey"

    def test_repr_hides_data(self, encrypted_connection_data) -> None:
        assert repr(Connection(encrypted_connection_data)) == "Connection(locked)"


class TestConnectionRequest:
    """Test connection requests."""

    def test_exports_verbatim(self) -> None:
        assert ConnectionRequest(CONNECTION_REQUEST_DATA).to_dict() == CONNECTION_REQUEST_DATA

    def test_is_immutable(self) -> None:
        source = dict(CONNECTION_REQUEST_DATA)
        request = ConnectionRequest(source)

        source["url"] = "changed"
        request.to_dict()["url"] = "changed too"

        assert request.to_dict() == CONNECTION_REQUEST_DATA
        with pytest.raises(AttributeError):
            request.data = {}


class TestClientConfig:
    """Test the tagged client config."""

    def test_connection_request_type(self) -> None:
        config = ClientConfig(ConnectionRequest({"some": "data"}))

        assert config.config_type is ClientConfigType.CONNECTION_REQUEST
        assert config.to_json() == '{"type":"connect_request","payload":{"some":"data"}}'

    def test_connected_type(self, encrypted_connection_data, app_keys) -> None:
        connection = Connection(encrypted_connection_data).decrypt(HybridCrypto(), app_keys[0])

        config = ClientConfig(connection)

        assert config.config_type is ClientConfigType.CONNECTED
        assert config.to_dict() == {"type": "connected", "payload": CONNECTION_DATA}

    def test_type_is_set_for_locked_connection(self, encrypted_connection_data) -> None:
        """The type does not depend on the lock state, export does."""
        config = ClientConfig(Connection(encrypted_connection_data))

        assert config.config_type is ClientConfigType.CONNECTED
        with pytest.raises(ConnectionNotDecryptedError):
            config.to_json()

    def test_type_cannot_be_passed(self) -> None:
        with pytest.raises(TypeError):
            ClientConfig(ConnectionRequest({}), config_type=ClientConfigType.CONNECTED)

    def test_non_ascii_is_escaped(self) -> None:
        """Lone surrogates and other non-ASCII text serialize to encodable JSON."""
        config = ClientConfig(ConnectionRequest({"url": "\ud800", "name": "Café"}))

        serialized = config.to_json()

        assert serialized == '{"type":"connect_request","payload":{"url":"\\ud800","name":"Caf\\u00e9"}}'
        assert serialized.encode("utf-8")
        assert json.loads(serialized)["payload"] == {"url": "\ud800", "name": "Café"}

    def test_unsupported_payload(self) -> None:
        with pytest.raises(TypeError, match="Unsupported"):
            ClientConfig({"some": "data"})

    def test_unserializable_payload(self) -> None:
        config = ClientConfig(ConnectionRequest({"value": float("nan")}))

        with pytest.raises(SerializationError):
            config.to_json()


class TestEncryptedClientConfig:
    """Test the encrypted wire format."""

    def test_wire_format(self, browser_keys) -> None:
        browser_private, browser_public = browser_keys
        serialized = ClientConfig(ConnectionRequest({"some": "data"})).to_json()
        encrypted = EncryptedClientConfig(HybridCrypto().encrypt(serialized, browser_public))

        wire = json.loads(encrypted.to_json())

        assert list(wire) == ["hawkiClientConfig"]
        value = HybridCiphertext.from_dict(wire["hawkiClientConfig"])
        assert HybridCrypto().decrypt(value, browser_private) == serialized
