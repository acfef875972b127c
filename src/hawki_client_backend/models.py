"""Models for HAWKI connections and client configs."""

import copy
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Union

from cryptography.hazmat.primitives.asymmetric.x25519 import X25519PrivateKey

from .crypto import HybridCrypto
from .envelope import HybridCiphertext
from .keys import AsymmetricCrypto
from .types import (
    API_TOKEN_FIELD,
    CLIENT_CONFIG_FIELD,
    ConnectionNotDecryptedError,
    DecryptionError,
    FailedToDecryptSecretsError,
    InvalidCiphertextError,
    InvalidKeyError,
    PASSKEY_FIELD,
    PRIVATE_KEY_FIELD,
    SECRETS_FIELD,
    SerializationError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Locked:
    """Connection data as received from HAWKI, secrets still encrypted."""
    data: dict[str, Any]


@dataclass(frozen=True)
class _Unlocked:
    """Connection data with decrypted secrets and without the user private key."""
    data: dict[str, Any]


class Connection:
    """
    The connection details of a local user that is linked to a HAWKI user.

    The secrets arrive encrypted and must be unlocked with decrypt() before
    the connection can be exported. The user private key is encrypted for the
    app and only serves to unwrap the passkey; it is dropped on decryption.
    The API token is encrypted for the app directly.
    """

    def __init__(self, data: Mapping[str, Any]) -> None:
        self._state: Union[_Locked, _Unlocked] = _Locked(copy.deepcopy(dict(data)))

    @property
    def is_decrypted(self) -> bool:
        """Whether the secrets have been decrypted."""
        return isinstance(self._state, _Unlocked)

    def decrypt(
        self,
        hybrid_crypto: HybridCrypto,
        app_private_key: X25519PrivateKey,
        asymmetric_crypto: Optional[AsymmetricCrypto] = None,
    ) -> "Connection":
        """
        Decrypt the secrets with the app's private key.

        Calling this again after a successful decryption does nothing. If any
        step fails the connection stays locked with its original data.

        Args:
            hybrid_crypto: Hybrid crypto implementation
            app_private_key: The private key of this app
            asymmetric_crypto: Used to load the decrypted user private key

        Returns:
            This connection

        Raises:
            FailedToDecryptSecretsError: If a secret is missing, empty or cannot be decrypted
        """
        if isinstance(self._state, _Unlocked):
            return self

        data = copy.deepcopy(self._state.data)
        secrets = data.get(SECRETS_FIELD)
        if not isinstance(secrets, Mapping):
            raise FailedToDecryptSecretsError(
                SECRETS_FIELD, "the secrets field is missing or not a mapping"
            )
        secrets = data[SECRETS_FIELD] = dict(secrets)

        asymmetric_crypto = asymmetric_crypto or AsymmetricCrypto()

        user_private_key_string = _decrypt_secret(
            hybrid_crypto, secrets, PRIVATE_KEY_FIELD, app_private_key
        )
        try:
            user_private_key = asymmetric_crypto.load_private_key(user_private_key_string)
        except InvalidKeyError as exc:
            raise FailedToDecryptSecretsError(PRIVATE_KEY_FIELD, str(exc)) from exc
        del secrets[PRIVATE_KEY_FIELD]

        # The passkey is encrypted for the user, not for the app
        secrets[PASSKEY_FIELD] = _decrypt_secret(
            hybrid_crypto, secrets, PASSKEY_FIELD, user_private_key
        )

        secrets[API_TOKEN_FIELD] = _decrypt_secret(
            hybrid_crypto, secrets, API_TOKEN_FIELD, app_private_key
        )

        self._state = _Unlocked(data)
        logger.debug("Decrypted connection secrets")
        return self

    def to_dict(self) -> dict[str, Any]:
        """
        Export the connection data.

        Raises:
            ConnectionNotDecryptedError: If decrypt() has not been called yet
        """
        if not isinstance(self._state, _Unlocked):
            raise ConnectionNotDecryptedError()
        return copy.deepcopy(self._state.data)

    def __repr__(self) -> str:
        state = "unlocked" if self.is_decrypted else "locked"
        return f"Connection({state})"


def _decrypt_secret(
    hybrid_crypto: HybridCrypto,
    secrets: Mapping[str, Any],
    field_name: str,
    private_key: X25519PrivateKey,
) -> str:
    value = secrets.get(field_name)
    if not isinstance(value, str) or value == "":
        raise FailedToDecryptSecretsError(field_name, "the field is missing or an empty string")

    try:
        return hybrid_crypto.decrypt(HybridCiphertext.from_string(value), private_key)
    except (InvalidCiphertextError, DecryptionError) as exc:
        raise FailedToDecryptSecretsError(field_name, str(exc)) from exc


@dataclass(frozen=True)
class ConnectionRequest:
    """
    The client config when the local user is not connected yet.
    Tells the frontend to show the connection request screen.
    """
    data: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", copy.deepcopy(dict(self.data)))

    def to_dict(self) -> dict[str, Any]:
        """Returns the connection request exactly as HAWKI sent it."""
        return copy.deepcopy(dict(self.data))


class ClientConfigType(Enum):
    """Which kind of payload a client config carries."""
    CONNECTED = "connected"
    CONNECTION_REQUEST = "connect_request"


@dataclass(frozen=True)
class ClientConfig:
    """
    Either a connection or a connection request, tagged so the JS client
    knows how to handle the payload.
    """
    payload: Union[Connection, ConnectionRequest]
    config_type: ClientConfigType = field(init=False)

    def __post_init__(self) -> None:
        if isinstance(self.payload, Connection):
            config_type = ClientConfigType.CONNECTED
        elif isinstance(self.payload, ConnectionRequest):
            config_type = ClientConfigType.CONNECTION_REQUEST
        else:
            raise TypeError(f"Unsupported client config payload: {type(self.payload).__name__}")
        object.__setattr__(self, "config_type", config_type)

    def to_dict(self) -> dict[str, Any]:
        """
        Raises:
            ConnectionNotDecryptedError: If the payload is a locked connection
        """
        return {
            "type": self.config_type.value,
            "payload": self.payload.to_dict(),
        }

    def to_json(self) -> str:
        """
        Serialize to compact JSON.

        Raises:
            ConnectionNotDecryptedError: If the payload is a locked connection
            SerializationError: If the payload cannot be represented as JSON
        """
        data = self.to_dict()
        try:
            return json.dumps(data, separators=(",", ":"), allow_nan=False)
        except (TypeError, ValueError) as exc:
            raise SerializationError(f"Failed to serialize client config: {exc}") from exc


@dataclass(frozen=True)
class EncryptedClientConfig:
    """
    The client config encrypted for the browser session. This is the format
    in which the config is transmitted from the backend to the client.
    """
    client_config: HybridCiphertext

    def to_dict(self) -> dict[str, Any]:
        return {CLIENT_CONFIG_FIELD: self.client_config.to_dict()}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))
