"""
HAWKI client backend.

The HawkiClientBackend resolves the HAWKI connection of a local user and
hands it to the browser encrypted for a key only the browser session holds.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

import httpx

from .connection_requests import CreateConnectionRequest, FetchConnectionRequest, LocalUserId
from .crypto import HybridCrypto
from .http import configure_client
from .keys import AsymmetricCrypto
from .models import ClientConfig, EncryptedClientConfig
from .types import (
    ConfigurationError,
    DEFAULT_TIMEOUT,
    InvalidKeyError,
    InvalidRecipientKeyError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HawkiClientBackendConfig:
    """Configuration for a HawkiClientBackend."""

    hawki_url: str
    """URL of the HAWKI instance, never propagated to the frontend."""

    api_token: str = field(repr=False)
    """API token created together with the app in HAWKI."""

    private_key: str = field(repr=False)
    """Private key of this app, matching the public key stored in HAWKI."""

    timeout: float = DEFAULT_TIMEOUT
    """HTTP timeout in seconds."""

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        prefix: str = "HAWKI_",
    ) -> "HawkiClientBackendConfig":
        """
        Creates configuration from environment variables.

        Reads ``HAWKI_URL``, ``HAWKI_API_TOKEN``, ``HAWKI_PRIVATE_KEY`` and the
        optional ``HAWKI_TIMEOUT``.

        Raises:
            ConfigurationError: If a required variable is missing or the timeout is not a number
        """
        environ = os.environ if environ is None else environ

        def required(name: str) -> str:
            value = environ.get(prefix + name)
            if not value:
                raise ConfigurationError(f"Missing environment variable: {prefix}{name}")
            return value

        timeout_value = environ.get(prefix + "TIMEOUT")
        try:
            timeout = float(timeout_value) if timeout_value else DEFAULT_TIMEOUT
        except ValueError as exc:
            raise ConfigurationError(f"Invalid {prefix}TIMEOUT: {timeout_value!r}") from exc

        return cls(
            hawki_url=required("URL"),
            api_token=required("API_TOKEN"),
            private_key=required("PRIVATE_KEY"),
            timeout=timeout,
        )


class HawkiClientBackend:
    """
    Secure communication between your backend and your HAWKI instance.

    The HAWKI URL, the API token and the private key never reach the
    frontend. The URL may point to a private hostname, e.g. an internal
    docker compose service such as ``http://hawki-nginx``.

    Example usage:
        ```python
        backend = HawkiClientBackend(
            hawki_url="https://hawki.example.com",
            api_token="your-token",
            private_key="your-private-key",
        )

        # In an authenticated route handler that received ``public_key``
        # from the JS client:
        encrypted = backend.get_client_config(current_user.id, public_key)
        return encrypted.to_json()
        ```

    If the HAWKI instance uses a self-signed certificate, pass a transport:
    ``transport=httpx.HTTPTransport(verify=False)``.
    """

    def __init__(
        self,
        hawki_url: str,
        api_token: str,
        private_key: str,
        transport: Optional[httpx.BaseTransport] = None,
        hybrid_crypto: Optional[HybridCrypto] = None,
        asymmetric_crypto: Optional[AsymmetricCrypto] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """
        Initialize the client backend.

        Args:
            hawki_url: The URL of your HAWKI instance.
            api_token: The API token of your HAWKI app.
            private_key: The private key of your HAWKI app.
            transport: Optional httpx transport for the HAWKI connection.
            hybrid_crypto: Optional crypto implementation (testing only).
            asymmetric_crypto: Optional crypto implementation (testing only).
            timeout: HTTP timeout in seconds.

        Raises:
            InvalidHawkiUrlError: If hawki_url is not a valid http(s) URL.
            InvalidKeyError: If private_key cannot be loaded.
        """
        self._client = configure_client(api_token, hawki_url, transport=transport, timeout=timeout)
        self._asymmetric_crypto = asymmetric_crypto or AsymmetricCrypto()
        self._hybrid_crypto = hybrid_crypto or HybridCrypto()
        try:
            self._private_key = self._asymmetric_crypto.load_private_key(private_key)
        except InvalidKeyError:
            self._client.close()
            raise

    @classmethod
    def from_config(cls, config: HawkiClientBackendConfig, **kwargs) -> "HawkiClientBackend":
        """Creates a client backend from a config; kwargs are passed to the constructor."""
        return cls(
            hawki_url=config.hawki_url,
            api_token=config.api_token,
            private_key=config.private_key,
            timeout=config.timeout,
            **kwargs,
        )

    def get_client_config(self, local_user_id: LocalUserId, public_key: str) -> EncryptedClientConfig:
        """
        Fetch the connection of a local user from HAWKI, or create a
        connection request if the user is not linked yet, and return it
        encrypted for the given public key.

        Args:
            local_user_id: The user id of YOUR application, not the HAWKI user id.
                Any string or integer that uniquely identifies the user; other
                objects are accepted and converted with str().
            public_key: The public key sent by the JS client.

        Returns:
            The encrypted client config; serve ``to_json()`` to the JS client.

        Raises:
            FailedToFetchConnectionError: If looking up the connection failed.
            FailedToDecryptSecretsError: If the connection secrets could not be decrypted.
            FailedToCreateConnectionRequestError: If creating the connection request failed.
            SerializationError: If the client config could not be serialized.
            InvalidRecipientKeyError: If public_key is malformed.
        """
        payload = FetchConnectionRequest(local_user_id).execute(self._client)
        if payload is not None:
            payload = payload.decrypt(self._hybrid_crypto, self._private_key, self._asymmetric_crypto)
        else:
            payload = CreateConnectionRequest(local_user_id).execute(self._client)

        client_config = ClientConfig(payload)
        serialized = client_config.to_json()

        try:
            recipient_key = self._asymmetric_crypto.load_public_key_from_web(public_key)
        except InvalidKeyError as exc:
            raise InvalidRecipientKeyError(f"Invalid recipient public key: {exc}") from exc

        logger.debug(
            "Resolved client config for local user %s: %s",
            local_user_id,
            client_config.config_type.value,
        )
        return EncryptedClientConfig(self._hybrid_crypto.encrypt(serialized, recipient_key))

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def __enter__(self) -> "HawkiClientBackend":
        return self

    def __exit__(self, *args) -> None:
        self.close()
