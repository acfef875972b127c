"""Type definitions and constants for the HAWKI client backend."""

from typing import Optional


# Ciphertext format constants
CIPHERTEXT_VERSION = 0x01
PUBLIC_KEY_SIZE = 32
PRIVATE_KEY_SIZE = 32
NONCE_SIZE = 12
TAG_SIZE = 16
HEADER_SIZE = 1 + PUBLIC_KEY_SIZE + NONCE_SIZE + TAG_SIZE  # 61

# Key derivation constants
HYBRID_INFO_PREFIX = b"HawkiClientBackendV1"
SYMMETRIC_KEY_SIZE = 32

# HAWKI API constants
CONNECTION_PATH = "api/apps/connection/"
CLIENT_CONFIG_FIELD = "hawkiClientConfig"
DEFAULT_TIMEOUT = 30.0

# Required fields in the secrets of an established connection
SECRETS_FIELD = "secrets"
PRIVATE_KEY_FIELD = "privateKey"
PASSKEY_FIELD = "passkey"
API_TOKEN_FIELD = "apiToken"


# Exception types
class HawkiClientBackendError(Exception):
    """Base exception for HAWKI client backend errors."""
    pass


class ConfigurationError(HawkiClientBackendError):
    """The client backend configuration is incomplete or invalid."""
    pass


class InvalidHawkiUrlError(ConfigurationError, ValueError):
    """The given HAWKI server URL is not an absolute http(s) URL."""

    def __init__(self, url: object) -> None:
        self.url = url
        super().__init__(f'The given HAWKI server URL "{url}" is invalid. It must be a valid URL.')


class FailedToFetchConnectionError(HawkiClientBackendError):
    """The request to fetch an existing connection failed."""

    def __init__(self, reason: Optional[str] = None) -> None:
        self.reason = reason
        message = "The request to fetch the app user from HAWKI failed."
        if reason:
            message += f" Reason: {reason}"
        super().__init__(message)


class FailedToCreateConnectionRequestError(HawkiClientBackendError):
    """The request to create a new connection request failed."""

    def __init__(self, reason: Optional[str] = None) -> None:
        self.reason = reason
        message = "The request to create a new app user connect request failed."
        if reason:
            message += f" Reason: {reason}"
        super().__init__(message)


class FailedToDecryptSecretsError(HawkiClientBackendError):
    """A secret of an established connection could not be decrypted."""

    def __init__(self, secret_name: str, reason: Optional[str] = None) -> None:
        self.secret_name = secret_name
        self.reason = reason
        reason_part = f": {reason}" if reason is not None else ""
        super().__init__(f"Failed to decrypt secret '{secret_name}'{reason_part}")


class ConnectionNotDecryptedError(HawkiClientBackendError, RuntimeError):
    """A connection was exported before its secrets were decrypted."""

    def __init__(self) -> None:
        super().__init__("Connection must be decrypted before usage.")


class InvalidRecipientKeyError(HawkiClientBackendError, ValueError):
    """The public key supplied by the client could not be loaded."""
    pass


class SerializationError(HawkiClientBackendError):
    """The client config could not be serialized."""
    pass


class InvalidKeyError(HawkiClientBackendError, ValueError):
    """Key material has an invalid format or length."""
    pass


class InvalidCiphertextError(HawkiClientBackendError, ValueError):
    """A hybrid ciphertext has an invalid format."""
    pass


class EncryptionError(HawkiClientBackendError):
    """Encryption failed."""
    pass


class DecryptionError(HawkiClientBackendError):
    """Decryption failed."""
    pass
