"""
HAWKI Client Backend - connect your application to HAWKI

Fetches or creates the HAWKI connection of a local user and re-encrypts it
for the user's browser session using X25519 + ChaCha20-Poly1305.
"""

from .keys import AsymmetricCrypto, generate_keypair
from .crypto import HybridCrypto
from .envelope import HybridCiphertext, encode_ciphertext, decode_ciphertext
from .http import configure_client, validate_hawki_url
from .models import (
    Connection,
    ConnectionRequest,
    ClientConfigType,
    ClientConfig,
    EncryptedClientConfig,
)
from .connection_requests import FetchConnectionRequest, CreateConnectionRequest
from .client import HawkiClientBackendConfig, HawkiClientBackend
from .types import (
    HawkiClientBackendError,
    ConfigurationError,
    InvalidHawkiUrlError,
    FailedToFetchConnectionError,
    FailedToCreateConnectionRequestError,
    FailedToDecryptSecretsError,
    ConnectionNotDecryptedError,
    InvalidRecipientKeyError,
    SerializationError,
    InvalidKeyError,
    InvalidCiphertextError,
    EncryptionError,
    DecryptionError,
)

__version__ = "0.1.0"

__all__ = [
    # Keys
    "AsymmetricCrypto",
    "generate_keypair",
    # Crypto
    "HybridCrypto",
    # Envelope
    "HybridCiphertext",
    "encode_ciphertext",
    "decode_ciphertext",
    # HTTP
    "configure_client",
    "validate_hawki_url",
    # Models
    "Connection",
    "ConnectionRequest",
    "ClientConfigType",
    "ClientConfig",
    "EncryptedClientConfig",
    # Requests
    "FetchConnectionRequest",
    "CreateConnectionRequest",
    # Client
    "HawkiClientBackendConfig",
    "HawkiClientBackend",
    # Errors
    "HawkiClientBackendError",
    "ConfigurationError",
    "InvalidHawkiUrlError",
    "FailedToFetchConnectionError",
    "FailedToCreateConnectionRequestError",
    "FailedToDecryptSecretsError",
    "ConnectionNotDecryptedError",
    "InvalidRecipientKeyError",
    "SerializationError",
    "InvalidKeyError",
    "InvalidCiphertextError",
    "EncryptionError",
    "DecryptionError",
]
