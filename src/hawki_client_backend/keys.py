"""Key handling for the HAWKI client backend."""

from typing import Tuple

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric.x25519 import X25519PrivateKey, X25519PublicKey
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
    load_pem_private_key,
)

from .encoding import from_base64, to_base64, to_base64url
from .types import InvalidKeyError, PRIVATE_KEY_SIZE, PUBLIC_KEY_SIZE

PEM_PREFIX = "-----BEGIN"


def generate_keypair() -> Tuple[X25519PrivateKey, X25519PublicKey]:
    """
    Generate a random X25519 key pair.

    Returns:
        Tuple of (private_key, public_key)
    """
    private_key = X25519PrivateKey.generate()
    public_key = private_key.public_key()
    return private_key, public_key


def public_key_to_bytes(public_key: X25519PublicKey) -> bytes:
    """Convert X25519 public key to raw bytes."""
    return public_key.public_bytes(Encoding.Raw, PublicFormat.Raw)


def public_key_from_bytes(data: bytes) -> X25519PublicKey:
    """Create X25519 public key from raw bytes."""
    if len(data) != PUBLIC_KEY_SIZE:
        raise InvalidKeyError(f"Public key must be {PUBLIC_KEY_SIZE} bytes, got {len(data)}")
    return X25519PublicKey.from_public_bytes(data)


def private_key_to_bytes(private_key: X25519PrivateKey) -> bytes:
    """Convert X25519 private key to raw bytes."""
    return private_key.private_bytes(Encoding.Raw, PrivateFormat.Raw, NoEncryption())


def private_key_from_bytes(data: bytes) -> X25519PrivateKey:
    """Create X25519 private key from raw bytes."""
    if len(data) != PRIVATE_KEY_SIZE:
        raise InvalidKeyError(f"Private key must be {PRIVATE_KEY_SIZE} bytes, got {len(data)}")
    return X25519PrivateKey.from_private_bytes(data)


class AsymmetricCrypto:
    """
    Loads and exports the X25519 keys used by the hybrid scheme.

    Private keys are exchanged as base64 of the raw 32 key bytes (a PKCS#8
    PEM encoded X25519 key is accepted as well). Public keys coming from the
    browser are url-safe base64 of the raw 32 key bytes; standard base64 and
    missing padding are tolerated.
    """

    def generate_keypair(self) -> Tuple[X25519PrivateKey, X25519PublicKey]:
        """Generate a new random key pair."""
        return generate_keypair()

    def load_private_key(self, value: str) -> X25519PrivateKey:
        """
        Load a private key from its string form.

        Args:
            value: base64 raw key bytes or a PEM document

        Returns:
            The private key

        Raises:
            InvalidKeyError: If the value is not a valid X25519 private key
        """
        if not isinstance(value, str) or not value.strip():
            raise InvalidKeyError("Private key must be a non-empty string")

        if value.lstrip().startswith(PEM_PREFIX):
            return self._load_pem_private_key(value)

        try:
            raw = from_base64(value)
        except ValueError as exc:
            raise InvalidKeyError(f"Private key is not valid base64: {exc}") from exc
        return private_key_from_bytes(raw)

    def load_public_key_from_web(self, value: str) -> X25519PublicKey:
        """
        Load a public key in the form sent by the browser client.

        Raises:
            InvalidKeyError: If the value is not a valid X25519 public key
        """
        if not isinstance(value, str) or not value.strip():
            raise InvalidKeyError("Public key must be a non-empty string")

        try:
            raw = from_base64(value)
        except ValueError as exc:
            raise InvalidKeyError(f"Public key is not valid base64: {exc}") from exc
        public_key = public_key_from_bytes(raw)

        # Low-order points yield no shared secret
        try:
            X25519PrivateKey.generate().exchange(public_key)
        except ValueError as exc:
            raise InvalidKeyError(f"Public key is not usable for key agreement: {exc}") from exc
        return public_key

    def export_private_key(self, private_key: X25519PrivateKey) -> str:
        """Export a private key in the form accepted by load_private_key."""
        return to_base64(private_key_to_bytes(private_key))

    def export_public_key_for_web(self, public_key: X25519PublicKey) -> str:
        """Export a public key in the form accepted by load_public_key_from_web."""
        return to_base64url(public_key_to_bytes(public_key))

    @staticmethod
    def _load_pem_private_key(value: str) -> X25519PrivateKey:
        try:
            key = load_pem_private_key(value.strip().encode("ascii"), password=None)
        except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
            raise InvalidKeyError(f"Private key is not a valid PEM document: {exc}") from exc

        if not isinstance(key, X25519PrivateKey):
            raise InvalidKeyError(f"Expected an X25519 private key, got {type(key).__name__}")
        return key
