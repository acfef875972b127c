"""Hybrid encryption and decryption for HAWKI client configs and secrets."""

import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.asymmetric.x25519 import X25519PrivateKey, X25519PublicKey
from cryptography.hazmat.primitives.ciphers.aead import ChaCha20Poly1305
from cryptography.hazmat.primitives.hashes import SHA256
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from .envelope import HybridCiphertext
from .keys import generate_keypair, public_key_from_bytes, public_key_to_bytes
from .types import (
    CIPHERTEXT_VERSION,
    DecryptionError,
    EncryptionError,
    HYBRID_INFO_PREFIX,
    InvalidKeyError,
    NONCE_SIZE,
    SYMMETRIC_KEY_SIZE,
    TAG_SIZE,
)


def _derive_symmetric_key(
    shared_secret: bytes,
    ephemeral_pub_bytes: bytes,
    recipient_pub_bytes: bytes,
) -> bytes:
    hkdf = HKDF(
        algorithm=SHA256(),
        length=SYMMETRIC_KEY_SIZE,
        salt=ephemeral_pub_bytes,
        info=HYBRID_INFO_PREFIX + recipient_pub_bytes,
    )
    return hkdf.derive(shared_secret)


class HybridCrypto:
    """
    Encrypts strings for an X25519 public key.

    Each message gets a fresh ephemeral key pair. The ECDH shared secret
    between the ephemeral key and the recipient key is run through
    HKDF-SHA256 to obtain a ChaCha20-Poly1305 key; the version byte is
    authenticated as associated data.
    """

    def encrypt(self, plaintext: str, public_key: X25519PublicKey) -> HybridCiphertext:
        """
        Encrypt a string for a recipient.

        Args:
            plaintext: Text to encrypt
            public_key: Recipient's X25519 public key

        Returns:
            HybridCiphertext containing the encrypted text

        Raises:
            EncryptionError: If the plaintext is not a UTF-8 encodable string or
                the public key is not usable for key agreement
        """
        if not isinstance(plaintext, str):
            raise EncryptionError(f"Plaintext must be a string, got {type(plaintext).__name__}")

        # Generate ephemeral key pair for this message
        ephemeral_private, ephemeral_public = generate_keypair()
        ephemeral_pub_bytes = public_key_to_bytes(ephemeral_public)
        recipient_pub_bytes = public_key_to_bytes(public_key)

        try:
            shared_secret = ephemeral_private.exchange(public_key)
        except ValueError as exc:
            raise EncryptionError(f"Key agreement failed: {exc}") from exc
        symmetric_key = _derive_symmetric_key(shared_secret, ephemeral_pub_bytes, recipient_pub_bytes)

        try:
            message_bytes = plaintext.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise EncryptionError(f"Plaintext is not encodable as UTF-8: {exc}") from exc

        nonce = os.urandom(NONCE_SIZE)
        associated_data = bytes([CIPHERTEXT_VERSION])
        sealed = ChaCha20Poly1305(symmetric_key).encrypt(nonce, message_bytes, associated_data)

        return HybridCiphertext(
            version=CIPHERTEXT_VERSION,
            ephemeral_public_key=ephemeral_pub_bytes,
            nonce=nonce,
            tag=sealed[-TAG_SIZE:],
            ciphertext=sealed[:-TAG_SIZE],
        )

    def decrypt(self, value: HybridCiphertext, private_key: X25519PrivateKey) -> str:
        """
        Decrypt a ciphertext with the recipient's private key.

        Args:
            value: The encrypted bundle
            private_key: Recipient's X25519 private key

        Returns:
            The decrypted text

        Raises:
            DecryptionError: If the key does not match or the data was tampered with
        """
        try:
            ephemeral_public = public_key_from_bytes(value.ephemeral_public_key)
            shared_secret = private_key.exchange(ephemeral_public)
        except (InvalidKeyError, ValueError) as exc:
            raise DecryptionError(f"Key agreement failed: {exc}") from exc

        recipient_pub_bytes = public_key_to_bytes(private_key.public_key())
        symmetric_key = _derive_symmetric_key(
            shared_secret, value.ephemeral_public_key, recipient_pub_bytes
        )

        try:
            plaintext = ChaCha20Poly1305(symmetric_key).decrypt(
                value.nonce, value.ciphertext + value.tag, bytes([value.version])
            )
        except (InvalidTag, ValueError) as exc:
            raise DecryptionError("Authentication failed, wrong key or corrupted data") from exc

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecryptionError("Decrypted data is not valid UTF-8") from exc
