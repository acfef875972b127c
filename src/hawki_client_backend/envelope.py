"""Encoding and decoding of hybrid ciphertext bundles."""

from dataclasses import dataclass
from typing import Any, Mapping

from .encoding import from_base64, to_base64
from .types import (
    CIPHERTEXT_VERSION,
    HEADER_SIZE,
    InvalidCiphertextError,
    NONCE_SIZE,
    PUBLIC_KEY_SIZE,
    TAG_SIZE,
)


@dataclass(frozen=True)
class HybridCiphertext:
    """A message encrypted for a single X25519 recipient."""
    version: int
    ephemeral_public_key: bytes  # 32 bytes
    nonce: bytes  # 12 bytes
    tag: bytes  # 16 bytes
    ciphertext: bytes  # variable

    def to_bytes(self) -> bytes:
        """Encode to the binary form, see encode_ciphertext."""
        return encode_ciphertext(self)

    def to_string(self) -> str:
        """Encode to the base64 text form stored by HAWKI."""
        return to_base64(self.to_bytes())

    def __str__(self) -> str:
        return self.to_string()

    @classmethod
    def from_string(cls, value: str) -> "HybridCiphertext":
        """
        Decode the base64 text form.

        Raises:
            InvalidCiphertextError: If the value is not a valid ciphertext
        """
        try:
            data = from_base64(value)
        except ValueError as exc:
            raise InvalidCiphertextError(f"Ciphertext is not valid base64: {exc}") from exc
        return decode_ciphertext(data)

    def to_dict(self) -> dict[str, Any]:
        """JSON form sent to the browser client."""
        return {
            "version": self.version,
            "ephemeralPublicKey": to_base64(self.ephemeral_public_key),
            "nonce": to_base64(self.nonce),
            "tag": to_base64(self.tag),
            "ciphertext": to_base64(self.ciphertext),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HybridCiphertext":
        """
        Parse the JSON form produced by to_dict.

        Raises:
            InvalidCiphertextError: If a field is missing or malformed
        """
        try:
            value = cls(
                version=int(data["version"]),
                ephemeral_public_key=from_base64(data["ephemeralPublicKey"]),
                nonce=from_base64(data["nonce"]),
                tag=from_base64(data["tag"]),
                ciphertext=from_base64(data["ciphertext"]),
            )
        except KeyError as exc:
            raise InvalidCiphertextError(f"Missing ciphertext field: {exc}") from exc
        except (TypeError, ValueError) as exc:
            raise InvalidCiphertextError(f"Malformed ciphertext field: {exc}") from exc

        if value.version != CIPHERTEXT_VERSION:
            raise InvalidCiphertextError(f"Unknown version: {value.version}")
        if len(value.ephemeral_public_key) != PUBLIC_KEY_SIZE:
            raise InvalidCiphertextError("Ephemeral public key must be 32 bytes")
        if len(value.nonce) != NONCE_SIZE:
            raise InvalidCiphertextError("Nonce must be 12 bytes")
        if len(value.tag) != TAG_SIZE:
            raise InvalidCiphertextError("Tag must be 16 bytes")
        return value


def encode_ciphertext(value: HybridCiphertext) -> bytes:
    """
    Encode a ciphertext bundle to bytes.

    Format (61-byte header + ciphertext):
        [0]      version (0x01)
        [1-32]   ephemeralPublicKey (32 bytes)
        [33-44]  nonce (12 bytes)
        [45-60]  tag (16 bytes)
        [61+]    ciphertext (variable)

    Args:
        value: HybridCiphertext to encode

    Returns:
        Encoded bytes
    """
    return (
        bytes([value.version])
        + value.ephemeral_public_key
        + value.nonce
        + value.tag
        + value.ciphertext
    )


def decode_ciphertext(data: bytes) -> HybridCiphertext:
    """
    Decode bytes into a ciphertext bundle.

    Args:
        data: Encoded ciphertext bytes

    Returns:
        Decoded HybridCiphertext

    Raises:
        InvalidCiphertextError: If data is invalid
    """
    if len(data) < HEADER_SIZE:
        raise InvalidCiphertextError(f"Data too short: {len(data)} bytes (minimum {HEADER_SIZE})")

    version = data[0]
    if version != CIPHERTEXT_VERSION:
        raise InvalidCiphertextError(f"Unknown version: {version}")

    offset = 1
    ephemeral_public_key = data[offset : offset + PUBLIC_KEY_SIZE]
    offset += PUBLIC_KEY_SIZE

    nonce = data[offset : offset + NONCE_SIZE]
    offset += NONCE_SIZE

    tag = data[offset : offset + TAG_SIZE]
    offset += TAG_SIZE

    ciphertext = data[offset:]

    return HybridCiphertext(
        version=version,
        ephemeral_public_key=ephemeral_public_key,
        nonce=nonce,
        tag=tag,
        ciphertext=ciphertext,
    )

