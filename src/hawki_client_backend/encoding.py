"""Base64 helpers for key material and ciphertexts."""

import base64
import binascii


def to_base64(data: bytes) -> str:
    """Encode bytes as padded standard base64."""
    return base64.b64encode(data).decode("ascii")


def to_base64url(data: bytes) -> str:
    """Encode bytes as unpadded url-safe base64, as used by browsers."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def from_base64(value: str) -> bytes:
    """
    Decode standard or url-safe base64, with or without padding.

    Args:
        value: The encoded string

    Returns:
        Decoded bytes

    Raises:
        ValueError: If the value is not valid base64
    """
    if not isinstance(value, str):
        raise ValueError(f"Expected a base64 string, got {type(value).__name__}")

    normalized = value.strip().replace("-", "+").replace("_", "/")

    # Add padding back
    padding = 4 - len(normalized) % 4
    if padding != 4:
        normalized += "=" * padding

    try:
        return base64.b64decode(normalized, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"Invalid base64 data: {exc}") from exc
