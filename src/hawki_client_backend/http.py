"""
HTTP client configuration for talking to a HAWKI instance.
"""

import logging
from typing import Generator, Optional
from urllib.parse import urlsplit

import httpx

from .types import DEFAULT_TIMEOUT, InvalidHawkiUrlError

logger = logging.getLogger(__name__)

USER_AGENT = "hawki-client-backend-python/0.1.0"


class HawkiAuth(httpx.Auth):
    """Adds the JSON accept header and, unless the request already has one, the bearer token."""

    def __init__(self, api_token: str):
        self._api_token = api_token

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        request.headers["Accept"] = "application/json"
        if "Authorization" not in request.headers:
            request.headers["Authorization"] = f"Bearer {self._api_token}"
        yield request


def validate_hawki_url(hawki_url: str) -> str:
    """
    Check that the URL is an absolute http(s) URL with a host and return it
    normalised as a base URL ending in exactly one slash.

    Raises:
        InvalidHawkiUrlError: If the URL is not acceptable
    """
    if not isinstance(hawki_url, str) or not hawki_url.strip():
        raise InvalidHawkiUrlError(hawki_url)

    if any(char.isspace() for char in hawki_url.rstrip(" ")):
        raise InvalidHawkiUrlError(hawki_url)

    try:
        parts = urlsplit(hawki_url)
        hostname = parts.hostname
    except ValueError as exc:
        raise InvalidHawkiUrlError(hawki_url) from exc

    if parts.scheme not in ("http", "https") or not hostname:
        raise InvalidHawkiUrlError(hawki_url)

    return hawki_url.rstrip(" /") + "/"


def configure_client(
    api_token: str,
    hawki_url: str,
    transport: Optional[httpx.BaseTransport] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> httpx.Client:
    """
    Create an HTTP client bound to the given HAWKI instance.

    Args:
        api_token: The API token to use for authentication
        hawki_url: The base URL of the HAWKI server
        transport: Optional transport, e.g. one that accepts self-signed certificates
        timeout: Request timeout in seconds

    Returns:
        A configured httpx.Client

    Raises:
        InvalidHawkiUrlError: If hawki_url is not a valid http(s) URL
    """
    base_url = validate_hawki_url(hawki_url)
    logger.debug("Configuring HAWKI client for %s", base_url)

    return httpx.Client(
        base_url=base_url,
        auth=HawkiAuth(api_token),
        headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
        transport=transport,
        timeout=timeout,
    )
