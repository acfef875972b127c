"""
Requests against the HAWKI app connection API.
"""

import logging
from typing import Any, Optional, Union
from urllib.parse import quote

import httpx

from .models import Connection, ConnectionRequest
from .types import (
    CONNECTION_PATH,
    FailedToCreateConnectionRequestError,
    FailedToFetchConnectionError,
)

logger = logging.getLogger(__name__)

LocalUserId = Union[str, int]


def connection_path(local_user_id: LocalUserId) -> str:
    """The API path for a local user, with the id encoded as a single path segment."""
    return CONNECTION_PATH + quote(str(local_user_id), safe="")


def _json_object(response: httpx.Response) -> dict[str, Any]:
    data = response.json()
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return data


class FetchConnectionRequest:
    """Looks up the existing connection of a local user."""

    def __init__(self, local_user_id: LocalUserId):
        self.local_user_id = local_user_id

    def execute(self, client: httpx.Client) -> Optional[Connection]:
        """
        Returns the locked connection, or None if the user is not connected yet.

        Raises:
            FailedToFetchConnectionError: On any failure other than a 404
        """
        logger.debug("Fetching HAWKI connection for local user %s", self.local_user_id)
        try:
            response = client.get(connection_path(self.local_user_id))
            response.raise_for_status()
            data = _json_object(response)
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                logger.debug("No HAWKI connection for local user %s", self.local_user_id)
                return None
            raise FailedToFetchConnectionError(f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise FailedToFetchConnectionError(str(e)) from e
        except ValueError as e:
            raise FailedToFetchConnectionError(f"invalid response body: {e}") from e

        return Connection(data)


class CreateConnectionRequest:
    """Asks HAWKI to create a connection request for a local user."""

    def __init__(self, local_user_id: LocalUserId):
        self.local_user_id = local_user_id

    def execute(self, client: httpx.Client) -> ConnectionRequest:
        """
        Raises:
            FailedToCreateConnectionRequestError: On any failure
        """
        logger.debug("Creating HAWKI connection request for local user %s", self.local_user_id)
        try:
            response = client.post(connection_path(self.local_user_id))
            response.raise_for_status()
            data = _json_object(response)
        except httpx.HTTPStatusError as e:
            raise FailedToCreateConnectionRequestError(f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise FailedToCreateConnectionRequestError(str(e)) from e
        except ValueError as e:
            raise FailedToCreateConnectionRequestError(f"invalid response body: {e}") from e

        return ConnectionRequest(data)
