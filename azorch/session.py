"""
Azkaban session cache.

A producer owns exactly one Session. It is opened once, synchronously, when
the producer is constructed; failing to authenticate aborts construction.
Every remote call goes through Session.call, which passes the current
session id to the client.

When Azkaban rejects the session id (SessionExpiredError) the session logs
in again and the call is retried once. A second expiry propagates.
If that login fails the session is left invalid, and the next call tries
one fresh login before giving up.
"""

import logging
import threading
from typing import Any, Callable, Optional, TypeVar

from azorch.client.base import AzkabanClient
from azorch.errors import AuthenticationError, AzkabanApiError, SessionExpiredError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Session:
    """Authenticated Azkaban session with renew-once semantics."""

    def __init__(
        self,
        client: AzkabanClient,
        username: str,
        password: str,
        server_url: str,
        session_id: str,
    ):
        self._client = client
        self._username = username
        self._password = password
        self._server_url = server_url
        self._session_id: Optional[str] = session_id
        self._lock = threading.Lock()

    @classmethod
    def open(cls, client: AzkabanClient, username: str, password: str, server_url: str) -> "Session":
        """
        Authenticate and return a new session.

        Raises:
            AuthenticationError: If Azkaban rejects the login or cannot be reached
        """
        session_id = _authenticate(client, username, password, server_url)
        logger.debug(f"Authenticated with Azkaban at {server_url} as {username}")
        return cls(client, username, password, server_url, session_id)

    @property
    def session_id(self) -> str:
        if self._session_id is None:
            raise AuthenticationError("Azkaban session is not valid")
        return self._session_id

    @property
    def server_url(self) -> str:
        return self._server_url

    def is_valid(self) -> bool:
        return self._session_id is not None

    def invalidate(self) -> None:
        self._session_id = None

    def renew(self, stale_session_id: Optional[str] = None) -> str:
        """
        Log in again and replace the session id.

        If stale_session_id is given and another caller already replaced it,
        the current id is kept.

        Raises:
            AuthenticationError: If the new login fails
        """
        with self._lock:
            if stale_session_id is not None and self._session_id not in (None, stale_session_id):
                return self._session_id
            return self._login()

    def call(self, fn: Callable[..., T], *args: Any) -> T:
        """
        Call fn(session_id, *args), renewing the session once on expiry.

        A session left invalid by a failed renewal is renewed before the
        call instead. Either way at most one login is attempted per call.
        """
        session_id = self._session_id
        if session_id is None:
            return fn(self._revive(), *args)
        try:
            return fn(session_id, *args)
        except SessionExpiredError:
            logger.info("Azkaban session expired, renewing")
            return fn(self.renew(stale_session_id=session_id), *args)

    def _revive(self) -> str:
        with self._lock:
            if self._session_id is not None:
                return self._session_id
            logger.info("Azkaban session is not valid, logging in again")
            return self._login()

    def _login(self) -> str:
        # Caller holds self._lock
        try:
            session_id = _authenticate(self._client, self._username, self._password, self._server_url)
        except AuthenticationError:
            self._session_id = None
            raise
        self._session_id = session_id
        logger.info(f"Renewed Azkaban session for {self._username}")
        return session_id


def _authenticate(client: AzkabanClient, username: str, password: str, server_url: str) -> str:
    try:
        return client.authenticate(username, password, server_url)
    except AzkabanApiError as e:
        raise AuthenticationError(f"Could not authenticate with Azkaban at {server_url}") from e
