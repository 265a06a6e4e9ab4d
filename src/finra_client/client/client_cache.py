"""Cache of the authenticated FINRA HTTP client.

The cache holds either an ``Unauthenticated`` or an ``Authenticated`` state.
``get_client`` logs in on first use and again once the token has expired; the
whole check-and-refresh runs under one asyncio lock, so concurrent callers
share a single login instead of racing each other.
"""

import asyncio
import dataclasses
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from types import TracebackType
from typing import Self

import httpx

from .credentials import LoginParameters, authenticate

logger = logging.getLogger("finra_client.client_cache")


@dataclass(frozen=True, slots=True)
class Unauthenticated:
    """No login has succeeded yet."""

    login_parameters: LoginParameters


@dataclass(frozen=True, slots=True)
class Authenticated:
    """A bearer-authenticated client and the instant its token expires."""

    login_parameters: LoginParameters
    client: httpx.AsyncClient
    valid_until: datetime

    def is_valid(self, now: datetime) -> bool:
        """Return whether the token is still valid at ``now``."""
        return now < self.valid_until


type ClientState = Unauthenticated | Authenticated


class ClientCache:
    """Hand out a bearer-authenticated client, logging in again when needed."""

    def __init__(self, login_parameters: LoginParameters) -> None:
        """Initialize the cache in the unauthenticated state.

        Args:
            login_parameters: Credentials and client factory used for every login.

        """
        self._state: ClientState = Unauthenticated(login_parameters)
        self._retired_clients: list[httpx.AsyncClient] = []
        self._lock: asyncio.Lock | None = None
        self._lock_loop: asyncio.AbstractEventLoop | None = None

    async def __aenter__(self) -> Self:
        """Return the cache for async context manager usage."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Close clients when leaving an async context manager block."""
        await self.aclose()

    @property
    def state(self) -> ClientState:
        """The current cache state."""
        return self._state

    def _ensure_lock(self) -> asyncio.Lock:
        """Return an asyncio lock bound to the current event loop.

        Creates a new lock if one does not exist or if the event loop has changed.
        """
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    async def get_client(self) -> httpx.AsyncClient:
        """Return a client whose token has not expired, logging in if necessary.

        Raises:
            AuthenticationError: If logging in fails; the next call tries again.
            TransportError: If the token endpoint cannot be reached.
            ClientConstructionError: If the client factory fails.

        """
        lock = self._ensure_lock()
        async with lock:
            state = self._state
            if isinstance(state, Authenticated) and state.is_valid(datetime.now(UTC)):
                return state.client

            if isinstance(state, Authenticated):
                logger.debug("FINRA access token expired at %s; refreshing.", state.valid_until.isoformat())
            authenticated = await self._authenticate(dataclasses.replace(state.login_parameters))
            return authenticated.client

    async def _authenticate(self, login_parameters: LoginParameters) -> Authenticated:
        """Log in and swap in a fresh ``Authenticated`` state.

        Must be called with the lock held. On failure the current state is left
        untouched.
        """
        try:
            client, validity = await authenticate(login_parameters)
        except Exception:
            logger.exception("Failed to authenticate with FINRA")
            raise

        previous = self._state
        authenticated = Authenticated(
            login_parameters=login_parameters,
            client=client,
            valid_until=datetime.now(UTC) + validity,
        )
        self._state = authenticated
        if isinstance(previous, Authenticated):
            # Streams started before the refresh may still be using the old client
            self._retired_clients.append(previous.client)
        logger.info("Authenticated with FINRA; token valid until %s.", authenticated.valid_until.isoformat())
        return authenticated

    async def aclose(self) -> None:
        """Close every client handed out so far and forget the login."""
        clients = list(self._retired_clients)
        self._retired_clients.clear()
        state = self._state
        if isinstance(state, Authenticated):
            clients.append(state.client)
            self._state = Unauthenticated(state.login_parameters)
        for client in clients:
            await client.aclose()


__all__ = ["Authenticated", "ClientCache", "ClientState", "Unauthenticated"]
