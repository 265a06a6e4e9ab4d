"""The main entry point to the FINRA data API."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from types import TracebackType
from typing import Self

import httpx

from ..config import FinraConfig
from ..models.query import ConsolidatedShortInterestQuery
from ..models.short_interest import ConsolidatedShortInterest
from ..operations.decoding import text_page_decoder
from ..operations.pager import flatten, page_stream
from .client_cache import ClientCache
from .credentials import ClientFactory, LoginParameters

logger = logging.getLogger("finra_client.finra")

SHORT_INTEREST_ENDPOINT = "https://api.finra.org/data/group/otcmarket/name/consolidatedShortInterest"
MOCK_SHORT_INTEREST_ENDPOINT = "https://api.finra.org/data/group/otcmarket/name/consolidatedShortInterestMock"


class Finra:
    """Access FINRA datasets with transparent login and pagination.

    One instance owns one client cache; share the instance between tasks
    rather than creating one per request.
    """

    def __init__(
        self,
        client_factory: ClientFactory,
        client_id: str,
        client_secret: str,
        *,
        use_mock_datasets: bool = False,
    ) -> None:
        """Create a new instance.

        Args:
            client_factory: Builds a fresh ``httpx.AsyncClient``. Configure proxies,
                timeouts or transports here; the ``Authorization`` header is set
                on top of whatever the factory returns.
            client_id: OAuth2 client id.
            client_secret: OAuth2 client secret.
            use_mock_datasets: Query the mock variants of the datasets instead of
                the production ones.

        """
        self.use_mock_datasets = use_mock_datasets
        self._client_cache = ClientCache(
            LoginParameters(
                client_factory=client_factory,
                client_id=client_id,
                client_secret=client_secret,
            ),
        )

    @classmethod
    def from_config(cls, config: FinraConfig) -> Finra:
        """Build an instance whose clients honour the TLS and timeout settings of ``config``."""
        timeout = httpx.Timeout(config.timeout_seconds)

        def client_factory() -> httpx.AsyncClient:
            return httpx.AsyncClient(verify=config.verify_ssl, timeout=timeout)

        return cls(
            client_factory,
            config.client_id,
            config.client_secret,
            use_mock_datasets=config.use_mock_datasets,
        )

    async def __aenter__(self) -> Self:
        """Return the instance for async context manager usage."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Close HTTP clients when leaving an async context manager block."""
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP clients held by this instance."""
        await self._client_cache.aclose()

    @property
    def client_cache(self) -> ClientCache:
        """The cache holding the authenticated client."""
        return self._client_cache

    @property
    def short_interest_endpoint(self) -> str:
        """The consolidated short interest endpoint selected by ``use_mock_datasets``."""
        return MOCK_SHORT_INTEREST_ENDPOINT if self.use_mock_datasets else SHORT_INTEREST_ENDPOINT

    async def consolidated_short_interest(
        self,
        query: ConsolidatedShortInterestQuery,
    ) -> AsyncGenerator[ConsolidatedShortInterest, None]:
        """Query the consolidated short interest.

        Use ``query`` to limit the size of the data; the full dataset is huge.
        Logging in happens before this method returns, so authentication errors
        are raised here. Pages are fetched lazily while the returned iterator is
        consumed.

        Example::

            records = await finra.consolidated_short_interest(
                ConsolidatedShortInterestQuery(symbol="BDRBF"),
            )
            async for record in records:
                print(record.settlement_date, record.change_percent)

        """
        client = await self._client_cache.get_client()
        url = self.short_interest_endpoint
        logger.debug("Querying %s with %s", url, query)
        pages = page_stream(client, url, query, text_page_decoder(ConsolidatedShortInterest))
        return flatten(pages)


__all__ = ["MOCK_SHORT_INTEREST_ENDPOINT", "SHORT_INTEREST_ENDPOINT", "Finra"]
