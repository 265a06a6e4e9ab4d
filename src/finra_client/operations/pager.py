"""Pagination over FINRA data endpoints.

FINRA datasets are queried with a JSON body carrying a ``limit``/``offset``
cursor and answer with one CSV page per request. The total number of matching
records comes back in the ``Record-Total`` response header. This module turns
that into lazy async iterators:

- ``page_stream`` yields one ``Page`` per request, fetching the next page only
  when the consumer asks for it.
- ``flatten`` turns a page stream into a stream of individual records.
"""

import json
import logging
from collections.abc import AsyncGenerator, AsyncIterable
from dataclasses import dataclass
from typing import Any, Protocol, Self

import httpx

from ..exceptions import QuerySerializationError, TransportError
from .decoding import PageDecoder

logger = logging.getLogger("finra_client.operations.pager")

RECORD_TOTAL_HEADER = "Record-Total"
HTTP_OK = 200

PAGE_REQUEST_HEADERS = {
    "Accept": "text/plain",
    "Content-Type": "application/json",
}


class Query(Protocol):
    """What the pager needs from a dataset-specific query."""

    def limit(self) -> int:
        """Maximum number of records per page."""
        ...

    def offset(self) -> int:
        """Index of the first record of the next page."""
        ...

    def advance(self, by: int) -> Self:
        """Return a copy with the offset moved forward by ``by`` records."""
        ...

    def to_request_body(self) -> dict[str, Any]:
        """Return the JSON-serializable request body."""
        ...


@dataclass(frozen=True, slots=True)
class Page[T]:
    """One decoded page together with the total the server reported for it."""

    records: list[T]
    reported_total: int


def read_record_total(response: httpx.Response) -> int:
    """Return the ``Record-Total`` header value, or 0 when absent or unparseable.

    A missing header therefore ends the stream after the current page.
    """
    raw = response.headers.get(RECORD_TOTAL_HEADER)
    if raw is None:
        return 0
    try:
        return int(raw.strip())
    except ValueError:
        logger.warning("Ignoring unparseable %s header: %r", RECORD_TOTAL_HEADER, raw)
        return 0


def _encode_body(query: Query) -> bytes:
    try:
        return json.dumps(query.to_request_body()).encode("utf-8")
    except (TypeError, ValueError) as exc:
        msg = f"could not compose the query: {exc}"
        raise QuerySerializationError(msg) from exc


async def _fetch_page(client: httpx.AsyncClient, url: str, query: Query) -> httpx.Response:
    body = _encode_body(query)
    try:
        response = await client.post(url, content=body, headers=PAGE_REQUEST_HEADERS)
        response.raise_for_status()
    except httpx.HTTPError as exc:
        msg = f"http error while fetching {url} at offset {query.offset()}: {exc}"
        raise TransportError(msg) from exc
    return response


async def page_stream[T](
    client: httpx.AsyncClient,
    url: str,
    query: Query,
    decoder: PageDecoder[T],
) -> AsyncGenerator[Page[T], None]:
    """Yield every page of results for ``query``.

    The cursor advances by the number of records actually decoded from each
    page. The stream ends once the cursor reaches the reported total, when the
    server answers with a non-200 success status (e.g. 204 No Content), or when
    a page decodes to no records at all.

    The last rule also applies while the reported total is still above the
    cursor: an empty page leaves the cursor where it was, so requesting the
    next page would repeat the same request indefinitely.

    Args:
        client: An authenticated HTTP client.
        url: The dataset endpoint.
        query: The initial query; its offset is the starting cursor.
        decoder: Turns a response body into records.

    Yields:
        Pages in server order.

    Raises:
        QuerySerializationError: If the query cannot be encoded as JSON.
        TransportError: On network errors or an error status.
        DeserializationError: If a page body has no readable CSV header.

    """
    end = False
    while not end:
        response = await _fetch_page(client, url, query)
        if response.status_code != HTTP_OK:
            # this includes 204 - no content
            logger.debug("Stopping pagination of %s on status %d", url, response.status_code)
            return

        total = read_record_total(response)
        records = decoder(response.text)
        query = query.advance(len(records))
        end = total <= query.offset()

        if not records and not end:
            logger.warning(
                "Page at offset %d of %s decoded to no records although %d were reported; stopping.",
                query.offset(),
                url,
                total,
            )
            end = True

        logger.debug("Fetched %d record(s) from %s, offset now %d of %d", len(records), url, query.offset(), total)
        yield Page(records=records, reported_total=total)


async def flatten[T](pages: AsyncIterable[Page[T]]) -> AsyncGenerator[T, None]:
    """Yield the records of each page in order.

    An error raised while producing a page propagates from this iterator and
    ends it; records yielded before the failing page are unaffected.
    """
    async for page in pages:
        for record in page.records:
            yield record


__all__ = [
    "PAGE_REQUEST_HEADERS",
    "RECORD_TOTAL_HEADER",
    "Page",
    "Query",
    "flatten",
    "page_stream",
    "read_record_total",
]
