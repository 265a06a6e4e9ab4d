"""MCP tool: query_short_interest.

Streams consolidated short interest records from FINRA and returns at most
``max_records`` of them. Consumption stops as soon as enough records were
collected, so no further pages are requested.
"""

# pyright: reportUnusedFunction=false

from contextlib import aclosing
from datetime import UTC, date, datetime
from types import SimpleNamespace
from typing import Any

from fastmcp import Context, FastMCP
from pydantic import ValidationError

from ..client.finra import Finra
from ..models.query import ConsolidatedShortInterestQuery, DateRange

DEFAULT_MAX_RECORDS = 100
MAX_RECORDS_LIMIT = 10000


def build_query(
    *,
    symbol: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    fields: list[str] | None = None,
) -> ConsolidatedShortInterestQuery:
    """Build a query from loosely typed tool arguments.

    Raises:
        ValueError: If the arguments do not form a valid query.

    """
    if (start_date is None) != (end_date is None):
        msg = "start_date and end_date must be given together."
        raise ValueError(msg)
    try:
        date_range = None
        if start_date is not None and end_date is not None:
            date_range = DateRange(start=date.fromisoformat(start_date), end=date.fromisoformat(end_date))
        return ConsolidatedShortInterestQuery(
            fields=tuple(fields) if fields else None,
            date_range=date_range,
            symbol=symbol or None,
        )
    except ValidationError as exc:
        messages = "; ".join(err["msg"] for err in exc.errors())
        msg = f"Invalid query: {messages}"
        raise ValueError(msg) from exc


async def query_short_interest_impl(  # noqa: PLR0913
    ctx: Context,
    finra: Finra,
    *,
    symbol: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    fields: list[str] | None = None,
    max_records: int = DEFAULT_MAX_RECORDS,
) -> dict[str, Any]:
    """Collect up to ``max_records`` short interest records as JSON.

    Args:
        ctx: FastMCP context for logging.
        finra: The shared FINRA entry point.
        symbol: Restrict to one symbol code.
        start_date: First settlement date (ISO format), requires ``end_date``.
        end_date: Last settlement date (ISO format), requires ``start_date``.
        fields: Column names to return; all columns when omitted.
        max_records: Upper bound on the number of records returned.

    Returns:
        Tool response dictionary. ``truncated`` is set when collection stopped
        at ``max_records``; whether further records exist is not checked.

    """
    if not 1 <= max_records <= MAX_RECORDS_LIMIT:
        msg = f"max_records must be between 1 and {MAX_RECORDS_LIMIT}."
        raise ValueError(msg)
    query = build_query(symbol=symbol, start_date=start_date, end_date=end_date, fields=fields)
    await ctx.info(f"Querying FINRA consolidated short interest ({finra.short_interest_endpoint}).")

    records: list[dict[str, Any]] = []
    truncated = False
    async with aclosing(await finra.consolidated_short_interest(query)) as stream:
        async for record in stream:
            records.append(record.model_dump(mode="json", by_alias=True, exclude_unset=True))
            # Stop before pulling a record past the limit; that pull can fetch a page
            if len(records) == max_records:
                truncated = True
                break

    if truncated:
        await ctx.warning(f"Result limited to {max_records} records; more may be available.")
    return {
        "retrieved_at": datetime.now(UTC).isoformat(),
        "endpoint": finra.short_interest_endpoint,
        "count": len(records),
        "truncated": truncated,
        "records": records,
    }


def register(app: FastMCP, *, deps: SimpleNamespace) -> None:
    """Register the query_short_interest tool on the provided app instance.

    Args:
        app: The FastMCP application instance to add the tool to.
        deps: Dependencies namespace with ``get_finra`` returning the shared ``Finra``.

    """

    @app.tool(
        name="query_short_interest",
        description=(
            "Return JSON with FINRA consolidated short interest records, optionally filtered by symbol "
            "and settlement date range (YYYY-MM-DD) and restricted to the given fields."
        ),
        annotations={
            "title": "Query consolidated short interest",
            "readOnlyHint": True,
        },
    )
    async def query_short_interest(  # noqa: PLR0913
        ctx: Context,
        symbol: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
        fields: list[str] | None = None,
        max_records: int = DEFAULT_MAX_RECORDS,
    ) -> dict[str, Any]:
        return await query_short_interest_impl(
            ctx,
            deps.get_finra(),
            symbol=symbol,
            start_date=start_date,
            end_date=end_date,
            fields=fields,
            max_records=max_records,
        )


__all__ = ["DEFAULT_MAX_RECORDS", "build_query", "query_short_interest_impl", "register"]
