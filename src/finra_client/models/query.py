"""Query objects for the consolidated short interest dataset.

A query narrows the (very large) dataset by selected fields, a settlement date
range and a symbol. It also carries the pagination cursor, which only the pager
advances.
"""

from __future__ import annotations

import dataclasses
from datetime import date
from typing import Any, Self

from pydantic import Field, ValidationError, model_validator
from pydantic.dataclasses import dataclass

from ..exceptions import QuerySerializationError
from .short_interest import ConsolidatedShortInterestField

MAX_RESULTS_PER_PAGE = 1000

SETTLEMENT_DATE_FIELD = "settlementDate"
SYMBOL_CODE_FIELD = "symbolCode"
COMPARE_EQUAL = "EQUAL"


@dataclass(frozen=True)
class DateRange:
    """Inclusive settlement date range filter."""

    start: date
    end: date

    @model_validator(mode="after")
    def _validate_order(self) -> Self:
        if self.end < self.start:
            msg = f"date range end {self.end} is before start {self.start}"
            raise ValueError(msg)
        return self

    def to_filter(self) -> dict[str, str]:
        """Return the ``dateRangeFilters`` entry for this range."""
        return {
            "fieldName": SETTLEMENT_DATE_FIELD,
            "startDate": self.start.isoformat(),
            "endDate": self.end.isoformat(),
        }


@dataclass(frozen=True)
class ConsolidatedShortInterestQuery:
    """Limits the consolidated short interest results.

    This does not model the full generic FINRA query language, only the common
    cases. ``None`` means "no restriction": all fields, the whole history, all
    symbols.
    """

    fields: tuple[ConsolidatedShortInterestField, ...] | None = None
    date_range: DateRange | None = None
    symbol: str | None = Field(default=None, min_length=1)
    page_limit: int = Field(default=MAX_RESULTS_PER_PAGE, gt=0, le=MAX_RESULTS_PER_PAGE, kw_only=True)
    page_offset: int = Field(default=0, ge=0, kw_only=True)

    def limit(self) -> int:
        return self.page_limit

    def offset(self) -> int:
        return self.page_offset

    def advance(self, by: int) -> Self:
        """Return a copy of the query with the cursor moved forward by ``by`` records."""
        if by < 0:
            msg = f"cannot move the cursor backwards (by={by})"
            raise ValueError(msg)
        return dataclasses.replace(self, page_offset=self.page_offset + by)

    def to_request_body(self) -> dict[str, Any]:
        """Serialize the query into the JSON body expected by the data endpoint.

        Unset filters are omitted entirely rather than sent as null values.
        """
        body: dict[str, Any] = {}
        if self.fields is not None:
            body["fields"] = [field.value for field in self.fields]
        if self.date_range is not None:
            body["dateRangeFilters"] = [self.date_range.to_filter()]
        if self.symbol is not None:
            body["compareFilters"] = [
                {
                    "fieldName": SYMBOL_CODE_FIELD,
                    "fieldValue": self.symbol,
                    "compareType": COMPARE_EQUAL,
                },
            ]
        body["limit"] = self.page_limit
        body["offset"] = self.page_offset
        return body

    @classmethod
    def from_request_body(cls, body: dict[str, Any]) -> Self:
        """Rebuild a query from a body produced by ``to_request_body``.

        Raises:
            QuerySerializationError: If the body does not describe a query of this shape.

        """
        try:
            date_range = None
            for entry in body.get("dateRangeFilters", []):
                if entry["fieldName"] != SETTLEMENT_DATE_FIELD:
                    msg = f"unsupported date range field {entry['fieldName']!r}"
                    raise QuerySerializationError(msg)
                date_range = DateRange(
                    start=date.fromisoformat(entry["startDate"]),
                    end=date.fromisoformat(entry["endDate"]),
                )

            symbol = None
            for entry in body.get("compareFilters", []):
                if entry["fieldName"] != SYMBOL_CODE_FIELD or entry["compareType"] != COMPARE_EQUAL:
                    msg = f"unsupported compare filter {entry!r}"
                    raise QuerySerializationError(msg)
                symbol = entry["fieldValue"]

            fields = body.get("fields")
            return cls(
                fields=tuple(fields) if fields is not None else None,
                date_range=date_range,
                symbol=symbol,
                page_limit=body.get("limit", MAX_RESULTS_PER_PAGE),
                page_offset=body.get("offset", 0),
            )
        except (AttributeError, KeyError, TypeError, ValueError, ValidationError) as exc:
            msg = f"could not read the query body: {exc}"
            raise QuerySerializationError(msg) from exc


__all__ = ["MAX_RESULTS_PER_PAGE", "ConsolidatedShortInterestQuery", "DateRange"]
