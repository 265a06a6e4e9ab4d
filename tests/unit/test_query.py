"""Unit tests for the consolidated short interest query in models.query."""

from datetime import date

import pytest
from pydantic import ValidationError

from finra_client.exceptions import QuerySerializationError
from finra_client.models.query import MAX_RESULTS_PER_PAGE, ConsolidatedShortInterestQuery, DateRange
from finra_client.models.short_interest import ConsolidatedShortInterestField


def _full_query() -> ConsolidatedShortInterestQuery:
    return ConsolidatedShortInterestQuery(
        fields=(
            ConsolidatedShortInterestField.SYMBOL_CODE,
            ConsolidatedShortInterestField.SETTLEMENT_DATE,
            ConsolidatedShortInterestField.CHANGE_PERCENT,
        ),
        date_range=DateRange(start=date(2024, 1, 1), end=date(2024, 2, 1)),
        symbol="BDRBF",
    )


class TestRequestBody:
    """Tests for request body serialization."""

    def test_unfiltered_query_omits_filter_keys(self) -> None:
        """Unset filters should be absent from the body, not null."""
        body = ConsolidatedShortInterestQuery().to_request_body()

        assert body == {"limit": MAX_RESULTS_PER_PAGE, "offset": 0}

    def test_symbol_only(self) -> None:
        """Only the compare filter should appear when only a symbol is set."""
        body = ConsolidatedShortInterestQuery(symbol="AAPL").to_request_body()

        assert set(body) == {"compareFilters", "limit", "offset"}
        assert body["compareFilters"] == [{"fieldName": "symbolCode", "fieldValue": "AAPL", "compareType": "EQUAL"}]

    def test_full_query(self) -> None:
        """All filters should serialize in the FINRA request format."""
        body = _full_query().to_request_body()

        assert body == {
            "fields": ["symbolCode", "settlementDate", "changePercent"],
            "dateRangeFilters": [
                {"fieldName": "settlementDate", "startDate": "2024-01-01", "endDate": "2024-02-01"},
            ],
            "compareFilters": [{"fieldName": "symbolCode", "fieldValue": "BDRBF", "compareType": "EQUAL"}],
            "limit": 1000,
            "offset": 0,
        }

    def test_dates_are_zero_padded(self) -> None:
        """Dates should always be written as YYYY-MM-DD."""
        query = ConsolidatedShortInterestQuery(date_range=DateRange(start=date(2023, 3, 4), end=date(2023, 3, 9)))

        assert query.to_request_body()["dateRangeFilters"][0]["startDate"] == "2023-03-04"

    @pytest.mark.parametrize("query", [ConsolidatedShortInterestQuery(), _full_query()])
    def test_round_trip(self, query: ConsolidatedShortInterestQuery) -> None:
        """A body read back should reproduce an equal query and body."""
        body = query.advance(250).to_request_body()

        rebuilt = ConsolidatedShortInterestQuery.from_request_body(body)

        assert rebuilt == query.advance(250)
        assert rebuilt.to_request_body() == body

    @pytest.mark.parametrize(
        "body",
        [
            {"dateRangeFilters": [{"fieldName": "issueName", "startDate": "2024-01-01", "endDate": "2024-01-02"}]},
            {"dateRangeFilters": [{"fieldName": "settlementDate", "startDate": "yesterday", "endDate": "2024-01-02"}]},
            {"compareFilters": [{"fieldName": "symbolCode", "fieldValue": "X", "compareType": "GREATER"}]},
            {"compareFilters": [{"fieldName": "symbolCode"}]},
            {"fields": ["notAField"]},
            {"limit": 0},
            "not a body",
        ],
    )
    def test_from_request_body_rejects_foreign_bodies(self, body: object) -> None:
        """Bodies that do not describe this query type should be rejected."""
        with pytest.raises(QuerySerializationError):
            ConsolidatedShortInterestQuery.from_request_body(body)  # type: ignore[arg-type]


class TestCursor:
    """Tests for the pagination cursor."""

    def test_defaults(self) -> None:
        """A new query should start at offset 0 with the maximum page size."""
        query = ConsolidatedShortInterestQuery()

        assert query.limit() == MAX_RESULTS_PER_PAGE
        assert query.offset() == 0

    def test_advance_returns_new_query(self) -> None:
        """advance should not mutate the original query."""
        query = _full_query()

        moved = query.advance(7).advance(3)

        assert moved.offset() == 10
        assert query.offset() == 0
        assert moved.limit() == query.limit()
        assert moved.symbol == query.symbol
        assert moved.date_range == query.date_range

    def test_advance_rejects_negative(self) -> None:
        """The cursor should never move backwards."""
        with pytest.raises(ValueError, match="backwards"):
            ConsolidatedShortInterestQuery().advance(-1)


class TestValidation:
    """Tests for query validation."""

    def test_fields_accept_column_names(self) -> None:
        """Plain column names should be coerced to field enum members."""
        query = ConsolidatedShortInterestQuery(fields=("symbolCode",))  # type: ignore[arg-type]

        assert query.fields == (ConsolidatedShortInterestField.SYMBOL_CODE,)

    def test_unknown_field_rejected(self) -> None:
        """Unknown column names should fail validation."""
        with pytest.raises(ValidationError):
            ConsolidatedShortInterestQuery(fields=("bogus",))  # type: ignore[arg-type]

    def test_inverted_date_range_rejected(self) -> None:
        """A range ending before it starts should fail validation."""
        with pytest.raises(ValidationError, match="before start"):
            DateRange(start=date(2024, 2, 1), end=date(2024, 1, 1))

    def test_empty_symbol_rejected(self) -> None:
        """An empty symbol would match nothing and should be rejected."""
        with pytest.raises(ValidationError):
            ConsolidatedShortInterestQuery(symbol="")

    def test_page_limit_bounds(self) -> None:
        """Page size should stay within what the API serves."""
        with pytest.raises(ValidationError):
            ConsolidatedShortInterestQuery(page_limit=MAX_RESULTS_PER_PAGE + 1)
