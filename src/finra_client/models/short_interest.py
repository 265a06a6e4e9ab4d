"""Pydantic models for the FINRA consolidated short interest dataset.

The dataset is served as CSV with camelCase column headers. Every attribute
has a default so that queries selecting only a subset of fields still decode;
the optional flag columns turn empty cells into ``None``.
"""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ConsolidatedShortInterestField(StrEnum):
    """Columns of the consolidated short interest dataset, usable as a field selector."""

    STOCK_SPLIT_FLAG = "stockSplitFlag"
    PREVIOUS_SHORT_POSITION_QUANTITY = "previousShortPositionQuantity"
    AVERAGE_DAILY_VOLUME_QUANTITY = "averageDailyVolumeQuantity"
    ISSUE_NAME = "issueName"
    CURRENT_SHORT_POSITION_QUANTITY = "currentShortPositionQuantity"
    CHANGE_PREVIOUS_NUMBER = "changePreviousNumber"
    ACCOUNTING_YEAR_MONTH_NUMBER = "accountingYearMonthNumber"
    SETTLEMENT_DATE = "settlementDate"
    MARKET_CLASS_CODE = "marketClassCode"
    SYMBOL_CODE = "symbolCode"
    DAYS_TO_COVER_QUANTITY = "daysToCoverQuantity"
    ISSUER_SERVICES_GROUP_EXCHANGE_CODE = "issuerServicesGroupExchangeCode"
    REVISION_FLAG = "revisionFlag"
    CHANGE_PERCENT = "changePercent"


class ConsolidatedShortInterest(BaseModel):
    """Short interest data reported for a single stock symbol and settlement date."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    stock_split_flag: str | None = Field(default=None, alias="stockSplitFlag")
    previous_short_position_quantity: int = Field(default=0, ge=0, alias="previousShortPositionQuantity")
    average_daily_volume_quantity: int = Field(default=0, ge=0, alias="averageDailyVolumeQuantity")
    issue_name: str = Field(default="", alias="issueName")
    current_short_position_quantity: int = Field(default=0, ge=0, alias="currentShortPositionQuantity")
    change_previous_number: int = Field(default=0, alias="changePreviousNumber")
    accounting_year_month_number: int = Field(default=0, ge=0, alias="accountingYearMonthNumber")
    settlement_date: str = Field(default="", alias="settlementDate")
    market_class_code: str = Field(default="", alias="marketClassCode")
    symbol_code: str = Field(default="", alias="symbolCode")
    days_to_cover_quantity: float = Field(default=0.0, alias="daysToCoverQuantity")
    issuer_services_group_exchange_code: str = Field(default="", alias="issuerServicesGroupExchangeCode")
    revision_flag: str | None = Field(default=None, alias="revisionFlag")
    change_percent: float = Field(default=0.0, alias="changePercent")

    @field_validator("stock_split_flag", "revision_flag", mode="before")
    @classmethod
    def _empty_flag_is_none(cls, value: object) -> object:
        if value == "":
            return None
        return value


__all__ = ["ConsolidatedShortInterest", "ConsolidatedShortInterestField"]
