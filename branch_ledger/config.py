"""Report configuration.

The engine recognizes week start, opening balance and date range; the
remaining fields only feed presentation (meta rows, filename, number format).
Validation uses Pydantic so that CLI and library callers share one schema.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .logging_setup import get_logger

MAX_RANGE_DAYS: int = 365

# Excel number formats with two fixed decimals per supported locale. Excel
# allows at most two conditional sections per format, so en-IN spends both on
# positive crore/lakh thresholds; negatives of any size use the plain last
# section (thousands grouping), e.g. -1,50,000.00 renders as -150,000.00.
NUMBER_FORMATS: dict[str, str] = {
    "en-US": "#,##0.00",
    "en-IN": '[>=10000000]##\\,##\\,##\\,##0.00;[>=100000]##\\,##\\,##0.00;##,##0.00',
}

_WEEK_START_ALIASES: dict[str, str] = {
    "MON": "MON",
    "MONDAY": "MON",
    "SUN": "SUN",
    "SUNDAY": "SUN",
}

_logger = get_logger("branch_ledger.config")


class DateRange(BaseModel):
    """Inclusive report date range (``from`` / ``to``)."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    start: date = Field(alias="from")
    end: date = Field(alias="to")

    @model_validator(mode="after")
    def _check_bounds(self) -> DateRange:
        if self.end < self.start:
            raise ValueError(f"date range end {self.end} is before start {self.start}")
        limit = self.start + timedelta(days=MAX_RANGE_DAYS)
        if self.end > limit:
            _logger.warning(
                "date_range:clamped start=%s end=%s clamped_end=%s", self.start, self.end, limit
            )
            self.end = limit
        return self

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


class ReportConfig(BaseModel):
    """Configuration of one branch report request."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True, populate_by_name=True)

    week_start: Literal["MON", "SUN"] = "MON"
    opening_balance: Any = None
    date_range: DateRange | None = None
    include_empty_days: bool = False
    branch_name: str = ""
    branch_id: str = ""
    locale: Literal["en-IN", "en-US"] = "en-IN"

    @field_validator("week_start", mode="before")
    @classmethod
    def _normalize_week_start(cls, v: Any) -> Any:
        if isinstance(v, str):
            key = v.strip().upper()
            return _WEEK_START_ALIASES.get(key, key)
        return v

    @property
    def number_format(self) -> str:
        return NUMBER_FORMATS[self.locale]

    @property
    def branch_label(self) -> str:
        return self.branch_name or self.branch_id


__all__ = ["MAX_RANGE_DAYS", "NUMBER_FORMATS", "DateRange", "ReportConfig"]
