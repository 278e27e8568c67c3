"""Data models and type aliases for ``transaction_analysis``.

A :class:`Transaction` is validated once, at construction. Malformed values are
not rejected; they are replaced by sentinels so that a single bad row does not
make a whole file unusable:

- ``transaction_amount`` that does not parse as a float becomes ``NaN``. Sums
  and averages over such a record are ``NaN`` and amount-range filters never
  select it. Text with digit-group underscores (``"1_000"``) counts as
  unparsable; ``"inf"``/``"-inf"`` parse as infinities.
- ``transaction_date`` that is not a ``YYYY-MM-DD`` calendar date becomes
  ``None``. Such a record never matches a date predicate and is left out of
  month buckets.

Both substitutions are logged at WARNING level.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any, Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, field_validator

from .logging_setup import get_logger

_logger = get_logger("transaction_analysis.models")

DATE_FORMAT = "%Y-%m-%d"


def parse_date(value: Any) -> date | None:
    """Parse a ``YYYY-MM-DD`` value into a ``date``; ``None`` when malformed."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    try:
        return datetime.strptime(value.strip(), DATE_FORMAT).date()
    except ValueError:
        return None


def parse_amount(value: Any) -> float:
    """Parse an amount with float semantics; ``NaN`` when it is not numeric."""

    # bool is an int subclass; True is not an amount.
    if isinstance(value, bool):
        return math.nan
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        # float() takes Python literal underscores ("1_000"); amounts do not.
        if "_" in value:
            return math.nan
        try:
            return float(value.strip())
        except ValueError:
            return math.nan
    return math.nan


class Transaction(BaseModel):
    """A single transaction record.

    Field order is fixed and is the order used by the display string. Extra
    keys in the input mapping are ignored.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    transaction_id: str
    transaction_date: date | None
    transaction_amount: float
    transaction_type: str
    merchant_name: str
    transaction_description: str = ""

    @field_validator("transaction_id", mode="before")
    @classmethod
    def _id_as_text(cls, v: Any) -> Any:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("transaction_date", mode="before")
    @classmethod
    def _date_or_sentinel(cls, v: Any) -> date | None:
        parsed = parse_date(v)
        if parsed is None:
            _logger.warning("Unparsable transaction_date %r; treating as invalid date", v)
        return parsed

    @field_validator("transaction_amount", mode="before")
    @classmethod
    def _amount_or_nan(cls, v: Any) -> float:
        parsed = parse_amount(v)
        if math.isnan(parsed) and not (isinstance(v, str) and v.strip().lower() == "nan"):
            _logger.warning("Unparsable transaction_amount %r; using NaN", v)
        return parsed

    @property
    def has_valid_date(self) -> bool:
        return self.transaction_date is not None

    @property
    def has_valid_amount(self) -> bool:
        return not math.isnan(self.transaction_amount)

    @property
    def month_key(self) -> str | None:
        """Calendar month bucket as ``"YYYY-MM"``, or ``None`` for an invalid date."""

        d = self.transaction_date
        if d is None:
            return None
        return f"{d.year:04d}-{d.month:02d}"


# Anything the analyzer accepts as a record: a validated model or a raw mapping
# as decoded from JSON.
TransactionLike: TypeAlias = Transaction | Mapping[str, Any]

DominantType: TypeAlias = Literal["debit", "credit", "equal"]


__all__ = [
    "DATE_FORMAT",
    "DominantType",
    "Transaction",
    "TransactionLike",
    "parse_amount",
    "parse_date",
]
