"""Query and aggregation over an in-memory collection of transactions.

:class:`TransactionAnalyzer` owns an ordered ``list`` of
:class:`~transaction_analysis.models.Transaction` records. The only mutation is
:meth:`TransactionAnalyzer.add_transaction`, which appends; records are never
removed or reordered. Every query re-scans the current list (no caching, no
indices) and returns a new list or a scalar.

Not thread-safe: callers sharing one analyzer across threads must guard it
with their own lock.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from datetime import date

from .logging_setup import get_logger
from .models import DominantType, Transaction, TransactionLike, parse_date

_logger = get_logger("transaction_analysis.analyzer")

DEBIT = "debit"
CREDIT = "credit"


def _as_transaction(record: TransactionLike) -> Transaction:
    if isinstance(record, Transaction):
        return record
    if isinstance(record, Mapping):
        return Transaction.model_validate(record)
    raise TypeError(
        f"expected a Transaction or a mapping of transaction fields, got {type(record).__name__}"
    )


def _as_date(value: date | str, *, name: str) -> date:
    parsed = parse_date(value)
    if parsed is None:
        raise ValueError(f"{name} must be a date or 'YYYY-MM-DD' string, got {value!r}")
    return parsed


def _sum_amounts(records: Iterable[Transaction]) -> float:
    return sum((tx.transaction_amount for tx in records), 0.0)


def _most_active_month(records: Iterable[Transaction]) -> str:
    """Return the month bucket with the highest record count.

    Buckets are counted in an insertion-ordered dict during one scan of
    ``records``; only a strictly greater count replaces the running best, so a
    tie goes to the month seen first. Records with an invalid date are skipped.
    Raises ``ValueError`` when there is no bucket at all.
    """

    counts: dict[str, int] = {}
    for tx in records:
        key = tx.month_key
        if key is None:
            continue
        counts[key] = counts.get(key, 0) + 1

    best: str | None = None
    best_count = 0
    for key, count in counts.items():
        if count > best_count:
            best, best_count = key, count

    if best is None:
        raise ValueError("no dated transactions to group by month")
    return best


class TransactionAnalyzer:
    """Analyzer over an ordered sequence of transactions.

    When ``transactions`` is a ``list`` it is used in place: mapping entries
    are replaced by validated :class:`Transaction` objects and later appends
    land in the same list. Any other iterable is copied into a new list.
    """

    def __init__(self, transactions: Iterable[TransactionLike] = ()) -> None:
        validated = [_as_transaction(record) for record in transactions]
        if isinstance(transactions, list):
            # Only written back once every record validated.
            transactions[:] = validated
            records = transactions
        else:
            records = validated
        self._transactions: list[Transaction] = records
        _logger.debug("Analyzer created with %d transactions", len(records))

    def __len__(self) -> int:
        return len(self._transactions)

    def __iter__(self) -> Iterator[Transaction]:
        return iter(list(self._transactions))

    # ---- Collection access ----------------------------------------------------

    def add_transaction(self, transaction: TransactionLike) -> Transaction:
        """Append a record; mappings are validated first. Returns the stored record."""

        tx = _as_transaction(transaction)
        self._transactions.append(tx)
        _logger.debug("Added transaction %s", tx.transaction_id)
        return tx

    def get_all_transactions(self) -> list[Transaction]:
        """Return a copy of all records in insertion order."""

        return list(self._transactions)

    @staticmethod
    def transaction_to_string(transaction: TransactionLike) -> str:
        """Serialize a record as compact JSON with a stable field order.

        Sentinels serialize as ``null`` (``NaN`` amount, invalid date).
        """

        return _as_transaction(transaction).model_dump_json()

    def get_unique_transaction_types(self) -> list[str]:
        return list(dict.fromkeys(tx.transaction_type for tx in self._transactions))

    def map_transaction_descriptions(self) -> list[str]:
        return [tx.transaction_description for tx in self._transactions]

    # ---- Totals -------------------------------------------------------------------

    def calculate_total_amount(self) -> float:
        """Sum of all amounts; ``0.0`` for no records, ``NaN`` if any amount is ``NaN``."""

        return _sum_amounts(self._transactions)

    def calculate_total_amount_by_date(
        self,
        year: int | None = None,
        month: int | None = None,
        day: int | None = None,
    ) -> float:
        """Sum amounts of records whose date matches every supplied component.

        Omitted components match anything, so with no arguments this equals
        :meth:`calculate_total_amount`. A record with an invalid date only
        contributes when no component is supplied.
        """

        if month is not None and not 1 <= month <= 12:
            raise ValueError(f"month must be within 1..12, got {month}")
        if day is not None and not 1 <= day <= 31:
            raise ValueError(f"day must be within 1..31, got {day}")

        if year is None and month is None and day is None:
            return self.calculate_total_amount()

        def _matches(tx: Transaction) -> bool:
            d = tx.transaction_date
            if d is None:
                return False
            return (
                (year is None or d.year == year)
                and (month is None or d.month == month)
                and (day is None or d.day == day)
            )

        return _sum_amounts(tx for tx in self._transactions if _matches(tx))

    def calculate_average_transaction_amount(self) -> float:
        if not self._transactions:
            return 0.0
        return self.calculate_total_amount() / len(self._transactions)

    def calculate_total_debit_amount(self) -> float:
        return _sum_amounts(self.get_transactions_by_type(DEBIT))

    # ---- Filters ------------------------------------------------------------------

    def get_transactions_by_type(self, transaction_type: str) -> list[Transaction]:
        return [tx for tx in self._transactions if tx.transaction_type == transaction_type]

    def get_transactions_by_merchant(self, merchant_name: str) -> list[Transaction]:
        return [tx for tx in self._transactions if tx.merchant_name == merchant_name]

    def get_transactions_in_date_range(
        self, start_date: date | str, end_date: date | str
    ) -> list[Transaction]:
        """Records dated within ``[start_date, end_date]`` (both inclusive).

        An inverted range selects nothing. Bounds given as text must be
        ``YYYY-MM-DD``; anything else raises ``ValueError``.
        """

        start = _as_date(start_date, name="start_date")
        end = _as_date(end_date, name="end_date")
        return [
            tx
            for tx in self._transactions
            if tx.transaction_date is not None and start <= tx.transaction_date <= end
        ]

    def get_transactions_before_date(self, before: date | str) -> list[Transaction]:
        """Records dated strictly before ``before``."""

        cutoff = _as_date(before, name="date")
        return [
            tx
            for tx in self._transactions
            if tx.transaction_date is not None and tx.transaction_date < cutoff
        ]

    def get_transactions_by_amount_range(
        self, min_amount: float, max_amount: float
    ) -> list[Transaction]:
        # NaN compares false both ways, so invalid amounts never match.
        return [
            tx for tx in self._transactions if min_amount <= tx.transaction_amount <= max_amount
        ]

    def find_transaction_by_id(self, transaction_id: str) -> Transaction | None:
        """First record with this id in sequence order, or ``None``."""

        for tx in self._transactions:
            if tx.transaction_id == transaction_id:
                return tx
        return None

    # ---- Month and type aggregates ------------------------------------------------

    def find_most_transactions_month(self) -> str:
        """``"YYYY-MM"`` of the busiest month; ties go to the month seen first.

        Raises ``ValueError`` when no record carries a valid date.
        """

        return _most_active_month(self._transactions)

    def find_most_debit_transactions_month(self) -> str:
        """Like :meth:`find_most_transactions_month`, over debit records only."""

        return _most_active_month(self.get_transactions_by_type(DEBIT))

    def most_transaction_type(self) -> DominantType:
        """Compare debit and credit counts; other types are ignored."""

        debit_count = 0
        credit_count = 0
        for tx in self._transactions:
            if tx.transaction_type == DEBIT:
                debit_count += 1
            elif tx.transaction_type == CREDIT:
                credit_count += 1
        if debit_count > credit_count:
            return "debit"
        if credit_count > debit_count:
            return "credit"
        return "equal"


__all__ = ["CREDIT", "DEBIT", "TransactionAnalyzer"]
