"""Load transaction records from a JSON file.

The file holds a single JSON array of objects, one per transaction, read in one
go. Each object is validated into a :class:`~transaction_analysis.models.Transaction`;
malformed amounts and dates become sentinels (see :mod:`transaction_analysis.models`)
while structural problems raise.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from os import PathLike
from pathlib import Path
from typing import Any

from .logging_setup import get_logger
from .models import Transaction

_logger = get_logger("transaction_analysis.ingest")


def parse_transactions(items: Iterable[Any]) -> list[Transaction]:
    """Validate decoded JSON items into ``Transaction`` records, keeping order.

    Raises ``ValueError`` naming the index of the first item that is not an
    object; missing required fields raise pydantic's ``ValidationError``.
    """

    out: list[Transaction] = []
    for idx, item in enumerate(items):
        if not isinstance(item, Mapping):
            raise ValueError(
                f"transaction at index {idx} must be a JSON object, got {type(item).__name__}"
            )
        out.append(Transaction.model_validate(item))
    return out


def load_transactions(path: str | PathLike[str]) -> list[Transaction]:
    """Read a whole JSON file and return its transactions in file order.

    ``FileNotFoundError``/``PermissionError`` propagate unchanged. Invalid JSON
    and a top level other than an array raise ``ValueError``.
    """

    p = Path(path)
    text = p.read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Failed to parse JSON from {p}: {e}") from e

    if not isinstance(data, list):
        raise ValueError(
            f"{p} must contain a JSON array of transactions, got {type(data).__name__}"
        )

    transactions = parse_transactions(data)
    _logger.info("Loaded %d transactions from %s", len(transactions), p)
    return transactions


__all__ = ["load_transactions", "parse_transactions"]
