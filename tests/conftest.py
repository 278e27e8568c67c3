"""Pytest configuration and shared fixtures.

The console entrypoint configures the package logger once per process (a
``StreamHandler`` with ``propagate=False``). Left in place, that would hide
records from ``caplog`` in tests that run after a CLI test, so an autouse
fixture restores the unconfigured state around every test.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import pytest

from transaction_analysis import logging_setup


@pytest.fixture(autouse=True)
def _reset_package_logging():
    yield
    logger = logging.getLogger("transaction_analysis")
    for h in list(logger.handlers):
        logger.removeHandler(h)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    logging_setup._CONFIGURED = False


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TRANSACTIONS_PATH", raising=False)
    monkeypatch.delenv("TRANSACTION_ANALYSIS_LOG_LEVEL", raising=False)


@pytest.fixture
def example_rows() -> list[dict[str, Any]]:
    """Three raw rows: two debits at merchant A, one credit at B."""

    return [
        {
            "transaction_id": "1",
            "transaction_date": "2019-01-05",
            "transaction_amount": "100",
            "transaction_type": "debit",
            "merchant_name": "A",
            "transaction_description": "groceries",
        },
        {
            "transaction_id": "2",
            "transaction_date": "2019-02-10",
            "transaction_amount": "50",
            "transaction_type": "credit",
            "merchant_name": "B",
            "transaction_description": "refund",
        },
        {
            "transaction_id": "3",
            "transaction_date": "2019-02-20",
            "transaction_amount": "25",
            "transaction_type": "debit",
            "merchant_name": "A",
            "transaction_description": "snacks",
        },
    ]


@pytest.fixture
def write_json(tmp_path: Path):
    """Write ``payload`` as JSON under ``tmp_path`` and return the file path."""

    def _write(payload: Any, name: str = "transactions.json") -> Path:
        p = tmp_path / name
        p.write_text(json.dumps(payload), encoding="utf-8")
        return p

    return _write
