"""Public interface for the ``transaction_analysis`` package.

Re-exports the analyzer, the record model and the JSON loader. There is no
runtime logic here, only symbol re-exports.
"""

from .analyzer import TransactionAnalyzer
from .ingest import load_transactions, parse_transactions
from .models import DominantType, Transaction, TransactionLike

__all__ = [
    # Analyzer
    "TransactionAnalyzer",
    # Ingest
    "load_transactions",
    "parse_transactions",
    # Models / types
    "Transaction",
    "TransactionLike",
    "DominantType",
]
