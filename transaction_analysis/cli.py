"""Console interface for ``transaction_analysis``.

A Typer application over :class:`~transaction_analysis.analyzer.TransactionAnalyzer`.
Every command reads the whole transactions JSON file given by ``--path``
(falling back to ``TRANSACTIONS_PATH``, which may come from a local ``.env``
loaded with ``python-dotenv``), builds an analyzer and prints results with
``rich``. Query logic lives in :mod:`transaction_analysis.analyzer`.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from typer.models import OptionInfo

from .analyzer import TransactionAnalyzer
from .ingest import load_transactions
from .logging_setup import configure_logging
from .models import Transaction

DEFAULT_TRANSACTIONS_PATH = Path("transactions.json")

app = typer.Typer(
    name="transaction-analysis",
    no_args_is_help=True,
    add_completion=False,
    help="Query and summarize transactions from a JSON file.",
)
console = Console()


# Module-level option object (no calls in parameter defaults).
PATH_OPTION: OptionInfo = typer.Option(
    ...,
    "--path",
    envvar="TRANSACTIONS_PATH",
    help="Path to a JSON array of transactions.",
    dir_okay=False,
    file_okay=True,
    exists=False,  # reported by the loader instead
)


# ---- Helpers -----------------------------------------------------------------


def _load_analyzer(path: Path) -> TransactionAnalyzer:
    try:
        return TransactionAnalyzer(load_transactions(path))
    except FileNotFoundError:
        console.print(f"[red]Error:[/red] File not found: {path}")
        raise typer.Exit(1)
    except PermissionError:
        console.print(f"[red]Error:[/red] Permission denied: {path}")
        raise typer.Exit(1)
    except ValueError as e:
        # pydantic's ValidationError is a ValueError too.
        console.print(f"[red]Error:[/red] Failed to load transactions: {escape(str(e))}")
        raise typer.Exit(1)


def _format_amount(value: float) -> str:
    return f"{value:.2f}"


def _transactions_table(transactions: Iterable[Transaction], title: str) -> Table:
    table = Table(title=title)
    table.add_column("ID")
    table.add_column("Date")
    table.add_column("Amount", justify="right")
    table.add_column("Type")
    table.add_column("Merchant")
    table.add_column("Description")
    for tx in transactions:
        d = tx.transaction_date
        table.add_row(
            escape(tx.transaction_id),
            d.isoformat() if d is not None else "invalid",
            _format_amount(tx.transaction_amount),
            escape(tx.transaction_type),
            escape(tx.merchant_name),
            escape(tx.transaction_description),
        )
    return table


def _month_or_na(query: Callable[[], str]) -> str:
    try:
        return query()
    except ValueError:
        return "n/a"


def _print_value(label: str, value: object) -> None:
    console.print(f"[bold]{label}:[/bold] {escape(str(value))}", soft_wrap=True, emoji=False)


# ---- Commands ------------------------------------------------------------------


@app.command("report")
def report_cmd(path: Annotated[Path, PATH_OPTION] = DEFAULT_TRANSACTIONS_PATH) -> None:
    """Run every query once and print the results."""

    analyzer = _load_analyzer(path)

    console.print(_transactions_table(analyzer.get_all_transactions(), "All transactions"))
    _print_value("Unique types", ", ".join(analyzer.get_unique_transaction_types()))
    _print_value("Total amount", _format_amount(analyzer.calculate_total_amount()))
    _print_value(
        "Total amount in 2019", _format_amount(analyzer.calculate_total_amount_by_date(2019))
    )
    console.print(_transactions_table(analyzer.get_transactions_by_type("debit"), "Debits"))
    console.print(
        _transactions_table(
            analyzer.get_transactions_in_date_range("2019-01-01", "2019-12-31"),
            "2019-01-01 to 2019-12-31",
        )
    )
    console.print(
        _transactions_table(analyzer.get_transactions_by_merchant("SuperMart"), "SuperMart")
    )
    _print_value(
        "Average amount", _format_amount(analyzer.calculate_average_transaction_amount())
    )
    console.print(
        _transactions_table(
            analyzer.get_transactions_by_amount_range(50, 150), "Amounts 50 to 150"
        )
    )
    _print_value("Total debit amount", _format_amount(analyzer.calculate_total_debit_amount()))
    _print_value("Most active month", _month_or_na(analyzer.find_most_transactions_month))
    _print_value(
        "Most active debit month", _month_or_na(analyzer.find_most_debit_transactions_month)
    )
    _print_value("Dominant type", analyzer.most_transaction_type())
    console.print(
        _transactions_table(
            analyzer.get_transactions_before_date("2019-06-01"), "Before 2019-06-01"
        )
    )
    found = analyzer.find_transaction_by_id("1")
    _print_value(
        "Transaction 1",
        analyzer.transaction_to_string(found) if found is not None else "not found",
    )
    _print_value("Descriptions", "; ".join(analyzer.map_transaction_descriptions()))


@app.command("summary")
def summary_cmd(path: Annotated[Path, PATH_OPTION] = DEFAULT_TRANSACTIONS_PATH) -> None:
    """Print totals, average, dominant type and the busiest months."""

    analyzer = _load_analyzer(path)
    _print_value("Transactions", len(analyzer))
    _print_value("Total amount", _format_amount(analyzer.calculate_total_amount()))
    _print_value("Total debit amount", _format_amount(analyzer.calculate_total_debit_amount()))
    _print_value(
        "Average amount", _format_amount(analyzer.calculate_average_transaction_amount())
    )
    _print_value("Dominant type", analyzer.most_transaction_type())
    _print_value("Most active month", _month_or_na(analyzer.find_most_transactions_month))
    _print_value(
        "Most active debit month", _month_or_na(analyzer.find_most_debit_transactions_month)
    )


@app.command("list")
def list_cmd(
    path: Annotated[Path, PATH_OPTION] = DEFAULT_TRANSACTIONS_PATH,
    *,
    transaction_type: Annotated[
        str | None, typer.Option("--type", help="Exact transaction type.")
    ] = None,
    merchant: Annotated[str | None, typer.Option(help="Exact merchant name.")] = None,
    start: Annotated[str | None, typer.Option(help="Earliest date (YYYY-MM-DD).")] = None,
    end: Annotated[str | None, typer.Option(help="Latest date (YYYY-MM-DD).")] = None,
    before: Annotated[
        str | None, typer.Option(help="Only dates strictly before (YYYY-MM-DD).")
    ] = None,
    min_amount: Annotated[float | None, typer.Option(help="Minimum amount.")] = None,
    max_amount: Annotated[float | None, typer.Option(help="Maximum amount.")] = None,
) -> None:
    """List transactions matching every given filter."""

    analyzer = _load_analyzer(path)

    selected = analyzer.get_all_transactions()
    try:
        if transaction_type is not None:
            selected = _intersect(selected, analyzer.get_transactions_by_type(transaction_type))
        if merchant is not None:
            selected = _intersect(selected, analyzer.get_transactions_by_merchant(merchant))
        if start is not None or end is not None:
            selected = _intersect(
                selected,
                analyzer.get_transactions_in_date_range(
                    start or "0001-01-01", end or "9999-12-31"
                ),
            )
        if before is not None:
            selected = _intersect(selected, analyzer.get_transactions_before_date(before))
        if min_amount is not None or max_amount is not None:
            selected = _intersect(
                selected,
                analyzer.get_transactions_by_amount_range(
                    min_amount if min_amount is not None else float("-inf"),
                    max_amount if max_amount is not None else float("inf"),
                ),
            )
    except ValueError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    console.print(_transactions_table(selected, f"{len(selected)} transaction(s)"))


def _intersect(current: list[Transaction], matched: list[Transaction]) -> list[Transaction]:
    # Identity-based so duplicate ids stay distinct records.
    keep = {id(tx) for tx in matched}
    return [tx for tx in current if id(tx) in keep]


@app.command("find")
def find_cmd(
    transaction_id: Annotated[str, typer.Argument(help="Transaction id to look up.")],
    path: Annotated[Path, PATH_OPTION] = DEFAULT_TRANSACTIONS_PATH,
) -> None:
    """Print the first transaction with the given id."""

    analyzer = _load_analyzer(path)
    tx = analyzer.find_transaction_by_id(transaction_id)
    if tx is None:
        console.print(f"[yellow]No transaction with id {transaction_id!r}[/yellow]")
        raise typer.Exit(1)
    console.print(analyzer.transaction_to_string(tx), markup=False, emoji=False, soft_wrap=True)


@app.callback(invoke_without_command=True)
def _root(ctx: typer.Context) -> None:
    """Load ``.env`` from the working directory and configure logging."""

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()

    if ctx.invoked_subcommand is None:
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(1)


if __name__ == "__main__":  # pragma: no cover
    app()
