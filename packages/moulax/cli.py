"""Command line interface for ``moulax``.

Thin Typer wrapper over :mod:`moulax.parsers` and :mod:`moulax.imports`.
Environment variables (``DATABASE_URL``, ``MOULAX_LOG_LEVEL``) are loaded from
a local ``.env`` with ``python-dotenv`` without overriding the environment.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated, NoReturn

import typer
from dotenv import load_dotenv
from typer.models import ArgumentInfo, OptionInfo

from .logging_setup import configure_logging
from .models import ParseResult
from .parsers import UnknownFormatError, detect_parser, parse_statement

app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help="Detect, parse and import bank statement exports (CSV or XLSX).",
)


# Module-level argument/option objects (no calls in parameter defaults).
STATEMENT_ARGUMENT: ArgumentInfo = typer.Argument(
    ...,
    help="Path to a bank statement export (.csv or .xlsx)",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports missing files itself
)
BANK_OPTION: OptionInfo = typer.Option(
    "--bank", help="Bank code (boursorama, caisse_depargne, revolut); skips detection."
)
DATABASE_URL_OPTION: OptionInfo = typer.Option(
    "--database-url", help="Override DATABASE_URL (falls back to env var)."
)
ACCOUNT_OPTION: OptionInfo = typer.Option(..., "--account-id", help="Target account id.")


def _read(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except FileNotFoundError:
        _fail(f"File not found: {path}")
    except PermissionError:
        _fail(f"Permission denied: {path}")
    except OSError as e:
        _fail(f"Unexpected failure reading '{path}': {e}")


def _fail(message: str, code: int = 1) -> NoReturn:
    print(f"Error: {message}", file=sys.stderr)
    raise typer.Exit(code)


def _print_errors(result: ParseResult) -> None:
    for error in result.errors:
        print(f"row {error.row}: {error.message}", file=sys.stderr)


@app.command("detect")
def detect_cmd(statement: Annotated[Path, STATEMENT_ARGUMENT]) -> None:
    """Print the bank code of the parser that recognises the file."""

    content = _read(statement)
    try:
        parser = detect_parser(content)
    except UnknownFormatError as e:
        _fail(str(e))
    print(parser.bank)


@app.command("parse")
def parse_cmd(
    statement: Annotated[Path, STATEMENT_ARGUMENT],
    bank: Annotated[str | None, BANK_OPTION] = None,
) -> None:
    """Print parsed rows as ``date, amount, currency, label, original label, reference``."""

    content = _read(statement)
    try:
        _parser, result = parse_statement(content, bank)
    except LookupError as e:
        _fail(str(e))
    if not result.ok:
        _print_errors(result)
        raise typer.Exit(1)
    for row in result.rows:
        print(
            "\t".join(
                [
                    row.date.isoformat(),
                    str(row.amount),
                    row.currency,
                    row.label,
                    row.original_label,
                    row.bank_reference or "",
                ]
            )
        )


@app.command("import")
def import_cmd(
    statement: Annotated[Path, STATEMENT_ARGUMENT],
    account_id: Annotated[str, ACCOUNT_OPTION],
    bank: Annotated[str | None, BANK_OPTION] = None,
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
) -> None:
    """Import a statement into an account and print the outcome."""

    content = _read(statement)

    # Deferred imports keep `detect`/`parse` usable without a database driver.
    from db.client import session_scope

    from .imports import process_import

    try:
        with session_scope(database_url=database_url) as session:
            record = process_import(
                session,
                account_id=account_id,
                content=content,
                filename=statement.name,
                bank=bank,
            )
            status = record.status
            counts = (record.rows_total, record.rows_imported, record.rows_skipped)
            error_details = list(record.error_details)
    except LookupError as e:
        _fail(str(e))

    if status != "completed":
        for detail in error_details:
            print(f"row {detail['row']}: {detail['message']}", file=sys.stderr)
        raise typer.Exit(1)
    total, imported, skipped = counts
    print(f"{status}: {total} rows, {imported} imported, {skipped} skipped")


@app.command("apply-rules")
def apply_rules_cmd(database_url: Annotated[str | None, DATABASE_URL_OPTION] = None) -> None:
    """Tag stored transactions that have no tag yet."""

    from db.client import session_scope

    from .imports import apply_rules_to_untagged

    with session_scope(database_url=database_url) as session:
        count = apply_rules_to_untagged(session)
    print(f"tagged {count} transactions")


@app.callback()
def _root() -> None:
    """Load ``.env`` from the working directory and configure logging."""

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()


if __name__ == "__main__":  # pragma: no cover
    app()
