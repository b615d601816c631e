"""
Command Line Interface for fintrack

Thin layer over LedgerService: parse arguments into requests, call one
service method, print the result. All money is rounded to two places here
and nowhere else.

Errors from the ledger, storage or export layers are printed as
"Error: <message>" on stderr with exit code 1.
"""

import functools
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError

from fintrack import __version__
from fintrack.audit import configure_logging
from fintrack.config import get_settings
from fintrack.errors import LedgerError
from fintrack.models.ledger import MISCELLANEOUS_KEY, Record
from fintrack.models.requests import (
    AddRecordRequest,
    AddSubcategoryRequest,
    DeleteRecordsRequest,
    DeleteSubcategoryRequest,
    InitLedgerRequest,
    ListRecordsQuery,
    RenameSubcategoryRequest,
    UpdateRecordRequest,
)
from fintrack.models.results import BreakdownEntry
from fintrack.orchestrator import LedgerService, create_app_components
from fintrack.services.export import ExportError, ExportFileType
from fintrack.services.storage import StorageError
from fintrack.validation import (
    parse_amount,
    parse_category,
    parse_currency,
    parse_record_date,
)


CENT = Decimal("0.01")


# ─── Formatting helpers ──────────────────────────────────────────

def fmt_money(amount: Decimal) -> str:
    """Two decimal places, thousands separated, half-up rounding."""
    return f"{amount.quantize(CENT, rounding=ROUND_HALF_UP):,.2f}"


def table(headers: list[str], rows: list[list[str]], align: str) -> str:
    """Plain text table. align has one 'l' or 'r' per column."""
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))

    def line(cells):
        parts = []
        for i, cell in enumerate(cells):
            if align[i] == "r":
                parts.append(cell.rjust(widths[i]))
            else:
                parts.append(cell.ljust(widths[i]))
        return "  ".join(parts).rstrip()

    out = [line(headers), "  ".join("-" * w for w in widths)]
    out.extend(line(row) for row in rows)
    return "\n".join(out)


def _record_rows(records: list[Record], subcategory_names: dict[int, str]) -> list[list[str]]:
    return [
        [
            str(r.id),
            r.date,
            r.category.display_name,
            subcategory_names.get(r.subcategory, "Unknown"),
            fmt_money(r.amount),
            r.description,
        ]
        for r in records
    ]


def _breakdown_rows(entries: list[BreakdownEntry]) -> list[list[str]]:
    return [[e.name.capitalize(), str(e.count), fmt_money(e.total)] for e in entries]


def _validation_message(error: ValidationError) -> str:
    first = error.errors()[0]
    message = first["msg"]
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return message


def handle_errors(func):
    """Turn ledger/storage/export failures into click errors (exit code 1)."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (LedgerError, StorageError, ExportError) as e:
            raise click.ClickException(str(e)) from e
        except ValidationError as e:
            raise click.ClickException(_validation_message(e)) from e

    return wrapper


def _optional_date(value: Optional[str]):
    return parse_record_date(value) if value is not None else None


# ─── Root group ──────────────────────────────────────────────────

@click.group()
@click.version_option(__version__, prog_name="fintrack")
@click.pass_context
def main(ctx: click.Context) -> None:
    """Track personal income and expenses in a local JSON ledger."""
    configure_logging()
    if ctx.obj is None:
        ctx.obj = create_app_components()


@main.command()
@click.option("-c", "--currency", default=None,
              help="Currency code (NGN, USD, GBP, EUR, CAD, AUD, JPY). Fixed after init.")
@click.option("-o", "--opening", default="0", show_default=True,
              help="Opening balance before any income or expenses.")
@click.pass_obj
@handle_errors
def init(service: LedgerService, currency: Optional[str], opening: str) -> None:
    """Create a new ledger with the default subcategory."""
    code = currency or get_settings().ledger.default_currency
    request = InitLedgerRequest(
        currency=parse_currency(code),
        opening_balance=parse_amount(opening),
    )
    ledger = service.init(request)
    where = f" at {service.storage.path}" if service.storage.path else ""
    click.echo(
        f"Ledger initialized{where} "
        f"({ledger.currency.value}, opening balance {fmt_money(ledger.opening_balance)})"
    )


# ─── Records ─────────────────────────────────────────────────────

@main.command()
@click.argument("category")
@click.argument("amount")
@click.option("-s", "--subcategory", default=MISCELLANEOUS_KEY, show_default=True,
              help="Subcategory name.")
@click.option("-d", "--description", default="", help="Free text description.")
@click.option("-D", "--date", "date_str", default=None, help="Date as DD-MM-YYYY (default: today).")
@click.pass_obj
@handle_errors
def add(
    service: LedgerService,
    category: str,
    amount: str,
    subcategory: str,
    description: str,
    date_str: Optional[str],
) -> None:
    """Record a new income or expense."""
    request = AddRecordRequest(
        category=parse_category(category),
        amount=parse_amount(amount),
        subcategory=subcategory,
        description=description,
        date=_optional_date(date_str),
    )
    record = service.add_record(request)
    click.echo(
        f"Added record {record.id}: {record.category.label} "
        f"{fmt_money(record.amount)} on {record.date}"
    )


@main.command()
@click.argument("record_id", type=int)
@click.option("-c", "--category", default=None, help="New category.")
@click.option("-a", "--amount", default=None, help="New amount.")
@click.option("-s", "--subcategory", default=None, help="New subcategory name.")
@click.option("-d", "--description", default=None, help="New description.")
@click.option("-D", "--date", "date_str", default=None, help="New date as DD-MM-YYYY.")
@click.pass_obj
@handle_errors
def update(
    service: LedgerService,
    record_id: int,
    category: Optional[str],
    amount: Optional[str],
    subcategory: Optional[str],
    description: Optional[str],
    date_str: Optional[str],
) -> None:
    """Change fields of an existing record."""
    request = UpdateRecordRequest(
        record_id=record_id,
        category=parse_category(category) if category is not None else None,
        amount=parse_amount(amount) if amount is not None else None,
        subcategory=subcategory,
        description=description,
        date=_optional_date(date_str),
    )
    if not request.has_changes:
        raise click.UsageError("Nothing to update: give at least one field to change.")
    record = service.update_record(request)
    click.echo(f"Updated record {record.id}")


def _parse_ids(value: str) -> set[int]:
    try:
        ids = {int(part) for part in value.split(",") if part.strip()}
    except ValueError:
        raise click.BadParameter(
            f"'{value}' is not a comma separated list of ids", param_hint="'--ids'"
        ) from None
    if not ids:
        raise click.BadParameter("no ids given", param_hint="'--ids'")
    return ids


@main.command()
@click.option("-i", "--ids", default=None, help="Comma separated record ids.")
@click.option("-c", "--category", default=None, help="Delete every record in a category.")
@click.option("-s", "--subcategory", default=None, help="Delete every record in a subcategory.")
@click.pass_obj
@handle_errors
def delete(
    service: LedgerService,
    ids: Optional[str],
    category: Optional[str],
    subcategory: Optional[str],
) -> None:
    """Delete records by id, by category or by subcategory."""
    given = [v for v in (ids, category, subcategory) if v is not None]
    if len(given) != 1:
        raise click.UsageError("Use exactly one of --ids, --category or --subcategory.")

    request = DeleteRecordsRequest(
        ids=_parse_ids(ids) if ids is not None else None,
        category=parse_category(category) if category is not None else None,
        subcategory=subcategory,
    )
    result = service.delete_records(request)
    click.echo(f"Deleted {result.count} record(s)")


@main.command(name="list")
@click.option("-f", "--first", type=click.IntRange(min=0), default=None,
              help="Show only the N oldest matching records.")
@click.option("-l", "--last", type=click.IntRange(min=0), default=None,
              help="Show only the N newest matching records.")
@click.option("-S", "--start", default=None, help="Only records on or after DD-MM-YYYY.")
@click.option("-E", "--end", default=None, help="Only records on or before DD-MM-YYYY.")
@click.option("-c", "--category", default=None, help="Only records in this category.")
@click.option("-s", "--subcategory", default=None, help="Only records in this subcategory.")
@click.pass_obj
@handle_errors
def list_records(
    service: LedgerService,
    first: Optional[int],
    last: Optional[int],
    start: Optional[str],
    end: Optional[str],
    category: Optional[str],
    subcategory: Optional[str],
) -> None:
    """Show records sorted by date, oldest first."""
    if first is not None and last is not None:
        raise click.UsageError("--first and --last cannot be used together.")

    query = ListRecordsQuery(
        category=parse_category(category) if category is not None else None,
        subcategory=subcategory,
        start=_optional_date(start),
        end=_optional_date(end),
        first=first,
        last=last,
    )
    listing = service.list_records(query)
    if not listing.records:
        click.echo("No records found.")
        return

    names = service.subcategory_names()
    click.echo(table(
        ["ID", "Date", "Category", "Subcategory", "Amount", "Description"],
        _record_rows(listing.records, names),
        align="rlllrl",
    ))


# ─── Reports ─────────────────────────────────────────────────────

@main.command()
@click.pass_obj
@handle_errors
def describe(service: LedgerService) -> None:
    """Show statistics over every record."""
    result = service.describe()
    click.echo(f"Total records: {result.total_records}")
    if result.date_range:
        click.echo(f"Date range: {result.date_range[0]} to {result.date_range[1]}")
    else:
        click.echo("Date range: -")

    if result.by_category:
        click.echo("")
        click.echo(table(["Category", "Records", "Amount"],
                         _breakdown_rows(result.by_category), align="lrr"))
    if result.by_subcategory:
        click.echo("")
        click.echo(table(["Subcategory", "Records", "Amount"],
                         _breakdown_rows(result.by_subcategory), align="lrr"))

    click.echo("")
    click.echo(f"Average amount: {fmt_money(result.average_amount)} {result.currency.value}")


@main.command()
@click.pass_obj
@handle_errors
def total(service: LedgerService) -> None:
    """Show opening balance, income, expenses and the net balance."""
    result = service.total()
    currency = result.currency.value
    click.echo(table(
        ["", "Amount"],
        [
            ["Opening balance", fmt_money(result.opening_balance)],
            ["Income", fmt_money(result.income_total)],
            ["Expenses", fmt_money(result.expenses_total)],
            [f"Total ({currency})", fmt_money(result.total)],
        ],
        align="lr",
    ))


@main.command()
@click.pass_obj
@handle_errors
def dump(service: LedgerService) -> None:
    """Print the raw JSON document."""
    click.echo(service.dump())


@main.command()
@click.option("--yes", is_flag=True, default=False, help="Do not ask for confirmation.")
@click.pass_obj
@handle_errors
def clear(service: LedgerService, yes: bool) -> None:
    """Delete the ledger document and every record in it."""
    if not yes:
        click.confirm(
            "This permanently deletes the ledger and all its records. Continue?",
            abort=True,
        )
    path = service.clear()
    click.echo(f"Ledger removed from {path}" if path else "Ledger removed")


@main.command()
@click.argument("path", type=click.Path(path_type=Path))
@click.option("-t", "--type", "file_type",
              type=click.Choice([t.value for t in ExportFileType], case_sensitive=False),
              default=ExportFileType.JSON.value, show_default=True,
              help="File type to write.")
@click.pass_obj
@handle_errors
def export(service: LedgerService, path: Path, file_type: str) -> None:
    """Export the ledger into the directory PATH."""
    target = service.export(path, ExportFileType(file_type.lower()))
    click.echo(f"Data exported to: {target}")


# ─── Categories ──────────────────────────────────────────────────

@main.group()
def category() -> None:
    """Show the two fixed categories."""


@category.command(name="list")
@click.pass_obj
@handle_errors
def category_list(service: LedgerService) -> None:
    """List categories with their ids."""
    rows = [[str(cid), name.capitalize()] for cid, name in service.list_categories()]
    click.echo(table(["ID", "Name"], rows, align="rl"))


@category.command(name="add")
@click.argument("name")
@click.pass_obj
@handle_errors
def category_add(service: LedgerService, name: str) -> None:
    """Refused: categories are fixed."""
    service.change_category("add", name)


@category.command(name="rename")
@click.argument("old")
@click.argument("new")
@click.pass_obj
@handle_errors
def category_rename(service: LedgerService, old: str, new: str) -> None:
    """Refused: categories are fixed."""
    service.change_category("rename", old)


@category.command(name="delete")
@click.argument("name")
@click.pass_obj
@handle_errors
def category_delete(service: LedgerService, name: str) -> None:
    """Refused: categories are fixed."""
    service.change_category("delete", name)


# ─── Subcategories ───────────────────────────────────────────────

@main.group()
def subcategory() -> None:
    """Manage subcategories. Miscellaneous cannot be changed."""


@subcategory.command(name="add")
@click.argument("name")
@click.pass_obj
@handle_errors
def subcategory_add(service: LedgerService, name: str) -> None:
    """Create a new subcategory."""
    created = service.add_subcategory(AddSubcategoryRequest(name=name))
    click.echo(f"Subcategory '{created.name}' created with id {created.id}")


@subcategory.command(name="delete")
@click.argument("name")
@click.pass_obj
@handle_errors
def subcategory_delete(service: LedgerService, name: str) -> None:
    """Delete a subcategory that no record uses."""
    removed = service.delete_subcategory(DeleteSubcategoryRequest(name=name))
    click.echo(f"Subcategory '{removed.name}' deleted")


@subcategory.command(name="list")
@click.pass_obj
@handle_errors
def subcategory_list(service: LedgerService) -> None:
    """List subcategories with their ids."""
    rows = [[str(sid), name] for sid, name in service.list_subcategories()]
    click.echo(table(["ID", "Name"], rows, align="rl"))


@subcategory.command(name="rename")
@click.argument("old")
@click.argument("new")
@click.pass_obj
@handle_errors
def subcategory_rename(service: LedgerService, old: str, new: str) -> None:
    """Rename a subcategory; its records follow."""
    result = service.rename_subcategory(
        RenameSubcategoryRequest(old_name=old, new_name=new)
    )
    click.echo(f"Subcategory '{result.old_name}' renamed to '{result.subcategory.name}'")


subcategory.add_command(subcategory_rename, name="update")


if __name__ == "__main__":
    main()
