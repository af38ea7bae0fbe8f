"""CLI commands for running a point-of-sale cart session.

A session lives in memory only, so ``cart run`` replays a script of cart
commands (one per line) against a single session and prints the cart
as it goes.
"""

from __future__ import annotations

import shlex
from pathlib import Path
from typing import TextIO

import click

from poscart.application.cart_session import CartSession
from poscart.application.dto import CartResult, ResultStatus
from poscart.domain.exceptions import DomainException
from poscart.domain.model.session_state import MergeChoice
from poscart.domain.model.value_objects import format_quantity
from poscart.infrastructure.bootstrap import cart_session

USAGE = """\
Commands (line references are ids like line_1 or 1-based positions):
  add <product> [package]      qty <line> <quantity>
  inc <line>                   dec <line>
  package <line> <name>        warehouse <line> <warehouse>
  remove <line>                merge | separate | cancel
  finalize                     show [search]
"""


def _parse_quantity(raw: str) -> str:
    """Turn a typed quantity into a clean number string.

    Accepts a decimal comma and a dangling separator left while typing
    (``"1,5"`` -> ``"1.5"``, ``"2."`` -> ``"2"``).
    """
    text = raw.strip().replace(",", ".")
    if text.endswith("."):
        text = text[:-1]
    return text or "0"


def _resolve_line(session: CartSession, ref: str) -> str:
    if ref.isdigit():
        lines = session.get_lines()
        position = int(ref)
        if 1 <= position <= len(lines):
            return lines[position - 1].id
    return ref


def _display_cart(session: CartSession, search: str | None = None) -> None:
    lines = session.view_lines(search)
    summary = session.get_summary()
    if not lines:
        if summary.line_count:
            click.echo(f"  No lines match '{search}'.")
        else:
            click.echo("  The cart is empty.")
    else:
        click.echo(
            f"  {'Line':<8} {'Product':<28} {'Pkg':<6} {'Qty':>6} "
            f"{'Warehouse':<24} {'Total':>14}"
        )
        click.echo(f"  {'-'*91}")
        for line in lines:
            click.echo(
                f"  {line.id:<8} {line.product_name:<28} {line.package_name:<6} "
                f"{format_quantity(line.quantity):>6} {(line.warehouse_name or '-'):<24} "
                f"{line.line_total:>14}"
            )
            for issue in line.issues:
                click.echo(f"  {'':<8} ! {issue}")
        click.echo(f"  {'-'*91}")
    click.echo(f"  {'Total':<72} {summary.total:>17}")
    if summary.total_exceeded:
        click.echo(f"  Warning: the total exceeds the limit of {summary.max_total}.")


def _report(result: CartResult) -> None:
    if result.status == ResultStatus.REJECTED and result.error is not None:
        click.echo(f"Rejected [{result.error.kind.value}]: {result.error.message}")
    elif result.status == ResultStatus.DECISION_REQUIRED and result.decision is not None:
        decision = result.decision
        click.echo(
            f"{decision.product_name} is already in the cart from "
            f"{decision.existing_warehouse_name}. Answer 'merge' "
            f"(total {format_quantity(decision.merged_quantity)}) or 'separate' "
            f"(new line from {decision.alternative_warehouse_name}), or 'cancel'."
        )
    elif result.receipt is not None:
        click.echo(f"Sale finalized. Total: {result.receipt.total}")
    else:
        click.echo("OK" + (f" ({result.line_id})" if result.line_id else ""))


def _execute(session: CartSession, command: str, args: list[str]) -> CartResult | None:
    """Run one script command; ``None`` means nothing was mutated."""
    if command == "add" and 1 <= len(args) <= 2:
        return session.add_line(args[0], args[1] if len(args) == 2 else None)
    if command == "qty" and len(args) == 2:
        return session.update_quantity(_resolve_line(session, args[0]), _parse_quantity(args[1]))
    if command == "inc" and len(args) == 1:
        return session.increment_quantity(_resolve_line(session, args[0]))
    if command == "dec" and len(args) == 1:
        return session.decrement_quantity(_resolve_line(session, args[0]))
    if command == "package" and len(args) == 2:
        return session.update_package(_resolve_line(session, args[0]), args[1])
    if command == "warehouse" and len(args) == 2:
        return session.update_warehouse(_resolve_line(session, args[0]), args[1])
    if command == "remove" and len(args) == 1:
        return session.remove_line(_resolve_line(session, args[0]))
    if command in {choice.value for choice in MergeChoice} and not args:
        return session.resolve_merge_conflict(command)
    if command == "finalize" and not args:
        return session.finalize()
    if command == "show":
        _display_cart(session, " ".join(args) or None)
        return None
    raise click.UsageError(f"Cannot understand '{' '.join([command, *args])}'.\n{USAGE}")


@click.command("run")
@click.option(
    "--script",
    type=click.File("r"),
    default="-",
    help="File with one cart command per line (defaults to stdin).",
)
@click.option(
    "--catalog",
    "catalog_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Catalog JSON file (defaults to POSCART_CATALOG_PATH).",
)
@click.option("--quiet", is_flag=True, default=False, help="Only print the final cart.")
def cart_run(script: TextIO, catalog_path: Path | None, quiet: bool) -> None:
    """Replay cart commands against one in-memory session."""
    try:
        session = cart_session(path=catalog_path)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    for number, raw in enumerate(script, start=1):
        text = raw.strip()
        if not text or text.startswith("#"):
            continue
        try:
            command, *args = shlex.split(text)
        except ValueError as exc:
            raise click.ClickException(f"Line {number}: {exc}")

        if not quiet:
            click.echo(f"> {text}")
        result = _execute(session, command.lower(), args)
        if result is not None and not quiet:
            _report(result)
            _display_cart(session)
            click.echo()

    if quiet:
        _display_cart(session)
