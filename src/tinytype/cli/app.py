"""Typer CLI entrypoints."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated, Optional

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape

from tinytype.config.settings import load_settings
from tinytype.core.checker import TypeChecker, Variant
from tinytype.core.equality import type_equal
from tinytype.core.errors import TypeError as CheckError
from tinytype.core.subtype import is_subtype
from tinytype.logging_utils import configure_logging
from tinytype.surface.parser import ParseError, parse, parse_type

app = typer.Typer(
    name="tinytype",
    help="Type checkers for tiny TypeScript-like languages",
    add_completion=False,
)


def _read_source(path: Path | None, expr: str | None) -> tuple[str, str | None]:
    if expr is not None:
        return expr, None
    if path is None:
        raise typer.BadParameter("pass a program file, '-' for stdin, or --expr")
    if str(path) == "-":
        return sys.stdin.read(), "<stdin>"
    return path.read_text(encoding="utf-8"), str(path)


def _fail(console: Console, message: str) -> None:
    console.print(f"[red]error[/red]: {escape(message)}", highlight=False)
    raise typer.Exit(1)


@app.command()
def check(
    path: Annotated[Optional[Path], typer.Argument(help="Program file, '-' for stdin")] = None,
    expr: Annotated[Optional[str], typer.Option("--expr", "-e", help="Program text")] = None,
    variant: Annotated[Optional[Variant], typer.Option("--variant", help="Language variant")] = None,
    leaky_scopes: Annotated[
        bool, typer.Option("--leaky-scopes", help="Bind parameters into the caller's scope (unsound)")
    ] = False,
    unchecked_conditions: Annotated[
        bool, typer.Option("--unchecked-conditions", help="Accept non-boolean conditions (unsound)")
    ] = False,
) -> None:
    """Type check a program and print its type."""
    configure_logging(profile="cli")
    console = Console(soft_wrap=True)
    settings = load_settings(variant=variant)
    features = settings.variant.features(
        check_conditions=settings.check_conditions and not unchecked_conditions,
        leaky_scopes=settings.leaky_scopes or leaky_scopes,
    )

    source, file = _read_source(path, expr)
    logger.debug("cli.check file={} variant={}", file or "<expr>", settings.variant.value)
    try:
        ty = TypeChecker(features).check(parse(source, file))
    except (ParseError, CheckError) as e:
        logger.debug("cli.check.failed error={}", e)
        _fail(console, str(e))
    console.print(str(ty), highlight=False)


@app.command()
def equal(
    left: Annotated[str, typer.Argument(help="Type, optionally preceded by type aliases")],
    right: Annotated[str, typer.Argument(help="Type, optionally preceded by type aliases")],
) -> None:
    """Print whether two types are equal; exit status 1 when they are not."""
    configure_logging(profile="cli")
    console = Console(soft_wrap=True)
    try:
        result = type_equal(parse_type(left), parse_type(right))
    except ParseError as e:
        _fail(console, str(e))
    console.print("true" if result else "false", highlight=False)
    if not result:
        raise typer.Exit(1)


@app.command()
def subtype(
    sub: Annotated[str, typer.Argument(help="Candidate subtype")],
    sup: Annotated[str, typer.Argument(help="Candidate supertype")],
) -> None:
    """Print whether SUB is a subtype of SUP; exit status 1 when it is not."""
    configure_logging(profile="cli")
    console = Console(soft_wrap=True)
    try:
        result = is_subtype(parse_type(sub), parse_type(sup))
    except ParseError as e:
        _fail(console, str(e))
    console.print("true" if result else "false", highlight=False)
    if not result:
        raise typer.Exit(1)


def main() -> None:
    app()
