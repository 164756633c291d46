# ruff: noqa: I001
"""CLI for the ``statement_entities`` package.

This module exposes callable command handlers (e.g., ``cmd_trim``) and a
Typer-based console interface. Environment variables (the ``SE_*`` tuning
overrides and ``STATEMENT_ENTITIES_LOG_LEVEL``) are loaded from a local
``.env`` using ``python-dotenv`` before delegating to command logic. Business
logic lives in the component modules; the handlers only read CSV files and
render results.

CSV inputs need a header row. Columns are found by header name (``Date``,
``Description``/``Details``/``Payee``…, ``Money In``/``Credit``,
``Money Out``/``Debit``, ``Type``).
"""

from __future__ import annotations

import csv
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from .logging_setup import configure_logging, verbosity_level
from .models import ExtractedTable

console = Console()


# ---- Small module-level helpers used by CLI commands -------------------------


def _error(message: str) -> int:
    print(f"Error: {message}", file=sys.stderr)
    return 1


def _read_csv(path: str) -> tuple[ExtractedTable | None, int]:
    """Read ``path`` into an :class:`ExtractedTable`, reporting failures.

    Description cells are capped at 50 characters on ingest. Returns
    ``(table, 0)`` on success and ``(None, 1)`` after printing an error
    message.
    """

    from .tables import read_table_csv, truncate_descriptions

    try:
        return truncate_descriptions(read_table_csv(path)), 0
    except FileNotFoundError:
        return None, _error(f"File not found: {path}")
    except PermissionError:
        return None, _error(f"Permission denied: {path}")
    except (csv.Error, UnicodeDecodeError) as e:
        return None, _error(f"Failed to parse CSV: {e}")


def _load_workspace(path: str):
    from .tables import transactions_from_table
    from .workspace import EntityWorkspace

    table, code = _read_csv(path)
    if table is None:
        return None, code
    return EntityWorkspace(transactions_from_table(table)), 0


def _load_engine_settings():
    from .settings import load_settings

    try:
        return load_settings(), 0
    except ValidationError as e:
        return None, _error(f"invalid SE_* setting: {e}")


def parse_row_list(text: str) -> list[int]:
    """Parse ``"3,7, 12"`` (or whitespace separated) into row indices."""

    out: list[int] = []
    for part in text.replace(",", " ").split():
        value = int(part)
        if value < 0:
            raise ValueError(f"row index must be >= 0: {value}")
        out.append(value)
    return out


# ---- Command handlers ----------------------------------------------------------


def cmd_canonicalize(
    descriptions: Sequence[str], *, csv_path: str | None = None, show_key: bool = False
) -> int:
    """Print ``raw<TAB>canonical<TAB>type`` per description.

    Descriptions come from the arguments, or from the description column of
    ``csv_path`` (distinct values, first-seen order). With ``show_key`` the
    smart key is appended as a fourth column.
    """

    from .canonical import canonicalize, smart_key
    from .tables import transactions_from_table
    from .type_codes import classify_type

    items = list(descriptions)
    if csv_path is not None:
        table, code = _read_csv(csv_path)
        if table is None:
            return code
        items.extend(t.description for t in transactions_from_table(table))
    if not items:
        return _error("no descriptions given (pass text or --csv)")

    for raw in dict.fromkeys(items):
        fields = [raw, canonicalize(raw), classify_type(raw)]
        if show_key:
            fields.append(smart_key(raw))
        print("\t".join(fields))
    return 0


def cmd_trim(
    csv_path: str,
    *,
    rules: str,
    mode: str = "START_TO_MATCH",
    show_all: bool = False,
) -> int:
    """Preview a trim rule set over the entity names of ``csv_path``."""

    from .trim_rules import TrimMode, compile_trim_rules

    try:
        resolved = TrimMode(mode.upper())
    except ValueError:
        valid = ", ".join(m.value for m in TrimMode)
        return _error(f"unknown trim mode {mode!r} (expected one of {valid})")

    rule_set = compile_trim_rules(rules)
    if not rule_set:
        return _error("no valid trim rules")

    workspace, code = _load_workspace(csv_path)
    if workspace is None:
        return code

    previews = workspace.preview_trim_rules(rule_set, resolved)
    changed = [p for p in previews if p.changed]

    table = Table(title=f"Trim preview ({resolved.value})")
    table.add_column("Entity")
    table.add_column("Result")
    table.add_column("Matched", style="dim")
    for p in previews if show_all else changed:
        table.add_row(p.original, p.result, p.matched)
    console.print(table)
    console.print(f"{len(changed)} of {len(previews)} entities would change")
    return 0


def cmd_duplicates(csv_path: str) -> int:
    """List merge suggestions for the entities of ``csv_path``."""

    settings, code = _load_engine_settings()
    if settings is None:
        return code
    workspace, code = _load_workspace(csv_path)
    if workspace is None:
        return code

    suggestions = workspace.find_duplicates(settings.duplicates)
    if not suggestions:
        console.print("No duplicate entities found")
        return 0

    table = Table(title="Possible duplicates")
    table.add_column("Target")
    table.add_column("Count", justify="right")
    table.add_column("Candidates")
    for s in suggestions:
        table.add_row(
            s.target.name,
            str(s.target.count),
            ", ".join(c.name for c in s.candidates),
        )
    console.print(table)
    return 0


def cmd_clusters(csv_path: str, *, min_overlap: int | None = None) -> int:
    """List cluster proposals for the entities of ``csv_path``."""

    settings, code = _load_engine_settings()
    if settings is None:
        return code
    workspace, code = _load_workspace(csv_path)
    if workspace is None:
        return code

    overlap = settings.cluster_min_overlap if min_overlap is None else min_overlap
    clusters = workspace.build_clusters(overlap)
    if not clusters:
        console.print("No clusters found")
        return 0

    table = Table(title="Proposed clusters")
    table.add_column("Name")
    table.add_column("Members")
    for c in clusters:
        table.add_row(c.name, ", ".join(c.members))
    console.print(table)
    return 0


def cmd_align(
    csv_path: str,
    scan_path: str,
    *,
    rows: str,
    output: str | None = None,
) -> int:
    """Repair the flagged ``rows`` of ``csv_path`` from ``scan_path``.

    Prints one line per flagged row and writes the repaired table to
    ``output`` when given.
    """

    from .tables import align_tables_with_outcomes, write_table_csv

    try:
        fixed = parse_row_list(rows)
    except ValueError as e:
        return _error(f"invalid --rows value: {e}")
    if not fixed:
        return _error("no rows to fix")

    settings, code = _load_engine_settings()
    if settings is None:
        return code
    current, code = _read_csv(csv_path)
    if current is None:
        return code
    scan, code = _read_csv(scan_path)
    if scan is None:
        return code

    repaired, result = align_tables_with_outcomes(
        current, scan, fixed, weights=settings.alignment
    )
    if result is None:
        return _error("both tables need a description column")

    table = Table(title="Alignment")
    table.add_column("Row", justify="right")
    table.add_column("Scan row", justify="right")
    table.add_column("Score", justify="right")
    table.add_column("Updated")
    for o in result.outcomes:
        table.add_row(
            str(o.row_index),
            "-" if o.matched_scan_index is None else str(o.matched_scan_index),
            "-" if o.score is None else f"{o.score:.1f}",
            ", ".join(o.updated_fields) or "-",
        )
    console.print(table)

    if output is not None:
        try:
            write_table_csv(repaired, output)
        except OSError as e:
            return _error(f"failed to write {output}: {e}")
        console.print(f"Wrote {output}")
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Resolve bank-statement descriptions into entities, preview trim rules, "
        "suggest merges and repair rows from a second scan."
    ),
)

CsvPath = Annotated[
    Path,
    typer.Option(
        "--csv",
        help="Path to a statement CSV with a header row",
        dir_okay=False,
        file_okay=True,
        exists=False,  # the handler reports missing files
    ),
]


@app.command("canonicalize")
def canonicalize_cmd(
    descriptions: Annotated[
        list[str] | None, typer.Argument(help="Raw descriptions to normalize")
    ] = None,
    csv_path: Annotated[
        Path | None, typer.Option("--csv", help="Read descriptions from a CSV", dir_okay=False)
    ] = None,
    show_key: Annotated[bool, typer.Option("--key", help="Also print the smart key")] = False,
) -> None:
    """Print the canonical entity name and type code per description."""

    raise typer.Exit(
        cmd_canonicalize(
            descriptions or [],
            csv_path=None if csv_path is None else str(csv_path),
            show_key=show_key,
        )
    )


@app.command("trim")
def trim_cmd(
    csv_path: CsvPath,
    rules: Annotated[
        str, typer.Option(help='Trim rules, e.g. "[date][number][letter]"; separate with | or OR')
    ],
    mode: Annotated[
        str, typer.Option(help="START_TO_MATCH, MATCH_ONLY or MATCH_TO_END")
    ] = "START_TO_MATCH",
    show_all: Annotated[
        bool, typer.Option("--all", help="Also list entities the rules leave unchanged")
    ] = False,
) -> None:
    """Preview trimming entity names with a rule set."""

    raise typer.Exit(cmd_trim(str(csv_path), rules=rules, mode=mode, show_all=show_all))


@app.command("duplicates")
def duplicates_cmd(csv_path: CsvPath) -> None:
    """Suggest merges between near-duplicate entities."""

    raise typer.Exit(cmd_duplicates(str(csv_path)))


@app.command("clusters")
def clusters_cmd(
    csv_path: CsvPath,
    min_overlap: Annotated[
        int | None,
        typer.Option(min=1, help="Minimum shared key length (default SE_CLUSTER_MIN_OVERLAP or 3)"),
    ] = None,
) -> None:
    """Propose clusters among uncategorized entities."""

    raise typer.Exit(cmd_clusters(str(csv_path), min_overlap=min_overlap))


@app.command("align")
def align_cmd(
    csv_path: CsvPath,
    scan_path: Annotated[
        Path, typer.Option("--scan", help="CSV of the second scan", dir_okay=False)
    ],
    rows: Annotated[str, typer.Option(help="Flagged 0-based data row indices, e.g. 3,7,12")],
    output: Annotated[
        Path | None, typer.Option(help="Write the repaired table here", dir_okay=False)
    ] = None,
) -> None:
    """Repair flagged rows from a second scan of the same statement pages."""

    raise typer.Exit(
        cmd_align(
            str(csv_path),
            str(scan_path),
            rows=rows,
            output=None if output is None else str(output),
        )
    )


@app.callback()
def _root(
    verbose: Annotated[
        int, typer.Option("--verbose", "-v", count=True, help="-v for INFO, -vv for DEBUG")
    ] = 0,
    log_level: Annotated[
        str | None,
        typer.Option(help="Explicit log level; overrides -v and STATEMENT_ENTITIES_LOG_LEVEL"),
    ] = None,
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures package logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    # Central logging setup so child loggers inherit configuration
    configure_logging(log_level or verbosity_level(verbose))


if __name__ == "__main__":  # pragma: no cover
    # Running as a module: `python -m statement_entities.cli`
    app()
