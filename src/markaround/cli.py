"""Command-line tools for CriticMarkup documents.

Usage:
    markaround render FILE [-o OUT]   # HTML with styled annotations
    markaround accept FILE [-o OUT]   # accept every change
    markaround reject FILE [-o OUT]   # reject every change
    markaround stats FILE             # count annotations by kind
"""

from __future__ import annotations

import argparse
import sys
from collections import Counter
from pathlib import Path

from rich.console import Console
from rich.table import Table

from markaround.critic.render import render_document
from markaround.critic.resolver import accept_all, reject_all
from markaround.critic.scanner import scan
from markaround.critic.syntax import Kind

console = Console()


def _read(path: Path) -> str:
    if not path.is_file():
        console.print(f"[red]Error:[/] {path} not found")
        sys.exit(1)
    return path.read_text(encoding="utf-8")


def _write(text: str, output: Path | None) -> None:
    if output is None:
        sys.stdout.write(text)
        return
    output.write_text(text, encoding="utf-8")
    console.print(f"[green]Wrote[/] {output}")


def count_kinds(source: str) -> Counter[Kind]:
    """Count regions by kind, nested ones included.

    Nested regions are reached by scanning each region's content in turn.
    """
    counts: Counter[Kind] = Counter()
    pending = [source]
    while pending:
        for region in scan(pending.pop()):
            counts[region.kind] += 1
            pending.append(region.content)
    return counts


def _stats(source: str, name: str) -> None:
    counts = count_kinds(source)
    top_level = len(scan(source))
    table = Table(title=f"Annotations in {name}")
    table.add_column("Kind")
    table.add_column("Count", justify="right")
    for kind in Kind:
        table.add_row(kind.value, str(counts[kind]))
    console.print(table)
    console.print(f"Top-level regions: {top_level}")
    console.print(f"Total (including nested): {sum(counts.values())}")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="markaround",
        description="Render and resolve CriticMarkup tracked changes.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("render", "Render the document to HTML"),
        ("accept", "Accept every change"),
        ("reject", "Reject every change"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("file", type=Path, help="Markdown file with CriticMarkup")
        cmd.add_argument(
            "-o", "--output", type=Path, default=None, help="Write here, not stdout"
        )

    stats_p = sub.add_parser("stats", help="Count annotations by kind")
    stats_p.add_argument("file", type=Path, help="Markdown file with CriticMarkup")
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    args = _build_parser().parse_args(argv)
    source = _read(args.file)

    match args.command:
        case "render":
            _write(render_document(source), args.output)
        case "accept":
            _write(accept_all(source), args.output)
        case "reject":
            _write(reject_all(source), args.output)
        case "stats":
            _stats(source, args.file.name)
