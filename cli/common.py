"""Shared helpers for CLI commands"""

import json
import logging
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.logging import RichHandler

from creative.validation import InputValidationError

console = Console()


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )


def load_json(path: str) -> Any:
    """Read a JSON file, turning read/parse problems into click errors"""
    try:
        with open(Path(path), encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"{path} is not valid JSON: {e}")


def write_json(path: str, data: Any) -> None:
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2))


def report_validation_error(error: InputValidationError) -> None:
    console.print(f"[red]✗ Invalid {error.document} document[/red]")
    for item in error.errors:
        console.print(f"  [yellow]{item['path']}[/yellow]: {item['message']}")
