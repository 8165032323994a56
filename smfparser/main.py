"""Command line interface for smfparser.

This module provides a command-line interface for parsing material description
files and printing a report of their shader, variables and proxies.
"""

import os
import sys
import time
from collections.abc import Callable
from importlib import resources
from typing import Any, TypeVar, cast

import arrow
import typer
import watchdog.events
import watchdog.observers
from loguru import logger
from watchdog.events import FileSystemEventHandler

from smfparser.config import ParserConfig
from smfparser.parser import MaterialError, parse_material, parse_material_file
from smfparser.parser.models import MaterialFile
from smfparser.report import print_material

EMBEDDED_MATERIAL = "UnlitGeneric.smf"

# Define type variables for TypedCallable
F = TypeVar("F", bound=Callable[..., Any])


def typed_command(app_command: Any) -> Callable[[F], F]:
    """Wrap typer command with proper typing for mypy."""

    def decorator(func: F) -> F:
        return cast(F, app_command(func))

    return decorator


app = typer.Typer(
    name="smfparser",
    help=(
        "Parse material description files and report their contents. "
        "Commands: show, check, watch."
    ),
    add_completion=False,
)


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log every collected declaration"
    ),
) -> None:
    """Parse material description files."""
    if verbose:
        logger.remove()
        logger.add(sys.stderr, level="DEBUG")


def _read_embedded_material() -> str:
    """Read the material shipped with the package."""
    resource = resources.files("smfparser") / "resources" / EMBEDDED_MATERIAL
    return resource.read_text(encoding="utf-8")


def _load_material(material_file: str | None, config: ParserConfig) -> MaterialFile:
    """Parse a material file, or the embedded material when no file is given.

    Raises:
        typer.Exit: If the file cannot be read or is not a valid material
    """
    try:
        if material_file:
            return parse_material_file(material_file, config)
        logger.info(f"Parsing embedded material {EMBEDDED_MATERIAL}")
        return parse_material(_read_embedded_material(), config)
    except OSError as e:
        logger.error(f"Failed to read material file: {e}")
        typer.echo(f"ERROR: {e}", err=True)
        raise typer.Exit(1) from e
    except MaterialError as e:
        logger.error(f"Invalid material: {e}")
        typer.echo(f"ERROR: {e}", err=True)
        raise typer.Exit(1) from e


@typed_command(app.command("show"))
def show_material(
    material_file: str | None = typer.Argument(
        None, help="Material file to parse (defaults to the embedded example)"
    ),
    color: bool = typer.Option(True, "--color/--no-color", help="Style the report"),
) -> None:
    """Parse a material and print its shader, variables and proxies.

    Example: smfparser show materials/UnlitGeneric.smf
    """
    material = _load_material(material_file, ParserConfig.from_env())
    print_material(material, color=color)


@typed_command(app.command("check"))
def check_materials(
    material_files: list[str] = typer.Argument(..., help="Material files to check"),
) -> None:
    """Check that material files parse, without printing them.

    Exits with status 1 if any file is invalid.

    Example: smfparser check materials/*.smf
    """
    config = ParserConfig.from_env()
    failed = 0
    for material_file in material_files:
        try:
            material = parse_material_file(material_file, config)
        except (OSError, MaterialError) as e:
            failed += 1
            typer.echo(f"{material_file}: ERROR: {e}", err=True)
            continue
        typer.echo(f"{material_file}: OK ({material.shader})")

    logger.info(f"Checked {len(material_files)} files, {failed} failed")
    if failed:
        raise typer.Exit(1)


class MaterialChangeHandler(FileSystemEventHandler):  # type: ignore
    """Event handler for material file changes."""

    def __init__(self, material_file: str, color: bool):
        """Initialize material change handler.

        Args:
            material_file: Absolute path of the material file
            color: Whether to style the report
        """
        self.material_file = material_file
        self.color = color
        self.needs_reload = False

    def on_modified(self, event: watchdog.events.FileSystemEvent) -> None:
        """Handle file modified event.

        Args:
            event: File system event
        """
        if event.src_path == self.material_file:
            logger.info(f"Detected changes in {self.material_file}")
            self.needs_reload = True

    def reload(self) -> None:
        """Parse the material again and print it, keeping the watch on errors."""
        timestamp = arrow.utcnow().format("YYYY-MM-DD HH:mm:ss UTC")
        typer.echo(f"--- {os.path.basename(self.material_file)} @ {timestamp}")
        try:
            material = _load_material(self.material_file, ParserConfig.from_env())
        except typer.Exit:
            return
        print_material(material, color=self.color)


@typed_command(app.command("watch"))
def watch_material(
    material_file: str = typer.Argument(..., help="Material file to watch"),
    color: bool = typer.Option(True, "--color/--no-color", help="Style the report"),
    interval: float = typer.Option(
        0.2, "--interval", help="Seconds between change checks"
    ),
) -> None:
    """Watch a material file and print it again whenever it changes.

    Example: smfparser watch materials/UnlitGeneric.smf
    """
    abs_material_file = os.path.abspath(material_file)
    handler = MaterialChangeHandler(abs_material_file, color)

    # Watch the file's directory, not the file itself
    observer = watchdog.observers.Observer()
    observer.schedule(handler, path=os.path.dirname(abs_material_file), recursive=False)
    observer.start()

    try:
        handler.reload()
        while True:
            if handler.needs_reload:
                handler.needs_reload = False
                handler.reload()
            time.sleep(interval)
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received, stopping...")
    finally:
        observer.stop()
        observer.join()


if __name__ == "__main__":
    app()
