"""
rabbithole command-line interface.

Every command is short-lived: it reads the config fresh, builds an
AppContext, does one thing and exits. Commands bound to hotkeys (search,
close) stay silent on success; failures are printed with a remediation
hint and also end up in the log file.

Exit codes:
    0 - Success (including a dismissed menu or an untracked window)
    1 - Error
"""

import functools
import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import click
from pydantic import ValidationError

from .. import __version__
from ..config import (
    CONFIG_ENV_VAR,
    SearchEngine,
    default_config_path,
    load_config,
    save_config,
)
from ..context import AppContext, build_app_context
from ..core.models import CloseOutcome
from ..core.x11 import CommandRunner, read_selection
from ..errors import ConfigError, ExternalToolError, MenuCancelled, RabbitholeError
from ..logging_config import default_log_file, setup_logging
from ..services.search import run_search
from ..services.setup import REQUIRED_TOOLS, run_setup
from .formatters import (
    console,
    format_engine_table,
    format_history_table,
    format_selection_table,
    format_window_table,
    print_error_with_remediation,
    print_success,
    print_warning,
)

logger = logging.getLogger(__name__)

SELECTION_BUFFERS = ("primary", "clipboard")


def handle_errors(func):
    """Map rabbithole errors to exit codes."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except MenuCancelled as e:
            logger.info(f"Cancelled: {e}")
            sys.exit(0)
        except RabbitholeError as e:
            logger.info(f"Command failed: {e}")
            print_error_with_remediation(e)
            sys.exit(1)

    return wrapper


def _runner(click_ctx: click.Context) -> CommandRunner:
    return click_ctx.obj.get("runner") or CommandRunner()


@contextmanager
def open_app_context(click_ctx: click.Context) -> Iterator[AppContext]:
    """Build the AppContext for one command and close it afterwards."""
    app = build_app_context(
        config_path=click_ctx.obj["config_path"],
        runner=click_ctx.obj.get("runner"),
    )
    try:
        yield app
    finally:
        app.close()


def _make_engine(name: str, url: str, key: str) -> SearchEngine:
    try:
        return SearchEngine(name=name, url=url, key=key)
    except ValidationError as e:
        problems = "; ".join(err["msg"] for err in e.errors())
        raise ConfigError(f"invalid search engine: {problems}")


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Show info messages on the console")
@click.option("--debug", is_flag=True, help="Show debug messages (also written to the log file)")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar=CONFIG_ENV_VAR,
    help="Config file (default: ~/.config/rabbithole/config.json)",
)
@click.version_option(version=__version__, prog_name="rabbithole")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, debug: bool, config_path: Optional[Path]):
    """
    rabbithole - research windows on a hotkey.

    Search the selected text in a browser window docked on the right edge
    of the screen, and close such windows again with a single key.
    """
    setup_logging(verbose=verbose, debug=debug, log_file=default_log_file())
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path or default_config_path()
    logger.debug(f"rabbithole {__version__}, config {ctx.obj['config_path']}")


# ============================================================================
# Hotkey commands
# ============================================================================


@cli.command()
@click.option("--empty", "-e", is_flag=True, help="Skip selection capture and prompt for a query")
@click.pass_context
@handle_errors
def search(ctx: click.Context, empty: bool):
    """
    Search the current selection in a new research window.

    The selection is read according to behavior.selection_method. When
    nothing usable is selected (or with --empty) a query prompt is shown.
    """
    with open_app_context(ctx) as app:
        outcome = run_search(app, empty=empty)

    if not outcome.opened.tracked:
        logger.info("Research window opened but is not tracked")


@cli.command()
@click.pass_context
@handle_errors
def close(ctx: click.Context):
    """
    Close the focused window if rabbithole opened it.

    Any other window is left alone and the command exits 0.
    """
    with open_app_context(ctx) as app:
        outcome = app.orchestrator.close_if_tracked()

    if outcome is not CloseOutcome.CLOSED:
        logger.debug(f"Nothing closed: {outcome.value}")


# ============================================================================
# Registry commands
# ============================================================================


@cli.command()
@click.pass_context
@handle_errors
def cleanup(ctx: click.Context):
    """Forget tracked windows that no longer exist."""
    with open_app_context(ctx) as app:
        removed = app.reconciler.reconcile()

    print_success(f"Removed {removed} dead window(s) from registry")


@cli.command()
@click.pass_context
@handle_errors
def windows(ctx: click.Context):
    """List tracked research windows."""
    with open_app_context(ctx) as app:
        entries = app.registry.entries()

    if not entries:
        console.print("[dim]No research windows tracked[/dim]")
        return

    console.print(format_window_table(entries))


@cli.command()
@click.option("--limit", "-n", type=click.IntRange(1, 500), default=20, show_default=True,
              help="Number of searches to show")
@click.pass_context
@handle_errors
def history(ctx: click.Context, limit: int):
    """Show the most recent searches."""
    with open_app_context(ctx) as app:
        rows = app.history.recent(limit)

    if not rows:
        console.print("[dim]No searches recorded yet[/dim]")
        return

    console.print(format_history_table(rows))


# ============================================================================
# Engine commands (config only)
# ============================================================================


@cli.command("add-engine")
@click.argument("name")
@click.argument("url")
@click.argument("key")
@click.pass_context
@handle_errors
def add_engine(ctx: click.Context, name: str, url: str, key: str):
    """
    Add a search engine.

    URL must contain %s where the query goes, KEY is the single character
    shown in the menu.

    Example: rabbithole add-engine Kagi 'https://kagi.com/search?q=%s' k
    """
    config_path = ctx.obj["config_path"]
    config = load_config(config_path)
    engine = _make_engine(name, url, key)
    config.add_engine(engine)
    save_config(config, config_path)
    print_success(f"Added search engine: {engine.name} ({engine.key})")


@cli.command("list-engines")
@click.pass_context
@handle_errors
def list_engines(ctx: click.Context):
    """List configured search engines."""
    config = load_config(ctx.obj["config_path"])

    if not config.search_engines:
        console.print("[dim]No search engines configured[/dim]")
        return

    console.print(format_engine_table(config.search_engines))


@cli.command("remove-engine")
@click.argument("key")
@click.pass_context
@handle_errors
def remove_engine(ctx: click.Context, key: str):
    """Remove the search engine bound to KEY."""
    config_path = ctx.obj["config_path"]
    config = load_config(config_path)
    removed = config.remove_engine(key)
    save_config(config, config_path)
    print_success(f"Removed search engine: {removed.name} ({removed.key})")


@cli.command("edit-engine")
@click.argument("key")
@click.argument("name")
@click.argument("url")
@click.argument("new_key")
@click.pass_context
@handle_errors
def edit_engine(ctx: click.Context, key: str, name: str, url: str, new_key: str):
    """Replace the search engine bound to KEY."""
    config_path = ctx.obj["config_path"]
    config = load_config(config_path)
    engine = _make_engine(name, url, new_key)
    old = config.replace_engine(key, engine)
    save_config(config, config_path)
    print_success(f"Updated search engine: {old.name} ({old.key}) → {engine.name} ({engine.key})")


# ============================================================================
# Setup and diagnostics
# ============================================================================


@cli.command("debug-selections")
@click.option("--timeout", type=float, default=None,
              help="Seconds to wait for each selection (default: behavior.selection_timeout_ms)")
@click.pass_context
@handle_errors
def debug_selections(ctx: click.Context, timeout: Optional[float]):
    """Show what PRIMARY and CLIPBOARD currently hold."""
    if timeout is None:
        timeout = load_config(ctx.obj["config_path"]).behavior.selection_timeout
    runner = _runner(ctx)
    selections = {}

    for buffer in SELECTION_BUFFERS:
        try:
            selections[buffer] = read_selection(runner, buffer, timeout)
        except ExternalToolError as e:
            print_warning(f"{buffer.upper()}: {e}")
            selections[buffer] = ""

    console.print(format_selection_table(selections))


@cli.command()
@click.pass_context
@handle_errors
def setup(ctx: click.Context):
    """
    Check dependencies, write a default config and sxhkd hotkeys.

    Hotkeys: ctrl+space searches the selection, ctrl+shift+space prompts
    for a query, Escape closes a research window.
    """
    config_path = ctx.obj["config_path"]
    sxhkd_dir = Path.home() / ".config" / "sxhkd"

    report = run_setup(config_path, sxhkd_dir)

    if report.missing_tools:
        print_error_with_remediation(
            RabbitholeError(
                f"missing dependencies: {', '.join(report.missing_tools)}",
                f"Install them first (required: {', '.join(REQUIRED_TOOLS)})",
            )
        )
        sys.exit(1)

    if report.config_created:
        print_success(f"Created default config: {config_path}")
    else:
        console.print(f"[dim]Config already exists: {config_path}[/dim]", highlight=False)

    print_success(f"Wrote hotkeys: {report.sxhkd_path}")
    console.print("[dim]Reload sxhkd with: pkill -USR1 -x sxhkd[/dim]")
