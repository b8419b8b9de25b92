"""Shared helpers for CLI commands."""

import logging
import sys
from pathlib import Path
from typing import Any, NoReturn, Optional

import click
from rich.console import Console

from daybook.analysis.reports import ReportGenerator
from daybook.core.auth import SessionManager
from daybook.core.config import ConfigManager
from daybook.core.errors import DaybookError
from daybook.core.storage import CSVBackend
from daybook.core.tracker import EntryTracker

console = Console()
error_console = Console(stderr=True)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def fail(message: Any) -> NoReturn:
    """Print an error and exit with status 1."""
    error_console.print(f"[red]Error:[/red] {message}")
    sys.exit(1)


def setup_logging(config: ConfigManager, verbose: bool = False) -> None:
    """Configure the daybook logger from configuration.

    Logs go to stderr, and additionally to advanced.log_file when set.
    """
    level_name = "DEBUG" if verbose else config.get("advanced.log_level", "WARNING")
    level = getattr(logging, level_name)

    package_logger = logging.getLogger("daybook")
    package_logger.setLevel(level)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    package_logger.addHandler(console_handler)

    log_file = config.get("advanced.log_file")
    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)


def get_config(ctx: click.Context) -> ConfigManager:
    """Get the ConfigManager for this invocation."""
    if "config" not in ctx.obj:
        config_path: Optional[str] = ctx.obj.get("config_path")
        try:
            ctx.obj["config"] = ConfigManager(Path(config_path) if config_path else None)
        except ValueError as e:
            fail(e)
    config: ConfigManager = ctx.obj["config"]
    return config


def get_backend(ctx: click.Context) -> CSVBackend:
    """Get the row store, honoring --data-dir over general.data_dir."""
    data_dir = ctx.obj.get("data_dir")
    path = Path(data_dir) if data_dir else get_config(ctx).data_dir()
    return CSVBackend(path)


def get_session_manager(ctx: click.Context, backend: CSVBackend) -> SessionManager:
    config = get_config(ctx)
    return SessionManager(
        backend.state_dir,
        secret_key=config.ensure_secret_key(),
        expiry_hours=config.get("auth.session_expiry_hours", 720),
    )


def get_tracker(ctx: click.Context) -> EntryTracker:
    """Get a loaded EntryTracker for the signed-in user.

    Exits with an error if nobody is signed in or the backend fails.
    """
    config = get_config(ctx)
    backend = get_backend(ctx)
    manager = get_session_manager(ctx, backend)

    try:
        session = manager.current()
        if config.get("advanced.backup_on_start", False):
            backend.backup()
        tracker = EntryTracker(backend, session, week_start=config.get("general.week_start"))
        tracker.refresh()
    except DaybookError as e:
        fail(e)
    return tracker


def get_reporter(ctx: click.Context) -> ReportGenerator:
    config = get_config(ctx)
    return ReportGenerator(
        console,
        currency_symbol=config.get("general.currency_symbol", "$"),
        hours_precision=config.get("display.hours_precision", 2),
        show_ids=config.get("display.show_ids", True),
    )
