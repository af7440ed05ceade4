"""Operator CLI for inspecting a scoped logging configuration.

Purpose
-------
Let operators check, before deploying, which scopes are configured and which
severities a given scope would let through on each channel.

Contents
--------
* :func:`cli` - click group with the global ``--config``, ``--use-dotenv``
  and ``--traceback`` options.
* ``info`` / ``list`` / ``test`` commands.
* :func:`main` - entry point routed through :func:`lib_cli_exit_tools.run_cli`.

System Role
-----------
Presentation layer. Reads configuration through :mod:`lib_log_scoped.config`,
queries :class:`~lib_log_scoped.application.inspector.ScopeInspector`, and
renders with Rich. Configuration errors surface as
:class:`click.ClickException` so operators see one clear line.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

import click
import lib_cli_exit_tools
from click.core import ParameterSource
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __init__conf__
from . import config as config_module
from .application.inspector import ScopeInspector, ScopeRow, SortKey
from .domain.config import Configuration
from .domain.errors import ScopedLoggerError
from .domain.levels import LogLevel
from .domain.scope_level import ConcreteLevel, format_scope_level
from .domain.validation import validate_configuration

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@dataclass(frozen=True, slots=True)
class CliState:
    """Options of the group shared with subcommands."""

    config_path: Path | None


def summary_info() -> str:
    """Return the metadata banner printed by ``info``.

    Examples
    --------
    >>> "version" in summary_info()
    True
    """

    lines: list[str] = []
    __init__conf__.print_info(writer=lines.append)
    return "".join(lines)


@click.group(invoke_without_command=True, context_settings=CLICK_CONTEXT_SETTINGS)
@click.version_option(
    version=__init__conf__.version,
    prog_name=__init__conf__.shell_command,
    message="%(prog)s version %(version)s",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help=f"Configuration file (.toml or .json). Falls back to ${config_module.CONFIG_ENV_VAR}.",
)
@click.option(
    "--use-dotenv/--no-use-dotenv",
    default=False,
    help=f"Load a nearby .env before reading configuration (default from ${config_module.DOTENV_ENV_VAR}).",
)
@click.option(
    "--traceback/--no-traceback",
    default=False,
    help="Show full Python tracebacks on errors.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, use_dotenv: bool, traceback: bool) -> None:
    """Inspect scope-based log level configuration."""

    explicit = use_dotenv if ctx.get_parameter_source("use_dotenv") is not ParameterSource.DEFAULT else None
    if config_module.should_use_dotenv(explicit=explicit, env_value=os.getenv(config_module.DOTENV_ENV_VAR)):
        config_module.enable_dotenv()

    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback

    if config_path is None:
        configured = os.getenv(config_module.CONFIG_ENV_VAR)
        config_path = Path(configured) if configured else None
    ctx.obj = CliState(config_path=config_path)

    if ctx.invoked_subcommand is None:
        click.echo(summary_info(), nl=False)


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def info_command() -> None:
    """Print package metadata."""

    click.echo(summary_info(), nl=False)


@cli.command("list", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option("--sort", "sort_by", type=click.Choice(["name", "level"]), default="name", show_default=True, help="Sort rows by scope name or level.")
@click.option("--channel", default=None, help="Show the effective scopes of one channel only.")
@click.pass_context
def list_command(ctx: click.Context, sort_by: str, channel: str | None) -> None:
    """List configured scopes and their log levels."""

    config = _load_config(ctx.obj)
    console = _console()
    if not config.enabled:
        console.print("[yellow]Scoped logger is currently disabled.[/]")
        console.print("Enable it by setting SCOPED_LOG_ENABLED=true or enabled = true in the configuration file.")
        ctx.exit(1)

    inspector = ScopeInspector(config)
    if channel:
        _render_channel_scopes(console, inspector, channel, sort_by)
        return
    _render_global_scopes(console, inspector, sort_by)
    _render_channel_overlays(console, inspector, sort_by)


@cli.command("test", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("scope")
@click.option(
    "--level",
    type=click.Choice(LogLevel.names(), case_sensitive=False),
    default="debug",
    show_default=True,
    help="Severity to test.",
)
@click.option("--channel", default=None, help="Test against one channel's overlay.")
@click.option("--all-channels", is_flag=True, default=False, help="Test the global map and every channel overlay.")
@click.pass_context
def scope_test_command(ctx: click.Context, scope: str, level: str, channel: str | None, all_channels: bool) -> None:
    """Show which level applies to SCOPE and whether records would be logged."""

    config = _load_config(ctx.obj)
    console = _console()
    if not config.enabled:
        console.print("[yellow]Scoped logger is currently disabled.[/]")
        ctx.exit(1)

    inspector = ScopeInspector(config)
    requested = level.lower()
    console.print(f"[green]Testing scope:[/] {escape(scope)}")
    try:
        if all_channels:
            console.print(f"[bright_black]Test level:[/] {requested}")
            console.print()
            console.print("[cyan]Global (no channel):[/]")
            _render_scope_test(console, inspector, scope, requested, None, indent="  ")
            for name in config.channel_scopes:
                console.print()
                console.print(f"[cyan]Channel: {escape(name)}[/]")
                _render_scope_test(console, inspector, scope, requested, name, indent="  ")
            console.print()
            _render_comparison(console, inspector, scope, requested)
            return
        if channel:
            console.print(f"[bright_black]Channel:[/] {escape(channel)}")
        console.print()
        _render_scope_test(console, inspector, scope, requested, channel or None, indent="")
    except ScopedLoggerError as exc:
        raise click.ClickException(str(exc)) from exc


def main(argv: Sequence[str] | None = None, *, restore_traceback: bool = True) -> int:
    """Run the CLI through :func:`lib_cli_exit_tools.run_cli` and return the exit code.

    The traceback preferences toggled by ``--traceback`` are restored
    afterwards so embedding callers keep their own settings.
    """

    previous = (lib_cli_exit_tools.config.traceback, lib_cli_exit_tools.config.traceback_force_color)
    try:
        return lib_cli_exit_tools.run_cli(
            cli,
            argv=list(argv) if argv is not None else None,
            prog_name=__init__conf__.shell_command,
        )
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback, lib_cli_exit_tools.config.traceback_force_color = previous


def _console() -> Console:
    return Console(highlight=False, soft_wrap=True)


def _load_config(state: CliState | None) -> Configuration:
    path = state.config_path if state is not None else None
    try:
        return validate_configuration(config_module.load_configuration(path))
    except FileNotFoundError as exc:
        raise click.ClickException(f"Configuration file not found: {exc.filename}") from exc
    except ScopedLoggerError as exc:
        raise click.ClickException(str(exc)) from exc


def _render_global_scopes(console: Console, inspector: ScopeInspector, sort_by: str) -> None:
    config = inspector.config
    if not config.scopes:
        console.print("[green]No global scopes configured.[/]")
        console.print("Add scopes to the configuration file or set SCOPED_LOG_* environment variables.")
        console.print()
        return
    console.print("[green]Global Scopes:[/]")
    console.print(_scope_table(inspector.scope_rows(sort=_sort_key(sort_by)), with_source=False))
    console.print(f"[bright_black]Default Level:[/] {config.default_log_level.severity}")
    console.print(f"[bright_black]Total Global Scopes:[/] {len(config.scopes)}")
    patterns = inspector.pattern_count()
    if patterns:
        console.print(f"[bright_black]Pattern Cache:[/] {patterns} compiled patterns")
    console.print()


def _render_channel_overlays(console: Console, inspector: ScopeInspector, sort_by: str) -> None:
    overlays = inspector.config.channel_scopes
    if not overlays:
        return
    console.print("[green]Channel-Specific Scopes:[/]")
    for name, entries in overlays.items():
        if not entries:
            continue
        console.print(f"[cyan]Channel:[/] {escape(name)}")
        console.print(_scope_table(inspector.channel_rows(name, sort=_sort_key(sort_by)), with_source=False))
    console.print(f"[bright_black]Total Channels with Overrides:[/] {len(overlays)}")


def _render_channel_scopes(console: Console, inspector: ScopeInspector, channel: str, sort_by: str) -> None:
    config = inspector.config
    console.print(f"[green]Effective Scopes for Channel:[/] {escape(channel)}")
    console.print()
    effective = inspector.effective_scopes(channel)
    if not effective:
        console.print("No scopes configured for this channel.")
        console.print(f"[bright_black]Default Level:[/] {config.default_log_level.severity}")
        return
    console.print(_scope_table(inspector.scope_rows(channel, sort=_sort_key(sort_by)), with_source=True))
    console.print(f"[bright_black]Default Level:[/] {config.default_log_level.severity}")
    console.print(f"[bright_black]Total Scopes:[/] {len(effective)}")
    overrides = config.scopes_for_channel(channel)
    if overrides:
        console.print(f"[bright_black]Channel Overrides:[/] {len(overrides)}")


def _render_scope_test(
    console: Console,
    inspector: ScopeInspector,
    scope: str,
    requested: str,
    channel: str | None,
    *,
    indent: str,
) -> None:
    matched = inspector.matched_pattern(scope, channel)
    configured = inspector.level_for(scope, channel)
    override = " [cyan](channel override)[/]" if inspector.is_channel_override(scope, channel) else ""

    if matched is not None and matched != scope:
        console.print(f"{indent}[yellow]Matched Pattern:[/] {escape(matched)}")

    if configured is None:
        effective = inspector.config.default_log_level
        console.print(f"{indent}[yellow]Configured Level:[/] {effective.severity} [bright_black](default)[/]")
    elif isinstance(configured, LogLevel):
        effective = configured
        console.print(f"{indent}[green]Configured Level:[/] {configured.severity}{override}")
    else:
        console.print(f"{indent}[red]Configured Level:[/] SUPPRESSED{override}")
        console.print(f"{indent}[red]All logs from this scope will be suppressed.[/]")
        return

    if inspector.would_log(requested, effective):
        console.print(f"{indent}[green]✓[/] {requested}() [green]WILL BE LOGGED[/]")
    else:
        console.print(f"{indent}[red]✗[/] {requested}() [red]WILL BE DROPPED[/]")

    console.print()
    console.print(f"{indent}[bright_black]Log Level Behavior:[/]")
    for level, logs in inspector.level_matrix(scope, channel):
        marker = "[green]✓[/]" if logs else "[red]✗[/]"
        status = "[green]logs[/]" if logs else "[bright_black]drops[/]"
        console.print(f"{indent}  {marker} {level.severity} → {status}")


def _render_comparison(console: Console, inspector: ScopeInspector, scope: str, requested: str) -> None:
    console.print("[bright_black]Summary:[/]")
    table = Table("Channel", "Level", f"{requested}()")
    for verdict in inspector.compare_channels(scope, requested):
        table.add_row(
            "global" if verdict.channel is None else escape(verdict.channel),
            _level_cell(verdict.level),
            "[green]logs[/]" if verdict.logs else "[red]drops[/]",
        )
    console.print(table)


def _scope_table(rows: Sequence[ScopeRow], *, with_source: bool) -> Table:
    columns = ["Scope", "Level", "Is Pattern?"] + (["Source"] if with_source else [])
    table = Table(*columns)
    for row in rows:
        cells = [escape(row.scope), _level_cell(row.level), "[yellow]Yes[/]" if row.is_pattern else "No"]
        if with_source:
            cells.append("[cyan]channel[/]" if row.source == "channel" else "[bright_black]global[/]")
        table.add_row(*cells)
    return table


def _level_cell(level: ConcreteLevel) -> str:
    label = format_scope_level(level)
    return f"[red]{label}[/]" if not isinstance(level, LogLevel) else label


def _sort_key(sort_by: str) -> SortKey:
    return "level" if sort_by == "level" else "name"


__all__ = ["CliState", "cli", "main", "summary_info"]
