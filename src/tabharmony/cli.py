"""Command line interface for Tab Harmony."""

from __future__ import annotations

import asyncio
import difflib
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, NoReturn, Sequence

import click
import yaml
from click.core import ParameterSource
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table

from tabharmony.config import (
    ConfigError,
    ConfigManager,
    TabHarmonyConfig,
    resolve_with_precedence,
)
from tabharmony.host import HostSnapshot, InMemoryHost
from tabharmony.organization import KeyExtractor, OrganizationResult, WindowOrganizer

console = Console()
err_console = Console(stderr=True)


def _configure_logging(config: TabHarmonyConfig) -> None:
    """Route library logging through Rich at the configured level."""
    level = logging.getLevelName(config.logging.level.upper())
    logging.basicConfig(
        level=level if isinstance(level, int) else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@dataclass(frozen=True)
class Output:
    """Console writer honouring ``--quiet`` and ``--summary``."""

    quiet: bool = False
    summary_only: bool = False

    def detail(self, message: Any) -> None:
        if not (self.quiet or self.summary_only):
            console.print(message)

    def summary(self, message: Any) -> None:
        if not self.quiet:
            console.print(message)

    def error(self, message: Any) -> None:
        console.print(message)


def _fail(
    message: str, *, code: str, json_output: bool, cause: Exception | None = None
) -> NoReturn:
    """Abort the command, as a JSON error payload when ``--json`` is active."""
    if json_output:
        console.print_json(data={"error": {"code": code, "message": message}})
        raise SystemExit(1)
    raise click.ClickException(message) from cause


def _output_for(
    ctx: click.Context,
    config: TabHarmonyConfig,
    *,
    quiet: bool,
    summary_mode: bool,
    json_output: bool,
) -> Output:
    """Combine explicit flags with the configured CLI defaults."""
    quiet_given = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
    summary_given = ctx.get_parameter_source("summary_mode") == ParameterSource.COMMANDLINE
    if json_output:
        if quiet_given and quiet:
            raise click.ClickException("--json cannot be combined with --quiet.")
        if summary_given and summary_mode:
            raise click.ClickException("--json cannot be combined with --summary.")
        return Output()

    output = Output(
        quiet=quiet if quiet_given else config.cli.quiet_default,
        summary_only=summary_mode if summary_given else config.cli.summary_default,
    )
    if output.quiet and output.summary_only:
        raise click.ClickException(
            "Quiet and summary modes cannot both be enabled. Adjust CLI defaults or flags."
        )
    return output


def _config_lines(manager: ConfigManager) -> list[str]:
    return [
        line for line in manager.read_text().splitlines() if not line.startswith("# Last updated:")
    ]


def _load_snapshot(path: Path) -> HostSnapshot:
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse snapshot {path}: {exc}") from exc
    try:
        return HostSnapshot.model_validate(raw)
    except ValidationError as exc:
        raise click.ClickException(f"Invalid snapshot {path}: {exc}") from exc


def _write_snapshot(path: Path, snapshot: HostSnapshot) -> None:
    data = snapshot.model_dump(mode="json")
    if path.suffix.lower() == ".json":
        text = json.dumps(data, indent=2)
    else:
        text = yaml.safe_dump(data, sort_keys=False)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


async def _organize_windows(
    host: InMemoryHost,
    config: TabHarmonyConfig,
    window_ids: Sequence[int],
    dry_run: bool,
) -> list[OrganizationResult]:
    organizer = WindowOrganizer(host, config)
    return list(
        await asyncio.gather(
            *(organizer.organize(window_id, dry_run=dry_run) for window_id in window_ids)
        )
    )


def _result_payload(result: OrganizationResult) -> dict[str, Any]:
    return {
        "window_id": result.window_id,
        "dry_run": result.dry_run,
        "groups": [
            {
                "name": group.name,
                "materialized": group.materialized,
                "tab_ids": group.item_ids,
            }
            for group in result.groups
        ],
        "moves": result.move_plan.model_dump(mode="json"),
        "group_plan": result.group_plan.model_dump(mode="json"),
        "events": [event.model_dump(mode="json") for event in result.events],
        "counts": _result_counts(result),
    }


def _result_counts(result: OrganizationResult) -> dict[str, int]:
    return {
        "tabs": result.item_count,
        "pinned": result.pinned_count,
        "groups": sum(1 for group in result.groups if group.materialized),
        "moves": len(result.move_plan.moves),
        "group_operations": result.group_plan.operation_count,
        "failures": len(result.failures),
    }


def _plan_lines(result: OrganizationResult) -> list[str]:
    lines = [
        f"  move tab {move.tab_id}: {move.current_index} -> {move.target_index}"
        for move in result.move_plan.moves
    ]
    plan = result.group_plan
    lines.extend(
        f"  create group '{op.name}' ({len(op.tab_ids)} tabs, {op.color or 'default'})"
        for op in plan.creates
    )
    lines.extend(
        f"  add {len(op.tab_ids)} tab(s) to group {op.group_id} '{op.name}'"
        for op in plan.retargets
    )
    lines.extend(f"  recolor group {op.group_id} '{op.name}' -> {op.color}" for op in plan.recolors)
    lines.extend(
        f"  ungroup {len(op.tab_ids)} tab(s) of '{op.name or '(unknown)'}'" for op in plan.ungroups
    )
    return lines


def _render_result(result: OrganizationResult, output: Output) -> None:
    table = Table(title=f"Window {result.window_id}")
    table.add_column("Group")
    table.add_column("Tabs", justify="right")
    table.add_column("Physical")
    for group in result.groups:
        table.add_row(
            group.name or "(unknown)",
            str(len(group.items)),
            "grouped" if group.materialized else "ungrouped",
        )
    output.detail(table)
    for line in _plan_lines(result):
        output.detail(line)
    for failure in result.failures:
        output.error(f"[red]  {failure.operation} failed: {', '.join(failure.notes)}[/red]")

    metrics: dict[str, Any] = {"dry_run": True} if result.dry_run else {}
    metrics.update(_result_counts(result))
    parts = ", ".join(f"{name}={value}" for name, value in metrics.items())
    output.summary(f"[green]Organize summary for window {result.window_id}: {parts}.[/green]")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="tabharmony")
def cli() -> None:
    """Tab Harmony sorts browser tabs by domain and groups related tabs together."""


@cli.command()
@click.argument("snapshot", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--window", "window_ids", type=int, multiple=True, help="Only organize these window ids.")
@click.option("--threshold", type=int, help="Override grouping.threshold for this run.")
@click.option("--dry-run", is_flag=True, help="Compute plans without changing the snapshot.")
@click.option(
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the organized snapshot to this file (YAML, or JSON by extension).",
)
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing plans and results.")
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def organize(
    ctx: click.Context,
    snapshot: Path,
    window_ids: tuple[int, ...],
    threshold: int | None,
    dry_run: bool,
    output: Path | None,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Sort and group the tabs described by SNAPSHOT.

    SNAPSHOT is a YAML or JSON file listing windows with their tabs and groups.
    """
    try:
        overrides = {"grouping.threshold": threshold} if threshold is not None else None
        config = ConfigManager().load(cli_overrides=overrides)
        _configure_logging(config)
        out = _output_for(
            ctx, config, quiet=quiet, summary_mode=summary_mode, json_output=json_output
        )

        host = InMemoryHost.from_snapshot(_load_snapshot(snapshot))
        known = [window.id for window in host.snapshot().windows]
        targets = list(window_ids) if window_ids else known
        missing = sorted(set(targets) - set(known))
        if missing:
            raise click.ClickException(f"Unknown window id(s): {', '.join(map(str, missing))}")

        results = asyncio.run(_organize_windows(host, config, targets, dry_run))
    except ConfigError as exc:
        _fail(str(exc), code="config_error", json_output=json_output, cause=exc)
    except click.ClickException as exc:
        _fail(exc.format_message(), code="cli_error", json_output=json_output, cause=exc)

    written = output if output is not None and not dry_run else None
    if written is not None:
        _write_snapshot(written, host.snapshot())

    if json_output:
        console.print_json(
            data={
                "context": {
                    "snapshot": str(snapshot),
                    "dry_run": dry_run,
                    "threshold": config.grouping.threshold,
                    "output": str(written) if written is not None else None,
                },
                "windows": [_result_payload(result) for result in results],
            }
        )
        return

    for result in results:
        _render_result(result, out)
    if written is not None:
        out.detail(f"[green]Wrote organized snapshot to {written}.[/green]")


@cli.command()
@click.argument("urls", nargs=-1, required=True)
@click.option("--json", "json_output", is_flag=True, help="Emit JSON instead of a table.")
def key(urls: tuple[str, ...], json_output: bool) -> None:
    """Show the hierarchical sort key derived from each URL."""
    try:
        config = ConfigManager().load()
    except ConfigError as exc:
        _fail(str(exc), code="config_error", json_output=json_output, cause=exc)

    extractor = KeyExtractor(config.grouping.alt_domain_rules)
    rows = []
    for url in urls:
        extracted = extractor.extract(url)
        rows.append(
            {
                "url": url,
                "labels": list(extracted.labels) if extracted else None,
                "path": extracted.path if extracted else None,
            }
        )

    if json_output:
        console.print_json(data={"keys": rows})
        return

    table = Table()
    table.add_column("URL")
    table.add_column("Labels")
    table.add_column("Path")
    for row in rows:
        if row["labels"] is None:
            table.add_row(row["url"], "[yellow](unknown)[/yellow]", "")
        else:
            table.add_row(row["url"], " ".join(row["labels"]), row["path"])
    console.print(table)


@cli.group()
def config() -> None:
    """Inspect and change the Tab Harmony configuration file."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules."""
    try:
        effective = ConfigManager().load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(effective.model_dump(mode="json"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY, parsed as YAML.")
def config_set(key: str, value: str) -> None:
    """Validate and store VALUE under the dotted KEY, then print the diff."""
    dotted = key.strip().strip(".")
    if not dotted:
        raise click.ClickException("KEY must be a dotted path such as 'grouping.threshold'.")
    try:
        parsed = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    manager = ConfigManager()
    manager.ensure_exists()
    before = _config_lines(manager)
    try:
        updated = resolve_with_precedence(
            defaults=TabHarmonyConfig(),
            file_overrides=manager.load_file_overrides(),
            cli_overrides={dotted: parsed},
        )
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(updated)
    diff = "\n".join(
        difflib.unified_diff(
            before,
            _config_lines(manager),
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
    )
    if not diff:
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return
    console.print(Syntax(diff, "diff", word_wrap=False))
    console.print(f"[green]Updated {dotted}.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
