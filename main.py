from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

import click
import schedule
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from models.rule import Predicate, Rule, RuleValidationError, Selector, SourceKind, normalize_pattern
from services.change_dispatcher import ChangeDispatcher
from services.note_store import NoteStore, NoteStoreError
from services.notifier import Notifier
from services.property_updater import BatchResult, PropertyUpdater
from services.reentrancy_guard import QuiescenceGuard
from utils.config import AppConfig, load_config
from utils.logger import configure_logging
from utils.match_reducer import PropertyValue
from utils.rules_engine import RulesEngine
from utils.settings import TriggerMode, save_settings


LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class AppContext:
    config: AppConfig
    store: NoteStore
    engine: RulesEngine
    updater: PropertyUpdater
    dispatcher: ChangeDispatcher
    console: Console


def build_context(env_file: str) -> AppContext:
    config = load_config(env_file)
    configure_logging(config.log_dir, config.log_level)
    console = Console()

    store = NoteStore(config.vault_dir, config.note_suffixes)
    engine = RulesEngine(config.settings_file)
    updater = PropertyUpdater(store, engine, Notifier(console))
    guard = QuiescenceGuard(config.quiescence_seconds)
    dispatcher = ChangeDispatcher(updater, guard)

    return AppContext(
        config=config,
        store=store,
        engine=engine,
        updater=updater,
        dispatcher=dispatcher,
        console=console,
    )


@click.group()
@click.option("--env-file", default=".env", show_default=True, help="Path to the .env file")
@click.pass_context
def cli(ctx: click.Context, env_file: str) -> None:
    """Keep note properties in sync with the lines they are derived from."""

    try:
        ctx.obj = build_context(env_file)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc


@cli.command("update")
@click.argument("note")
@click.option("--dry-run/--apply", default=False, help="Preview property changes without writing them")
@click.pass_obj
def update_note(app: AppContext, note: str, dry_run: bool) -> None:
    """Recompute the auto-properties of a single note."""

    try:
        note_path = _note_path(app, note)
        patch = app.updater.update_note(note_path, dry_run=dry_run)
    except NoteStoreError as exc:
        raise click.ClickException(str(exc)) from exc

    if not patch:
        app.console.print(f"[bold green]{escape(note_path)} is up to date.[/bold green]")
        return
    title = f"Would update {escape(note_path)}" if dry_run else f"Updated {escape(note_path)}"
    app.console.print(_build_patch_table(title, patch))


@cli.command("update-all")
@click.option("--dry-run/--apply", default=False, help="Preview property changes without writing them")
@click.pass_obj
def update_all(app: AppContext, dry_run: bool) -> None:
    """Recompute the auto-properties of every note in the vault."""

    try:
        result = app.updater.update_all(dry_run=dry_run)
    except NoteStoreError as exc:
        raise click.ClickException(str(exc)) from exc
    _print_batch_result(app, result, dry_run)


@cli.command("watch")
@click.pass_obj
def watch(app: AppContext) -> None:
    """Update notes as they change on disk."""

    from services.watcher import VaultWatcher

    if app.engine.settings.manual_mode:
        raise click.ClickException("Manual mode is enabled; use 'update' or 'update-all' instead.")
    if not app.config.vault_dir.exists():
        raise click.ClickException(f"Vault directory does not exist: {app.config.vault_dir}")

    watcher = VaultWatcher(app.store, app.dispatcher)
    app.console.print(
        f"Watching {app.config.vault_dir} ({app.engine.settings.trigger_mode.value} mode). Press Ctrl+C to stop."
    )
    try:
        watcher.run_forever()
    except KeyboardInterrupt:
        app.console.print("Watcher stopped.")


@cli.command("schedule")
@click.option("--interval", type=int, default=None, help="Interval in minutes [default: SCHEDULE_INTERVAL]")
@click.pass_obj
def schedule_updates(app: AppContext, interval: int | None) -> None:
    """Run 'update-all' on an interval using the schedule library."""

    minutes = interval or app.config.schedule_interval

    def job() -> None:
        try:
            result = app.updater.update_all()
        except NoteStoreError as exc:
            LOGGER.error("Scheduled update failed: %s", exc)
            return
        app.console.print(
            f"[scheduler] updated {len(result.updated)} note(s), "
            f"{result.unchanged} unchanged, {len(result.failed)} failed."
        )

    schedule.every(minutes).minutes.do(job)

    app.console.print(f"Scheduling 'update-all' every {minutes} minute(s). Press Ctrl+C to stop.")
    try:
        while True:
            schedule.run_pending()
            time.sleep(1)
    except KeyboardInterrupt:
        app.console.print("Scheduler stopped.")


@cli.group("rules")
def rules() -> None:
    """Manage auto-property rules."""


@rules.command("list")
@click.pass_obj
def list_rules(app: AppContext) -> None:
    """Show the configured rules."""

    if not app.engine.rules:
        app.console.print("No auto-properties configured yet.")
        return

    table = Table(title="Auto-properties")
    table.add_column("Property")
    table.add_column("Rule")
    table.add_column("Modifiers")
    table.add_column("Auto-add")
    for rule in app.engine.rules:
        table.add_row(escape(rule.key), escape(rule.summary()), _modifier_text(rule), "yes" if rule.auto_add else "no")
    app.console.print(table)


@rules.command("add")
@click.argument("key")
@click.option("--pattern", default="", help="Text or regular expression to look for")
@click.option("--selector", type=click.Choice([item.value for item in Selector]), default="first", show_default=True)
@click.option(
    "--predicate", type=click.Choice([item.value for item in Predicate]), default="starts_with", show_default=True
)
@click.option("--source", type=click.Choice([item.value for item in SourceKind]), default="body_scan", show_default=True)
@click.option("--trim/--no-trim", default=True, show_default=True, help="Ignore surrounding whitespace")
@click.option("--omit/--keep", default=False, show_default=True, help="Omit the search string from the result")
@click.option("--case-sensitive/--case-insensitive", default=False, show_default=True)
@click.option("--auto-add/--no-auto-add", default=False, show_default=True, help="Create the property when missing")
@click.option("--disabled", is_flag=True, help="Save the rule without enabling it")
@click.pass_obj
def add_rule(
    app: AppContext,
    key: str,
    pattern: str,
    selector: str,
    predicate: str,
    source: str,
    trim: bool,
    omit: bool,
    case_sensitive: bool,
    auto_add: bool,
    disabled: bool,
) -> None:
    """Add or replace the rule for a property."""

    if predicate == Predicate.REGEX.value:
        pattern = normalize_pattern(pattern)
    try:
        rule = Rule(
            key=key.strip(),
            pattern=pattern,
            enabled=not disabled,
            selector=Selector(selector),
            predicate=Predicate(predicate),
            trim_whitespace=trim,
            omit_pattern=omit,
            case_sensitive=case_sensitive,
            auto_add=auto_add,
            source=SourceKind(source),
        )
    except RuleValidationError as exc:
        raise click.BadParameter(str(exc)) from exc

    app.engine.add_rule(rule)
    app.console.print(f"[bold green]Auto-property saved:[/bold green] {escape(rule.key)} - {escape(rule.summary())}")


@rules.command("remove")
@click.argument("key")
@click.pass_obj
def remove_rule(app: AppContext, key: str) -> None:
    """Delete the rule for a property."""

    if not app.engine.remove_rule(key):
        raise click.ClickException(f"No auto-property configured for '{key}'")
    app.console.print(f"Removed auto-property {key}.")


@rules.command("enable")
@click.argument("key")
@click.pass_obj
def enable_rule(app: AppContext, key: str) -> None:
    """Enable the rule for a property."""

    _set_enabled(app, key, True)


@rules.command("disable")
@click.argument("key")
@click.pass_obj
def disable_rule(app: AppContext, key: str) -> None:
    """Disable the rule for a property without deleting it."""

    _set_enabled(app, key, False)


@cli.command("options")
@click.option("--manual-mode/--auto-mode", default=None, help="Disable or enable updates on note changes")
@click.option("--trigger", type=click.Choice([item.value for item in TriggerMode]), default=None)
@click.option("--notices/--no-notices", default=None, help="Show a notice after updating all notes")
@click.option("--ignore", "ignored", multiple=True, help="Path prefix skipped in focus mode (repeatable)")
@click.option("--clear-ignored", is_flag=True, help="Remove every ignored path")
@click.pass_obj
def options(
    app: AppContext,
    manual_mode: Optional[bool],
    trigger: Optional[str],
    notices: Optional[bool],
    ignored: tuple[str, ...],
    clear_ignored: bool,
) -> None:
    """Show or change engine options."""

    settings = app.engine.settings
    changed = False
    if manual_mode is not None:
        settings.manual_mode = manual_mode
        changed = True
    if trigger is not None:
        settings.trigger_mode = TriggerMode(trigger)
        changed = True
    if notices is not None:
        settings.show_notices = notices
        changed = True
    if clear_ignored:
        settings.ignored_paths = []
        changed = True
    for path in ignored:
        if path not in settings.ignored_paths:
            settings.ignored_paths.append(path)
            changed = True
    if changed:
        save_settings(app.config.settings_file, settings)

    table = Table(title="Options")
    table.add_column("Option")
    table.add_column("Value")
    table.add_row("Manual mode", "on" if settings.manual_mode else "off")
    table.add_row("Trigger", settings.trigger_mode.value)
    table.add_row("Notices", "on" if settings.show_notices else "off")
    table.add_row("Ignored paths", escape(", ".join(settings.ignored_paths)) or "-")
    app.console.print(table)


def _note_path(app: AppContext, note: str) -> str:
    candidate = Path(note)
    if candidate.is_absolute():
        return app.store.note_id(candidate)
    return candidate.as_posix()


def _set_enabled(app: AppContext, key: str, enabled: bool) -> None:
    if not app.engine.set_enabled(key, enabled):
        raise click.ClickException(f"No auto-property configured for '{key}'")
    state = "enabled" if enabled else "disabled"
    app.console.print(f"Auto-property {key} {state}.")


def _modifier_text(rule: Rule) -> str:
    if not rule.scans_body:
        return "-"
    modifiers = [
        "trim" if rule.trim_whitespace else "no trim",
        "case sensitive" if rule.case_sensitive else "case insensitive",
    ]
    if rule.omit_pattern:
        modifiers.append("omit search string")
    return ", ".join(modifiers)


def _format_value(value: PropertyValue) -> str:
    if isinstance(value, list):
        return escape("\n".join(value))
    if value == "":
        return "[dim](empty)[/dim]"
    return escape(str(value))


def _build_patch_table(title: str, patch: Dict[str, PropertyValue]) -> Table:
    table = Table(title=title)
    table.add_column("Property")
    table.add_column("Value", overflow="fold")
    for key, value in patch.items():
        table.add_row(escape(key), _format_value(value))
    return table


def _print_batch_result(app: AppContext, result: BatchResult, dry_run: bool) -> None:
    prefix = "Would update" if dry_run else "Updated"
    app.console.print(
        f"[bold blue]{prefix}[/bold blue] {len(result.updated)} of {result.total} note(s); "
        f"{result.unchanged} already up to date."
    )
    if result.updated:
        table = Table(title="Property changes")
        table.add_column("Note")
        table.add_column("Properties")
        for note_path, patch in result.updated.items():
            table.add_row(escape(note_path), escape(", ".join(patch)))
        app.console.print(table)
    if result.failed:
        for note_path, reason in result.failed.items():
            app.console.print(f"[red]Failed[/red] {escape(note_path)}: {escape(reason)}")


def main() -> None:
    cli(standalone_mode=True)


if __name__ == "__main__":
    main()
