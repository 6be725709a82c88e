from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from services.auth_service import AuthorizationError, AuthService
from services.auto_responder import AutoResponder, PassSummary
from services.gmail_service import GmailService
from services.scheduler_service import PassScheduler
from services.thread_classifier import ThreadClassifier
from utils.config import AppConfig, load_config
from utils.logger import configure_logging


LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class AppContext:
    config: AppConfig
    auth: AuthService
    console: Console
    _gmail: Optional[GmailService] = None

    @property
    def gmail(self) -> GmailService:
        if self._gmail is None:
            self._gmail = GmailService(self.config.account, self.auth)
        return self._gmail

    def responder(self, dry_run: bool) -> AutoResponder:
        return AutoResponder(
            self.gmail,
            self.config.responder,
            classifier=ThreadClassifier(self.config.responder.owner_address),
            dry_run=dry_run,
        )


def build_context(env_file: str) -> AppContext:
    config = load_config(env_file)
    configure_logging(config.log_dir, config.log_level)
    return AppContext(
        config=config,
        auth=AuthService.for_account(config.account),
        console=Console(),
    )


@click.group()
@click.option("--env-file", default=".env", show_default=True, help="Path to the .env file")
@click.pass_context
def cli(ctx: click.Context, env_file: str) -> None:
    """Acknowledge unanswered Gmail threads and tag them as handled."""

    try:
        ctx.obj = build_context(env_file)
    except ValueError as exc:
        raise click.UsageError(str(exc)) from exc


@cli.command("run-once")
@click.option("--max-threads", type=int, default=None, help="Maximum number of recent threads to scan")
@click.option("--dry-run/--apply", default=False, help="Preview replies without modifying Gmail")
@click.pass_obj
def run_once(app: AppContext, max_threads: int | None, dry_run: bool) -> None:
    """Run a single scan-and-respond pass."""

    summary = _perform_pass(app, max_threads, dry_run)
    app.console.print(_build_summary_table(summary))


@cli.command("run")
@click.option("--max-threads", type=int, default=None, help="Maximum number of recent threads to scan per pass")
@click.option("--dry-run/--apply", default=False, help="Preview replies without modifying Gmail")
@click.option("--passes", type=int, default=None, help="Stop after this many passes (default: run forever)")
@click.pass_obj
def run_scheduled(app: AppContext, max_threads: int | None, dry_run: bool, passes: int | None) -> None:
    """Run passes forever, waiting a random delay between them."""

    settings = app.config.responder

    def job() -> None:
        summary = _perform_pass(app, max_threads, dry_run)
        app.console.print(f"[scheduler] {summary.describe()}.")

    scheduler = PassScheduler(job, settings.min_delay_seconds, settings.max_delay_seconds)
    LOGGER.info("Starting scheduled passes for %s (dry_run=%s)", settings.owner_address, dry_run)
    app.console.print(
        f"Responding as {settings.owner_address} every {settings.min_delay_seconds}-"
        f"{settings.max_delay_seconds} seconds. Press Ctrl+C to stop."
    )
    try:
        scheduler.run(max_passes=passes)
    except KeyboardInterrupt:
        app.console.print("Scheduler stopped.")


@cli.command("ensure-label")
@click.argument("label_name", required=False)
@click.pass_obj
def ensure_label(app: AppContext, label_name: str | None) -> None:
    """Look up a Gmail label, creating it if it does not exist."""

    name = label_name or app.config.responder.label_name
    label_id = app.gmail.ensure_label(name)
    app.console.print(f"Label {name} is ready (id: {label_id}).")


@cli.command("authorize")
@click.pass_obj
def authorize(app: AppContext) -> None:
    """Obtain Gmail credentials and store them for unattended runs."""

    try:
        app.auth.authenticate()
    except (AuthorizationError, FileNotFoundError) as exc:
        raise click.ClickException(str(exc)) from exc
    app.console.print(f"[bold green]Credentials stored in {app.config.account.token_file}[/bold green]")


def _perform_pass(app: AppContext, max_threads: int | None, dry_run: bool) -> PassSummary:
    return app.responder(dry_run).run_pass(max_threads)


def _build_summary_table(summary: PassSummary) -> Table:
    title = "Dry-run pass" if summary.dry_run else "Pass results"
    table = Table(title=title)
    table.add_column("Metric")
    table.add_column("Value", overflow="fold")
    table.add_row("Threads scanned", str(summary.scanned))
    table.add_row("Would reply" if summary.dry_run else "Replied", str(len(summary.replied)))
    for verdict, count in sorted(summary.skipped.items()):
        table.add_row(f"Skipped ({verdict.value})", str(count))
    if summary.replied:
        table.add_row("Thread ids", ", ".join(summary.replied))
    return table


def main() -> None:
    cli(standalone_mode=True)


if __name__ == "__main__":
    main()
