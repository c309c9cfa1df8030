from __future__ import annotations

import logging
import os
import sys
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, TypeVar

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn

from .client import CALLER_RETRY_DELAYS, DEFAULT_MAX_PAGES, DEFAULT_PAGE_SIZE, GitHubClient
from .errors import PrRescueError
from .formatters import get_formatter
from .models import TimeUnit
from .service import RescueService
from .snapshots import JsonFileSnapshotStore, describe, sync_activity
from .staleness import DEFAULT_POLICY, POLICY_NAMES

_stderr = Console(stderr=True)
T = TypeVar("T")


load_dotenv()


def _parse_repo(repo: str) -> tuple[str, str]:
    if "/" not in repo or repo.count("/") != 1:
        raise click.BadParameter(
            f"{repo!r} is not a valid OWNER/REPO format.",
            param_hint="REPO",
        )
    owner, repo_name = repo.split("/", 1)
    if not owner or not repo_name:
        raise click.BadParameter(
            f"{repo!r} is not a valid OWNER/REPO format.",
            param_hint="REPO",
        )
    return owner, repo_name


def _read_token() -> str:
    token = os.environ.get("GITHUB_TOKEN")
    if not token:
        _stderr.print("[red]Error:[/red] GITHUB_TOKEN environment variable is not set.")
        sys.exit(1)
    return token


def _run(
    ctx: click.Context,
    repo: str,
    description: str,
    work: Callable[[RescueService], T],
    max_pages: int = DEFAULT_MAX_PAGES,
    policy: str = DEFAULT_POLICY,
) -> T:
    owner, repo_name = _parse_repo(repo)
    token = _read_token()
    retry_delays = CALLER_RETRY_DELAYS if ctx.obj.get("retry") else ()

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=_stderr,
            transient=True,
        ) as progress:
            progress.add_task(f"{description} {repo}…", total=None)
            with GitHubClient(token, retry_delays=retry_delays) as client:
                service = RescueService(
                    client,
                    owner,
                    repo_name,
                    page_size=DEFAULT_PAGE_SIZE,
                    max_pages=max_pages,
                    policy=policy,
                )
                return work(service)
    except PrRescueError as exc:
        _stderr.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)


def _emit(rows: list[Any], output_format: str, report: str, repo: str, output_path: Path | None) -> None:
    formatter = get_formatter(output_format, report, owner_repo=repo)
    output = formatter(rows)

    if output_path is not None:
        output_path.write_text(output, encoding="utf-8")
        _stderr.print(f"[green]Wrote {len(rows)} rows to {output_path}[/green]")
    else:
        click.echo(output)


def _output_options(func: Callable[..., Any]) -> Callable[..., Any]:
    func = click.option(
        "--output",
        "output_path",
        type=click.Path(path_type=Path),
        default=None,
        help="Write output to a file instead of stdout.",
    )(func)
    func = click.option(
        "--format",
        "output_format",
        type=click.Choice(["json", "markdown"]),
        default="json",
        show_default=True,
        help="Output format.",
    )(func)
    return func


def _max_pages_option(func: Callable[..., Any]) -> Callable[..., Any]:
    return click.option(
        "--max-pages",
        type=click.IntRange(min=1),
        default=DEFAULT_MAX_PAGES,
        show_default=True,
        help="Maximum number of result pages to request.",
    )(func)


def _age_options(func: Callable[..., Any]) -> Callable[..., Any]:
    func = click.option(
        "--time-unit",
        type=click.Choice([u.value for u in TimeUnit]),
        default=TimeUnit.DAYS.value,
        show_default=True,
        help="Unit for ages and thresholds.",
    )(func)
    func = click.option(
        "--min-age",
        type=click.FloatRange(min=0),
        default=7,
        show_default=True,
        help="Minimum PR age for an action or PR to count.",
    )(func)
    return func


@click.group()
@click.option("--verbose", is_flag=True, help="Log debug output to stderr.")
@click.option("--retry", is_flag=True, help="Retry timeouts and 5xx answers with backoff.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, retry: bool) -> None:
    """pr-rescue: score review activity and find neglected PRs on GitHub."""
    ctx.ensure_object(dict)
    ctx.obj["retry"] = retry
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=_stderr, show_path=False)],
        )


@cli.command()
@click.argument("repo", metavar="OWNER/REPO")
@click.option(
    "--limit",
    type=click.IntRange(min=1),
    default=None,
    help="Only show the top N reviewers.",
)
@_max_pages_option
@_output_options
@click.pass_context
def leaderboard(
    ctx: click.Context,
    repo: str,
    limit: int | None,
    max_pages: int,
    output_format: str,
    output_path: Path | None,
) -> None:
    """Rank reviewers of OWNER/REPO by review points."""

    def work(service: RescueService):
        return service.get_leaderboard() if limit is None else service.get_top_reviewers(limit)

    rows = _run(ctx, repo, "Scanning reviews in", work, max_pages=max_pages)
    _emit(rows, output_format, "reviewers", repo, output_path)


@cli.command()
@click.argument("repo", metavar="OWNER/REPO")
@_age_options
@click.option("--no-comments", is_flag=True, help="Do not credit plain comments as rescues.")
@click.option(
    "--limit",
    type=click.IntRange(min=1),
    default=None,
    help="Only show the top N rescuers.",
)
@_max_pages_option
@_output_options
@click.pass_context
def rescuers(
    ctx: click.Context,
    repo: str,
    min_age: float,
    time_unit: str,
    no_comments: bool,
    limit: int | None,
    max_pages: int,
    output_format: str,
    output_path: Path | None,
) -> None:
    """Rank reviewers of OWNER/REPO by rescues of stale PRs."""

    def work(service: RescueService):
        ranked = service.get_rescue_leaderboard(min_age, time_unit, count_comments=not no_comments)
        return ranked if limit is None else ranked[:limit]

    rows = _run(ctx, repo, "Scanning rescues in", work, max_pages=max_pages)
    _emit(rows, output_format, "rescuers", repo, output_path)


@cli.command()
@click.argument("repo", metavar="OWNER/REPO")
@_age_options
@click.option("--include-reviewed", is_flag=True, help="Also list stale PRs that already have reviews.")
@click.option(
    "--policy",
    type=click.Choice(POLICY_NAMES),
    default=DEFAULT_POLICY,
    show_default=True,
    help="Staleness classification policy.",
)
@_max_pages_option
@_output_options
@click.pass_context
def neglected(
    ctx: click.Context,
    repo: str,
    min_age: float,
    time_unit: str,
    include_reviewed: bool,
    policy: str,
    max_pages: int,
    output_format: str,
    output_path: Path | None,
) -> None:
    """List the ten most neglected open PRs of OWNER/REPO."""
    rows = _run(
        ctx,
        repo,
        "Looking for neglected PRs in",
        lambda service: service.get_top_neglected_prs(min_age, time_unit, only_unreviewed=not include_reviewed),
        max_pages=max_pages,
        policy=policy,
    )
    _emit(rows, output_format, "neglected", repo, output_path)


@cli.command()
@click.argument("repo", metavar="OWNER/REPO")
@click.argument("number", type=click.IntRange(min=1))
@click.option(
    "--time-unit",
    type=click.Choice([u.value for u in TimeUnit]),
    default=TimeUnit.DAYS.value,
    show_default=True,
    help="Unit for the PR age.",
)
@click.option(
    "--policy",
    type=click.Choice(POLICY_NAMES),
    default=DEFAULT_POLICY,
    show_default=True,
    help="Staleness classification policy.",
)
@_output_options
@click.pass_context
def status(
    ctx: click.Context,
    repo: str,
    number: int,
    time_unit: str,
    policy: str,
    output_format: str,
    output_path: Path | None,
) -> None:
    """Show the neglect status of pull request NUMBER in OWNER/REPO."""
    pr = _run(
        ctx,
        repo,
        f"Fetching PR #{number} from",
        lambda service: service.get_pr_status(number, time_unit),
        policy=policy,
    )
    _emit([pr], output_format, "neglected", repo, output_path)


@cli.command()
@click.argument("repo", metavar="OWNER/REPO")
@click.argument("username")
@_age_options
@click.option(
    "--state-file",
    type=click.Path(path_type=Path, dir_okay=False),
    default=Path(".pr-rescue-snapshots.json"),
    show_default=True,
    help="Where rescue snapshots are kept between syncs.",
)
@_max_pages_option
@click.pass_context
def sync(
    ctx: click.Context,
    repo: str,
    username: str,
    min_age: float,
    time_unit: str,
    state_file: Path,
    max_pages: int,
) -> None:
    """Report USERNAME's new rescue activity in OWNER/REPO since the last sync."""
    ranked = _run(
        ctx,
        repo,
        f"Syncing activity for {username} in",
        lambda service: service.get_rescue_leaderboard(min_age, time_unit),
        max_pages=max_pages,
    )
    stats = next((s for s in ranked if s.username == username), None)
    if stats is None:
        click.echo(f"No rescue activity found for {username} on PRs {min_age:g}+ {time_unit} old.")
        return

    try:
        delta = sync_activity(JsonFileSnapshotStore(state_file), stats, datetime.now(tz=timezone.utc))
    except PrRescueError as exc:
        _stderr.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)
    phrases = describe(delta)
    if delta.first_sync:
        click.echo(f"First sync for {username}: " + (", ".join(phrases) or "no activity yet"))
    elif phrases:
        click.echo(f"New activity for {username}: " + ", ".join(phrases))
    else:
        click.echo(f"No new activity for {username} since the last sync.")
