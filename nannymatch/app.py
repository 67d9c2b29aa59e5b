"""nannymatch command line entry point."""

import argparse
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from nannymatch.config import (
    DEFAULT_MATCHES_PATH,
    LOG_PATH,
    MatchingSettings,
    load_records,
    load_settings,
)
from nannymatch.matching import MatchEngine, MatchResult, RankedMatch
from nannymatch.output import export_matches, percentage_bar
from nannymatch.processing import (
    get_field,
    to_child_data,
    to_family_data,
    to_job_data,
    to_nanny_profile,
)
from nannymatch.profile import NannyProfile

logger = logging.getLogger(__name__)

UNAVAILABLE_MESSAGE = "Compatibility unavailable"


def configure_logging(level: str = "WARNING", log_path: Optional[Path] = None) -> None:
    """Configure application logging."""
    if log_path is None:
        log_path = LOG_PATH
    log_path.parent.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.WARNING))

    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

    resolved = str(log_path.resolve())
    has_file_handler = any(
        isinstance(handler, logging.FileHandler)
        and handler.baseFilename == resolved
        for handler in root_logger.handlers
    )
    if not has_file_handler:
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(logging.WARNING)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def load_scenario(path: Path) -> Dict[str, Any]:
    """Load a scenario file with job, family, children and nannies.

    Raises:
        ValueError: If the file does not contain a mapping with a job and a family
    """
    data = load_records(path)
    if not isinstance(data, dict):
        raise ValueError(f"Scenario file must contain a mapping: {path}")
    for key in ("job", "family"):
        if key not in data:
            raise ValueError(f"Scenario file is missing '{key}': {path}")
    return data


def _review_stats(scenario: Dict[str, Any]) -> Dict[int, Any]:
    # JSON object keys arrive as strings
    stats = scenario.get("reviews") or {}
    return {int(nanny_id): value for nanny_id, value in stats.items()}


def _children(scenario: Dict[str, Any], job_record: Any, now: datetime) -> list:
    children = [to_child_data(record, now) for record in scenario.get("children") or []]
    job = to_job_data(job_record)
    if job.children_ids:
        wanted = set(job.children_ids)
        children = [c for c in children if c.id in wanted]
    return children


def render_match(console: Console, nanny: NannyProfile, result: MatchResult) -> None:
    """Print one match result with a percentage bar per component."""
    name = nanny.name or f"Nanny #{nanny.id}"
    status = Text("Eligible", style="bold green") if result.is_eligible else Text("Not eligible", style="bold red")

    header = Text.assemble(
        (f"{result.score}%", "bold"), "  ", status,
    )
    console.print(Panel(header, title=f"[bold]{name}[/]", title_align="left"))

    for reason in result.elimination_reasons:
        console.print(f"  [red]✗[/red] {reason}")

    if not result.breakdown:
        console.print("  [dim]No applicable score components[/dim]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Component")
    table.add_column("Score", justify="right")
    table.add_column("")
    table.add_column("Details", overflow="fold")
    for key, component in result.breakdown.items():
        pct = component.percentage
        table.add_row(key.value, f"{pct}%", percentage_bar(pct), component.details or "")
    console.print(table)


def render_ranking(console: Console, matches: List[RankedMatch], job_id: int) -> None:
    """Print a ranked table of matches."""
    if not matches:
        console.print(f"No eligible nannies for job #{job_id}")
        return

    table = Table(title=f"Matches for job #{job_id}", show_header=True, header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("Nanny")
    table.add_column("Score", justify="right")
    table.add_column("")
    table.add_column("Fit", justify="right")
    table.add_column("Trust", justify="right")
    table.add_column("Bonus", justify="right")
    for match in matches:
        result = match.result
        table.add_row(
            str(match.rank),
            match.nanny.name or f"#{match.nanny.id}",
            f"{result.score}%",
            percentage_bar(result.score),
            f"{result.fit_score:.1f}",
            f"{result.trust_score:.1f}",
            f"{result.bonus_score:.1f}",
        )
    console.print(table)


def cmd_score(args: argparse.Namespace, settings: MatchingSettings, console: Console) -> int:
    """Score one nanny of the scenario against its job."""
    now = datetime.now(timezone.utc)
    try:
        scenario = load_scenario(Path(args.scenario))
        nanny_records = scenario.get("nannies") or []
        if args.nanny_id is not None:
            nanny_records = [r for r in nanny_records if get_field(r, "id") == args.nanny_id]
        if not nanny_records:
            raise ValueError("No matching nanny in scenario")

        record = nanny_records[0]
        stats = _review_stats(scenario).get(get_field(record, "id"))
        nanny = to_nanny_profile(record, stats)
        job = to_job_data(scenario["job"])
        family = to_family_data(scenario["family"])
        children = _children(scenario, scenario["job"], now)

        result = MatchEngine(settings.weights).evaluate(job, family, children, nanny, now)
    except (OSError, ValueError, ValidationError) as e:
        logger.error(f"Could not evaluate match: {e}")
        console.print(f"[yellow]{UNAVAILABLE_MESSAGE}[/yellow]")
        return 1

    render_match(console, nanny, result)
    return 0


def cmd_rank(args: argparse.Namespace, settings: MatchingSettings, console: Console) -> int:
    """Rank every nanny of the scenario for its job."""
    limit = args.limit if args.limit is not None else settings.limit
    min_score = args.min_score if args.min_score is not None else settings.min_score
    try:
        scenario = load_scenario(Path(args.scenario))
        engine = MatchEngine(settings.weights)
        matches = engine.score_records(
            scenario["job"],
            scenario["family"],
            scenario.get("children") or [],
            scenario.get("nannies") or [],
            review_stats=_review_stats(scenario),
            limit=limit,
            min_score=min_score,
        )
        job_id = to_job_data(scenario["job"]).id
    except (OSError, ValueError, ValidationError) as e:
        logger.error(f"Could not rank matches: {e}")
        console.print(f"[yellow]{UNAVAILABLE_MESSAGE}[/yellow]")
        return 1

    render_ranking(console, matches, job_id)

    if args.save:
        try:
            export_matches(matches, args.save, job_id)
        except (OSError, ValueError) as e:
            logger.error(f"Could not export matches: {e}")
            console.print(f"[red]Export failed:[/red] {e}")
            return 1
        console.print(f"Saved {len(matches)} matches to {args.save}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="nannymatch", description="Nanny/job compatibility matching")
    parser.add_argument("--settings", help="Path to settings YAML (default: data/settings.yaml)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    score_cmd = subparsers.add_parser("score", help="Score one nanny against a job")
    score_cmd.add_argument("scenario", help="YAML/JSON file with job, family, children and nannies")
    score_cmd.add_argument("--nanny-id", type=int, dest="nanny_id", help="Nanny to score (default: first)")
    score_cmd.set_defaults(func=cmd_score)

    rank_cmd = subparsers.add_parser("rank", help="Rank nannies for a job")
    rank_cmd.add_argument("scenario", help="YAML/JSON file with job, family, children and nannies")
    rank_cmd.add_argument("--limit", type=int, help="Maximum number of matches")
    rank_cmd.add_argument("--min-score", type=int, dest="min_score", help="Minimum match score")
    rank_cmd.add_argument(
        "--save",
        nargs="?",
        const=str(DEFAULT_MATCHES_PATH),
        help="Export ranking (.json, .csv, .md; default: data/matches.csv)",
    )
    rank_cmd.set_defaults(func=cmd_rank)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the application."""
    load_dotenv()
    args = build_parser().parse_args(argv)

    console = Console()
    try:
        settings = load_settings(Path(args.settings) if args.settings else None)
    except (OSError, ValueError, ValidationError) as e:
        console.print(f"[red]Invalid settings:[/red] {e}")
        return 2
    configure_logging(settings.log_level)

    return args.func(args, settings, console)


if __name__ == "__main__":
    sys.exit(main())
