"""Export functions for ranked match data in multiple formats."""

import csv
import json
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from nannymatch.matching.engine import RankedMatch
from nannymatch.matching.scorer import ComponentKey, ScoreComponent

BAR_WIDTH = 10


def percentage_bar(percentage: int, width: int = BAR_WIDTH) -> str:
    """Render a 0-100 percentage as a fixed-width text bar."""
    filled = max(0, min(width, round(percentage * width / 100)))
    return "█" * filled + "░" * (width - filled)


def _display_name(match: RankedMatch) -> str:
    return match.nanny.name or f"Nanny #{match.nanny.id}"


def export_json(
    matches: List[RankedMatch],
    filepath: str,
    job_id: Optional[int] = None,
) -> None:
    """Export ranked matches to JSON format.

    Args:
        matches: Ranked matches, best first
        filepath: Path to write JSON file
        job_id: Job the ranking was computed for

    Raises:
        IOError: If file cannot be written
    """
    export_data = {
        "exported_at": datetime.now().isoformat(),
        "job_id": job_id,
        "total_matches": len(matches),
        "matches": [m.to_dict() for m in matches],
    }

    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(export_data, f, indent=2, ensure_ascii=False)


def export_csv(
    matches: List[RankedMatch],
    filepath: str,
    job_id: Optional[int] = None,
) -> None:
    """Export ranked matches to CSV format.

    One row per match with the per-component percentages; components that
    did not apply are left blank.

    Args:
        matches: Ranked matches, best first
        filepath: Path to write CSV file
        job_id: Job the ranking was computed for

    Raises:
        IOError: If file cannot be written
    """
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)

    fieldnames = [
        "rank",
        "job_id",
        "nanny_id",
        "name",
        "score",
        "eligible",
        "fit_score",
        "trust_score",
        "bonus_score",
    ] + [key.value for key in ComponentKey]

    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()

        for match in matches:
            result = match.result
            row = {
                "rank": match.rank,
                "job_id": job_id if job_id is not None else "",
                "nanny_id": match.nanny.id,
                "name": match.nanny.name,
                "score": result.score,
                "eligible": "Yes" if result.is_eligible else "No",
                "fit_score": round(result.fit_score, 2),
                "trust_score": round(result.trust_score, 2),
                "bonus_score": round(result.bonus_score, 2),
            }
            for key in ComponentKey:
                component = result.breakdown.get(key)
                row[key.value] = f"{component.percentage}%" if component else ""
            writer.writerow(row)


def export_markdown(
    matches: List[RankedMatch],
    filepath: str,
    job_id: Optional[int] = None,
) -> None:
    """Export ranked matches to Markdown format.

    Args:
        matches: Ranked matches, best first
        filepath: Path to write Markdown file
        job_id: Job the ranking was computed for

    Raises:
        IOError: If file cannot be written
    """
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)

    lines = []

    # Header
    lines.append("# Nanny Matches" + (f" for Job #{job_id}" if job_id is not None else ""))
    lines.append("")
    lines.append(f"**Exported:** {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    lines.append(f"**Total Matches:** {len(matches)}")
    lines.append("")
    lines.append("---")
    lines.append("")

    for match in matches:
        result = match.result
        lines.append(f"## {match.rank}. {_display_name(match)}")
        lines.append("")
        lines.append(f"**Match Score:** {result.score}%")
        lines.append(f"**Eligible:** {'✓ Yes' if result.is_eligible else '✗ No'}")
        lines.append("")

        if result.elimination_reasons:
            lines.append("### Elimination Reasons")
            lines.append("")
            for reason in result.elimination_reasons:
                lines.append(f"- ✗ {reason}")
            lines.append("")

        if result.breakdown:
            lines.append("### Breakdown")
            lines.append("")
            lines.append("| Component | Score | | Details |")
            lines.append("|---|---|---|---|")
            for key, component in result.breakdown.items():
                lines.append(_breakdown_row(key, component))
            lines.append("")

        lines.append("---")
        lines.append("")

    with open(path, "w", encoding="utf-8") as f:
        f.write("\n".join(lines))


def _breakdown_row(key: ComponentKey, component: ScoreComponent) -> str:
    pct = component.percentage
    return f"| {key.value} | {pct}% | `{percentage_bar(pct)}` | {component.details or ''} |"


def export_matches(
    matches: List[RankedMatch],
    filepath: str,
    job_id: Optional[int] = None,
) -> None:
    """Export matches with format auto-detection from file extension.

    Args:
        matches: Ranked matches, best first
        filepath: Path to write file (extension determines format)
        job_id: Job the ranking was computed for

    Raises:
        ValueError: If file extension is not recognized
        IOError: If file cannot be written
    """
    path = Path(filepath)
    extension = path.suffix.lower()

    if extension == ".json":
        export_json(matches, filepath, job_id)
    elif extension == ".csv":
        export_csv(matches, filepath, job_id)
    elif extension in (".md", ".markdown"):
        export_markdown(matches, filepath, job_id)
    else:
        raise ValueError(
            f"Unsupported file format: {extension}. "
            "Supported formats: .json, .csv, .md, .markdown"
        )
