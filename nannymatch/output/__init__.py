"""Output module for exporting ranked matches."""

from nannymatch.output.export import (
    export_json,
    export_csv,
    export_markdown,
    export_matches,
    percentage_bar,
)

__all__ = [
    "export_json",
    "export_csv",
    "export_markdown",
    "export_matches",
    "percentage_bar",
]
