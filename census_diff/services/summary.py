from __future__ import annotations

from ..models.diff_result import DiffResult

"""SUMMARY line rendering."""


def _format_pct(value: float) -> str:
    return f"{value:.2f}"


def render_summary_line(result: DiffResult) -> str:
    """Render the SUMMARY line for a comparison.

    Format:
    SUMMARY baseline={n} current={m} added={a} removed={r} modified={k} variation_pct={p}

    Examples:
        >>> render_summary_line(DiffResult(baseline_count=4, current_count=4))
        'SUMMARY baseline=4 current=4 added=0 removed=0 modified=0 variation_pct=0.00'
    """
    return (
        f"SUMMARY baseline={result.baseline_count} "
        f"current={result.current_count} "
        f"added={len(result.added)} "
        f"removed={len(result.removed)} "
        f"modified={len(result.modified)} "
        f"variation_pct={_format_pct(result.variation_percentage)}"
    )


def render_field_changes(result: DiffResult) -> str:
    """``field=count`` pairs for modified records, most changed first ("none" if empty)."""
    counts = result.field_change_counts()
    if not counts:
        return "none"
    return " ".join(f"{name}={count}" for name, count in counts.items())
