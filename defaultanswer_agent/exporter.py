from __future__ import annotations

from .errors import UnsupportedInput
from .models import DIMENSION_LABELS, DIMENSIONS, Comparison, Report
from .scoring import fix_plan

_READINESS_LABELS = {
    "strong": "Strong candidate",
    "emerging": "Emerging candidate",
    "not_candidate": "Not yet a candidate",
}


def to_markdown(item: Report | Comparison) -> str:
    """Render a report or comparison as Markdown.

    Output depends only on the structured data, so the same input always gives
    byte-identical text.
    """
    if isinstance(item, Comparison):
        return comparison_to_markdown(item)
    if isinstance(item, Report):
        return report_to_markdown(item)
    raise UnsupportedInput(f"Cannot export {type(item).__name__}; expected a report or comparison.")


def report_to_markdown(report: Report) -> str:
    _require_dimensions(report)
    scores = report.scores
    lines = [
        f"# AI readiness report: {_escape(report.url)}",
        "",
        f"- Aggregate score: **{scores.aggregate}/100** ({_READINESS_LABELS.get(scores.readiness, scores.readiness)})",
        f"- Rubric version: {report.schema_version}",
        f"- Fetch: {_fetch_line(report)}",
        f"- Snapshot quality: {report.signals.snapshot_quality}",
    ]
    if report.signals.brand:
        lines.append(f"- Brand: {_escape(report.signals.brand)}")

    lines += ["", "## Scores", "", "| Dimension | Score |", "| --- | ---: |"]
    for d in DIMENSIONS:
        lines.append(f"| {DIMENSION_LABELS[d]} | {scores.dimensions[d].score} |")

    for d in DIMENSIONS:
        dim = scores.dimensions[d]
        evidence = {s.key: s.evidence for s in report.signals.signals.get(d, [])}
        lines += ["", f"## {DIMENSION_LABELS[d]} ({dim.score}/100)", ""]
        for check in dim.checks:
            mark = "x" if check.satisfied else " "
            line = f"- [{mark}] {_escape(check.label)} ({check.points}/{check.max_points})"
            if check.satisfied and evidence.get(check.key):
                line += f": {_escape(evidence[check.key])}"
            lines.append(line)

    fixes = fix_plan(scores)
    if fixes:
        lines += ["", "## Fix plan", ""]
        lines += [f"- [{fix.priority.upper()}] {_escape(fix.action)}" for fix in fixes]

    if report.warnings:
        lines += ["", "## Warnings", ""]
        lines += [f"- {_escape(w)}" for w in report.warnings]

    return "\n".join(lines) + "\n"


def comparison_to_markdown(comparison: Comparison) -> str:
    missing = [d for d in DIMENSIONS if d not in comparison.dimensions]
    if missing:
        raise UnsupportedInput(f"Comparison is missing dimension(s): {', '.join(missing)}")
    a, b = comparison.report_a, comparison.report_b
    agg = comparison.aggregate

    lines = [
        f"# AI readiness comparison: {_escape(a.url)} vs {_escape(b.url)}",
        "",
        f"- A: {_escape(a.url)} ({agg.score_a}/100)",
        f"- B: {_escape(b.url)} ({agg.score_b}/100)",
        f"- Leader: {comparison.aggregate_leader}",
        f"- Delta (B - A): {_signed(agg.delta)}",
        f"- Rubric version: {a.schema_version}",
    ]
    if comparison.same_site:
        lines.append(f"- Same site: yes ({'changed' if comparison.changed else 'unchanged'})")

    lines += ["", "## Dimensions", "", "| Dimension | A | B | Delta | Leader |", "| --- | ---: | ---: | ---: | --- |"]
    for d in DIMENSIONS:
        row = comparison.dimensions[d]
        lines.append(f"| {DIMENSION_LABELS[d]} | {row.score_a} | {row.score_b} | {_signed(row.delta)} | {row.leader} |")
    lines.append(f"| **Aggregate** | {agg.score_a} | {agg.score_b} | {_signed(agg.delta)} | {agg.leader} |")

    if comparison.check_gaps:
        lines += ["", "## Biggest gaps", ""]
        for gap in comparison.check_gaps:
            lines.append(
                f"- {DIMENSION_LABELS[gap.dimension]}: {_escape(gap.label)} "
                f"(A {gap.points_a}, B {gap.points_b} of {gap.max_points}, {_signed(gap.delta)})"
            )

    changes = comparison.signal_changes
    if changes.gained or changes.lost or changes.schema_added or changes.schema_removed:
        lines += ["", "## Signal changes (A to B)", ""]
        for title, values in (
            ("Gained", changes.gained),
            ("Lost", changes.lost),
            ("Schema added", changes.schema_added),
            ("Schema removed", changes.schema_removed),
        ):
            if values:
                lines.append(f"- {title}: {', '.join(_escape(v) for v in values)}")

    if comparison.content_changes:
        lines += ["", "## Content changes", ""]
        lines += [f"- {c}" for c in comparison.content_changes]

    return "\n".join(lines) + "\n"


def _require_dimensions(report: Report) -> None:
    missing = [d for d in DIMENSIONS if d not in report.scores.dimensions]
    if missing:
        raise UnsupportedInput(f"Report is missing dimension(s): {', '.join(missing)}")


def _fetch_line(report: Report) -> str:
    fetch = report.fetch
    if not report.fetch_ok:
        status = f", HTTP {fetch.status}" if fetch.status else ""
        return f"failed ({fetch.error_kind}{status})"
    parts = [f"HTTP {fetch.status}"]
    if fetch.redirect_chain:
        parts.append(f"{len(fetch.redirect_chain)} redirect(s)")
    if fetch.truncated:
        parts.append("truncated")
    return ", ".join(parts)


def _signed(value: int) -> str:
    return f"+{value}" if value > 0 else str(value)


def _escape(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ").strip()
