from __future__ import annotations

from .errors import IncompatibleSchemaVersion, UnsupportedInput
from .models import DIMENSIONS, CheckGap, Comparison, Dimension, DimensionDelta, Leader, Report, SignalChanges
from .report import report_hash

MAX_CHECK_GAPS = 5

_CONTENT_FIELDS = (
    ("title", "Title"),
    ("h1", "H1"),
    ("meta_description", "Meta description"),
)


def leader_for(score_a: int, score_b: int) -> Leader:
    if score_a == score_b:
        return "tie"
    return "A" if score_a > score_b else "B"


def compare(report_a: Report, report_b: Report) -> Comparison:
    """Diff two reports of one rubric version. Deltas are B minus A.

    Works the same for two different sites and for two scans of one site
    (A = previous, B = latest).
    """
    if report_a.schema_version != report_b.schema_version:
        raise IncompatibleSchemaVersion(report_a.schema_version, report_b.schema_version)
    _require_dimensions(report_a, "A")
    _require_dimensions(report_b, "B")

    dimensions: dict[Dimension, DimensionDelta] = {}
    for d in DIMENSIONS:
        dimensions[d] = _delta(report_a.scores.dimensions[d].score, report_b.scores.dimensions[d].score)
    aggregate = _delta(report_a.scores.aggregate, report_b.scores.aggregate)

    return Comparison(
        report_a=report_a,
        report_b=report_b,
        dimensions=dimensions,
        aggregate=aggregate,
        aggregate_leader=aggregate.leader,
        same_site=report_a.url == report_b.url,
        changed=report_hash(report_a) != report_hash(report_b),
        signal_changes=_signal_changes(report_a, report_b),
        check_gaps=_check_gaps(report_a, report_b),
        content_changes=_content_changes(report_a, report_b),
    )


def _delta(score_a: int, score_b: int) -> DimensionDelta:
    return DimensionDelta(score_a=score_a, score_b=score_b, delta=score_b - score_a, leader=leader_for(score_a, score_b))


def _require_dimensions(report: Report, side: str) -> None:
    missing = [d for d in DIMENSIONS if d not in report.scores.dimensions]
    if missing:
        raise UnsupportedInput(f"Report {side} is missing dimension(s): {', '.join(missing)}")


def _signal_changes(report_a: Report, report_b: Report) -> SignalChanges:
    keys_a = report_a.signals.present_keys()
    keys_b = report_b.signals.present_keys()
    types_a = set(report_a.signals.schema_types)
    types_b = set(report_b.signals.schema_types)
    return SignalChanges(
        gained=[k for k in keys_b if k not in keys_a],
        lost=[k for k in keys_a if k not in keys_b],
        schema_added=sorted(types_b - types_a),
        schema_removed=sorted(types_a - types_b),
    )


def _check_gaps(report_a: Report, report_b: Report) -> list[CheckGap]:
    gaps: list[tuple[int, CheckGap]] = []
    order = 0
    for d in DIMENSIONS:
        checks_a = {c.key: c for c in report_a.scores.dimensions[d].checks}
        for check_b in report_b.scores.dimensions[d].checks:
            check_a = checks_a.get(check_b.key)
            points_a = check_a.points if check_a else 0
            delta = check_b.points - points_a
            if delta:
                gaps.append(
                    (
                        order,
                        CheckGap(
                            dimension=d,
                            key=check_b.key,
                            label=check_b.label,
                            points_a=points_a,
                            points_b=check_b.points,
                            max_points=check_b.max_points,
                            delta=delta,
                        ),
                    )
                )
            order += 1

    gaps.sort(key=lambda item: (-abs(item[1].delta), item[0]))
    return [gap for _, gap in gaps[:MAX_CHECK_GAPS]]


def _content_changes(report_a: Report, report_b: Report) -> list[str]:
    changes = []
    for field, label in _CONTENT_FIELDS:
        if getattr(report_a.signals, field) != getattr(report_b.signals, field):
            changes.append(f"{label} changed")
    return changes
