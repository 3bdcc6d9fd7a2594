from __future__ import annotations

import hashlib
import json
from datetime import datetime, timezone

from .extractor import empty_signals
from .models import DIMENSIONS, FetchDiagnostics, FetchError, FetchOutcome, FetchResult, Report, ScoreSet, SignalSet
from .scoring import SCHEMA_VERSION, score
from .urls import canonicalize

_HTML_TYPES = ("text/html", "application/xhtml+xml")


def build(
    url: str,
    outcome: FetchOutcome,
    signals: SignalSet,
    scores: ScoreSet,
    *,
    now: datetime | None = None,
) -> Report:
    return Report(
        url=canonicalize(url),
        fetched_at=_timestamp(now),
        fetch_ok=isinstance(outcome, FetchResult),
        fetch=diagnostics_for(outcome),
        signals=signals,
        scores=scores,
        schema_version=SCHEMA_VERSION,
        warnings=_warnings(outcome),
    )


def build_failed(url: str, error: FetchError, *, now: datetime | None = None) -> Report:
    """Degraded report for a fetch that never produced a page: every signal absent, all scores zero."""
    signals = empty_signals(canonicalize(url))
    return build(url, error, signals, score(signals), now=now)


def diagnostics_for(outcome: FetchOutcome) -> FetchDiagnostics:
    if isinstance(outcome, FetchError):
        return FetchDiagnostics(
            requested_url=outcome.requested_url,
            status=outcome.status,
            redirect_chain=outcome.redirect_chain,
            error_kind=outcome.kind,
            detail=outcome.detail,
            elapsed_ms=outcome.elapsed_ms,
        )
    return FetchDiagnostics(
        requested_url=outcome.requested_url,
        final_url=outcome.final_url,
        status=outcome.status,
        content_type=outcome.content_type,
        bytes_read=outcome.bytes_read,
        truncated=outcome.truncated,
        redirect_chain=outcome.redirect_chain,
        elapsed_ms=outcome.elapsed_ms,
    )


def report_hash(report: Report) -> str:
    """sha256 over what the rubric saw; timestamps and fetch timings are excluded."""
    normalized = {
        "schemaVersion": report.schema_version,
        "scores": {d: report.scores.dimensions[d].score for d in DIMENSIONS if d in report.scores.dimensions},
        "aggregate": report.scores.aggregate,
        "signals": sorted(report.signals.present_keys()),
        "schemaTypes": sorted(report.signals.schema_types),
    }
    payload = json.dumps(normalized, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def _warnings(outcome: FetchOutcome) -> list[str]:
    if isinstance(outcome, FetchError):
        return [f"Fetch failed ({outcome.kind}): {outcome.detail}"]

    warnings = []
    if outcome.truncated:
        warnings.append(f"Body truncated after {outcome.bytes_read} bytes; later content was not analyzed.")
    content_type = (outcome.content_type or "").split(";")[0].strip().lower()
    if content_type and content_type not in _HTML_TYPES:
        warnings.append(f"Content-Type is {content_type}, not HTML.")
    if outcome.redirect_chain:
        warnings.append(f"Followed {len(outcome.redirect_chain)} redirect(s) to {outcome.final_url}.")
    return warnings


def _timestamp(now: datetime | None) -> str:
    moment = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
