from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Dimension = Literal["entity_clarity", "answerability", "commercial_clarity", "trust", "retrievability"]
Leader = Literal["A", "B", "tie"]
Readiness = Literal["strong", "emerging", "not_candidate"]
SnapshotQuality = Literal["ok", "thin", "likely_js", "unavailable"]
FetchErrorKind = Literal["timeout", "unreachable", "too_large", "http_error"]
Priority = Literal["high", "medium", "low"]

# Rubric order. Every rendering and iteration follows it.
DIMENSIONS: tuple[Dimension, ...] = (
    "entity_clarity",
    "answerability",
    "commercial_clarity",
    "trust",
    "retrievability",
)

DIMENSION_LABELS: dict[Dimension, str] = {
    "entity_clarity": "Entity clarity",
    "answerability": "Answerability",
    "commercial_clarity": "Commercial clarity",
    "trust": "Trust",
    "retrievability": "Retrievability",
}


class _Model(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)


# --- fetch outcome ---------------------------------------------------------


class FetchResult(_Model):
    requested_url: str
    final_url: str
    status: int
    content_type: str | None = None
    body: str = ""
    bytes_read: int = 0
    truncated: bool = False
    redirect_chain: list[str] = Field(default_factory=list)
    headers: dict[str, str] = Field(default_factory=dict)
    robots_txt: str | None = None
    elapsed_ms: int = 0


class FetchError(_Model):
    kind: FetchErrorKind
    requested_url: str
    detail: str
    status: int | None = None
    redirect_chain: list[str] = Field(default_factory=list)
    elapsed_ms: int = 0


FetchOutcome = FetchResult | FetchError


class FetchDiagnostics(_Model):
    requested_url: str
    final_url: str | None = None
    status: int | None = None
    content_type: str | None = None
    bytes_read: int = 0
    truncated: bool = False
    redirect_chain: list[str] = Field(default_factory=list)
    error_kind: FetchErrorKind | None = None
    detail: str | None = None
    elapsed_ms: int = 0


# --- signals and scores ----------------------------------------------------


class Signal(_Model):
    key: str
    dimension: Dimension
    label: str
    present: bool
    evidence: str | None = None


class SignalSet(_Model):
    url: str
    brand: str = ""
    title: str | None = None
    meta_description: str | None = None
    h1: str | None = None
    canonical_url: str | None = None
    schema_types: list[str] = Field(default_factory=list)
    snapshot_quality: SnapshotQuality = "unavailable"
    text_length: int = 0
    signals: dict[Dimension, list[Signal]]

    def get(self, key: str) -> Signal | None:
        for group in self.signals.values():
            for signal in group:
                if signal.key == key:
                    return signal
        return None

    def present_keys(self) -> list[str]:
        return [s.key for d in DIMENSIONS for s in self.signals.get(d, []) if s.present]


class CheckResult(_Model):
    key: str
    label: str
    points: int
    max_points: int
    satisfied: bool


class DimensionScore(_Model):
    dimension: Dimension
    label: str
    score: int = Field(ge=0, le=100)
    max_score: int = 100
    checks: list[CheckResult] = Field(default_factory=list)


class ScoreSet(_Model):
    dimensions: dict[Dimension, DimensionScore]
    aggregate: int = Field(ge=0, le=100)
    readiness: Readiness


# --- report and comparison -------------------------------------------------


class Report(_Model):
    url: str
    fetched_at: str
    fetch_ok: bool
    fetch: FetchDiagnostics
    signals: SignalSet
    scores: ScoreSet
    schema_version: str
    warnings: list[str] = Field(default_factory=list)


class DimensionDelta(_Model):
    score_a: int
    score_b: int
    delta: int
    leader: Leader


class SignalChanges(_Model):
    gained: list[str] = Field(default_factory=list)
    lost: list[str] = Field(default_factory=list)
    schema_added: list[str] = Field(default_factory=list)
    schema_removed: list[str] = Field(default_factory=list)


class CheckGap(_Model):
    dimension: Dimension
    key: str
    label: str
    points_a: int
    points_b: int
    max_points: int
    delta: int


class Comparison(_Model):
    report_a: Report
    report_b: Report
    dimensions: dict[Dimension, DimensionDelta]
    aggregate: DimensionDelta
    aggregate_leader: Leader
    same_site: bool
    changed: bool
    signal_changes: SignalChanges = Field(default_factory=SignalChanges)
    check_gaps: list[CheckGap] = Field(default_factory=list)
    content_changes: list[str] = Field(default_factory=list)

    def delta(self, dimension: str) -> int:
        if dimension == "aggregate":
            return self.aggregate.delta
        return self.dimensions[dimension].delta


class ScanRecord(_Model):
    id: str
    created_at: str
    report: Report


class ScanSummary(_Model):
    """One row of a URL's scan history, without the stored report."""

    id: str
    created_at: str
    url: str
    schema_version: str
    aggregate: int = Field(ge=0, le=100)
    readiness: Readiness
    hash: str


class FixItem(_Model):
    key: str
    dimension: Dimension
    priority: Priority
    action: str
    points: int


# --- request / response bodies ---------------------------------------------


class AnalyzeRequest(_Model):
    url: str = Field(..., min_length=1)


class CompareRequest(_Model):
    url_a: str = Field(..., min_length=1)
    url_b: str = Field(..., min_length=1)


class ExportRequest(_Model):
    report: Report | None = None
    comparison: Comparison | None = None


class AnalyzeResponse(Report):
    ok: Literal[True] = True
    history_diff: Comparison | None = None


class ComparePayload(_Model):
    report_a: Report
    report_b: Report
    comparison: Comparison


class CompareResponse(_Model):
    ok: Literal[True] = True
    url_a: str
    url_b: str
    payload: ComparePayload


class HistoryResponse(_Model):
    ok: bool
    latest: ScanRecord | None = None
    previous: ScanRecord | None = None
    error: str | None = None


class HistoryListResponse(_Model):
    ok: bool
    scans: list[ScanSummary] = Field(default_factory=list)
    error: str | None = None


class HistoryDiffResponse(_Model):
    ok: bool
    current: ScanRecord | None = None
    previous: ScanRecord | None = None
    diff: Comparison | None = None
    error: str | None = None


class ExportResponse(_Model):
    ok: Literal[True] = True
    markdown: str


class ErrorResponse(_Model):
    ok: Literal[False] = False
    error: str
