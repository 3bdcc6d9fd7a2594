from __future__ import annotations

import itertools
import logging
import threading
from typing import Any, Protocol

from pydantic import ValidationError

from .comparator import compare
from .config import Settings
from .errors import ScanNotFound, StoreUnavailable
from .models import Comparison, Report, ScanRecord, ScanSummary
from .report import report_hash
from .scoring import readiness_for
from .urls import canonicalize

logger = logging.getLogger(__name__)


class HistoryStore(Protocol):
    def get(self, url: str) -> tuple[ScanRecord | None, ScanRecord | None]:
        """(latest, previous) scans for a URL, newest first."""
        ...

    def put(self, report: Report) -> str:
        """Persist a report and return its surrogate id."""
        ...

    def list_scans(self, url: str, limit: int) -> list[ScanSummary]:
        """Up to ``limit`` scans of a URL, newest first."""
        ...

    def get_scan(self, scan_id: str) -> tuple[ScanRecord | None, ScanRecord | None]:
        """(scan, the scan of the same URL before it); (None, None) for an unknown id."""
        ...


class InMemoryHistoryStore:
    """Process-local store; fine for a single worker and for tests."""

    def __init__(self):
        self._lock = threading.Lock()
        self._scans: dict[str, list[ScanRecord]] = {}
        self._ids = itertools.count(1)

    def get(self, url: str) -> tuple[ScanRecord | None, ScanRecord | None]:
        key = canonicalize(url)
        with self._lock:
            scans = list(self._scans.get(key, ())[:2])
        return _latest_previous(scans)

    def put(self, report: Report) -> str:
        with self._lock:
            scan_id = f"scan_{next(self._ids)}"
            record = ScanRecord(id=scan_id, created_at=report.fetched_at, report=report)
            self._scans.setdefault(report.url, []).insert(0, record)
        return scan_id

    def list_scans(self, url: str, limit: int) -> list[ScanSummary]:
        key = canonicalize(url)
        with self._lock:
            scans = list(self._scans.get(key, ())[:limit])
        return [_summary(s) for s in scans]

    def get_scan(self, scan_id: str) -> tuple[ScanRecord | None, ScanRecord | None]:
        with self._lock:
            for scans in self._scans.values():
                for i, scan in enumerate(scans):
                    if scan.id == scan_id:
                        return scan, scans[i + 1] if i + 1 < len(scans) else None
        return None, None


class SupabaseHistoryStore:
    def __init__(self, client: Any, table: str):
        self.client = client
        self.table = table

    def get(self, url: str) -> tuple[ScanRecord | None, ScanRecord | None]:
        key = canonicalize(url)
        rows = self._execute(
            self.client.table(self.table)
            .select("id, created_at, report")
            .eq("url", key)
            .order("created_at", desc=True)
            .limit(2),
            key,
        )
        return _latest_previous([self._record(row, key) for row in rows])

    def put(self, report: Report) -> str:
        row = {
            "url": report.url,
            "created_at": report.fetched_at,
            "schema_version": report.schema_version,
            "aggregate": report.scores.aggregate,
            "hash": report_hash(report),
            "report": report.model_dump(mode="json", by_alias=True),
        }
        data = self._execute(self.client.table(self.table).insert(row), report.url)
        if not data or "id" not in data[0]:
            raise StoreUnavailable("History store did not return an id for the saved scan.")
        return str(data[0]["id"])

    def list_scans(self, url: str, limit: int) -> list[ScanSummary]:
        key = canonicalize(url)
        rows = self._execute(
            self.client.table(self.table)
            .select("id, created_at, url, schema_version, aggregate, hash")
            .eq("url", key)
            .order("created_at", desc=True)
            .limit(limit),
            key,
        )
        try:
            return [
                ScanSummary(
                    id=str(row.get("id", "")),
                    created_at=str(row.get("created_at", "")),
                    url=row.get("url") or key,
                    schema_version=str(row.get("schema_version", "")),
                    aggregate=row.get("aggregate"),
                    readiness=readiness_for(row.get("aggregate") or 0),
                    hash=row.get("hash") or "",
                )
                for row in rows
            ]
        except ValidationError as e:
            logger.warning("Stored scan summary for %s is not readable", key)
            raise StoreUnavailable("History store returned an unreadable scan.") from e

    def get_scan(self, scan_id: str) -> tuple[ScanRecord | None, ScanRecord | None]:
        rows = self._execute(
            self.client.table(self.table).select("id, created_at, report").eq("id", scan_id).limit(1),
            f"scan {scan_id}",
        )
        if not rows:
            return None, None
        current = self._record(rows[0], f"scan {scan_id}")
        before = self._execute(
            self.client.table(self.table)
            .select("id, created_at, report")
            .eq("url", current.report.url)
            .lt("created_at", rows[0].get("created_at"))
            .order("created_at", desc=True)
            .limit(1),
            current.report.url,
        )
        previous = self._record(before[0], current.report.url) if before else None
        return current, previous

    def _execute(self, query: Any, what: str) -> list[dict]:
        try:
            r = query.execute()
        except Exception as e:
            logger.warning("History query failed for %s: %s", what, e)
            raise StoreUnavailable("History store is unavailable.") from e
        return r.data or []

    def _record(self, row: dict, what: str) -> ScanRecord:
        try:
            return ScanRecord(
                id=str(row.get("id", "")),
                created_at=str(row.get("created_at", "")),
                report=Report.model_validate(row.get("report") or {}),
            )
        except ValidationError as e:
            logger.warning("Stored scan %s for %s is not a valid report", row.get("id"), what)
            raise StoreUnavailable("History store returned an unreadable scan.") from e


def create_history_store(settings: Settings) -> HistoryStore | None:
    """Store selected by configuration, or None when history is not configured.

    A misconfigured backend disables history rather than stopping the service.
    """
    backend = settings.history_backend
    if not backend:
        return None
    if backend == "memory":
        return InMemoryHistoryStore()
    if backend == "supabase":
        if not settings.supabase_url or not settings.supabase_key:
            logger.error("History backend is supabase but SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY is missing")
            return None
        try:
            # Optional dependency; only needed when this backend is selected.
            from supabase import create_client
        except ImportError:
            logger.error("History backend is supabase but the supabase package is not installed; history disabled")
            return None
        try:
            client = create_client(settings.supabase_url, settings.supabase_key)
        except Exception as e:
            logger.error("Supabase client could not be created (%s); history disabled", e)
            return None
        return SupabaseHistoryStore(client, settings.history_table)

    logger.error("Unknown history backend %r; history disabled", backend)
    return None


def record_scan(store: HistoryStore, report: Report) -> Comparison | None:
    """Persist a fresh report and diff it against the scan before it.

    History is never allowed to fail an analysis: store errors are logged and
    the diff is simply omitted. A failed lookup does not stop the write.
    """
    try:
        latest, _ = store.get(report.url)
    except StoreUnavailable as e:
        logger.warning("Previous scan of %s unavailable: %s", report.url, e)
        latest = None

    try:
        store.put(report)
    except StoreUnavailable as e:
        logger.warning("Scan of %s not recorded: %s", report.url, e)

    if latest is None:
        return None
    if latest.report.schema_version != report.schema_version:
        logger.info(
            "Previous scan of %s used rubric %s; skipping diff",
            report.url,
            latest.report.schema_version,
        )
        return None
    return compare(latest.report, report)


def scan_diff(store: HistoryStore, scan_id: str) -> tuple[ScanRecord, ScanRecord | None, Comparison | None]:
    """A stored scan, the scan of the same URL before it, and the diff between them."""
    current, previous = store.get_scan(scan_id)
    if current is None:
        raise ScanNotFound(f"No scan with id {scan_id}.")
    if previous is None:
        return current, None, None
    return current, previous, compare(previous.report, current.report)


def _summary(record: ScanRecord) -> ScanSummary:
    report = record.report
    return ScanSummary(
        id=record.id,
        created_at=record.created_at,
        url=report.url,
        schema_version=report.schema_version,
        aggregate=report.scores.aggregate,
        readiness=report.scores.readiness,
        hash=report_hash(report),
    )


def _latest_previous(scans: list[ScanRecord]) -> tuple[ScanRecord | None, ScanRecord | None]:
    latest = scans[0] if scans else None
    previous = scans[1] if len(scans) > 1 else None
    return latest, previous
