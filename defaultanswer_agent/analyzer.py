from __future__ import annotations

import asyncio
import logging
import time

from .comparator import compare
from .extractor import extract
from .fetcher import Fetcher
from .models import Comparison, FetchError, Report
from .report import build, build_failed
from .scoring import score
from .urls import parse_url

logger = logging.getLogger(__name__)


class Analyzer:
    """URL in, Report out. Holds no per-request state."""

    def __init__(self, fetcher: Fetcher):
        self.fetcher = fetcher

    async def analyze(self, url: str) -> Report:
        target = parse_url(url)
        started = time.perf_counter()

        outcome = await self.fetcher.fetch(target)
        if isinstance(outcome, FetchError):
            report = build_failed(target, outcome)
        else:
            signals = extract(outcome)
            report = build(target, outcome, signals, score(signals))

        logger.info(
            "Analyzed %s: aggregate=%s fetch_ok=%s in %dms",
            report.url,
            report.scores.aggregate,
            report.fetch_ok,
            int((time.perf_counter() - started) * 1000),
        )
        return report

    async def analyze_pair(self, url_a: str, url_b: str) -> tuple[Report, Report, Comparison]:
        # Reject bad input for either side before fetching anything.
        target_a = parse_url(url_a)
        target_b = parse_url(url_b)

        report_a, report_b = await asyncio.gather(self.analyze(target_a), self.analyze(target_b))
        return report_a, report_b, compare(report_a, report_b)
