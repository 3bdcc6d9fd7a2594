import unittest

import httpx

from defaultanswer_agent.analyzer import Analyzer
from defaultanswer_agent.config import Settings
from defaultanswer_agent.errors import InvalidUrl
from defaultanswer_agent.fetcher import Fetcher
from defaultanswer_agent.models import DIMENSIONS
from tests.sample_pages import DEEP_JSONLD_PAGE, RICH_PAGE, ROBOTS_ALLOW_ALL


def site_handler(request):
    host = request.url.host
    if host == "down.example.org":
        raise httpx.ConnectError("Connection refused", request=request)
    if host == "missing.example.org":
        return httpx.Response(404, headers={"content-type": "text/html"}, text="<h1>Not found</h1>")
    if host == "bad.example.com" and request.url.path == "/":
        return httpx.Response(200, headers={"content-type": "text/html"}, text=DEEP_JSONLD_PAGE)
    if request.url.path == "/robots.txt":
        return httpx.Response(200, headers={"content-type": "text/plain"}, text=ROBOTS_ALLOW_ALL)
    return httpx.Response(200, headers={"content-type": "text/html; charset=utf-8"}, text=RICH_PAGE)


class AnalyzerTestCase(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.requests = []

        def recording(request):
            self.requests.append(str(request.url))
            return site_handler(request)

        self.client = httpx.AsyncClient(transport=httpx.MockTransport(recording))
        self.analyzer = Analyzer(Fetcher(self.client, Settings()))

    async def asyncTearDown(self):
        await self.client.aclose()


class TestAnalyze(AnalyzerTestCase):
    async def test_healthy_site(self):
        report = await self.analyzer.analyze("Acme.Example.com/")

        self.assertTrue(report.fetch_ok)
        self.assertEqual(report.url, "https://acme.example.com/")
        self.assertEqual(report.schema_version, "1")
        self.assertEqual(list(report.scores.dimensions), list(DIMENSIONS))
        self.assertTrue(report.fetched_at.endswith("Z"))
        self.assertEqual(report.fetch.status, 200)

    async def test_404_gives_failed_low_report(self):
        report = await self.analyzer.analyze("https://missing.example.org")

        self.assertFalse(report.fetch_ok)
        self.assertLessEqual(report.scores.aggregate, 10)
        self.assertEqual(report.fetch.error_kind, "http_error")
        self.assertEqual(report.fetch.status, 404)
        self.assertEqual(list(report.scores.dimensions), list(DIMENSIONS))

    async def test_unreachable_gives_failed_report(self):
        report = await self.analyzer.analyze("https://down.example.org")

        self.assertFalse(report.fetch_ok)
        self.assertEqual(report.scores.aggregate, 0)
        self.assertEqual(report.signals.present_keys(), [])
        self.assertTrue(report.warnings)

    async def test_invalid_url(self):
        with self.assertRaises(InvalidUrl):
            await self.analyzer.analyze("not a url")
        self.assertEqual(self.requests, [])


class TestAnalyzePair(AnalyzerTestCase):
    async def test_one_side_down_still_compares(self):
        report_a, report_b, comparison = await self.analyzer.analyze_pair(
            "https://acme.example.com", "https://down.example.org"
        )

        self.assertTrue(report_a.fetch_ok)
        self.assertFalse(report_b.fetch_ok)
        self.assertEqual(comparison.aggregate_leader, "A")
        self.assertLess(comparison.delta("aggregate"), 0)

    async def test_deeply_nested_markup_on_one_side(self):
        report_a, report_b, comparison = await self.analyzer.analyze_pair(
            "https://good.example.com", "https://bad.example.com"
        )

        self.assertTrue(report_a.fetch_ok)
        self.assertTrue(report_a.signals.get("structured_data_valid").present)
        self.assertTrue(report_b.fetch_ok)
        self.assertFalse(report_b.signals.get("structured_data_valid").present)
        self.assertEqual(comparison.aggregate_leader, "A")

    async def test_bad_second_url_fetches_nothing(self):
        with self.assertRaises(InvalidUrl):
            await self.analyzer.analyze_pair("https://acme.example.com", "ftp://files.example.com")
        self.assertEqual(self.requests, [])


if __name__ == "__main__":
    unittest.main()
