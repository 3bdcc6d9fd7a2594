import unittest
from unittest.mock import MagicMock, patch

import httpx
from fastapi.testclient import TestClient

from defaultanswer_agent.config import Settings
from defaultanswer_agent.errors import StoreUnavailable
from defaultanswer_agent.history import InMemoryHistoryStore
from defaultanswer_agent.main import create_app
from tests.analyzer_test import site_handler
from tests.factories import make_report


def make_client(store=None, **kwargs):
    app = create_app(Settings(), transport=httpx.MockTransport(site_handler), store=store)
    return TestClient(app, **kwargs)


class TestAnalyzeEndpoint(unittest.TestCase):
    def test_healthz(self):
        with make_client() as client:
            self.assertEqual(client.get("/healthz").json(), {"ok": True})

    def test_analyze(self):
        with make_client() as client:
            res = client.post("/analyze", json={"url": "acme.example.com"})

        self.assertEqual(res.status_code, 200)
        body = res.json()
        self.assertTrue(body["ok"])
        self.assertTrue(body["fetchOk"])
        self.assertEqual(body["url"], "https://acme.example.com/")
        self.assertEqual(body["schemaVersion"], "1")
        self.assertIn("fetchedAt", body)
        self.assertIsNone(body["historyDiff"])
        self.assertEqual(
            list(body["scores"]["dimensions"]),
            ["entity_clarity", "answerability", "commercial_clarity", "trust", "retrievability"],
        )

    def test_analyze_404_site(self):
        with make_client() as client:
            res = client.post("/analyze", json={"url": "https://missing.example.org"})

        self.assertEqual(res.status_code, 200)
        body = res.json()
        self.assertTrue(body["ok"])
        self.assertFalse(body["fetchOk"])
        self.assertLessEqual(body["scores"]["aggregate"], 10)

    def test_malformed_url(self):
        with make_client() as client:
            res = client.post("/analyze", json={"url": "not a url"})

        self.assertEqual(res.status_code, 400)
        self.assertFalse(res.json()["ok"])
        self.assertTrue(res.json()["error"])

    def test_missing_field(self):
        with make_client() as client:
            res = client.post("/analyze", json={})

        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["ok"], False)

    def test_history_diff_on_second_scan(self):
        store = InMemoryHistoryStore()
        with make_client(store=store) as client:
            first = client.post("/analyze", json={"url": "https://acme.example.com"}).json()
            second = client.post("/analyze", json={"url": "https://ACME.example.com/"}).json()

        self.assertIsNone(first["historyDiff"])
        diff = second["historyDiff"]
        self.assertTrue(diff["sameSite"])
        self.assertFalse(diff["changed"])
        self.assertEqual(diff["aggregateLeader"], "tie")

    def test_store_failure_does_not_block_analysis(self):
        store = MagicMock()
        store.get.side_effect = StoreUnavailable("History store is unavailable.")
        with make_client(store=store) as client:
            res = client.post("/analyze", json={"url": "https://acme.example.com"})

        self.assertEqual(res.status_code, 200)
        self.assertIsNone(res.json()["historyDiff"])

    def test_unexpected_error_is_500(self):
        with patch("defaultanswer_agent.analyzer.extract", side_effect=RuntimeError("boom")):
            with make_client(raise_server_exceptions=False) as client:
                res = client.post("/analyze", json={"url": "https://acme.example.com"})

        self.assertEqual(res.status_code, 500)
        self.assertEqual(res.json()["ok"], False)


class TestCompareEndpoint(unittest.TestCase):
    def test_compare(self):
        with make_client() as client:
            res = client.post("/compare", json={"urlA": "acme.example.com", "urlB": "https://down.example.org"})

        self.assertEqual(res.status_code, 200)
        body = res.json()
        self.assertTrue(body["ok"])
        self.assertEqual(body["urlA"], "https://acme.example.com/")
        self.assertEqual(body["urlB"], "https://down.example.org/")
        payload = body["payload"]
        self.assertTrue(payload["reportA"]["fetchOk"])
        self.assertFalse(payload["reportB"]["fetchOk"])
        self.assertEqual(payload["comparison"]["aggregateLeader"], "A")

    def test_compare_bad_url(self):
        with make_client() as client:
            res = client.post("/compare", json={"urlA": "acme.example.com", "urlB": "nope"})

        self.assertEqual(res.status_code, 400)
        self.assertFalse(res.json()["ok"])


class TestHistoryEndpoint(unittest.TestCase):
    def test_not_configured(self):
        with make_client() as client:
            res = client.get("/history/latest", params={"url": "https://acme.example.com"})

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["ok"], False)
        self.assertEqual(res.json()["error"], "History not configured")

    def test_single_prior_scan(self):
        store = InMemoryHistoryStore()
        store.put(make_report())
        with make_client(store=store) as client:
            res = client.get("/history/latest", params={"url": "acme.example.com"})

        body = res.json()
        self.assertTrue(body["ok"])
        self.assertEqual(body["latest"]["id"], "scan_1")
        self.assertIsNone(body["previous"])

    def test_store_unavailable(self):
        store = MagicMock()
        store.get.side_effect = StoreUnavailable("History store is unavailable.")
        with make_client(store=store) as client:
            res = client.get("/history/latest", params={"url": "https://acme.example.com"})

        self.assertEqual(res.status_code, 503)
        self.assertEqual(res.json(), {"ok": False, "error": "History store is unavailable."})

    def test_list(self):
        store = InMemoryHistoryStore()
        store.put(make_report(aggregate=40, fetched_at="2026-10-01T12:00:00.000Z"))
        store.put(make_report(aggregate=80, fetched_at="2026-10-02T12:00:00.000Z"))
        with make_client(store=store) as client:
            res = client.get("/history/list", params={"url": "acme.example.com", "limit": 1})

        body = res.json()
        self.assertTrue(body["ok"])
        self.assertEqual(len(body["scans"]), 1)
        scan = body["scans"][0]
        self.assertEqual(scan["id"], "scan_2")
        self.assertEqual(scan["createdAt"], "2026-10-02T12:00:00.000Z")
        self.assertEqual(scan["aggregate"], 80)
        self.assertEqual(scan["readiness"], "strong")
        self.assertEqual(len(scan["hash"]), 64)
        self.assertNotIn("report", scan)

    def test_list_limit_out_of_range(self):
        with make_client(store=InMemoryHistoryStore()) as client:
            res = client.get("/history/list", params={"url": "acme.example.com", "limit": 0})

        self.assertEqual(res.status_code, 400)
        self.assertFalse(res.json()["ok"])

    def test_list_not_configured(self):
        with make_client() as client:
            res = client.get("/history/list", params={"url": "acme.example.com"})

        self.assertEqual(res.json(), {"ok": False, "scans": [], "error": "History not configured"})

    def test_diff_by_scan_id(self):
        store = InMemoryHistoryStore()
        with make_client(store=store) as client:
            client.post("/analyze", json={"url": "https://acme.example.com"})
            client.post("/analyze", json={"url": "https://acme.example.com"})
            res = client.get("/history/diff", params={"scanId": "scan_2"})

        body = res.json()
        self.assertTrue(body["ok"])
        self.assertEqual(body["current"]["id"], "scan_2")
        self.assertEqual(body["previous"]["id"], "scan_1")
        self.assertEqual(body["diff"]["aggregate"]["delta"], 0)
        self.assertFalse(body["diff"]["changed"])

    def test_diff_unknown_scan(self):
        with make_client(store=InMemoryHistoryStore()) as client:
            res = client.get("/history/diff", params={"scanId": "scan_404"})

        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.json(), {"ok": False, "error": "No scan with id scan_404."})

    def test_diff_requires_scan_id(self):
        with make_client(store=InMemoryHistoryStore()) as client:
            res = client.get("/history/diff")

        self.assertEqual(res.status_code, 400)
        self.assertIn("scanId", res.json()["error"])


class TestExportEndpoint(unittest.TestCase):
    def test_export_report_twice(self):
        report = make_report().model_dump(mode="json", by_alias=True)
        with make_client() as client:
            first = client.post("/export/markdown", json={"report": report}).json()
            second = client.post("/export/markdown", json={"report": report}).json()

        self.assertTrue(first["ok"])
        self.assertEqual(first["markdown"], second["markdown"])
        self.assertIn("# AI readiness report: https://acme.example.com/", first["markdown"])

    def test_export_comparison(self):
        with make_client() as client:
            compared = client.post(
                "/compare", json={"urlA": "acme.example.com", "urlB": "https://missing.example.org"}
            ).json()
            res = client.post("/export/markdown", json={"comparison": compared["payload"]["comparison"]})

        self.assertEqual(res.status_code, 200)
        self.assertIn("- Leader: A", res.json()["markdown"])

    def test_export_nothing(self):
        with make_client() as client:
            res = client.post("/export/markdown", json={})

        self.assertEqual(res.status_code, 400)
        self.assertFalse(res.json()["ok"])

    def test_export_incomplete_report(self):
        report = make_report(dimension_scores={"trust": 10}).model_dump(mode="json", by_alias=True)
        with make_client() as client:
            res = client.post("/export/markdown", json={"report": report})

        self.assertEqual(res.status_code, 422)
        self.assertFalse(res.json()["ok"])


if __name__ == "__main__":
    unittest.main()
