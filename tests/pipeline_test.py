"""
Batch pipeline scenarios against an in-memory backend
"""

import shutil
import tempfile
import unittest
from pathlib import Path

from url2pdf.models import OutcomeStatus
from url2pdf.pipeline import render_url, run_batch
from url2pdf.reporting import summarize
from url2pdf.rendering.engine import (
    ContextUnavailableError,
    ExportError,
    NavigationError,
    NavigationTimeoutError,
    RenderingBackend,
)


class FakeBackend(RenderingBackend):
    """
    Writes a small fake PDF for every URL unless told otherwise.
    failures: url -> exception raised from open() (or export_pdf() for ExportError).
    """
    def __init__(self, failures=None):
        self.failures = failures or {}
        self.calls = []
        self.current_url = None
        self.started = 0
        self.closed = 0

    def start(self):
        self.started += 1

    def open(self, url, timeout_ms):
        self.calls.append(("open", url, timeout_ms))
        self.current_url = url
        error = self.failures.get(url)
        if error is not None and not isinstance(error, ExportError):
            raise error

    def export_pdf(self, save_path):
        self.calls.append(("export_pdf", self.current_url, save_path))
        error = self.failures.get(self.current_url)
        if isinstance(error, ExportError):
            raise error
        Path(save_path).write_bytes(b"%PDF-1.4 fake")

    def close(self):
        self.closed += 1


class TestRunBatch(unittest.TestCase):
    def setUp(self):
        self.out_dir = Path(tempfile.mkdtemp())
        self.addCleanup(shutil.rmtree, self.out_dir, ignore_errors=True)

    def test_all_urls_succeed(self):
        backend = FakeBackend()
        urls = ["http://example.com", "https://example.org/page"]

        batch = run_batch(backend, urls, self.out_dir, 5000)

        self.assertEqual(batch.results, {"http://example.com": True, "https://example.org/page": True})
        self.assertTrue((self.out_dir / "http_example_com.pdf").exists())
        self.assertTrue((self.out_dir / "https_example_org_page.pdf").exists())
        self.assertFalse(batch.aborted)
        self.assertEqual(batch.not_attempted, [])

    def test_failure_does_not_stop_the_batch(self):
        """Scenario: URLs after a failing one are still processed, in order."""
        backend = FakeBackend(failures={"http://bad.invalid": NavigationError("net::ERR_NAME_NOT_RESOLVED")})
        urls = ["http://a.com", "http://bad.invalid", "http://c.com"]

        batch = run_batch(backend, urls, self.out_dir, 5000)

        opened = [call[1] for call in backend.calls if call[0] == "open"]
        self.assertEqual(opened, urls)
        self.assertEqual(list(batch.results), urls)
        self.assertEqual(batch.results["http://bad.invalid"], False)
        self.assertTrue((self.out_dir / "http_c_com.pdf").exists())
        self.assertFalse((self.out_dir / "http_bad_invalid.pdf").exists())

    def test_failed_positions_are_reported_in_order(self):
        urls = [f"http://site{i}.com" for i in range(6)]
        failing = {urls[1]: NavigationTimeoutError("Timeout 5000ms exceeded."),
                   urls[4]: ExportError("Printing failed")}
        backend = FakeBackend(failures=failing)

        summary = summarize(run_batch(backend, urls, self.out_dir, 5000).results)

        self.assertEqual(summary.succeeded, 4)
        self.assertEqual(summary.failed, 2)
        self.assertEqual(summary.failed_urls, [urls[1], urls[4]])

    def test_example_and_timeout_scenario(self):
        backend = FakeBackend(failures={"http://bad.invalid": NavigationTimeoutError("Timeout 5000ms exceeded.")})

        batch = run_batch(backend, ["http://example.com", "http://bad.invalid"], self.out_dir, 5000)
        summary = summarize(batch.results)

        self.assertEqual(sorted(p.name for p in self.out_dir.iterdir()), ["http_example_com.pdf"])
        self.assertEqual((summary.succeeded, summary.failed), (1, 1))
        self.assertEqual(summary.failed_urls, ["http://bad.invalid"])

    def test_timeout_is_passed_to_every_navigation(self):
        backend = FakeBackend()
        run_batch(backend, ["http://a.com", "http://b.com"], self.out_dir, 1234)
        timeouts = {call[2] for call in backend.calls if call[0] == "open"}
        self.assertEqual(timeouts, {1234})

    def test_zero_urls(self):
        backend = FakeBackend()

        batch = run_batch(backend, [], self.out_dir, 5000)
        summary = summarize(batch.results)

        self.assertEqual(backend.calls, [])
        self.assertEqual((summary.succeeded, summary.failed, summary.failed_urls), (0, 0, []))

    def test_custom_name_function(self):
        backend = FakeBackend()
        run_batch(backend, ["http://a.com"], self.out_dir, 5000, name_fn=lambda url: "custom")
        self.assertTrue((self.out_dir / "custom.pdf").exists())

    def test_context_loss_returns_partial_results(self):
        """Scenario: browser dies on the second URL; first result survives, rest not attempted."""
        urls = ["http://a.com", "http://b.com", "http://c.com"]
        backend = FakeBackend(failures={"http://b.com": ContextUnavailableError("Browser is not running")})

        batch = run_batch(backend, urls, self.out_dir, 5000)

        self.assertTrue(batch.aborted)
        self.assertEqual(batch.results, {"http://a.com": True, "http://b.com": False})
        self.assertEqual(batch.not_attempted, ["http://c.com"])
        self.assertEqual(batch.outcomes[-1].status, OutcomeStatus.CONTEXT_LOST)

    def test_keyboard_interrupt_returns_partial_results(self):
        urls = ["http://a.com", "http://b.com", "http://c.com"]
        backend = FakeBackend(failures={"http://b.com": KeyboardInterrupt()})

        batch = run_batch(backend, urls, self.out_dir, 5000)

        self.assertTrue(batch.interrupted)
        self.assertEqual(batch.results, {"http://a.com": True})
        self.assertEqual(batch.not_attempted, ["http://b.com", "http://c.com"])

    def test_duplicate_url_keeps_first_position(self):
        backend = FakeBackend()
        batch = run_batch(backend, ["http://a.com", "http://b.com", "http://a.com"], self.out_dir, 5000)
        self.assertEqual(list(batch.results), ["http://a.com", "http://b.com"])
        self.assertEqual(len(batch.outcomes), 3)


class TestRenderUrl(unittest.TestCase):
    def setUp(self):
        self.out_dir = Path(tempfile.mkdtemp())
        self.addCleanup(shutil.rmtree, self.out_dir, ignore_errors=True)

    def test_success_outcome(self):
        outcome = render_url(FakeBackend(), "http://example.com", self.out_dir, 5000)
        self.assertTrue(outcome.succeeded)
        self.assertEqual(outcome.save_path, self.out_dir / "http_example_com.pdf")
        self.assertIsNone(outcome.reason)

    def test_error_types_map_to_statuses(self):
        cases = [
            (NavigationTimeoutError("Timeout 5000ms exceeded."), OutcomeStatus.NAVIGATION_TIMEOUT),
            (NavigationError("net::ERR_CONNECTION_REFUSED"), OutcomeStatus.NAVIGATION_FAILED),
            (ExportError("Printing failed"), OutcomeStatus.EXPORT_FAILED),
            (RuntimeError("boom"), OutcomeStatus.RENDER_FAILED),
        ]
        for error, expected in cases:
            with self.subTest(error=error):
                backend = FakeBackend(failures={"http://x.com": error})
                outcome = render_url(backend, "http://x.com", self.out_dir, 5000)
                self.assertFalse(outcome.succeeded)
                self.assertEqual(outcome.status, expected)
                self.assertIn(str(error), outcome.reason)

    def test_failure_is_logged_with_url_and_reason(self):
        backend = FakeBackend(failures={"http://x.com": NavigationError("net::ERR_NAME_NOT_RESOLVED")})
        with self.assertLogs("url2pdf", level="ERROR") as logs:
            render_url(backend, "http://x.com", self.out_dir, 5000)
        self.assertIn("http://x.com", logs.output[0])
        self.assertIn("net::ERR_NAME_NOT_RESOLVED", logs.output[0])

    def test_context_loss_propagates(self):
        backend = FakeBackend(failures={"http://x.com": ContextUnavailableError("gone")})
        with self.assertRaises(ContextUnavailableError):
            render_url(backend, "http://x.com", self.out_dir, 5000)


if __name__ == "__main__":
    unittest.main()
