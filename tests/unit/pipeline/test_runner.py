import threading
import unittest
from unittest.mock import MagicMock

from core.app_context import AppContext
from core.config_loader import AppConfig, DatabaseConfig, MatchingConfig
from core.matcher import MatchOrchestrator
from core.matcher.dto import BatchMatchingResult, MatchingRunResult
from notification.digest import DigestRunResult
from pipeline import run_matching_pipeline, run_user_matching, run_digest_pipeline
from tests.mocks.matching_fakes import InMemoryMatchingStore
from core.scorer import BusinessProfileDTO, TenderDTO


def make_context(matching=None, orchestrator=None, digest_service=None):
    config = AppConfig(
        database=DatabaseConfig(url="postgresql://test"),
        matching=matching if matching is not None else MatchingConfig()
    )
    return AppContext(
        config=config,
        store=MagicMock(),
        orchestrator=orchestrator or MagicMock(),
        digest_service=digest_service
    )


class TestRunMatchingPipeline(unittest.TestCase):

    def test_disabled_in_config(self):
        ctx = make_context(matching=MatchingConfig(enabled=False))

        result = run_matching_pipeline(ctx)

        self.assertTrue(result.success)
        self.assertEqual(result.error, "Matching disabled in config")
        ctx.orchestrator.run_matching_for_all_users.assert_not_called()

    def test_stop_event_skips_run(self):
        ctx = make_context()
        stop_event = threading.Event()
        stop_event.set()

        result = run_matching_pipeline(ctx, stop_event=stop_event)

        self.assertEqual(result.error, "Stop requested")
        ctx.orchestrator.run_matching_for_all_users.assert_not_called()

    def test_success_reports_counts(self):
        ctx = make_context(matching=MatchingConfig(max_workers=3))
        ctx.orchestrator.run_matching_for_all_users.return_value = BatchMatchingResult(
            users_total=3, users_matched=3, matches_saved=7, notifications_enqueued=2
        )
        stages = []

        result = run_matching_pipeline(ctx, status_callback=stages.append)

        self.assertTrue(result.success)
        self.assertEqual((result.users_count, result.saved_count, result.notified_count), (3, 7, 2))
        self.assertEqual(stages, ["matching", "completed"])
        ctx.orchestrator.run_matching_for_all_users.assert_called_once_with(max_workers=3)

    def test_partial_failure(self):
        ctx = make_context()
        ctx.orchestrator.run_matching_for_all_users.return_value = BatchMatchingResult(
            users_total=2, users_matched=1, failed_user_ids=["user-2"]
        )

        result = run_matching_pipeline(ctx)

        self.assertFalse(result.success)
        self.assertEqual(result.failed_count, 1)
        self.assertEqual(result.error, "1 users failed")

    def test_batch_exception_reported(self):
        ctx = make_context()
        ctx.orchestrator.run_matching_for_all_users.side_effect = RuntimeError("db down")

        result = run_matching_pipeline(ctx)

        self.assertFalse(result.success)
        self.assertEqual(result.error, "db down")

    def test_end_to_end_with_fakes(self):
        store = InMemoryMatchingStore()
        store.add_user("user-1", email="owner@acme.co.za")
        store.add_profile(BusinessProfileDTO(user_id="user-1", industry_categories=["Technology"]))
        store.add_tender(TenderDTO(id=1, title="Laptops", category="Technology"))
        ctx = make_context(orchestrator=MatchOrchestrator(store, store))

        result = run_matching_pipeline(ctx)

        self.assertTrue(result.success)
        self.assertEqual(result.saved_count, 1)
        self.assertEqual(store.matches[("user-1", 1)].score, 100)


class TestRunUserMatching(unittest.TestCase):

    def test_success(self):
        ctx = make_context()
        ctx.orchestrator.run_matching.return_value = MatchingRunResult(
            user_id="user-1", matches_saved=2, notifications_enqueued=1
        )

        result = run_user_matching(ctx, "user-1")

        self.assertTrue(result.success)
        self.assertEqual(result.saved_count, 2)
        self.assertEqual(result.notified_count, 1)

    def test_skipped_user(self):
        ctx = make_context()
        ctx.orchestrator.run_matching.return_value = MatchingRunResult(
            user_id="user-1", skipped=True, skip_reason="no_profile"
        )

        result = run_user_matching(ctx, "user-1")

        self.assertTrue(result.success)
        self.assertEqual(result.users_count, 0)
        self.assertEqual(result.error, "no_profile")

    def test_failure(self):
        ctx = make_context()
        ctx.orchestrator.run_matching.side_effect = RuntimeError("db down")

        result = run_user_matching(ctx, "user-1")

        self.assertFalse(result.success)
        self.assertEqual(result.failed_count, 1)


class TestRunDigestPipeline(unittest.TestCase):

    def test_skipped_without_digest_service(self):
        result = run_digest_pipeline(make_context())

        self.assertTrue(result.success)
        self.assertEqual(result.error, "Notifications disabled in config")

    def test_counts(self):
        digest_service = MagicMock()
        digest_service.send_daily_digests.return_value = DigestRunResult(
            users_considered=3, digests_sent=2, digests_failed=1
        )

        result = run_digest_pipeline(make_context(digest_service=digest_service))

        self.assertFalse(result.success)
        self.assertEqual(result.sent_count, 2)
        self.assertEqual(result.failed_count, 1)

    def test_exception(self):
        digest_service = MagicMock()
        digest_service.send_daily_digests.side_effect = RuntimeError("smtp down")

        result = run_digest_pipeline(make_context(digest_service=digest_service))

        self.assertFalse(result.success)
        self.assertEqual(result.error, "smtp down")


if __name__ == '__main__':
    unittest.main()
