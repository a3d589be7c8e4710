#!/usr/bin/env python3
"""
Match Orchestrator - Score the tender catalog for a user and act on the results.

For one user:
1. Load the business profile (no profile = nothing to match, logged skip)
2. Load the active tender catalog
3. Score every tender with the ScoringEngine
4. Upsert a match for every score >= MATCH_THRESHOLD
5. Enqueue email/SMS notifications for scores >= HIGH_PRIORITY_THRESHOLD,
   gated by the profile's notification flags and available contacts

Match persistence is synchronous and errors propagate. Notifications are
handed to a NotificationQueue and never block or abort matching.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import List, Optional
import logging
import time

from core.scorer import ScoringEngine, BusinessProfileDTO, TenderDTO, TenderScore
from core.matcher.dto import (
    CHANNEL_EMAIL, CHANNEL_SMS,
    UserContactDTO, MatchDTO, MatchRecordDTO, NotificationRequest,
    MatchingRunResult, BatchMatchingResult,
)
from core.matcher.interfaces import ProfileStore, TenderStore, NotificationQueue

logger = logging.getLogger(__name__)

# Policy constants, not user-configurable
MATCH_THRESHOLD = 50
HIGH_PRIORITY_THRESHOLD = 80

MATCH_SUBJECT_TEMPLATE = "New Tender Match: {score}% Match Found"
MATCH_BODY_TEMPLATE = (
    'A new tender "{title}" matches your business profile with {score}% '
    'compatibility. Check TenderFind SA for details.'
)


def build_match_message(tender_title: str, score: int) -> tuple:
    """Return (subject, body) for a high-priority match notification."""
    subject = MATCH_SUBJECT_TEMPLATE.format(score=score)
    body = MATCH_BODY_TEMPLATE.format(title=tender_title, score=score)
    return subject, body


class MatchOrchestrator:
    """
    Runs matching for one user or for every profiled user.

    Holds no per-run state, so concurrent runs for different users are safe.
    """

    def __init__(
        self,
        profile_store: ProfileStore,
        tender_store: TenderStore,
        notification_queue: Optional[NotificationQueue] = None,
        scoring_engine: Optional[ScoringEngine] = None
    ):
        self.profile_store = profile_store
        self.tender_store = tender_store
        self.notification_queue = notification_queue
        self.scoring_engine = scoring_engine or ScoringEngine()

    def run_matching(self, user_id: str) -> MatchingRunResult:
        """Match one user against all active tenders."""
        start = time.time()
        result = MatchingRunResult(user_id=user_id)

        profile = self.profile_store.get_profile(user_id)
        if profile is None:
            logger.info(f"No business profile found for user {user_id}, skipping matching")
            result.skipped = True
            result.skip_reason = "no_profile"
            return result

        user = self.tender_store.get_user(user_id)
        if user is None:
            logger.info(f"User {user_id} not found, skipping matching")
            result.skipped = True
            result.skip_reason = "no_user"
            return result

        tenders = self.tender_store.get_active_tenders()
        logger.info(f"Matching user {user_id} against {len(tenders)} active tenders")

        for tender in tenders:
            result.tenders_evaluated += 1

            scored = self._score_safely(profile, tender)
            if scored is None:
                result.scoring_errors += 1
                continue

            if scored.score < MATCH_THRESHOLD:
                continue

            record = self.tender_store.upsert_match(MatchDTO(
                user_id=user_id,
                tender_id=tender.id,
                score=scored.score,
                reasons=scored.reasons,
            ))
            result.matches_saved += 1

            if scored.score >= HIGH_PRIORITY_THRESHOLD:
                result.high_priority_matches += 1
                if self._should_notify(record):
                    requests = self.build_match_notifications(profile, user, tender, scored.score)
                    result.notifications_enqueued += self._enqueue(requests)

        result.execution_time = time.time() - start
        logger.info(
            f"Matching for user {user_id} complete: {result.matches_saved} matches saved, "
            f"{result.high_priority_matches} high priority, "
            f"{result.notifications_enqueued} notifications queued in {result.execution_time:.2f}s"
        )
        return result

    def run_matching_for_all_users(self, max_workers: int = 1) -> BatchMatchingResult:
        """
        Match every user holding a business profile.

        A failure for one user is logged and recorded; the batch continues.
        """
        start = time.time()
        batch = BatchMatchingResult()

        user_ids = self.profile_store.list_profiled_user_ids()
        batch.users_total = len(user_ids)
        logger.info(f"Starting matching process for {len(user_ids)} users")

        if max_workers <= 1:
            for user_id in user_ids:
                try:
                    run = self.run_matching(user_id)
                except Exception as e:
                    logger.error(f"Matching failed for user {user_id}: {e}", exc_info=True)
                    batch.failed_user_ids.append(user_id)
                    continue
                self._accumulate(batch, run)
        else:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                futures = {
                    executor.submit(self.run_matching, user_id): user_id
                    for user_id in user_ids
                }
                for future in as_completed(futures):
                    user_id = futures[future]
                    try:
                        run = future.result()
                    except Exception as e:
                        logger.error(f"Matching failed for user {user_id}: {e}", exc_info=True)
                        batch.failed_user_ids.append(user_id)
                        continue
                    self._accumulate(batch, run)

        batch.execution_time = time.time() - start
        logger.info(
            f"Matching process completed: {batch.users_matched}/{batch.users_total} users matched, "
            f"{batch.users_skipped} skipped, {len(batch.failed_user_ids)} failed, "
            f"{batch.matches_saved} matches saved in {batch.execution_time:.2f}s"
        )
        return batch

    def build_match_notifications(
        self,
        profile: BusinessProfileDTO,
        user: UserContactDTO,
        tender: TenderDTO,
        score: int
    ) -> List[NotificationRequest]:
        """Build one request per channel the user opted into and can be reached on."""
        subject, body = build_match_message(tender.title, score)
        metadata = {
            'tender_title': tender.title,
            'department': tender.department,
            'score': score,
        }

        requests = []

        email = profile.contact_email or user.email
        if profile.email_notifications and email:
            requests.append(NotificationRequest(
                user_id=user.id,
                channel=CHANNEL_EMAIL,
                recipient=email,
                subject=subject,
                body=body,
                tender_id=tender.id,
                metadata=dict(metadata),
            ))

        phone = profile.phone_number or user.phone_number
        if profile.sms_notifications and phone:
            requests.append(NotificationRequest(
                user_id=user.id,
                channel=CHANNEL_SMS,
                recipient=phone,
                subject=None,
                body=body,
                tender_id=tender.id,
                metadata=dict(metadata),
            ))

        return requests

    def _score_safely(self, profile: BusinessProfileDTO, tender: TenderDTO) -> Optional[TenderScore]:
        try:
            return self.scoring_engine.score(profile, tender)
        except Exception as e:
            logger.error(f"Scoring failed for user {profile.user_id}, tender {tender.id}: {e}", exc_info=True)
            return None

    @staticmethod
    def _should_notify(record: MatchRecordDTO) -> bool:
        """Notify new matches, and existing ones that just crossed the high-priority line."""
        if record.created:
            return True
        return record.previous_score is None or record.previous_score < HIGH_PRIORITY_THRESHOLD

    def _enqueue(self, requests: List[NotificationRequest]) -> int:
        if not requests:
            return 0
        if self.notification_queue is None:
            logger.debug("Notification queue not configured, skipping notifications")
            return 0

        enqueued = 0
        for request in requests:
            try:
                self.notification_queue.enqueue(request)
                enqueued += 1
            except Exception as e:
                logger.error(f"Failed to enqueue {request.channel} notification for user {request.user_id}: {e}")
        return enqueued

    @staticmethod
    def _accumulate(batch: BatchMatchingResult, run: MatchingRunResult) -> None:
        if run.skipped:
            batch.users_skipped += 1
            return
        batch.users_matched += 1
        batch.matches_saved += run.matches_saved
        batch.notifications_enqueued += run.notifications_enqueued
