"""
Daily Digest - one summary email per user listing their unviewed matches.
"""
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from core.matcher.dto import NotificationRequest, CHANNEL_EMAIL
from core.matcher.interfaces import NotificationDispatcher, NotificationStore
from notification.message_builder import NotificationMessageBuilder, DigestMatch, DIGEST_MAX_LISTED
from notification.service import deliver_notification

logger = logging.getLogger(__name__)


@dataclass
class DigestRunResult:
    users_considered: int = 0
    digests_sent: int = 0
    digests_failed: int = 0
    users_without_matches: int = 0


class DigestService:
    """
    Sends the daily tender digest.

    Only users with email notifications on and at least one unviewed match
    on an active tender receive a digest. Delivery is synchronous; this runs
    as a scheduled batch, not inside a matching run.
    """

    def __init__(
        self,
        uow_factory: Callable,
        store: NotificationStore,
        dispatcher: NotificationDispatcher,
        base_url: Optional[str] = None,
        max_listed: int = DIGEST_MAX_LISTED
    ):
        self.uow_factory = uow_factory
        self.store = store
        self.dispatcher = dispatcher
        self.base_url = base_url
        self.max_listed = max_listed

    def _collect(self) -> List[Tuple[str, str, List[DigestMatch]]]:
        """Return (user_id, recipient, matches) for every email subscriber."""
        collected = []
        with self.uow_factory() as repo:
            for profile in repo.profiles.list_email_subscribers():
                user = repo.users.get_by_id(profile.user_id)
                recipient = profile.contact_email or (user.email if user else None)
                if not recipient:
                    logger.debug(f"No email address for user {profile.user_id}, skipping digest")
                    continue

                matches = [
                    DigestMatch(
                        tender_title=tender.title,
                        score=match.match_score,
                        department=tender.department,
                        closing_date=tender.closing_date,
                    )
                    for match, tender in repo.matches.get_unviewed_matches(profile.user_id)
                ]
                collected.append((profile.user_id, recipient, matches))
        return collected

    def send_daily_digests(self) -> DigestRunResult:
        result = DigestRunResult()

        for user_id, recipient, matches in self._collect():
            result.users_considered += 1
            try:
                if self.send_digest(user_id, recipient, matches):
                    result.digests_sent += 1
                elif matches:
                    result.digests_failed += 1
                else:
                    result.users_without_matches += 1
            except Exception as e:
                logger.error(f"Digest failed for user {user_id}: {e}", exc_info=True)
                result.digests_failed += 1

        logger.info(
            f"Daily digest complete: {result.digests_sent} sent, {result.digests_failed} failed, "
            f"{result.users_without_matches} users without new matches"
        )
        return result

    def send_digest(self, user_id: str, recipient: str, matches: List[DigestMatch]) -> bool:
        """Send one user's digest. Returns False when there was nothing to send or delivery failed."""
        digest = NotificationMessageBuilder.build_digest(
            matches, base_url=self.base_url, max_listed=self.max_listed
        )
        if digest is None:
            return False

        request = NotificationRequest(
            user_id=user_id,
            channel=CHANNEL_EMAIL,
            recipient=recipient,
            subject=digest.subject,
            body=digest.body,
            metadata={
                'html_body': digest.html_body,
                'match_count': len(matches),
                'event_type': 'daily_digest',
            },
        )
        return deliver_notification(request, self.store, self.dispatcher)
