"""
SQL-backed implementation of the matching store interfaces.

Every call runs in its own short unit of work and returns DTOs, so no ORM
object or Session ever leaves this module.
"""
import logging
from datetime import datetime
from typing import Callable, List, Optional

from core.exceptions import MatchNotFoundException
from core.matcher.dto import UserContactDTO, MatchDTO, MatchRecordDTO, NotificationRequest
from core.matcher.interfaces import ProfileStore, TenderStore, NotificationStore
from core.scorer.models import BusinessProfileDTO, TenderDTO
from database.models import BusinessProfile, Tender, TenderMatch, User
from database.uow import tender_uow

logger = logging.getLogger(__name__)


def _to_float(value) -> Optional[float]:
    """Numeric columns come back as Decimal."""
    if value is None:
        return None
    return float(value)


def profile_to_dto(profile: BusinessProfile) -> BusinessProfileDTO:
    """Raises InvalidProfileError if the stored value range is inverted."""
    return BusinessProfileDTO(
        user_id=profile.user_id,
        industry_categories=list(profile.industry_categories or []),
        provinces=list(profile.provinces or []),
        preferred_value_min=_to_float(profile.preferred_value_min),
        preferred_value_max=_to_float(profile.preferred_value_max),
        cidb_grading=profile.cidb_grading,
        bbbee_level=profile.bbbee_level,
        email_notifications=bool(profile.email_notifications),
        sms_notifications=bool(profile.sms_notifications),
        contact_email=profile.contact_email,
        phone_number=profile.phone_number,
        business_name=profile.business_name,
    )


def tender_to_dto(tender: Tender) -> TenderDTO:
    return TenderDTO(
        id=tender.id,
        title=tender.title,
        ocid=tender.ocid,
        description=tender.description,
        department=tender.department,
        category=tender.category,
        province=tender.province,
        value_min=_to_float(tender.value_min),
        value_max=_to_float(tender.value_max),
        closing_date=tender.closing_date,
        advertised_date=tender.advertised_date,
        status=tender.status,
        cidb_required=tender.cidb_required,
        bbbee_required=tender.bbbee_required,
        is_active=bool(tender.is_active),
    )


def user_to_contact(user: User) -> UserContactDTO:
    return UserContactDTO(
        id=user.id,
        email=user.email,
        phone_number=user.phone_number,
        display_name=user.display_name,
    )


def match_to_record(
    match: TenderMatch,
    created: bool = True,
    previous_score: Optional[int] = None
) -> MatchRecordDTO:
    return MatchRecordDTO(
        id=match.id,
        user_id=match.user_id,
        tender_id=match.tender_id,
        score=match.match_score,
        reasons=list(match.match_reasons or []),
        is_viewed=bool(match.is_viewed),
        created_at=match.created_at,
        created=created,
        previous_score=previous_score,
    )


class SqlMatchingStore(ProfileStore, TenderStore, NotificationStore):
    """
    PostgreSQL store for profiles, tenders, matches and notifications.

    Args:
        uow_factory: Context manager factory yielding a MatchingRepository.
            Defaults to tender_uow; tests inject a fake.
        tender_limit: Optional cap on active tenders loaded per run
    """

    def __init__(
        self,
        uow_factory: Optional[Callable] = None,
        tender_limit: Optional[int] = None
    ):
        self.uow_factory = uow_factory or tender_uow
        self.tender_limit = tender_limit

    # ProfileStore

    def get_profile(self, user_id: str) -> Optional[BusinessProfileDTO]:
        with self.uow_factory() as repo:
            profile = repo.profiles.get_by_user_id(user_id)
            if profile is None:
                return None
            return profile_to_dto(profile)

    def list_profiled_user_ids(self) -> List[str]:
        with self.uow_factory() as repo:
            return list(repo.profiles.list_user_ids())

    # TenderStore

    def get_active_tenders(self) -> List[TenderDTO]:
        with self.uow_factory() as repo:
            tenders = repo.tenders.get_active_tenders(limit=self.tender_limit)
            return [tender_to_dto(t) for t in tenders]

    def upsert_match(self, match: MatchDTO) -> MatchRecordDTO:
        with self.uow_factory() as repo:
            row, created, previous_score = repo.matches.upsert_match(
                user_id=match.user_id,
                tender_id=match.tender_id,
                score=match.score,
                reasons=list(match.reasons),
            )
            return match_to_record(row, created=created, previous_score=previous_score)

    def get_user(self, user_id: str) -> Optional[UserContactDTO]:
        with self.uow_factory() as repo:
            user = repo.users.get_by_id(user_id)
            if user is None:
                return None
            return user_to_contact(user)

    # NotificationStore

    def create_notification(self, request: NotificationRequest) -> int:
        with self.uow_factory() as repo:
            notification = repo.notifications.create_notification(
                user_id=request.user_id,
                notification_type=request.channel,
                recipient=request.recipient,
                message=request.body,
                subject=request.subject,
                tender_id=request.tender_id,
                event_data=request.metadata,
            )
            return notification.id

    def update_notification_status(
        self,
        notification_id: int,
        status: str,
        sent_at: Optional[datetime] = None,
        error_message: Optional[str] = None
    ) -> None:
        with self.uow_factory() as repo:
            repo.notifications.update_status(
                notification_id,
                status,
                sent_at=sent_at,
                error_message=error_message,
            )

    # Engagement

    def get_user_matches(self, user_id: str) -> List[MatchRecordDTO]:
        """A user's matches on active tenders, best first."""
        with self.uow_factory() as repo:
            rows = repo.matches.get_user_matches(user_id)
            return [match_to_record(match, created=False) for match, _ in rows]

    def mark_match_viewed(self, user_id: str, tender_id: int) -> bool:
        """
        Mark a match as viewed.

        Returns:
            True if the flag flipped, False if it was already viewed

        Raises:
            MatchNotFoundException: If the user has no match for the tender
        """
        with self.uow_factory() as repo:
            if repo.matches.get_existing_match(user_id, tender_id) is None:
                raise MatchNotFoundException(
                    f"No match for user {user_id} and tender {tender_id}"
                )
            return repo.matches.mark_viewed(user_id, tender_id)
