import logging
from typing import Dict

from sqlalchemy.orm import Session

from database.repositories import (
    UserRepository,
    ProfileRepository,
    TenderRepository,
    MatchRepository,
    SavedTenderRepository,
    NotificationRepository,
)

logger = logging.getLogger(__name__)


class MatchingRepository:
    """
    All repositories bound to one Session.

    Handed out by tender_uow() so a unit of work can span users, profiles,
    tenders, matches and notifications under a single transaction.
    """

    def __init__(self, db: Session):
        self.db = db
        self.users = UserRepository(db)
        self.profiles = ProfileRepository(db)
        self.tenders = TenderRepository(db)
        self.matches = MatchRepository(db)
        self.saved_tenders = SavedTenderRepository(db)
        self.notifications = NotificationRepository(db)

    def get_stats(self, user_id: str) -> Dict[str, int]:
        """Dashboard counters for a user."""
        return {
            'active_tenders': self.tenders.count_active_tenders(),
            'matching_tenders': self.matches.count_user_matches(user_id),
            'saved_tenders': self.saved_tenders.count_saved(user_id),
        }

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
