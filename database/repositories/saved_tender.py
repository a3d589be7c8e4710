import logging
from typing import List

from sqlalchemy import select, delete, func
from sqlalchemy.dialects.postgresql import insert

from database.models import SavedTender, Tender
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class SavedTenderRepository(BaseRepository):
    def save_tender(self, user_id: str, tender_id: int) -> SavedTender:
        """Bookmark a tender. Saving twice keeps a single row."""
        stmt = insert(SavedTender).values(
            user_id=user_id,
            tender_id=tender_id
        ).on_conflict_do_nothing(index_elements=['user_id', 'tender_id'])
        self.db.execute(stmt)
        return self.db.execute(
            select(SavedTender).where(
                SavedTender.user_id == user_id,
                SavedTender.tender_id == tender_id
            )
        ).scalar_one()

    def unsave_tender(self, user_id: str, tender_id: int) -> bool:
        result = self.db.execute(
            delete(SavedTender).where(
                SavedTender.user_id == user_id,
                SavedTender.tender_id == tender_id
            )
        )
        return result.rowcount > 0

    def is_saved(self, user_id: str, tender_id: int) -> bool:
        stmt = select(SavedTender.id).where(
            SavedTender.user_id == user_id,
            SavedTender.tender_id == tender_id
        )
        return self.db.execute(stmt).first() is not None

    def get_saved_tenders(self, user_id: str) -> List[Tender]:
        stmt = select(Tender).join(
            SavedTender, SavedTender.tender_id == Tender.id
        ).where(
            SavedTender.user_id == user_id
        ).order_by(SavedTender.created_at.desc())
        return self.db.execute(stmt).scalars().all()

    def count_saved(self, user_id: str) -> int:
        stmt = select(func.count(SavedTender.id)).where(SavedTender.user_id == user_id)
        return self._count(stmt)
