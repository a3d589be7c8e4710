import logging
from typing import List, Optional, Tuple

from sqlalchemy import select, update, func
from sqlalchemy.dialects.postgresql import insert

from database.models import TenderMatch, Tender
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

DEFAULT_MATCH_LIST_LIMIT = 50


class MatchRepository(BaseRepository):
    def get_existing_match(self, user_id: str, tender_id: int) -> Optional[TenderMatch]:
        stmt = select(TenderMatch).where(
            TenderMatch.user_id == user_id,
            TenderMatch.tender_id == tender_id
        )
        return self._one_or_none(stmt)

    def upsert_match(
        self,
        user_id: str,
        tender_id: int,
        score: int,
        reasons: List[str]
    ) -> Tuple[TenderMatch, bool, Optional[int]]:
        """
        Insert or update the match for (user_id, tender_id).

        Only score and reasons are overwritten; is_viewed and created_at
        survive re-runs.

        A transaction-scoped advisory lock on the pair serializes concurrent
        upserts, so exactly one caller sees created=True and the others read
        the committed previous_score.

        Returns:
            (match, created, previous_score)
        """
        self.db.execute(select(func.pg_advisory_xact_lock(func.hashtext(user_id), tender_id)))

        previous_score = self.db.execute(
            select(TenderMatch.match_score).where(
                TenderMatch.user_id == user_id,
                TenderMatch.tender_id == tender_id
            )
        ).scalar_one_or_none()

        stmt = insert(TenderMatch).values(
            user_id=user_id,
            tender_id=tender_id,
            match_score=score,
            match_reasons=reasons,
            is_viewed=False
        ).on_conflict_do_update(
            index_elements=['user_id', 'tender_id'],
            set_={
                'match_score': score,
                'match_reasons': reasons,
                'updated_at': func.timezone('UTC', func.now())
            }
        )
        self.db.execute(stmt)

        match = self.db.execute(
            select(TenderMatch).where(
                TenderMatch.user_id == user_id,
                TenderMatch.tender_id == tender_id
            ).execution_options(populate_existing=True)
        ).scalar_one()

        return match, previous_score is None, previous_score

    def get_user_matches(
        self,
        user_id: str,
        limit: int = DEFAULT_MATCH_LIST_LIMIT
    ) -> List[Tuple[TenderMatch, Tender]]:
        """A user's matches on active tenders, best score then newest first."""
        stmt = select(TenderMatch, Tender).join(
            Tender, TenderMatch.tender_id == Tender.id
        ).where(
            TenderMatch.user_id == user_id,
            Tender.is_active.is_(True)
        ).order_by(
            TenderMatch.match_score.desc(),
            TenderMatch.created_at.desc()
        ).limit(limit)
        return [(row[0], row[1]) for row in self.db.execute(stmt).all()]

    def get_unviewed_matches(self, user_id: str) -> List[Tuple[TenderMatch, Tender]]:
        stmt = select(TenderMatch, Tender).join(
            Tender, TenderMatch.tender_id == Tender.id
        ).where(
            TenderMatch.user_id == user_id,
            TenderMatch.is_viewed.is_(False),
            Tender.is_active.is_(True)
        ).order_by(
            TenderMatch.match_score.desc(),
            TenderMatch.created_at.desc()
        )
        return [(row[0], row[1]) for row in self.db.execute(stmt).all()]

    def mark_viewed(self, user_id: str, tender_id: int) -> bool:
        """
        Flip is_viewed from false to true.

        Returns:
            True if the flag changed, False if it was already set
        """
        result = self.db.execute(
            update(TenderMatch)
            .where(
                TenderMatch.user_id == user_id,
                TenderMatch.tender_id == tender_id,
                TenderMatch.is_viewed.is_(False)
            )
            .values(is_viewed=True)
        )
        return result.rowcount > 0

    def count_user_matches(self, user_id: str) -> int:
        stmt = select(func.count(TenderMatch.id)).join(
            Tender, TenderMatch.tender_id == Tender.id
        ).where(
            TenderMatch.user_id == user_id,
            Tender.is_active.is_(True)
        )
        return self._count(stmt)
