import logging
from typing import List, Optional, Dict, Any

from sqlalchemy import select, update, or_, func

from database.models import Tender
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_LIMIT = 50


class TenderRepository(BaseRepository):
    def get_by_id(self, tender_id: int) -> Optional[Tender]:
        stmt = select(Tender).where(Tender.id == tender_id)
        return self._one_or_none(stmt)

    def get_by_ocid(self, ocid: str) -> Optional[Tender]:
        stmt = select(Tender).where(Tender.ocid == ocid)
        return self._one_or_none(stmt)

    def get_active_tenders(self, limit: Optional[int] = None) -> List[Tender]:
        stmt = select(Tender).where(
            Tender.status == 'active',
            Tender.is_active.is_(True)
        ).order_by(Tender.id)

        if limit is not None:
            stmt = stmt.limit(limit)

        return self.db.execute(stmt).scalars().all()

    def count_active_tenders(self) -> int:
        stmt = select(func.count(Tender.id)).where(
            Tender.status == 'active',
            Tender.is_active.is_(True)
        )
        return self._count(stmt)

    def create_tender(self, tender_data: Dict[str, Any]) -> Tender:
        tender = Tender(**tender_data)
        self.db.add(tender)
        self.db.flush()  # Generate ID
        return tender

    def deactivate_tender(self, tender_id: int) -> bool:
        """
        Take a tender out of the active catalog.

        Matches for the tender are kept; listings filter them out.
        """
        result = self.db.execute(
            update(Tender)
            .where(Tender.id == tender_id, Tender.is_active.is_(True))
            .values(is_active=False)
        )
        deactivated = result.rowcount > 0
        if deactivated:
            logger.info(f"Deactivated tender {tender_id}")
        return deactivated

    def search_tenders(
        self,
        category: Optional[str] = None,
        province: Optional[str] = None,
        value_min: Optional[float] = None,
        value_max: Optional[float] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = DEFAULT_SEARCH_LIMIT,
        offset: int = 0
    ) -> List[Tender]:
        """Filter the active catalog, newest advertised first."""
        stmt = select(Tender).where(Tender.is_active.is_(True))

        if category:
            stmt = stmt.where(Tender.category == category)
        if province:
            stmt = stmt.where(Tender.province == province)
        if value_min is not None:
            stmt = stmt.where(Tender.value_max >= value_min)
        if value_max is not None:
            stmt = stmt.where(Tender.value_min <= value_max)
        if status:
            stmt = stmt.where(Tender.status == status)
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(or_(
                Tender.title.ilike(pattern),
                Tender.description.ilike(pattern)
            ))

        stmt = stmt.order_by(Tender.advertised_date.desc().nullslast()).limit(limit).offset(offset)
        return self.db.execute(stmt).scalars().all()
