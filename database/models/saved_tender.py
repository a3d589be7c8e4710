from sqlalchemy import Column, Integer, Text, TIMESTAMP, ForeignKey, UniqueConstraint
from sqlalchemy.sql import text as sql_text
from sqlalchemy.orm import relationship

from .base import Base

class SavedTender(Base):
    """A tender bookmarked by a user."""
    __tablename__ = 'saved_tenders'

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Text, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    tender_id = Column(Integer, ForeignKey('tenders.id'), nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=sql_text("timezone('UTC', now())"))

    user = relationship("User", back_populates="saved_tenders")
    tender = relationship("Tender")

    __table_args__ = (
        UniqueConstraint('user_id', 'tender_id', name='uq_saved_tender_user_tender'),
    )
