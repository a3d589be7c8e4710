from sqlalchemy import Column, Integer, Text, TIMESTAMP, ForeignKey, Boolean, UniqueConstraint, Index
from sqlalchemy.sql import text as sql_text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import relationship

from .base import Base


class TenderMatch(Base):
    """
    Stores the latest score of a tender for a user.

    At most one row per (user, tender); re-runs update score and reasons
    in place and keep is_viewed and created_at.
    """
    __tablename__ = 'tender_matches'

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Text, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    tender_id = Column(Integer, ForeignKey('tenders.id'), nullable=False)

    match_score = Column(Integer, nullable=False)  # 0-100
    match_reasons = Column(ARRAY(Text), nullable=False, default=list)
    is_viewed = Column(Boolean, nullable=False, default=False)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=sql_text("timezone('UTC', now())"))
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=sql_text("timezone('UTC', now())"), onupdate=sql_text("timezone('UTC', now())"))

    user = relationship("User", back_populates="matches")
    tender = relationship("Tender", back_populates="matches")

    __table_args__ = (
        UniqueConstraint('user_id', 'tender_id', name='uq_tender_match_user_tender'),
        Index('idx_tender_match_user_score', 'user_id', 'match_score'),
        Index('idx_tender_match_viewed', 'is_viewed'),
        Index('idx_tender_match_created', 'created_at'),
    )
