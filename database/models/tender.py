from sqlalchemy import Column, Integer, Text, TIMESTAMP, Boolean, Numeric, Index, func
from sqlalchemy.sql import text as sql_text
from sqlalchemy.dialects.postgresql import ARRAY, JSONB
from sqlalchemy.orm import relationship

from .base import Base


class Tender(Base):
    """
    A published procurement opportunity (OCDS release).

    Tenders are only ever deactivated, never deleted, so match history
    survives a tender closing.
    """
    __tablename__ = 'tenders'

    id = Column(Integer, primary_key=True, autoincrement=True)
    ocid = Column(Text, nullable=False, unique=True)

    title = Column(Text, nullable=False)
    description = Column(Text)
    department = Column(Text)
    category = Column(Text)
    province = Column(Text)
    value_min = Column(Numeric(15, 2))
    value_max = Column(Numeric(15, 2))
    closing_date = Column(TIMESTAMP(timezone=True))
    advertised_date = Column(TIMESTAMP(timezone=True))
    status = Column(Text, nullable=False, default='active')  # active|closed|cancelled
    requirements = Column(ARRAY(Text), default=list)
    document_url = Column(Text)
    contact_details = Column(JSONB, default=dict)
    cidb_required = Column(Text)
    bbbee_required = Column(Text)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=sql_text("timezone('UTC', now())"))
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=sql_text("timezone('UTC', now())"), onupdate=func.now())

    matches = relationship("TenderMatch", back_populates="tender")

    __table_args__ = (
        Index('idx_tenders_status', 'status'),
        Index('idx_tenders_active', 'is_active'),
        Index('idx_tenders_category', 'category'),
        Index('idx_tenders_province', 'province'),
        Index('idx_tenders_advertised', 'advertised_date'),
    )
