from sqlalchemy import Column, Text, TIMESTAMP, func, Index
from sqlalchemy.sql import text as sql_text
from sqlalchemy.orm import relationship

from .base import Base

class User(Base):
    """
    User account. Authentication lives outside this service; only
    contact details used for notifications are stored here.
    """
    __tablename__ = 'users'

    id = Column(Text, primary_key=True)
    email = Column(Text, unique=True)
    first_name = Column(Text)
    last_name = Column(Text)
    phone_number = Column(Text)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=sql_text("timezone('UTC', now())"))
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=sql_text("timezone('UTC', now())"), onupdate=func.now())

    # Relationships
    business_profile = relationship("BusinessProfile", back_populates="user", uselist=False, cascade="all, delete-orphan")
    matches = relationship("TenderMatch", back_populates="user", cascade="all, delete-orphan")
    saved_tenders = relationship("SavedTender", back_populates="user", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_users_email', 'email'),
    )

    @property
    def display_name(self):
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) if parts else None
