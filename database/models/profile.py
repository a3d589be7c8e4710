from sqlalchemy import Column, Integer, Text, TIMESTAMP, ForeignKey, Boolean, Numeric, CheckConstraint, func
from sqlalchemy.sql import text as sql_text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import relationship

from .base import Base


class BusinessProfile(Base):
    """
    A user's business capabilities and notification preferences.

    One profile per user. Array columns hold free-form labels that the
    scorer compares case-insensitively (industry) or exactly (province).
    """
    __tablename__ = 'business_profiles'

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Text, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True)

    business_name = Column(Text, nullable=False)
    registration_number = Column(Text)
    cidb_grading = Column(Text)  # e.g. "Grade 5"
    bbbee_level = Column(Text)  # e.g. "Level 2"
    industry_categories = Column(ARRAY(Text), nullable=False, default=list)
    provinces = Column(ARRAY(Text), nullable=False, default=list)
    preferred_value_min = Column(Numeric(15, 2))
    preferred_value_max = Column(Numeric(15, 2))

    # Contact overrides; fall back to the user's own details when empty
    contact_email = Column(Text)
    phone_number = Column(Text)

    is_verified = Column(Boolean, nullable=False, default=False)
    language = Column(Text, nullable=False, default='en')
    email_notifications = Column(Boolean, nullable=False, default=True)
    sms_notifications = Column(Boolean, nullable=False, default=False)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=sql_text("timezone('UTC', now())"))
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=sql_text("timezone('UTC', now())"), onupdate=func.now())

    user = relationship("User", back_populates="business_profile")

    __table_args__ = (
        CheckConstraint(
            'preferred_value_min IS NULL OR preferred_value_max IS NULL OR preferred_value_min <= preferred_value_max',
            name='ck_business_profiles_value_range'
        ),
    )
