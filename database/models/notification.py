from sqlalchemy import Column, Integer, Text, TIMESTAMP, ForeignKey, Index
from sqlalchemy.sql import text as sql_text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from .base import Base

class Notification(Base):
    """
    One delivery attempt on one channel.

    Created as 'pending' before the provider is called, then moved to
    'sent' (with sent_at) or 'failed' (with error_message).
    """
    __tablename__ = 'notifications'

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Text, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    tender_id = Column(Integer, ForeignKey('tenders.id'), nullable=True)

    type = Column(Text, nullable=False)  # email|sms
    subject = Column(Text)
    message = Column(Text, nullable=False)
    recipient = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default='pending')  # pending|sent|failed
    error_message = Column(Text)
    event_data = Column(JSONB, default=dict)

    sent_at = Column(TIMESTAMP(timezone=True))
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=sql_text("timezone('UTC', now())"))

    tender = relationship("Tender")

    __table_args__ = (
        Index('idx_notifications_user', 'user_id', 'created_at'),
        Index('idx_notifications_status', 'status'),
    )
