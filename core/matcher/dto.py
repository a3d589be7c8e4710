"""Data Transfer Objects for the match orchestrator.

DTOs are used to transfer data outside of the Unit of Work context,
allowing ORM objects to be converted to plain Python objects that
can be safely used after the database session is closed.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Dict, List, Optional

CHANNEL_EMAIL = 'email'
CHANNEL_SMS = 'sms'

STATUS_PENDING = 'pending'
STATUS_SENT = 'sent'
STATUS_FAILED = 'failed'


@dataclass
class UserContactDTO:
    """Contact details of the user that owns a business profile."""
    id: str
    email: Optional[str] = None
    phone_number: Optional[str] = None
    display_name: Optional[str] = None


@dataclass
class MatchDTO:
    """A scored (user, tender) pair ready to be upserted."""
    user_id: str
    tender_id: int
    score: int
    reasons: List[str] = field(default_factory=list)


@dataclass
class MatchRecordDTO:
    """Stored match returned from an upsert.

    `created` is True when the row did not exist before the upsert;
    `previous_score` holds the score it replaced otherwise.
    """
    id: Any
    user_id: str
    tender_id: int
    score: int
    reasons: List[str] = field(default_factory=list)
    is_viewed: bool = False
    created_at: Optional[datetime] = None
    created: bool = True
    previous_score: Optional[int] = None


@dataclass
class NotificationRequest:
    """A single outbound message for one channel.

    Kept JSON-friendly so it can travel through the Redis queue as a dict.
    """
    user_id: str
    channel: str
    recipient: str
    body: str
    subject: Optional[str] = None
    tender_id: Optional[int] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NotificationRequest":
        return cls(
            user_id=data['user_id'],
            channel=data['channel'],
            recipient=data['recipient'],
            body=data['body'],
            subject=data.get('subject'),
            tender_id=data.get('tender_id'),
            metadata=data.get('metadata') or {},
        )


@dataclass
class MatchingRunResult:
    """Result of matching one user against the active tender catalog."""
    user_id: str
    skipped: bool = False
    skip_reason: Optional[str] = None
    tenders_evaluated: int = 0
    matches_saved: int = 0
    high_priority_matches: int = 0
    notifications_enqueued: int = 0
    scoring_errors: int = 0
    execution_time: float = 0.0


@dataclass
class BatchMatchingResult:
    """Result of matching every profiled user."""
    users_total: int = 0
    users_matched: int = 0
    users_skipped: int = 0
    failed_user_ids: List[str] = field(default_factory=list)
    matches_saved: int = 0
    notifications_enqueued: int = 0
    execution_time: float = 0.0

    @property
    def success(self) -> bool:
        return not self.failed_user_ids
