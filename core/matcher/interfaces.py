"""
Matching Collaborator Interfaces - Abstract stores and notification transport.

The orchestrator only depends on these interfaces. The SQL-backed store
lives in database.store and the channel-backed dispatcher and queues live
in notification.service.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from core.scorer.models import BusinessProfileDTO, TenderDTO
from core.matcher.dto import UserContactDTO, MatchDTO, MatchRecordDTO, NotificationRequest


class ProfileStore(ABC):
    """Read access to business profiles."""

    @abstractmethod
    def get_profile(self, user_id: str) -> Optional[BusinessProfileDTO]:
        """Return the user's profile, or None when the user has not created one."""
        pass

    @abstractmethod
    def list_profiled_user_ids(self) -> List[str]:
        """Return the ids of every user holding a business profile."""
        pass


class TenderStore(ABC):
    """Tender catalog, match persistence and user contact lookup."""

    @abstractmethod
    def get_active_tenders(self) -> List[TenderDTO]:
        """Return every tender whose status is active."""
        pass

    @abstractmethod
    def upsert_match(self, match: MatchDTO) -> MatchRecordDTO:
        """
        Insert or update the match for (user_id, tender_id).

        Must never create a second row for the same pair.
        """
        pass

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[UserContactDTO]:
        pass


class NotificationStore(ABC):
    """Persistence for notification attempts."""

    @abstractmethod
    def create_notification(self, request: NotificationRequest) -> int:
        """Create a pending notification record and return its id."""
        pass

    @abstractmethod
    def update_notification_status(
        self,
        notification_id: int,
        status: str,
        sent_at: Optional[datetime] = None,
        error_message: Optional[str] = None
    ) -> None:
        pass


class NotificationDispatcher(ABC):
    """Black-box transport for outbound messages."""

    @abstractmethod
    def send(
        self,
        channel: str,
        recipient: str,
        subject: Optional[str],
        body: str,
        metadata: Optional[dict] = None
    ) -> bool:
        """
        Send one message.

        Returns:
            True if the provider accepted the message, False otherwise
        """
        pass


class NotificationQueue(ABC):
    """Fire-and-forget scheduling of notification deliveries."""

    @abstractmethod
    def enqueue(self, request: NotificationRequest) -> Optional[str]:
        """
        Schedule delivery of a request without waiting for it.

        Returns:
            A task/job id, or None if nothing was scheduled
        """
        pass
