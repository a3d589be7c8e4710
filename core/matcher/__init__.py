"""Matcher Module - Tender matching orchestration and notification hand-off."""
from core.matcher.dto import (
    UserContactDTO, MatchDTO, MatchRecordDTO, NotificationRequest,
    MatchingRunResult, BatchMatchingResult
)
from core.matcher.interfaces import (
    ProfileStore, TenderStore, NotificationStore,
    NotificationDispatcher, NotificationQueue
)
from core.matcher.service import (
    MatchOrchestrator, MATCH_THRESHOLD, HIGH_PRIORITY_THRESHOLD, build_match_message
)

__all__ = [
    'MatchOrchestrator', 'MATCH_THRESHOLD', 'HIGH_PRIORITY_THRESHOLD', 'build_match_message',
    'ProfileStore', 'TenderStore', 'NotificationStore',
    'NotificationDispatcher', 'NotificationQueue',
    'UserContactDTO', 'MatchDTO', 'MatchRecordDTO', 'NotificationRequest',
    'MatchingRunResult', 'BatchMatchingResult'
]
