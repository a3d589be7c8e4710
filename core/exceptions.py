#!/usr/bin/env python3
"""
Custom exceptions for the matching core.
"""


class TenderScoutException(Exception):
    """Base exception for matching and notification errors."""
    pass


class InvalidProfileError(TenderScoutException, ValueError):
    """Raised when a business profile breaks a data invariant."""
    pass


class MatchNotFoundException(TenderScoutException):
    """Raised when a (user, tender) match does not exist."""
    pass


class NotificationDispatchException(TenderScoutException):
    """Raised when a notification channel cannot deliver a message."""
    pass
