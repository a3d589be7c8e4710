from .base import Base
from .user import User
from .profile import BusinessProfile
from .tender import Tender
from .match import TenderMatch
from .saved_tender import SavedTender
from .notification import Notification

__all__ = [
    'Base',
    'User',
    'BusinessProfile',
    'Tender',
    'TenderMatch',
    'SavedTender',
    'Notification',
]
