from database.repositories.base import BaseRepository
from database.repositories.user import UserRepository
from database.repositories.profile import ProfileRepository
from database.repositories.tender import TenderRepository
from database.repositories.match import MatchRepository
from database.repositories.saved_tender import SavedTenderRepository
from database.repositories.notification import NotificationRepository

__all__ = [
    'BaseRepository',
    'UserRepository',
    'ProfileRepository',
    'TenderRepository',
    'MatchRepository',
    'SavedTenderRepository',
    'NotificationRepository',
]
