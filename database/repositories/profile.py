import logging
from typing import List, Optional

from sqlalchemy import select

from database.models import BusinessProfile
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class ProfileRepository(BaseRepository):
    def get_by_user_id(self, user_id: str) -> Optional[BusinessProfile]:
        stmt = select(BusinessProfile).where(BusinessProfile.user_id == user_id)
        return self._one_or_none(stmt)

    def list_user_ids(self) -> List[str]:
        stmt = select(BusinessProfile.user_id).order_by(BusinessProfile.user_id)
        return list(self.db.execute(stmt).scalars().all())

    def list_email_subscribers(self) -> List[BusinessProfile]:
        """Profiles that opted into email notifications."""
        stmt = select(BusinessProfile).where(BusinessProfile.email_notifications.is_(True))
        return self.db.execute(stmt).scalars().all()

    def save_profile(self, user_id: str, business_name: str, **fields) -> BusinessProfile:
        """Create the user's profile, or update it in place if one exists."""
        profile = self.get_by_user_id(user_id)
        if profile is None:
            profile = BusinessProfile(user_id=user_id, business_name=business_name, **fields)
            self.db.add(profile)
        else:
            profile.business_name = business_name
            for key, value in fields.items():
                setattr(profile, key, value)
        self.db.flush()
        return profile
