import logging
from typing import Optional

from sqlalchemy import select

from database.models import User
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository):
    def get_by_id(self, user_id: str) -> Optional[User]:
        stmt = select(User).where(User.id == user_id)
        return self._one_or_none(stmt)

    def get_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(User.email == email)
        return self._one_or_none(stmt)

    def create_user(
        self,
        user_id: str,
        email: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        phone_number: Optional[str] = None
    ) -> User:
        user = User(
            id=user_id,
            email=email,
            first_name=first_name,
            last_name=last_name,
            phone_number=phone_number
        )
        self.db.add(user)
        self.db.flush()
        return user
