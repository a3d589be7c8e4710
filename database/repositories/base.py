from typing import Any, Optional

from sqlalchemy.orm import Session
from sqlalchemy.sql.expression import Executable


class BaseRepository:
    """Repositories share the caller's Session; the unit of work owns the transaction."""

    def __init__(self, db: Session):
        self.db = db

    def _one_or_none(self, stmt: Executable) -> Optional[Any]:
        return self.db.execute(stmt).scalar_one_or_none()

    def _count(self, stmt: Executable) -> int:
        return self.db.execute(stmt).scalar() or 0

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
