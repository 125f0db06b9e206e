"""Keyed access to the record store.

Rows are looked up by their natural keys (email, date, meal_number) rather
than by id, and writes are last-write-wins. `BaseRepository` gives the
routers those lookups so they never build filters themselves.
"""

from sqlalchemy.orm import Query, Session
from typing import TypeVar, Generic, Type, Optional, List
from database.models import Base

T = TypeVar('T', bound=Base)


class BaseRepository(Generic[T]):
    """Lookups and writes for one model, keyed by column values.

    Attributes:
        model: SQLAlchemy model class the repository reads and writes.
        session: Session the queries run in; every write commits it.
    """

    def __init__(self, model: Type[T], session: Session):
        self.model = model
        self.session = session

    def _query(self, **keys) -> Query:
        return self.session.query(self.model).filter_by(**keys)

    def filter_by(self, **keys) -> List[T]:
        """All rows matching ``keys``, in insertion order."""
        return self._query(**keys).order_by(self.model.id).all()

    def first_by(self, **keys) -> Optional[T]:
        """The row for a unique key (email, or email + date + meal_number)."""
        return self._query(**keys).first()

    def latest_by(self, **keys) -> Optional[T]:
        """The newest row matching ``keys``, e.g. a user's last quiz result."""
        return self._query(**keys).order_by(self.model.id.desc()).first()

    def create(self, obj: T) -> T:
        return save(self.session, obj)

    def update(self, obj: T) -> T:
        """Commit attribute changes made to ``obj`` and reload it."""
        self.session.commit()
        self.session.refresh(obj)
        return obj

    def delete(self, obj: T) -> None:
        self.session.delete(obj)
        self.session.commit()

    def delete_by(self, **keys) -> int:
        """Delete every row matching ``keys``.

        Returns:
            Number of rows removed (0 when nothing matched).
        """
        count = self._query(**keys).delete(synchronize_session=False)
        self.session.commit()
        return count


def save(session: Session, obj: Base) -> Base:
    """Insert or update ``obj``, commit and reload its columns."""
    session.add(obj)
    session.commit()
    session.refresh(obj)
    return obj
