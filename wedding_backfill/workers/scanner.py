"""Entity scanner - cursor-ordered batches of records still missing a derived attribute"""

from typing import Callable, Generic, Optional, TypeVar

from sqlalchemy.orm import Session

T = TypeVar("T")


class EntityScanner(Generic[T]):
    """
    Pages through unresolved entities in ascending id order.

    The cursor (last processed id) only moves forward, so an entity left
    unresolved at or below the cursor is not returned again in the same run.
    """

    def __init__(self, model: type[T], unresolved: Callable[[], object]):
        self.model = model
        self.unresolved = unresolved

    def _query(self, db: Session, after_id: Optional[str]):
        query = db.query(self.model).filter(self.unresolved())
        if after_id is not None:
            query = query.filter(self.model.id > after_id)
        return query

    def next_batch(self, db: Session, after_id: Optional[str] = None, limit: int = 100) -> list[T]:
        """Next `limit` unresolved entities with id > after_id; empty when done"""
        return self._query(db, after_id).order_by(self.model.id.asc()).limit(limit).all()

    def count_remaining(self, db: Session, after_id: Optional[str] = None) -> int:
        return self._query(db, after_id).count()
