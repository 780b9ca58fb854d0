from typing import Generic, Type, TypeVar
from sqlalchemy import func
from sqlalchemy.orm import Session

T = TypeVar("T")

class BaseRepository(Generic[T]):
    def __init__(self, model: Type[T]):
        self.model = model

    def count(self, db: Session) -> int:
        return db.query(func.count(self.model.id)).scalar() or 0

    def delete(self, db: Session, id: int) -> bool:
        """Single DELETE statement; returns whether a row was removed."""
        deleted = db.query(self.model).filter(self.model.id == id).delete(synchronize_session=False)
        db.commit()
        return deleted > 0
