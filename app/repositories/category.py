from typing import List, Optional
from sqlalchemy.orm import Session
from app.repositories.base import BaseRepository
from app.models.catalog import Category

class CategoryRepository(BaseRepository[Category]):
    def __init__(self):
        super().__init__(Category)

    def get_id_by_name(self, db: Session, name: Optional[str]) -> Optional[int]:
        """Resolve a category name (as used in forms and filters) to its id."""
        if not name:
            return None
        return db.query(Category.id).filter(Category.name == name).scalar()

    def get_all(self, db: Session) -> List[Category]:
        return db.query(Category).order_by(Category.name.asc()).all()

category_repository = CategoryRepository()
