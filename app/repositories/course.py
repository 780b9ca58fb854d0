from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Union
import logging

from pydantic import BaseModel
from sqlalchemy import and_, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, contains_eager

from app.core.config import settings
from app.core.exceptions import (
    CourseConflictError,
    CourseNotFoundError,
    CoursePersistenceError,
    CourseValidationError,
)
from app.models.catalog import Category, Course, Review, UserCourse
from app.models.user import User
from app.repositories.base import BaseRepository
from app.repositories.category import category_repository

logger = logging.getLogger(__name__)

CourseData = Union[BaseModel, Dict[str, Any]]


def _as_dict(obj_in: Optional[CourseData]) -> Dict[str, Any]:
    if obj_in is None:
        return {}
    if hasattr(obj_in, "model_dump"):
        return obj_in.model_dump()
    return dict(obj_in)


def _to_number(value: Any) -> Optional[Decimal]:
    """Decimal for anything numeric (including numeric strings), else None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    return number if number.is_finite() else None


class CourseRepository(BaseRepository[Course]):
    def __init__(self):
        super().__init__(Course)
        self.categories = category_repository

    def _joined_query(self, db: Session) -> Query:
        """Courses inner-joined with their category, category loaded from the same row."""
        return db.query(Course).join(Course.category).options(contains_eager(Course.category))

    def get_category_id_by_name(self, db: Session, name: Optional[str]) -> Optional[int]:
        return self.categories.get_id_by_name(db, name)

    def get_by_id(self, db: Session, course_id: int) -> Optional[Course]:
        return self._joined_query(db).filter(Course.id == course_id).first()

    def get_by_title(self, db: Session, title: str) -> Optional[Course]:
        return self._joined_query(db).filter(Course.title == title).first()

    def get_all(self, db: Session) -> List[Course]:
        """All courses, newest first"""
        return self._joined_query(db).order_by(Course.created_at.desc(), Course.id.desc()).all()

    def get_filtered(self, db: Session, filters: Optional[CourseData] = None) -> List[Course]:
        """Filter by category name, price range and maximum duration.

        An unknown category name drops that condition instead of matching
        nothing, and non-numeric bounds are ignored.
        """
        filters = _as_dict(filters)
        conditions = []

        if filters.get("category"):
            category_id = self.get_category_id_by_name(db, filters["category"])
            if category_id:
                conditions.append(Course.category_id == category_id)

        min_price = _to_number(filters.get("min_price"))
        if min_price is not None:
            conditions.append(Course.price >= min_price)

        max_price = _to_number(filters.get("max_price"))
        if max_price is not None:
            conditions.append(Course.price <= max_price)

        max_duration = _to_number(filters.get("max_duration"))
        if max_duration is not None:
            conditions.append(Course.duration <= max_duration)

        query = self._joined_query(db)
        if conditions:
            query = query.filter(and_(*conditions))

        return query.order_by(Course.created_at.desc(), Course.id.desc()).all()

    def get_top_rated(self, db: Session, limit: int = None):
        """Rows of (Course, avg_rating); unrated courses sort last with avg_rating None."""
        if limit is None:
            limit = settings.TOP_RATED_DEFAULT_LIMIT
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise CourseValidationError(["Limit must be a positive integer"])

        avg_rating = func.avg(Review.rating).label("avg_rating")
        return (
            db.query(Course, avg_rating)
            .join(Course.category)
            .outerjoin(Review, Review.course_id == Course.id)
            .options(contains_eager(Course.category))
            .group_by(Course.id, Category.id)
            .order_by(avg_rating.desc().nulls_last(), Course.id.asc())
            .limit(limit)
            .all()
        )

    def get_reviews(self, db: Session, course_id: int):
        """Rows of (Review, first_name, last_name), newest first"""
        return (
            db.query(Review, User.first_name, User.last_name)
            .join(User, Review.user_id == User.id)
            .filter(Review.course_id == course_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
            .all()
        )

    def get_active_courses_by_user_id(self, db: Session, user_id: int):
        """Unfinished enrollments of a user; a database error yields an empty list."""
        try:
            return (
                db.query(UserCourse.progress, Course.title, Course.description, Course.image_url)
                .join(Course, UserCourse.course_id == Course.id)
                .filter(UserCourse.user_id == user_id, UserCourse.is_completed.is_(False))
                .all()
            )
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error fetching active courses for user ID {user_id}: {e}")
            return []

    def validate_course_data(self, db: Session, data: CourseData) -> int:
        """Check a course payload, collecting every problem before raising.

        Returns the resolved category id so callers do not look it up twice.
        """
        data = _as_dict(data)
        errors = []

        title = str(data.get("title") or "")
        description = str(data.get("description") or "")
        raw_price = data.get("price")
        price = _to_number(raw_price)
        raw_duration = data.get("duration")
        duration = _to_number(raw_duration)

        if not title:
            errors.append("Title is required")
        if not description:
            errors.append("Description is required")
        if not data.get("category"):
            errors.append("Category is required")
        # "0" from a form counts as missing, like 0
        if not raw_duration or duration == 0:
            errors.append("Duration is required")
        elif duration is None:
            errors.append("Duration must be a number")
        elif duration != duration.to_integral_value():
            errors.append("Duration must be a whole number of hours")
        if raw_price is None or raw_price == "" or (price is not None and price < 0):
            errors.append("Valid price is required")

        if len(title) > settings.COURSE_TITLE_MAX_LENGTH:
            errors.append(f"Title must be less than {settings.COURSE_TITLE_MAX_LENGTH} characters")
        if len(description) > settings.COURSE_DESCRIPTION_MAX_LENGTH:
            errors.append(f"Description must be less than {settings.COURSE_DESCRIPTION_MAX_LENGTH} characters")

        if price is None:
            errors.append("Price must be a number")

        category_id = self.get_category_id_by_name(db, data.get("category"))
        if category_id is None:
            errors.append("Invalid category selected")

        if errors:
            raise CourseValidationError(errors)
        return category_id

    def _title_taken_in_category(self, db: Session, title: str, category_id: int, exclude_id: int) -> bool:
        query = db.query(Course.id).filter(
            Course.title == title,
            Course.category_id == category_id,
            Course.id != exclude_id,
        )
        return db.query(query.exists()).scalar()

    def create(self, db: Session, data: CourseData) -> int:
        """Insert a course and return its id. Titles must be unique across all categories."""
        data = _as_dict(data)
        category_id = self.validate_course_data(db, data)

        if self.get_by_title(db, data["title"]) is not None:
            raise CourseConflictError("Course with this title already exists")

        course = Course(
            title=data["title"],
            description=data["description"],
            category_id=category_id,
            duration=int(_to_number(data["duration"])),
            price=_to_number(data["price"]),
            image_url=data.get("image_url") or None,
        )
        try:
            db.add(course)
            db.commit()
            db.refresh(course)
            return course.id
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error creating course: {e}")
            raise CoursePersistenceError(f"Error creating course: {e}", e) from e

    def update(self, db: Session, course_id: int, data: CourseData) -> bool:
        """Rewrite the editable columns of a course in one UPDATE.

        Titles only need to be unique within the target category here.
        image_url is left untouched unless a non-empty value is given.
        """
        data = _as_dict(data)
        category_id = self.validate_course_data(db, data)

        if self.get_by_id(db, course_id) is None:
            raise CourseNotFoundError()

        if self._title_taken_in_category(db, data["title"], category_id, course_id):
            raise CourseConflictError("Course with this title already exists in this category.")

        update_data = {
            "title": data["title"],
            "description": data["description"],
            "category_id": category_id,
            "duration": int(_to_number(data["duration"])),
            "price": _to_number(data["price"]),
        }
        if data.get("image_url"):
            update_data["image_url"] = data["image_url"]

        try:
            db.query(Course).filter(Course.id == course_id).update(update_data, synchronize_session=False)
            db.commit()
            return True
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error updating course {course_id}: {e}")
            raise CoursePersistenceError(f"Error updating course: {e}", e) from e

    def delete(self, db: Session, course_id: int) -> bool:
        try:
            return super().delete(db, course_id)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error deleting course {course_id}: {e}")
            raise CoursePersistenceError(f"Error deleting course: {e}", e) from e

    def get_count(self, db: Session) -> int:
        return self.count(db)

    def get_count_last_days(self, db: Session, days: int = None) -> int:
        if days is None:
            days = settings.RECENT_COURSES_DAYS
        cutoff = datetime.now(timezone.utc) - timedelta(days=days)
        return db.query(func.count(Course.id)).filter(Course.created_at >= cutoff).scalar() or 0

    def get_courses_count_last_30_days(self, db: Session) -> int:
        return self.get_count_last_days(db, 30)

course_repository = CourseRepository()
