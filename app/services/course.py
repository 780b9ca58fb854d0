from app.repositories.course import course_repository, CourseData
from app.core.config import settings
from app.core.exceptions import CourseError, CourseNotFoundError
from app.schemas.course import (
    ActiveCourseResponse,
    CategoryResponse,
    CourseFilter,
    CourseResponse,
    CourseStats,
    ReviewResponse,
    TopRatedCourseResponse,
)
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)

class CourseService:
    """Async façade over the course repository returning response schemas."""

    def __init__(self, repository=None):
        self.repository = repository or course_repository

    async def get_course(self, db: Session, course_id: int) -> Optional[CourseResponse]:
        course = self.repository.get_by_id(db, course_id)
        return CourseResponse.model_validate(course) if course else None

    async def get_course_by_title(self, db: Session, title: str) -> Optional[CourseResponse]:
        course = self.repository.get_by_title(db, title)
        return CourseResponse.model_validate(course) if course else None

    async def list_courses(self, db: Session) -> List[CourseResponse]:
        return [CourseResponse.model_validate(c) for c in self.repository.get_all(db)]

    async def filter_courses(self, db: Session, filters: CourseFilter) -> List[CourseResponse]:
        return [CourseResponse.model_validate(c) for c in self.repository.get_filtered(db, filters)]

    async def get_top_rated(self, db: Session, limit: int = None) -> List[TopRatedCourseResponse]:
        results = []
        for course, avg_rating in self.repository.get_top_rated(db, limit):
            data = CourseResponse.model_validate(course).model_dump()
            data["avg_rating"] = float(avg_rating) if avg_rating is not None else None
            results.append(TopRatedCourseResponse(**data))
        return results

    async def get_reviews(self, db: Session, course_id: int) -> List[ReviewResponse]:
        return [
            ReviewResponse(
                id=review.id,
                course_id=review.course_id,
                user_id=review.user_id,
                rating=review.rating,
                comment=review.comment,
                created_at=review.created_at,
                first_name=first_name,
                last_name=last_name,
            )
            for review, first_name, last_name in self.repository.get_reviews(db, course_id)
        ]

    async def get_active_courses(self, db: Session, user_id: int) -> List[ActiveCourseResponse]:
        rows = self.repository.get_active_courses_by_user_id(db, user_id)
        return [ActiveCourseResponse(**row._mapping) for row in rows]

    async def list_categories(self, db: Session) -> List[CategoryResponse]:
        return [CategoryResponse.model_validate(c) for c in self.repository.categories.get_all(db)]

    async def create_course(self, db: Session, data: CourseData) -> CourseResponse:
        try:
            course_id = self.repository.create(db, data)
        except CourseError as e:
            logger.error(f"Error creating course: {e}")
            raise
        return await self.get_course(db, course_id)

    async def update_course(self, db: Session, course_id: int, data: CourseData) -> CourseResponse:
        try:
            self.repository.update(db, course_id, data)
        except CourseError as e:
            logger.error(f"Error updating course: {e}")
            raise
        return await self.get_course(db, course_id)

    async def delete_course(self, db: Session, course_id: int) -> None:
        try:
            deleted = self.repository.delete(db, course_id)
        except CourseError as e:
            logger.error(f"Error deleting course: {e}")
            raise
        if not deleted:
            raise CourseNotFoundError()

    async def get_stats(self, db: Session, days: int = None) -> CourseStats:
        if days is None:
            days = settings.RECENT_COURSES_DAYS
        return CourseStats(
            total=self.repository.get_count(db),
            recent=self.repository.get_count_last_days(db, days),
            recent_days=days,
        )

course_service = CourseService()
