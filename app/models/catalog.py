from sqlalchemy import Column, String, Integer, SmallInteger, Text, Boolean, Numeric, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.schema import UniqueConstraint

from app.models.base import BaseModel, TimestampMixin

# --- MODELS ---

class Category(BaseModel):
    __tablename__ = "categories"

    name = Column(String(100), nullable=False, unique=True)

    courses = relationship("Course", back_populates="category")

class Course(BaseModel, TimestampMixin):
    __tablename__ = "courses"

    title = Column(String(255), nullable=False, index=True)
    description = Column(String(1000), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False, index=True)

    duration = Column(Integer, nullable=False)  # hours
    price = Column(Numeric(10, 2), nullable=False)
    image_url = Column(String(500), nullable=True)

    __table_args__ = (
        CheckConstraint('price >= 0', name='courses_price_check'),
    )

    # Relationships
    category = relationship("Category", back_populates="courses")
    reviews = relationship("Review", back_populates="course", passive_deletes=True)

    @property
    def category_name(self):
        return self.category.name if self.category is not None else None

class Review(BaseModel, TimestampMixin):
    __tablename__ = "reviews"

    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    rating = Column(SmallInteger, nullable=False)
    comment = Column(Text)

    __table_args__ = (
        CheckConstraint('rating BETWEEN 1 AND 5', name='reviews_rating_check'),
    )

    course = relationship("Course", back_populates="reviews")
    author = relationship("User")

# Enrollment: a user's progress through a course
class UserCourse(BaseModel, TimestampMixin):
    __tablename__ = "user_courses"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    progress = Column(Integer, default=0, nullable=False)
    is_completed = Column(Boolean, default=False, nullable=False)

    __table_args__ = (
        UniqueConstraint('user_id', 'course_id', name='uq_user_course'),
        CheckConstraint('progress BETWEEN 0 AND 100', name='user_courses_progress_check'),
    )

    course = relationship("Course")
    user = relationship("User")
