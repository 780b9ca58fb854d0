from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Union
from decimal import Decimal
from datetime import datetime

# Input carriers; every rule is checked (and reported together) by the repository
class CourseCreate(BaseModel):
    title: str = ""
    description: str = ""
    category: str = Field("", description="Category name")
    duration: Optional[Union[int, str]] = Field(None, description="Duration in hours")
    price: Optional[Union[Decimal, str]] = None
    image_url: Optional[str] = None

class CourseFilter(BaseModel):
    category: Optional[str] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    max_duration: Optional[int] = None

# Response schemas
class CategoryResponse(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)

class CourseResponse(BaseModel):
    id: int
    title: str
    description: str
    category_id: int
    category: Optional[str] = Field(None, validation_alias="category_name")
    duration: int
    price: Decimal
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

class TopRatedCourseResponse(CourseResponse):
    avg_rating: Optional[float] = None

class ReviewResponse(BaseModel):
    id: int
    course_id: int
    user_id: int
    rating: int
    comment: Optional[str] = None
    created_at: Optional[datetime] = None
    first_name: str
    last_name: str

    model_config = ConfigDict(from_attributes=True)

class ActiveCourseResponse(BaseModel):
    """One unfinished enrollment as shown on a user's dashboard."""
    progress: int
    title: str
    description: str
    image_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

class CourseStats(BaseModel):
    total: int
    recent: int
    recent_days: int
