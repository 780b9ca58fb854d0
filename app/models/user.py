from sqlalchemy import Column, String
from app.models.base import BaseModel, TimestampMixin

# Only the columns the catalog reads (review authors); accounts are managed elsewhere.
class User(BaseModel, TimestampMixin):
    __tablename__ = "users"

    email = Column(String(255), unique=True, nullable=False, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
