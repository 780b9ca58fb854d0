from .catalog import Category, Course, Review, UserCourse
from .user import User
