from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "Course Catalog"
    VERSION: str = "1.0.0"

    # Database
    DATABASE_URL: str = "sqlite:///./course_catalog.db"
    SQL_ECHO: bool = False

    # Course validation limits
    COURSE_TITLE_MAX_LENGTH: int = 255
    COURSE_DESCRIPTION_MAX_LENGTH: int = 1000

    # Listing defaults
    TOP_RATED_DEFAULT_LIMIT: int = 3
    RECENT_COURSES_DAYS: int = 30

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)

settings = Settings()
