# tests/conftest.py
import pytest
from datetime import datetime, timedelta
from decimal import Decimal
from unittest.mock import MagicMock
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.models.base import Base
from app.models import Category, Course, User

@pytest.fixture
def mock_db_session():
    """Mocked Session with query chaining (db.query().filter()...)"""
    session = MagicMock(spec=Session)
    session.query.return_value.filter.return_value = session.query.return_value
    session.query.return_value.options.return_value = session.query.return_value
    session.query.return_value.join.return_value = session.query.return_value
    session.query.return_value.order_by.return_value = session.query.return_value
    return session

@pytest.fixture
def db_session():
    """Real Session on an in-memory SQLite database with every table created."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()

@pytest.fixture
def catalog(db_session):
    """Seed two categories, two users and three courses of different ages."""
    now = datetime.utcnow()
    programming = Category(name="Programming")
    design = Category(name="Design")
    alice = User(email="alice@example.com", first_name="Alice", last_name="Nguyen")
    bob = User(email="bob@example.com", first_name="Bob", last_name="Tran")
    db_session.add_all([programming, design, alice, bob])
    db_session.flush()

    python = Course(
        title="Python Basics", description="Learn Python", category_id=programming.id,
        duration=10, price=Decimal("49.00"), image_url="python.png",
        created_at=now - timedelta(days=2),
    )
    sql = Course(
        title="SQL in Depth", description="Joins and indexes", category_id=programming.id,
        duration=25, price=Decimal("99.00"),
        created_at=now - timedelta(days=60),
    )
    figma = Course(
        title="Figma 101", description="Interface design", category_id=design.id,
        duration=5, price=Decimal("0.00"),
        created_at=now - timedelta(days=1),
    )
    db_session.add_all([python, sql, figma])
    db_session.commit()

    return {
        "categories": {"programming": programming, "design": design},
        "users": {"alice": alice, "bob": bob},
        "courses": {"python": python, "sql": sql, "figma": figma},
        "now": now,
    }

@pytest.fixture
def course_payload():
    return {
        "title": "Data Engineering",
        "description": "Pipelines and warehouses",
        "category": "Programming",
        "duration": 30,
        "price": "129.50",
        "image_url": "data.png",
    }
