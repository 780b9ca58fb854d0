import pytest
from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import MagicMock

from app.core.exceptions import CourseConflictError, CourseNotFoundError
from app.services.course import CourseService
from app.schemas.course import CourseFilter, CourseStats

CREATED = datetime(2026, 10, 1, tzinfo=timezone.utc)

def make_course(id=1, title="Python Basics", category="Programming", **extra):
    data = dict(
        id=id, title=title, description="Learn Python", category_id=3, category_name=category,
        duration=10, price=Decimal("49.00"), image_url=None, created_at=CREATED,
    )
    data.update(extra)
    return SimpleNamespace(**data)

@pytest.fixture
def mock_repo():
    repo = MagicMock()
    repo.categories = MagicMock()
    return repo

@pytest.fixture
def service(mock_repo):
    return CourseService(repository=mock_repo)

# ==========================================
# 1. READS
# ==========================================
@pytest.mark.asyncio
async def test_get_course(service, mock_repo, mock_db_session):
    mock_repo.get_by_id.return_value = make_course()

    result = await service.get_course(mock_db_session, 1)

    assert result.title == "Python Basics"
    assert result.category == "Programming"
    mock_repo.get_by_id.assert_called_once_with(mock_db_session, 1)

@pytest.mark.asyncio
async def test_get_course_missing(service, mock_repo, mock_db_session):
    mock_repo.get_by_id.return_value = None
    assert await service.get_course(mock_db_session, 1) is None

@pytest.mark.asyncio
async def test_get_course_by_title(service, mock_repo, mock_db_session):
    mock_repo.get_by_title.return_value = make_course(title="Figma 101", category="Design")

    result = await service.get_course_by_title(mock_db_session, "Figma 101")

    assert result.category == "Design"

@pytest.mark.asyncio
async def test_list_and_filter_courses(service, mock_repo, mock_db_session):
    mock_repo.get_all.return_value = [make_course(1), make_course(2, title="SQL")]
    mock_repo.get_filtered.return_value = [make_course(2, title="SQL")]
    filters = CourseFilter(category="Programming", max_price=Decimal("100"))

    all_courses = await service.list_courses(mock_db_session)
    filtered = await service.filter_courses(mock_db_session, filters)

    assert [c.id for c in all_courses] == [1, 2]
    assert [c.title for c in filtered] == ["SQL"]
    mock_repo.get_filtered.assert_called_once_with(mock_db_session, filters)

@pytest.mark.asyncio
async def test_get_top_rated_converts_average(service, mock_repo, mock_db_session):
    mock_repo.get_top_rated.return_value = [
        (make_course(1), Decimal("4.5000")),
        (make_course(2, title="SQL"), None),
    ]

    result = await service.get_top_rated(mock_db_session, 2)

    assert [(c.title, c.avg_rating) for c in result] == [("Python Basics", 4.5), ("SQL", None)]
    assert result[0].category == "Programming"
    mock_repo.get_top_rated.assert_called_once_with(mock_db_session, 2)

@pytest.mark.asyncio
async def test_get_reviews_includes_author(service, mock_repo, mock_db_session):
    review = SimpleNamespace(id=5, course_id=1, user_id=9, rating=4, comment="Good", created_at=CREATED)
    mock_repo.get_reviews.return_value = [(review, "Bob", "Tran")]

    result = await service.get_reviews(mock_db_session, 1)

    assert result[0].rating == 4
    assert (result[0].first_name, result[0].last_name) == ("Bob", "Tran")

@pytest.mark.asyncio
async def test_get_active_courses(service, mock_repo, mock_db_session):
    row = SimpleNamespace(_mapping={"progress": 40, "title": "Python Basics", "description": "Learn Python", "image_url": None})
    mock_repo.get_active_courses_by_user_id.return_value = [row]

    result = await service.get_active_courses(mock_db_session, 9)

    assert result[0].progress == 40
    assert result[0].title == "Python Basics"

@pytest.mark.asyncio
async def test_list_categories(service, mock_repo, mock_db_session):
    mock_repo.categories.get_all.return_value = [SimpleNamespace(id=1, name="Design"), SimpleNamespace(id=2, name="Programming")]

    result = await service.list_categories(mock_db_session)

    assert [c.name for c in result] == ["Design", "Programming"]

@pytest.mark.asyncio
async def test_get_stats(service, mock_repo, mock_db_session):
    mock_repo.get_count.return_value = 12
    mock_repo.get_count_last_days.return_value = 4

    result = await service.get_stats(mock_db_session)

    assert result == CourseStats(total=12, recent=4, recent_days=30)
    mock_repo.get_count_last_days.assert_called_once_with(mock_db_session, 30)

@pytest.mark.asyncio
async def test_get_stats_keeps_explicit_zero_days(service, mock_repo, mock_db_session):
    mock_repo.get_count.return_value = 12
    mock_repo.get_count_last_days.return_value = 0

    result = await service.get_stats(mock_db_session, days=0)

    assert result.recent_days == 0
    mock_repo.get_count_last_days.assert_called_once_with(mock_db_session, 0)

# ==========================================
# 2. WRITES
# ==========================================
@pytest.mark.asyncio
async def test_create_course_returns_created_row(service, mock_repo, mock_db_session):
    mock_repo.create.return_value = 42
    mock_repo.get_by_id.return_value = make_course(42)

    result = await service.create_course(mock_db_session, {"title": "Python Basics"})

    assert result.id == 42
    mock_repo.get_by_id.assert_called_once_with(mock_db_session, 42)

@pytest.mark.asyncio
async def test_create_course_logs_and_reraises(service, mock_repo, mock_db_session, caplog):
    mock_repo.create.side_effect = CourseConflictError("Course with this title already exists")

    with pytest.raises(CourseConflictError) as exc:
        await service.create_course(mock_db_session, {})

    assert exc.value.status_code == 409
    assert "Error creating course: Course with this title already exists" in caplog.text

@pytest.mark.asyncio
async def test_update_course(service, mock_repo, mock_db_session):
    mock_repo.update.return_value = True
    mock_repo.get_by_id.return_value = make_course(7, title="Renamed")

    result = await service.update_course(mock_db_session, 7, {"title": "Renamed"})

    assert result.title == "Renamed"
    mock_repo.update.assert_called_once_with(mock_db_session, 7, {"title": "Renamed"})

@pytest.mark.asyncio
async def test_update_course_not_found(service, mock_repo, mock_db_session):
    mock_repo.update.side_effect = CourseNotFoundError()

    with pytest.raises(CourseNotFoundError):
        await service.update_course(mock_db_session, 7, {})

@pytest.mark.asyncio
async def test_delete_course(service, mock_repo, mock_db_session):
    mock_repo.delete.return_value = True
    await service.delete_course(mock_db_session, 7)
    mock_repo.delete.assert_called_once_with(mock_db_session, 7)

@pytest.mark.asyncio
async def test_delete_course_missing(service, mock_repo, mock_db_session):
    mock_repo.delete.return_value = False

    with pytest.raises(CourseNotFoundError) as exc:
        await service.delete_course(mock_db_session, 7)
    assert exc.value.status_code == 404
