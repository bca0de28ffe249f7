import os
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# ------------------------------------------------------------------
# FORCE TESTING SETTINGS
# Must be set BEFORE importing app.main so config/database pick them
# up: file-backed SQLite, no SMTP, no Supabase, in-memory limiter.
# ------------------------------------------------------------------
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test_hostel.db"
os.environ["SECRET_KEY"] = "test-secret-key-for-hostel-management-tests"
os.environ["ENV"] = "test"
os.environ["SMTP_HOST"] = ""
os.environ["SUPABASE_URL"] = ""
os.environ["SUPABASE_KEY"] = ""
os.environ["REDIS_URL"] = ""
os.environ["SUPER_ADMIN_EMAIL"] = ""
os.environ["SEED_ROOMS"] = "false"

from app.main import app
from app.core.database import AsyncSessionLocal, drop_db, init_db
from app.models.enums import RegistrationStatus, RoomCondition, UserRole
from app.models.registration import StudentRegistration
from app.services.auth_service import create_login_response, create_user
from app.services.room_service import create_room


@pytest_asyncio.fixture(autouse=True)
async def fresh_db():
    """Every test starts from empty tables."""
    await drop_db()
    await init_db()
    yield


@pytest_asyncio.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


@pytest_asyncio.fixture
async def session():
    async with AsyncSessionLocal() as s:
        yield s


# ------------------------------------------------------------------
# FACTORIES
# ------------------------------------------------------------------
@pytest.fixture
def auth_headers():
    def _headers(user):
        token = create_login_response(user).access_token
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def make_user(session):
    async def _make(email, role=UserRole.Student, name="Test User", password="password123"):
        return await create_user(session, name=name, email=email, password=password, role=role)
    return _make


@pytest.fixture
def make_student(session, make_user):
    """Student account with a registration (approved by default)."""
    async def _make(
        email,
        name="Test Student",
        status=RegistrationStatus.Approved,
        academic_year=1,
    ):
        user = await make_user(email, role=UserRole.Student, name=name)
        registration = StudentRegistration(
            user_id=user.id,
            full_name=name,
            age=20,
            phone="0700000000",
            id_number=f"ID-{email.split('@')[0]}",
            status=status,
            academic_year=academic_year,
        )
        session.add(registration)
        await session.commit()
        return user
    return _make


@pytest.fixture
def make_room(session):
    async def _make(room_number, floor="1", max_occupancy=2, condition=RoomCondition.Good):
        return await create_room(
            session,
            {
                "room_number": room_number,
                "floor": floor,
                "max_occupancy": max_occupancy,
                "condition": condition,
            },
        )
    return _make


@pytest_asyncio.fixture
async def admin(make_user):
    return await make_user("admin@example.com", role=UserRole.Admin, name="Admin")


@pytest_asyncio.fixture
async def staff(make_user):
    return await make_user("staff@example.com", role=UserRole.Staff, name="Warden")
