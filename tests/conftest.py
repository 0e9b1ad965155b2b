"""Shared test fixtures for the clinic booking API tests.

Uses an in-memory SQLite async engine so tests run without PostgreSQL.
"""

from datetime import date, time

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import Base, get_db
from app.main import app

# Import all models to ensure they're registered with Base.metadata
from app.models.user import User
from app.models.doctor import Doctor
from app.models.service import Service
from app.models.appointment import Appointment, AppointmentStatus
from app.models.admin_audit_log import AdminAuditLog  # noqa: F401
from app.services.auth import create_token_for_user

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def session_factory():
    """Fresh schema per test; every session shares the one in-memory connection."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield factory
    app.dependency_overrides.pop(get_db, None)
    await engine.dispose()


@pytest_asyncio.fixture
async def client(session_factory):
    """Async HTTP test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def db(session_factory):
    """Direct DB session for test setup/assertions."""
    async with session_factory() as session:
        yield session


async def make_user(db, email: str, role: str = "user", first_name: str = "Test") -> User:
    user = User(
        first_name=first_name,
        last_name="User",
        email=email,
        hashed_password="not-a-real-hash",
        role=role,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_token_for_user(user)}"}


@pytest_asyncio.fixture
async def patient(db):
    return await make_user(db, "patient@example.com", first_name="Pat")


@pytest_asyncio.fixture
async def other_patient(db):
    return await make_user(db, "other@example.com", first_name="Olive")


@pytest_asyncio.fixture
async def staff(db):
    return await make_user(db, "staff@example.com", role="staff", first_name="Sam")


@pytest_asyncio.fixture
async def admin(db):
    return await make_user(db, "admin@example.com", role="admin", first_name="Ada")


@pytest_asyncio.fixture
async def doctors(db):
    """Three doctors so ids 1..3 exist."""
    created = [
        Doctor(name="Dr. Adams", specialization="General"),
        Doctor(name="Dr. Brown", specialization="Dermatology"),
        Doctor(name="Dr. Clark", specialization="Cardiology"),
    ]
    db.add_all(created)
    await db.commit()
    for doctor in created:
        await db.refresh(doctor)
    return created


@pytest_asyncio.fixture
async def services(db):
    created = [
        Service(name="Consultation", price=50, duration_minutes=30),
        Service(name="Check-up", price=80, duration_minutes=30),
    ]
    db.add_all(created)
    await db.commit()
    for service in created:
        await db.refresh(service)
    return created


async def add_appointment(
    db,
    patient: User,
    doctor: Doctor,
    service: Service,
    on: date = date(2025, 3, 10),
    at: time = time(10, 0),
    status: AppointmentStatus = AppointmentStatus.PENDING,
    notes: str | None = None,
) -> Appointment:
    appointment = Appointment(
        user_id=patient.id,
        doctor_id=doctor.id,
        service_id=service.id,
        appointment_date=on,
        appointment_time=at,
        status=status,
        payment_status="pending",
        notes=notes,
    )
    db.add(appointment)
    await db.commit()
    await db.refresh(appointment)
    return appointment
