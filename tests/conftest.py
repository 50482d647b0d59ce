from datetime import date, datetime, time, timezone
from decimal import Decimal
import os
from pathlib import Path
import sys

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("SMS_API_KEY", "")

from vetclinic.core.database import Base  # noqa: E402
from vetclinic.core.exceptions import GatewayError  # noqa: E402
from vetclinic.modules.appointments.models import Appointment  # noqa: E402
import vetclinic.modules.billing.models  # noqa: E402,F401
from vetclinic.modules.records.models import InventoryItem, Owner, Pet  # noqa: E402
from vetclinic.modules.reminders.dispatcher import ReminderDispatcher  # noqa: E402
from vetclinic.modules.users.models import User  # noqa: E402
from vetclinic.shared.enums import AppointmentStatus, UserRole  # noqa: E402

# 09:00 on 2025-06-15 in Manila.
FIXED_NOW = datetime(2025, 6, 15, 1, 0, tzinfo=timezone.utc)
TODAY = date(2025, 6, 15)
TOMORROW = date(2025, 6, 16)


class FakeGateway:
    """Records messages; raises GatewayError for numbers listed in ``fail_numbers``."""

    def __init__(self, fail_numbers=()):
        self.fail_numbers = set(fail_numbers)
        self.sent: list[tuple[str, str]] = []
        self.attempts: list[str] = []

    async def send(self, number: str, message: str) -> None:
        self.attempts.append(number)
        if number in self.fail_numbers:
            raise GatewayError(f"rejected {number}")
        self.sent.append((number, message))


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'clinic.db'}", future=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture
def dispatcher(session_factory, fake_gateway):
    return ReminderDispatcher(
        session_factory,
        fake_gateway,
        clock=lambda: FIXED_NOW,
        tz_name="Asia/Manila",
        clinic_name="PURRFECTCARE",
    )


@pytest.fixture
def staff_user():
    return User(user_id="01STAFFUSER000000000000000", email="vet@example.com", name="Dr. Cruz",
                role=UserRole.DOCTOR, is_active=True)


@pytest.fixture
def seed_pet(db_session):
    async def _seed(owner_name="Maria", pet_name="Mochi", contact="09171234567"):
        owner = Owner(name=owner_name, contact=contact)
        pet = Pet(owner=owner, name=pet_name, species="Cat")
        db_session.add_all([owner, pet])
        await db_session.commit()
        return pet

    return _seed


@pytest.fixture
def seed_appointment(db_session):
    async def _seed(pet, on_date, at=time(14, 30), status=AppointmentStatus.SCHEDULED, reason=None, **flags):
        appointment = Appointment(
            pet_id=pet.pet_id,
            date=on_date,
            time=at,
            reason=reason,
            status=status,
            sms_1d_sent=flags.get("sms_1d_sent", False),
            sms_sameday_sent=flags.get("sms_sameday_sent", False),
        )
        db_session.add(appointment)
        await db_session.commit()
        return appointment

    return _seed


@pytest.fixture
def seed_inventory(db_session):
    async def _seed(name="Amoxicillin", price="150.00", quantity=20):
        item = InventoryItem(name=name, category="Medicine", price=Decimal(price), quantity=quantity)
        db_session.add(item)
        await db_session.commit()
        return item

    return _seed


@pytest.fixture
def reload_appointment(session_factory):
    """Read an appointment through a fresh session, bypassing the test session cache."""

    async def _reload(appointment_id):
        async with session_factory() as session:
            return await session.get(Appointment, appointment_id)

    return _reload


@pytest.fixture
def failing_gateway():
    return FakeGateway(fail_numbers={"09171234567", "0922"})


@pytest.fixture
def failing_dispatcher(session_factory, failing_gateway):
    return ReminderDispatcher(session_factory, failing_gateway, clock=lambda: FIXED_NOW, tz_name="Asia/Manila")
