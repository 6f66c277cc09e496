"""Pytest configuration and fixtures."""

from unittest.mock import AsyncMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from receptionist.persistence.database import Base, get_db
from receptionist.persistence.models import *  # noqa: F401, F403
from receptionist.persistence.models import Client, ClientPhoneLine, Contact, EquipmentItem

CLIENT_ID = "tex-intel-primary"
ASSISTANT_ID = "asst_tex_intel"
PHONE_LINE_ID = "pn_tex_main"
ABHAVE_PHONE = "+16025705474"
UNKNOWN_PHONE = "+14805550199"

INVENTORY = [
    ("Cat 336", "Excavator", 2, 1200, "Excellent", 2022, "36-ton, 268hp, 24ft dig depth"),
    ("Cat 320", "Excavator", 3, 950, "Good", 2021, "20-ton, 121hp, 20ft dig depth"),
    ("Cat D6", "Dozer", 0, 900, "Good", 2020, "160hp, 14ft blade"),
    ("Cat D8", "Dozer", 1, 1400, "Excellent", 2023, "305hp, 16ft blade, GPS ready"),
    ("Bobcat T76", "Skid Steer", 5, 350, "Good", 2021, "74hp, 3,000lb capacity"),
]


@pytest.fixture
async def db_session():
    """Create a test database session."""
    # Use in-memory SQLite for testing
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def tenant(db_session) -> Client:
    """Default client with a provisioned assistant, a mapped phone line and department numbers."""
    client = Client(
        id=CLIENT_ID,
        name="Tex Intel",
        company="Tex Intel Heavy Equipment",
        sales_phone="+16025550101",
        rentals_phone="+16025550102",
        service_phone="+16025550103",
        parts_phone=None,
        billing_phone="+16025550105",
        vapi_assistant_id=ASSISTANT_ID,
        agent_name="Tex",
        enable_inventory=True,
        enable_transfers=True,
    )
    db_session.add(client)
    db_session.add(
        ClientPhoneLine(client_id=CLIENT_ID, vapi_phone_number_id=PHONE_LINE_ID, phone_number="+16025550100")
    )
    await db_session.commit()
    return client


@pytest.fixture
async def known_caller(db_session) -> Contact:
    contact = Contact(
        phone_number=ABHAVE_PHONE,
        name="Abhave",
        company="Tex Intel HQ",
        last_machine="Cat 336 Excavator",
        status="VIP",
        total_calls=3,
    )
    db_session.add(contact)
    await db_session.commit()
    return contact


@pytest.fixture
async def inventory(db_session) -> list[EquipmentItem]:
    items = [
        EquipmentItem(
            model=model,
            category=category,
            available=available,
            price_per_day=price,
            condition=condition,
            year=year,
            specs=specs,
        )
        for model, category, available, price, condition, year, specs in INVENTORY
    ]
    db_session.add_all(items)
    await db_session.commit()
    return items


@pytest.fixture
def call_control():
    """Live call control replaced with a mock that records transfers."""
    control = AsyncMock()
    control.transfer = AsyncMock(return_value=None)
    return control


@pytest.fixture
async def api_client(db_session, call_control):
    """Create a test HTTP client bound to the app with test dependencies."""
    from httpx import ASGITransport, AsyncClient

    from receptionist.api.deps import get_call_control
    from receptionist.domain.services.tool_handlers import build_tool_registry
    from receptionist.main import app

    app.state.tool_registry = build_tool_registry()
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_call_control] = lambda: call_control

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
