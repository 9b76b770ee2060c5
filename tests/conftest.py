# tests/conftest.py
import os
import tempfile

# Settings are read at import time
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ["STORAGE_PATH"] = tempfile.mkdtemp(prefix="contract-vault-media-")
os.environ["OPENAI_API_KEY"] = ""
os.environ["MISTRAL_API_KEY"] = ""

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from contract_vault.core.security import create_access_token
from contract_vault.db.base import Base
from contract_vault.db.models.contract import Contract
from contract_vault.db.models.media import Media
from contract_vault.db.models.search_history import SearchHistory  # noqa: F401
from contract_vault.db.models.user import User

BASE_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)


def make_engine(db_path: Path):
    # NullPool: no connection outlives the event loop that opened it
    return create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)


def make_session_factory(engine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_schema(engine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture
async def engine(tmp_path):
    engine = make_engine(tmp_path / "test.db")
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker:
    return make_session_factory(engine)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


def contract_data(n: int, **overrides) -> Dict[str, Any]:
    """Contract column values; created_at increases with n so newest = highest n"""
    data = {
        "operator": "SEPLAT Energy",
        "contractor_name": f"Contractor {n}",
        "contract_title": f"Pipeline maintenance {n}",
        "year": 2024,
        "contract_number": f"CN-{n:04d}",
        "start_date": datetime(2024, 1, 1, tzinfo=timezone.utc),
        "end_date": datetime(2024, 12, 31, tzinfo=timezone.utc),
        "created_at": BASE_TIME + timedelta(minutes=n),
    }
    data.update(overrides)
    return data


async def seed_user(db: AsyncSession, user_id: str = "user-1", role: str = "user") -> User:
    user = User(id=user_id, email=f"{user_id}@example.com", username=user_id, role=role)
    db.add(user)
    await db.commit()
    return user


async def seed_contracts(db: AsyncSession, rows: List[Dict[str, Any]]) -> List[Contract]:
    contracts = [Contract(**row) for row in rows]
    db.add_all(contracts)
    await db.commit()
    return contracts


async def seed_media(db: AsyncSession, contract_id: str, n: int = 1, **overrides) -> Media:
    data = {
        "url": f"https://files.example.com/{contract_id}/doc-{n}.pdf",
        "filename": f"doc-{n}.pdf",
        "original_name": f"doc-{n}.pdf",
        "mimetype": "application/pdf",
        "size": 1024,
        "public_id": f"{contract_id}/doc-{n}.pdf",
        "contract_id": contract_id,
        "tags": [],
        "created_at": BASE_TIME + timedelta(seconds=n),
    }
    data.update(overrides)
    media = Media(**data)
    db.add(media)
    await db.commit()
    return media


def auth_header(user_id: str, role: str = "user") -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id, role)}"}


class RecordingChannel:
    """In-memory search channel collecting (event, data) pairs"""

    def __init__(self, close_after: int = None):
        self.events = []
        self.open = True
        self.close_after = close_after

    def is_open(self) -> bool:
        return self.open

    async def emit(self, event: str, data: Dict[str, Any]) -> None:
        self.events.append((event, data))
        if self.close_after is not None and len(self.events) >= self.close_after:
            self.open = False

    def names(self) -> List[str]:
        return [event for event, _ in self.events]

    def of(self, event: str) -> List[Dict[str, Any]]:
        return [data for name, data in self.events if name == event]


@pytest.fixture
def channel() -> RecordingChannel:
    return RecordingChannel()


@pytest.fixture
async def api_client(session_factory):
    """httpx client bound to the app with get_db pointed at the test database"""
    from httpx import ASGITransport, AsyncClient

    from contract_vault.db.base import get_db
    from contract_vault.main import app

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
