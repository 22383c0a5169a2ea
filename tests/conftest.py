"""Test configuration."""
import os
from collections.abc import AsyncIterator, Callable, Iterator
from datetime import UTC, date, datetime, time
from pathlib import Path
from uuid import uuid4

from alembic import command
from alembic.config import Config
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

# --- Default environment
os.environ.setdefault("DATABASE_URL", "sqlite:///./youngachievers_test.db")
os.environ.setdefault("API_KEY", "test-secret-key")
os.environ.setdefault("YA_ENV", "dev")

from app.main import app  # noqa: E402
from app.db import get_db  # noqa: E402
from app.models import (  # noqa: E402
    AdminUser,
    Amenity,
    AmenityCategory,
    Batch,
    BatchSession,
    Member,
    Partner,
    PersonStatus,
)
from app.models.api_key import ApiKey, ApiScope  # noqa: E402
from app.utils.apikey import hash_key  # noqa: E402
from app.utils.time import FixedClock, get_clock  # noqa: E402

ROOT = Path(__file__).resolve().parents[1]
DB_PATH = Path("./youngachievers_test.db")

# Default "now" for every test: 2025-01-05 at noon UTC.
DEFAULT_NOW = datetime(2025, 1, 5, 12, 0, tzinfo=UTC)


def _run_migrations() -> None:
    cfg = Config(str(ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(ROOT / "alembic"))
    cfg.set_main_option("sqlalchemy.url", os.environ["DATABASE_URL"])
    command.upgrade(cfg, "head")


# --- (1) Fresh database file per run
if DB_PATH.exists():
    DB_PATH.unlink()

engine = create_engine(
    os.environ["DATABASE_URL"],
    connect_args={"check_same_thread": False},
    future=True,
)


# pysqlite defers BEGIN on its own; hand transaction control to SQLAlchemy so
# SAVEPOINTs nest correctly inside the per-test transaction.
@event.listens_for(engine, "connect")
def _do_connect(dbapi_connection, connection_record) -> None:
    dbapi_connection.isolation_level = None


@event.listens_for(engine, "begin")
def _do_begin(conn) -> None:
    conn.exec_driver_sql("BEGIN")


TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False,
                                   future=True, expire_on_commit=False)

# --- (2) Build the schema with Alembic only
_run_migrations()


@pytest.fixture
def db_session() -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    # Service-level commit()/rollback() act on a SAVEPOINT inside the outer transaction.
    session = TestingSessionLocal(bind=connection, join_transaction_mode="create_savepoint")
    try:
        yield session
    finally:
        session.close()
        transaction.rollback()
        connection.close()


@pytest.fixture
def fixed_clock() -> FixedClock:
    return FixedClock(DEFAULT_NOW)


@pytest.fixture(autouse=True)
def override_dependencies(db_session: Session, fixed_clock: FixedClock) -> Iterator[None]:
    def _get_db() -> Iterator[Session]:
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_clock] = lambda: fixed_clock
    yield
    app.dependency_overrides.pop(get_db, None)
    app.dependency_overrides.pop(get_clock, None)


@pytest.fixture
async def client() -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as async_client:
        yield async_client


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def admin_user(db_session: Session) -> AdminUser:
    admin = AdminUser(first_name="Jane", last_name="Doe", email=f"jane-{uuid4().hex[:8]}@example.com")
    db_session.add(admin)
    db_session.flush()
    return admin


@pytest.fixture
def make_api_key(db_session: Session) -> Callable[..., ApiKey]:
    def _factory(
        name: str,
        key: str,
        scope: ApiScope = ApiScope.staff,
        is_active: bool = True,
        admin_user: AdminUser | None = None,
    ) -> ApiKey:
        api_key = ApiKey(
            name=name,
            prefix=f"t_{uuid4().hex[:10]}",
            key_hash=hash_key(key),
            scope=scope,
            is_active=is_active,
            admin_user_id=admin_user.id if admin_user else None,
        )
        db_session.add(api_key)
        db_session.commit()
        db_session.refresh(api_key)
        return api_key

    return _factory


@pytest.fixture
def staff_headers(make_api_key: Callable[..., ApiKey], admin_user: AdminUser) -> dict[str, str]:
    token = f"staff-{uuid4().hex}"
    make_api_key(name=f"staff-{uuid4().hex}", key=token, scope=ApiScope.staff, admin_user=admin_user)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(make_api_key: Callable[..., ApiKey], admin_user: AdminUser) -> dict[str, str]:
    token = f"admin-{uuid4().hex}"
    make_api_key(name=f"admin-{uuid4().hex}", key=token, scope=ApiScope.admin, admin_user=admin_user)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def legacy_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {os.environ['API_KEY']}"}


@pytest.fixture
def make_batch(db_session: Session) -> Callable[..., Batch]:
    def _factory(name: str | None = None, **kwargs) -> Batch:
        batch = Batch(name=name or f"Batch {uuid4().hex[:6]}", **kwargs)
        db_session.add(batch)
        db_session.flush()
        return batch

    return _factory


@pytest.fixture
def make_session(db_session: Session) -> Callable[..., BatchSession]:
    def _factory(batch: Batch, on: date, title: str | None = None) -> BatchSession:
        session = BatchSession(
            batch_id=batch.id,
            title=title,
            date=on,
            start_time=time(9, 0),
            end_time=time(11, 0),
        )
        db_session.add(session)
        db_session.flush()
        return session

    return _factory


def _mobile() -> str:
    return "07" + str(uuid4().int)[:8]


@pytest.fixture
def make_member(db_session: Session) -> Callable[..., Member]:
    def _factory(
        name: str = "Mia",
        batches: list[Batch] | None = None,
        status: PersonStatus = PersonStatus.active,
        **kwargs,
    ) -> Member:
        member = Member(
            name=name,
            email=f"{name.lower().replace(' ', '.')}-{uuid4().hex[:6]}@example.com",
            mobile=_mobile(),
            status=status,
            **kwargs,
        )
        member.batches = list(batches or [])
        db_session.add(member)
        db_session.flush()
        return member

    return _factory


@pytest.fixture
def make_partner(db_session: Session) -> Callable[..., Partner]:
    def _factory(
        name: str = "Coach",
        batches: list[Batch] | None = None,
        status: PersonStatus = PersonStatus.active,
        **kwargs,
    ) -> Partner:
        partner = Partner(
            name=name,
            email=f"{name.lower().replace(' ', '.')}-{uuid4().hex[:6]}@example.com",
            mobile=_mobile(),
            status=status,
            **kwargs,
        )
        partner.batches = list(batches or [])
        db_session.add(partner)
        db_session.flush()
        return partner

    return _factory


@pytest.fixture
def make_amenity(db_session: Session) -> Callable[..., Amenity]:
    def _factory(name: str, category: AmenityCategory = AmenityCategory.basic, **kwargs) -> Amenity:
        amenity = Amenity(name=name, category=category, **kwargs)
        db_session.add(amenity)
        db_session.flush()
        return amenity

    return _factory
