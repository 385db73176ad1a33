"""
PackTrack Backend — Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the whole suite.
How:   A real SQLite database (aiosqlite, in memory, one shared connection
       via StaticPool) per test, a FileStore rooted in tmp_path, and an
       httpx AsyncClient whose session/file-store dependencies are
       overridden to use both.

Fixture Hierarchy:
    engine ─┬─ session_factory ─┬─ db_session ─┬─ packaging_service
            │                   │              └─ user_service
            │                   └─ test_app ── test_client (one session per request)
    file_store (tmp_path) ──────┴─ packaging_service / test_client
"""

import os
import tempfile

# Must run before any packtrack import: settings are read at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["UPLOAD_ROOT"] = tempfile.mkdtemp(prefix="packtrack_test_")
os.environ["JWT_SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["LOG_LEVEL"] = "WARNING"

from typing import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import packtrack.models  # noqa: E402,F401
from packtrack.database import Base, build_engine, get_db_session  # noqa: E402
from packtrack.dependencies import get_file_store  # noqa: E402
from packtrack.models.user import User, UserRole  # noqa: E402
from packtrack.security import get_password_hash  # noqa: E402
from packtrack.services.file_store import FileStore, UploadConstraints  # noqa: E402
from packtrack.services.packaging_service import PackagingService  # noqa: E402
from packtrack.services.user_service import UserService  # noqa: E402

# Minimal PDF: header, one empty page, trailer
SAMPLE_PDF = (
    b"%PDF-1.4\n1 0 obj<</Type/Catalog/Pages 2 0 R>>endobj\n"
    b"2 0 obj<</Type/Pages/Kids[3 0 R]/Count 1>>endobj\n"
    b"3 0 obj<</Type/Page/Parent 2 0 R/MediaBox[0 0 612 792]>>endobj\n"
    b"trailer<</Root 1 0 R>>\n%%EOF\n"
)

ADMIN_PASSWORD = "admin-password-123"


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database with all tables, foreign keys enforced."""
    test_engine = build_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(test_engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# ══════════════════════════════════════════════════════════════════════════
# Storage & Services
# ══════════════════════════════════════════════════════════════════════════


@pytest.fixture
def file_store(tmp_path) -> FileStore:
    store = FileStore(upload_root=str(tmp_path / "uploads"), url_prefix="/uploads")
    store.ensure_root()
    return store


@pytest.fixture
def document_constraints() -> UploadConstraints:
    return UploadConstraints(max_size_bytes=3 * 1024 * 1024, allowed_mime_types=("application/pdf",))


@pytest.fixture
def packaging_service(db_session, file_store, document_constraints) -> PackagingService:
    return PackagingService(db_session, file_store, document_constraints)


@pytest.fixture
def user_service(db_session) -> UserService:
    return UserService(db_session)


@pytest.fixture
def sample_pdf_bytes() -> bytes:
    return SAMPLE_PDF


@pytest.fixture
def sample_item_payload():
    """The canonical create payload: one item, two components."""
    return {
        "name": "Cup A",
        "internalCode": "FL0001",
        "materials": ["PP"],
        "status": "DRAFT",
        "weight": "12g",
        "ppwrLevel": "A",
        "components": [
            {
                "name": "Lid",
                "format": "round",
                "weight": "2g",
                "volume": "0",
                "ppwrCategory": "cap",
                "ppwrLevel": "A",
                "quantity": 2,
                "supplier": "S1",
                "manufacturingProcess": "injection",
                "color": "white",
            },
            {
                "name": "Sleeve",
                "format": "band",
                "weight": "1g",
                "volume": "0",
                "ppwrCategory": "label",
                "ppwrLevel": "B",
                "quantity": 1,
                "supplier": "S2",
                "manufacturingProcess": "printing",
                "color": "blue",
            },
        ],
    }


# ══════════════════════════════════════════════════════════════════════════
# HTTP Client
# ══════════════════════════════════════════════════════════════════════════


@pytest.fixture
def test_app(session_factory, file_store):
    """
    A fresh app wired to the test database and file store.

    Each request gets its own session from the test database, committed on
    success and rolled back on error, like the production dependency.
    """
    from packtrack.main import create_app

    app = create_app()

    async def _test_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = _test_db_session
    app.dependency_overrides[get_file_store] = lambda: file_store
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def test_client(test_app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


async def _register(client: AsyncClient, email: str, password: str = "password-123") -> dict:
    response = await client.post(
        "/api/v1/users/register",
        json={"fullName": "Test User", "email": email, "password": password},
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest_asyncio.fixture
async def registered_user(test_client) -> dict:
    """A regular user registered through the API: {id, fullName, email, role, token}."""
    return await _register(test_client, "jane@example.com")


@pytest.fixture
def auth_headers(registered_user) -> dict:
    return {"Authorization": f"Bearer {registered_user['token']}"}


@pytest_asyncio.fixture
async def admin_headers(test_client, session_factory) -> dict:
    """Seeds an ADMIN directly in the database, then logs in through the API."""
    async with session_factory() as session:
        session.add(
            User(
                full_name="Admin",
                email="admin@example.com",
                password=get_password_hash(ADMIN_PASSWORD),
                role=UserRole.ADMIN,
            )
        )
        await session.commit()

    response = await test_client.post(
        "/api/v1/users/login",
        json={"email": "admin@example.com", "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['data']['token']}"}
