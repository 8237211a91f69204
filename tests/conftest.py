import os
import uuid
from typing import Callable, Generator, Optional

os.environ.setdefault("DATABASE_ALLOW_NON_POSTGRES", "1")
os.environ.setdefault("TEST_DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("DATABASE_URL", os.environ["TEST_DATABASE_URL"])
os.environ.setdefault("AUTH_JWT_SECRET", "test-secret-key-with-enough-length-123")
os.environ.setdefault("STORAGE_PROVIDER", "none")
os.environ.setdefault("AUTH_ARGON2_MEMORY_COST", "8192")

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.dialects.postgresql import ARRAY, JSONB, UUID
from sqlalchemy.engine import Engine
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import database as database_module
from database import Base, get_db


# Provide lightweight fallbacks for PostgreSQL-only column types when using SQLite.
@compiles(JSONB, "sqlite")  # type: ignore[misc]
def _compile_jsonb_sqlite(_element, _compiler, **_kw):  # pragma: no cover - sqlite compat
    return "TEXT"


@compiles(UUID, "sqlite")  # type: ignore[misc]
def _compile_uuid_sqlite(_element, _compiler, **_kw):  # pragma: no cover - sqlite compat
    return "CHAR(32)"


@compiles(ARRAY, "sqlite")  # type: ignore[misc]
def _compile_array_sqlite(_element, _compiler, **_kw):  # pragma: no cover - sqlite compat
    return "TEXT"


@pytest.fixture()
def engine(monkeypatch: pytest.MonkeyPatch) -> Generator[Engine, None, None]:
    import models  # noqa: F401
    from services import user_service

    test_engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    factory = sessionmaker(bind=test_engine, autoflush=False, expire_on_commit=False)
    monkeypatch.setattr(database_module, "SessionLocal", factory)
    monkeypatch.setattr(database_module, "engine", test_engine)
    monkeypatch.setattr(user_service, "SessionLocal", factory)
    try:
        yield test_engine
    finally:
        Base.metadata.drop_all(bind=test_engine)
        test_engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker:
    return database_module.SessionLocal


@pytest.fixture()
def db_session(session_factory: sessionmaker) -> Generator[Session, None, None]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def make_client(session_factory: sessionmaker) -> Generator[Callable[..., TestClient], None, None]:
    """Build a TestClient around the given routers with bearer auth enabled."""

    from web.middleware.auth_context import auth_context_middleware

    clients = []

    def _factory(*routers) -> TestClient:
        app = FastAPI()

        @app.middleware("http")
        async def _auth(request: Request, call_next):
            return await auth_context_middleware(request, call_next)

        for router in routers:
            app.include_router(router, prefix="/api")

        def override_get_db():
            session = session_factory()
            try:
                yield session
            finally:
                session.close()

        app.dependency_overrides[get_db] = override_get_db
        client = TestClient(app)
        clients.append(client)
        return client

    try:
        yield _factory
    finally:
        for client in clients:
            client.close()


@pytest.fixture()
def create_user(db_session: Session) -> Callable[..., "object"]:
    from models.user import User
    from services.auth_service import hash_password

    def _create(
        email: Optional[str] = None,
        *,
        password: str = "secret123",
        role: str = "visitor",
        is_admin: bool = False,
        is_partner: bool = False,
        organization_id: Optional[uuid.UUID] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ):
        user = User(
            email=email or f"user-{uuid.uuid4().hex[:8]}@example.com",
            password_hash=hash_password(password),
            role=role,
            is_admin=is_admin,
            is_partner=is_partner,
            organization_id=organization_id,
            first_name=first_name,
            last_name=last_name,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _create


@pytest.fixture()
def auth_header() -> Callable[..., dict]:
    from services.auth_tokens import create_access_token

    def _header(user) -> dict:
        token, _ = create_access_token(
            user_id=str(user.id),
            email=user.email,
            role=user.role,
            is_admin=bool(user.is_admin),
        )
        return {"Authorization": f"Bearer {token}"}

    return _header
