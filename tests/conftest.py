# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

# Set test environment before importing app
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only-32chars!"  # nosec - test-only secret  # noqa: S105
os.environ["DATABASE_URL"] = "sqlite:///./test.db"

from src.database import get_db
from src.main import app
from src.models import Company, User
from src.models.base import Base
from src.rbac.catalog import parse_catalog
from src.rbac.roles import ADMINISTRATOR_ROLE
from src.security import get_password_hash
from src.services import rbac_service
from src.services.rbac_seed_service import seed_rbac_data

# Test database setup
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

SMALL_CATALOG_JSON = """
[
  {"code": "V1", "name": "View One", "actions": [
    {"code": "edit", "name": "Edit"},
    {"code": "create", "name": "Create"},
    {"code": "delete", "name": "Delete"},
    {"code": "export", "name": "Export"}
  ]},
  {"code": "V2", "name": "View Two", "actions": [
    {"code": "view", "name": "View"}
  ]},
  {"code": "inventory", "name": "Inventory", "actions": [
    {"code": "view", "name": "View"},
    {"code": "edit", "name": "Edit"}
  ]}
]
"""


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def small_catalog():
    """Three-view catalog; V1 has more actions than the toggle slots."""
    return parse_catalog(SMALL_CATALOG_JSON)


@pytest.fixture
def db_password_function(db_session):
    """Register a ``check_password`` SQL function on every test connection.

    Yields the dict of passwords the function accepts, keyed by stored hash.
    A hash missing from the dict makes the function return NULL.
    """
    accepted: dict[str, str] = {}

    def check_password(password, stored_hash):
        if stored_hash not in accepted:
            return None
        return 1 if accepted[stored_hash] == password else 0

    def register(dbapi_connection, connection_record):
        dbapi_connection.create_function("check_password", 2, check_password)

    event.listen(engine, "connect", register)
    engine.dispose()
    try:
        yield accepted
    finally:
        event.remove(engine, "connect", register)
        engine.dispose()


def _create_user(
    db_session,
    username: str = "testuser",
    password: str = "testpassword123",
    role_names: tuple[str, ...] = (),
    **fields,
) -> User:
    """Persist a user, optionally with roles looked up by name."""
    values = {
        "identification": "1000",
        "first_name": "Test",
        "last_name": "User",
        "email": f"{username}@example.com",
        "is_active": True,
    }
    values.update(fields)
    user = User(
        username=username,
        hashed_password=get_password_hash(password),
        **values,
    )
    db_session.add(user)
    db_session.flush()
    role_ids = [rbac_service.get_role_by_name(db_session, n).id for n in role_names]
    if role_ids:
        rbac_service.set_user_roles(db_session, user, role_ids)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def test_user(db_session) -> User:
    """Create a test user with the read-only Viewer role."""
    seed_rbac_data(db_session)
    return _create_user(db_session, role_names=("Viewer",))


@pytest.fixture
def admin_user(db_session) -> User:
    """Create an admin test user with the Administrator role."""
    seed_rbac_data(db_session)
    return _create_user(
        db_session,
        username="admin",
        password="adminpassword123",
        role_names=(ADMINISTRATOR_ROLE,),
        identification="1",
        first_name="Ada",
        last_name="Admin",
    )


@pytest.fixture
def company(db_session) -> Company:
    company = Company(business_name="Acme Corp", tax_id="ACME-1", is_active=True)
    db_session.add(company)
    db_session.commit()
    db_session.refresh(company)
    return company


@pytest.fixture
def authenticated_client(client, test_user):
    """Create an authenticated test client."""
    response = client.post(
        "/api/v1/auth/login",
        json={"username": "testuser", "password": "testpassword123"},
    )
    assert response.status_code == 200
    return client


@pytest.fixture
def admin_client(client, admin_user):
    """Create an authenticated admin test client."""
    response = client.post(
        "/api/v1/auth/login", json={"username": "admin", "password": "adminpassword123"}
    )
    assert response.status_code == 200
    return client


@pytest.fixture
def user_factory(db_session):
    """Create users: ``user_factory("jdoe", role_names=("Viewer",), ...)``."""

    def factory(username: str = "testuser", **kwargs) -> User:
        return _create_user(db_session, username=username, **kwargs)

    return factory
