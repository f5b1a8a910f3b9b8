"""Root conftest for all tests.

Each test gets its own file-backed SQLite database so that tests using
worker threads share one database through separate connections.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from estimator.config.settings import Settings
from estimator.config_store import ConfigRevisionStore
from estimator.core.auth_jwt import create_access_token
from estimator.core.password import hash_password
from estimator.core.permissions import Role
from estimator.db.models import User
from estimator.db.session import Database
from estimator.main import create_app
from estimator.otp.mailer import SmtpMailer


@pytest.fixture
def database(tmp_path) -> Database:
    db = Database(f"sqlite:///{tmp_path / 'estimator-test.db'}")
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def store(database: Database) -> ConfigRevisionStore:
    config_store = ConfigRevisionStore(database)
    config_store.ensure_heads()
    return config_store


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        SMTP_HOST="smtp.test.local",
        SMTP_USER="quotes@test.local",
        SMTP_PASSWORD="smtp-password",
        SCHEDULER_ENABLED=False,
        MAIL_BREAKER_MAX_FAILURES=2,
    )


@pytest.fixture
def mailer(test_settings: Settings) -> SmtpMailer:
    return SmtpMailer(test_settings)


@pytest.fixture
def app(database: Database, test_settings: Settings, mailer: SmtpMailer):
    return create_app(database, config=test_settings, mailer=mailer, start_scheduler=False)


@pytest.fixture
def client(app) -> TestClient:
    with TestClient(app) as test_client:
        yield test_client


def make_user(
    database: Database,
    *,
    email: str,
    role: Role,
    password: str = "secret123",
    is_active: bool = True,
) -> User:
    with database.session() as session:
        user = User(
            email=email,
            name=email.split("@")[0],
            password_hash=hash_password(password),
            role=role.value,
            is_active=is_active,
        )
        session.add(user)
        session.flush()
    return user


@pytest.fixture
def admin_user(database: Database) -> User:
    return make_user(database, email="admin@test.local", role=Role.admin)


@pytest.fixture
def head_user(database: Database) -> User:
    return make_user(database, email="head@test.local", role=Role.company_head)


@pytest.fixture
def client_user(database: Database) -> User:
    return make_user(database, email="client@test.local", role=Role.client)


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}


@pytest.fixture
def user_factory(database: Database):
    def _make(email: str, role: Role, **kwargs) -> User:
        return make_user(database, email=email, role=role, **kwargs)

    return _make


@pytest.fixture
def headers_for():
    return auth_headers
