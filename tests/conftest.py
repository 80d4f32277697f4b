"""
Shared fixtures: an in-memory database per test and a Flask test app.
"""

import pytest

import config.database as database
from config.models import Base
from config.settings import Settings
from webapp.app import create_app
from webapp.services.credential_vault import CredentialVault

TEST_SECRET = "test-aes-secret"


@pytest.fixture
def settings():
    return Settings(
        aes_secret_key=TEST_SECRET,
        database_url="sqlite://",
        session_secret="test-session-secret",
        dispatcher_enabled=False,
        reminder_timezone="UTC",
        log_file="",
    )


@pytest.fixture
def db():
    database.configure_database("sqlite://")
    database.init_database()
    yield database
    Base.metadata.drop_all(bind=database.engine)


@pytest.fixture
def vault():
    return CredentialVault(TEST_SECRET)


@pytest.fixture
def app(settings):
    app = create_app(settings)
    app.config.update(TESTING=True)
    yield app
    Base.metadata.drop_all(bind=database.engine)


@pytest.fixture
def client(app):
    return app.test_client()
