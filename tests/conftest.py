"""
Shared fixtures: in-memory stores and a TestClient wired to them.
"""

import pytest
from fastapi.testclient import TestClient

from api.documents import document_store_provider
from auth.dependencies import get_credential_store
from config.settings import Settings
from main import COLLECTIONS, create_app
from tests.fakes import FakeDocumentStore, FakeUserStore

TEST_SECRET = "test-secret-key"


def _returning(value):
    # takes no parameters, otherwise FastAPI reads them as query params
    return lambda: value


@pytest.fixture
def settings():
    return Settings(jwt_secret=TEST_SECRET, bcrypt_rounds=4, _env_file=None)


@pytest.fixture
def user_store():
    return FakeUserStore()


@pytest.fixture
def document_stores():
    return {name: FakeDocumentStore(name) for name, _ in COLLECTIONS}


@pytest.fixture
def app(settings, user_store, document_stores):
    app = create_app(settings)
    app.dependency_overrides[get_credential_store] = _returning(user_store)
    for name, store in document_stores.items():
        app.dependency_overrides[document_store_provider(name)] = _returning(store)
    return app


@pytest.fixture
def client(app):
    # not entered as a context manager, so the lifespan (and the database) never starts
    return TestClient(app)
