"""
Pytest configuration and shared fixtures
"""
import json
import os

# Must be set before backoffice.config is imported
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["MEILI_HOST"] = ""
os.environ["MEILI_API_KEY"] = ""
os.environ["PERMISSION_MODEL"] = "flat"

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from core.engine.event_bus import TriggerBus
from core.search.client import SearchConfig, SearchIndexClient
from core.search.index_ensure import EnsuredIndexCache
from core.security.checker import FlatGrantPermissionResolver, RolePermissionResolver, permission_checker
from core.security.permission import role_permission_registry
from backoffice.database import Base, get_db
from backoffice.models import documents  # noqa: F401
from backoffice.security.auth import create_access_token
from backoffice.security.permissions import DEFAULT_ROLE_PERMISSIONS, list_all_permission_keys
from backoffice.services.document_store import DocumentStore
from backoffice.main import app

MEILI_HOST = "http://meili.test"
MEILI_KEY = "master-key"


@pytest.fixture(scope="function")
def db_engine():
    """In-memory database engine"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(scope="function")
def db_session(session_factory):
    """Database session"""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def bus():
    """Fresh trigger bus"""
    return TriggerBus()


@pytest.fixture
def store(db_session, bus):
    """Document store publishing to the fresh bus"""
    return DocumentStore(db_session, bus)


@pytest.fixture(scope="function")
def client(db_session):
    """Test client"""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def roles_model(client):
    """Switch the running app to the role-based permission model"""
    role_permission_registry.clear()
    permission_checker.set_resolver(RolePermissionResolver(DEFAULT_ROLE_PERMISSIONS))
    yield permission_checker
    permission_checker.set_resolver(FlatGrantPermissionResolver())
    role_permission_registry.clear()


# ============== Auth fixtures ==============

def _create_user(db_session, user_id, **fields):
    DocumentStore(db_session).set("users", user_id, fields)
    return create_access_token(user_id)


@pytest.fixture
def admin_token(db_session):
    """hotel-1 user holding every catalog permission"""
    return _create_user(
        db_session, "admin-1",
        hotelUid="hotel-1",
        email="admin@hotel-1.test",
        firstName="Ada",
        lastName="Admin",
        roles=["admin"],
        permissions=list_all_permission_keys(),
    )


@pytest.fixture
def viewer_token(db_session):
    """hotel-1 user with read-only grants"""
    return _create_user(
        db_session, "viewer-1",
        hotelUid="hotel-1",
        email="viewer@hotel-1.test",
        roles=["viewer"],
        permissions=["catalogproducts.read", "supplierproducts.read", "suppliers.read"],
    )


@pytest.fixture
def other_hotel_token(db_session):
    """hotel-2 user holding every permission"""
    return _create_user(
        db_session, "admin-2",
        hotelUid="hotel-2",
        email="admin@hotel-2.test",
        roles=["admin"],
        permissions=list_all_permission_keys(),
    )


@pytest.fixture
def auth_headers(admin_token):
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def viewer_headers(viewer_token):
    return {"Authorization": f"Bearer {viewer_token}"}


@pytest.fixture
def other_hotel_headers(other_hotel_token):
    return {"Authorization": f"Bearer {other_hotel_token}"}


# ============== Search engine fixtures ==============

class FakeMeili:
    """
    In-memory stand-in for the search engine HTTP API, served through
    httpx.MockTransport

    ``overrides`` maps (method, path) to a list of (status, body) responses
    consumed in order before falling back to the default behaviour.
    """

    def __init__(self):
        self.requests = []
        self.indexes = set()
        self.documents = {}
        self.overrides = {}
        self.search_response = {"hits": [], "estimatedTotalHits": 0}
        self._task_uid = 0

    def respond(self, method, path, status, body=None):
        self.overrides.setdefault((method, path), []).append((status, body))

    def calls(self, method=None):
        return [r for r in self.requests if method is None or r[0] == method]

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        method, path = request.method, request.url.path
        self.requests.append((method, path, body, request.headers.get("Authorization")))

        queued = self.overrides.get((method, path))
        if queued:
            status, payload = queued.pop(0)
            return httpx.Response(status, json=payload) if payload is not None else httpx.Response(status)

        parts = path.strip("/").split("/")
        if method == "GET" and len(parts) == 2:
            if parts[1] in self.indexes:
                return httpx.Response(200, json={"uid": parts[1], "primaryKey": "id"})
            return httpx.Response(404, json={"code": "index_not_found"})
        if method == "POST" and path == "/indexes":
            self.indexes.add(body["uid"])
            return self._task()
        if method == "POST" and parts[-1] == "documents":
            for doc in body:
                self.documents[(parts[1], doc["id"])] = doc
            return self._task()
        if method == "DELETE" and parts[-2] == "documents":
            key = (parts[1], parts[-1])
            if key not in self.documents:
                return httpx.Response(404, json={"code": "document_not_found"})
            del self.documents[key]
            return self._task()
        if method == "POST" and parts[-1] == "search":
            return httpx.Response(200, json=self.search_response)
        return httpx.Response(500, json={"message": f"unexpected {method} {path}"})

    def _task(self):
        self._task_uid += 1
        return httpx.Response(202, json={"taskUid": self._task_uid})


@pytest.fixture
def meili():
    return FakeMeili()


@pytest.fixture
def search_config():
    return SearchConfig.build(host=MEILI_HOST, api_key=MEILI_KEY, search_key="search-key")


@pytest.fixture
def meili_client(meili):
    """SearchIndexClient talking to the fake engine"""
    http_client = httpx.Client(transport=httpx.MockTransport(meili.handler))
    client = SearchIndexClient(MEILI_HOST, MEILI_KEY, http_client=http_client)
    yield client
    client.close()


@pytest.fixture
def index_cache():
    return EnsuredIndexCache()
