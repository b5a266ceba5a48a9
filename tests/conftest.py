import pytest
from fastapi.testclient import TestClient

from deskcrm import config
from deskcrm.bridge import HostBridge
from deskcrm.client.database import Database
from deskcrm.deps import get_store
from deskcrm.main import app
from deskcrm.store import JsonStore


@pytest.fixture(autouse=True)
def fast_hashing(monkeypatch):
    # keep PBKDF2 cheap in tests
    monkeypatch.setattr(config.settings, "PASSWORD_HASH_ITERATIONS", 1000)
    monkeypatch.setattr(config.settings, "DEFAULT_ADMIN_USERNAME", "admin")
    monkeypatch.setattr(config.settings, "DEFAULT_ADMIN_PASSWORD", "admin123")


@pytest.fixture
def store(tmp_path):
    return JsonStore(tmp_path / "data.json")


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def db(client):
    return Database(HostBridge(client=client))


@pytest.fixture
def admin(db):
    session = db.login("admin", "admin123")
    assert session is not None
    return session


@pytest.fixture
def staff(db, admin):
    created = db.users.add(
        {"username": "staff", "password": "secret1", "fullName": "Staff Member", "role": "user"},
        admin,
    )
    assert created is not None
    session = db.login("staff", "secret1")
    assert session is not None
    return session


@pytest.fixture
def count_io(store, monkeypatch):
    """Count store reads and writes made after the fixture is requested."""
    calls = {"read": 0, "write": 0}
    real_read, real_write = store.read, store.write

    def read():
        calls["read"] += 1
        return real_read()

    def write(doc):
        calls["write"] += 1
        return real_write(doc)

    monkeypatch.setattr(store, "read", read)
    monkeypatch.setattr(store, "write", write)
    return calls


def enquiry_form(**overrides):
    form = {
        "fullName": "Ravi Kumar",
        "mobile": "9876543210",
        "alternateMobile": "",
        "email": "ravi@example.com",
        "address": "12 MG Road, Pune",
        "aadharNumber": "123412341234",
        "panNumber": "ABCDE1234F",
        "demateAccount1": "DP-001",
        "demateAccount2": "",
        "enquiryState": "Maharashtra",
        "sourceOfEnquiry": "Walk-in",
        "interestedStatus": "Interested",
        "howDidYouKnow": "Friend",
        "customHowDidYouKnow": "",
        "profession": "Engineer",
        "customProfession": "",
        "knowledgeOfShareMarket": "Beginner",
        "status": "Pending",
        "callBackDate": "",
        "depositInwardDate": "",
        "depositOutwardDate": "",
    }
    form.update(overrides)
    return form


@pytest.fixture
def make_enquiry():
    return enquiry_form
