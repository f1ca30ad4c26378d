import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from familink.config import settings
from familink.database import Base, build_engine
from familink.dependencies import create_access_token, get_db, get_notifier
from familink.main import app
from familink.models.user import User
from familink.services.families import FamilyService
from familink.services.notifications import InvitationCreated, InvitationNotifier

test_engine = build_engine(settings.test_database_url)
TestSession = sessionmaker(bind=test_engine)


class RecordingInvitationNotifier(InvitationNotifier):
    def __init__(self):
        self.events: list[InvitationCreated] = []

    def invitation_created(self, event: InvitationCreated) -> None:
        self.events.append(event)


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def db(reset_db):
    session = TestSession()
    yield session
    session.close()


@pytest.fixture
def open_session(reset_db):
    """Factory for sessions independent of ``db``, each on its own connection."""
    sessions = []

    def factory():
        session = TestSession()
        sessions.append(session)
        return session

    yield factory
    for session in sessions:
        session.close()


@pytest.fixture
def lock_states(monkeypatch):
    """Whether a transaction was already open each time a family was locked."""
    states = []
    lock_family = FamilyService._lock_family

    def recording_lock(self, family_id):
        states.append(self.db.in_transaction())
        return lock_family(self, family_id)

    monkeypatch.setattr(FamilyService, "_lock_family", recording_lock)
    return states


@pytest.fixture
def notifier():
    return RecordingInvitationNotifier()


@pytest.fixture
def client(db, notifier):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def service(db, notifier):
    return FamilyService(db, notifier)


def make_user(db, email: str, name: str, password: str = "password123") -> User:
    user = User(email=email, name=name, password_hash="x")
    user.set_password(password)
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def alice(db):
    return make_user(db, "alice@x.com", "Alice")


@pytest.fixture
def bob(db):
    return make_user(db, "b@x.com", "Bob")


@pytest.fixture
def carol(db):
    return make_user(db, "carol@x.com", "Carol")


@pytest.fixture
def alice_headers(alice):
    return {"Authorization": f"Bearer {create_access_token(alice)}"}


@pytest.fixture
def bob_headers(bob):
    return {"Authorization": f"Bearer {create_access_token(bob)}"}


@pytest.fixture
def carol_headers(carol):
    return {"Authorization": f"Bearer {create_access_token(carol)}"}


@pytest.fixture
def family(service, alice):
    return service.create_family(alice.id, {"name": "Dupont"})


@pytest.fixture
def bob_member(service, family, alice, bob):
    """Bob joined the family as a plain member through an invitation."""
    invitation = service.create_invitation(alice.id, family.id, bob.email)
    return service.accept_invitation(bob.id, invitation.token)
