import jwt
import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from carebook.application.services.appointments_service import AppointmentsService
from carebook.config import settings
from carebook.database import build_engine, create_db_and_tables
from carebook.db.models import Doctor, Patient
from carebook.dependencies import get_uow_factory
from carebook.infrastructure.persistence.sqlalchemy.unit_of_work import SqlUnitOfWork
from carebook.main import app

TEST_SECRET = "carebook-test-secret-key-0123456789abcdef"


@pytest.fixture
def engine(tmp_path):
    # file-backed so separate connections (threads) share one database
    eng = build_engine(f"sqlite:///{tmp_path / 'carebook-test.db'}")
    create_db_and_tables(eng)
    with Session(eng) as session:
        session.add(Doctor(id=1, name="Dr. Mehta", specialization="Cardiology", working_hours="09:00-12:00"))
        session.add(Doctor(id=2, name="Dr. Rao", specialization="Dermatology"))
        session.add(Patient(id=10, name="Asha Verma", email="asha@example.com"))
        session.add(Patient(id=11, name="Ravi Kumar", email="ravi@example.com"))
        session.commit()
    yield eng
    eng.dispose()


@pytest.fixture
def uow_factory(engine):
    return lambda read_only=False: SqlUnitOfWork(engine, read_only=read_only)


@pytest.fixture
def service(uow_factory):
    return AppointmentsService(uow_factory=uow_factory, reject_past_dates=False)


@pytest.fixture
def client(uow_factory, monkeypatch):
    monkeypatch.setattr(settings, "SECRET_KEY", TEST_SECRET)
    app.dependency_overrides[get_uow_factory] = lambda: uow_factory
    # no context manager: the lifespan would create tables on the default database
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_token(user_id, role, secret=TEST_SECRET):
    return jwt.encode({"sub": str(user_id), "role": role}, secret, algorithm="HS256")


@pytest.fixture
def auth():
    def _headers(user_id, role):
        return {"Authorization": f"Bearer {make_token(user_id, role)}"}
    return _headers
