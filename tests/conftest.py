"""
Shared pytest fixtures for the Grievance Cell test suite.

The app runs in-process through FastAPI's TestClient, backed by an in-memory
SQLite database and a local attachment store under tmp_path.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
from dependencies import TOKEN_KIND_DEPARTMENT, create_access_token, get_attachment_store
from Department import crud as department_crud
from file_utils import LocalAttachmentStore
from main import app
from roles import RoleEnum
from User.models import User


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture
def departments(db_session):
    department_crud.seed_departments(db_session)
    return {d.department_id: d for d in department_crud.get_departments(db_session)}


@pytest.fixture
def attachment_store(tmp_path):
    return LocalAttachmentStore(str(tmp_path / "uploads"))


@pytest.fixture
def client(db_session, attachment_store):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_attachment_store] = lambda: attachment_store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _make_user(db, name, email, role=RoleEnum.student, student_id=None, department=None):
    user = User(name=name, email=email, role=role, student_id=student_id, department=department)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def student(db_session):
    return _make_user(db_session, "Asha Rao", "asha@example.edu", student_id="S1001", department="Physics")


@pytest.fixture
def other_student(db_session):
    return _make_user(db_session, "Ben Okafor", "ben@example.edu", student_id="S1002", department="History")


@pytest.fixture
def admin(db_session):
    return _make_user(db_session, "Grievance Admin", "admin@example.edu", role=RoleEnum.admin)


def auth_headers(subject_id, kind="user"):
    return {"Authorization": f"Bearer {create_access_token(subject_id, kind=kind)}"}


@pytest.fixture
def student_headers(student):
    return auth_headers(student.id)


@pytest.fixture
def other_headers(other_student):
    return auth_headers(other_student.id)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin.id)


@pytest.fixture
def hostel_headers(departments):
    return auth_headers(departments["HOSTEL001"].id, kind=TOKEN_KIND_DEPARTMENT)


@pytest.fixture
def create_grievance(client):
    """Submit a grievance through the API and return its JSON body."""
    def _create(headers, **fields):
        form = {
            "title": "Broken AC",
            "description": "The AC in room 204 has not worked for a week.",
            "category": "Hostel",
            "priority": "High",
        }
        form.update(fields)
        resp = client.post("/grievances", data=form, headers=headers)
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]
    return _create


@pytest.fixture
def headers_for():
    return auth_headers
