"""Shared fixtures: in-memory database, API client and token helpers."""

import uuid
from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.db import Base, build_engine, get_db
from app.core.security import create_access_token
from app.main import app
from app.models.enums import Gender, Role
from app.models.lab import LabTest
from app.models.patient import Patient
from app.models.user import User


@pytest.fixture
def db_session():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    def _make(role=Role.DOCTOR, is_active=True, **fields):
        suffix = uuid.uuid4().hex[:8]
        user = User(
            email=fields.pop("email", f"{role.value.lower()}-{suffix}@clinic.test"),
            first_name=fields.pop("first_name", "Test"),
            last_name=fields.pop("last_name", role.value.title()),
            role=role,
            is_active=is_active,
            **fields,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture
def make_patient(db_session):
    def _make(**fields):
        patient = Patient(
            mrn=fields.pop("mrn", f"MRN-{uuid.uuid4().hex[:8]}"),
            first_name=fields.pop("first_name", "Ana"),
            last_name=fields.pop("last_name", "Perez"),
            date_of_birth=fields.pop("date_of_birth", date(1990, 5, 17)),
            gender=fields.pop("gender", Gender.FEMALE),
            **fields,
        )
        db_session.add(patient)
        db_session.commit()
        db_session.refresh(patient)
        return patient

    return _make


@pytest.fixture
def make_lab_test(db_session):
    def _make(**fields):
        test = LabTest(
            code=fields.pop("code", f"T-{uuid.uuid4().hex[:6]}"),
            name=fields.pop("name", "Hemoglobin"),
            unit=fields.pop("unit", "g/dL"),
            **fields,
        )
        db_session.add(test)
        db_session.commit()
        db_session.refresh(test)
        return test

    return _make


def auth_headers(user) -> dict:
    token = create_access_token(sub=str(user.id), role=user.role.value)
    return {"Authorization": f"Bearer {token}"}
