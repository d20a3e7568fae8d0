"""
Shared pytest fixtures for the patient API tests.
"""
import pytest
from fastapi.testclient import TestClient

from clinicdash.main import app
from clinicdash.seed import seed_patients
from clinicdash.services.repository import InMemoryPatientRepository


@pytest.fixture
def repository():
    """Fresh in-memory store with the five demo patients."""
    return InMemoryPatientRepository(seed_patients())


@pytest.fixture
def client(repository):
    """FastAPI TestClient bound to the fixture repository."""
    app.state.patient_repository = repository
    yield TestClient(app)
    del app.state.patient_repository
