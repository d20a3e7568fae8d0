"""
FastAPI routes – the patient API surface.

- Thin glue: every state change goes through the builder / lifecycle core
  and the result is stored through the injected repository
- Validation failures surface as 400 + issues (see ``clinicdash.main``)
"""

from __future__ import annotations

import logging
from typing import Any, Iterator

from fastapi import APIRouter, Body, Depends, HTTPException, Request, Response

from clinicdash.config import settings
from clinicdash.models.database import SessionLocal
from clinicdash.schemas.api import (
    ArchiveRequest,
    HealthResponse,
    HistoryEventResponse,
    PatientCoreViewResponse,
    PatientFormRequest,
    PatientFormResponse,
)
from clinicdash.schemas.patient import PatientRecord
from clinicdash.services import builders, lifecycle
from clinicdash.services.encryption import EncryptionService
from clinicdash.services.export import export_patients_csv
from clinicdash.services.extractors import matches_query
from clinicdash.services.projection import to_core_view, to_form
from clinicdash.services.repository import PatientRepository, SqlPatientRepository
from clinicdash.services.validation import validate_patient

logger = logging.getLogger(__name__)

router = APIRouter()

encryption = EncryptionService(settings.PHI_ENCRYPTION_KEY or None)


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------

def get_repository(request: Request) -> Iterator[PatientRepository]:
    """The app's in-memory repository if one is installed, else the SQL store."""
    repository = getattr(request.app.state, "patient_repository", None)
    if repository is not None:
        yield repository
        return

    db = SessionLocal()
    try:
        yield SqlPatientRepository(db, encryption)
    finally:
        db.close()


def _require(repository: PatientRepository, patient_id: str) -> PatientRecord:
    record = repository.get(patient_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Patient not found")
    return record


def _filtered(repository: PatientRepository, q: str, include_archived: bool) -> list[PatientRecord]:
    return [
        record
        for record in repository.list()
        if (include_archived or record.active is not False) and matches_query(record, q)
    ]


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

@router.get("/health", response_model=HealthResponse)
def health_check(request: Request):
    in_memory = getattr(request.app.state, "patient_repository", None) is not None
    return HealthResponse(
        status="healthy",
        environment=settings.ENVIRONMENT,
        store="memory" if in_memory else "database",
    )


# ---------------------------------------------------------------------------
# Patient list / export
# ---------------------------------------------------------------------------

@router.get("/patients", response_model=list[PatientCoreViewResponse])
def list_patients(
    q: str = "",
    include_archived: bool = False,
    repository: PatientRepository = Depends(get_repository),
):
    """Core views, optionally filtered by a name/email/mobile search term."""
    return [to_core_view(r).to_dict() for r in _filtered(repository, q, include_archived)]


@router.get("/patients/export.csv")
def export_patients(
    q: str = "",
    include_archived: bool = False,
    repository: PatientRepository = Depends(get_repository),
):
    records = _filtered(repository, q, include_archived)
    logger.info("Exporting %d patients as CSV", len(records))
    return Response(
        content=export_patients_csv(records),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="patients.csv"'},
    )


# ---------------------------------------------------------------------------
# Single patient
# ---------------------------------------------------------------------------

@router.get("/patients/{patient_id}")
def get_patient(patient_id: str, repository: PatientRepository = Depends(get_repository)):
    """The full FHIR Patient resource."""
    return _require(repository, patient_id).to_fhir()


@router.get("/patients/{patient_id}/view", response_model=PatientCoreViewResponse)
def get_patient_view(patient_id: str, repository: PatientRepository = Depends(get_repository)):
    return to_core_view(_require(repository, patient_id)).to_dict()


@router.get("/patients/{patient_id}/form", response_model=PatientFormResponse)
def get_patient_form(patient_id: str, repository: PatientRepository = Depends(get_repository)):
    """Form values for the edit dialog."""
    return PatientFormResponse(**vars(to_form(_require(repository, patient_id))))


@router.get("/patients/{patient_id}/history", response_model=list[HistoryEventResponse])
def get_patient_history(patient_id: str, repository: PatientRepository = Depends(get_repository)):
    return [vars(event) for event in lifecycle.history(_require(repository, patient_id))]


# ---------------------------------------------------------------------------
# Create / update
# ---------------------------------------------------------------------------

@router.post("/patients", status_code=201)
def create_patient(form: PatientFormRequest, repository: PatientRepository = Depends(get_repository)):
    """Create a patient from the dialog form."""
    record = builders.create(
        form.to_form(),
        created_by=form.createdBy,
        locale=form.locale or settings.DEFAULT_LOCALE,
    ).unwrap()
    repository.put(record)
    return record.to_fhir()


@router.post("/patients/fhir", status_code=201)
def import_patient(payload: dict[str, Any] = Body(...), repository: PatientRepository = Depends(get_repository)):
    """Accept a complete FHIR Patient resource as-is after validation."""
    record = validate_patient(payload).unwrap()
    if repository.get(record.id) is not None:
        raise HTTPException(status_code=409, detail=f"Patient {record.id} already exists")
    repository.put(record)
    logger.info("Imported patient %s", record.id)
    return record.to_fhir()


@router.put("/patients/{patient_id}")
def update_patient(
    patient_id: str,
    form: PatientFormRequest,
    repository: PatientRepository = Depends(get_repository),
):
    existing = _require(repository, patient_id)
    record = builders.update(existing, form.to_form(), locale=form.locale).unwrap()
    repository.put(record)
    return record.to_fhir()


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

@router.post("/patients/{patient_id}/archive")
def archive_patient(
    patient_id: str,
    body: ArchiveRequest | None = None,
    repository: PatientRepository = Depends(get_repository),
):
    reason = body.reason if body else None
    record = lifecycle.archive(_require(repository, patient_id), reason)
    repository.put(record)
    return record.to_fhir()


@router.post("/patients/{patient_id}/unarchive")
def unarchive_patient(patient_id: str, repository: PatientRepository = Depends(get_repository)):
    record = lifecycle.unarchive(_require(repository, patient_id))
    repository.put(record)
    return record.to_fhir()


@router.delete("/patients/{patient_id}", status_code=204)
def delete_patient(patient_id: str, repository: PatientRepository = Depends(get_repository)):
    if not repository.delete(patient_id):
        raise HTTPException(status_code=404, detail="Patient not found")
    logger.info("Deleted patient %s", patient_id)
    return Response(status_code=204)
