"""
Patient repositories.

The core never owns a store; callers hand it records and persist what it
returns through one of these backings:

- ``InMemoryPatientRepository`` – insertion-ordered, used for the demo
  dashboard and in tests
- ``SqlPatientRepository`` – SQLAlchemy session, payload encrypted at rest
"""

from __future__ import annotations

import logging
from typing import Iterable, Protocol

from sqlalchemy.orm import Session

from clinicdash.models.patient import StoredPatient
from clinicdash.schemas.patient import PatientRecord
from clinicdash.services.encryption import EncryptionService
from clinicdash.services.validation import validate_patient

logger = logging.getLogger(__name__)


class PatientRepository(Protocol):
    def get(self, patient_id: str) -> PatientRecord | None: ...

    def list(self) -> list[PatientRecord]: ...

    def put(self, record: PatientRecord) -> None: ...

    def delete(self, patient_id: str) -> bool: ...


class InMemoryPatientRepository:
    """Dict-backed store; re-putting an id replaces it in place."""

    def __init__(self, records: Iterable[PatientRecord] = ()):
        self._records: dict[str, PatientRecord] = {}
        for record in records:
            self.put(record)

    def get(self, patient_id: str) -> PatientRecord | None:
        return self._records.get(patient_id)

    def list(self) -> list[PatientRecord]:
        return list(self._records.values())

    def put(self, record: PatientRecord) -> None:
        self._records[record.id] = record

    def delete(self, patient_id: str) -> bool:
        return self._records.pop(patient_id, None) is not None

    def __len__(self) -> int:
        return len(self._records)


class SqlPatientRepository:
    """Stores each Patient as encrypted FHIR JSON keyed by its id."""

    def __init__(self, db: Session, encryption: EncryptionService):
        self.db = db
        self.encryption = encryption

    def _load(self, row: StoredPatient) -> PatientRecord:
        # Re-gate on read so a tampered or stale row never reaches the UI.
        return validate_patient(self.encryption.decrypt_json(row.encrypted_resource)).unwrap()

    def get(self, patient_id: str) -> PatientRecord | None:
        row = self.db.get(StoredPatient, patient_id)
        return self._load(row) if row else None

    def list(self) -> list[PatientRecord]:
        rows = self.db.query(StoredPatient).order_by(StoredPatient.created_at, StoredPatient.id).all()
        return [self._load(row) for row in rows]

    def put(self, record: PatientRecord) -> None:
        ciphertext = self.encryption.encrypt_json(record.to_fhir())
        row = self.db.get(StoredPatient, record.id)
        if row is None:
            self.db.add(StoredPatient(id=record.id, encrypted_resource=ciphertext, active=record.active is not False))
        else:
            row.encrypted_resource = ciphertext
            row.active = record.active is not False
        self.db.commit()
        logger.info("Stored patient %s", record.id)

    def delete(self, patient_id: str) -> bool:
        row = self.db.get(StoredPatient, patient_id)
        if row is None:
            return False
        self.db.delete(row)
        self.db.commit()
        logger.info("Deleted patient %s", patient_id)
        return True
