"""
SQL storage for Patient resources.

- The full FHIR payload is PHI and is stored encrypted
- Only non-sensitive operational fields are kept in clear for listing
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Index, String, Text

from clinicdash.models.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Patient – encrypted FHIR resource (contains PHI)
# ---------------------------------------------------------------------------
class StoredPatient(Base):
    __tablename__ = "patients"

    id = Column(String(64), primary_key=True, comment="FHIR Patient.id")
    encrypted_resource = Column(Text, nullable=False, comment="Fernet-encrypted FHIR JSON")

    # Non-sensitive operational fields
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (Index("ix_patients_created_at", "created_at"),)
