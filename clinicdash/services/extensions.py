"""App-specific FHIR extension URLs and small helpers around them."""

from __future__ import annotations

from datetime import datetime, timezone

from clinicdash.schemas.patient import Extension, PatientRecord

STRUCTURE_DEFINITION_BASE = "https://qicu.app/fhir/StructureDefinition"

PATIENT_PROFILE = f"{STRUCTURE_DEFINITION_BASE}/Patient"

INVITATION_URL = f"{STRUCTURE_DEFINITION_BASE}/invitation"
CREATED_BY_URL = f"{STRUCTURE_DEFINITION_BASE}/createdBy"
ARCHIVED_AT_URL = f"{STRUCTURE_DEFINITION_BASE}/archivedAt"
ARCHIVE_REASON_URL = f"{STRUCTURE_DEFINITION_BASE}/archiveReason"
UNARCHIVED_AT_URL = f"{STRUCTURE_DEFINITION_BASE}/unarchivedAt"


def utc_timestamp(now: datetime | None = None) -> str:
    """FHIR instant in UTC with millisecond precision, e.g. ``2025-10-11T10:00:00.000Z``."""
    moment = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def extensions_with_url(record: PatientRecord, url: str) -> list[Extension]:
    return [ext for ext in record.extension or [] if ext.url == url]


def append_extensions(record: PatientRecord, *new: Extension) -> list[Extension]:
    """Existing extensions followed by ``new``; nothing is ever removed."""
    return [*(record.extension or []), *new]
