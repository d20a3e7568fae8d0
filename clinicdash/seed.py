"""
Demo patients for the dashboard.

Fixtures are plain FHIR JSON and go through the same schema gate as any
other payload; a broken fixture fails loudly at load time.
"""

from __future__ import annotations

import logging
from typing import Any

from clinicdash.schemas.patient import PatientRecord
from clinicdash.services.validation import validate_patient

logger = logging.getLogger(__name__)

_SEED_META = {"versionId": "1", "lastUpdated": "2025-10-11T10:00:00Z"}


def _patient(
    patient_id: str,
    given: str,
    family: str,
    birth_date: str,
    telecom: list[dict[str, str]],
    language: str,
    preferred: bool = False,
) -> dict[str, Any]:
    communication: dict[str, Any] = {"language": {"text": language}}
    if preferred:
        communication["preferred"] = True
    return {
        "resourceType": "Patient",
        "id": patient_id,
        "meta": dict(_SEED_META),
        "active": True,
        "name": [{"use": "official", "family": family, "given": [given], "text": f"{given} {family}"}],
        "birthDate": birth_date,
        "telecom": telecom,
        "communication": [communication],
    }


SEED_PATIENTS: list[dict[str, Any]] = [
    _patient(
        "P-1001", "Alice", "Müller", "1988-06-12",
        [
            {"system": "email", "value": "alice@example.com", "use": "home"},
            {"system": "phone", "value": "+41795550111", "use": "mobile"},
        ],
        "de-CH", preferred=True,
    ),
    _patient(
        "P-1002", "Marc", "Steiner", "1990-03-04",
        [
            {"system": "phone", "value": "+41795550222", "use": "mobile"},
            {"system": "email", "value": "marc.steiner@example.com", "use": "work"},
        ],
        "de-CH",
    ),
    _patient(
        "P-1003", "Keita", "Smith", "1985-11-22",
        [{"system": "email", "value": "keita.smith@example.com", "use": "home"}],
        "en", preferred=True,
    ),
    _patient(
        "P-1004", "Sofia", "Keller", "1996-01-15",
        [
            {"system": "phone", "value": "+41795550333", "use": "mobile"},
            {"system": "email", "value": "sofia.keller@example.com", "use": "home"},
        ],
        "de-CH",
    ),
    _patient(
        "P-1005", "Luca", "Bernasconi", "1979-08-09",
        [
            {"system": "phone", "value": "+41795550444", "use": "mobile"},
            {"system": "email", "value": "luca.bernasconi@example.com", "use": "work"},
        ],
        "it-CH", preferred=True,
    ),
]


def seed_patients() -> list[PatientRecord]:
    """Validated copies of the demo fixtures (raises on an invalid fixture)."""
    records = [validate_patient(raw).unwrap() for raw in SEED_PATIENTS]
    logger.info("Loaded %d seed patients", len(records))
    return records
