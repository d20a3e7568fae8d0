"""
JSON Schema validation service for Patient records.

- Collects every violation instead of stopping at the first one
- Tags each violation with a dotted field path (e.g. ``telecom.0.system``)
  and a kind (missing / invalid / enum) so callers can highlight form fields
- Returns a tagged result (``Valid`` | ``Invalid``) rather than raising
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

import jsonschema

from clinicdash.schemas.fhir import FHIR_PATIENT_SCHEMA
from clinicdash.schemas.patient import PatientRecord

logger = logging.getLogger(__name__)

_patient_validator = jsonschema.Draft7Validator(FHIR_PATIENT_SCHEMA)


class IssueKind(str, Enum):
    MISSING = "missing"
    INVALID = "invalid"
    ENUM = "enum"


@dataclass(frozen=True)
class ValidationIssue:
    path: str
    message: str
    kind: IssueKind

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "message": self.message, "kind": self.kind.value}


class PatientValidationError(Exception):
    """Raised when a caller insists on a record that failed validation."""

    def __init__(self, issues: tuple[ValidationIssue, ...] | list[ValidationIssue]):
        self.issues = tuple(issues)
        summary = "; ".join(f"{i.path or '<record>'}: {i.message}" for i in self.issues)
        super().__init__(f"Invalid FHIR Patient: {summary}")


@dataclass(frozen=True)
class Valid:
    record: PatientRecord
    ok = True

    def unwrap(self) -> PatientRecord:
        return self.record


@dataclass(frozen=True)
class Invalid:
    issues: tuple[ValidationIssue, ...]
    ok = False

    def unwrap(self) -> PatientRecord:
        raise PatientValidationError(self.issues)


ValidationResult = Union[Valid, Invalid]


def _join_path(parts) -> str:
    return ".".join(str(p) for p in parts)


def _path_key(parts) -> tuple:
    # Array indices sort numerically (telecom.2 before telecom.10).
    return tuple((0, p, "") if isinstance(p, int) else (1, 0, str(p)) for p in parts)


def _issues_from_error(error: jsonschema.ValidationError) -> list[tuple[tuple, ValidationIssue]]:
    base = list(error.absolute_path)

    if error.validator == "required":
        # One error is emitted per missing property, but the error object
        # only exposes the whole "required" list.
        instance = error.instance if isinstance(error.instance, dict) else {}
        missing = [prop for prop in error.validator_value if prop not in instance]
        return [
            (
                _path_key(base + [prop]),
                ValidationIssue(_join_path(base + [prop]), f"'{prop}' is required", IssueKind.MISSING),
            )
            for prop in missing
        ]

    if error.validator == "enum":
        return [(_path_key(base), ValidationIssue(_join_path(base), error.message, IssueKind.ENUM))]

    message = error.schema.get("errorMessage", error.message)
    return [(_path_key(base), ValidationIssue(_join_path(base), message, IssueKind.INVALID))]


def collect_issues(data: Any, schema: dict[str, Any] | None = None) -> list[ValidationIssue]:
    """
    Validate ``data`` against a JSON schema (the Patient schema by default).
    Returns every issue found, ordered by path (empty list = valid).
    """
    validator = _patient_validator if schema is None else jsonschema.Draft7Validator(schema)
    found: list[tuple[tuple, ValidationIssue]] = []
    seen: set[ValidationIssue] = set()

    for error in validator.iter_errors(data):
        for key, issue in _issues_from_error(error):
            if issue in seen:
                continue
            seen.add(issue)
            found.append((key, issue))

    found.sort(key=lambda pair: pair[0])
    return [issue for _, issue in found]


def validate_patient(candidate: Any) -> ValidationResult:
    """Gate a candidate Patient payload; returns ``Valid`` or ``Invalid``."""
    if isinstance(candidate, PatientRecord):
        candidate = candidate.to_fhir()

    if not isinstance(candidate, dict):
        logger.info("Rejected malformed patient payload of type %s", type(candidate).__name__)
        return Invalid((ValidationIssue("", "Patient payload must be a JSON object", IssueKind.INVALID),))

    issues = collect_issues(candidate)
    if issues:
        logger.info(
            "Patient %s failed validation with %d issue(s)",
            candidate.get("id") or "<new>",
            len(issues),
        )
        return Invalid(tuple(issues))

    return Valid(PatientRecord.model_validate(candidate))
