"""
Build and update FHIR Patient records from the simplified patient form.

Both entry points assemble a candidate payload and pass it through the
schema gate, so callers always get back a ``Valid`` record or an
``Invalid`` list of path-tagged issues, never a half-valid record.

The form is expected to be semantically checked already (non-empty names,
real date of birth in a plausible range); see ``PatientFormRequest``.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal

from clinicdash.schemas.patient import PatientRecord
from clinicdash.services.extensions import (
    CREATED_BY_URL,
    INVITATION_URL,
    PATIENT_PROFILE,
    utc_timestamp,
)
from clinicdash.services.validation import ValidationResult, validate_patient

logger = logging.getLogger(__name__)

InviteMode = Literal["profileOnly", "profileAndInvite"]


@dataclass(frozen=True)
class NewPatientForm:
    firstName: str
    lastName: str
    dob: str  # YYYY-MM-DD
    email: str | None = None
    mobile: str | None = None  # E.164 preferred, e.g. "+41795550111"
    inviteMode: InviteMode = "profileOnly"


def new_patient_id() -> str:
    return f"P-{uuid.uuid4()}"


# ---------------------------------------------------------------------------
# Payload pieces shared by create and update
# ---------------------------------------------------------------------------

def _name_entry(form: NewPatientForm) -> dict[str, Any]:
    first, last = form.firstName.strip(), form.lastName.strip()
    return {"use": "official", "text": f"{first} {last}", "family": last, "given": [first]}


def _updated_name(current: dict[str, Any], form: NewPatientForm) -> dict[str, Any]:
    """
    Keep the stored name entry when the form carries the same first/last name,
    so display text such as "Anna Maria Meier" survives an unchanged edit.
    """
    given = current.get("given") or [""]
    if (given[0], current.get("family") or "") == (form.firstName.strip(), form.lastName.strip()):
        return current
    return _name_entry(form)


def _telecom_entries(form: NewPatientForm) -> list[dict[str, Any]]:
    # Omitted fields produce no entry at all, never an empty-string value.
    entries = []
    if form.email:
        entries.append({"system": "email", "value": form.email, "use": "home"})
    if form.mobile:
        entries.append({"system": "phone", "value": form.mobile, "use": "mobile"})
    return entries


def _form_extensions(form: NewPatientForm, created_by: str | None) -> list[dict[str, Any]]:
    invitation = "sent" if form.inviteMode == "profileAndInvite" else "none"
    extensions = [{"url": INVITATION_URL, "valueString": invitation}]
    if created_by:
        extensions.append({"url": CREATED_BY_URL, "valueString": created_by})
    return extensions


def _communication(locale: str) -> list[dict[str, Any]]:
    return [{"language": {"text": locale}, "preferred": True}]


def _with_profile(meta: dict[str, Any] | None) -> dict[str, Any]:
    meta = dict(meta or {})
    profiles = list(meta.get("profile") or [])
    if PATIENT_PROFILE not in profiles:
        profiles.insert(0, PATIENT_PROFILE)
    meta["profile"] = profiles
    return meta


def _competes_for_primary(point: dict[str, Any]) -> bool:
    """True for entries the email/mobile extractors could pick."""
    if point["system"] == "email":
        return True
    return point["system"] == "phone" and point.get("use") in ("mobile", None)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def create(
    form: NewPatientForm,
    *,
    created_by: str | None = None,
    locale: str | None = None,
    now: datetime | None = None,
) -> ValidationResult:
    """Build a brand-new Patient (fresh id, active, version 1) from a form."""
    candidate: dict[str, Any] = {
        "resourceType": "Patient",
        "id": new_patient_id(),
        "meta": _with_profile({"versionId": "1", "lastUpdated": utc_timestamp(now)}),
        "active": True,
        "name": [_name_entry(form)],
        "telecom": _telecom_entries(form),
        "birthDate": form.dob,
        "extension": _form_extensions(form, created_by),
    }
    if locale:
        candidate["communication"] = _communication(locale)

    result = validate_patient(candidate)
    if result.ok:
        logger.info("Built patient %s", candidate["id"])
    return result


def update(
    existing: PatientRecord,
    form: NewPatientForm,
    *,
    locale: str | None = None,
) -> ValidationResult:
    """
    Apply a form to an existing Patient.

    Name, primary email/mobile and birth date come from the form. Identity,
    meta, active state and every field the form does not cover are kept.
    Extension history is merged: prior entries stay in order and a rebuilt
    entry is appended only when an identical one is not already present.
    """
    payload = existing.to_fhir()

    kept_telecom = [p for p in payload.get("telecom", []) if not _competes_for_primary(p)]
    extensions = list(payload.get("extension", []))
    for ext in _form_extensions(form, created_by=None):
        if ext not in extensions:
            extensions.append(ext)

    payload.update(
        {
            "id": existing.id,
            "meta": _with_profile(payload.get("meta")),
            "name": [_updated_name(payload["name"][0], form)] + payload["name"][1:],
            "telecom": _telecom_entries(form) + kept_telecom,
            "extension": extensions,
        }
    )
    if form.dob:
        payload["birthDate"] = form.dob
    else:
        payload.pop("birthDate", None)
    if locale:
        payload["communication"] = _communication(locale)

    result = validate_patient(payload)
    if result.ok:
        logger.info("Updated patient %s", existing.id)
    return result
