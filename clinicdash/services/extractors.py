"""Display-ready scalars derived from a validated Patient record.

All functions are pure and total: they never raise on a validated record.
"""

from __future__ import annotations

from typing import Literal

from clinicdash.schemas.patient import PatientRecord

PatientStatus = Literal["active", "inactive"]

UNKNOWN_NAME = "Unknown"


def display_name(record: PatientRecord) -> str:
    """``name[0].text`` if set, else "given family", else ``UNKNOWN_NAME``."""
    if not record.name:
        return UNKNOWN_NAME
    name = record.name[0]

    if name.text and name.text.strip():
        return name.text

    given = name.given[0] if name.given else None
    parts = [part for part in (given, name.family) if part]
    return " ".join(parts) if parts else UNKNOWN_NAME


def first_name(record: PatientRecord) -> str:
    name = record.name[0] if record.name else None
    return name.given[0] if name and name.given else ""


def last_name(record: PatientRecord) -> str:
    name = record.name[0] if record.name else None
    return (name.family or "") if name else ""


def primary_email(record: PatientRecord) -> str:
    """First ``email`` contact point, regardless of its use."""
    for point in record.telecom or []:
        if point.system == "email":
            return point.value
    return ""


def primary_mobile(record: PatientRecord) -> str:
    """
    First ``phone`` contact point whose use is ``mobile`` or unset.

    Work and home phones are never returned, even when they are the only
    phone on file.
    """
    for point in record.telecom or []:
        if point.system == "phone" and point.use in ("mobile", None):
            return point.value
    return ""


def status(record: PatientRecord) -> PatientStatus:
    return "inactive" if record.active is False else "active"


def status_label(value: PatientStatus) -> str:
    return "Inactive" if value == "inactive" else "Active"


def preferred_language(record: PatientRecord) -> str:
    if not record.communication:
        return ""
    return record.communication[0].language.text or ""


def matches_query(record: PatientRecord, query: str) -> bool:
    """Case-insensitive substring match against name, email and mobile."""
    needle = query.strip().lower()
    if not needle:
        return True
    haystacks = (display_name(record), primary_email(record), primary_mobile(record))
    return any(needle in value.lower() for value in haystacks)
