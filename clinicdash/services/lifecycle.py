"""
Archive / unarchive transitions and the extension-backed patient history.

The extension list is append-only: every transition adds markers and none
are ever removed, so repeated archive/unarchive cycles accumulate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from clinicdash.schemas.patient import Extension, PatientRecord
from clinicdash.services.extensions import (
    ARCHIVE_REASON_URL,
    ARCHIVED_AT_URL,
    CREATED_BY_URL,
    INVITATION_URL,
    UNARCHIVED_AT_URL,
    append_extensions,
    extensions_with_url,
    utc_timestamp,
)
from clinicdash.services.validation import validate_patient

logger = logging.getLogger(__name__)

EventKind = Literal["invited", "created_by", "archived", "unarchived"]


@dataclass
class HistoryEvent:
    kind: EventKind
    at: str | None = None
    value: str | None = None
    reason: str | None = None


def _transition(record: PatientRecord, **changes) -> PatientRecord:
    """A fresh record (no shared lists with ``record``), re-checked by the schema gate."""
    return validate_patient(record.model_copy(update=changes)).unwrap()


def archive(record: PatientRecord, reason: str | None = None, *, now: datetime | None = None) -> PatientRecord:
    """Mark the patient inactive and append an ``archivedAt`` marker."""
    markers = [Extension(url=ARCHIVED_AT_URL, valueDateTime=utc_timestamp(now))]
    if reason and reason.strip():
        markers.append(Extension(url=ARCHIVE_REASON_URL, valueString=reason.strip()))

    logger.info("Archiving patient %s", record.id)
    return _transition(record, active=False, extension=append_extensions(record, *markers))


def unarchive(record: PatientRecord, *, now: datetime | None = None) -> PatientRecord:
    """Reactivate the patient; prior archive markers are kept."""
    marker = Extension(url=UNARCHIVED_AT_URL, valueDateTime=utc_timestamp(now))

    logger.info("Unarchiving patient %s", record.id)
    return _transition(record, active=True, extension=append_extensions(record, marker))


def history(record: PatientRecord) -> list[HistoryEvent]:
    """Decode known extensions, in order, into typed events."""
    events: list[HistoryEvent] = []
    for ext in record.extension or []:
        if ext.url == INVITATION_URL:
            events.append(HistoryEvent("invited", value=ext.valueString))
        elif ext.url == CREATED_BY_URL:
            events.append(HistoryEvent("created_by", value=ext.valueString))
        elif ext.url == ARCHIVED_AT_URL:
            events.append(HistoryEvent("archived", at=ext.valueDateTime))
        elif ext.url == ARCHIVE_REASON_URL:
            # Attaches to the archive marker written just before it.
            if events and events[-1].kind == "archived":
                events[-1].reason = ext.valueString
        elif ext.url == UNARCHIVED_AT_URL:
            events.append(HistoryEvent("unarchived", at=ext.valueDateTime))
    return events


def archived_at(record: PatientRecord) -> str | None:
    """Instant of the latest archive marker while the patient is archived."""
    if record.active is not False:
        return None
    markers = extensions_with_url(record, ARCHIVED_AT_URL)
    return markers[-1].valueDateTime if markers else None


def invitation_state(record: PatientRecord) -> str:
    """Latest invitation value ("sent" / "none"), or "none" when never recorded."""
    markers = extensions_with_url(record, INVITATION_URL)
    return (markers[-1].valueString or "none") if markers else "none"
