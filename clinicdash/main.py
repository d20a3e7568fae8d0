"""
FastAPI application entrypoint.

Run locally:  uvicorn clinicdash.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from clinicdash.api.routes import router
from clinicdash.config import settings
from clinicdash.models.database import init_db
from clinicdash.seed import seed_patients
from clinicdash.services.repository import InMemoryPatientRepository
from clinicdash.services.validation import PatientValidationError

logging.basicConfig(level=settings.LOG_LEVEL, format="%(levelname)s | %(name)s | %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Clinic Dashboard API",
    description="Patient records (FHIR Patient), validation and dashboard views.",
    version="1.0.0",
)

app.include_router(router, prefix="/api/v1")


# ---------------------------------------------------------------------------
# Error mapping: every validation failure is 400 + path-tagged issues
# ---------------------------------------------------------------------------

_PYDANTIC_ENUM_TYPES = {"literal_error", "enum"}


@app.exception_handler(PatientValidationError)
def patient_validation_error(request: Request, exc: PatientValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid FHIR Patient payload", "issues": [i.to_dict() for i in exc.issues]},
    )


@app.exception_handler(RequestValidationError)
def request_validation_error(request: Request, exc: RequestValidationError):
    issues = []
    for err in exc.errors():
        loc = list(err.get("loc", ()))
        if loc and loc[0] in ("body", "query", "path"):
            loc = loc[1:]
        if err.get("type") == "missing":
            kind = "missing"
        elif err.get("type") in _PYDANTIC_ENUM_TYPES:
            kind = "enum"
        else:
            kind = "invalid"
        issues.append({"path": ".".join(str(p) for p in loc), "message": err.get("msg", ""), "kind": kind})
    return JSONResponse(status_code=400, content={"error": "Invalid request", "issues": issues})


@app.on_event("startup")
def on_startup():
    if settings.PATIENT_STORE == "database":
        init_db()
        logger.info("Using SQL patient store")
        return

    records = seed_patients() if settings.SEED_DEMO_DATA else []
    app.state.patient_repository = InMemoryPatientRepository(records)
    logger.info("Using in-memory patient store with %d patients", len(records))
