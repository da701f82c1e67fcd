"""
CardioCare Risk API.

This module exposes a FastAPI application around the deterministic
cardiovascular risk scorer, the diet/recommendation text derived from it,
and the doctor-to-patient report workflow.

Endpoints
---------
- GET  `/`                              : Liveness/health check.
- GET  `/version`                       : App version info.
- GET  `/field-ranges`                  : Declared domain of every clinical field.
- POST `/predict`                       : Score one observation or a list.
- POST `/validate`                      : List every field problem of a form submission.
- POST `/metrics`                       : Audit the heuristic against labeled rows.
- POST `/explain/factors`               : Per-field point contributions.
- POST `/explain/pdp`                   : Partial dependence of the score on one field.
- POST `/reports`                       : Save a scored report draft.
- POST `/reports/{report_id}/publish`   : Make a report visible to its patient.
- GET  `/reports/{report_id}`           : Fetch one report.
- GET  `/patients/{email}/reports`      : Published reports, newest first.
- GET  `/patients/{email}/reports/latest` : Latest published report.

Notes
-----
- Request types are validated by the Pydantic models in ``.schemas``;
  domain bounds are enforced by the scorer and surface as 400 responses
  naming the offending field and its bound.
- No scoring logic lives in the API layer; it delegates to ``.services``.
"""

import logging
import math
from contextlib import asynccontextmanager
from typing import Annotated, Any, Dict, List, Optional, Union

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from .config import configure_logging, get_settings
from .schemas import (
    AssessmentResponse,
    FieldError,
    HeartDiseaseRequest,
    ReportRequest,
    ReportResponse,
    ValidationResponse,
)
from .services.explain import factor_table, partial_dependence
from .services.guidance import diet_plan, recommendations
from .services.metrics import evaluate
from .services.reports import InMemoryReportStore, Report, ReportDraft, ReportNotFound
from .services.scoring import ClinicalObservation, assess
from .services.validation import FIELD_DOMAINS, ValidationError, validate_observation

settings = get_settings()

logging.getLogger("cardiocare").setLevel(settings.log_level.upper())
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings)
    logger.info("%s %s started", settings.app_name, settings.app_version)
    yield


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Deterministic cardiovascular risk scoring with diet plans and patient reports",
    lifespan=lifespan,
)

STORE = InMemoryReportStore()

# -----------------------------
# Pydantic models (API schemas)
# -----------------------------

class LabeledHeartDiseaseRequest(HeartDiseaseRequest):
    """Observation plus ground-truth label for audit endpoints.

    Attributes
    ----------
    target:
        1 if heart disease was confirmed, else 0.
    """
    target: Annotated[int, Field(ge=0, le=1)]


class PDPRequest(BaseModel):
    """Request payload for a partial dependence sweep.

    Attributes
    ----------
    data:
        Background rows; the other fields keep their observed values.
    feature:
        Field to sweep.
    grid:
        (Optional) Explicit grid values, each within the field's domain.
    grid_size:
        Number of grid points if ``grid`` is not provided.
    """
    data: List[HeartDiseaseRequest]
    feature: str
    grid: Optional[List[float]] = None
    grid_size: Optional[int] = Field(default=None, ge=2)


class PDPResponse(BaseModel):
    feature: str
    grid: List[float]
    pdp: List[float]


# -----------
# Helpers
# -----------

def _bad_input(e: ValidationError) -> HTTPException:
    logger.info("Rejected observation: %s", e.message)
    return HTTPException(status_code=400, detail=e.to_dict())


def _assessment_response(data: HeartDiseaseRequest) -> AssessmentResponse:
    result = assess(data.model_dump())
    return AssessmentResponse(
        score=result.score,
        level=result.level.value,
        label=result.label,
        prediction_text=result.label,
        risk_percentage=result.risk_percentage,
        prediction_class=result.prediction_class,
        diet_plan=diet_plan(result.level),
        recommendations=recommendations(result.level),
    )


def _report_response(report: Report) -> ReportResponse:
    return ReportResponse(
        id=report.id,
        patient_id=report.patient_id,
        patient_name=report.patient_name,
        patient_email=report.patient_email,
        clinical_data=HeartDiseaseRequest(**report.observation.to_dict()),
        risk_score=report.assessment.score,
        risk_level=report.assessment.level.value,
        label=report.assessment.label,
        diet_plan=report.diet_plan,
        recommendations=list(report.recommendations),
        created_at=report.created_at,
        published_at=report.published_at,
    )


def _finite(v: Optional[float]) -> Optional[float]:
    return None if v is None or math.isnan(v) else float(v)


def _check_batch(n: int) -> None:
    if n == 0:
        raise HTTPException(status_code=400, detail="Empty payload.")
    if n > settings.max_batch_size:
        raise HTTPException(
            status_code=400,
            detail=f"Too many observations ({n}); max_batch_size is {settings.max_batch_size}.",
        )


# -----------
# Endpoints
# -----------

@app.get("/")
async def health_check():
    """Liveness probe."""
    return {"version": settings.app_version, "status": "OK"}


@app.get("/version")
async def version():
    return {"app_version": settings.app_version}


@app.get("/field-ranges")
async def field_ranges():
    """Declared domain of every clinical field, in input order."""
    return {
        d.name: {"label": d.label, "min": d.lower, "max": d.upper, "integer": d.integer}
        for d in FIELD_DOMAINS
    }


@app.post("/predict")
async def predict(data: Union[HeartDiseaseRequest, List[HeartDiseaseRequest]]):
    """Score a single observation or a list of observations.

    Returns
    -------
    AssessmentResponse | list[AssessmentResponse]
        Mirrors the shape of the request.

    Raises
    ------
    HTTPException
        With status 400 if any field is outside its declared domain, or the
        list is empty or larger than ``max_batch_size``.
    """
    if isinstance(data, list):
        _check_batch(len(data))
    try:
        if isinstance(data, list):
            return [_assessment_response(d) for d in data]
        result = _assessment_response(data)
        logger.info("Prediction: score=%d, level=%s", result.score, result.level)
        return result
    except ValidationError as e:
        raise _bad_input(e)


@app.post("/validate", response_model=ValidationResponse)
async def validate(data: Dict[str, Any]):
    """Report every problem of a form submission instead of the first one."""
    errors = validate_observation(data)
    return ValidationResponse(
        valid=not errors,
        errors=[FieldError(**e.to_dict()) for e in errors],
    )


@app.post("/metrics")
async def metrics(payload: List[LabeledHeartDiseaseRequest]):
    """Compare the heuristic's prediction class with known outcomes.

    Returns
    -------
    dict
        Row count, accuracy/precision/recall/MCC, ROC-AUC and average precision over
        ``risk_percentage`` (``null`` when undefined), and counts per level.
    """
    _check_batch(len(payload))
    records = [d.model_dump() for d in payload]
    y = [r.pop("target") for r in records]
    try:
        res = evaluate(records, y)
    except ValidationError as e:
        raise _bad_input(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Error during metrics: {e}")

    res["auc_roc"] = _finite(res["auc_roc"])
    res["average_precision"] = _finite(res["average_precision"])
    return res


@app.post("/explain/factors")
async def explain_factors(payload: List[HeartDiseaseRequest]):
    """Per-field point contributions, raw total and final score for each row."""
    _check_batch(len(payload))
    try:
        df = factor_table([d.model_dump() for d in payload])
    except ValidationError as e:
        raise _bad_input(e)
    return {"columns": list(df.columns), "rows": df.to_dict(orient="records")}


@app.post("/explain/pdp", response_model=PDPResponse)
async def explain_pdp(payload: PDPRequest):
    """Partial dependence of the score on a single field."""
    _check_batch(len(payload.data))
    try:
        res = partial_dependence(
            [d.model_dump() for d in payload.data],
            feature=payload.feature,
            grid=payload.grid,
            grid_size=payload.grid_size or settings.pdp_grid_size,
        )
    except ValidationError as e:
        raise _bad_input(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Error in PDP: {e}")
    return PDPResponse(**res)


@app.post("/reports", response_model=ReportResponse, status_code=201)
async def create_report(payload: ReportRequest):
    """Score the clinical data and store the result as an unpublished report."""
    try:
        observation = ClinicalObservation.from_mapping(payload.clinical_data.model_dump())
    except ValidationError as e:
        raise _bad_input(e)

    draft = ReportDraft.for_patient(
        patient_id=payload.patient_id,
        patient_name=payload.patient_name,
        patient_email=payload.patient_email,
        observation=observation,
    )
    report_id = STORE.save(draft)
    return _report_response(STORE.get(report_id))


@app.post("/reports/{report_id}/publish", response_model=ReportResponse)
async def publish_report(report_id: str):
    try:
        return _report_response(STORE.publish(report_id))
    except ReportNotFound:
        raise HTTPException(status_code=404, detail=f"Report '{report_id}' not found.")


@app.get("/reports/{report_id}", response_model=ReportResponse)
async def get_report(report_id: str):
    try:
        return _report_response(STORE.get(report_id))
    except ReportNotFound:
        raise HTTPException(status_code=404, detail=f"Report '{report_id}' not found.")


@app.get("/patients/{email}/reports", response_model=List[ReportResponse])
async def patient_reports(email: str):
    """Published reports for a patient, newest first. Drafts are never listed."""
    return [_report_response(r) for r in STORE.patient_reports(email)]


@app.get("/patients/{email}/reports/latest", response_model=ReportResponse)
async def latest_patient_report(email: str):
    report = STORE.latest_report(email)
    if report is None:
        raise HTTPException(status_code=404, detail=f"No published report for '{email}'.")
    return _report_response(report)
