"""
Report storage capability.

Doctors save a scored report as a draft; it becomes visible to the patient
only once published. The scorer never touches storage: callers compute the
assessment first and hand the finished report to a `ReportStore`.

`InMemoryReportStore` is the process-local implementation used by the API.
"""

import logging
import threading
import uuid
from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol

from .guidance import diet_plan, recommendations
from .scoring import ClinicalObservation, RiskAssessment, assess

logger = logging.getLogger(__name__)

ReportId = str


class ReportNotFound(KeyError):
    """No report exists under the given id."""


@dataclass(frozen=True)
class ReportDraft:
    """Everything a report holds before the store assigns id and timestamps."""
    patient_id: str
    patient_name: str
    patient_email: str
    observation: ClinicalObservation
    assessment: RiskAssessment
    diet_plan: str
    recommendations: List[str] = field(default_factory=list)

    @classmethod
    def for_patient(
        cls,
        patient_id: str,
        patient_name: str,
        patient_email: str,
        observation: ClinicalObservation,
    ) -> "ReportDraft":
        """Score the observation and attach the matching diet and recommendations."""
        result = assess(observation)
        return cls(
            patient_id=patient_id,
            patient_name=patient_name,
            patient_email=patient_email,
            observation=observation,
            assessment=result,
            diet_plan=diet_plan(result.level),
            recommendations=recommendations(result.level),
        )


@dataclass(frozen=True)
class Report(ReportDraft):
    id: ReportId = ""
    created_at: Optional[datetime] = None
    published_at: Optional[datetime] = None

    @property
    def is_published(self) -> bool:
        return self.published_at is not None


class ReportStore(Protocol):
    def save(self, draft: ReportDraft) -> ReportId: ...

    def publish(self, report_id: ReportId) -> Report: ...

    def get(self, report_id: ReportId) -> Report: ...

    def patient_reports(self, patient_email: str) -> List[Report]: ...

    def latest_report(self, patient_email: str) -> Optional[Report]: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryReportStore:
    """Thread-safe dict-backed `ReportStore`."""

    def __init__(self) -> None:
        self._reports: Dict[ReportId, Report] = {}
        self._order: List[ReportId] = []
        self._lock = threading.Lock()

    def save(self, draft: ReportDraft) -> ReportId:
        report_id = uuid.uuid4().hex
        report = Report(**{f.name: getattr(draft, f.name) for f in fields(ReportDraft)},
                        id=report_id, created_at=_utcnow())
        with self._lock:
            self._reports[report_id] = report
            self._order.append(report_id)
        logger.info("Saved report %s (level=%s)", report_id, draft.assessment.level.value)
        return report_id

    def publish(self, report_id: ReportId) -> Report:
        """Mark a report published. Re-publishing keeps the first timestamp."""
        with self._lock:
            report = self._get(report_id)
            if report.published_at is None:
                report = replace(report, published_at=_utcnow())
                self._reports[report_id] = report
                logger.info("Published report %s", report_id)
        return report

    def get(self, report_id: ReportId) -> Report:
        with self._lock:
            return self._get(report_id)

    def patient_reports(self, patient_email: str) -> List[Report]:
        """Published reports for a patient, newest first."""
        email = patient_email.strip().lower()
        with self._lock:
            return [
                self._reports[rid]
                for rid in reversed(self._order)
                if self._reports[rid].is_published
                and self._reports[rid].patient_email.strip().lower() == email
            ]

    def latest_report(self, patient_email: str) -> Optional[Report]:
        reports = self.patient_reports(patient_email)
        return reports[0] if reports else None

    def clear(self) -> None:
        with self._lock:
            self._reports.clear()
            self._order.clear()

    def _get(self, report_id: ReportId) -> Report:
        try:
            return self._reports[report_id]
        except KeyError:
            raise ReportNotFound(report_id) from None
