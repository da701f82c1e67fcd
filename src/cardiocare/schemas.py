"""
Request and response schemas for the CardioCare risk API.

The feature names and encodings follow the classic UCI Heart Disease dataset
conventions, which is also how the doctor-facing form submits them.

Notes
-----
- Units:
    * trestbps: mm Hg (resting blood pressure)
    * chol: mg/dL (serum cholesterol)
    * thalach: bpm (maximum heart rate achieved)
    * oldpeak: ST depression (unitless, relative to rest)
- Encodings (dataset convention):
    * sex: 0=female, 1=male
    * cp (chest pain type): 0=typical angina .. 3=asymptomatic
    * fbs (fasting blood sugar): 1 if >120 mg/dL, else 0
    * restecg (resting ECG): 0..2
    * exang (exercise-induced angina): 1=yes, 0=no
    * slope (ST segment slope): 0..2
    * ca (major vessels colored by fluoroscopy): 0..3
    * thal (thalassemia): 0..3
- Only types are enforced here. Domain bounds are checked by the scorer so
  that an out-of-range value is reported with its field and bound.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class HeartDiseaseRequest(BaseModel):
    """Single clinical observation for risk scoring.

    Attributes
    ----------
    age : int
        Age in years.
    sex : int
        Biological sex (0=female, 1=male).
    cp : int
        Chest pain type encoded as 0..3.
    trestbps : int
        Resting blood pressure (mm Hg).
    chol : int
        Serum cholesterol (mg/dL).
    fbs : int
        Fasting blood sugar flag (1 if >120 mg/dL, else 0).
    restecg : int
        Resting electrocardiographic results (0..2).
    thalach : int
        Maximum heart rate achieved (bpm).
    exang : int
        Exercise-induced angina (1=yes, 0=no).
    oldpeak : float
        ST depression induced by exercise relative to rest.
    slope : int
        Slope of the peak exercise ST segment (0..2).
    ca : int
        Number of major vessels (0..3).
    thal : int
        Thalassemia, as encoded by the caller (0..3).
    """
    age: int
    sex: int
    cp: int
    trestbps: int
    chol: int
    fbs: int
    restecg: int
    thalach: int
    exang: int
    oldpeak: float
    slope: int
    ca: int
    thal: int


class AssessmentResponse(BaseModel):
    score: int
    level: str
    label: str
    prediction_text: str
    risk_percentage: float
    prediction_class: int
    diet_plan: str
    recommendations: List[str]


class FieldError(BaseModel):
    field: str
    bound: List[float]
    message: str


class ValidationResponse(BaseModel):
    valid: bool
    errors: List[FieldError]


class ReportRequest(BaseModel):
    """Doctor-submitted report. The assessment is always computed server-side."""
    patient_id: str
    patient_name: str
    patient_email: str
    clinical_data: HeartDiseaseRequest


class ReportResponse(BaseModel):
    id: str
    patient_id: str
    patient_name: str
    patient_email: str
    clinical_data: HeartDiseaseRequest
    risk_score: int
    risk_level: str
    label: str
    diet_plan: str
    recommendations: List[str]
    created_at: datetime
    published_at: Optional[datetime] = None
