import pytest


LOW_RISK = {
    "age": 30, "sex": 0, "cp": 0, "trestbps": 110, "chol": 180, "fbs": 0,
    "restecg": 0, "thalach": 170, "exang": 0, "oldpeak": 0.0, "slope": 0,
    "ca": 0, "thal": 0,
}

HIGH_RISK = {
    "age": 70, "sex": 1, "cp": 3, "trestbps": 190, "chol": 310, "fbs": 1,
    "restecg": 2, "thalach": 90, "exang": 1, "oldpeak": 4.0, "slope": 2,
    "ca": 3, "thal": 2,
}


@pytest.fixture
def low_risk():
    return dict(LOW_RISK)


@pytest.fixture
def high_risk():
    return dict(HIGH_RISK)
