# exam_core/tests/helpers.py
from rest_framework.test import APIClient

from exam_core.iam.identity import Actor
from exam_core.iam.models import StaffProfile


def clinic_headers(clinic_id):
    """
    Optional clinic selector header.
    DRF test client requires HTTP_ prefix.
    """
    return {"HTTP_X_CLINIC_ID": str(clinic_id)}


def actor_for(user, clinic_id=None) -> Actor:
    profile = StaffProfile.objects.get(user=user)
    return Actor(user_id=user.id, role=profile.role, clinic_id=clinic_id or profile.clinic_id)


def client_for(user) -> APIClient:
    c = APIClient()
    c.force_authenticate(user=user)
    return c


def exam_payload(**overrides):
    data = {
        "exam_type": "SIX_MONTHLY_MDW",
        "patient_name": "Siti Aminah",
        "patient_identifier": "G1234567N",
        "form_data": {"weight": 55, "pregnancy_test": "negative"},
    }
    data.update(overrides)
    return data
