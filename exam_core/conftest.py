# exam_core/conftest.py
import uuid

import pytest
from django.contrib.auth import get_user_model

from exam_core.iam.models import ClinicMembership, StaffProfile, StaffRole
from exam_core.tests.helpers import actor_for, client_for, exam_payload


@pytest.fixture
def clinic_id():
    return uuid.UUID("00000000-0000-0000-0000-000000000101")


@pytest.fixture
def other_clinic_id():
    return uuid.UUID("00000000-0000-0000-0000-000000000202")


@pytest.fixture
def make_staff(db, clinic_id):
    """
    Factory: auth_user -> StaffProfile (primary clinic) [-> ClinicMembership].
    """
    User = get_user_model()

    def _make(username, role, *, clinic=None, extra_clinics=(), first_name="", last_name=""):
        user = User.objects.create_user(
            username=username,
            password="pass12345",
            first_name=first_name,
            last_name=last_name,
            is_active=True,
        )
        profile = StaffProfile.objects.create(
            user=user,
            role=role,
            clinic_id=clinic or clinic_id,
            is_active=True,
        )
        for extra in extra_clinics:
            ClinicMembership.objects.create(profile=profile, clinic_id=extra, is_active=True)
        return user

    return _make


@pytest.fixture
def nurse(make_staff):
    return make_staff("nurse1", StaffRole.NURSE, first_name="Nina", last_name="Tan")


@pytest.fixture
def other_nurse(make_staff):
    return make_staff("nurse2", StaffRole.NURSE, first_name="Mei", last_name="Lim")


@pytest.fixture
def doctor(make_staff):
    return make_staff("doctor1", StaffRole.DOCTOR, first_name="David", last_name="Ong")


@pytest.fixture
def other_doctor(make_staff):
    return make_staff("doctor2", StaffRole.DOCTOR, first_name="Grace", last_name="Koh")


@pytest.fixture
def admin(make_staff):
    return make_staff("admin1", StaffRole.ADMIN, first_name="Alan", last_name="Goh")


@pytest.fixture
def foreign_doctor(make_staff, other_clinic_id):
    return make_staff("doctor3", StaffRole.DOCTOR, clinic=other_clinic_id)


@pytest.fixture
def nurse_actor(nurse):
    return actor_for(nurse)


@pytest.fixture
def other_nurse_actor(other_nurse):
    return actor_for(other_nurse)


@pytest.fixture
def doctor_actor(doctor):
    return actor_for(doctor)


@pytest.fixture
def other_doctor_actor(other_doctor):
    return actor_for(other_doctor)


@pytest.fixture
def admin_actor(admin):
    return actor_for(admin)


@pytest.fixture
def foreign_doctor_actor(foreign_doctor):
    return actor_for(foreign_doctor)


@pytest.fixture
def api_client(nurse):
    return client_for(nurse)


@pytest.fixture
def make_submission():
    """
    Create through the service so audit entries exist like in production.
    """
    from exam_core.submissions.services import SubmissionService

    def _make(actor, **overrides):
        return SubmissionService.create(actor=actor, data=exam_payload(**overrides))

    return _make


@pytest.fixture
def draft(make_submission, nurse_actor):
    return make_submission(nurse_actor, route_for_approval=False)


@pytest.fixture
def pending(make_submission, nurse_actor):
    return make_submission(nurse_actor)
