# exam_core/submissions/models.py
from django.db import models
from django.db.models import Q

from exam_core.common.models import ClinicScopedModel


class SubmissionStatus(models.TextChoices):
    DRAFT = "draft", "Draft"
    PENDING_APPROVAL = "pending_approval", "Pending Approval"
    IN_PROGRESS = "in_progress", "In Progress"
    SUBMITTED = "submitted", "Submitted"
    REJECTED = "rejected", "Rejected"


class ExamType(models.TextChoices):
    SIX_MONTHLY_MDW = "SIX_MONTHLY_MDW", "Six-monthly Medical Exam (MDW)"
    SIX_MONTHLY_FMW = "SIX_MONTHLY_FMW", "Six-monthly Medical Exam (FMW)"
    WORK_PERMIT = "WORK_PERMIT", "Work Permit Medical Exam"
    FULL_MEDICAL_EXAM = "FULL_MEDICAL_EXAM", "Full Medical Exam"
    AGED_DRIVERS = "AGED_DRIVERS", "Aged Drivers Exam"
    DRIVING_LICENCE_TP = "DRIVING_LICENCE_TP", "Driving Licence (TP)"
    DRIVING_VOCATIONAL_TP_LTA = "DRIVING_VOCATIONAL_TP_LTA", "Driving + Vocational Licence (TP/LTA)"
    VOCATIONAL_LICENCE_LTA = "VOCATIONAL_LICENCE_LTA", "Vocational Licence (LTA)"
    DRIVING_LICENCE_TP_SHORT = "DRIVING_LICENCE_TP_SHORT", "Driving Licence (TP), short form"
    DRIVING_VOCATIONAL_TP_LTA_SHORT = "DRIVING_VOCATIONAL_TP_LTA_SHORT", "Driving + Vocational Licence, short form"
    VOCATIONAL_LICENCE_LTA_SHORT = "VOCATIONAL_LICENCE_LTA_SHORT", "Vocational Licence (LTA), short form"
    PR_MEDICAL = "PR_MEDICAL", "Permanent Residency Medical"
    STUDENT_PASS_MEDICAL = "STUDENT_PASS_MEDICAL", "Student Pass Medical"
    LTVP_MEDICAL = "LTVP_MEDICAL", "Long-Term Visit Pass Medical"


AGENCY_MOM = "Ministry of Manpower"
AGENCY_SPF = "Singapore Police Force"
AGENCY_TP_LTA = "Traffic Police / Land Transport Authority"
AGENCY_ICA = "Immigration & Checkpoints Authority"

_AGENCY_BY_EXAM_TYPE = {
    ExamType.AGED_DRIVERS: AGENCY_SPF,
    ExamType.DRIVING_LICENCE_TP: AGENCY_TP_LTA,
    ExamType.DRIVING_VOCATIONAL_TP_LTA: AGENCY_TP_LTA,
    ExamType.VOCATIONAL_LICENCE_LTA: AGENCY_TP_LTA,
    ExamType.DRIVING_LICENCE_TP_SHORT: AGENCY_TP_LTA,
    ExamType.DRIVING_VOCATIONAL_TP_LTA_SHORT: AGENCY_TP_LTA,
    ExamType.VOCATIONAL_LICENCE_LTA_SHORT: AGENCY_TP_LTA,
    ExamType.PR_MEDICAL: AGENCY_ICA,
    ExamType.STUDENT_PASS_MEDICAL: AGENCY_ICA,
    ExamType.LTVP_MEDICAL: AGENCY_ICA,
}


def agency_for(exam_type: str) -> str:
    return _AGENCY_BY_EXAM_TYPE.get(exam_type, AGENCY_MOM)


class SubmissionQuerySet(models.QuerySet):
    def visible(self):
        return self.filter(deleted_at__isnull=True)


class Submission(ClinicScopedModel):
    """
    One medical examination record moving through the review workflow.
    Workflow fields are written only by SubmissionService / ApprovalService.
    Rows are never physically deleted (deleted_at marks soft deletion).
    """
    exam_type = models.CharField(max_length=64, choices=ExamType.choices, db_index=True)
    form_data = models.JSONField(default=dict)

    patient_name = models.CharField(max_length=255)
    patient_identifier = models.CharField(max_length=32, db_index=True)
    patient_passport_no = models.CharField(max_length=32, blank=True, default="")
    patient_date_of_birth = models.DateField(null=True, blank=True)
    patient_email = models.EmailField(blank=True, default="")
    patient_mobile = models.CharField(max_length=32, blank=True, default="")
    examination_date = models.DateField(null=True, blank=True)

    status = models.CharField(
        max_length=32,
        choices=SubmissionStatus.choices,
        default=SubmissionStatus.DRAFT,
        db_index=True,
    )

    created_by_id = models.BigIntegerField(db_index=True)

    assigned_doctor_id = models.BigIntegerField(null=True, blank=True, db_index=True)

    # collaborative-draft assignment (distinct from approval routing)
    assigned_to_id = models.BigIntegerField(null=True, blank=True, db_index=True)
    assigned_to_role = models.CharField(max_length=16, blank=True, default="")
    assigned_at = models.DateTimeField(null=True, blank=True)
    assigned_by_id = models.BigIntegerField(null=True, blank=True)

    # set on approval/direct submit; approved_by_id also records the rejecter
    approved_by_id = models.BigIntegerField(null=True, blank=True, db_index=True)
    approved_date = models.DateTimeField(null=True, blank=True)
    submitted_date = models.DateTimeField(null=True, blank=True)

    rejected_reason = models.TextField(null=True, blank=True)

    last_reviewed_by_id = models.BigIntegerField(null=True, blank=True)
    last_reviewed_at = models.DateTimeField(null=True, blank=True)

    converted_for_edit_by_id = models.BigIntegerField(null=True, blank=True)

    deleted_at = models.DateTimeField(null=True, blank=True, db_index=True)

    objects = SubmissionQuerySet.as_manager()

    class Meta:
        db_table = "submissions_submission"
        indexes = [
            models.Index(fields=["clinic_id", "status", "created_at"], name="sub_clinic_status_created_idx"),
            models.Index(fields=["clinic_id", "exam_type"], name="sub_clinic_exam_type_idx"),
            models.Index(fields=["created_by_id", "status"], name="sub_creator_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(status__in=SubmissionStatus.values),
                name="ck_submission_status_valid",
            ),
            models.CheckConstraint(
                condition=Q(deleted_at__isnull=True) | Q(status=SubmissionStatus.DRAFT),
                name="ck_submission_only_drafts_deleted",
            ),
        ]

    @property
    def created_date(self):
        return self.created_at

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def __str__(self) -> str:
        return f"Submission({self.exam_type}, {self.status})"
