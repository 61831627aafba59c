# exam_core/common/openapi.py
from __future__ import annotations

from drf_spectacular.openapi import AutoSchema
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter

from exam_core.iam.scope import HDR_CLINIC


class ExamAutoSchema(AutoSchema):
    """
    Adds the optional X-Clinic-Id header to every clinic-scoped endpoint.
    Auth endpoints and the schema views themselves are left alone.
    """

    CLINIC_HEADER = OpenApiParameter(
        name=HDR_CLINIC,
        type=OpenApiTypes.UUID,
        location=OpenApiParameter.HEADER,
        required=False,
        description="Clinic to act in. Defaults to the caller's primary clinic.",
    )

    def _is_unscoped_endpoint(self) -> bool:
        view = getattr(self, "view", None)
        if view is None:
            return False

        if view.__class__.__name__ in {"SpectacularAPIView", "SpectacularSwaggerView"}:
            return True

        module = view.__class__.__module__ or ""
        return module.startswith("exam_core.iam.api.auth")

    def get_override_parameters(self):
        params = list(super().get_override_parameters() or [])
        if not self._is_unscoped_endpoint():
            if not any(getattr(p, "name", "").lower() == HDR_CLINIC.lower() for p in params):
                params.append(self.CLINIC_HEADER)
        return params
