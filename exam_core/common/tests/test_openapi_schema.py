import pytest
from rest_framework.test import APIClient

pytestmark = pytest.mark.django_db


def test_schema_lists_versioned_routes_only():
    res = APIClient().get("/api/schema/", {"format": "json"})
    assert res.status_code == 200

    schema = res.json()
    paths = schema["paths"]
    assert "/api/v1/submissions/" in paths
    assert "/api/v1/submissions/{id}/history/" in paths
    assert "/api/v1/approvals/{id}/reject/" in paths
    assert not any(p.startswith("/api/submissions/") for p in paths)
    assert "BearerOrCookieJWT" in schema["components"]["securitySchemes"]


def test_clinic_header_documented_on_scoped_routes():
    schema = APIClient().get("/api/schema/", {"format": "json"}).json()

    params = schema["paths"]["/api/v1/submissions/"]["get"]["parameters"]
    assert any(p["name"] == "X-Clinic-Id" and p["in"] == "header" for p in params)

    login = schema["paths"]["/api/v1/auth/token/"]["post"]
    assert not any(p.get("name") == "X-Clinic-Id" for p in login.get("parameters", []))
