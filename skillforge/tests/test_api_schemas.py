"""
Tests for API Pydantic schemas.

Validates that:
- Request models apply defaults and bounds
- Response models serialize correctly
- Error codes are properly structured
- The OpenAPI schema lists every response model
"""

import pytest
from pydantic import ValidationError

from ..api.schemas import (
    BatchRequest,
    ErrorCode,
    ErrorResponse,
    IssueInfo,
    LinesRequest,
    ParseRequest,
    ValidateRequest,
    ValidationResponse,
)


class TestPydanticSchemas:
    """Tests for Pydantic schema validation."""

    def test_request_defaults(self):
        assert ParseRequest(line="- heal{amount=1}").strict is False
        assert ValidateRequest(line="- heal{amount=1}").context == "skill"
        assert LinesRequest(lines=[]).threshold is None
        assert BatchRequest(document="").threshold is None

    @pytest.mark.parametrize("threshold", [-0.1, 1.01])
    def test_threshold_bounds(self, threshold):
        with pytest.raises(ValidationError):
            LinesRequest(lines=["- heal{amount=1}"], threshold=threshold)
        with pytest.raises(ValidationError):
            BatchRequest(document="", threshold=threshold)

    def test_validation_response_schema(self):
        response = ValidationResponse(
            valid=False,
            context="mob",
            errors=[IssueInfo(
                kind="missing_required_attribute",
                severity="error",
                message="Missing required attribute 'amount'",
                field="amount",
            )],
            status="✗ Missing required attribute 'amount'",
        )
        data = response.model_dump()
        assert data["valid"] is False
        assert data["errors"][0]["field"] == "amount"
        assert data["warnings"] == []

    def test_error_response_schema(self):
        response = ErrorResponse(error="Invalid YAML", error_code=ErrorCode.INVALID_DOCUMENT)
        data = response.model_dump(mode="json")
        assert data["error_code"] == "INVALID_DOCUMENT"
        assert data["details"] is None
        assert data["api_version"] == "v1"

    def test_error_codes(self):
        assert {code.value for code in ErrorCode} == {
            "INVALID_DOCUMENT",
            "INVALID_CATALOG",
            "VALIDATION_ERROR",
            "INTERNAL_ERROR",
        }


class TestOpenAPISchema:
    """Tests for OpenAPI schema generation."""

    @pytest.fixture
    def schema(self, service):
        pytest.importorskip("fastapi")
        from fastapi.openapi.utils import get_openapi

        from ..api.app import create_app

        app = create_app(service=service)
        return get_openapi(title=app.title, version=app.version, routes=app.routes)

    def test_openapi_schema_generates(self, schema):
        assert "paths" in schema
        assert "schemas" in schema["components"]

    def test_response_models_in_schema(self, schema):
        schemas = schema["components"]["schemas"]
        for name in [
            "ParsedLineResponse",
            "ValidationResponse",
            "AnalyzeResponse",
            "GroupsResponse",
            "SuggestResponse",
            "BatchResponse",
            "ErrorResponse",
            "HealthResponse",
        ]:
            assert name in schemas, f"{name} missing from OpenAPI schema"

    def test_endpoints(self, schema):
        paths = schema["paths"]
        for path in ["/api/v1/parse", "/api/v1/validate", "/api/v1/analyze",
                     "/api/v1/groups", "/api/v1/suggest", "/api/v1/batch"]:
            assert "200" in paths[path]["post"]["responses"]
        assert "400" in paths["/api/v1/batch"]["post"]["responses"]
        assert "get" in paths["/api/v1/health"]
