"""
FastAPI Application - REST API for skill-line editors.

Endpoints:
    GET    /api/v1/health      Health check
    POST   /api/v1/parse       Parse one line into structured fields
    POST   /api/v1/validate    Validate one line in mob or skill context
    POST   /api/v1/analyze     Exact duplicates and similarity clusters
    POST   /api/v1/groups      Comment sections, trigger chains, suggestions
    POST   /api/v1/suggest     Consolidation suggestions for every cluster
    POST   /api/v1/batch       Analyze a whole YAML document

All responses are JSON with explicit Pydantic schemas. The engine never fails
on line content: bad lines come back as invalid results, not error responses.
Every error response uses the ErrorResponse body:
    400  INVALID_DOCUMENT   batch YAML could not be loaded
    422  VALIDATION_ERROR   request body failed schema validation
    503  INVALID_CATALOG    configured catalog file could not be loaded
    500  INTERNAL_ERROR     anything else
"""

from typing import Optional, Union
import logging

from ..catalog import CatalogError
from ..config import EngineSettings

logger = logging.getLogger(__name__)


def create_app(service=None, settings: Optional[EngineSettings] = None):
    """
    Create the FastAPI application.

    Args:
        service: Optional EngineService instance (creates new if not provided)
        settings: Settings for a new service and for CORS (read from env if not provided)

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI, Request
        from fastapi.encoders import jsonable_encoder
        from fastapi.exceptions import RequestValidationError
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install fastapi uvicorn"
        )

    from ..batch import DocumentError
    from .service import EngineService
    from .schemas import (
        # Request models
        ParseRequest,
        ValidateRequest,
        LinesRequest,
        BatchRequest,
        # Response models
        ParsedLineResponse,
        ValidationResponse,
        AnalyzeResponse,
        GroupsResponse,
        SuggestResponse,
        BatchResponse,
        ErrorResponse,
        HealthResponse,
        # Enums
        ErrorCode,
    )

    settings = settings or (service.settings if service else EngineSettings.from_env())
    engine = service
    catalog_failure: Optional[str] = None
    if engine is None:
        try:
            engine = EngineService.from_settings(settings)
        except CatalogError as e:
            # engine routes answer INVALID_CATALOG until the process restarts
            logger.error("Engine unavailable, catalog could not be loaded: %s", e)
            catalog_failure = str(e)

    def current_engine() -> EngineService:
        if catalog_failure is not None:
            raise CatalogError(catalog_failure)
        return engine

    app = FastAPI(
        title="Skillforge Engine API",
        description="""
Skill-line DSL engine - parse, validate and analyze skill lines.

## Contexts

- `mob`: lines in a mob's Skills list; a trigger (`~onAttack`) is required
- `skill`: lines in a metaskill; a trigger is ignored and reported as a warning

## Error Codes

| Code | Description |
|------|-------------|
| `INVALID_DOCUMENT` | Batch document is not valid YAML (400) |
| `VALIDATION_ERROR` | Request body failed validation (422) |
| `INVALID_CATALOG` | Configured catalog file could not be loaded (503) |
| `INTERNAL_ERROR` | Unexpected server failure (500) |
        """,
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return make_error_response(
            ErrorCode.VALIDATION_ERROR,
            "Request body failed validation",
            status_code=422,
            details={"errors": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(CatalogError)
    async def catalog_error_handler(request: Request, exc: CatalogError):
        return make_error_response(ErrorCode.INVALID_CATALOG, str(exc), status_code=503)

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception):
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return make_error_response(ErrorCode.INTERNAL_ERROR, "Internal server error", status_code=500)

    # =========================================================================
    # Line Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/parse",
        response_model=ParsedLineResponse,
        tags=["Lines"],
        summary="Parse a skill line",
    )
    async def parse_line(request: ParseRequest) -> ParsedLineResponse:
        """Parse one line. Malformed lines return `valid=false` and a `parse_error`."""
        return current_engine().parse(request.line, strict=request.strict)

    @app.post(
        "/api/v1/validate",
        response_model=ValidationResponse,
        tags=["Lines"],
        summary="Validate a skill line in context",
    )
    async def validate_line(request: ValidateRequest) -> ValidationResponse:
        return current_engine().validate(request.line, request.context)

    # =========================================================================
    # Analysis Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/analyze",
        response_model=AnalyzeResponse,
        tags=["Analysis"],
        summary="Find duplicate and similar lines",
    )
    async def analyze_lines(request: LinesRequest) -> AnalyzeResponse:
        return current_engine().analyze(request.lines, threshold=request.threshold)

    @app.post(
        "/api/v1/groups",
        response_model=GroupsResponse,
        tags=["Analysis"],
        summary="Detect comment sections and trigger chains",
    )
    async def detect_groups(request: LinesRequest) -> GroupsResponse:
        return current_engine().groups(request.lines)

    @app.post(
        "/api/v1/suggest",
        response_model=SuggestResponse,
        tags=["Analysis"],
        summary="Consolidation suggestions for duplicate and similar lines",
    )
    async def suggest_consolidation(request: LinesRequest) -> SuggestResponse:
        return current_engine().suggest(request.lines, threshold=request.threshold)

    @app.post(
        "/api/v1/batch",
        response_model=BatchResponse,
        responses={400: {"model": ErrorResponse}},
        tags=["Analysis"],
        summary="Analyze every entry of a YAML document",
    )
    async def analyze_document(request: BatchRequest) -> Union[BatchResponse, JSONResponse]:
        """
        Analyze a document of mobs and metaskills.

        Returns 400 with `INVALID_DOCUMENT` if the YAML cannot be loaded.
        """
        try:
            return current_engine().batch(request.document, threshold=request.threshold)
        except DocumentError as e:
            return make_error_response(ErrorCode.INVALID_DOCUMENT, str(e))

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/api/v1/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return current_engine().health()

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Skillforge Engine API",
            "version": "1.0.0",
            "docs": "/api/docs",
            "health": "/api/v1/health",
        }

    return app
