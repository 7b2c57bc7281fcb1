"""
API Module - Editor interface.

Exposes the engine to a browser-hosted editor (or any other client):
1. Parse and validate single lines as they are typed
2. Analyze a line list for duplicates, similar lines and groups
3. Ask for consolidation suggestions
4. Analyze a whole YAML document

Every call is stateless. Nothing is stored between requests.
"""

from .schemas import (
    # Requests
    ParseRequest,
    ValidateRequest,
    LinesRequest,
    BatchRequest,
    # Responses
    ParsedLineResponse,
    ValidationResponse,
    AnalyzeResponse,
    GroupsResponse,
    SuggestResponse,
    BatchResponse,
    ErrorResponse,
    HealthResponse,
    ErrorCode,
)
from .service import EngineService
from .app import create_app

__all__ = [
    # Requests
    "ParseRequest",
    "ValidateRequest",
    "LinesRequest",
    "BatchRequest",
    # Responses
    "ParsedLineResponse",
    "ValidationResponse",
    "AnalyzeResponse",
    "GroupsResponse",
    "SuggestResponse",
    "BatchResponse",
    "ErrorResponse",
    "HealthResponse",
    "ErrorCode",
    # Service
    "EngineService",
    "create_app",
]
