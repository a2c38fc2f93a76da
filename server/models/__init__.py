"""
Pydantic models for hub requests and responses.

All wire shapes defined here. No imports from services or routes.
"""

from server.models.requests import (
    HUB_CONTEXT,
    REQUEST_TYPES,
    BaseRequest,
    CommitQuery,
    CommitQueryRequest,
    ObjectQuery,
    ObjectQueryRequest,
    QueryFilter,
    WriteRequest,
)
from server.models.responses import (
    BaseResponse,
    CommitQueryResponse,
    ErrorResponse,
    ObjectMetadata,
    ObjectQueryResponse,
    WriteResponse,
)

__all__ = [
    "HUB_CONTEXT",
    "REQUEST_TYPES",
    # Requests
    "BaseRequest",
    "WriteRequest",
    "CommitQuery",
    "CommitQueryRequest",
    "QueryFilter",
    "ObjectQuery",
    "ObjectQueryRequest",
    # Responses
    "BaseResponse",
    "WriteResponse",
    "CommitQueryResponse",
    "ObjectMetadata",
    "ObjectQueryResponse",
    "ErrorResponse",
]
