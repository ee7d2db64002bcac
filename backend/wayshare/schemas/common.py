"""
WayShare Backend - Shared Pydantic Schemas
===========================================

What:  Base classes for the transfer objects plus the error and health
       response models shared by every endpoint.
How:   FastAPI uses these models to validate request bodies, serialize
       responses, and generate the OpenAPI documentation.

Wire Conventions:
    - Field names are camelCase on the wire (startLocation, isRecurring),
      snake_case in Python; both spellings are accepted on input.
    - Every field except the required ones is nullable.
    - Relationships travel as identity-only references: {"id": 42}.
      A transfer object never embeds another entity's fields.
"""

from typing import Annotated, Any, Dict, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, create_model
from pydantic.alias_generators import to_camel

# Keys are BIGINT columns
MAX_ID = 2**63 - 1


class EntityDTO(BaseModel):
    """
    Base class for all transfer objects.

    `id` is null on create (the server assigns it on first flush) and
    required on full and partial updates.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: Optional[int] = Field(default=None, le=MAX_ID, description="Surrogate key assigned by the server")


class RefDTO(BaseModel):
    """Shallow reference to a related record: carries its key and nothing else."""

    id: int = Field(le=MAX_ID, description="Key of the referenced record")


def partial_model(model: Type[EntityDTO]) -> Type[EntityDTO]:
    """
    Derive the merge-patch variant of a transfer object.

    Every field becomes optional with a null default, so a PATCH body may
    carry any subset of fields. Value constraints (e.g. score 1..5, length
    limits) are kept: a supplied value is validated exactly as on create.
    """
    fields: Dict[str, Any] = {}
    for name, info in model.model_fields.items():
        annotation: Any = Optional[info.annotation]
        if info.metadata:
            annotation = Annotated[(annotation, *info.metadata)]
        fields[name] = (
            annotation,
            Field(default=None, alias=info.alias, description=info.description),
        )
    return create_model(f"{model.__name__}Patch", __base__=EntityDTO, **fields)


# ══════════════════════════════════════════════════════════════════════════
# Error Response Models - Consistent error format across all endpoints
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Fields:
        error: Machine-readable error category (e.g. "bad_request", "not_found")
        error_key: Machine-readable reason (e.g. "idexists", "idinvalid")
        entity_name: Entity the request concerned (e.g. "ride")
        message: Human-readable description
        details: Optional extra context (e.g. which fields failed validation)
        request_id: Correlation ID for tracing this error in server logs

    Example:
        {
            "error": "bad_request",
            "error_key": "idinvalid",
            "entity_name": "ride",
            "message": "Invalid ID",
            "details": {"path_id": 3, "body_id": 4},
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error category")
    error_key: Optional[str] = Field(default=None, description="Machine-readable error reason")
    entity_name: Optional[str] = Field(default=None, description="Entity the request concerned")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """
    Health check response showing service and dependency status.
    Returned by GET /health for monitoring and load balancer health checks.
    """
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
