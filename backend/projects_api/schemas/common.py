"""
Projects API — Shared Schema Building Blocks
==============================================

What:  The camelCase base model, the response envelope, and the error /
       health response shapes used by every route.
How:   CamelModel applies one alias generator to every schema, so row dicts
       keyed by snake_case column names validate by field name and serialize
       as camelCase. The envelope drops its own null keys on output.
Who:   Subclassed by every row and request schema; returned by every route.

Example envelope:
    {"success": true, "message": "Menu updated successfully", "requestId": "a1b2c3d4"}
    {"success": true, "data": [...]}
"""

from decimal import Decimal
from typing import Annotated, Any, Dict, Generic, Iterable, List, Optional, Type, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    SerializationInfo,
    ValidationError,
    model_serializer,
)
from pydantic.alias_generators import to_camel

from projects_api.exceptions import ProcedureContractViolation

DataT = TypeVar("DataT")
ModelT = TypeVar("ModelT", bound=BaseModel)

# SQL money/decimal columns: exact in Python, a JSON number on the wire
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    """
    Base for all API schemas.

    - Fields are declared in snake_case and exposed as camelCase.
    - Input accepts either spelling (populate_by_name).
    - Columns a procedure returns beyond the declared fields are ignored.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Record(CamelModel):
    """
    A row returned as the procedure shaped it.

    Every column is kept and serialized under its camelCase name. Used for
    result sets the API passes through without a fixed column list.
    """

    model_config = ConfigDict(extra="allow")

    @model_serializer(mode="wrap")
    def _camel_columns(self, handler, info: SerializationInfo):
        body = handler(self)
        if info.mode_is_json():
            for key, value in (self.__pydantic_extra__ or {}).items():
                if isinstance(value, Decimal):
                    body[key] = float(value)
        return {to_camel(key): value for key, value in body.items()}


class Envelope(CamelModel, Generic[DataT]):
    """
    What:  Uniform outer object of every /api response.
    How:   Keys whose value is null are left out of the JSON body.
    """

    success: bool = Field(default=True, description="False only on error responses")
    message: Optional[str] = Field(default=None, description="Human-readable outcome")
    data: Optional[DataT] = Field(default=None, description="Payload, when the operation returns one")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")

    @model_serializer(mode="wrap")
    def _omit_null_keys(self, handler):
        body = handler(self)
        return {key: value for key, value in body.items() if value is not None}


class ErrorResponse(CamelModel):
    """
    What:  Shape of every error body (documentation only; handlers build an Envelope).

    Example:
        {"success": false, "message": "Invalid project number", "requestId": "a1b2c3d4"}
    """

    success: bool = Field(default=False)
    message: str = Field(description="Human-readable error description")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(CamelModel):
    """
    What:  Health check response for monitoring and load balancers.

    Status values:
        healthy:   database reachable
        unhealthy: database unreachable (HTTP 503)
    """

    status: str = Field(description="Overall health: healthy or unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database status: connected or disconnected")
    uptime_seconds: float = Field(description="Seconds since server start")


def error_body(message: str, request_id: Optional[str] = None) -> Dict[str, Any]:
    """JSON-ready error envelope."""
    return Envelope[Any](
        success=False, message=message, request_id=request_id or None
    ).model_dump(mode="json", by_alias=True)


def parse_rows(
    model: Type[ModelT],
    rows: Iterable[Dict[str, Any]],
    procedure: str = "unknown",
) -> List[ModelT]:
    """
    Validate procedure rows against a row schema.

    Raises:
        ProcedureContractViolation: a row is missing a required column or
            carries a value of the wrong type.
    """
    try:
        return [model.model_validate(row) for row in rows]
    except ValidationError as e:
        raise ProcedureContractViolation(
            procedure=procedure,
            detail=f"rows do not match {model.__name__}",
            context={"errors": e.errors(include_url=False, include_input=False)},
        ) from e


def parse_row(
    model: Type[ModelT],
    row: Dict[str, Any],
    procedure: str = "unknown",
) -> ModelT:
    """Single-row form of parse_rows."""
    return parse_rows(model, [row], procedure)[0]
