"""
Projects API — Stored Procedure Gateway
=========================================

What:  Executes one named stored procedure per request and returns every
       result set it produced, fully materialized.
How:   Runs `EXEC <procedure> @Name = ?, ...` on an aioodbc cursor opened on
       the connection of the request's AsyncSession, walks the cursor with
       nextset(), and converts each row into a dict keyed by snake_case
       column name (ProjectNo → project_no, MenuURL → menu_url).
Who:   Domain services receive a ProcedureClient through the
       `get_procedures` FastAPI dependency.
When:  Exactly once per request. Calls are never retried.

Error translation:
    SQL Server reports business rules with RAISERROR/THROW numbers >= 50000.
    Those become BusinessRuleViolation (422) carrying the database message.
    Every other driver/connection failure becomes InfrastructureError (500)
    with a generic message; the driver text stays in the context.

Output parameters:
    pyodbc cannot bind OUTPUT parameters directly, so they are declared as
    T-SQL variables in the batch and selected back as a final result set.
"""

import json
import logging
import re
import uuid
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from fastapi import Depends
from pydantic.alias_generators import to_snake
from sqlalchemy.ext.asyncio import AsyncSession

from projects_api.database import get_db_session
from projects_api.exceptions import (
    BUSINESS_ERROR_THRESHOLD,
    BusinessRuleViolation,
    InfrastructureError,
    ProjectsApiError,
)
from projects_api.services.result_tree import ResultSet

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_PROCEDURE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")

# "[42000] [Microsoft][ODBC Driver 18 for SQL Server][SQL Server]Already confirmed (50001) (SQLExecDirectW)"
_NATIVE_ERROR = re.compile(r"\((\d+)\)\s*\(SQL\w+\)")
_DRIVER_PREFIX = re.compile(r"^(?:\[[^\]]*\]\s*)+")


# ══════════════════════════════════════════════════════════════════════════
# Parameter helpers
# ══════════════════════════════════════════════════════════════════════════

def encode_list(values: Optional[Iterable[Any]], empty_as_null: bool = True) -> Optional[str]:
    """
    JSON-encode a list parameter (procedures read it with OPENJSON).

    Args:
        values:        The list, or None.
        empty_as_null: Send NULL instead of "[]" for an empty list.
    """
    if values is None:
        return None
    items = list(values)
    if not items and empty_as_null:
        return None
    return json.dumps(items, default=str)


def _coerce(value: Any) -> Any:
    # uniqueidentifier parameters are bound as their canonical string
    if isinstance(value, uuid.UUID):
        return str(value)
    return value


def build_statement(
    procedure: str,
    params: Optional[Mapping[str, Any]] = None,
    outputs: Sequence[str] = (),
) -> Tuple[str, List[Any]]:
    """
    Build the parameterized T-SQL batch for one procedure call.

    Returns:
        (sql, values) where values line up with the `?` placeholders.

    Raises:
        ValueError: procedure or parameter name is not a plain identifier.
    """
    if not _PROCEDURE_NAME.match(procedure):
        raise ValueError(f"Invalid procedure name: {procedure!r}")
    params = params or {}
    for name in list(params) + list(outputs):
        if not _IDENTIFIER.match(name):
            raise ValueError(f"Invalid parameter name: {name!r}")

    lines = ["SET NOCOUNT ON;"]
    for name in outputs:
        lines.append(f"DECLARE @out_{name} NVARCHAR(4000);")

    assignments = [f"@{name} = ?" for name in params]
    assignments += [f"@{name} = @out_{name} OUTPUT" for name in outputs]
    call = f"EXEC {procedure}"
    if assignments:
        call += " " + ", ".join(assignments)
    lines.append(call + ";")

    if outputs:
        selected = ", ".join(f"@out_{name} AS [{name}]" for name in outputs)
        lines.append(f"SELECT {selected};")

    return "\n".join(lines), [_coerce(value) for value in params.values()]


# ══════════════════════════════════════════════════════════════════════════
# Error translation
# ══════════════════════════════════════════════════════════════════════════

def _driver_error(exc: BaseException) -> BaseException:
    # SQLAlchemy's DBAPIError keeps the driver exception in .orig
    return getattr(exc, "orig", None) or exc


def sql_error_number(exc: BaseException) -> Optional[int]:
    """
    Native SQL Server error number of a driver exception, if it carries one.

    Understands pyodbc (number embedded in the message text), pymssql-style
    errors (number as first argument) and any error exposing `.number`.
    """
    error = _driver_error(exc)
    number = getattr(error, "number", None)
    if isinstance(number, int):
        return number

    args = getattr(error, "args", ())
    if args and isinstance(args[0], int) and not isinstance(args[0], bool):
        return args[0]
    for arg in args:
        if isinstance(arg, str):
            match = _NATIVE_ERROR.search(arg)
            if match:
                return int(match.group(1))
    return None


def sql_error_message(exc: BaseException) -> str:
    """The database's own message text, without driver prefixes and suffixes."""
    error = _driver_error(exc)
    text = ""
    for arg in reversed(getattr(error, "args", ())):
        if isinstance(arg, bytes):
            arg = arg.decode("utf-8", errors="replace")
        if isinstance(arg, str) and arg.strip():
            text = arg
            break
    if not text:
        text = str(error)

    text = text.strip().splitlines()[0] if text.strip() else ""
    text = _DRIVER_PREFIX.sub("", text)
    text = _NATIVE_ERROR.sub("", text)
    return text.strip()


def translate_database_error(exc: BaseException, procedure: str) -> ProjectsApiError:
    """
    Map a driver/connection exception onto the API exception hierarchy.

    Error number >= 50000 → BusinessRuleViolation (message verbatim)
    anything else          → InfrastructureError (generic message)
    """
    number = sql_error_number(exc)
    if number is not None and number >= BUSINESS_ERROR_THRESHOLD:
        return BusinessRuleViolation(
            message=sql_error_message(exc) or "The operation was rejected by a business rule",
            error_number=number,
            context={"procedure": procedure},
        )
    return InfrastructureError(
        source="SQL",
        context={
            "procedure": procedure,
            "error_number": number,
            "error_type": type(_driver_error(exc)).__name__,
            "error": str(exc),
        },
    )


# ══════════════════════════════════════════════════════════════════════════
# Cursor access (driver-level aioodbc cursor)
# ══════════════════════════════════════════════════════════════════════════

async def _read_result_sets(cursor: Any) -> List[ResultSet]:
    """
    Materialize every result set of an executed aioodbc cursor.

    aioodbc's nextset() resolves to pyodbc's answer (True while another set
    follows). SQLAlchemy's DBAPI adapter discards that answer, so the driver
    cursor is read directly.
    """
    result_sets: List[ResultSet] = []
    while True:
        # Row-count messages have no description and are skipped
        if cursor.description:
            columns = [to_snake(column[0]) if column[0] else "" for column in cursor.description]
            rows = await cursor.fetchall()
            result_sets.append([dict(zip(columns, row)) for row in rows])
        if not await cursor.nextset():
            break
    return result_sets


async def _driver_cursor(session: AsyncSession) -> Any:
    """A new aioodbc cursor on the connection the session is using."""
    connection = await session.connection()
    raw_connection = await connection.get_raw_connection()
    return await raw_connection.driver_connection.cursor()


async def _execute(session: AsyncSession, statement: str, values: List[Any]) -> List[ResultSet]:
    cursor = await _driver_cursor(session)
    try:
        await cursor.execute(statement, *values)
        return await _read_result_sets(cursor)
    finally:
        await cursor.close()


# ══════════════════════════════════════════════════════════════════════════
# Client
# ══════════════════════════════════════════════════════════════════════════

class ProcedureClient:
    """
    Request-scoped stored procedure executor.

    Bound to the request's AsyncSession; the session dependency owns commit,
    rollback and release of the connection on every exit path.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def _run(
        self,
        procedure: str,
        params: Optional[Mapping[str, Any]],
        outputs: Sequence[str] = (),
    ) -> List[ResultSet]:
        try:
            statement, values = build_statement(procedure, params, outputs)
        except ValueError as e:
            # Procedure and parameter names are server constants
            logger.error("Refusing to call %r: %s", procedure, str(e))
            raise InfrastructureError(
                source="Controller", context={"procedure": procedure, "error": str(e)}
            ) from e

        logger.debug("EXEC %s with %d parameter(s)", procedure, len(values))
        try:
            result_sets = await _execute(self._session, statement, values)
        except ProjectsApiError:
            raise
        except Exception as e:
            error = translate_database_error(e, procedure)
            if isinstance(error, BusinessRuleViolation):
                logger.info(
                    "%s rejected by business rule %s: %s",
                    procedure, error.error_number, error.message,
                )
            else:
                logger.error("%s failed: %s", procedure, str(e))
            raise error from e

        logger.debug("%s returned %d result set(s)", procedure, len(result_sets))
        return result_sets

    async def call(
        self,
        procedure: str,
        params: Optional[Mapping[str, Any]] = None,
        outputs: Sequence[str] = (),
    ) -> List[ResultSet]:
        """
        Run a procedure and return all of its result sets, in order.

        When `outputs` names OUTPUT parameters, their values arrive as one
        extra final result set.
        """
        return await self._run(procedure, params, outputs)

    async def execute(
        self, procedure: str, params: Optional[Mapping[str, Any]] = None
    ) -> None:
        """Run a procedure whose result sets are not needed."""
        await self._run(procedure, params)

    async def call_outputs(
        self,
        procedure: str,
        params: Optional[Mapping[str, Any]],
        outputs: Sequence[str],
    ) -> Dict[str, Any]:
        """
        Run a procedure with OUTPUT parameters and return their values.

        Returns:
            Output values keyed by snake_case name (OutputMessage → output_message).
        """
        result_sets = await self._run(procedure, params, outputs)
        if not result_sets or not result_sets[-1]:
            return {to_snake(name): None for name in outputs}
        return dict(result_sets[-1][0])


SUCCESS_MESSAGE = "SUCCESS"


def require_success(message: Optional[str], procedure: str) -> None:
    """
    Check the @OutputMessage of an update/delete procedure.

    Raises:
        BusinessRuleViolation: the procedure reported anything but SUCCESS;
            its message is passed through verbatim.
    """
    if message == SUCCESS_MESSAGE:
        return
    logger.info("%s reported: %s", procedure, message)
    raise BusinessRuleViolation(
        message=message or f"{procedure} did not report success",
        context={"procedure": procedure},
    )


async def get_procedures(
    session: AsyncSession = Depends(get_db_session),
) -> ProcedureClient:
    """FastAPI dependency: a ProcedureClient bound to this request's session."""
    return ProcedureClient(session)
