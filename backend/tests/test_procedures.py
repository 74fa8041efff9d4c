"""
Projects API — Stored Procedure Gateway Tests
===============================================

What we test:
    ✅ T-SQL batch construction (parameters, OUTPUT parameters, name checks)
    ✅ Error numbers >= 50000 become BusinessRuleViolation with the DB message
    ✅ Other driver failures become InfrastructureError with a generic message
    ✅ Every result set is read through aioodbc's own cursor, row-count-only
       sets are skipped
    ✅ OUTPUT values and the SUCCESS check
    ❌ A live SQL Server (integration environment only)
"""

import asyncio
import functools
import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import DBAPIError

from projects_api.exceptions import BusinessRuleViolation, InfrastructureError
from projects_api.services.procedures import (
    ProcedureClient,
    _execute,
    _read_result_sets,
    build_statement,
    encode_list,
    require_success,
    sql_error_message,
    sql_error_number,
    translate_database_error,
)


class FakeDriverError(Exception):
    """Shaped like a pyodbc error: (sqlstate, message)."""


def odbc_error(number: int, text: str) -> FakeDriverError:
    return FakeDriverError(
        "42000",
        f"[42000] [Microsoft][ODBC Driver 18 for SQL Server][SQL Server]{text} ({number}) (SQLExecDirectW)",
    )


class PyodbcCursor:
    """
    Synchronous cursor behaving like pyodbc's: nextset() returns True while
    another result set follows and False after the last one.
    """

    def __init__(self, sets, error=None):
        self._sets = sets
        self._position = 0
        self._error = error
        self.executed = None
        self.closed = False

    @property
    def description(self):
        columns = self._sets[self._position][0]
        return [(name, None, None, None, None, None, None) for name in columns] if columns else None

    def execute(self, sql, *params):
        if self._error is not None:
            raise self._error
        self.executed = (sql,) + params
        return self

    def fetchall(self):
        return list(self._sets[self._position][1])

    def nextset(self):
        if self._position + 1 < len(self._sets):
            self._position += 1
            return True
        return False

    def close(self):
        self.closed = True


class ExecutorConnection:
    """The part of aioodbc.Connection its Cursor relies on: a loop and an executor hop."""

    def __init__(self, loop):
        self.loop = loop

    def _execute(self, func, *args, **kwargs):
        return self.loop.run_in_executor(None, functools.partial(func, *args, **kwargs))

    async def close(self):
        pass


@pytest.fixture
def driver_cursor():
    """Wraps a PyodbcCursor in aioodbc's real Cursor class."""
    aioodbc_cursor = pytest.importorskip("aioodbc.cursor")

    def wrap(impl):
        return aioodbc_cursor.Cursor(impl, ExecutorConnection(asyncio.get_running_loop()))

    return wrap


def session_on(cursor):
    """An AsyncSession mock whose raw driver connection hands out `cursor`."""
    raw_connection = MagicMock()
    raw_connection.driver_connection.cursor = AsyncMock(return_value=cursor)
    connection = MagicMock()
    connection.get_raw_connection = AsyncMock(return_value=raw_connection)
    session = MagicMock()
    session.connection = AsyncMock(return_value=connection)
    return session


class TestBuildStatement:

    def test_procedure_without_parameters(self):
        sql, values = build_statement("usp_GetAllMenus")
        assert sql == "SET NOCOUNT ON;\nEXEC usp_GetAllMenus;"
        assert values == []

    def test_parameters_are_placeholders(self):
        menu_id = uuid.uuid4()
        sql, values = build_statement("usp_GetMenuById", {"MenuId": menu_id})

        assert "EXEC usp_GetMenuById @MenuId = ?;" in sql
        assert values == [str(menu_id)]

    def test_output_parameters_are_selected_back(self):
        sql, values = build_statement(
            "usp_DeleteMenuById", {"MenuId": "m-1"}, outputs=["OutputMessage"]
        )

        assert "DECLARE @out_OutputMessage NVARCHAR(4000);" in sql
        assert "@MenuId = ?, @OutputMessage = @out_OutputMessage OUTPUT" in sql
        assert sql.endswith("SELECT @out_OutputMessage AS [OutputMessage];")
        assert values == ["m-1"]

    def test_schema_qualified_procedure(self):
        sql, _ = build_statement("dbo.SP_PreSales_GetAll")
        assert "EXEC dbo.SP_PreSales_GetAll;" in sql

    @pytest.mark.parametrize("name", ["usp_x; DROP TABLE Users", "usp x", "[usp_x]", ""])
    def test_invalid_procedure_name(self, name):
        with pytest.raises(ValueError):
            build_statement(name)

    def test_invalid_parameter_name(self):
        with pytest.raises(ValueError):
            build_statement("usp_GetMenuById", {"Menu Id": 1})


class TestEncodeList:

    def test_none_stays_none(self):
        assert encode_list(None) is None

    def test_empty_list_as_null(self):
        assert encode_list([]) is None

    def test_empty_list_kept(self):
        assert encode_list([], empty_as_null=False) == "[]"

    def test_values_are_json(self):
        assert encode_list(["/Docs/a.pdf", "/Docs/b.pdf"]) == '["/Docs/a.pdf", "/Docs/b.pdf"]'


class TestErrorTranslation:

    def test_business_error_number_from_odbc_message(self):
        error = odbc_error(50001, "Project is already confirmed")
        assert sql_error_number(error) == 50001
        assert sql_error_message(error) == "Project is already confirmed"

    def test_number_from_first_argument(self):
        error = Exception(50002, b"Stage is locked")
        assert sql_error_number(error) == 50002
        assert sql_error_message(error) == "Stage is locked"

    def test_business_rule_violation(self):
        wrapped = DBAPIError("EXEC SP_PreSales_Update", [], odbc_error(50001, "Project is already confirmed"))

        error = translate_database_error(wrapped, "SP_PreSales_Update")

        assert isinstance(error, BusinessRuleViolation)
        assert error.error_number == 50001
        assert error.message == "Project is already confirmed"

    def test_system_error_is_infrastructure(self):
        wrapped = DBAPIError(
            "EXEC usp_GetAllMenus",
            [],
            odbc_error(4060, 'Cannot open database "Projects" requested by the login.'),
        )

        error = translate_database_error(wrapped, "usp_GetAllMenus")

        assert isinstance(error, InfrastructureError)
        assert error.source == "SQL"
        assert error.context["error_number"] == 4060
        assert "Cannot open database" not in error.message

    def test_error_without_number_is_infrastructure(self):
        error = translate_database_error(ConnectionRefusedError("refused"), "usp_GetAllMenus")
        assert isinstance(error, InfrastructureError)
        assert error.context["error_number"] is None

class TestCursorReading:

    @pytest.mark.asyncio
    async def test_reads_every_result_set_and_skips_row_counts(self, driver_cursor):
        cursor = driver_cursor(PyodbcCursor([
            (["ProjectNo", "ProjectName"], [(1, "Billing"), (2, "Payroll")]),
            (None, []),
            (["ProjectNo", "SerialNumber"], [(1, "SN-1")]),
            (["MenuURL"], []),
        ]))

        result_sets = await _read_result_sets(cursor)

        assert result_sets == [
            [{"project_no": 1, "project_name": "Billing"}, {"project_no": 2, "project_name": "Payroll"}],
            [{"project_no": 1, "serial_number": "SN-1"}],
            [],
        ]

    @pytest.mark.asyncio
    async def test_execute_binds_values_and_closes_cursor(self, driver_cursor):
        impl = PyodbcCursor([(["Otp"], [("123456",)])])

        result_sets = await _execute(session_on(driver_cursor(impl)), "EXEC sp_X @EmailId = ?;", ["a@b.c"])

        assert impl.executed == ("EXEC sp_X @EmailId = ?;", "a@b.c")
        assert impl.closed
        assert result_sets == [[{"otp": "123456"}]]

    @pytest.mark.asyncio
    async def test_cursor_closed_when_execute_fails(self, driver_cursor):
        impl = PyodbcCursor([(None, [])], error=odbc_error(50001, "Already confirmed"))

        with pytest.raises(FakeDriverError):
            await _execute(session_on(driver_cursor(impl)), "EXEC x;", [])
        assert impl.closed


class TestProcedureClient:

    @pytest.mark.asyncio
    async def test_project_and_serial_number_sets_both_arrive(self, driver_cursor):
        impl = PyodbcCursor([
            (["ProjectNo", "ProjectName"], [(1, "Billing"), (2, "Payroll")]),
            (["ProjectNo", "SerialNumber"], [(1, "SN-1"), (2, "SN-2")]),
        ])
        client = ProcedureClient(session_on(driver_cursor(impl)))

        result_sets = await client.call("SP_PreSales_GetAll_Confirmed")

        assert len(result_sets) == 2
        assert result_sets[1] == [
            {"project_no": 1, "serial_number": "SN-1"},
            {"project_no": 2, "serial_number": "SN-2"},
        ]
        assert "EXEC SP_PreSales_GetAll_Confirmed;" in impl.executed[0]

    @pytest.mark.asyncio
    async def test_call_outputs_reads_set_after_procedure_rows(self, driver_cursor):
        impl = PyodbcCursor([
            (["MenuId"], [("m-1",)]),
            (["OutputMessage"], [("SUCCESS",)]),
        ])
        client = ProcedureClient(session_on(driver_cursor(impl)))

        outputs = await client.call_outputs("usp_UpdateMenu", {"MenuId": "m-1"}, ["OutputMessage"])

        assert outputs == {"output_message": "SUCCESS"}

    @pytest.mark.asyncio
    async def test_business_error_raised_as_violation(self, driver_cursor):
        impl = PyodbcCursor([(None, [])], error=odbc_error(50010, "Payment exceeds project value"))
        client = ProcedureClient(session_on(driver_cursor(impl)))

        with pytest.raises(BusinessRuleViolation) as exc_info:
            await client.execute("SP_PreSales_AddAdvancePayment", {"ProjectNo": 7})
        assert exc_info.value.message == "Payment exceeds project value"

    @pytest.mark.asyncio
    async def test_connection_failure_raised_as_infrastructure(self):
        session = MagicMock()
        session.connection = AsyncMock(side_effect=OSError("connection refused"))
        client = ProcedureClient(session)

        with pytest.raises(InfrastructureError) as exc_info:
            await client.call("usp_GetAllMenus")
        assert exc_info.value.source == "SQL"

    @pytest.mark.asyncio
    async def test_bad_procedure_name_is_server_error(self):
        session = MagicMock()
        session.connection = AsyncMock()
        client = ProcedureClient(session)

        with pytest.raises(InfrastructureError) as exc_info:
            await client.call("usp_x; --")
        assert exc_info.value.source == "Controller"
        session.connection.assert_not_called()

    @pytest.mark.asyncio
    async def test_call_outputs_without_rows(self):
        cursor = AsyncMock()
        cursor.description = None
        cursor.nextset.return_value = False
        client = ProcedureClient(session_on(cursor))

        outputs = await client.call_outputs("usp_UpdateMenu", {"MenuId": "m"}, ["OutputMessage"])

        assert outputs == {"output_message": None}



class TestRequireSuccess:

    def test_success_passes(self):
        require_success("SUCCESS", "usp_UpdateMenu")

    def test_other_message_is_passed_through(self):
        with pytest.raises(BusinessRuleViolation) as exc_info:
            require_success("Menu has submenus", "usp_DeleteMenuById")
        assert exc_info.value.message == "Menu has submenus"

    def test_missing_message_is_a_violation(self):
        with pytest.raises(BusinessRuleViolation):
            require_success(None, "usp_DeleteMenuById")
