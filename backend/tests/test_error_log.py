"""
Projects API — Error Log Sink Tests
=====================================
"""

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from projects_api.services.error_log import INSERT_ERROR_LOG, ErrorLogSink


def session_factory(session):
    factory = MagicMock()
    factory.return_value.__aenter__ = AsyncMock(return_value=session)
    factory.return_value.__aexit__ = AsyncMock(return_value=False)
    return factory


class TestErrorLogSink:

    @pytest.mark.asyncio
    async def test_records_row_and_commits(self):
        session = AsyncMock()
        created_at = datetime(2026, 3, 1, 9, 0)

        with patch("projects_api.services.error_log.ProcedureClient") as client_cls:
            client_cls.return_value.execute = AsyncMock()
            await ErrorLogSink(session_factory(session)).record(
                "Menu", "get_all_menus", "Login failed for user", source="SQL", created_at=created_at
            )

        client_cls.return_value.execute.assert_awaited_once_with(
            INSERT_ERROR_LOG,
            {
                "ControllerName": "Menu",
                "ActionName": "get_all_menus",
                "ErrorMessage": "Login failed for user",
                "ErrorSource": "SQL",
                "CreatedAt": created_at,
            },
        )
        session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failure_goes_to_stderr(self, capsys):
        factory = MagicMock(side_effect=OSError("database unreachable"))

        await ErrorLogSink(factory).record("PreSales", "get_presales", "boom")

        assert "PreSales.get_presales" in capsys.readouterr().err
