"""
Projects API — Error Log Sink
===============================

What:  Records infrastructure failures in the database's error log table
       through usp_InsertErrorLog.
How:   Opens its own short-lived session (the request's session has already
       been rolled back), runs one procedure call and commits.
Who:   Scheduled by the 500 exception handlers in main.py as a response
       background task, so it runs after the client has its answer.

Failure policy:
    Best effort. If recording fails, one line goes to stderr and the
    exception is dropped; the original error response is unaffected.
"""

import sys
from datetime import datetime
from typing import Optional

from projects_api.database import async_session_factory
from projects_api.services.procedures import ProcedureClient

INSERT_ERROR_LOG = "usp_InsertErrorLog"


class ErrorLogSink:
    """Writes error log rows; never raises."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or async_session_factory

    async def record(
        self,
        controller: str,
        action: str,
        message: str,
        source: str = "Controller",
        created_at: Optional[datetime] = None,
    ) -> None:
        """
        Insert one error log row.

        Args:
            controller: Router tag the failing route belongs to (e.g. "Menu")
            action:     Route name (e.g. "get_all_menus")
            message:    Error detail (server-side only; never sent to clients)
            source:     "SQL" for database failures, otherwise "Controller"
        """
        try:
            async with self._session_factory() as session:
                await ProcedureClient(session).execute(
                    INSERT_ERROR_LOG,
                    {
                        "ControllerName": controller,
                        "ActionName": action,
                        "ErrorMessage": message,
                        "ErrorSource": source,
                        "CreatedAt": created_at or datetime.now(),
                    },
                )
                await session.commit()
        except Exception as e:
            sys.stderr.write(
                f"Failed to record error log entry for {controller}.{action}: "
                f"{type(e).__name__}: {e}\n"
            )


# ── Singleton Instance ────────────────────────────────────────────────────
error_log = ErrorLogSink()
