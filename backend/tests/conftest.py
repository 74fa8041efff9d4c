"""
Projects API — Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the entire test suite.
How:   No SQL Server is needed. Route and service tests talk to a mocked
       ProcedureClient whose call/execute/call_outputs return canned result
       sets; the error log sink is patched so 500 paths can be asserted.

Fixture Hierarchy:
    Function-scoped:
    ├── procedures:   Mocked ProcedureClient (AsyncMock methods)
    ├── error_record: The patched error_log.record
    └── test_client:  HTTPX AsyncClient wired to the app with both of the above
"""

import os
import tempfile

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Must run before any projects_api import: settings and the engine are
# created at module import time.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["DOCS_ROOT"] = tempfile.mkdtemp(prefix="projects_api_docs_")
os.environ["JWT_KEY"] = "test-signing-key-not-for-production-use-0123456789"
os.environ["JWT_ISSUER"] = "projects-api-tests"
os.environ["LOG_LEVEL"] = "WARNING"

from unittest.mock import AsyncMock, MagicMock, patch  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from projects_api.services.error_log import error_log  # noqa: E402
from projects_api.services.procedures import ProcedureClient, get_procedures  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def procedures():
    """
    Provides a mocked ProcedureClient.

    Usage:
        procedures.call.return_value = [[{"project_no": 7}], []]
        procedures.call_outputs.return_value = {"output_message": "SUCCESS"}
    """
    client = MagicMock(spec=ProcedureClient)
    client.call = AsyncMock(return_value=[[]])
    client.execute = AsyncMock(return_value=None)
    client.call_outputs = AsyncMock(return_value={"output_message": "SUCCESS"})
    return client


@pytest.fixture
def error_record():
    """The error log sink's record method, replaced by an AsyncMock."""
    with patch.object(error_log, "record", new=AsyncMock()) as record:
        yield record


@pytest_asyncio.fixture
async def test_client(procedures, error_record):
    """
    Provides an async HTTP test client for endpoint testing.

    Every route receives the `procedures` mock in place of a real
    ProcedureClient.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from projects_api.main import app

    app.dependency_overrides[get_procedures] = lambda: procedures
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.clear()
