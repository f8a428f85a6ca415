import json

import pytest
from unittest.mock import AsyncMock, patch

from atrium.modules.audit_manager import AuditManager


@pytest.mark.asyncio
async def test_log_event_writes_row():
    with patch("atrium.modules.audit_manager.database") as db:
        db.execute = AsyncMock()

        written = await AuditManager().log_event("admin-sub", "DISABLE", "USER", 42, {"reason": "left"})

        assert written is True
        query, values = db.execute.await_args.args
        assert "INSERT INTO audit_logs" in query
        assert "ip_address" not in query
        assert set(values) == {"user_id", "action", "resource_type", "resource_id", "details"}
        assert values["user_id"] == "admin-sub"
        assert values["resource_id"] == "42"
        assert json.loads(values["details"]) == {"reason": "left"}


@pytest.mark.asyncio
async def test_log_event_without_details_stores_empty_object():
    with patch("atrium.modules.audit_manager.database") as db:
        db.execute = AsyncMock()

        await AuditManager().log_event("sub-1", "CREATE", "ADDRESS", 7)

        _, values = db.execute.await_args.args
        assert values["details"] == "{}"


@pytest.mark.asyncio
async def test_log_event_never_raises():
    with patch("atrium.modules.audit_manager.database") as db:
        db.execute = AsyncMock(side_effect=RuntimeError("db down"))

        assert await AuditManager().log_event("admin-sub", "CREATE", "ADDRESS", "1") is False
