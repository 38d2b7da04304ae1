from datetime import datetime, timedelta, timezone

import pytest

from script_dispatch.infrastructure.database import Database
from script_dispatch.modules.journal.service import JournalService
from script_dispatch.modules.scripts.models import DispatchReceipt, ExecutionTarget

from .factories import GET_INFO_GUID, SET_REGISTRY_GUID


def _receipt(operation_id, *, script_name="Get Info", target=None, parameter_hash="", minutes=0):
    return DispatchReceipt(
        operation_id=operation_id,
        script_guid=GET_INFO_GUID if script_name == "Get Info" else SET_REGISTRY_GUID,
        script_name=script_name,
        script_version="1",
        target=target or ExecutionTarget(resource_ids=(16777219, 16777220)),
        parameter_group_id="3c9e7b1a-2d4f-4e6a-8b0c-1d2e3f4a5b6c",
        parameter_hash=parameter_hash,
        dispatched_at=datetime(2026, 10, 18, 9, 0, tzinfo=timezone.utc) + timedelta(minutes=minutes),
    )


@pytest.mark.asyncio
async def test_journal_records_and_lists_dispatches(test_settings):
    database = Database.from_settings(test_settings)
    await database.init_db()
    try:
        async for session in database.session():
            journal = JournalService.with_session(session)
            entry = await journal.record(_receipt(100), operator="alice")
            await journal.record(
                _receipt(
                    200,
                    script_name="Set Registry",
                    target=ExecutionTarget(collection_id="SMS00001"),
                    parameter_hash="AB" * 32,
                    minutes=5,
                ),
                operator="bob",
            )

        assert entry.id
        assert entry.resource_ids == [16777219, 16777220]
        assert entry.collection_id is None
        assert entry.parameter_hash is None

        async for session in database.session():
            journal = JournalService.with_session(session)
            recent = await journal.list_recent()
            registry_only = await journal.list_recent(script_name="Set Registry")
            found = await journal.get_by_operation(200)
            missing = await journal.get_by_operation(999)
    finally:
        await database.dispose()

    assert [item.operation_id for item in recent] == [200, 100]
    assert [item.operation_id for item in registry_only] == [200]
    assert found.collection_id == "SMS00001"
    assert found.resource_ids == []
    assert found.parameter_hash == "AB" * 32
    assert found.operator == "bob"
    assert missing is None


@pytest.mark.asyncio
async def test_journal_paging(test_settings):
    database = Database.from_settings(test_settings)
    await database.init_db()
    try:
        async for session in database.session():
            journal = JournalService.with_session(session)
            for index in range(5):
                await journal.record(_receipt(index + 1, minutes=index))
            page = await journal.list_recent(limit=2, offset=1)
    finally:
        await database.dispose()

    assert [item.operation_id for item in page] == [4, 3]
