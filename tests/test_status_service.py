import pytest

from script_dispatch.modules.operations.models import OperationFilter, OperationStatus
from script_dispatch.modules.operations.service import OperationStatusService

from .factories import FakeOperationRepository, make_results, make_task


@pytest.mark.asyncio
async def test_no_completed_clients_skips_the_result_fetch():
    repository = FakeOperationRepository(tasks=[make_task(12345, completed=0, total=5)])
    service = OperationStatusService(repository)

    [view] = await service.get_status(operation_id=12345)

    assert view.status is OperationStatus.NO_CLIENT_COMPLETED
    assert view.total_clients == 5
    assert view.completed_clients == 0
    assert view.results == []
    assert repository.result_queries == []


@pytest.mark.asyncio
async def test_all_clients_completed_includes_decoded_results():
    repository = FakeOperationRepository(
        tasks=[make_task(12345, completed=5, total=5)],
        results={12345: make_results(5)},
    )
    service = OperationStatusService(repository)

    [view] = await service.get_status(operation_id=12345)

    assert view.status is OperationStatus.ALL_CLIENTS_COMPLETED
    assert len(view.results) == 5
    assert all(result.decoded_output == {"Status": "OK"} for result in view.results)
    assert view.results[0].state_name == "succeeded"
    assert view.error is None


@pytest.mark.asyncio
async def test_partial_completion():
    repository = FakeOperationRepository(
        tasks=[make_task(12345, completed=2, total=5)],
        results={12345: make_results(2, output="plain text")},
    )
    service = OperationStatusService(repository)

    view = await service.get_operation(12345)

    assert view.status is OperationStatus.SOME_CLIENTS_COMPLETED
    assert [result.decoded_output for result in view.results] == ["plain text", "plain text"]


@pytest.mark.asyncio
async def test_unknown_operation_yields_one_error_view():
    service = OperationStatusService(FakeOperationRepository())

    views = await service.get_status(operation_id=99999)

    assert len(views) == 1
    [view] = views
    assert view.status is OperationStatus.ERROR
    assert view.operation_id == 99999
    assert view.total_clients is None
    assert view.completed_clients is None
    assert view.results == []
    assert view.error


@pytest.mark.asyncio
async def test_failed_fetch_is_isolated_to_its_operation():
    repository = FakeOperationRepository(
        tasks=[
            make_task(100, completed=3, total=3),
            make_task(200, completed=1, total=4),
            make_task(300, completed=0, total=2),
        ],
        results={100: make_results(3), 200: make_results(1)},
        failing=[200],
    )
    service = OperationStatusService(repository, max_concurrency=2)

    views = await service.get_status(script_name="Get Info")

    by_id = {view.operation_id: view for view in views}
    assert [view.operation_id for view in views] == [100, 200, 300]
    assert by_id[100].status is OperationStatus.ALL_CLIENTS_COMPLETED
    assert len(by_id[100].results) == 3
    assert by_id[200].status is OperationStatus.SOME_CLIENTS_COMPLETED
    assert by_id[200].completed_clients == 1
    assert by_id[200].results == []
    assert "503" in by_id[200].error
    assert by_id[300].status is OperationStatus.NO_CLIENT_COMPLETED
    assert sorted(repository.result_queries) == [100, 200]


@pytest.mark.asyncio
async def test_non_text_output_does_not_abort_the_batch():
    repository = FakeOperationRepository(
        tasks=[make_task(100, completed=2, total=2), make_task(200, completed=1, total=1)],
        results={100: make_results(2), 200: make_results(1, output=42)},
    )
    service = OperationStatusService(repository)

    views = await service.get_status(script_name="Get Info")

    assert [view.operation_id for view in views] == [100, 200]
    assert all(view.status is OperationStatus.ALL_CLIENTS_COMPLETED for view in views)
    assert views[0].results[0].decoded_output == {"Status": "OK"}
    assert views[1].results[0].decoded_output == 42
    assert views[1].error is None


@pytest.mark.asyncio
async def test_filters_are_forwarded():
    repository = FakeOperationRepository(tasks=[make_task(1, collection_id="SMS00001")])
    service = OperationStatusService(repository)

    await service.get_status(collection_id="SMS00001", script_name="Get Info")

    assert repository.task_queries == [
        OperationFilter(operation_id=None, collection_id="SMS00001", script_name="Get Info")
    ]


@pytest.mark.asyncio
async def test_unmatched_filter_error_view_echoes_filters():
    service = OperationStatusService(FakeOperationRepository())

    [view] = await service.get_status(collection_id="SMS00042", script_name="Reboot")

    assert view.status is OperationStatus.ERROR
    assert view.operation_id is None
    assert view.collection_id == "SMS00042"
    assert view.script_name == "Reboot"
