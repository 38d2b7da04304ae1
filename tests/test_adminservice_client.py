import json

import httpx
import pytest

from script_dispatch.core.config import AdminServiceSettings
from script_dispatch.infrastructure.adminservice import (
    AdminServiceClient,
    AdminServiceEndpointRepository,
    AdminServiceOperationRepository,
    AdminServiceScriptRepository,
    extract_operation_id,
)
from script_dispatch.infrastructure.adminservice.client import odata_literal
from script_dispatch.modules.common.exceptions import NotFoundError, TransportError
from script_dispatch.modules.operations.models import OperationFilter
from script_dispatch.modules.scripts.models import ApprovalState, ScriptType

from .factories import GET_INFO_GUID, SCRIPT_HASH, encode_definition

SETTINGS = AdminServiceSettings(base_url="https://cm.test/AdminService", username="svc", password="secret")


def _client(handler) -> AdminServiceClient:
    return AdminServiceClient(SETTINGS, transport=httpx.MockTransport(handler))


def test_odata_literal_doubles_single_quotes():
    assert odata_literal("O'Brien") == "'O''Brien'"


@pytest.mark.parametrize(
    "body",
    [
        {"OperationID": 12345},
        {"OperationId": "12345"},
        {"ClientOperationId": 12345},
        {"ClientOperationID": 12345},
        {"ReturnValue": 0, "value": {"OperationId": 12345}},
        {"value": [{"ClientOperationId": 12345}]},
    ],
)
def test_operation_id_is_found_under_known_keys(body):
    assert extract_operation_id(body) == 12345


def test_operation_id_prefers_the_first_known_key():
    assert extract_operation_id({"ClientOperationId": 2, "OperationID": 1}) == 1


@pytest.mark.parametrize("body", [{}, {"ReturnValue": 0}, {"ReturnValue": 5, "OperationID": 1}])
def test_operation_id_missing_or_rejected(body):
    with pytest.raises(TransportError):
        extract_operation_id(body)


@pytest.mark.asyncio
async def test_submit_posts_the_client_operation():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["method"] = request.method
        captured["path"] = request.url.path
        captured["body"] = json.loads(request.content)
        captured["auth"] = request.headers.get("Authorization")
        return httpx.Response(200, json={"ReturnValue": 0, "OperationID": 12345})

    async with _client(handler) as client:
        operation_id = await AdminServiceOperationRepository(client).submit(
            payload="UEFZTE9BRA==",
            randomization_window=0,
            target_collection_id="",
            target_resource_ids=[16777219],
            operation_type=135,
        )

    assert operation_id == 12345
    assert captured["method"] == "POST"
    assert captured["path"] == "/AdminService/wmi/SMS_ClientOperation.InitiateClientOperationEx"
    assert captured["body"] == {
        "Param": "UEFZTE9BRA==",
        "RandomizationWindow": 0,
        "TargetCollectionID": "",
        "TargetResourceIDs": [16777219],
        "Type": 135,
    }
    assert captured["auth"].startswith("Basic ")


@pytest.mark.asyncio
async def test_get_by_guid_decodes_lazy_properties():
    definition = encode_definition(
        '<ScriptParameters><ScriptParameter Name="Key" Type="System.String" IsRequired="true"/></ScriptParameters>'
    )

    def handler(request: httpx.Request) -> httpx.Response:
        assert GET_INFO_GUID in str(request.url)
        return httpx.Response(
            200,
            json={
                "value": [
                    {
                        "ScriptGuid": GET_INFO_GUID,
                        "ScriptName": "Get Info",
                        "ScriptVersion": 2,
                        "ScriptType": 0,
                        "ApprovalState": 3,
                        "ScriptHash": SCRIPT_HASH,
                        "ParamsDefinition": definition,
                        "Author": "CONTOSO\\admin",
                        "LastUpdateTime": "2026-10-01T08:30:00Z",
                    }
                ]
            },
        )

    async with _client(handler) as client:
        script = await AdminServiceScriptRepository(client).get_by_guid(GET_INFO_GUID)

    assert script.script_name == "Get Info"
    assert script.script_version == "2"
    assert script.script_type is ScriptType.POWERSHELL
    assert script.approval_state is ApprovalState.APPROVED
    assert script.script_hash == SCRIPT_HASH
    assert [spec.name for spec in script.schema] == ["Key"]
    assert script.last_update_time.year == 2026
    assert script.last_update_time.tzinfo is not None


@pytest.mark.asyncio
async def test_get_by_guid_returns_none_for_missing_script():
    async with _client(lambda request: httpx.Response(404)) as client:
        assert await AdminServiceScriptRepository(client).get_by_guid(GET_INFO_GUID) is None


@pytest.mark.asyncio
async def test_find_by_name_filters_with_quoted_literal():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["filter"] = request.url.params["$filter"]
        return httpx.Response(
            200,
            json={"value": [{"ScriptGuid": GET_INFO_GUID, "ScriptName": "O'Brien", "ScriptVersion": "1", "ApprovalState": 0}]},
        )

    async with _client(handler) as client:
        [summary] = await AdminServiceScriptRepository(client).find_by_name("O'Brien")

    assert seen["filter"] == "ScriptName eq 'O''Brien'"
    assert summary.approval_state is ApprovalState.PENDING


@pytest.mark.asyncio
async def test_query_tasks_combines_filters_and_maps_counters():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["filter"] = request.url.params["$filter"]
        return httpx.Response(
            200,
            json={
                "value": [
                    {
                        "ClientOperationId": 12345,
                        "ScriptGuid": GET_INFO_GUID,
                        "ScriptName": "Get Info",
                        "CollectionId": "SMS00001",
                        "CollectionName": "All Systems",
                        "TotalClients": 5,
                        "CompletedClients": 3,
                        "FailedClients": 1,
                        "OfflineClients": 2,
                    }
                ]
            },
        )

    async with _client(handler) as client:
        [record] = await AdminServiceOperationRepository(client).query_tasks(
            OperationFilter(operation_id=12345, collection_id="SMS00001")
        )

    assert seen["path"].endswith("/wmi/SMS_ScriptsExecutionTask")
    assert seen["filter"] == "ClientOperationId eq 12345 and CollectionId eq 'SMS00001'"
    assert record.operation_id == 12345
    assert (record.total_clients, record.completed_clients, record.failed_clients) == (5, 3, 1)
    assert record.offline_clients == 2
    assert record.unknown_clients == 0


@pytest.mark.asyncio
async def test_query_results_maps_endpoint_rows():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["$filter"] == "ClientOperationId eq 12345"
        return httpx.Response(
            200,
            json={
                "value": [
                    {
                        "ResourceId": 16777219,
                        "DeviceName": "WKS001",
                        "ScriptExecutionState": 1,
                        "ScriptExitCode": 2,
                        "ScriptOutput": "Access denied",
                    }
                ]
            },
        )

    async with _client(handler) as client:
        [result] = await AdminServiceOperationRepository(client).query_results(12345)

    assert result.resource_id == 16777219
    assert result.state_name == "failed"
    assert result.exit_code == 2
    assert result.output == "Access denied"


@pytest.mark.asyncio
async def test_query_results_turns_non_text_output_into_text():
    def handler(request: httpx.Request) -> httpx.Response:
        rows = [
            {"ResourceId": 16777219, "ScriptOutput": 42},
            {"ResourceId": 16777220, "ScriptOutput": {"Status": "OK"}},
            {"ResourceId": 16777221, "ScriptOutput": None},
        ]
        return httpx.Response(200, json={"value": rows})

    async with _client(handler) as client:
        results = await AdminServiceOperationRepository(client).query_results(12345)

    assert [result.output for result in results] == ["42", '{"Status": "OK"}', None]


@pytest.mark.asyncio
async def test_device_names_resolve_case_insensitively():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["$filter"] == "(Name eq 'wks001' or Name eq 'WKS404')"
        return httpx.Response(200, json={"value": [{"Name": "WKS001", "ResourceId": 16777219}]})

    async with _client(handler) as client:
        resolved = await AdminServiceEndpointRepository(client).resolve_device_ids(["wks001", "WKS404"])

    assert resolved == {"wks001": 16777219}


@pytest.mark.asyncio
async def test_collection_exists():
    def handler(request: httpx.Request) -> httpx.Response:
        found = "SMS00001" in request.url.params["$filter"]
        return httpx.Response(200, json={"value": [{"CollectionID": "SMS00001"}] if found else []})

    async with _client(handler) as client:
        repository = AdminServiceEndpointRepository(client)
        assert await repository.collection_exists("SMS00001") is True
        assert await repository.collection_exists("XYZ00042") is False


@pytest.mark.asyncio
async def test_server_errors_become_transport_errors():
    async with _client(lambda request: httpx.Response(503, text="busy")) as client:
        with pytest.raises(TransportError) as excinfo:
            await client.get_json("wmi/SMS_Scripts")

    assert excinfo.value.status_code == 503


@pytest.mark.asyncio
async def test_connection_failures_become_transport_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(TransportError):
            await client.query("wmi/SMS_Scripts")


@pytest.mark.asyncio
async def test_not_found_is_reported_distinctly():
    async with _client(lambda request: httpx.Response(404)) as client:
        with pytest.raises(NotFoundError):
            await client.get_json("wmi/SMS_Scripts('missing')")


@pytest.mark.asyncio
async def test_non_json_body_is_a_transport_error():
    async with _client(lambda request: httpx.Response(200, text="<html>login</html>")) as client:
        with pytest.raises(TransportError):
            await client.get_json("wmi/SMS_Scripts")


@pytest.mark.asyncio
async def test_requests_outside_the_connection_window_fail():
    client = _client(lambda request: httpx.Response(200, json={}))

    with pytest.raises(TransportError):
        await client.get_json("wmi/SMS_Scripts")

    await client.connect()
    assert client.is_connected
    await client.close()
    assert not client.is_connected
    with pytest.raises(TransportError):
        await client.get_json("wmi/SMS_Scripts")
