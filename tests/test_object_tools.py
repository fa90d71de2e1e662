"""Tests for the custom object tools."""

import pytest

from ghl_mcp.mcp_server.tools.objects import extract_search

from conftest import DEFAULT_LOCATION


class InMemoryRecords:
    """Stateful stand-in for the records API."""

    def __init__(self):
        self.records = {}

    def create(self, params):
        record_id = f"rec-{len(self.records) + 1}"
        record = {
            "id": record_id,
            "objectKey": params["schemaKey"],
            "properties": dict(params["properties"]),
        }
        self.records[record_id] = record
        return {"record": record}

    def get(self, params):
        return {"record": self.records[params["recordId"]]}

    def delete(self, params):
        self.records.pop(params["recordId"])
        return {"id": params["recordId"], "success": True}


@pytest.fixture
def records(backend):
    store = InMemoryRecords()
    backend.respond("create_object_record", store.create)
    backend.respond("get_object_record", store.get)
    backend.respond("delete_object_record", store.delete)
    return store


@pytest.mark.unit
class TestObjectSchemas:
    """Object schema tools."""

    @pytest.mark.asyncio
    async def test_get_all_objects(self, dispatcher, backend):
        backend.respond("get_all_objects", {"objects": [{"key": "contact"}, {"key": "custom_objects.pet"}]})
        envelope = await dispatcher.dispatch("get_all_objects", {})
        assert len(envelope["data"]["objects"]) == 2
        assert envelope["message"] == "Retrieved 2 objects for location"

    @pytest.mark.asyncio
    async def test_get_object_schema_defaults(self, dispatcher, backend):
        backend.respond("get_object_schema", {"object": {"key": "custom_objects.pet"}, "cache": True})
        envelope = await dispatcher.dispatch("get_object_schema", {"key": "custom_objects.pet"})
        assert envelope["data"] == {"object": {"key": "custom_objects.pet"}, "fields": [], "cache": True}
        assert backend.calls_to("get_object_schema")[0]["fetchProperties"] is True

    @pytest.mark.asyncio
    async def test_create_object_schema(self, dispatcher, backend):
        backend.respond("create_object_schema", {"object": {"key": "custom_objects.pet"}})
        envelope = await dispatcher.dispatch("create_object_schema", {
            "labels": {"singular": "Pet", "plural": "Pets"},
            "key": "pet",
            "primaryDisplayPropertyDetails": {"key": "name", "name": "Pet Name", "dataType": "TEXT"},
        })
        assert envelope["message"] == "Custom object schema created successfully with key: custom_objects.pet"

    @pytest.mark.asyncio
    async def test_create_object_schema_nested_validation(self, dispatcher, backend):
        envelope = await dispatcher.dispatch("create_object_schema", {
            "labels": {"singular": "Pet"},
            "key": "pet",
            "primaryDisplayPropertyDetails": {"key": "name", "name": "Pet Name", "dataType": "DATE"},
        })
        assert envelope["error"]["code"] == "VALIDATION_ERROR"
        assert "labels.plural" in envelope["message"]
        assert "primaryDisplayPropertyDetails.dataType" in envelope["message"]
        assert backend.calls == []


@pytest.mark.unit
class TestObjectRecords:
    """Record tools."""

    @pytest.mark.asyncio
    async def test_create_then_get(self, dispatcher, records):
        created = await dispatcher.dispatch("create_object_record", {
            "schemaKey": "custom_objects.pet",
            "properties": {"name": "Buddy", "breed": "Golden Retriever"},
        })
        assert created["success"] is True
        record_id = created["data"]["recordId"]
        assert created["message"] == f"Record created successfully in custom_objects.pet with ID: {record_id}"

        fetched = await dispatcher.dispatch("get_object_record", {
            "schemaKey": "custom_objects.pet", "recordId": record_id,
        })
        assert fetched["data"]["record"]["properties"] == {"name": "Buddy", "breed": "Golden Retriever"}

    @pytest.mark.asyncio
    async def test_delete_reports_id(self, dispatcher, records):
        created = await dispatcher.dispatch("create_object_record", {
            "schemaKey": "custom_objects.pet", "properties": {"name": "Rex"},
        })
        record_id = created["data"]["recordId"]
        deleted = await dispatcher.dispatch("delete_object_record", {
            "schemaKey": "custom_objects.pet", "recordId": record_id,
        })
        assert deleted["data"] == {"deletedId": record_id}
        assert records.records == {}

    @pytest.mark.asyncio
    async def test_delete_falls_back_to_requested_id(self, dispatcher, backend):
        backend.respond("delete_object_record", {"success": True})
        envelope = await dispatcher.dispatch("delete_object_record", {
            "schemaKey": "custom_objects.pet", "recordId": "rec-7",
        })
        assert envelope["data"] == {"deletedId": "rec-7"}

    @pytest.mark.asyncio
    async def test_created_record_without_id(self, dispatcher, backend):
        backend.respond("create_object_record", {"record": {"properties": {}}})
        envelope = await dispatcher.dispatch("create_object_record", {
            "schemaKey": "custom_objects.pet", "properties": {},
        })
        assert envelope["error"]["code"] == "UNEXPECTED_SHAPE"

    @pytest.mark.asyncio
    async def test_owner_and_followers_bounds(self, dispatcher, backend):
        envelope = await dispatcher.dispatch("create_object_record", {
            "schemaKey": "custom_objects.pet",
            "properties": {},
            "owner": ["u1", "u2"],
            "followers": [f"u{i}" for i in range(11)],
        })
        assert envelope["error"]["code"] == "VALIDATION_ERROR"
        assert "'owner' accepts at most 1 items" in envelope["message"]
        assert "'followers' accepts at most 10 items" in envelope["message"]
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_update_record(self, dispatcher, backend):
        backend.respond("update_object_record", {"record": {"id": "rec-1", "properties": {"name": "Max"}}})
        envelope = await dispatcher.dispatch("update_object_record", {
            "schemaKey": "custom_objects.pet", "recordId": "rec-1", "properties": {"name": "Max"},
        })
        assert envelope["data"]["record"]["properties"] == {"name": "Max"}
        assert backend.calls_to("update_object_record")[0]["locationId"] == DEFAULT_LOCATION

    @pytest.mark.asyncio
    async def test_search_defaults(self, dispatcher, backend):
        backend.respond("search_object_records", {"records": [{"id": "rec-1"}], "total": 4})
        envelope = await dispatcher.dispatch("search_object_records", {
            "schemaKey": "custom_objects.pet", "query": "name:Buddy",
        })
        params = backend.calls_to("search_object_records")[0]
        assert params["page"] == 1
        assert params["pageLimit"] == 10
        assert params["searchAfter"] == []
        assert envelope["data"] == {"records": [{"id": "rec-1"}], "total": 4}
        assert envelope["message"] == "Found 1 records in custom_objects.pet (4 total)"

    @pytest.mark.asyncio
    async def test_search_page_bounds(self, dispatcher, backend):
        envelope = await dispatcher.dispatch("search_object_records", {
            "schemaKey": "custom_objects.pet", "query": "q", "page": 0, "pageLimit": 500,
        })
        assert envelope["error"]["code"] == "VALIDATION_ERROR"
        assert backend.calls == []

    def test_extract_search_defaults(self):
        assert extract_search({}) == {"records": [], "total": 0}
