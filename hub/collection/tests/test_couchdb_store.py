"""
Tests for the CouchDBStore adapter against a fake CouchDB transport.

Checks what goes over the wire: envelopes, compiled queries, batching of
unbounded reads, and how HTTP failures surface.
"""

import json

import httpx
import pytest

from hub.collection.commits import create_commit, update_commit
from hub.collection.couchdb_store import CouchDBStore
from hub.collection.errors import BackendError, StoreConfigError, UnsupportedFilter
from hub.collection.filters import Filter, MetadataFilter
from hub.collection.paging import Paging
from hub.collection.tests.fake_couchdb import FakeCouchDB


class TestConnect:
    def test_missing_url(self):
        with pytest.raises(StoreConfigError, match="no URL"):
            CouchDBStore.connect("", "hub")

    def test_missing_db_name(self):
        with pytest.raises(StoreConfigError, match="no database name"):
            CouchDBStore.connect("http://localhost:5984", "")

    @pytest.mark.parametrize("url", ["localhost:5984", "ftp://localhost", "invalid"])
    def test_unusable_url(self, url):
        with pytest.raises(StoreConfigError):
            CouchDBStore.connect(url, "hub")

    @pytest.mark.asyncio
    async def test_valid_settings(self):
        store = CouchDBStore.connect("http://localhost:5984", "hub", username="admin", password="secret")
        assert store.db_name == "hub"
        assert store.client.base_url.host == "localhost"
        assert store.client.base_url.port == 5984
        await store.close()

    def test_batch_size_must_be_positive(self):
        with pytest.raises(StoreConfigError):
            CouchDBStore(httpx.AsyncClient(), "hub", unbounded_batch_size=0)


class TestSetup:
    @pytest.mark.asyncio
    async def test_ensure_database_is_idempotent(self):
        fake = FakeCouchDB()
        store = CouchDBStore(fake.client(), "hub")

        await store.ensure_database()
        await store.ensure_database()

        assert "hub" in fake.databases
        assert [r.method for r in fake.requests] == ["PUT", "PUT"]
        await store.close()

    @pytest.mark.asyncio
    async def test_ensure_indices(self, couchdb_store, fake_couchdb):
        objectquery = fake_couchdb.indices["objectquery"]
        assert objectquery["ddoc"] == "hub"
        assert objectquery["index"] == {
            "fields": ["interface", "context", "type"],
            "partial_filter_selector": {"operation": "create"},
        }
        assert fake_couchdb.indices["commitquery"]["index"] == {"fields": ["objectID"]}


class TestWire:
    @pytest.mark.asyncio
    async def test_write_posts_envelope(self, couchdb_store, fake_couchdb):
        commit = create_commit({"@id": "Queen"}, type="MusicPlaylist", name="Sample playlist")

        await couchdb_store.write(commit)

        (request,) = fake_couchdb.requests
        assert request.method == "POST"
        assert request.url.path == "/hub"
        doc = json.loads(request.content)
        assert doc == {
            "objectID": commit.header.revision,
            "interface": "Collections",
            "context": "http://schema.org",
            "type": "MusicPlaylist",
            "name": "Sample playlist",
            "operation": "create",
            "commit": commit.to_dict(),
        }

    @pytest.mark.asyncio
    async def test_update_envelope_pins_object_id(self, couchdb_store, fake_couchdb):
        update = update_commit("the-object", {})

        await couchdb_store.write(update)

        doc = json.loads(fake_couchdb.requests[0].content)
        assert doc["objectID"] == "the-object"
        assert doc["operation"] == "update"
        assert doc["name"] == ""

    @pytest.mark.asyncio
    async def test_bounded_query_asks_for_one_extra_row(self, couchdb_store, fake_couchdb):
        await couchdb_store.object_query("I", "C", "T", Filter(), Paging(size=7, skip_token="14"))

        (body,) = fake_couchdb.find_bodies()
        assert body["limit"] == 8
        assert body["skip"] == 14
        assert body["use_index"] == ["hub", "objectquery"]

    @pytest.mark.asyncio
    async def test_unbounded_query_reads_in_batches(self, fake_couchdb):
        store = CouchDBStore(fake_couchdb.client(), "hub", unbounded_batch_size=10)
        await store.ensure_database()
        create = create_commit({})
        updates = [update_commit(create.header.revision, {"v": i}) for i in range(29)]
        for c in [create, *updates]:
            await store.write(c)
        fake_couchdb.requests.clear()

        commits, token = await store.commit_query(create.header.revision, Filter(), Paging())

        assert token == ""
        assert len(commits) == 30
        assert len({c.header.revision for c in commits}) == 30
        assert [(b.get("skip", 0), b["limit"]) for b in fake_couchdb.find_bodies()] == [
            (0, 11),
            (10, 11),
            (20, 11),
        ]
        await store.close()

    @pytest.mark.asyncio
    async def test_unbounded_query_beyond_couchdb_default_limit(self, couchdb_store):
        commits = [create_commit({"i": i}, type="Many") for i in range(40)]
        for c in commits:
            await couchdb_store.write(c)

        result, token = await couchdb_store.object_query("Collections", "http://schema.org", "Many")

        assert token == ""
        assert result == commits

    @pytest.mark.asyncio
    async def test_unsupported_filter_never_reaches_couchdb(self, couchdb_store, fake_couchdb):
        with pytest.raises(UnsupportedFilter):
            await couchdb_store.object_query(
                "I", "C", "T", Filter(metadata_filters=[MetadataFilter("name", "unsupported_type", "v")])
            )
        assert fake_couchdb.requests == []


class TestFailures:
    @pytest.mark.asyncio
    async def test_http_error_on_query(self, couchdb_store, fake_couchdb):
        fake_couchdb.fail_with = 500

        with pytest.raises(BackendError) as exc:
            await couchdb_store.commit_query("test", Filter(), Paging(size=5))

        assert exc.value.operation == "CommitQuery"
        assert exc.value.params["oid"] == "test"
        assert "failed to execute CommitQuery for oid='test'" in str(exc.value)
        assert "HTTP 500" in str(exc.value)

    @pytest.mark.asyncio
    async def test_http_error_on_write(self, couchdb_store, fake_couchdb):
        fake_couchdb.fail_with = 503
        commit = create_commit({})

        with pytest.raises(BackendError) as exc:
            await couchdb_store.write(commit)

        assert exc.value.operation == "Write"
        assert exc.value.params["rev"] == commit.header.revision

    @pytest.mark.asyncio
    async def test_missing_database(self):
        fake = FakeCouchDB()
        store = CouchDBStore(fake.client(), "nope")

        with pytest.raises(BackendError, match="HTTP 404"):
            await store.object_query("I", "C", "T")
        await store.close()

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(refuse), base_url="http://couchdb.test")
        store = CouchDBStore(client, "hub")

        with pytest.raises(BackendError) as exc:
            await store.object_query("Collections", "http://schema.org", "MusicPlaylist")

        assert exc.value.operation == "ObjectQuery"
        assert exc.value.params["interface"] == "Collections"
        assert "ConnectError" in exc.value.cause
        await store.close()

    @pytest.mark.asyncio
    async def test_undecodable_document(self, couchdb_store, fake_couchdb):
        fake_couchdb.databases["hub"].documents.append(
            {"_id": "bad", "objectID": "o", "operation": "create", "interface": "I", "context": "C", "type": "T"}
        )

        with pytest.raises(BackendError, match="failed to unmarshal envelope doc"):
            await couchdb_store.object_query("I", "C", "T")
