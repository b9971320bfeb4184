# =============================================================================
# tests/integration/test_sync_roundtrip.py
# Integration Tests: Resolver + Client + Persistence Service
# =============================================================================

import json
import sqlite3
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from publi_core.bootstrap import AppServices
from publi_core.data.models import Book
from publi_core.data.sales_import import apply_sales_import, parse_sales_report
from publi_core.offline.document_store import DocumentStore
from publi_core.offline.local_database import LocalDatabase
from publi_core.offline.remote_client import RemoteConfig, RemoteSyncClient
from publi_core.offline.resolver import DataSource, DataSourceResolver
from publi_core.server.app import create_app
from publi_core.server.storage import DocumentRowStorage
from publi_core.state.session import init_state, sync_local_changes


@pytest.fixture
def server(tmp_path):
    return TestClient(create_app(tmp_path / "server.sqlite"))


def make_device(tmp_path, name, server, alert):
    """One client installation: its own local slot, same remote"""
    store = DocumentStore(LocalDatabase(tmp_path / f"{name}.db"), alert=alert)
    remote = RemoteSyncClient(RemoteConfig(base_url="http://testserver"), session=server)
    return store, DataSourceResolver(store, remote)


class TestSyncRoundTrip:
    """Test the full local-first flow against a real service"""

    def test_first_run_then_upload(self, tmp_path, server, alert, sample_book):
        """Empty server offers upload; after pushing, the server is authoritative"""
        store, resolver = make_device(tmp_path, "laptop", server, alert)
        store.books.add(sample_book)

        first = resolver.fetch_data()
        assert first.source is DataSource.EMPTY_SERVER
        assert first.has_local_data is True

        assert resolver.force_push_to_server() is True

        second = resolver.fetch_data()
        assert second.source is DataSource.SERVER
        assert second.data == store.get_data()

    def test_second_device_receives_document(self, tmp_path, server, alert, sample_book):
        laptop_store, laptop = make_device(tmp_path, "laptop", server, alert)
        laptop_store.books.add(sample_book)
        laptop.force_push_to_server()

        tablet_store, tablet = make_device(tmp_path, "tablet", server, alert)
        resolved = tablet.fetch_data()

        assert resolved.source is DataSource.SERVER
        assert resolved.data.books == [sample_book]
        assert tablet_store.get_data().books == [sample_book]

    def test_last_push_wins(self, tmp_path, server, alert):
        a_store, a = make_device(tmp_path, "a", server, alert)
        b_store, b = make_device(tmp_path, "b", server, alert)
        a_store.books.add(Book(id="from-a", title="A"))
        b_store.books.add(Book(id="from-b", title="B"))

        a.force_push_to_server()
        b.force_push_to_server()

        assert [book.id for book in a.fetch_data().data.books] == ["from-b"]

    def test_unknown_fields_survive_sync(self, tmp_path, server, alert):
        store, resolver = make_device(tmp_path, "laptop", server, alert)
        store.add_item("books", {"id": "b1", "title": "T", "audiobook": True})
        resolver.force_push_to_server()

        assert server.get("/api/data").json()["books"][0]["audiobook"] is True
        assert resolver.fetch_data().data.books[0].extra == {"audiobook": True}

    def test_server_error_falls_back_to_local(self, tmp_path, alert, sample_book):
        """A 500 from the service means offline, not an empty server"""
        def locked():
            raise sqlite3.OperationalError("database is locked")

        broken_storage = DocumentRowStorage(tmp_path / "broken.sqlite")
        broken_storage.read = locked
        broken = TestClient(create_app(tmp_path / "broken.sqlite", storage=broken_storage))

        store, resolver = make_device(tmp_path, "laptop", broken, alert)
        store.books.add(sample_book)

        resolved = resolver.fetch_data()

        assert resolved.source is DataSource.LOCAL
        assert resolved.data.books == [sample_book]
        assert "Database read error" in resolved.error


class TestLocalWritesWhileServerIsActive:
    """Restores and imports must reach the server before the next resolve"""

    def _server_mode(self, tmp_path, server, alert):
        store, resolver = make_device(tmp_path, "laptop", server, alert)
        resolver.force_push_to_server()
        services = AppServices(
            config=MagicMock(), store=store, media=MagicMock(), remote=resolver.remote, resolver=resolver
        )
        state = {}
        init_state(services, state)
        assert state["data_source"] == "server"
        return services, state

    def test_imported_sales_survive_refresh(self, tmp_path, server, alert, sample_report):
        services, state = self._server_mode(tmp_path, server, alert)
        summary = apply_sales_import(services.store.get_data(), parse_sales_report(sample_report))
        assert services.store.save_data(summary.data)

        assert sync_local_changes(services, state, alert=alert) is True

        assert state["data_source"] == "server"
        assert len(state["app_data"].sales) == 2
        assert len(services.store.get_data().sales) == 2
        assert len(server.get("/api/data").json()["sales"]) == 2

    def test_restored_backup_survives_refresh(self, tmp_path, server, alert, sample_doc):
        services, state = self._server_mode(tmp_path, server, alert)
        assert services.store.import_data(json.dumps(sample_doc.to_dict()).encode("utf-8"))

        assert sync_local_changes(services, state, alert=alert) is True

        assert state["app_data"] == sample_doc
        assert services.store.get_data() == sample_doc

    def test_rejected_push_keeps_local_write_and_alerts(self, tmp_path, server, alert, sample_book):
        services, state = self._server_mode(tmp_path, server, alert)
        services.store.books.add(sample_book)
        services.resolver.remote.push = MagicMock(return_value=False)

        assert sync_local_changes(services, state, alert=alert) is False

        assert services.store.get_data().books == [sample_book]
        assert state["app_data"].books == []
        alert.assert_called_once()
        assert alert.call_args[0][1] == "error"
