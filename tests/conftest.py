# =============================================================================
# tests/conftest.py
# Pytest Configuration and Fixtures
# =============================================================================

import pytest
from unittest.mock import MagicMock

from publi_core.data.models import AppData, Book, Pseudonym, SaleRecord, seed_document
from publi_core.offline.document_store import DocumentStore
from publi_core.offline.local_database import LocalDatabase
from publi_core.offline.remote_client import RemoteFetchResult


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================

@pytest.fixture
def sample_book():
    """A book referencing the seed pseudonym and imprint"""
    return Book(
        id="b1",
        title="El Silencio",
        pseudonym_id="1",
        imprint_id="1",
        series_id="s1",
        series_order=1,
        platforms=["KDP"],
        formats=["Ebook", "Paperback"],
        price=4.99,
        release_date="2024-03-01",
        status="Published",
        asin="B0TEST0001",
    )


@pytest.fixture
def sample_doc(sample_book):
    """Seed document with one book and one sale"""
    doc = seed_document()
    doc.books.append(sample_book)
    doc.sales.append(
        SaleRecord(
            id="sale-1", book_id="b1", year=2024, month=3,
            units=12, kenpc=300, revenue=25.5, platform="KDP", currency="EUR",
        )
    )
    return doc


@pytest.fixture
def remote_doc():
    """Document as stored on the server"""
    return AppData(
        pseudonyms=[Pseudonym(id="p-remote", name="Remote Author")],
        books=[Book(id="b-remote", title="Remote Book", pseudonym_id="p-remote")],
    )


@pytest.fixture
def sample_report():
    """Royalty rows pasted from a spreadsheet (tab separated)"""
    return (
        "Título\tMes\tAño\tUnidades\tKENP\tRegalías\tMoneda\tASIN\n"
        "El Silencio: Un thriller\t3\t2024\t5\t120\t10,50\tEUR\tB0TEST0001\n"
        "Nuevo Libro\t4\t2024\t2\t0\t3.20\tUSD\tB0NEW00002\n"
    )


# =============================================================================
# STORE FIXTURES
# =============================================================================

@pytest.fixture
def alert():
    """Captures user-visible alerts as (message, level) calls"""
    return MagicMock()


@pytest.fixture
def database(tmp_path):
    db = LocalDatabase(tmp_path / "local.db")
    yield db
    db.close()


@pytest.fixture
def store(database, alert):
    return DocumentStore(database, alert=alert)


@pytest.fixture
def small_store(tmp_path, alert):
    """Store whose slot only fits a few kilobytes"""
    db = LocalDatabase(tmp_path / "small.db", quota_bytes=4096)
    yield DocumentStore(db, alert=alert)
    db.close()


# =============================================================================
# MOCK FIXTURES
# =============================================================================

@pytest.fixture
def mock_remote():
    """RemoteSyncClient double; set fetch.return_value per test"""
    remote = MagicMock()
    remote.url = "http://remote.test/api/data"
    remote.fetch.return_value = RemoteFetchResult(data=None, reachable=False, error="offline")
    remote.push.return_value = True
    return remote


