# =============================================================================
# tests/unit/test_remote_client.py
# Unit Tests for RemoteSyncClient
# =============================================================================

from unittest.mock import MagicMock

import requests

from publi_core.offline.remote_client import RemoteConfig, RemoteSyncClient


def make_response(status_code=200, payload=None, json_error=None):
    response = MagicMock()
    response.status_code = status_code
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    return response


def make_client(response=None, error=None):
    session = MagicMock()
    if error is not None:
        session.request.side_effect = error
    else:
        session.request.return_value = response
    return RemoteSyncClient(RemoteConfig(base_url="http://nas.local:3001/", timeout=2), session=session), session


class TestFetch:
    """Test remote reads"""

    def test_document_is_returned(self, remote_doc):
        client, session = make_client(make_response(payload=remote_doc.to_dict()))

        result = client.fetch()

        assert result.reachable is True
        assert result.data == remote_doc
        session.request.assert_called_once_with(
            method="GET", url="http://nas.local:3001/api/data", json=None, timeout=2
        )

    def test_null_body_means_empty_server(self):
        client, _ = make_client(make_response(payload=None))

        result = client.fetch()

        assert result.reachable is True
        assert result.data is None

    def test_empty_object_means_empty_server(self):
        client, _ = make_client(make_response(payload={}))

        assert client.fetch().data is None

    def test_connection_error_is_unreachable(self):
        client, _ = make_client(error=requests.exceptions.ConnectionError("refused"))

        result = client.fetch()

        assert result.reachable is False
        assert result.data is None
        assert "refused" in result.error

    def test_timeout_is_unreachable(self):
        client, _ = make_client(error=requests.exceptions.Timeout("slow"))

        assert client.fetch().reachable is False

    def test_server_error_is_unreachable(self):
        """A 500 answer counts as unreachable, never as an empty server"""
        client, _ = make_client(make_response(500, {"error": "Database read error"}))

        result = client.fetch()

        assert result.reachable is False
        assert "Database read error" in result.error

    def test_non_json_body_is_unreachable(self):
        client, _ = make_client(make_response(json_error=ValueError("no json")))

        assert client.fetch().reachable is False

    def test_invalid_document_is_unreachable(self):
        client, _ = make_client(make_response(payload={"books": "broken"}))

        assert client.fetch().reachable is False


class TestPush:
    """Test remote writes"""

    def test_push_sends_whole_document(self, sample_doc):
        client, session = make_client(make_response(payload={"success": True}))

        assert client.push(sample_doc) is True
        kwargs = session.request.call_args.kwargs
        assert kwargs["method"] == "POST"
        assert kwargs["json"] == sample_doc.to_dict()

    def test_push_rejected(self, sample_doc):
        client, _ = make_client(make_response(413, {"error": "Request body too large"}))

        assert client.push(sample_doc) is False

    def test_push_unreachable(self, sample_doc):
        client, _ = make_client(error=requests.exceptions.ConnectionError("down"))

        assert client.push(sample_doc) is False

    def test_url_joins_base_and_endpoint(self):
        client = RemoteSyncClient(RemoteConfig(base_url="http://host:3001"), session=MagicMock())

        assert client.url == "http://host:3001/api/data"
