# Copyright (c) 2025 Trae AI. All rights reserved.

import pytest
import requests
from unittest.mock import MagicMock, patch
from bonarr.clients.errors import TransmissionError
from bonarr.clients.transmission import SESSION_HEADER, TransmissionClient
from bonarr.core.models import FilePriority

def response(status=200, payload=None, headers=None):
    mock = MagicMock()
    mock.status_code = status
    mock.headers = headers or {}
    mock.json.return_value = payload if payload is not None else {}
    if status >= 400:
        mock.raise_for_status.side_effect = requests.exceptions.HTTPError(f"{status} Error")
    return mock

TORRENT = {
    "id": 5,
    "name": "Show.S01.1080p",
    "downloadDir": "/downloads/tv",
    "percentDone": 1.0,
    "addedDate": 200,
    "files": [
        {"name": "Show.S01.1080p/Show.S01E01.mkv", "length": 100, "bytesCompleted": 0, "wanted": False, "priority": 0},
        {"name": "Show.S01.1080p/Show.S01E02.mkv", "length": 100, "bytesCompleted": 10, "wanted": True, "priority": -1},
    ],
    "fileStats": [
        {"bytesCompleted": 100, "wanted": True, "priority": 1},
    ],
}

@pytest.fixture
def client():
    return TransmissionClient("http://transmission:9091/transmission/rpc", "user", "pass")

def test_session_id_retry(client):
    with patch.object(client.session, "post") as mock_post:
        mock_post.side_effect = [
            response(409, headers={SESSION_HEADER: "abc123"}),
            response(200, {"result": "success", "arguments": {"torrents": []}}),
        ]

        assert client.get_torrents() == []

        assert mock_post.call_count == 2
        assert client.session_id == "abc123"
        retry_headers = mock_post.call_args_list[1][1]["headers"]
        assert retry_headers[SESSION_HEADER] == "abc123"

def test_basic_auth_configured(client):
    assert client.session.auth == ("user", "pass")

def test_file_stats_take_precedence(client):
    with patch.object(client.session, "post") as mock_post:
        mock_post.return_value = response(200, {"result": "success", "arguments": {"torrents": [TORRENT]}})

        torrent = client.get_torrent_files(5)

    assert torrent.download_dir == "/downloads/tv"
    first, second = torrent.files
    assert first.bytes_completed == 100
    assert first.wanted is True
    assert first.priority == FilePriority.HIGH
    # No fileStats entry: fall back to the files entry
    assert second.bytes_completed == 10
    assert second.priority == FilePriority.LOW

    payload = mock_post.call_args[1]["json"]
    assert payload["method"] == "torrent-get"
    assert payload["arguments"]["ids"] == [5]
    assert "fileStats" in payload["arguments"]["fields"]

def test_unknown_torrent(client):
    with patch.object(client.session, "post") as mock_post:
        mock_post.return_value = response(200, {"result": "success", "arguments": {"torrents": []}})
        with pytest.raises(TransmissionError):
            client.get_torrent_files(99)

def test_filter_and_sort(client):
    older = dict(TORRENT, id=1, addedDate=100, downloadDir="/downloads/tv")
    newer = dict(TORRENT, id=2, addedDate=300, downloadDir="/downloads/tv/anime")
    other = dict(TORRENT, id=3, addedDate=400, downloadDir="/downloads/movies")
    with patch.object(client.session, "post") as mock_post:
        mock_post.return_value = response(200, {"result": "success", "arguments": {"torrents": [older, newer, other]}})

        torrents = client.get_torrents("/downloads/tv")

    assert [t.id for t in torrents] == [2, 1]

def test_rpc_failure(client):
    with patch.object(client.session, "post") as mock_post:
        mock_post.return_value = response(200, {"result": "no such method"})
        with pytest.raises(TransmissionError, match="no such method"):
            client.get_torrents()

def test_http_failure(client):
    with patch.object(client.session, "post") as mock_post:
        mock_post.return_value = response(500)
        with pytest.raises(TransmissionError):
            client.get_torrents()

def test_add_torrent_duplicate(client):
    with patch.object(client.session, "post") as mock_post:
        mock_post.return_value = response(
            200,
            {"result": "success", "arguments": {"torrent-duplicate": {"id": 5, "name": "Show", "hashString": "ff"}}},
        )

        added = client.add_torrent("magnet:?xt=urn:btih:ff", "/downloads/tv")

    assert added["id"] == 5
    assert mock_post.call_args[1]["json"]["arguments"]["download-dir"] == "/downloads/tv"
