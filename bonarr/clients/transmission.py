# Copyright (c) 2025 Trae AI. All rights reserved.

import logging
import requests
from typing import Any, Dict, List, Optional
from ..core.models import FilePriority, Torrent, TorrentFile
from .errors import TransmissionError

logger = logging.getLogger(__name__)

SESSION_HEADER = "X-Transmission-Session-Id"

TORRENT_FIELDS = ["id", "name", "addedDate", "status", "percentDone", "downloadDir", "totalSize"]


class TransmissionClient:
    """
    Minimal Transmission JSON-RPC client.
    """

    def __init__(
        self,
        url: str = "http://localhost:9091/transmission/rpc",
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: int = 10,
    ):
        self.url = url
        self.timeout = timeout
        self.session_id: Optional[str] = None
        self.session = requests.Session()
        if username and password:
            self.session.auth = (username, password)

    def _post(self, payload: Dict[str, Any]) -> requests.Response:
        headers = {"Content-Type": "application/json"}
        if self.session_id:
            headers[SESSION_HEADER] = self.session_id
        return self.session.post(self.url, json=payload, headers=headers, timeout=self.timeout)

    def _request(self, method: str, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        payload = {"method": method, "arguments": arguments or {}}
        try:
            response = self._post(payload)
            # CSRF protection: the server hands out a session id with a 409
            if response.status_code == 409 and response.headers.get(SESSION_HEADER):
                self.session_id = response.headers[SESSION_HEADER]
                logger.debug("Refreshed Transmission session id")
                response = self._post(payload)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            raise TransmissionError(f"Failed to communicate with Transmission: {e}") from e
        except ValueError as e:
            raise TransmissionError(f"Invalid response from Transmission: {e}") from e

        if data.get("result") != "success":
            raise TransmissionError(f"Transmission RPC failed: {data.get('result')}")
        return data.get("arguments", {})

    @staticmethod
    def _to_torrent(raw: Dict[str, Any]) -> Torrent:
        stats = raw.get("fileStats") or []
        files = []
        for index, raw_file in enumerate(raw.get("files") or []):
            # fileStats is authoritative when present
            stat = stats[index] if index < len(stats) else {}
            priority = stat.get("priority", raw_file.get("priority", 0))
            files.append(
                TorrentFile(
                    name=raw_file["name"],
                    length=raw_file.get("length", 0),
                    bytes_completed=stat.get("bytesCompleted", raw_file.get("bytesCompleted", 0)),
                    wanted=stat.get("wanted", raw_file.get("wanted", True)),
                    priority=FilePriority(priority),
                )
            )
        return Torrent(
            id=raw["id"],
            name=raw.get("name", ""),
            download_dir=raw.get("downloadDir", ""),
            percent_done=raw.get("percentDone", 0.0),
            added_date=raw.get("addedDate", 0),
            files=files,
        )

    def get_torrents(self, filter_path: Optional[str] = None) -> List[Torrent]:
        """
        Returns torrents newest first, optionally limited to a download dir prefix.
        """
        arguments = self._request("torrent-get", {"fields": TORRENT_FIELDS, "format": "objects"})
        torrents = [self._to_torrent(raw) for raw in arguments.get("torrents", [])]
        if filter_path:
            torrents = [t for t in torrents if t.download_dir.startswith(filter_path)]
        return sorted(torrents, key=lambda t: t.added_date, reverse=True)

    def get_torrent_files(self, torrent_id: int) -> Torrent:
        arguments = self._request(
            "torrent-get",
            {"ids": [torrent_id], "fields": TORRENT_FIELDS + ["files", "fileStats"], "format": "objects"},
        )
        torrents = arguments.get("torrents") or []
        if not torrents:
            raise TransmissionError(f"Torrent with ID {torrent_id} not found")
        return self._to_torrent(torrents[0])

    def add_torrent(self, filename: str, download_dir: Optional[str] = None) -> Dict[str, Any]:
        """
        Adds a magnet link or torrent URL. Duplicates are returned like new torrents.
        """
        arguments: Dict[str, Any] = {"filename": filename}
        if download_dir:
            arguments["download-dir"] = download_dir
        result = self._request("torrent-add", arguments)
        added = result.get("torrent-added") or result.get("torrent-duplicate")
        if added is None:
            raise TransmissionError("Transmission did not report the added torrent")
        return added
