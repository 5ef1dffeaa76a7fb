# Copyright (c) 2025 Trae AI. All rights reserved.

from typing import List, Optional
from pydantic import BaseModel
from ..core.models import MatchRecord


class ApplyRequest(BaseModel):
    matches: List[MatchRecord]
    show_name: str
    show_id: int
    season_number: int
    torrent_path: str


class ApplySessionRequest(BaseModel):
    show_id: int
    season_number: int
    torrent_id: int


class CheckExistingRequest(BaseModel):
    show_name: str
    show_id: int
    season_number: int
    episodes: List[int]


class AddTorrentRequest(BaseModel):
    filename: str  # Magnet link or torrent URL
    download_dir: Optional[str] = None
