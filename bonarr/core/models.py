# Copyright (c) 2025 Trae AI. All rights reserved.

import functools
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import List, Optional
from pydantic import BaseModel, Field, computed_field


@functools.total_ordering
class Confidence(Enum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _CONFIDENCE_RANK[self]

    def __lt__(self, other):
        if not isinstance(other, Confidence):
            return NotImplemented
        return self.rank < other.rank


_CONFIDENCE_RANK = {
    Confidence.NONE: 0,
    Confidence.LOW: 1,
    Confidence.MEDIUM: 2,
    Confidence.HIGH: 3,
}


class FilePriority(Enum):
    LOW = -1
    NORMAL = 0
    HIGH = 1


class LinkStatus(Enum):
    SUCCESS = "success"
    ERROR = "error"


class Episode(BaseModel):
    """
    A single episode of a season, as far as matching is concerned.
    """

    episode_number: int = Field(gt=0)
    season_number: int = Field(ge=0)
    name: str = ""
    air_date: Optional[str] = None


class TorrentFile(BaseModel):
    """
    Represents a single file inside a torrent.
    """

    name: str  # Relative to the torrent's download dir, may include sub dirs
    length: int = Field(default=0, ge=0)
    bytes_completed: int = 0
    wanted: bool = True
    priority: FilePriority = FilePriority.NORMAL

    @property
    def extension(self) -> str:
        return PurePosixPath(self.name).suffix

    @computed_field
    @property
    def percent_done(self) -> float:
        if not self.length:
            return 0.0
        return self.bytes_completed / self.length


class Torrent(BaseModel):
    id: int
    name: str
    download_dir: str
    percent_done: float = 0.0
    added_date: int = 0
    files: List[TorrentFile] = Field(default_factory=list)


class MatchRecord(BaseModel):
    """
    Pairs an episode with the torrent file believed to contain it.
    """

    episode: Episode
    file: Optional[TorrentFile] = None
    confidence: Confidence = Confidence.NONE
    file_index: Optional[int] = None

    @property
    def is_eligible(self) -> bool:
        return self.file is not None


class LibraryTarget(BaseModel):
    sanitized_show_name: str
    sanitized_show_name_for_files: str
    show_dir: Path
    season_dir: Path
    target_file_name: str
    target_file: Path


class EpisodeLinkDetail(BaseModel):
    episode: int
    source_file: str
    target_file: str
    status: LinkStatus = LinkStatus.ERROR
    error: Optional[str] = None


class ApplyResult(BaseModel):
    """
    Outcome of linking one batch of matches into the library.
    """

    success: bool = True
    processed_count: int = 0
    errors: List[str] = Field(default_factory=list)
    details: List[EpisodeLinkDetail] = Field(default_factory=list)
    skipped: List[int] = Field(default_factory=list)  # Episodes without a file


class ExistingEpisodeFile(BaseModel):
    episode: int
    file_name: str
    file_path: str
    exists: bool = False
