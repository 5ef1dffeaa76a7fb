# Copyright (c) 2025 Trae AI. All rights reserved.

import pytest
from pathlib import Path
from bonarr.core.config import Config
from bonarr.core.library import LibraryPathResolver
from bonarr.core.models import Episode, MatchRecord, Confidence, TorrentFile

@pytest.fixture
def library_root(tmp_path):
    root = tmp_path / "library"
    root.mkdir()
    return root

@pytest.fixture
def download_dir(tmp_path):
    downloads = tmp_path / "downloads"
    downloads.mkdir()
    return downloads

@pytest.fixture
def config(library_root):
    return Config(library_root=library_root, tmdb_api_key="fake_key")

@pytest.fixture
def resolver(library_root):
    return LibraryPathResolver(library_root)

@pytest.fixture
def episodes():
    return [Episode(episode_number=n, season_number=1, name=f"Episode {n}") for n in (1, 2, 3)]

@pytest.fixture
def make_match(download_dir):
    """
    Builds a MatchRecord and (optionally) the source file on disk.
    """
    def _make(episode_number, file_name=None, create=True, season_number=1):
        episode = Episode(episode_number=episode_number, season_number=season_number, name=f"Ep {episode_number}")
        if file_name is None:
            return MatchRecord(episode=episode)
        if create:
            source = download_dir / file_name
            source.parent.mkdir(parents=True, exist_ok=True)
            source.write_bytes(b"video")
        return MatchRecord(episode=episode, file=TorrentFile(name=file_name, length=5), confidence=Confidence.HIGH)
    return _make
