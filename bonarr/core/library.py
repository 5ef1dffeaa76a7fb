# Copyright (c) 2025 Trae AI. All rights reserved.

import re
from pathlib import Path
from typing import Optional, Union
from .config import ConfigError
from .models import LibraryTarget

_HOSTILE_CHARS = re.compile(r'[<>:"/\\|?*]')


def sanitize_show_name(name: str) -> str:
    """
    Replaces characters the media server cannot store in folder names.
    """
    return _HOSTILE_CHARS.sub("-", name)


def sanitize_show_name_for_files(name: str) -> str:
    """
    Like sanitize_show_name, but also drops digits so a numeric title is not
    read back as a season or episode number.
    """
    cleaned = re.sub(r"[0-9]", "", sanitize_show_name(name))
    cleaned = re.sub(r"\s+", " ", cleaned)
    return cleaned.strip()


class LibraryPathResolver:
    """
    Computes canonical library paths:
    {root}/{Show} [tmdbid-{id}]/Season NN/{Show} - SNNEEE.ext
    """

    def __init__(self, library_root: Optional[Union[str, Path]]):
        if library_root is None or str(library_root).strip() == "":
            raise ConfigError("Library root is not configured")
        self.library_root = Path(library_root)

    def show_dir(self, show_name: str, show_id: int) -> Path:
        return self.library_root / f"{sanitize_show_name(show_name)} [tmdbid-{show_id}]"

    def season_dir(self, show_name: str, show_id: int, season_number: int) -> Path:
        return self.show_dir(show_name, show_id) / f"Season {season_number:02d}"

    def target_file_name(self, show_name: str, season_number: int, episode_number: int, extension: str) -> str:
        return (
            f"{sanitize_show_name_for_files(show_name)} - "
            f"S{season_number:02d}E{episode_number:02d}{extension}"
        )

    def resolve(
        self, show_name: str, show_id: int, season_number: int, episode_number: int, extension: str
    ) -> LibraryTarget:
        season_dir = self.season_dir(show_name, show_id, season_number)
        file_name = self.target_file_name(show_name, season_number, episode_number, extension)
        return LibraryTarget(
            sanitized_show_name=sanitize_show_name(show_name),
            sanitized_show_name_for_files=sanitize_show_name_for_files(show_name),
            show_dir=self.show_dir(show_name, show_id),
            season_dir=season_dir,
            target_file_name=file_name,
            target_file=season_dir / file_name,
        )


def resolve(
    show_name: str,
    show_id: int,
    season_number: int,
    episode_number: int,
    extension: str,
    library_root: Union[str, Path],
) -> LibraryTarget:
    return LibraryPathResolver(library_root).resolve(show_name, show_id, season_number, episode_number, extension)
