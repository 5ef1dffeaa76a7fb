# Copyright (c) 2025 Trae AI. All rights reserved.

from typing import Iterable, List
from .library import LibraryPathResolver
from .models import ExistingEpisodeFile

# Narrower than the auto-matcher's video list; the first entry is the placeholder
CHECK_EXTENSIONS = (".mkv", ".mp4", ".avi", ".m4v", ".mov", ".webm")


class ExistenceChecker:
    """
    Reports which episodes of a season are already linked into the library.
    """

    def __init__(self, resolver: LibraryPathResolver):
        self.resolver = resolver

    def check_episode(self, show_name: str, show_id: int, season_number: int, episode_number: int) -> ExistingEpisodeFile:
        for extension in CHECK_EXTENSIONS:
            target = self.resolver.resolve(show_name, show_id, season_number, episode_number, extension)
            try:
                found = target.target_file.exists()
            except OSError:
                found = False
            if found:
                return ExistingEpisodeFile(
                    episode=episode_number,
                    file_name=target.target_file_name,
                    file_path=str(target.target_file),
                    exists=True,
                )

        placeholder = self.resolver.resolve(show_name, show_id, season_number, episode_number, CHECK_EXTENSIONS[0])
        return ExistingEpisodeFile(
            episode=episode_number,
            file_name=placeholder.target_file_name,
            file_path=str(placeholder.target_file),
            exists=False,
        )

    def check(
        self, show_name: str, show_id: int, season_number: int, episode_numbers: Iterable[int]
    ) -> List[ExistingEpisodeFile]:
        return [
            self.check_episode(show_name, show_id, season_number, number)
            for number in sorted(episode_numbers)
        ]
