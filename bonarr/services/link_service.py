# Copyright (c) 2025 Trae AI. All rights reserved.

import logging
from pathlib import Path
from typing import Iterable, List, Union
from bonarr.core.config import Config
from bonarr.core.existence import ExistenceChecker
from bonarr.core.library import LibraryPathResolver
from bonarr.core.linker import Linker
from bonarr.core.models import ApplyResult, ExistingEpisodeFile, MatchRecord

logger = logging.getLogger(__name__)


class LinkService:
    """
    The two library operations exposed to the server and CLI.
    """

    def __init__(self, config: Config):
        self.config = config
        # Raises ConfigError right away when no library root is configured
        self.resolver = LibraryPathResolver(config.library_root)
        self.linker = Linker(self.resolver)
        self.checker = ExistenceChecker(self.resolver)

    def apply_matches(
        self,
        matches: Iterable[MatchRecord],
        show_name: str,
        show_id: int,
        season_number: int,
        torrent_path: Union[str, Path],
    ) -> ApplyResult:
        matches = list(matches)
        logger.info(
            f"[User Action] Applying {sum(1 for m in matches if m.is_eligible)} matches for "
            f"'{show_name}' season {season_number} from {torrent_path}"
        )
        return self.linker.apply(matches, show_name, show_id, season_number, torrent_path)

    def check_existing_files(
        self, show_name: str, show_id: int, season_number: int, episodes: Iterable[int]
    ) -> List[ExistingEpisodeFile]:
        results = self.checker.check(show_name, show_id, season_number, episodes)
        present = sum(1 for r in results if r.exists)
        logger.info(f"Library check for '{show_name}' season {season_number}: {present}/{len(results)} present")
        return results
