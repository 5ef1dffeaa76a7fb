# Copyright (c) 2025 Trae AI. All rights reserved.

import logging
import os
from pathlib import Path
from typing import Iterable, Union
from .library import LibraryPathResolver
from .models import ApplyResult, EpisodeLinkDetail, LinkStatus, MatchRecord

logger = logging.getLogger(__name__)


class Linker:
    """
    Hard-links matched torrent files into the library.

    Episodes are processed one after the other. Hard links only: source and
    library must live on the same volume, a cross-device error is reported
    for the episode like any other failure.
    """

    def __init__(self, resolver: LibraryPathResolver):
        self.resolver = resolver

    def _remove_stale_target(self, target_file: Path):
        try:
            target_file.unlink()
        except FileNotFoundError:
            pass

    def link_file(self, source_file: Path, target_file: Path):
        """
        Creates target_file as a hard link to source_file, replacing any existing entry.
        Raises OSError when the link cannot be made.
        """
        if target_file.exists() and os.path.samefile(source_file, target_file):
            # Already linked (or the source lives at the target path)
            return
        if target_file.exists() or target_file.is_symlink():
            self._remove_stale_target(target_file)
        os.link(source_file, target_file)

    def apply(
        self,
        matches: Iterable[MatchRecord],
        show_name: str,
        show_id: int,
        season_number: int,
        torrent_download_dir: Union[str, Path],
    ) -> ApplyResult:
        result = ApplyResult()
        season_dir = self.resolver.season_dir(show_name, show_id, season_number)

        try:
            season_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            error_msg = f"Failed to create directory structure: {e}"
            logger.error(error_msg)
            return ApplyResult(success=False, processed_count=0, errors=[error_msg], details=[])

        download_dir = Path(torrent_download_dir)
        eligible_count = 0

        for match in matches:
            episode_number = match.episode.episode_number
            if match.file is None:
                result.skipped.append(episode_number)
                continue
            eligible_count += 1

            source_file = download_dir / match.file.name
            target = self.resolver.resolve(
                show_name, show_id, season_number, episode_number, match.file.extension
            )
            detail = EpisodeLinkDetail(
                episode=episode_number,
                source_file=str(source_file),
                target_file=str(target.target_file),
            )

            if not source_file.exists():
                detail.error = f"Source file not accessible: {source_file}"
            else:
                try:
                    self.link_file(source_file, target.target_file)
                    detail.status = LinkStatus.SUCCESS
                    result.processed_count += 1
                except OSError as e:
                    detail.error = f"Failed to create hard link: {e}"

            if detail.status == LinkStatus.ERROR:
                result.errors.append(detail.error)
                result.success = False
                logger.error(f"Failed to link episode {episode_number}: {detail.error}")
            result.details.append(detail)

        # Touching nothing out of a non-empty batch is not a success
        if result.processed_count == 0 and eligible_count > 0:
            result.success = False

        if result.processed_count > 0:
            logger.info(f"Linked {result.processed_count} files for '{show_name}' to {season_dir}")
        if result.errors:
            logger.warning(
                f"Partial failures for '{show_name}': {len(result.errors)} failed. {'; '.join(result.errors)}"
            )
        return result
