# Copyright (c) 2025 Trae AI. All rights reserved.

import logging
from typing import List, Optional, Sequence
from .models import Confidence, Episode, MatchRecord, TorrentFile
from .pattern_matcher import PatternMatcher

logger = logging.getLogger(__name__)

VIDEO_EXTENSIONS = (".mkv", ".mp4", ".avi", ".m4v", ".mov", ".wmv", ".flv", ".webm", ".ts", ".m2ts")


def is_video_file(name: str) -> bool:
    return name.lower().endswith(VIDEO_EXTENSIONS)


def _should_replace(best: Optional[Confidence], candidate: Confidence) -> bool:
    # First high wins outright; a later medium may only upgrade a low.
    if best is None:
        return True
    if candidate == Confidence.HIGH and best != Confidence.HIGH:
        return True
    return candidate == Confidence.MEDIUM and best == Confidence.LOW


class AutoMatcher:
    """
    Assigns torrent files to the episodes of a season.
    """

    def __init__(self, pattern_matcher: Optional[PatternMatcher] = None):
        self.pattern_matcher = pattern_matcher or PatternMatcher()

    def video_files(self, files: Sequence[TorrentFile]) -> List[TorrentFile]:
        return [f for f in files if is_video_file(f.name)]

    def match_episode(self, episode: Episode, video_files: Sequence[TorrentFile], season_number: int) -> MatchRecord:
        best_file = None
        best_confidence = None
        best_index = None

        for index, file in enumerate(video_files):
            confidence = self.pattern_matcher.classify(season_number, episode.episode_number, file.name)
            if confidence is None:
                continue
            if _should_replace(best_confidence, confidence):
                best_file = file
                best_confidence = confidence
                best_index = index

        if best_file is None:
            logger.debug(f"No file matched S{season_number:02d}E{episode.episode_number:02d}")
            return MatchRecord(episode=episode)

        logger.debug(
            f"Matched S{season_number:02d}E{episode.episode_number:02d} -> "
            f"{best_file.name} ({best_confidence.value})"
        )
        return MatchRecord(episode=episode, file=best_file, confidence=best_confidence, file_index=best_index)

    def match_all(
        self, episodes: Sequence[Episode], files: Sequence[TorrentFile], season_number: int
    ) -> List[MatchRecord]:
        """
        Returns one MatchRecord per episode, in episode order.
        Non-video files (subtitles, nfo, images) are never candidates.
        """
        video_files = self.video_files(files)
        return [self.match_episode(episode, video_files, season_number) for episode in episodes]
