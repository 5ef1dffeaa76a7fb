# Copyright (c) 2025 Trae AI. All rights reserved.

import re
from functools import lru_cache
from typing import List, Optional, Tuple
from .models import Confidence


def _tier_for_position(index: int) -> Confidence:
    if index < 3:
        return Confidence.HIGH
    if index < 5:
        return Confidence.MEDIUM
    return Confidence.LOW


@lru_cache(maxsize=512)
def _compile_patterns(season_number: int, episode_number: int) -> Tuple[re.Pattern, ...]:
    season = int(season_number)
    episode = int(episode_number)
    return (
        re.compile(rf"S0*{season}E0*{episode}", re.IGNORECASE),  # S01E05
        re.compile(rf"Season.?0*{season}.?Episode.?0*{episode}", re.IGNORECASE),  # Season 1 Episode 5
        re.compile(rf"{season}x0*{episode}", re.IGNORECASE),  # 1x05
        re.compile(rf"Episode.?0*{episode}", re.IGNORECASE),  # Episode 05
        re.compile(rf"E0*{episode}(?![0-9])", re.IGNORECASE),  # E05
        re.compile(rf"\b0*{episode}(?![0-9])", re.IGNORECASE),  # 05
    )


class PatternMatcher:
    """
    Recognises season-relative episode naming in torrent file names.
    """

    def build_patterns(self, season_number: int, episode_number: int) -> List[re.Pattern]:
        """
        Returns the recognition patterns for one episode, highest precedence first.
        """
        return list(_compile_patterns(season_number, episode_number))

    def classify(self, season_number: int, episode_number: int, filename: str) -> Optional[Confidence]:
        """
        Returns the confidence tier of the first pattern matching filename, or None.
        """
        for index, pattern in enumerate(_compile_patterns(season_number, episode_number)):
            if pattern.search(filename):
                return _tier_for_position(index)
        return None
