# Copyright (c) 2025 Trae AI. All rights reserved.

from typing import Iterable, List, Optional
from .models import Confidence, Episode, MatchRecord, TorrentFile


class MatchStore:
    """
    Holds the editable match records of one season/torrent session.

    Records start from the auto-matcher output. Manual picks replace a single
    record and never touch the others.
    """

    def __init__(self, records: Iterable[MatchRecord]):
        self._records: List[MatchRecord] = list(records)

    @property
    def records(self) -> List[MatchRecord]:
        return list(self._records)

    @property
    def matched_count(self) -> int:
        return sum(1 for r in self._records if r.is_eligible)

    @property
    def total_count(self) -> int:
        return len(self._records)

    def _index_of(self, episode_number: int) -> int:
        for index, record in enumerate(self._records):
            if record.episode.episode_number == episode_number:
                return index
        raise KeyError(f"Episode {episode_number} is not part of this session")

    def get(self, episode_number: int) -> MatchRecord:
        return self._records[self._index_of(episode_number)]

    def file_for(self, episode_number: int) -> Optional[TorrentFile]:
        return self.get(episode_number).file

    def eligible(self) -> List[MatchRecord]:
        return [r for r in self._records if r.is_eligible]

    def assign_manually(self, episode_number: int, file: Optional[TorrentFile]) -> MatchRecord:
        """
        Sets the file for one episode. Manual picks are trusted as medium
        confidence, clearing the file sets confidence to none.
        """
        index = self._index_of(episode_number)
        current = self._records[index]
        updated = MatchRecord(
            episode=current.episode,
            file=file,
            confidence=Confidence.MEDIUM if file is not None else Confidence.NONE,
            file_index=None,
        )
        self._records[index] = updated
        return updated

    def next_episode(self, episode_number: int) -> Optional[Episode]:
        try:
            index = self._index_of(episode_number)
        except KeyError:
            return None
        if index >= len(self._records) - 1:
            return None
        return self._records[index + 1].episode

    def assign_and_advance(self, episode_number: int, file: Optional[TorrentFile]) -> Optional[Episode]:
        self.assign_manually(episode_number, file)
        return self.next_episode(episode_number)
