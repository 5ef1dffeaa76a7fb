# Copyright (c) 2025 Trae AI. All rights reserved.

import logging
import threading
from dataclasses import dataclass
from typing import Dict, Optional, Tuple
from bonarr.clients.tmdb import SeasonDetails, ShowDetails, TMDBClient
from bonarr.clients.transmission import TransmissionClient
from bonarr.core.auto_matcher import AutoMatcher
from bonarr.core.match_store import MatchStore
from bonarr.core.models import Episode, MatchRecord, Torrent, TorrentFile

logger = logging.getLogger(__name__)

SessionKey = Tuple[int, int, int]


@dataclass
class MatchSession:
    show: ShowDetails
    season: SeasonDetails
    torrent: Torrent
    store: MatchStore


class MatchService:
    """
    Builds and holds match sessions (one per show/season/torrent) in memory.
    """

    def __init__(self, tmdb: TMDBClient, transmission: TransmissionClient, auto_matcher: Optional[AutoMatcher] = None):
        self.tmdb = tmdb
        self.transmission = transmission
        self.auto_matcher = auto_matcher or AutoMatcher()
        self._sessions: Dict[SessionKey, MatchSession] = {}
        self._lock = threading.Lock()

    def start_session(self, show_id: int, season_number: int, torrent_id: int) -> MatchSession:
        """
        Loads show, season and torrent and runs the auto-matcher.
        Replaces any previous session for the same key.
        """
        show = self.tmdb.get_show_details(show_id)
        season = self.tmdb.get_season_details(show_id, season_number)
        torrent = self.transmission.get_torrent_files(torrent_id)

        records = self.auto_matcher.match_all(season.episodes, torrent.files, season_number)
        session = MatchSession(show=show, season=season, torrent=torrent, store=MatchStore(records))

        with self._lock:
            self._sessions[(show_id, season_number, torrent_id)] = session

        logger.info(
            f"Auto-matched {session.store.matched_count}/{session.store.total_count} episodes of "
            f"'{show.name}' season {season_number} against torrent '{torrent.name}'"
        )
        return session

    def get_session(self, show_id: int, season_number: int, torrent_id: int) -> MatchSession:
        with self._lock:
            session = self._sessions.get((show_id, season_number, torrent_id))
        if session is None:
            raise KeyError(f"No match session for show {show_id} season {season_number} torrent {torrent_id}")
        return session

    def get_or_start_session(self, show_id: int, season_number: int, torrent_id: int) -> MatchSession:
        """
        Returns the current session, keeping manual overrides, or starts one.
        """
        try:
            return self.get_session(show_id, season_number, torrent_id)
        except KeyError:
            return self.start_session(show_id, season_number, torrent_id)

    def end_session(self, show_id: int, season_number: int, torrent_id: int):
        with self._lock:
            self._sessions.pop((show_id, season_number, torrent_id), None)

    def find_file(self, session: MatchSession, file_name: str) -> TorrentFile:
        for file in session.torrent.files:
            if file.name == file_name:
                return file
        raise ValueError(f"File '{file_name}' is not part of torrent '{session.torrent.name}'")

    def assign(
        self, show_id: int, season_number: int, torrent_id: int, episode_number: int, file_name: Optional[str]
    ) -> Tuple[MatchRecord, Optional[Episode]]:
        """
        Manual override for one episode. Returns the new record and the next episode.
        """
        session = self.get_session(show_id, season_number, torrent_id)
        file = self.find_file(session, file_name) if file_name else None
        record = session.store.assign_manually(episode_number, file)
        logger.info(
            f"[User Action] Episode {episode_number} of '{session.show.name}' set to "
            f"{file.name if file else 'no file'}"
        )
        return record, session.store.next_episode(episode_number)
