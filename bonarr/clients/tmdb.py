# Copyright (c) 2025 Trae AI. All rights reserved.

import logging
import requests
import time
from typing import Dict, List, Optional
from pydantic import BaseModel, Field
from ..core.models import Episode
from .errors import MetadataError

logger = logging.getLogger(__name__)


class ShowDetails(BaseModel):
    id: int
    name: str
    first_air_date: Optional[str] = None


class SeasonDetails(BaseModel):
    season_number: int
    name: str = ""
    episodes: List[Episode] = Field(default_factory=list)


class TMDBClient:
    """
    Fetches show and season metadata from the TMDB v3 API with rate limiting support.
    """

    BASE_URL = "https://api.themoviedb.org/3"

    def __init__(self, api_key: Optional[str], read_access_token: Optional[str] = None, max_retries: int = 3):
        self.api_key = api_key
        self.read_access_token = read_access_token
        self.max_retries = max_retries
        self.session = requests.Session()
        if read_access_token:
            self.session.headers["Authorization"] = f"Bearer {read_access_token}"

    def _handle_rate_limit(self, response: requests.Response):
        remaining = response.headers.get("X-RateLimit-Remaining")
        reset_time = response.headers.get("X-RateLimit-Reset")

        if remaining is not None and int(remaining) <= 1 and reset_time:
            wait_time = float(reset_time) - time.time()
            if wait_time > 0:
                logger.info(f"Rate limit reached. Waiting for {wait_time:.2f} seconds...")
                time.sleep(wait_time + 0.1)

    def _get(self, path: str, params: Optional[Dict] = None) -> Optional[Dict]:
        """
        GET with rate limit handling and retries. Returns None on 404.
        """
        if not self.api_key and not self.read_access_token:
            raise MetadataError("TMDB API key or read access token is not configured")
        url = f"{self.BASE_URL}/{path.lstrip('/')}"
        query = {"api_key": self.api_key} if self.api_key else {}
        query.update(params or {})

        retry_count = 0
        while True:
            try:
                response = self.session.get(url, params=query, timeout=10)
                self._handle_rate_limit(response)

                if response.status_code == 429:
                    retry_count += 1
                    if retry_count > self.max_retries:
                        raise MetadataError(f"TMDB rate limit still exceeded for {path} after {self.max_retries} retries")
                    retry_after = response.headers.get("Retry-After")
                    logger.warning(f"TMDB rate limited. Retrying ({retry_count}/{self.max_retries})...")
                    time.sleep(int(retry_after) if retry_after else 1)
                    continue
                if response.status_code == 404:
                    logger.info(f"TMDB returned 404 for {path}")
                    return None

                response.raise_for_status()
                return response.json()
            except requests.exceptions.RequestException as e:
                retry_count += 1
                if retry_count > self.max_retries:
                    raise MetadataError(f"TMDB request failed for {path}: {e}") from e
                logger.warning(f"TMDB request failed: {e}. Retrying ({retry_count}/{self.max_retries})...")
                # Exponential backoff: 2^1, 2^2 ... max 2^5
                time.sleep(2 ** min(retry_count, 5))

    def get_show_details(self, series_id: int) -> ShowDetails:
        data = self._get(f"tv/{series_id}")
        if not data:
            raise MetadataError(f"Show {series_id} not found on TMDB")
        return ShowDetails(id=data["id"], name=data.get("name", ""), first_air_date=data.get("first_air_date"))

    def get_season_details(self, series_id: int, season_number: int) -> SeasonDetails:
        data = self._get(f"tv/{series_id}/season/{season_number}")
        if not data:
            raise MetadataError(f"Season {season_number} of show {series_id} not found on TMDB")

        episodes = [
            Episode(
                episode_number=ep["episode_number"],
                season_number=ep.get("season_number", season_number),
                name=ep.get("name") or "",
                air_date=ep.get("air_date"),
            )
            for ep in data.get("episodes", [])
        ]
        return SeasonDetails(
            season_number=data.get("season_number", season_number),
            name=data.get("name") or "",
            episodes=episodes,
        )

    def search_tv(self, query: str, page: int = 1) -> List[Dict]:
        data = self._get("search/tv", {"query": query, "page": page, "include_adult": "false"})
        return (data or {}).get("results", [])
