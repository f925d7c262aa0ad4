"""TVDB API client module."""
import logging
import os
import time
from pathlib import Path

import requests
from dotenv import load_dotenv

from .cache import Cache, EPISODES_MAX_AGE
from .models import EpisodeRecord, SeriesInfo

log = logging.getLogger(__name__)


TVDB_BASE_URL = "https://api4.thetvdb.com/v4"
DEFAULT_TIMEOUT = 10
RATE_LIMIT_DELAY = 0.25  # 250ms between requests to avoid rate limiting
DEFAULT_LANGUAGE = "eng"
DEFAULT_SEASON_TYPE = "default"
SEASON_TYPES = ("default", "official", "dvd", "absolute", "alternate", "regional")


def load_api_key() -> str | None:
    """
    Load TVDB API key from environment or .env file.

    Priority:
    1. TVDB_API_KEY environment variable
    2. .env file in current directory
    3. .env file in user home directory

    Returns:
        API key string or None if not found
    """
    api_key = os.environ.get("TVDB_API_KEY")
    if api_key:
        return api_key

    for env_path in (Path.cwd() / ".env", Path.home() / ".env"):
        if env_path.exists():
            load_dotenv(env_path)
            api_key = os.environ.get("TVDB_API_KEY")
            if api_key:
                return api_key

    return None


def load_pin() -> str | None:
    """Subscriber PIN (only needed for user-supported keys)."""
    return os.environ.get("TVDB_PIN") or None


def generic_title(number: int) -> str:
    """Title used when the catalog has no usable episode name."""
    return f"Episode {number}"


class TVDBError(Exception):
    """Exception raised for TVDB API errors."""
    pass


class TVDBClient:
    """Client for the TVDB v4 API."""

    def __init__(
        self,
        api_key: str | None = None,
        pin: str | None = None,
        cache: Cache | None = None,
        language: str | None = None,
        season_type: str | None = None,
        session: requests.Session | None = None,
    ):
        """
        Initialize TVDB client.

        Args:
            api_key: TVDB API key. If not provided, attempts to load from env/.env.
            pin: Subscriber PIN for user-supported keys.
            cache: Cache instance for storing lookups.
            language: Three-letter TVDB language code for titles (e.g. "eng").
            season_type: Episode ordering to fetch ("default", "absolute"...).
            session: requests session to use (a new one if None).

        Raises:
            TVDBError: If API key is not found or the season type is unknown
        """
        self.api_key = api_key or load_api_key()
        if not self.api_key:
            raise TVDBError(
                "TVDB API key not found.\n"
                "Set it using one of these methods:\n"
                "  1. Environment variable: export TVDB_API_KEY=your_key\n"
                "  2. Create a .env file with: TVDB_API_KEY=your_key\n"
                "  3. Add \"tvdb_api_key\" to the settings file\n"
                "Get an API key at: https://thetvdb.com/api-information"
            )
        self.pin = pin or load_pin()
        self.cache = cache or Cache()
        self.language = language or DEFAULT_LANGUAGE
        self.season_type = season_type or DEFAULT_SEASON_TYPE
        if self.season_type not in SEASON_TYPES:
            raise TVDBError(
                f"Unknown season type '{self.season_type}' "
                f"(expected one of: {', '.join(SEASON_TYPES)})"
            )
        self.session = session or requests.Session()
        self._token: str | None = None
        self._last_request_time = 0.0
        log.debug(f"Using TVDB language: {self.language}, order: {self.season_type}")

    def _rate_limit(self) -> None:
        """Apply rate limiting between requests."""
        elapsed = time.time() - self._last_request_time
        if elapsed < RATE_LIMIT_DELAY:
            time.sleep(RATE_LIMIT_DELAY - elapsed)
        self._last_request_time = time.time()

    # -- authentication --------------------------------------------

    def authenticate(self, force: bool = False) -> str:
        """
        Log in and return a bearer token.

        The token is reused from memory or the cache unless *force* is set.

        Raises:
            TVDBError: If login fails
        """
        if not force:
            token = self._token or self.cache.get_token()
            if token:
                self._token = token
                return token

        payload = {"apikey": self.api_key}
        if self.pin:
            payload["pin"] = self.pin

        self._rate_limit()
        log.debug("POST /login")
        try:
            response = self.session.post(
                f"{TVDB_BASE_URL}/login", json=payload, timeout=DEFAULT_TIMEOUT
            )
        except requests.exceptions.RequestException as e:
            raise TVDBError(f"TVDB login failed: {e}") from e

        if response.status_code != 200:
            raise TVDBError(
                f"TVDB login failed (HTTP {response.status_code}). "
                "Check your API key and PIN."
            )

        token = (response.json().get("data") or {}).get("token")
        if not token:
            raise TVDBError("TVDB login returned no token")

        self._token = token
        self.cache.set_token(token)
        return token

    # -- transport -------------------------------------------------

    def _request(
        self,
        endpoint: str,
        params: dict | None = None,
        retries: int = 3
    ) -> dict | None:
        """
        Make an authenticated GET request to the TVDB API.

        Args:
            endpoint: API endpoint (e.g., '/series/12345')
            params: Query parameters
            retries: Number of retries on failure

        Returns:
            JSON response or None on error / 404
        """
        url = f"{TVDB_BASE_URL}{endpoint}"
        reauthenticated = False
        log.debug(f"GET {endpoint} params={params or {}}")

        attempt = 0
        while attempt < retries:
            self._rate_limit()
            headers = {
                "Authorization": f"Bearer {self.authenticate()}",
                "Accept": "application/json",
            }
            try:
                response = self.session.get(
                    url, params=params, headers=headers, timeout=DEFAULT_TIMEOUT
                )

                log.debug(f"Response status: {response.status_code}")

                if response.status_code == 401 and not reauthenticated:
                    log.debug("Token rejected, logging in again")
                    reauthenticated = True
                    self._token = None
                    self.cache.clear_token()
                    self.authenticate(force=True)
                    continue

                if response.status_code == 404:
                    return None

                if response.status_code == 429:  # Rate limited
                    retry_after = int(response.headers.get("Retry-After", 1))
                    log.debug(f"Rate limited, waiting {retry_after}s")
                    time.sleep(retry_after)
                    attempt += 1
                    continue

                response.raise_for_status()
                return response.json()

            except requests.exceptions.Timeout:
                log.debug(f"Timeout (attempt {attempt + 1}/{retries})")
            except requests.exceptions.RequestException as e:
                log.debug(f"Request error: {e} (attempt {attempt + 1}/{retries})")

            attempt += 1
            if attempt < retries:
                time.sleep(1)

        return None

    # -- catalog ---------------------------------------------------

    def get_series_info(self, series_id: int) -> SeriesInfo | None:
        """
        Get series details, with the name in the client language if possible.

        Args:
            series_id: TVDB series ID

        Returns:
            SeriesInfo if found, None otherwise
        """
        cached = self.cache.get_series(series_id, self.language)
        if cached:
            return SeriesInfo(**cached)

        data = self._request(f"/series/{series_id}")
        if not data or not data.get("data"):
            return None
        raw = data["data"]

        name = raw.get("name") or ""
        original_language = raw.get("originalLanguage") or ""
        if (
            self.language != original_language
            and self.language in (raw.get("nameTranslations") or [])
        ):
            translated = self._translation(f"/series/{series_id}/translations/{self.language}")
            if translated:
                name = translated

        status = raw.get("status") or {}
        series = SeriesInfo(
            id=raw.get("id", series_id),
            name=name,
            status=status.get("name", "") if isinstance(status, dict) else str(status),
            original_language=original_language,
            slug=raw.get("slug") or "",
        )

        self.cache.set_series(series_id, self.language, {
            "id": series.id,
            "name": series.name,
            "status": series.status,
            "original_language": series.original_language,
            "slug": series.slug,
        })
        return series

    def _translation(self, endpoint: str) -> str | None:
        data = self._request(endpoint)
        if not data or not data.get("data"):
            return None
        return data["data"].get("name") or None

    def _fetch_episode_pages(self, series_id: int) -> list[dict]:
        """Follow ``links.next`` until the full episode list is loaded."""
        episodes: list[dict] = []
        page = 0
        while True:
            data = self._request(
                f"/series/{series_id}/episodes/{self.season_type}",
                params={"page": page},
            )
            if not data or not data.get("data"):
                break
            batch = data["data"].get("episodes") or []
            episodes.extend(batch)
            log.debug(f"Episode page {page}: {len(batch)} episode(s)")
            if not batch or not (data.get("links") or {}).get("next"):
                break
            page += 1
        return episodes

    def _episode_title(self, raw: dict, series_language: str) -> str:
        """
        Best-effort title in the client language.

        Translation if one exists, then the catalog name when the series is
        already in the client language, then "Episode N".
        """
        number = raw.get("number") or 0
        episode_id = raw.get("id")

        if series_language == self.language and raw.get("name"):
            return raw["name"]

        if episode_id is not None and self.language in (raw.get("nameTranslations") or []):
            cached = self.cache.get_translation(episode_id, self.language)
            if cached is None:
                cached = self._translation(
                    f"/episodes/{episode_id}/translations/{self.language}"
                ) or ""
                self.cache.set_translation(episode_id, self.language, cached, save=False)
            if cached:
                return cached

        return generic_title(number)

    def get_all_episodes(
        self,
        series_id: int,
        max_age: float = EPISODES_MAX_AGE,
    ) -> list[EpisodeRecord]:
        """
        Get the complete episode list of a series.

        Args:
            series_id: TVDB series ID
            max_age: Accept a cached list younger than this many seconds

        Returns:
            List of EpisodeRecord in catalog order (empty if none found)
        """
        cached = self.cache.get_episodes(series_id, self.season_type, self.language, max_age)
        if cached is not None:
            log.debug(f"Using {len(cached)} cached episode(s) for series {series_id}")
            return [EpisodeRecord(**ep) for ep in cached]

        series = self.get_series_info(series_id)
        series_language = series.original_language if series else ""

        records = []
        for raw in self._fetch_episode_pages(series_id):
            number = raw.get("number")
            if number is None:
                continue
            records.append(EpisodeRecord(
                id=raw.get("id", 0),
                number=number,
                season_number=raw.get("seasonNumber") or 0,
                title=self._episode_title(raw, series_language),
                absolute_number=raw.get("absoluteNumber"),
                aired=raw.get("aired"),
            ))
        self.cache.flush()

        if records:
            self.cache.set_episodes(
                series_id, self.season_type, self.language,
                [
                    {
                        "id": ep.id,
                        "number": ep.number,
                        "season_number": ep.season_number,
                        "title": ep.title,
                        "absolute_number": ep.absolute_number,
                        "aired": ep.aired,
                    }
                    for ep in records
                ],
            )
        log.debug(f"Fetched {len(records)} episode(s) for series {series_id}")
        return records
