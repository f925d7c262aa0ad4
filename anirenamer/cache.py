"""Cache module for storing TVDB lookups locally."""
import json
import time
from pathlib import Path
from typing import Any

from .settings import settings_dir


CACHE_FILE = ".anirenamer_cache.json"
# Credentials stay in the per-user config dir, never in a library folder
TOKEN_FILE = "tvdb_token.json"

# TVDB tokens are valid for one month; refresh a little earlier
TOKEN_MAX_AGE = 25 * 24 * 3600
EPISODES_MAX_AGE = 24 * 3600


class Cache:
    """Local JSON cache for TVDB lookups."""

    def __init__(self, cache_dir: Path | None = None, token_path: Path | None = None):
        """
        Initialize the cache.

        Args:
            cache_dir: Directory to store cache file. Defaults to current directory.
            token_path: File holding the login token. Defaults to
                ``tvdb_token.json`` in the settings directory.
        """
        if cache_dir is None:
            cache_dir = Path.cwd()
        self.cache_path = cache_dir / CACHE_FILE
        self.token_path = token_path or settings_dir() / TOKEN_FILE
        self._cache: dict[str, Any] = self._load()
        self._token: dict | None = self._load_token()

    def _load(self) -> dict[str, Any]:
        """Load cache from disk."""
        if self.cache_path.exists():
            try:
                with open(self.cache_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                empty = self._empty_cache()
                empty.update(data)
                # Older versions kept the token here
                empty.pop("token", None)
                return empty
            except (json.JSONDecodeError, IOError):
                return self._empty_cache()
        return self._empty_cache()

    def _empty_cache(self) -> dict[str, Any]:
        """Return empty cache structure."""
        return {
            "series": {},
            "episodes": {},
            "translations": {},
        }

    def _save(self) -> None:
        """Save cache to disk."""
        try:
            with open(self.cache_path, 'w', encoding='utf-8') as f:
                json.dump(self._cache, f, indent=2, ensure_ascii=False)
        except IOError:
            pass  # Silently fail if we can't write cache

    @staticmethod
    def _fresh(entry: dict | None, max_age: float) -> bool:
        if not entry:
            return False
        return time.time() - entry.get("stored_at", 0) < max_age

    def _load_token(self) -> dict | None:
        try:
            with open(self.token_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError):
            return None
        return data if isinstance(data, dict) else None

    def _save_token(self) -> None:
        try:
            if self._token is None:
                self.token_path.unlink(missing_ok=True)
                return
            self.token_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.token_path, 'w', encoding='utf-8') as f:
                json.dump(self._token, f)
        except OSError:
            pass  # Silently fail if we can't write the token

    def get_token(self) -> str | None:
        """Return the cached login token if it is still valid."""
        if self._fresh(self._token, TOKEN_MAX_AGE):
            return self._token.get("value")
        return None

    def set_token(self, token: str) -> None:
        """Cache a login token in the settings directory."""
        self._token = {"value": token, "stored_at": time.time()}
        self._save_token()

    def clear_token(self) -> None:
        """Forget the cached login token (e.g. after a 401)."""
        self._token = None
        self._save_token()

    def get_series(self, series_id: int, language: str) -> dict | None:
        """
        Get cached series info.

        Args:
            series_id: TVDB series ID
            language: Language the name was fetched in

        Returns:
            Cached series data if found, None otherwise
        """
        return self._cache["series"].get(f"{series_id}:{language}")

    def set_series(self, series_id: int, language: str, result: dict) -> None:
        """Cache series info."""
        self._cache["series"][f"{series_id}:{language}"] = result
        self._save()

    def get_episodes(
        self,
        series_id: int,
        season_type: str,
        language: str,
        max_age: float = EPISODES_MAX_AGE,
    ) -> list[dict] | None:
        """
        Get a cached episode list if it is younger than *max_age* seconds.

        Args:
            series_id: TVDB series ID
            season_type: Episode ordering ("default", "absolute"...)
            language: Language of the episode titles

        Returns:
            List of episode dicts, or None if missing or stale
        """
        entry = self._cache["episodes"].get(f"{series_id}:{season_type}:{language}")
        if self._fresh(entry, max_age):
            return entry["episodes"]
        return None

    def set_episodes(
        self,
        series_id: int,
        season_type: str,
        language: str,
        episodes: list[dict],
    ) -> None:
        """Cache a full episode list."""
        key = f"{series_id}:{season_type}:{language}"
        self._cache["episodes"][key] = {
            "episodes": episodes,
            "stored_at": time.time(),
        }
        self._save()

    def get_translation(self, episode_id: int, language: str) -> str | None:
        """Get a cached episode title translation ("" means none exists)."""
        return self._cache["translations"].get(f"{episode_id}:{language}")

    def set_translation(
        self,
        episode_id: int,
        language: str,
        name: str,
        save: bool = True,
    ) -> None:
        """Cache an episode title translation (call flush() if save=False)."""
        self._cache["translations"][f"{episode_id}:{language}"] = name
        if save:
            self._save()

    def flush(self) -> None:
        """Write pending changes to disk."""
        self._save()

    def clear_series(self, series_id: int) -> None:
        """Drop everything cached for one series."""
        prefix = f"{series_id}:"
        for section in ("series", "episodes"):
            self._cache[section] = {
                k: v for k, v in self._cache[section].items()
                if not k.startswith(prefix)
            }
        self._save()

    def clear(self) -> None:
        """Clear all cached data, the login token included."""
        self._cache = self._empty_cache()
        self._save()
        self.clear_token()
