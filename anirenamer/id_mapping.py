"""Remember which TVDB series a library folder holds."""
import json
import re
from pathlib import Path
from typing import Any


MAPPING_FILE = ".anirenamer_ids.json"


class IDMapping:
    """Manages folder -> TVDB series ID mappings."""

    def __init__(self, mapping_dir: Path | None = None):
        """
        Initialize ID mapping.

        Args:
            mapping_dir: Directory to store mapping file. Defaults to cwd.
        """
        if mapping_dir is None:
            mapping_dir = Path.cwd()
        self.mapping_path = mapping_dir / MAPPING_FILE
        self._mappings: dict[str, dict[str, Any]] = self._load()

    def _load(self) -> dict[str, dict[str, Any]]:
        """Load mappings from disk."""
        if self.mapping_path.exists():
            try:
                with open(self.mapping_path, 'r', encoding='utf-8') as f:
                    return json.load(f)
            except (json.JSONDecodeError, IOError):
                return {}
        return {}

    def _save(self) -> bool:
        """Save mappings to disk."""
        try:
            with open(self.mapping_path, 'w', encoding='utf-8') as f:
                json.dump(self._mappings, f, indent=2, ensure_ascii=False)
            return True
        except IOError:
            return False

    def _normalize_key(self, folder: Path) -> str:
        """Normalize a folder path for use as key."""
        return folder.resolve().as_posix().lower()

    def get_id(self, folder: Path) -> int | None:
        """
        Get the TVDB series ID mapped to a folder.

        Args:
            folder: Library folder

        Returns:
            Series ID, or None if not mapped
        """
        entry = self._mappings.get(self._normalize_key(folder))
        if entry:
            return entry.get("series_id")
        return None

    def set_id(
        self,
        folder: Path,
        series_id: int,
        name: str | None = None
    ) -> bool:
        """
        Map a folder to a TVDB series ID.

        Args:
            folder: Library folder
            series_id: TVDB series ID
            name: Optional series name for reference

        Returns:
            True if saved successfully
        """
        self._mappings[self._normalize_key(folder)] = {
            "series_id": series_id,
            "name": name,
            "folder": str(folder),
        }
        return self._save()

    def remove_id(self, folder: Path) -> bool:
        """Remove the mapping for a folder; True if removed and saved."""
        key = self._normalize_key(folder)
        if key in self._mappings:
            del self._mappings[key]
            return self._save()
        return False

    def get_all(self) -> dict[str, dict[str, Any]]:
        """Get all mappings."""
        return self._mappings.copy()


def parse_series_ref(ref: str) -> int | None:
    """
    Parse a TVDB series reference into a series ID.

    Supports:
    - https://thetvdb.com/dereferrer/series/12345
    - https://thetvdb.com/?tab=series&id=12345
    - tvdb:12345 / series:12345
    - 12345

    Returns:
        Series ID, or None if invalid
    """
    ref = ref.strip()

    url_match = re.search(r'thetvdb\.com/.*?series/(\d+)', ref)
    if url_match:
        return int(url_match.group(1))

    query_match = re.search(r'thetvdb\.com/.*[?&]id=(\d+)', ref)
    if query_match:
        return int(query_match.group(1))

    short_match = re.match(r'(?:tvdb|series):(\d+)$', ref, re.IGNORECASE)
    if short_match:
        return int(short_match.group(1))

    if ref.isdigit():
        return int(ref)

    return None
