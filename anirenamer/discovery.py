"""File discovery: one-shot scan of a library folder for video files."""
import logging
import re
from pathlib import Path

from .models import DiscoveredFile

log = logging.getLogger(__name__)


VIDEO_EXTENSIONS = {
    '.mkv', '.mp4', '.avi', '.mov', '.wmv', '.flv', '.webm',
    '.m4v', '.mpg', '.mpeg', '.m2ts', '.ts', '.vob', '.ogm', '.rmvb',
}

# "OVA", "Specials", "S2 OVA", "Season 02 - Extras", "Movies"
SPECIAL_FOLDER_PATTERN = re.compile(
    r'^(?:(?:season|s)[\s._-]*\d{1,2}[\s._-]*)?'
    r'(?:ovas?|oads?|specials?|extras?|movies?)$',
    re.IGNORECASE,
)

# "Season 2", "Season.02", "S02"
SEASON_FOLDER_PATTERN = re.compile(
    r'^(?:season|s)[\s._-]*(\d{1,2})$',
    re.IGNORECASE,
)


def is_media_file(filepath: Path) -> bool:
    """Check if file is a video file based on extension."""
    return filepath.suffix.lower() in VIDEO_EXTENSIONS


def is_special_folder(folder_name: str) -> bool:
    """Check if a folder name marks special content (OVA, Specials...)."""
    return bool(SPECIAL_FOLDER_PATTERN.match(folder_name.strip()))


def folder_season(folder_name: str) -> int | None:
    """Return the season number a folder name announces, if any."""
    match = SEASON_FOLDER_PATTERN.match(folder_name.strip())
    if match:
        return int(match.group(1))
    return None


def describe_file(filepath: Path, root: Path) -> DiscoveredFile:
    """
    Build a DiscoveredFile for *filepath* found under *root*.

    Only the immediate parent folder is used for classification, and the
    scan root itself never counts as a special or season folder.
    """
    parent = filepath.parent
    try:
        relative = parent.relative_to(root)
    except ValueError:
        relative = Path(".")
    relative_folder = "" if str(relative) == "." else relative.as_posix()

    is_special = False
    season = None
    if relative_folder:
        is_special = is_special_folder(parent.name)
        season = folder_season(parent.name)

    return DiscoveredFile(
        path=filepath,
        name=filepath.name,
        extension=filepath.suffix,
        relative_folder=relative_folder,
        is_special=is_special,
        folder_season=season,
    )


def find_media_files(path: Path, recursive: bool = True) -> list[DiscoveredFile]:
    """
    Find all video files in a directory.

    Args:
        path: Directory or file path
        recursive: Whether to search recursively

    Returns:
        List of discovered files, sorted by path
    """
    if path.is_file():
        if is_media_file(path):
            return [describe_file(path, path.parent)]
        return []

    if not path.is_dir():
        return []

    items = path.rglob("*") if recursive else path.iterdir()
    files = sorted(
        item for item in items
        if item.is_file() and is_media_file(item)
    )
    log.debug(f"Discovered {len(files)} video file(s) under {path}")
    return [describe_file(item, path) for item in files]
