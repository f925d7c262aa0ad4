"""Formatter module for generating final file and folder names."""
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .cleaner import sanitize_name, strip_reserved

log = logging.getLogger(__name__)


# Default templates
DEFAULT_REGULAR_TEMPLATE = "{series}.S{season:02}E{episode:02}.{title}"
DEFAULT_SPECIAL_TEMPLATE = "{series}.S00E{episode:02}.{title}"
DEFAULT_SEASON_FOLDER_TEMPLATE = "Season {season:02}"
DEFAULT_SPECIAL_FOLDER_TEMPLATE = "Specials"

# Where a version marker goes: right after the first SxxEyy code
_EPISODE_CODE = re.compile(r'S\d{2,}E\d{2,}', re.IGNORECASE)
# ".v2" / ".z3" markers written by the version manager
_VERSION_MARKER = re.compile(r'\.([vz])(\d+)(?=\.|$)')
# "{series}", "{season:02}", "{episode:02d}"
_PLACEHOLDER = re.compile(r'\{(\w+)(?::([^}]*))?\}')


@dataclass(frozen=True)
class NamingTemplates:
    """Templates for episode filenames and reorganize-mode folders."""
    regular: str = DEFAULT_REGULAR_TEMPLATE
    special: str = DEFAULT_SPECIAL_TEMPLATE
    season_folder: str = DEFAULT_SEASON_FOLDER_TEMPLATE
    special_folder: str = DEFAULT_SPECIAL_FOLDER_TEMPLATE


def render_template(template: str, data: dict[str, Any]) -> str:
    """
    Render a template with given data.

    Args:
        template: The template string with {variable} placeholders.
        data: Data dictionary with values.

    Returns:
        Rendered string with variables replaced.

    Placeholders are replaced in a single pass over the template, so braces
    inside substituted values are left alone.

    Raises:
        KeyError: If a required variable is missing.
    """
    def substitute(match: re.Match) -> str:
        key, spec = match.group(1), match.group(2)
        if key not in data:
            raise KeyError(f"Missing template variable: {key}")
        value = data[key]
        # Handle zero-padded formats like {season:02d}
        if spec in ("02", "02d"):
            return f"{value:02d}" if isinstance(value, int) else str(value)
        return str(value)

    return _PLACEHOLDER.sub(substitute, template)


def version_suffix(version: int | None) -> str:
    """Return the filename marker for *version* (``""`` for version 1)."""
    if version is None or version <= 1:
        return ""
    return f".v{version}"


def temporary_suffix(position: int) -> str:
    """Return the throwaway marker used for the first hop of a rename."""
    return f".z{position}"


def insert_version(file_name: str, suffix: str) -> str:
    """
    Place a version marker into an already formatted filename.

    The marker goes directly after the episode code
    (``Show.S01E01.v2.Title.mkv``).  Names without an episode code get it
    right before the extension.

    Args:
        file_name: Formatted filename including extension
        suffix: Marker such as ``.v2`` or ``.z1`` (empty is a no-op)

    Returns:
        Filename with the marker inserted
    """
    if not suffix:
        return file_name

    match = _EPISODE_CODE.search(file_name)
    if match:
        pos = match.end()
        return file_name[:pos] + suffix + file_name[pos:]

    stem, ext = split_extension(file_name)
    return f"{stem}{suffix}{ext}"


def split_version(file_name: str) -> tuple[str, int | None]:
    """
    Remove the ``.vN``/``.zN`` marker from a filename.

    Only the position ``insert_version`` writes to is looked at: directly
    after the episode code, or right before the extension for names
    without one.  Look-alikes inside a title (``Gundam.V2``) are kept.

    Returns:
        Tuple of (name_without_marker, version).  *version* is None when
        the name carries no marker.
    """
    code = _EPISODE_CODE.search(file_name)
    if code:
        match = _VERSION_MARKER.match(file_name, code.end())
        if not match:
            return file_name, None
        return file_name[:match.start()] + file_name[match.end():], int(match.group(2))

    stem, ext = split_extension(file_name)
    match = _VERSION_MARKER.search(stem)
    if not match or match.end() != len(stem):
        return file_name, None
    return stem[:match.start()] + ext, int(match.group(2))


def version_of(file_name: str, target_name: str) -> int | None:
    """
    Version *file_name* holds of the canonical name *target_name*.

    Returns 1 for the canonical name itself, N for its ``.vN``/``.zN``
    variant and None for any other name.
    """
    if file_name == target_name:
        return 1
    base, version = split_version(file_name)
    if version is None or base != target_name:
        return None
    return version


def split_extension(file_name: str) -> tuple[str, str]:
    """Split ``name.ext`` into ``("name", ".ext")``."""
    path = Path(file_name)
    return file_name[:len(file_name) - len(path.suffix)], path.suffix


def format_episode_name(
    series: str,
    season: int,
    episode: int,
    title: str,
    extension: str = "",
    version_suffix: str | None = None,
    templates: NamingTemplates | None = None
) -> str:
    """
    Format an episode filename.

    The regular template applies to seasons >= 1, the special template to
    season 0.

    Args:
        series: Series name
        season: Season number (0 for specials)
        episode: Episode number
        title: Episode title
        extension: File extension (including dot)
        version_suffix: Optional version marker such as ``.v2``
        templates: Naming templates (defaults if None)

    Returns:
        Sanitized filename
    """
    templates = templates or NamingTemplates()
    template = templates.special if season == 0 else templates.regular
    default = DEFAULT_SPECIAL_TEMPLATE if season == 0 else DEFAULT_REGULAR_TEMPLATE

    data = {
        "series": sanitize_name(series),
        "season": season,
        "episode": episode,
        "title": sanitize_name(title),
    }
    try:
        rendered = render_template(template, data)
    except (KeyError, ValueError) as e:
        # Fallback to the default format if the template is broken
        log.warning(f"Template '{template}' failed ({e}), using default")
        rendered = render_template(default, data)
    filename = rendered + extension
    filename = insert_version(filename, version_suffix or "")
    return sanitize_name(filename)


def format_folder_name(
    season: int,
    templates: NamingTemplates | None = None
) -> str:
    """Format the reorganize-mode folder name for *season*."""
    templates = templates or NamingTemplates()
    template = templates.special_folder if season == 0 else templates.season_folder
    return strip_reserved(render_template(template, {"season": season}))

