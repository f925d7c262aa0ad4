"""Episode resolution: pick the catalog record a parsed filename refers to.

The resolver always prefers *a* match over *no* match.  When an episode
number exists in several seasons it narrows by folder type (specials) or
by the season the parser detected, and when that fails it falls back to
the first candidate in catalog order with a warning.
"""
import logging

from .models import EpisodeRecord, ParsedFilename

log = logging.getLogger(__name__)


def find_candidates(
    episode_number: int,
    episodes: list[EpisodeRecord],
) -> list[EpisodeRecord]:
    """Return every record numbered *episode_number*, in catalog order."""
    return [ep for ep in episodes if ep.number == episode_number]


def resolve_episode(
    parsed: ParsedFilename,
    is_special_folder: bool,
    episodes: list[EpisodeRecord],
) -> EpisodeRecord | None:
    """
    Select the best-matching episode record for a parsed filename.

    Args:
        parsed: Result of the filename parser
        is_special_folder: Whether the file sits in an OVA/Specials folder
        episodes: Full episode list of the series

    Returns:
        The chosen EpisodeRecord, or None when the catalog has no episode
        with that number
    """
    candidates = find_candidates(parsed.episode_number, episodes)
    if not candidates:
        log.info(f"No catalog episode numbered {parsed.episode_number}")
        return None

    if len(candidates) == 1:
        return candidates[0]

    if is_special_folder:
        for candidate in candidates:
            if candidate.is_special:
                return candidate
        return candidates[0]

    for candidate in candidates:
        if candidate.season_number == parsed.season_number:
            return candidate

    fallback = candidates[0]
    log.warning(
        f"Episode {parsed.episode_number}: no candidate in season "
        f"{parsed.season_number}, falling back to season {fallback.season_number}"
    )
    return fallback
