"""State analysis: classify discovered files by what their episode slot needs.

Every file goes through parse -> resolve -> format.  The resulting
``FileState`` objects are grouped by episode slot; single-member slots are
either already correct (skip) or need a plain rename, and slots with more
than one member are handed on as duplicates for versioning.
"""
import dataclasses
import logging
from collections import defaultdict
from pathlib import Path

from .formatter import NamingTemplates, format_episode_name, format_folder_name
from .models import (
    AnalysisResult,
    DiscoveredFile,
    EpisodeRecord,
    EpisodeSlot,
    FileState,
    ParsedFilename,
)
from .parser import PATTERN_RULES, parse_filename
from .resolver import resolve_episode

log = logging.getLogger(__name__)

_RULES_WITH_SEASON = {rule.id for rule in PATTERN_RULES if rule.has_season}


def apply_folder_season(
    parsed: ParsedFilename,
    file: DiscoveredFile,
) -> ParsedFilename:
    """Use the folder's season ("Season 2/05.mkv") when the name had none."""
    if file.folder_season is None:
        return parsed
    if parsed.matched_pattern_id in _RULES_WITH_SEASON:
        return parsed
    if parsed.season_number == 0:
        return parsed
    return dataclasses.replace(parsed, season_number=file.folder_season)


def target_folder_for(
    file: DiscoveredFile,
    episode: EpisodeRecord,
    templates: NamingTemplates,
    reorganize: bool,
    root: Path | None,
) -> Path:
    """Folder a file should end up in."""
    if not reorganize:
        return file.path.parent
    base = root if root is not None else file.path.parent
    return base / format_folder_name(episode.season_number, templates)


def build_file_state(
    file: DiscoveredFile,
    episodes: list[EpisodeRecord],
    series_name: str,
    templates: NamingTemplates,
    reorganize: bool = False,
    root: Path | None = None,
) -> tuple[FileState | None, ParsedFilename | None]:
    """
    Parse, resolve and name one file.

    Returns:
        Tuple of (state, parsed).  *state* is None when parsing or
        resolution failed; *parsed* is None only when parsing failed.
    """
    parsed = parse_filename(file.name)
    if parsed is None:
        return None, None
    parsed = apply_folder_season(parsed, file)

    episode = resolve_episode(parsed, file.is_special, episodes)
    if episode is None:
        return None, parsed

    target_name = format_episode_name(
        series_name,
        episode.season_number,
        episode.number,
        episode.title,
        file.extension,
        templates=templates,
    )
    state = FileState(
        file=file,
        parsed=parsed,
        episode=episode,
        target_name=target_name,
        target_folder=target_folder_for(file, episode, templates, reorganize, root),
    )
    return state, parsed


def analyze(
    files: list[DiscoveredFile],
    episodes: list[EpisodeRecord],
    series_name: str,
    templates: NamingTemplates | None = None,
    reorganize: bool = False,
    root: Path | None = None,
) -> AnalysisResult:
    """
    Group files by episode slot and classify each slot.

    Args:
        files: Discovered video files
        episodes: Full episode list of the series
        series_name: Series name used in target filenames
        templates: Naming templates (defaults if None)
        reorganize: Move files into season/specials folders under *root*
        root: Library root, required for a meaningful reorganize

    Returns:
        AnalysisResult with skip/rename/duplicate buckets and failures
    """
    templates = templates or NamingTemplates()
    result = AnalysisResult(total_files=len(files))
    groups: dict[EpisodeSlot, list[FileState]] = defaultdict(list)

    for file in files:
        state, parsed = build_file_state(
            file, episodes, series_name, templates, reorganize, root
        )
        if parsed is None:
            log.info(f"Skipping '{file.name}': filename not recognised")
            result.unparsed.append(file)
            continue
        if state is None:
            log.info(
                f"Skipping '{file.name}': no episode data for "
                f"episode {parsed.episode_number}"
            )
            result.unresolved.append((file, parsed))
            continue
        groups[state.slot].append(state)

    for slot in sorted(groups):
        members = groups[slot]
        if len(members) > 1:
            result.duplicates[slot] = members
        elif members[0].is_already_correct:
            result.skip.append(members[0])
        else:
            result.rename.append(members[0])

    log.debug(
        f"Analysis: {len(result.skip)} correct, {len(result.rename)} to rename, "
        f"{len(result.duplicates)} duplicated slot(s), "
        f"{len(result.unparsed)} unparsed, {len(result.unresolved)} unresolved"
    )
    return result
