"""Parser module for extracting episode information from file names."""
import logging
import re
from dataclasses import dataclass

from .cleaner import clean_series_guess
from .models import ParsedFilename, UNKNOWN_SERIES

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PatternRule:
    """One filename pattern and the fields it is known to produce.

    ``has_series`` / ``has_season`` state which named groups the regex
    carries; ``default_season`` is used when it carries none.
    """
    id: str
    regex: re.Pattern
    has_series: bool = False
    has_season: bool = False
    default_season: int = 1
    default_episode: int | None = None


# Episode numbers never look like release years
_NOT_YEAR = r'(?!(?:19|20)\d{2}(?!\d))'
_SEP = r'[\s._]'

# Order matters - most specific first
PATTERN_RULES: tuple[PatternRule, ...] = (
    # "#02. Title"
    PatternRule(
        id="hash",
        regex=re.compile(r'^\s*#(?P<episode>\d{1,4})\.'),
    ),
    # "Show S01E05", "S1E5 Title", "Show.s01.e05"
    PatternRule(
        id="season_episode",
        regex=re.compile(
            r'^(?P<series>.*?)[\s._\-]*(?<![A-Za-z0-9])'
            r'S(?P<season>\d{1,2})[\s._]?E(?P<episode>\d{1,4})(?!\d)',
            re.IGNORECASE,
        ),
        has_series=True,
        has_season=True,
    ),
    # "Show 1x05"
    PatternRule(
        id="season_x",
        regex=re.compile(
            r'^(?P<series>.*?)[\s._\-]*\b(?P<season>\d{1,2})x(?P<episode>\d{1,3})\b',
            re.IGNORECASE,
        ),
        has_series=True,
        has_season=True,
    ),
    # "10 - Final Battle"
    PatternRule(
        id="leading_number",
        regex=re.compile(r'^(?P<episode>\d{1,4})\s*-\s*\S.*$'),
    ),
    # "Show - 05", "Show - 05v2", "Show - 05 - Title"
    PatternRule(
        id="series_dash_number",
        regex=re.compile(
            r'^(?P<series>.+?)\s+-\s+' + _NOT_YEAR
            + r'(?P<episode>\d{1,4})(?:v\d)?(?:\s.*)?$'
        ),
        has_series=True,
    ),
    # "Show Episode 5", "Show Ep.05", "Show E05"
    PatternRule(
        id="keyword",
        regex=re.compile(
            r'^(?P<series>.*?)[\s._\-]*(?<![A-Za-z])(?:episode|ep|e)'
            r'[\s._]*(?P<episode>\d{1,4})(?!\d)',
            re.IGNORECASE,
        ),
        has_series=True,
    ),
    # "Show 05", "Show.05.Title" (but not "Show OVA 2")
    PatternRule(
        id="title_number",
        regex=re.compile(
            r'^(?P<series>.*?[^\d\s._\-])'
            r'(?<!\bova)(?<!\boad)(?<!\bona)(?<!\bsp)(?<!\bspecial)(?<!\bspecials)'
            + _SEP + r'+' + _NOT_YEAR
            + r'(?P<episode>\d{1,4})(?:' + _SEP + r'+\D.*)?$',
            re.IGNORECASE,
        ),
        has_series=True,
    ),
    # "05"
    PatternRule(
        id="bare_number",
        regex=re.compile(r'^(?P<episode>\d{1,4})$'),
    ),
    # "05a" -> 5
    PatternRule(
        id="sub_episode",
        regex=re.compile(r'^(?P<episode>\d{1,4})[A-Za-z]$'),
    ),
    # "Show OVA", "Show OVA 2", "Show - Special 01"
    PatternRule(
        id="special",
        regex=re.compile(
            r'^(?P<series>.*?)[\s._\-]*(?<![A-Za-z])'
            r'(?:OVA|OAD|ONA|Specials?|SP)(?![A-Za-z])'
            r'[\s._\-]*(?P<episode>\d{1,3})?',
            re.IGNORECASE,
        ),
        has_series=True,
        default_season=0,
        default_episode=1,
    ),
    # "Show [05]"
    PatternRule(
        id="bracket_number",
        regex=re.compile(
            r'^(?P<series>.*?)\s*\[' + _NOT_YEAR + r'(?P<episode>\d{1,4})\]'
        ),
        has_series=True,
    ),
    # "Show (05)"
    PatternRule(
        id="paren_number",
        regex=re.compile(
            r'^(?P<series>.*?)\s*\(' + _NOT_YEAR + r'(?P<episode>\d{1,4})\)'
        ),
        has_series=True,
    ),
)

_EXTENSION = re.compile(r'\.[A-Za-z0-9]{2,4}$')
# Release-group tags in front: "[SubsPlease] ", "【Group】"
_LEADING_TAGS = re.compile(r'^\s*(?:(?:\[[^\]]*\]|【[^】]*】)\s*)+')
# Trailing tag groups that are not a bare number: "(1080p) [ABCD1234]"
_TRAILING_TAG = re.compile(
    r'\s*(?:\[(?!\d+\])[^\]]*\]|\((?!\d+\))[^)]*\)|【[^】]*】)\s*$'
)


def strip_extension(file_name: str) -> str:
    """Remove a trailing media extension, if any."""
    return _EXTENSION.sub('', file_name)


def strip_release_tags(stem: str) -> str:
    """
    Trim release-group and quality tags around the informative part.

    Leading bracket groups are always removed.  Trailing bracket or
    parenthesis groups are removed unless they hold a bare number, which
    the bracketed-number patterns still need.

    Args:
        stem: Filename without extension

    Returns:
        The trimmed stem, or the original when trimming leaves nothing
    """
    name = _LEADING_TAGS.sub('', stem)
    while True:
        trimmed = _TRAILING_TAG.sub('', name)
        if trimmed == name:
            break
        name = trimmed
    name = name.strip()
    return name or stem.strip()


def _match_rule(rule: PatternRule, stem: str) -> ParsedFilename | None:
    match = rule.regex.search(stem)
    if not match:
        return None

    raw_episode = match.group("episode")
    if raw_episode is None:
        if rule.default_episode is None:
            return None
        episode = rule.default_episode
    else:
        episode = int(raw_episode)
    if episode < 1:
        return None

    season = int(match.group("season")) if rule.has_season else rule.default_season
    series = (
        clean_series_guess(match.group("series"))
        if rule.has_series else UNKNOWN_SERIES
    )

    return ParsedFilename(
        series_name_guess=series,
        episode_number=episode,
        season_number=season,
        matched_pattern_id=rule.id,
    )


def parse_filename(file_name: str) -> ParsedFilename | None:
    """
    Parse a video filename and extract the episode it holds.

    Rules in ``PATTERN_RULES`` are tried in order and the first one that
    yields a valid episode number wins.

    Args:
        file_name: Filename (a path is accepted, only the name is used)

    Returns:
        ParsedFilename, or None if no pattern matches
    """
    name = re.split(r'[\\/]', file_name)[-1]
    stem = strip_release_tags(strip_extension(name))

    for rule in PATTERN_RULES:
        parsed = _match_rule(rule, stem)
        if parsed is not None:
            log.debug(
                f"Parsed '{name}': pattern={parsed.matched_pattern_id}, "
                f"season={parsed.season_number}, episode={parsed.episode_number}, "
                f"series='{parsed.series_name_guess}'"
            )
            return parsed

    log.debug(f"No pattern matched '{name}'")
    return None
