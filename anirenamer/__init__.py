"""
AniRenamer - Anime Episode Renamer

A CLI tool for renaming anime episode files using TVDB metadata.
"""
from .models import (
    ParsedFilename,
    SeriesInfo,
    EpisodeRecord,
    DiscoveredFile,
    FileState,
    Operation,
    OperationKind,
    VersioningConfig,
    VersioningMode,
    ApplyResult,
)
from .parser import parse_filename
from .cleaner import sanitize_name
from .formatter import NamingTemplates, format_episode_name
from .resolver import resolve_episode
from .analyzer import analyze
from .planner import Plan, PlanValidationError, build_plan
from .executor import apply_operation, create_folder, execute_plan
from .discovery import find_media_files
from .tvdb import TVDBClient, TVDBError
from .cache import Cache

__version__ = "0.1.0"
__all__ = [
    "ParsedFilename",
    "SeriesInfo",
    "EpisodeRecord",
    "DiscoveredFile",
    "FileState",
    "Operation",
    "OperationKind",
    "VersioningConfig",
    "VersioningMode",
    "ApplyResult",
    "parse_filename",
    "sanitize_name",
    "NamingTemplates",
    "format_episode_name",
    "resolve_episode",
    "analyze",
    "Plan",
    "PlanValidationError",
    "build_plan",
    "apply_operation",
    "create_folder",
    "execute_plan",
    "find_media_files",
    "TVDBClient",
    "TVDBError",
    "Cache",
]
