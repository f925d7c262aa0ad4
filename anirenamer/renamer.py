#!/usr/bin/env python3
"""
AniRenamer - Anime Episode Renamer

A CLI tool for renaming anime episode files using TVDB metadata.
"""
import argparse
import logging
from dataclasses import dataclass, field
from pathlib import Path

from .analyzer import analyze
from .cache import Cache
from .discovery import find_media_files
from .executor import collapse_operations, execute_plan, write_operation_log
from .formatter import NamingTemplates
from .id_mapping import IDMapping, parse_series_ref
from .models import (
    EpisodeRecord,
    SeriesInfo,
    VersioningConfig,
    VersioningMode,
)
from .planner import Plan, PlanValidationError, build_plan
from .settings import Settings, validate_template
from .tvdb import SEASON_TYPES, TVDBClient, TVDBError

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INVALID_PLAN = 2


@dataclass
class RunContext:
    """Everything one run needs, resolved from settings and flags."""
    root: Path
    templates: NamingTemplates = field(default_factory=NamingTemplates)
    versioning: VersioningConfig = field(default_factory=VersioningConfig)
    series_name: str | None = None
    recursive: bool = True
    reorganize: bool = False
    limit: int | None = None
    dry_run: bool = False


def _relative(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return str(path)


def print_diff(old_name: str, new_name: str) -> None:
    """Print one rename diff."""
    print("Episode:")
    print(f"  {old_name}")
    print(f"  -> {new_name}")


def print_error(old_name: str, error: str) -> None:
    """Print error message."""
    print("Episode:")
    print(f"  [ERROR] {old_name}")
    print(f"          {error}")


def confirm_proceed(count: int) -> bool:
    """
    Ask user to confirm proceeding with rename.

    Args:
        count: Number of files to rename

    Returns:
        True if user confirms, False otherwise
    """
    while True:
        response = input(f"\nProceed with renaming {count} files? (y/n): ").strip().lower()
        if response in ('y', 'yes'):
            return True
        if response in ('n', 'no'):
            return False
        print("Please enter 'y' or 'n'.")


def plan_directory(
    context: RunContext,
    series: SeriesInfo,
    episodes: list[EpisodeRecord],
) -> Plan | None:
    """
    Scan the library folder and build its rename plan.

    Returns:
        The plan, or None if no video files were found
    """
    files = find_media_files(context.root, context.recursive)
    if not files:
        return None
    if context.limit and context.limit > 0:
        files = files[:context.limit]

    print(f"Found {len(files)} media file(s)")

    analysis = analyze(
        files,
        episodes,
        context.series_name or series.name,
        templates=context.templates,
        reorganize=context.reorganize,
        root=context.root,
    )
    return build_plan(analysis, series=series, versioning=context.versioning)


def print_preview(plan: Plan, root: Path) -> int:
    """
    Print what the plan would do.

    Returns:
        Number of files the plan renames or moves
    """
    pairs = collapse_operations(plan.operations)
    for original, final in pairs:
        print_diff(_relative(original, root), _relative(final, root))
        print()

    stats = plan.statistics
    if stats.unparsed:
        print(f"Unrecognised filenames: {stats.unparsed}")
    if stats.unresolved:
        print(f"No episode data: {stats.unresolved}")
    if stats.duplicate_episodes:
        print(
            f"Duplicate episodes: {stats.duplicate_episodes} "
            f"({stats.duplicate_files} files, versioned)"
        )
    if stats.already_correct:
        print(f"Already named correctly: {stats.already_correct}")

    for error in plan.errors:
        print_error("plan", error)

    return len(pairs)


def build_context(parsed_args: argparse.Namespace, settings: Settings) -> RunContext:
    versioning = settings.versioning()
    if parsed_args.direct_versioning:
        versioning = VersioningConfig(mode=VersioningMode.DIRECT)
    return RunContext(
        root=parsed_args.path.resolve(),
        templates=settings.naming_templates(),
        versioning=versioning,
        series_name=parsed_args.series_name,
        recursive=not parsed_args.no_recursive,
        reorganize=parsed_args.reorganize,
        limit=parsed_args.limit,
        dry_run=parsed_args.dry_run,
    )


def check_templates(templates: NamingTemplates) -> list[str]:
    problems = []
    for name in ("regular", "special", "season_folder", "special_folder"):
        ok, error = validate_template(getattr(templates, name), folder=name.endswith("folder"))
        if not ok:
            problems.append(f"{name} template: {error}")
    return problems


def main(args: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="anirenamer",
        description="Rename anime episode files using TVDB metadata."
    )

    parser.add_argument(
        "path",
        type=Path,
        help="Library folder of one series"
    )
    parser.add_argument(
        "--series-id",
        type=str,
        default=None,
        metavar="ID",
        help="TVDB series ID or URL (remembered for this folder)"
    )
    parser.add_argument(
        "--series-name",
        type=str,
        default=None,
        metavar="NAME",
        help="Series name to use in filenames (default: TVDB name)"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be renamed without actually renaming"
    )
    parser.add_argument(
        "--no-recursive",
        action="store_true",
        help="Only process files directly inside PATH"
    )
    parser.add_argument(
        "--reorganize",
        action="store_true",
        help="Move files into season / specials folders"
    )
    parser.add_argument(
        "--direct-versioning",
        action="store_true",
        help="Rename duplicates straight to their versioned names"
    )
    parser.add_argument(
        "--season-type",
        type=str,
        default=None,
        choices=SEASON_TYPES,
        help="TVDB episode ordering (default: from settings)"
    )
    parser.add_argument(
        "--language",
        type=str,
        default=None,
        help="TVDB language for titles (default: eng)"
    )
    parser.add_argument(
        "--confirm",
        action="store_true",
        help="Ask for confirmation before renaming"
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        metavar="N",
        help="Limit number of files to process"
    )
    parser.add_argument(
        "--no-log",
        action="store_true",
        help="Don't append executed renames to the log file"
    )
    parser.add_argument(
        "--cache-dir",
        type=Path,
        default=None,
        help="Directory for cache file (default: PATH)"
    )
    parser.add_argument(
        "--refresh",
        action="store_true",
        help="Ignore cached series and episode data"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show detailed debug information"
    )

    parsed_args = parser.parse_args(args)

    logging.basicConfig(
        level=logging.DEBUG if parsed_args.verbose else logging.WARNING,
        format="  [%(levelname)s] %(message)s",
    )

    # Validate path
    if not parsed_args.path.is_dir():
        print(f"Error: Not a directory: {parsed_args.path}")
        return EXIT_ERROR

    settings = Settings()
    context = build_context(parsed_args, settings)

    problems = check_templates(context.templates)
    if problems:
        for problem in problems:
            print(f"Error: {problem}")
        return EXIT_ERROR

    # Resolve which series this folder holds
    mapping = IDMapping(context.root)
    if parsed_args.series_id:
        series_id = parse_series_ref(parsed_args.series_id)
        if series_id is None:
            print(f"Error: Not a TVDB series ID or URL: {parsed_args.series_id}")
            return EXIT_ERROR
    else:
        series_id = mapping.get_id(context.root)
        if series_id is None:
            print("Error: No series ID for this folder. Pass --series-id ID.")
            return EXIT_ERROR
        log.debug(f"Using remembered series ID {series_id}")

    # Setup TVDB client
    cache = Cache(parsed_args.cache_dir or context.root)
    if parsed_args.refresh:
        cache.clear_series(series_id)
    try:
        client = TVDBClient(
            api_key=settings.get("tvdb_api_key") or None,
            pin=settings.get("tvdb_pin") or None,
            cache=cache,
            language=parsed_args.language or settings.get("tvdb_language"),
            season_type=parsed_args.season_type or settings.get("season_type"),
        )
        series = client.get_series_info(series_id)
        if series is None:
            raise TVDBError(f"Series {series_id} not found on TVDB")
        episodes = client.get_all_episodes(series_id)
        if not episodes:
            raise TVDBError(f"No episodes found for '{series.name}' ({series_id})")
    except TVDBError as e:
        print(f"Error: {e}")
        return EXIT_ERROR

    mapping.set_id(context.root, series_id, series.name)
    print(f"Series: {series.name} ({len(episodes)} episodes)")

    plan = plan_directory(context, series, episodes)
    if plan is None:
        print("No media files found.")
        return EXIT_OK

    if context.dry_run:
        print("[DRY RUN - no files will be renamed]\n")
    else:
        print()

    rename_count = print_preview(plan, context.root)

    if not plan.is_valid:
        print("-" * 50)
        print("Plan is invalid; nothing was renamed.")
        return EXIT_INVALID_PLAN

    # If dry run, show summary and exit
    if context.dry_run:
        print("-" * 50)
        print(f"Would rename: {rename_count} files")
        return EXIT_OK

    # If no files to rename, exit
    if rename_count == 0:
        print("-" * 50)
        print("No files to rename.")
        return EXIT_OK

    # Ask for confirmation if --confirm is set
    if parsed_args.confirm:
        if not confirm_proceed(rename_count):
            print("Cancelled.")
            return EXIT_OK

    print("\nRenaming files...")
    print("-" * 50)

    try:
        summary = execute_plan(plan)
    except PlanValidationError as e:
        print(f"Error: {e}")
        return EXIT_INVALID_PLAN

    for res in summary.results:
        if not res.success:
            print_error(
                _relative(Path(res.original_path), context.root),
                res.error or "Unknown error",
            )

    if settings.get("write_log") and not parsed_args.no_log:
        log_path = write_operation_log(
            summary.results,
            context.root,
            context.root / settings.get("log_file"),
        )
        if log_path:
            log.debug(f"Operation log: {log_path}")

    renamed_count = len([
        res for res in summary.results
        if res.success and not res.skipped
        and res.operation is not None and not res.operation.temporary
    ])

    # Summary
    print()
    print("-" * 50)
    print(
        f"Renamed: {renamed_count} | Skipped: {summary.skipped} | "
        f"Errors: {summary.failed}"
    )

    return EXIT_OK if summary.failed == 0 else EXIT_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
