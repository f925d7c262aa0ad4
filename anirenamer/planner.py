"""Plan building: turn an analysis into an ordered, validated operation list."""
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable

from .models import (
    AnalysisResult,
    FileState,
    Operation,
    OperationKind,
    PlanStatistics,
    SeriesInfo,
    VersioningConfig,
)
from .versioning import assign_versions

log = logging.getLogger(__name__)

# Returns the filenames currently present in a folder
ExistingLookup = Callable[[Path], Iterable[str]]


class PlanValidationError(Exception):
    """Raised when a plan must not be executed."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("Invalid rename plan:\n  " + "\n  ".join(errors))


@dataclass
class Plan:
    """Ordered file operations plus the folders they need."""
    operations: list[Operation] = field(default_factory=list)
    folders: list[Path] = field(default_factory=list)
    statistics: PlanStatistics = field(default_factory=PlanStatistics)
    errors: list[str] = field(default_factory=list)
    series: SeriesInfo | None = None

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def changes(self) -> list[Operation]:
        """Operations that touch the filesystem."""
        return [op for op in self.operations if op.changes_file]

    def raise_if_invalid(self) -> None:
        if self.errors:
            raise PlanValidationError(self.errors)


def list_folder(folder: Path) -> list[str]:
    """Default existing-file lookup: names of the files in *folder*."""
    if not folder.is_dir():
        return []
    return [item.name for item in folder.iterdir() if item.is_file()]


def _path_key(path: Path) -> str:
    return os.path.normcase(os.path.abspath(path))


def single_operation(state: FileState) -> Operation:
    """SKIP, RENAME or MOVE for a file that is alone in its slot."""
    if state.is_already_correct:
        kind = OperationKind.SKIP
    elif state.target_folder == state.file.path.parent:
        kind = OperationKind.RENAME
    else:
        kind = OperationKind.MOVE
    return Operation(
        kind=kind,
        source_path=state.file.path,
        target_folder=state.target_folder,
        new_file_name=state.target_name,
        slot=state.slot,
    )


def validate_operations(operations: list[Operation]) -> list[str]:
    """
    Check the rules every executable plan must satisfy.

    Every operation needs a source, a target folder and a filename, and no
    two operations may end at the same absolute path.  A SKIP occupies its
    own path, so nothing else may be renamed onto it either.

    Returns:
        List of error messages (empty when the plan is valid)
    """
    errors: list[str] = []
    claimed: dict[str, Operation] = {}

    for op in operations:
        # Path("") reads as "."; an empty path has no name and equals Path()
        if (
            not op.source_path.name
            or op.target_folder == Path()
            or not op.new_file_name
        ):
            errors.append(f"Incomplete operation for '{op.source_path}'")
            continue
        key = _path_key(op.target_path)
        previous = claimed.get(key)
        if previous is not None:
            errors.append(
                f"Target conflict: '{previous.source_path}' and "
                f"'{op.source_path}' both resolve to '{op.target_path}'"
            )
            continue
        claimed[key] = op

    return errors


def build_plan(
    analysis: AnalysisResult,
    series: SeriesInfo | None = None,
    versioning: VersioningConfig | None = None,
    existing_lookup: ExistingLookup | None = None,
) -> Plan:
    """
    Compose skip, rename and duplicate buckets into one plan.

    Args:
        analysis: Output of the state analyzer
        series: Series the plan is for (reporting only)
        versioning: Versioning mode for duplicate slots
        existing_lookup: Returns filenames already in a folder; used to
                         continue version numbering (defaults to a disk
                         listing)

    Returns:
        Plan; check ``plan.is_valid`` before executing it
    """
    versioning = versioning or VersioningConfig()
    existing_lookup = existing_lookup or list_folder

    operations = [single_operation(state) for state in analysis.skip]
    operations += [single_operation(state) for state in analysis.rename]

    duplicate_files = 0
    for slot, group in analysis.duplicates.items():
        duplicate_files += len(group)
        batch_paths = {_path_key(state.file.path) for state in group}
        folders = {state.target_folder for state in group}
        existing = [
            name
            for folder in sorted(folders)
            for name in existing_lookup(folder)
            if _path_key(folder / name) not in batch_paths
        ]
        operations += assign_versions(group, versioning, existing)

    folders = sorted({
        op.target_folder for op in operations
        if op.changes_file and not op.target_folder.exists()
    })

    stats = PlanStatistics(
        total_files=analysis.total_files,
        already_correct=sum(1 for op in operations if op.kind is OperationKind.SKIP),
        renames=len(analysis.rename),
        duplicate_episodes=len(analysis.duplicates),
        duplicate_files=duplicate_files,
        unparsed=len(analysis.unparsed),
        unresolved=len(analysis.unresolved),
    )

    plan = Plan(
        operations=operations,
        folders=folders,
        statistics=stats,
        errors=validate_operations(operations),
        series=series,
    )
    if plan.errors:
        for error in plan.errors:
            log.error(error)
    return plan
