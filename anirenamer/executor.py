"""Execution adapter: apply a plan's operations to the filesystem.

Operations are applied one at a time.  A failing operation is reported
and counted but does not stop the batch, and already-applied operations
are never rolled back.  Invalid plans are refused before anything is
touched.
"""
import logging
from pathlib import Path

from .models import ApplyResult, ExecutionSummary, Operation
from .planner import Plan

log = logging.getLogger(__name__)


LOG_FILE = "rename_log.txt"


def create_folder(path: Path, dry_run: bool = False) -> ApplyResult:
    """Create *path* (and parents); existing folders are a success."""
    if not dry_run:
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return ApplyResult(
                original_path=str(path),
                new_path=str(path),
                success=False,
                error=str(e),
            )
    return ApplyResult(original_path=str(path), new_path=str(path), success=True)


def apply_operation(operation: Operation, dry_run: bool = False) -> ApplyResult:
    """
    Apply one operation safely.

    Never overwrites: when the destination already exists (and is not the
    source itself) the operation is skipped and reported as failed.

    Args:
        operation: The operation to apply
        dry_run: If True, don't actually rename

    Returns:
        ApplyResult describing what happened
    """
    source = operation.source_path
    dest = operation.target_path

    def result(**kwargs) -> ApplyResult:
        return ApplyResult(
            original_path=str(source),
            new_path=str(dest),
            operation=operation,
            **kwargs,
        )

    if not operation.changes_file:
        return result(success=True, skipped=True, skip_reason="Already named correctly")

    if dry_run:
        return result(success=True)

    if not source.exists():
        return result(success=False, error="Source file not found")

    # Check if destination already exists (and is not the same file)
    if dest.exists() and source.resolve() != dest.resolve():
        return result(
            success=False,
            error="Destination file already exists",
            skipped=True,
            skip_reason="Destination file already exists",
        )

    try:
        source.rename(dest)
    except OSError as e:
        return result(success=False, error=str(e))

    return result(success=True)


def execute_plan(plan: Plan, dry_run: bool = False) -> ExecutionSummary:
    """
    Apply a whole plan: folders first, then file operations in order.

    Raises:
        PlanValidationError: If the plan is invalid; nothing is applied
    """
    plan.raise_if_invalid()
    summary = ExecutionSummary()

    for folder in plan.folders:
        folder_result = create_folder(folder, dry_run)
        if folder_result.success:
            summary.folders_created += 1
        else:
            log.error(f"Could not create folder {folder}: {folder_result.error}")

    for operation in plan.operations:
        op_result = apply_operation(operation, dry_run)
        if not op_result.success:
            log.error(
                f"Failed: {operation.source_path.name} -> "
                f"{operation.new_file_name}: {op_result.error}"
            )
        summary.results.append(op_result)

    log.debug(
        f"Executed plan: {summary.succeeded} applied, {summary.skipped} skipped, "
        f"{summary.failed} failed"
    )
    return summary


def _relative(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return str(path)


def collapse_operations(operations: list[Operation]) -> list[tuple[Path, Path]]:
    """
    Reduce file-changing operations to (original, final) path pairs.

    A two-phase rename shows up as two operations (original -> ``.zK`` ->
    final); it is reported as one pair.
    """
    origin: dict[Path, Path] = {}
    finals: dict[Path, Path] = {}

    for op in operations:
        if not op.changes_file:
            continue
        original = origin.pop(op.source_path, op.source_path)
        finals.pop(op.source_path, None)
        origin[op.target_path] = original
        if not op.temporary:
            finals[op.target_path] = original

    return [(original, final) for final, original in finals.items()]


def collapse_results(results: list[ApplyResult]) -> list[tuple[Path, Path]]:
    """(original, final) pairs for the operations that were actually applied."""
    return collapse_operations([
        res.operation for res in results
        if res.operation is not None and res.success and not res.skipped
    ])


def write_operation_log(
    results: list[ApplyResult],
    root: Path,
    log_path: Path | None = None,
) -> Path | None:
    """
    Append executed renames to a plain-text log.

    Each line reads ``<original> --> <new>`` with paths relative to
    *root*.

    Returns:
        Path of the log file, or None if nothing was written
    """
    pairs = collapse_results(results)
    if not pairs:
        return None

    log_path = log_path or root / LOG_FILE
    try:
        with open(log_path, 'a', encoding='utf-8') as f:
            for original, final in pairs:
                f.write(f"{_relative(original, root)} --> {_relative(final, root)}\n")
    except OSError as e:
        log.warning(f"Could not write operation log {log_path}: {e}")
        return None
    return log_path
