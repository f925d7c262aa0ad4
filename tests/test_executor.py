"""Tests for applying plans to the filesystem."""

import pytest

from anirenamer.analyzer import analyze
from anirenamer.discovery import find_media_files
from anirenamer.executor import (
    apply_operation,
    collapse_results,
    create_folder,
    execute_plan,
    write_operation_log,
)
from anirenamer.models import EpisodeRecord, Operation, OperationKind
from anirenamer.planner import Plan, PlanValidationError, build_plan


def rename_op(folder, source, target):
    return Operation(OperationKind.RENAME, folder / source, folder, target)


def run(library, episodes, **kwargs):
    analysis = analyze(
        find_media_files(library.root), episodes, "Show", root=library.root, **kwargs
    )
    plan = build_plan(analysis)
    return plan, execute_plan(plan)


def test_apply_rename(library):
    library("a.mkv")
    result = apply_operation(rename_op(library.root, "a.mkv", "b.mkv"))
    assert result.success and not result.skipped
    assert (library.root / "b.mkv").exists()
    assert not (library.root / "a.mkv").exists()


def test_dry_run_touches_nothing(library):
    library("a.mkv")
    result = apply_operation(rename_op(library.root, "a.mkv", "b.mkv"), dry_run=True)
    assert result.success
    assert (library.root / "a.mkv").exists()
    assert not (library.root / "b.mkv").exists()


def test_skip_operation(library):
    library("a.mkv")
    op = Operation(OperationKind.SKIP, library.root / "a.mkv", library.root, "a.mkv")
    result = apply_operation(op)
    assert result.success and result.skipped
    assert result.skip_reason == "Already named correctly"


def test_missing_source(library):
    result = apply_operation(rename_op(library.root, "gone.mkv", "b.mkv"))
    assert not result.success
    assert result.error == "Source file not found"


def test_never_overwrites(library):
    library("a.mkv", "b.mkv")
    result = apply_operation(rename_op(library.root, "a.mkv", "b.mkv"))
    assert not result.success
    assert result.error == "Destination file already exists"
    assert (library.root / "a.mkv").exists()


def test_create_folder(tmp_path):
    target = tmp_path / "x" / "Season 01"
    assert create_folder(target, dry_run=True).success
    assert not target.exists()
    assert create_folder(target).success
    assert target.is_dir()
    assert create_folder(target).success


def test_execute_end_to_end_is_idempotent(library, episodes):
    library("01 - A.mkv", "02 - B.mkv", "01 - A (dup).mkv")
    plan, summary = run(library, episodes)

    assert summary.failed == 0
    assert sorted(p.name for p in library.root.iterdir()) == [
        "Show.S01E01.Alpha.mkv",
        "Show.S01E01.v2.Alpha.mkv",
        "Show.S01E02.Beta.mkv",
    ]

    again = build_plan(analyze(find_media_files(library.root), episodes, "Show"))
    assert again.changes == []


def test_execute_reorganize_creates_folders(library, episodes):
    library("01 - A.mkv")
    plan, summary = run(library, episodes, reorganize=True)
    assert summary.folders_created == 1
    assert (library.root / "Season 01" / "Show.S01E01.Alpha.mkv").exists()


def test_invalid_plan_is_refused(library, episodes):
    library("02 - B.mkv")
    plan = build_plan(analyze(find_media_files(library.root), episodes, "Show"))
    plan.errors.append("conflict")
    with pytest.raises(PlanValidationError):
        execute_plan(plan)
    assert (library.root / "02 - B.mkv").exists()


def test_failure_does_not_stop_batch(library):
    library("c.mkv")
    plan = Plan(operations=[
        rename_op(library.root, "missing.mkv", "x.mkv"),
        rename_op(library.root, "c.mkv", "d.mkv"),
    ])
    summary = execute_plan(plan)
    assert summary.failed == 1
    assert summary.succeeded == 1
    assert (library.root / "d.mkv").exists()


def test_log_collapses_hops(library, episodes):
    library("01 - A.mkv", "01 - A (dup).mkv")
    plan, summary = run(library, episodes)

    pairs = collapse_results(summary.results)
    assert sorted((a.name, b.name) for a, b in pairs) == [
        ("01 - A (dup).mkv", "Show.S01E01.Alpha.mkv"),
        ("01 - A.mkv", "Show.S01E01.v2.Alpha.mkv"),
    ]

    log_path = write_operation_log(summary.results, library.root)
    lines = log_path.read_text(encoding="utf-8").splitlines()
    assert sorted(lines) == [
        "01 - A (dup).mkv --> Show.S01E01.Alpha.mkv",
        "01 - A.mkv --> Show.S01E01.v2.Alpha.mkv",
    ]


def test_log_uses_relative_paths(library, episodes):
    library("Season 2/01 - A.mkv")
    plan, summary = run(library, episodes)
    log_path = write_operation_log(summary.results, library.root)
    assert log_path.read_text(encoding="utf-8") == (
        "Season 2/01 - A.mkv --> Season 2/Show.S01E01.Alpha.mkv\n"
    )


def test_nothing_to_log(library):
    assert write_operation_log([], library.root) is None
    assert not (library.root / "rename_log.txt").exists()


@pytest.mark.parametrize(
    "title",
    [
        "The {Secret} Room",
        "Gundam V2",
        "Mission #1. Escape",
        "v3",
        "Part.z2",
        "Episode 12",
        "S02E09 Recap",
        "12",
    ],
)
def test_second_run_changes_nothing(library, title):
    episodes = [EpisodeRecord(id=1, number=1, season_number=1, title=title)]
    library("01 - a.mkv", "01 - b.mkv")

    plan, summary = run(library, episodes)
    assert plan.is_valid
    assert summary.failed == 0

    again = build_plan(analyze(find_media_files(library.root), episodes, "Show"))
    assert again.is_valid
    assert again.changes == []
    assert len(list(library.root.iterdir())) == 2
