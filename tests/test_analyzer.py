"""Tests for slot grouping and classification."""

from anirenamer.analyzer import analyze, apply_folder_season
from anirenamer.discovery import find_media_files
from anirenamer.models import EpisodeRecord, ParsedFilename


def test_buckets(library, episodes):
    library("Show.S01E01.Alpha.mkv", "02 - B.mkv", "random.mkv", "07 - Missing.mkv")
    result = analyze(find_media_files(library.root), episodes, "Show")

    assert [s.file.name for s in result.skip] == ["Show.S01E01.Alpha.mkv"]
    assert [s.target_name for s in result.rename] == ["Show.S01E02.Beta.mkv"]
    assert [f.name for f in result.unparsed] == ["random.mkv"]
    assert [(f.name, p.episode_number) for f, p in result.unresolved] == [("07 - Missing.mkv", 7)]
    assert result.duplicates == {}
    assert result.total_files == 4


def test_duplicates_grouped_by_slot(library, episodes):
    library("01 - A.mkv", "01 - A (dup).mkv", "02 - B.mkv")
    result = analyze(find_media_files(library.root), episodes, "Show")

    assert list(result.duplicates) == [(1, 1)]
    assert len(result.duplicates[(1, 1)]) == 2
    assert len(result.rename) == 1


def test_folder_season_selects_record(library):
    episodes = [
        EpisodeRecord(id=1, number=5, season_number=1, title="First"),
        EpisodeRecord(id=2, number=5, season_number=2, title="Second"),
    ]
    library("Season 2/05.mkv")
    result = analyze(find_media_files(library.root), episodes, "Show")
    assert result.rename[0].target_name == "Show.S02E05.Second.mkv"


def test_explicit_season_beats_folder(library):
    library("Season 2/Show S01E05.mkv")
    file = find_media_files(library.root)[0]
    parsed = ParsedFilename("Show", 5, 1, "season_episode")
    assert apply_folder_season(parsed, file) == parsed


def test_special_folder_picks_special(library):
    episodes = [
        EpisodeRecord(id=1, number=1, season_number=1, title="Alpha"),
        EpisodeRecord(id=9, number=1, season_number=0, title="Bonus"),
    ]
    library("OVA/Show - 01.mkv")
    result = analyze(find_media_files(library.root), episodes, "Show")
    assert result.rename[0].target_name == "Show.S00E01.Bonus.mkv"


def test_reorganize_targets_season_folders(library, episodes):
    library("01 - A.mkv")
    result = analyze(
        find_media_files(library.root), episodes, "Show",
        reorganize=True, root=library.root,
    )
    state = result.rename[0]
    assert state.target_folder == library.root / "Season 01"
    assert state.target_path == library.root / "Season 01" / "Show.S01E01.Alpha.mkv"


def test_braces_in_episode_title(library):
    episodes = [EpisodeRecord(id=1, number=1, season_number=1, title="The {Secret} Room")]
    library("01 - A.mkv")
    result = analyze(find_media_files(library.root), episodes, "Show")
    assert [s.target_name for s in result.rename] == ["Show.S01E01.The.{Secret}.Room.mkv"]
