"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from anirenamer.discovery import describe_file
from anirenamer.formatter import format_episode_name
from anirenamer.models import EpisodeRecord, FileState
from anirenamer.parser import parse_filename


@pytest.fixture(autouse=True)
def config_home(monkeypatch, tmp_path):
    """Keep settings and the login token out of the real config dir."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    return tmp_path / "config"


@pytest.fixture
def episodes():
    """Two regular episodes of season 1."""
    return [
        EpisodeRecord(id=101, number=1, season_number=1, title="Alpha"),
        EpisodeRecord(id=102, number=2, season_number=1, title="Beta"),
    ]


@pytest.fixture
def library(tmp_path):
    """Factory creating fake video files under a library root.

    Returns:
        Callable taking relative paths and returning the created Paths
    """
    root = tmp_path / "library"
    root.mkdir()

    def make(*names: str) -> list[Path]:
        paths = []
        for name in names:
            path = root / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(b"video")
            paths.append(path)
        return paths

    make.root = root
    return make


def make_state(path: Path, episode: EpisodeRecord, series: str = "Show") -> FileState:
    """Build the FileState the analyzer would produce for *path*."""
    file = describe_file(path, path.parent)
    return FileState(
        file=file,
        parsed=parse_filename(path.name),
        episode=episode,
        target_name=format_episode_name(
            series, episode.season_number, episode.number, episode.title, file.extension
        ),
        target_folder=path.parent,
    )
