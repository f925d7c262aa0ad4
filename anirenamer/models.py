"""Data models for the anirenamer package."""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


UNKNOWN_SERIES = "Unknown Series"

# (season_number, episode_number); season 0 holds specials
EpisodeSlot = tuple[int, int]


@dataclass(frozen=True)
class ParsedFilename:
    """Represents the episode information read from one filename."""
    series_name_guess: str
    episode_number: int
    season_number: int = 1
    matched_pattern_id: str = ""

    def __post_init__(self):
        if self.episode_number < 1:
            raise ValueError(
                f"episode_number must be >= 1, got {self.episode_number}"
            )
        if self.season_number < 0:
            raise ValueError(
                f"season_number must be >= 0, got {self.season_number}"
            )


@dataclass(frozen=True)
class SeriesInfo:
    """Represents a series from the catalog."""
    id: int
    name: str
    status: str = ""
    original_language: str = ""
    slug: str = ""


@dataclass(frozen=True)
class EpisodeRecord:
    """Represents an episode from the catalog."""
    id: int
    number: int
    season_number: int
    title: str
    absolute_number: int | None = None
    aired: str | None = None

    @property
    def is_special(self) -> bool:
        return self.season_number == 0


@dataclass(frozen=True)
class DiscoveredFile:
    """A video file found while scanning the library folder."""
    path: Path
    name: str
    extension: str
    relative_folder: str = ""
    is_special: bool = False
    folder_season: int | None = None


@dataclass(frozen=True)
class FileState:
    """A discovered file together with the episode it resolved to."""
    file: DiscoveredFile
    parsed: ParsedFilename
    episode: EpisodeRecord
    target_name: str
    target_folder: Path

    @property
    def slot(self) -> EpisodeSlot:
        return (self.episode.season_number, self.episode.number)

    @property
    def target_path(self) -> Path:
        return self.target_folder / self.target_name

    @property
    def is_already_correct(self) -> bool:
        return (
            self.file.name == self.target_name
            and self.file.path.parent == self.target_folder
        )


class OperationKind(Enum):
    SKIP = "skip"
    RENAME = "rename"
    MOVE = "move"
    VERSIONED_RENAME = "versioned_rename"


@dataclass(frozen=True)
class Operation:
    """One step of a rename plan."""
    kind: OperationKind
    source_path: Path
    target_folder: Path
    new_file_name: str
    slot: EpisodeSlot | None = None
    version: int | None = None
    temporary: bool = False

    @property
    def target_path(self) -> Path:
        return self.target_folder / self.new_file_name

    @property
    def changes_file(self) -> bool:
        return self.kind is not OperationKind.SKIP


class VersioningMode(Enum):
    TEMPORARY = "temporary"
    DIRECT = "direct"


@dataclass(frozen=True)
class VersioningConfig:
    """How colliding files in one episode slot get their version names."""
    mode: VersioningMode = VersioningMode.TEMPORARY


@dataclass
class AnalysisResult:
    """Output of the state analyzer, bucketed by what each slot needs."""
    skip: list[FileState] = field(default_factory=list)
    rename: list[FileState] = field(default_factory=list)
    duplicates: dict[EpisodeSlot, list[FileState]] = field(default_factory=dict)
    unparsed: list[DiscoveredFile] = field(default_factory=list)
    unresolved: list[tuple[DiscoveredFile, ParsedFilename]] = field(
        default_factory=list
    )
    total_files: int = 0


@dataclass
class PlanStatistics:
    """Summary counts reported alongside a plan."""
    total_files: int = 0
    already_correct: int = 0
    renames: int = 0
    duplicate_episodes: int = 0
    duplicate_files: int = 0
    unparsed: int = 0
    unresolved: int = 0


@dataclass
class ApplyResult:
    """Represents the outcome of applying one operation."""
    original_path: str
    new_path: str
    success: bool
    error: str | None = None
    skipped: bool = False
    skip_reason: str | None = None
    operation: Operation | None = None


@dataclass
class ExecutionSummary:
    """Totals for one executed plan."""
    results: list[ApplyResult] = field(default_factory=list)
    folders_created: int = 0

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.success and not r.skipped)

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.results if r.success and r.skipped)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.success)
