"""Version assignment for episode slots that hold more than one file.

Members of a duplicate group are sorted deterministically and numbered;
version 1 keeps the plain canonical name and later versions get ``.v2``,
``.v3``...  In TEMPORARY mode every file that has to move first hops to a
disposable ``.zK`` name and only then to its final name, so no file is
ever renamed onto a name another member of the same group still holds.
"""
import logging
import re
from typing import Iterable

from .formatter import insert_version, temporary_suffix, version_of, version_suffix
from .models import FileState, Operation, OperationKind, VersioningConfig, VersioningMode

log = logging.getLogger(__name__)

_DIGITS = re.compile(r'(\d+)')


def natural_key(name: str) -> list:
    """Sort key comparing digit runs numerically ("v2" before "v10")."""
    return [
        (0, int(part), "") if part.isdigit() else (1, 0, part)
        for part in _DIGITS.split(name)
        if part
    ]


def current_version(state: FileState) -> int | None:
    """
    Version a file already carries under its slot's canonical name.

    Returns 1 for the plain canonical name, N for ``.vN``/``.zN`` and None
    when the file is not named after the canonical name at all.
    """
    return version_of(state.file.name, state.target_name)


def sort_members(group: list[FileState]) -> list[FileState]:
    """
    Order duplicate-group members deterministically.

    Files already carrying the canonical name come first, in the order of
    the version they hold, so an organized folder keeps its numbering.
    Everything else follows in natural filename order.
    """
    def key(state: FileState):
        version = current_version(state)
        organized = 0 if version is not None else 1
        return (organized, version or 0, natural_key(state.file.name), str(state.file.path))

    return sorted(group, key=key)


def existing_versions(target_name: str, existing_names: Iterable[str]) -> list[int]:
    """Versions of *target_name* already present among *existing_names*."""
    versions = [version_of(name, target_name) for name in existing_names]
    return [v for v in versions if v is not None]


def assign_versions(
    group: list[FileState],
    config: VersioningConfig | None = None,
    existing_names: Iterable[str] = (),
) -> list[Operation]:
    """
    Produce the operations that give every member of a slot a unique name.

    Args:
        group: FileStates sharing one episode slot
        config: Versioning mode (TEMPORARY unless told otherwise)
        existing_names: Filenames in the target folder that are not part
                        of this batch; numbering continues after the
                        highest version found there

    Returns:
        Operations in application order: SKIPs, then (TEMPORARY mode)
        every first hop, then every final rename
    """
    config = config or VersioningConfig()
    if not group:
        return []

    members = sort_members(group)
    slot = members[0].slot
    target_name = members[0].target_name
    taken = existing_versions(target_name, existing_names)
    start = max(taken, default=0) + 1
    if taken:
        log.info(
            f"Slot S{slot[0]:02d}E{slot[1]:02d}: versions up to {max(taken)} "
            f"already present, continuing at {start}"
        )

    skips: list[Operation] = []
    hops: list[Operation] = []
    finals: list[Operation] = []

    for position, state in enumerate(members, 1):
        version = start + position - 1
        final_name = insert_version(state.target_name, version_suffix(version))

        if state.file.path == state.target_folder / final_name:
            skips.append(Operation(
                kind=OperationKind.SKIP,
                source_path=state.file.path,
                target_folder=state.target_folder,
                new_file_name=final_name,
                slot=slot,
                version=version,
            ))
            continue

        source_path = state.file.path
        if config.mode is VersioningMode.TEMPORARY:
            temp_name = insert_version(state.target_name, temporary_suffix(position))
            hops.append(Operation(
                kind=OperationKind.VERSIONED_RENAME,
                source_path=source_path,
                target_folder=state.target_folder,
                new_file_name=temp_name,
                slot=slot,
                version=version,
                temporary=True,
            ))
            source_path = state.target_folder / temp_name

        finals.append(Operation(
            kind=OperationKind.VERSIONED_RENAME,
            source_path=source_path,
            target_folder=state.target_folder,
            new_file_name=final_name,
            slot=slot,
            version=version,
        ))

    return skips + hops + finals
