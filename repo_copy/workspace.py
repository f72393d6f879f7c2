from __future__ import annotations

import logging
import shutil
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Iterator, List, Sequence


class RepoCopyError(Exception):
    """Base exception for copy run errors."""


class NotFoundError(RepoCopyError):
    """The requested source path does not exist on the remote."""


class ExternalCommandError(RepoCopyError):
    def __init__(self, args: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.command = list(args)
        self.returncode = returncode
        self.stderr = stderr.strip()
        message = f"{' '.join(self.command)} exited with status {returncode}"
        if self.stderr:
            message += f": {self.stderr}"
        super().__init__(message)


class CopyError(RepoCopyError):
    """Copying the requested directory into the destination failed."""


class AnnotationError(RepoCopyError):
    def __init__(self, message: str, edited: Sequence[Path] = ()) -> None:
        super().__init__(message)
        self.edited: List[Path] = list(edited)


class RemoteQueryError(RepoCopyError):
    """The remote branch tip could not be resolved."""


DEFAULT_EXTENSIONS: FrozenSet[str] = frozenset({".go"})


@dataclass(frozen=True)
class CopyRequest:
    new_repo: str
    new_dir: str
    old_repo: str
    old_dir: str
    relocate: bool = False

    @classmethod
    def from_positionals(cls, values: Sequence[str]) -> "CopyRequest":
        if len(values) == 3:
            new_repo, old_repo, directory = values
            return cls(new_repo, directory, old_repo, directory)
        if len(values) == 4:
            new_repo, new_dir, old_repo, old_dir = values
            return cls(new_repo, new_dir, old_repo, old_dir, relocate=True)
        raise ValueError(f"expected 3 or 4 positional arguments, got {len(values)}")

    def __post_init__(self) -> None:
        for name in ("new_repo", "new_dir", "old_repo", "old_dir"):
            value = getattr(self, name).strip("/")
            if not value:
                raise ValueError(f"{name} must not be empty")
            object.__setattr__(self, name, value)


@dataclass(frozen=True)
class CopyOptions:
    dest_root: Path
    extensions: FrozenSet[str] = field(default=DEFAULT_EXTENSIONS)
    force: bool = False
    dry_run: bool = False

    def destination_for(self, request: CopyRequest) -> Path:
        return self.dest_root / request.new_dir


@contextmanager
def scratch_workspace(prefix: str = "go_") -> Iterator[Path]:
    with tempfile.TemporaryDirectory(prefix=prefix) as tmpdir:
        logging.debug("Created scratch workspace %s", tmpdir)
        yield Path(tmpdir)
    logging.debug("Removed scratch workspace %s", tmpdir)


def check_destination(destination: Path, *, force: bool = False) -> None:
    if not destination.exists():
        return
    if not force:
        raise CopyError(
            f"Destination already exists: {destination} (use --force to replace it)"
        )
    if not destination.is_dir():
        raise CopyError(f"Existing destination is not a directory: {destination}")


def copy_subdirectory(
    clone_root: Path,
    old_dir: str,
    destination: Path,
    *,
    force: bool = False,
) -> Path:
    source = clone_root / old_dir
    if not source.is_dir():
        raise CopyError(f"Directory {old_dir!r} not found in clone at {clone_root}")

    check_destination(destination, force=force)
    if destination.exists():
        logging.info("Removing existing destination %s", destination)
        shutil.rmtree(destination)

    logging.info("Copying %s -> %s", source, destination)
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copytree(source, destination, symlinks=True)
    except (OSError, shutil.Error) as exc:
        raise CopyError(f"Copying {source} to {destination} failed: {exc}") from exc
    return destination
