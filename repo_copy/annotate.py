from __future__ import annotations

import logging
import os
import re
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Iterator, List

from .remote import RemoteSpec, new_import_prefix, old_import_prefix
from .workspace import AnnotationError, CopyRequest

COMMENT_MARKERS: Dict[str, str] = {
    ".go": "//",
    ".proto": "//",
    ".c": "//",
    ".h": "//",
    ".cc": "//",
    ".js": "//",
    ".ts": "//",
    ".py": "#",
    ".sh": "#",
    ".yaml": "#",
    ".yml": "#",
}

TEMP_SUFFIX = "_tmp"


@dataclass
class FileEdit:
    path: str
    rewritten_lines: int = 0
    internal_packages: List[str] = field(default_factory=list)


def provenance_header(url: str, marker: str = "//") -> List[str]:
    return [
        f"{marker} DO NOT EDIT. This file was copied from\n",
        f"{marker} {url}\n",
        "\n",
    ]


def rewrite_line(line: str, old_prefix: str, new_prefix: str) -> str:
    return line.replace(old_prefix, new_prefix)


def referenced_packages(line: str, old_prefix: str) -> List[str]:
    quoted = re.findall(r'"([^"]*%s[^"]*)"' % re.escape(old_prefix), line)
    if quoted:
        return quoted
    fields = line.split()
    return fields[:1]


def edit_file(
    path: Path,
    request: CopyRequest,
    remote: RemoteSpec,
    commit: str,
) -> FileEdit:
    """Prepend the provenance header to ``path`` and rewrite internal imports.

    The new content goes to a sibling ``<name>_tmp`` file that replaces the
    original only once it is fully written. Bytes that are not valid UTF-8
    pass through unchanged and the original file mode is kept.
    """
    logging.info("Editing: %s", path)
    marker = COMMENT_MARKERS.get(path.suffix, "//")
    old_prefix = old_import_prefix(remote, request.old_repo)
    new_prefix = new_import_prefix(
        remote, request.new_repo, request.new_dir, relocate=request.relocate
    )
    url = remote.commit_url(request.old_repo, request.old_dir, commit)
    edit = FileEdit(path=str(path))
    packages: Dict[str, None] = {}

    tmp_path = path.with_name(path.name + TEMP_SUFFIX)
    try:
        with path.open(
            "r", encoding="utf-8", errors="surrogateescape", newline=""
        ) as reader, tmp_path.open(
            "w", encoding="utf-8", errors="surrogateescape", newline=""
        ) as writer:
            writer.writelines(provenance_header(url, marker))
            for line in reader:
                if old_prefix in line:
                    for package in referenced_packages(line, old_prefix):
                        packages.setdefault(package, None)
                    line = rewrite_line(line, old_prefix, new_prefix)
                    edit.rewritten_lines += 1
                    logging.debug("%s", line.rstrip("\r\n"))
                writer.write(line)
        shutil.copymode(path, tmp_path)
        os.replace(tmp_path, path)
    except OSError as exc:
        if tmp_path.is_file():
            tmp_path.unlink()
        raise AnnotationError(f"Editing {path} failed: {exc}") from exc

    edit.internal_packages = list(packages)
    return edit


def iter_source_files(root: Path, extensions: Iterable[str]) -> Iterator[Path]:
    wanted = set(extensions)
    for path in sorted(root.rglob("*")):
        if path.is_symlink() or not path.is_file():
            continue
        if path.suffix in wanted:
            yield path


def annotate_tree(
    root: Path,
    request: CopyRequest,
    remote: RemoteSpec,
    commit: str,
    extensions: Iterable[str],
) -> List[FileEdit]:
    edits: List[FileEdit] = []
    for path in iter_source_files(root, extensions):
        try:
            edits.append(edit_file(path, request, remote, commit))
        except AnnotationError as exc:
            done = [Path(edit.path) for edit in edits]
            if done:
                logging.warning(
                    "%d file(s) were already rewritten and are left in place", len(done)
                )
            raise AnnotationError(str(exc), edited=done) from exc
    return edits
