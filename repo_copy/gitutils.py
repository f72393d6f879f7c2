from __future__ import annotations

import logging
import re
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence, Union

from .workspace import ExternalCommandError, RemoteQueryError

SHORT_COMMIT_LENGTH = 8

_HASH_RE = re.compile(r"^[0-9a-f]+$")


def run_command(args: Sequence[str]) -> subprocess.CompletedProcess:
    logging.info("%s", " ".join(args))
    return subprocess.run(
        list(args),
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
    )


def clone_repo(
    source: Union[Path, str],
    destination: Path,
    *,
    branch: Optional[str] = None,
) -> None:
    args = ["git", "clone"]
    if branch:
        args.extend(["--branch", branch])
    args.extend([str(source), str(destination)])
    result = run_command(args)
    if result.returncode != 0:
        raise ExternalCommandError(args, result.returncode, result.stderr)


def ls_remote(url: Union[Path, str], patterns: Sequence[str] = ()) -> List[tuple[str, str]]:
    args = ["git", "ls-remote", str(url), *patterns]
    result = run_command(args)
    logging.debug("%s", result.stdout.strip())
    if result.returncode != 0:
        raise RemoteQueryError(
            f"{' '.join(args)} failed: {result.stderr.strip() or result.returncode}"
        )
    refs: List[tuple[str, str]] = []
    for line in result.stdout.splitlines():
        if not line.strip():
            continue
        parts = line.split()
        if len(parts) != 2:
            raise RemoteQueryError(f"Unexpected output: {result.stdout!r}")
        refs.append((parts[0], parts[1]))
    return refs


def resolve_branch_commit(url: Union[Path, str], branch: str) -> str:
    """Return the short hash of ``branch`` on the remote at ``url``."""
    ref = f"refs/heads/{branch}"
    refs = ls_remote(url, [ref])
    if len(refs) != 1:
        raise RemoteQueryError(
            f"Expected exactly one ref for {ref} at {url}, got {len(refs)}"
        )
    commit, _ = refs[0]
    if len(commit) < SHORT_COMMIT_LENGTH or not _HASH_RE.match(commit):
        raise RemoteQueryError(f"Unexpected commit hash for {ref} at {url}: {commit!r}")
    return commit[:SHORT_COMMIT_LENGTH]
