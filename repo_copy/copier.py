from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import httpx

from .annotate import FileEdit, annotate_tree
from .gitutils import clone_repo, resolve_branch_commit
from .remote import RemoteSpec
from .validation import validate_request
from .workspace import (
    CopyOptions,
    CopyRequest,
    check_destination,
    copy_subdirectory,
    scratch_workspace,
)


@dataclass
class CopyResult:
    request: CopyRequest
    commit: str
    destination: str
    source_url: str
    edits: List[FileEdit] = field(default_factory=list)
    dry_run: bool = False

    @property
    def rewritten_lines(self) -> int:
        return sum(edit.rewritten_lines for edit in self.edits)

    @property
    def internal_packages(self) -> List[str]:
        packages = set()
        for edit in self.edits:
            packages.update(edit.internal_packages)
        return sorted(packages)


def copy_package(
    request: CopyRequest,
    remote: RemoteSpec,
    options: CopyOptions,
    *,
    client: Optional[httpx.Client] = None,
) -> CopyResult:
    """Vendor ``request.old_dir`` of ``request.old_repo`` into the destination tree.

    Runs validate, clone, copy, commit resolution and annotation in that
    order. Any failure raises a RepoCopyError subclass; the scratch clone is
    removed either way.
    """
    validate_request(remote, request.old_repo, request.old_dir, client=client)
    destination = options.destination_for(request)
    check_destination(destination, force=options.force)
    clone_url = remote.clone_url(request.old_repo)

    if options.dry_run:
        commit = resolve_branch_commit(clone_url, remote.branch)
        logging.info(
            "Dry run: would copy %s/%s@%s into %s",
            request.old_repo,
            request.old_dir,
            commit,
            destination,
        )
        return CopyResult(
            request=request,
            commit=commit,
            destination=str(destination),
            source_url=remote.commit_url(request.old_repo, request.old_dir, commit),
            dry_run=True,
        )

    with scratch_workspace() as scratch:
        clone_root = scratch / "clone"
        clone_repo(clone_url, clone_root, branch=remote.branch)
        copy_subdirectory(clone_root, request.old_dir, destination, force=options.force)

        commit = resolve_branch_commit(clone_url, remote.branch)
        logging.info("Source commit: %s", commit)
        edits = annotate_tree(destination, request, remote, commit, options.extensions)

    logging.info("Edited %d file(s) under %s", len(edits), destination)
    return CopyResult(
        request=request,
        commit=commit,
        destination=str(destination),
        source_url=remote.commit_url(request.old_repo, request.old_dir, commit),
        edits=edits,
    )

