from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

DEFAULT_BASE_URL = "https://go.googlesource.com"
DEFAULT_MODULE_ROOT = "golang.org/x"
DEFAULT_BRANCH = "master"


@dataclass(frozen=True)
class RemoteSpec:
    """Where source repositories live and how their import paths are spelled.

    ``base_url`` is the browsable host used for the existence probe and the
    provenance header. ``clone_base`` defaults to the same host and only needs
    to be set when cloning from a mirror.
    """

    base_url: str = DEFAULT_BASE_URL
    module_root: str = DEFAULT_MODULE_ROOT
    branch: str = DEFAULT_BRANCH
    clone_base: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))
        object.__setattr__(self, "module_root", self.module_root.rstrip("/"))
        if self.clone_base:
            object.__setattr__(self, "clone_base", self.clone_base.rstrip("/"))

    def repo_url(self, repo: str) -> str:
        return f"{self.base_url}/{repo}"

    def clone_url(self, repo: str) -> str:
        return f"{self.clone_base or self.base_url}/{repo}"

    def head_url(self, repo: str, directory: str) -> str:
        return f"{self.repo_url(repo)}/+/refs/heads/{self.branch}/{directory}"

    def commit_url(self, repo: str, directory: str, commit: str) -> str:
        return f"{self.repo_url(repo)}/+/{commit}/{directory}"

    def import_path(self, suffix: str) -> str:
        return f"{self.module_root}/{suffix}"


def old_import_prefix(remote: RemoteSpec, old_repo: str) -> str:
    return remote.import_path(f"{old_repo}/internal")


def new_import_prefix(remote: RemoteSpec, new_repo: str, new_dir: str, *, relocate: bool) -> str:
    # The four-argument form nests the old internal tree under the new directory.
    if relocate:
        return remote.import_path(f"{new_repo}/{new_dir}")
    return remote.import_path(f"{new_repo}/internal")
