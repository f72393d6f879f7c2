from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from repo_copy.workspace import (
    CopyError,
    CopyOptions,
    CopyRequest,
    check_destination,
    copy_subdirectory,
    scratch_workspace,
)


def make_clone(base: Path) -> Path:
    clone = base / "clone"
    package = clone / "internal" / "fetch"
    (package / "sub").mkdir(parents=True)
    (package / "fetch.go").write_text("package fetch\n")
    (package / "sub" / "sub.go").write_text("package sub\n")
    return clone


def test_copy_request_three_argument_form_reuses_directory() -> None:
    request = CopyRequest.from_positionals(["metrics", "pkgsite", "internal/fetch"])

    assert request.new_repo == "metrics"
    assert request.old_repo == "pkgsite"
    assert request.new_dir == request.old_dir == "internal/fetch"
    assert request.relocate is False


def test_copy_request_four_argument_form_relocates() -> None:
    request = CopyRequest.from_positionals(
        ["metrics", "third_party/fetch", "pkgsite", "internal/fetch/"]
    )

    assert request.new_dir == "third_party/fetch"
    assert request.old_dir == "internal/fetch"
    assert request.relocate is True


@pytest.mark.parametrize("values", [[], ["metrics"], ["a", "b", "c", "d", "e"]])
def test_copy_request_rejects_wrong_argument_count(values: list[str]) -> None:
    with pytest.raises(ValueError):
        CopyRequest.from_positionals(values)


def test_copy_request_rejects_empty_names() -> None:
    with pytest.raises(ValueError):
        CopyRequest("metrics", "/", "pkgsite", "internal/fetch")


def test_copy_options_destination_is_under_root(tmp_path: Path) -> None:
    options = CopyOptions(dest_root=tmp_path)
    request = CopyRequest("metrics", "internal/fetch", "pkgsite", "internal/fetch")

    assert options.destination_for(request) == tmp_path / "internal" / "fetch"
    assert options.extensions == frozenset({".go"})


def test_scratch_workspace_is_removed_on_exit() -> None:
    with scratch_workspace() as scratch:
        (scratch / "file.txt").write_text("data")
        assert scratch.is_dir()
    assert not scratch.exists()


def test_scratch_workspace_is_removed_on_error() -> None:
    with pytest.raises(RuntimeError):
        with scratch_workspace() as scratch:
            (scratch / "file.txt").write_text("data")
            raise RuntimeError("boom")
    assert not scratch.exists()


def test_copy_subdirectory_copies_tree(tmp_path: Path) -> None:
    clone = make_clone(tmp_path)
    destination = tmp_path / "dest" / "internal" / "fetch"

    copy_subdirectory(clone, "internal/fetch", destination)

    assert (destination / "fetch.go").read_text() == "package fetch\n"
    assert (destination / "sub" / "sub.go").read_text() == "package sub\n"


def test_copy_subdirectory_missing_source(tmp_path: Path) -> None:
    clone = make_clone(tmp_path)

    with pytest.raises(CopyError, match="not found in clone"):
        copy_subdirectory(clone, "internal/missing", tmp_path / "dest")

    assert not (tmp_path / "dest").exists()


def test_copy_subdirectory_refuses_existing_destination(tmp_path: Path) -> None:
    clone = make_clone(tmp_path)
    destination = tmp_path / "dest"
    destination.mkdir()
    (destination / "keep.go").write_text("package keep\n")

    with pytest.raises(CopyError, match="already exists"):
        copy_subdirectory(clone, "internal/fetch", destination)

    assert (destination / "keep.go").exists()


def test_copy_subdirectory_force_replaces_destination(tmp_path: Path) -> None:
    clone = make_clone(tmp_path)
    destination = tmp_path / "dest"
    destination.mkdir()
    (destination / "stale.go").write_text("package stale\n")

    copy_subdirectory(clone, "internal/fetch", destination, force=True)

    assert not (destination / "stale.go").exists()
    assert (destination / "fetch.go").exists()


def test_scratch_workspace_uses_prefix_under_tempdir(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(tempfile, "tempdir", str(tmp_path))

    with scratch_workspace(prefix="go_") as scratch:
        assert scratch.parent == tmp_path
        assert scratch.name.startswith("go_")
    assert list(tmp_path.iterdir()) == []


def test_check_destination(tmp_path: Path) -> None:
    check_destination(tmp_path / "missing")

    existing = tmp_path / "existing"
    existing.mkdir()
    with pytest.raises(CopyError, match="already exists"):
        check_destination(existing)
    check_destination(existing, force=True)

    stray = tmp_path / "stray.go"
    stray.write_text("package stray\n")
    with pytest.raises(CopyError, match="not a directory"):
        check_destination(stray, force=True)
