from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

from .annotate import COMMENT_MARKERS
from .copier import copy_package
from .remote import DEFAULT_BASE_URL, DEFAULT_BRANCH, DEFAULT_MODULE_ROOT, RemoteSpec
from .reporting import summarize_cli, write_markdown_report
from .validation import DEFAULT_TIMEOUT, build_http_client
from .workspace import (
    DEFAULT_EXTENSIONS,
    AnnotationError,
    CopyOptions,
    CopyRequest,
    RemoteQueryError,
    RepoCopyError,
)

DESCRIPTION = """\
Copy a package inside a Go repo into the current repo.

  new-repo: name of the current working repo, for example, metrics
  new-dir:  directory to copy into (4-argument form only)
  old-repo: name of the repo to copy from, for example, pkgsite
  old-dir:  directory inside the repo to copy from, for example, internal/fetch

With three arguments the same directory name is used on both sides.
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="copy",
        usage=(
            "%(prog)s [options] new-repo new-dir old-repo old-dir\n"
            "       %(prog)s [options] new-repo old-repo dir"
        ),
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("positionals", nargs="*", metavar="ARG", help=argparse.SUPPRESS)
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    parser.add_argument(
        "--dest-root",
        type=Path,
        help="Root of the destination repo (default: the current directory).",
    )
    parser.add_argument(
        "--base-url",
        default=DEFAULT_BASE_URL,
        help=f"Host serving the source repositories (default {DEFAULT_BASE_URL}).",
    )
    parser.add_argument(
        "--clone-base",
        help="Clone from this host or directory instead of --base-url.",
    )
    parser.add_argument(
        "--module-root",
        default=DEFAULT_MODULE_ROOT,
        help=f"Import path prefix shared by the repositories (default {DEFAULT_MODULE_ROOT}).",
    )
    parser.add_argument(
        "--branch",
        default=DEFAULT_BRANCH,
        help=f"Branch to copy from (default {DEFAULT_BRANCH}).",
    )
    parser.add_argument(
        "--ext",
        dest="extensions",
        action="append",
        type=_extension,
        help="File extension to annotate (repeatable, default .go).",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Replace the destination directory if it already exists.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate and resolve the commit without copying anything.",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help=f"HTTP timeout in seconds for the existence check (default {DEFAULT_TIMEOUT:g}).",
    )
    parser.add_argument(
        "--report",
        type=Path,
        help="Write a Markdown report of the copy to this path.",
    )
    return parser


def _extension(value: str) -> str:
    ext = value if value.startswith(".") else f".{value}"
    if ext not in COMMENT_MARKERS:
        raise argparse.ArgumentTypeError(
            f"unsupported extension {value!r} (choose from {', '.join(sorted(COMMENT_MARKERS))})"
        )
    return ext


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def run(args: argparse.Namespace) -> int:
    configure_logging(args.verbose)
    logging.debug("Arguments: %s", args)

    request = args.request
    remote = RemoteSpec(
        base_url=args.base_url,
        module_root=args.module_root,
        branch=args.branch,
        clone_base=args.clone_base,
    )
    dest_root = (args.dest_root or Path.cwd()).expanduser().resolve()
    options = CopyOptions(
        dest_root=dest_root,
        extensions=frozenset(args.extensions or DEFAULT_EXTENSIONS),
        force=args.force,
        dry_run=args.dry_run,
    )

    with build_http_client(args.timeout) as client:
        result = copy_package(request, remote, options, client=client)

    logging.info("\n%s", summarize_cli(result))
    if args.report:
        write_markdown_report(args.report.expanduser().resolve(), result)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_intermixed_args(argv)
    try:
        args.request = CopyRequest.from_positionals(args.positionals)
    except ValueError as exc:
        parser.error(str(exc))
    try:
        return run(args)
    except RemoteQueryError as exc:
        logging.critical("%s", exc)
        return 3
    except AnnotationError as exc:
        logging.error("%s", exc)
        for path in exc.edited:
            logging.error("Already rewritten: %s", path)
        return 2
    except RepoCopyError as exc:
        logging.error("%s", exc)
        return 2
    except KeyboardInterrupt:
        logging.error("Interrupted")
        return 130


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
