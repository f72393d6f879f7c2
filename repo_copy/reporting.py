from __future__ import annotations

import logging
from pathlib import Path

from .copier import CopyResult
from .workspace import RepoCopyError


def summarize_cli(result: CopyResult) -> str:
    request = result.request
    title = "Copy Summary (dry-run)" if result.dry_run else "Copy Summary"
    rows = [
        ("Source", f"{request.old_repo}/{request.old_dir}"),
        ("Destination", result.destination),
        ("Commit", result.commit),
        ("Files edited", str(len(result.edits))),
        ("Lines rewritten", str(result.rewritten_lines)),
        ("Internal packages", str(len(result.internal_packages))),
    ]
    width = max(len(label) for label, _ in rows)
    lines = [title, "=" * len(title)]
    for label, value in rows:
        lines.append(f"{label:<{width}} : {value}")
    for package in result.internal_packages:
        lines.append(f"- {package}")
    return "\n".join(lines)


def write_markdown_report(output_path: Path, result: CopyResult) -> None:
    request = result.request
    lines = ["# Repo Copy Report", ""]
    lines.append(f"- Source: `{request.old_repo}/{request.old_dir}`")
    lines.append(f"- Provenance: {result.source_url}")
    lines.append(f"- Destination: `{result.destination}`")
    lines.append(f"- Commit: `{result.commit}`")
    lines.append("")

    lines.append("## Edited Files")
    lines.append("")
    if not result.edits:
        lines.append("_No files edited._")
    for edit in result.edits:
        lines.append(f"- `{edit.path}` ({edit.rewritten_lines} line(s) rewritten)")
    lines.append("")

    if result.internal_packages:
        lines.append("## Internal Packages Referenced")
        lines.append("")
        lines.append("Imported by the copied code; copy any that live outside the destination.")
        lines.append("")
        for package in result.internal_packages:
            lines.append(f"- `{package}`")
        lines.append("")

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text("\n".join(lines).rstrip() + "\n")
    except OSError as exc:
        raise RepoCopyError(f"Writing report {output_path} failed: {exc}") from exc
    logging.info("Wrote report to %s", output_path)
