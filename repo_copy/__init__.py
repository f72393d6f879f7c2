"""
repo_copy package

Provides the CLI entrypoint (`python -m repo_copy`) that vendors a directory
of one repository into another, rewriting internal imports and stamping each
copied file with the commit it came from.
"""

from .cli import main

__all__ = ["main"]
