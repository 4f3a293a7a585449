"""
File filtering for the spreadlint engine.

Vendor, build and tooling directories never contain sources worth linting;
paths under them are skipped before parsing. Callers pass paths relative to
the directory being scanned, so a checkout that itself lives below a
directory named `build` or `dist` is still linted.

Usage:
    from spreadlint.file_filter import is_excluded_path

    if is_excluded_path(os.path.relpath(path, root), extra_dirs=config.exclude_dirs):
        continue
"""

import os
from typing import FrozenSet, Iterable


EXCLUDED_DIRS: FrozenSet[str] = frozenset([
    # Package managers / dependencies
    "node_modules",
    "bower_components",
    "jspm_packages",
    "vendor",

    # Build output
    "dist",
    "build",
    "out",
    "coverage",
    ".next",
    ".nuxt",
    ".svelte-kit",

    # Version control
    ".git",
    ".svn",
    ".hg",

    # Editors and caches
    ".idea",
    ".vscode",
    ".cache",
    ".parcel-cache",
    ".turbo",
    "__snapshots__",
])

# Bundled or minified output is generated, not authored
GENERATED_SUFFIXES = (".min.js", ".bundle.js")


def is_excluded_path(file_path: str, extra_dirs: Iterable[str] = ()) -> bool:
    """True when any directory component of file_path is excluded."""
    excluded = EXCLUDED_DIRS | frozenset(extra_dirs)
    parts = os.path.normpath(file_path).split(os.sep)
    if any(part in excluded for part in parts[:-1]):
        return True
    return parts[-1].endswith(GENERATED_SUFFIXES)
