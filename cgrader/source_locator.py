"""
Source file discovery inside a submission directory.

Walks the submission tree depth-first and returns the first file carrying
the source extension.
"""

import os
from pathlib import Path

from .config import SOURCE_EXTENSION


def locate_source(root: Path, extension: str = SOURCE_EXTENSION) -> Path | None:
    """
    Find the source file to grade inside a submission directory.

    Entries of each directory are visited in name order. A matching regular
    file is returned as soon as it is seen; a subdirectory is searched
    completely before the remaining entries of its parent. Symbolic links are
    neither matched nor followed, and `os.scandir` never yields `.` or `..`.

    Args:
        root: Submission directory to search.
        extension: File name suffix of eligible source files.

    Returns:
        Path to the first eligible file, or None if there is none.

    Raises:
        OSError: If `root` or one of its subdirectories cannot be listed.
    """
    pending = [iter(_list_entries(root))]

    while pending:
        entry = next(pending[-1], None)
        if entry is None:
            pending.pop()
            continue

        if entry.is_file(follow_symlinks=False) and entry.name.endswith(extension):
            return Path(entry.path)

        if entry.is_dir(follow_symlinks=False):
            pending.append(iter(_list_entries(Path(entry.path))))

    return None


def _list_entries(directory: Path) -> list[os.DirEntry]:
    with os.scandir(directory) as it:
        return sorted(it, key=lambda entry: entry.name)
