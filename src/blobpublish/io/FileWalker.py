import logging
import os
from pathlib import Path
from typing import Callable, Generator, Sequence

from blobpublish.errors import FilesystemError

from .FileEntry import FileEntry

log = logging.getLogger()

# Receives the path and whether it is a directory, returns True to skip the entry
ExcludePredicate = Callable[[Path, bool], bool]


def ignore_directories(path: Path, is_dir: bool) -> bool:
    return is_dir


def list_files(root: Path, exclude: Sequence[ExcludePredicate] = ()) -> Generator[FileEntry, None, None]:
    """
    Walk root and yield every regular file below it.

    Directories are never yielded. An excluded directory is not descended into, so passing
    ignore_directories limits the listing to the immediate files of root.
    """
    root = Path(root)
    if not root.is_dir():
        raise FilesystemError(f"The provided path '{root}' is not a valid directory.")

    def _excluded(path: Path, is_dir: bool) -> bool:
        return any(predicate(path, is_dir) for predicate in exclude)

    def _raise(error: OSError) -> None:
        raise FilesystemError(f"Could not list '{error.filename}': {error.strerror}") from error

    for current, dirs, files in os.walk(root, onerror=_raise):
        current_path = Path(current)
        dirs[:] = [name for name in dirs if not _excluded(current_path / name, True)]

        for name in sorted(files):
            full_path = current_path / name
            if not full_path.is_file():
                log.debug(f"Will not upload {full_path} since it is not a file")
                continue

            if _excluded(full_path, False):
                continue

            yield FileEntry(full_path, full_path.relative_to(root).as_posix())
