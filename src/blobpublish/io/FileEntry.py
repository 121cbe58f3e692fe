from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class FileEntry:
    """A regular file found below a publish root."""
    absolute_path: Path
    relative_path: str  # POSIX style, relative to the publish root
