import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class UploadOptions:
    """Per object settings handed to a bucket client together with the file."""
    public: bool = False
    gzip: bool = False
    cache_control: Optional[str] = None
    validation: Optional[str] = "md5"  # checksum verified by the store, None disables it
    resumable: bool = False

    @staticmethod
    def content_type_for(path: Path) -> str:
        guessed, _ = mimetypes.guess_type(path.name)
        return guessed or "application/octet-stream"
