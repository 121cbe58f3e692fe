import logging
import re
import shutil
from datetime import datetime
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from blobpublish.errors import FilesystemError

log = logging.getLogger()

TIMESTAMP_FORMAT = "%Y-%m-%d-%H-%M-%S"


def _slug(url_or_name: str) -> str:
    """ Use the hostname for urls, otherwise the name itself with unsafe characters replaced """
    parsed = urlparse(url_or_name)
    name = parsed.hostname if parsed.scheme and parsed.hostname else url_or_name
    return re.sub(r"[^A-Za-z0-9._-]+", "_", name).strip("_") or "result"


class ResultStorageManager:
    """Knows where a run writes its result files and owns their removal."""

    def __init__(self, base_dir: Path, storage_prefix: str) -> None:
        self.base_dir = Path(base_dir)
        self.storage_prefix = storage_prefix

    @classmethod
    def from_output_folder(cls, output_folder: Path, url_or_name: str, timestamp: Optional[datetime] = None) -> "ResultStorageManager":
        """ Results of a run go to <output_folder>/<slug>/<timestamp>, the same path is used as prefix in the bucket """
        slug = _slug(url_or_name)
        stamp = (timestamp or datetime.now()).strftime(TIMESTAMP_FORMAT)
        return cls(Path(output_folder) / slug / stamp, f"{slug}/{stamp}")

    @classmethod
    def from_result_directory(cls, base_dir: Path) -> "ResultStorageManager":
        """ For an existing result directory the prefix is <parent name>/<directory name> """
        base_dir = Path(base_dir).resolve()
        return cls(base_dir, f"{base_dir.parent.name}/{base_dir.name}")

    def get_base_dir(self) -> Path:
        return self.base_dir

    def get_storage_prefix(self) -> str:
        return self.storage_prefix

    def remove_base_dir(self) -> None:
        try:
            shutil.rmtree(self.base_dir)
        except OSError as e:
            raise FilesystemError(f"Could not remove {self.base_dir}: {e}") from e

        log.debug(f"Removed local files and directory {self.base_dir}")
