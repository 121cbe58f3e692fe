import gzip
import hashlib
import logging
import os
import shutil
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from blobpublish.errors import ConfigurationError

from .AbstractObjectStore import AbstractBucket, AbstractObjectStore
from .UploadOptions import UploadOptions

log = logging.getLogger()


def _md5(path: Path, compressed: bool = False) -> str:
    """ md5 of the file content, gzip files are hashed after decompressing """
    digest = hashlib.md5()
    opener = gzip.open if compressed else open
    with opener(path, "rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            digest.update(chunk)
    return digest.hexdigest()


class FileBucket(AbstractBucket):
    """A directory on the local filesystem, remote keys become relative paths below it."""

    def __init__(self, root: Path) -> None:
        self.root = root

    @property
    def name(self) -> str:
        return self.root.name

    def upload(self, local_path: Path, remote_key: str, options: UploadOptions) -> None:
        destination = self.root / remote_key
        os.makedirs(destination.parent, exist_ok=True)
        log.info(f"Uploading {local_path} to {destination}")

        if options.gzip:
            with open(local_path, "rb") as source, gzip.open(destination, "wb") as target:
                shutil.copyfileobj(source, target)
        else:
            shutil.copy(local_path, destination)

        if options.validation == "md5" and _md5(local_path) != _md5(destination, compressed=options.gzip):
            raise IOError(f"Checksum mismatch after copying {local_path} to {destination}")


class FileObjectStore(AbstractObjectStore):
    def __init__(self, root: Path) -> None:
        self.root = root

    @staticmethod
    def _get_local_path(uri: str) -> Path:
        parsed_uri = urlparse(uri)
        return Path(parsed_uri.netloc + parsed_uri.path)

    @classmethod
    def from_config(cls, endpoint: Optional[str], key_path: Optional[Path]) -> "FileObjectStore":
        if not endpoint:
            raise ConfigurationError("A file:// endpoint needs a directory, eg file:///tmp/buckets")
        return cls(cls._get_local_path(endpoint))

    def bucket(self, name: str) -> FileBucket:
        return FileBucket(self.root / name)
