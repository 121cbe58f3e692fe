from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from .UploadOptions import UploadOptions


class AbstractBucket(ABC):
    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    def upload(self, local_path: Path, remote_key: str, options: UploadOptions) -> None:
        """ Store local_path under remote_key, raise on any failure """
        pass


class AbstractObjectStore(ABC):
    @classmethod
    @abstractmethod
    def from_config(cls, endpoint: Optional[str], key_path: Optional[Path]) -> "AbstractObjectStore":
        pass

    @abstractmethod
    def bucket(self, name: str) -> AbstractBucket:
        pass
