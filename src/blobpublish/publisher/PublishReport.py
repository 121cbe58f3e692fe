from dataclasses import dataclass, field
from typing import Optional

from blobpublish.errors import PublishFailedError, TransferError


@dataclass
class UploadResult:
    """Outcome of a single file upload, either succeeded with its remote key or failed with the error."""
    local_path: str
    remote_key: str
    success: bool
    error: Optional[TransferError] = None

    @classmethod
    def succeeded(cls, local_path: str, remote_key: str) -> "UploadResult":
        return cls(local_path=local_path, remote_key=remote_key, success=True)

    @classmethod
    def failed(cls, error: TransferError) -> "UploadResult":
        return cls(local_path=error.local_path, remote_key=error.remote_key, success=False, error=error)


@dataclass
class PublishReport:
    """All upload outcomes of one publish call, the caller decides on cleanup with it."""
    bucket_name: str
    results: list[UploadResult] = field(default_factory=list)

    @property
    def succeeded(self) -> list[UploadResult]:
        return [result for result in self.results if result.success]

    @property
    def failed(self) -> list[UploadResult]:
        return [result for result in self.results if not result.success]

    @property
    def ok(self) -> bool:
        """ True when no upload failed, an empty run is ok as well """
        return not self.failed

    @property
    def remote_keys(self) -> set[str]:
        return {result.remote_key for result in self.succeeded}

    def raise_for_failures(self) -> None:
        if self.ok:
            return

        failures = [result.error for result in self.failed if result.error is not None]
        raise PublishFailedError(failures, len(self.results))
