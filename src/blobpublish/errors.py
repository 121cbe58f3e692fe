from typing import Optional


class PublishError(Exception):
    """Base class for everything the publisher raises on purpose."""


class ConfigurationError(PublishError, ValueError):
    """Required configuration is missing or invalid, raised before any work starts."""


class TransferError(PublishError):
    """A single file could not be uploaded. Recorded in the report, never raised per file."""

    def __init__(self, local_path: str, remote_key: str, cause: Optional[BaseException] = None) -> None:
        self.local_path = local_path
        self.remote_key = remote_key
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Failed to upload {local_path} to {remote_key}{detail}")


class PublishFailedError(PublishError):
    """One or more files of a publish run failed to upload."""

    def __init__(self, failures: list[TransferError], total: int) -> None:
        self.failures = failures
        self.total = total
        super().__init__(f"{len(failures)} of {total} uploads failed")


class FilesystemError(PublishError, OSError):
    """Enumerating or removing local result files failed."""
