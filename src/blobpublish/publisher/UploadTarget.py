from dataclasses import dataclass

from blobpublish.errors import ConfigurationError

LONG_CACHE_CONTROL = "public, max-age=31536000"
NO_CACHE_CONTROL = "public, max-age=0"


@dataclass(frozen=True)
class UploadTarget:
    """
    Where and how one publish run stores its files.

    bucket_name names the bucket (an Azure container, or a directory for file:// stores),
    destination_prefix is prepended to every relative path to form the remote key.
    """
    bucket_name: str
    destination_prefix: str = ""
    public: bool = False
    gzip: bool = False
    cacheable: bool = True  # False for "latest" copies that must never be served stale

    def __post_init__(self) -> None:
        if not self.bucket_name or not self.bucket_name.strip():
            raise ConfigurationError("Missing required bucket name")

    @property
    def cache_control(self) -> str:
        return LONG_CACHE_CONTROL if self.cacheable else NO_CACHE_CONTROL

    def remote_key(self, relative_path: str) -> str:
        """ Join the destination prefix and a relative path with '/' separators """
        prefix = self.destination_prefix.strip("/")
        relative_path = relative_path.replace("\\", "/").lstrip("/")
        if not prefix:
            return relative_path
        return f"{prefix}/{relative_path}"
