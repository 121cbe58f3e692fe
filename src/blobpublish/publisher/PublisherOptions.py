import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Optional

from blobpublish.errors import ConfigurationError

log = logging.getLogger()

# camelCase keys as they appear in run configuration files
OPTION_ALIASES = {
    "bucketName": "bucket_name",
    "bucketname": "bucket_name",
    "bucket": "bucket_name",
    "key": "key_path",
    "keyPath": "key_path",
    "path": "destination_path",
    "destinationPath": "destination_path",
    "removeLocalResult": "remove_local_result",
    "removeLocalResultAfterUpload": "remove_local_result",
    "copyLatestFilesToBase": "copy_latest_files_to_parent",
    "copyLatestFilesToParent": "copy_latest_files_to_parent",
    "maxWorkers": "max_workers",
}

BOOLEAN_OPTIONS = ("public", "gzip", "remove_local_result", "copy_latest_files_to_parent")


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


@dataclass
class PublisherOptions:
    """Configuration of the publisher, passed explicitly to everything that needs it."""
    bucket_name: Optional[str] = None
    key_path: Optional[Path] = None  # file holding the storage connection string
    endpoint: Optional[str] = None  # file:///dir, azure://https://account... or http://azurite
    destination_path: Optional[str] = None  # overrides the prefix of the result storage manager
    public: bool = False
    gzip: bool = False
    remove_local_result: bool = False
    copy_latest_files_to_parent: bool = False
    max_workers: int = 0  # 0 = use cpu count

    @classmethod
    def from_dict(cls, config: Mapping[str, Any]) -> "PublisherOptions":
        """
        Build options from a mapping, either the blob section itself or a run configuration
        containing a "blob" section. Accepts snake_case and camelCase keys.
        """
        section = config.get("blob", config)
        if not isinstance(section, Mapping):
            raise ConfigurationError("The blob configuration section must be a mapping")

        known = {f.name for f in fields(cls)}
        values: dict[str, Any] = {}
        for key, value in section.items():
            name = OPTION_ALIASES.get(key, key)
            if name not in known:
                log.warning(f"Ignoring unknown blob option {key}")
                continue
            values[name] = value

        for name in BOOLEAN_OPTIONS:
            if name in values:
                values[name] = _as_bool(values[name])

        if values.get("key_path") is not None:
            values["key_path"] = Path(values["key_path"])

        if "max_workers" in values:
            try:
                values["max_workers"] = int(values["max_workers"])
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"max_workers must be a number, got {values['max_workers']!r}") from e

        return cls(**values)

    def validate(self) -> None:
        if not self.bucket_name or not self.bucket_name.strip():
            raise ConfigurationError("Missing required option bucket_name for blob")

        if self.max_workers < 0:
            raise ConfigurationError(f"max_workers must be zero or positive, got {self.max_workers}")
