import gzip
import logging
import os
import threading
from io import BytesIO
from pathlib import Path
from typing import Any, BinaryIO, Optional, Union

from azure.storage.blob import BlobServiceClient, ContainerClient, ContentSettings, PublicAccess

from blobpublish.errors import ConfigurationError

from .AbstractObjectStore import AbstractBucket, AbstractObjectStore
from .UploadOptions import UploadOptions

log = logging.getLogger()

CONNECTION_STRING_VARIABLE = "AZURE_STORAGE_CONNECTION_STRING"
PUBLIC_ACCESS_LEVELS = (PublicAccess.BLOB, PublicAccess.CONTAINER)


def _gzip_buffer(stream: BinaryIO) -> BytesIO:
    buffer = BytesIO()
    with gzip.GzipFile(fileobj=buffer, mode="wb") as compressed:
        compressed.write(stream.read())
    buffer.seek(0)
    return buffer


class AzureBucket(AbstractBucket):
    """A blob container, remote keys are blob names."""

    def __init__(self, container_client: ContainerClient) -> None:
        self.container_client = container_client
        self._access_policy: Optional[dict[str, Any]] = None
        self._warned_public_container = False
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return self.container_client.container_name

    def _load_access_policy(self) -> dict[str, Any]:
        """ Fetched once per bucket client, callers hold the lock """
        if self._access_policy is None:
            self._access_policy = self.container_client.get_container_access_policy()
        return self._access_policy

    def _ensure_public_read(self) -> None:
        """
        Azure has no per blob ACL, public read is granted on the container.
        Stored access policies are kept as they are.
        """
        with self._lock:
            policy = self._load_access_policy()
            if policy.get("public_access") in PUBLIC_ACCESS_LEVELS:
                return

            identifiers = {identifier.id: identifier.access_policy for identifier in policy.get("signed_identifiers") or []}
            log.info(f"Enabling anonymous blob read access on container {self.name}")
            self.container_client.set_container_access_policy(signed_identifiers=identifiers, public_access=PublicAccess.BLOB)
            self._access_policy = {**policy, "public_access": PublicAccess.BLOB}

    def _warn_if_container_public(self) -> None:
        with self._lock:
            if self._warned_public_container:
                return

            if self._load_access_policy().get("public_access") in PUBLIC_ACCESS_LEVELS:
                log.warning(f"Container {self.name} allows anonymous read access, files uploaded as private are publicly readable")
                self._warned_public_container = True

    def upload(self, local_path: Path, remote_key: str, options: UploadOptions) -> None:
        if options.public:
            self._ensure_public_read()
        else:
            self._warn_if_container_public()

        content_settings = ContentSettings(content_type=options.content_type_for(local_path),
                                           content_encoding="gzip" if options.gzip else None,
                                           cache_control=options.cache_control)

        blob_client = self.container_client.get_blob_client(remote_key)
        log.info(f"Uploading {local_path} to {self.name}/{remote_key}")

        with open(local_path, "rb") as f:
            data: Union[BinaryIO, BytesIO] = _gzip_buffer(f) if options.gzip else f
            blob_client.upload_blob(data,
                                    overwrite=True,
                                    content_settings=content_settings,
                                    validate_content=options.validation == "md5",
                                    max_concurrency=4 if options.resumable else 1)


class AzureObjectStore(AbstractObjectStore):
    def __init__(self, service_client: BlobServiceClient) -> None:
        self.service_client = service_client

    @classmethod
    def from_config(cls, endpoint: Optional[str], key_path: Optional[Path]) -> "AzureObjectStore":
        """
        Credentials are resolved in this order: a key file holding a connection string,
        the endpoint url (optionally carrying a SAS token), the AZURE_STORAGE_CONNECTION_STRING variable.
        """
        if key_path is not None:
            try:
                connection_string = Path(key_path).read_text(encoding="utf-8").strip()
            except OSError as e:
                raise ConfigurationError(f"Could not read storage key file {key_path}: {e}") from e
            return cls(BlobServiceClient.from_connection_string(connection_string))

        if endpoint:
            account_url = endpoint[8:] if endpoint.startswith("azure://") else endpoint
            return cls(BlobServiceClient(account_url=account_url))

        connection_string = os.getenv(CONNECTION_STRING_VARIABLE)
        if connection_string:
            return cls(BlobServiceClient.from_connection_string(connection_string))

        raise ConfigurationError(f"No Azure credentials, pass a key file, an endpoint or set {CONNECTION_STRING_VARIABLE}")

    def bucket(self, name: str) -> AzureBucket:
        return AzureBucket(self.service_client.get_container_client(name))
