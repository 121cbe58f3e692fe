from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from blobpublish.errors import ConfigurationError

from .AbstractObjectStore import AbstractObjectStore
from .AzureObjectStore import AzureObjectStore
from .FileObjectStore import FileObjectStore

SCHEME_STORES: dict[str, type[AbstractObjectStore]] = {"azure": AzureObjectStore,
                                                       "https": AzureObjectStore,
                                                       "http": AzureObjectStore,
                                                       "file": FileObjectStore}


def open_object_store(endpoint: Optional[str] = None, key_path: Optional[Path] = None) -> AbstractObjectStore:
    """
    Pick the object store for an endpoint by its scheme, without an endpoint Azure is assumed.
    Examples: file:///tmp/buckets, azure://https://account.blob.core.windows.net?sas, http://127.0.0.1:10000/devstoreaccount1
    """
    scheme = urlparse(endpoint).scheme if endpoint else "azure"
    if scheme not in SCHEME_STORES:
        raise ConfigurationError(f"Unsupported object store scheme '{scheme}' in {endpoint}")

    return SCHEME_STORES[scheme].from_config(endpoint, key_path)
