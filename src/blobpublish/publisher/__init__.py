"""Publishing of local result directories to an object store."""

from .Publisher import Publisher
from .PublisherOptions import PublisherOptions
from .PublishReport import PublishReport, UploadResult
from .UploadTarget import LONG_CACHE_CONTROL, NO_CACHE_CONTROL, UploadTarget

__all__ = [
    'Publisher',
    'PublisherOptions',
    'PublishReport',
    'UploadResult',
    'UploadTarget',
    'LONG_CACHE_CONTROL',
    'NO_CACHE_CONTROL'
]
