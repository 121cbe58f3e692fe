from .AbstractObjectStore import AbstractBucket, AbstractObjectStore
from .FileEntry import FileEntry
from .FileWalker import ignore_directories, list_files
from .SchemeObjectStore import open_object_store
from .UploadOptions import UploadOptions

__all__ = ['AbstractBucket', 'AbstractObjectStore', 'FileEntry', 'UploadOptions',
           'ignore_directories', 'list_files', 'open_object_store']
