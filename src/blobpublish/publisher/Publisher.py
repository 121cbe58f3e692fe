import logging
import multiprocessing
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import replace
from pathlib import Path
from typing import Optional

from tqdm import tqdm

from blobpublish.errors import TransferError
from blobpublish.io import AbstractBucket, AbstractObjectStore, FileEntry, UploadOptions, ignore_directories, list_files, open_object_store

from .PublisherOptions import PublisherOptions
from .PublishReport import PublishReport, UploadResult
from .UploadTarget import UploadTarget

log = logging.getLogger()


class Publisher:
    """
    Uploads the files of a local directory tree to a bucket.

    Every publish call is a single batch: list the files, upload them all concurrently and
    report per file. A failing file never stops its siblings, nothing is retried.
    """

    def __init__(self, options: PublisherOptions, store: Optional[AbstractObjectStore] = None, show_progress: bool = False) -> None:
        options.validate()
        self.options = options
        self.show_progress = show_progress
        self.max_workers = options.max_workers if options.max_workers > 0 else multiprocessing.cpu_count()
        self._store = store

    @property
    def store(self) -> AbstractObjectStore:
        if self._store is None:
            self._store = open_object_store(self.options.endpoint, self.options.key_path)
        return self._store

    def target(self, default_prefix: str) -> UploadTarget:
        """ The target of a run, an explicitly configured destination path wins over default_prefix """
        return UploadTarget(bucket_name=str(self.options.bucket_name),
                            destination_prefix=self.options.destination_path or default_prefix,
                            public=self.options.public,
                            gzip=self.options.gzip)

    def publish(self, root_dir: Path, target: UploadTarget) -> PublishReport:
        """ Upload every regular file below root_dir to prefix/relative path """
        entries = list(list_files(root_dir))
        log.info(f"Publishing {len(entries)} files from {root_dir} to {target.bucket_name}/{target.destination_prefix}")
        return self._upload_all(entries, target)

    def publish_latest_mirror(self, parent_dir: Path, target: UploadTarget, prefix_name: str) -> PublishReport:
        """
        Upload only the immediate files of parent_dir, without caching, so the newest
        results are always reachable under the same keys.
        """
        mirror = replace(target, destination_prefix=self.options.destination_path or prefix_name, cacheable=False)
        entries = list(list_files(parent_dir, exclude=[ignore_directories]))
        log.info(f"Publishing {len(entries)} latest files from {parent_dir} to {mirror.bucket_name}/{mirror.destination_prefix}")
        return self._upload_all(entries, mirror)

    @staticmethod
    def _upload_entry(bucket: AbstractBucket, entry: FileEntry, target: UploadTarget, options: UploadOptions) -> UploadResult:
        remote_key = target.remote_key(entry.relative_path)
        try:
            bucket.upload(entry.absolute_path, remote_key, options)
        except Exception as e:
            error = TransferError(str(entry.absolute_path), remote_key, e)
            log.error(str(error))
            return UploadResult.failed(error)

        return UploadResult.succeeded(str(entry.absolute_path), remote_key)

    def _upload_all(self, entries: list[FileEntry], target: UploadTarget) -> PublishReport:
        report = PublishReport(target.bucket_name)
        if not entries:
            return report

        bucket = self.store.bucket(target.bucket_name)
        options = UploadOptions(public=target.public,
                                gzip=target.gzip,
                                cache_control=target.cache_control,
                                validation="md5",
                                resumable=False)

        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(entries))) as executor:
            futures = [executor.submit(self._upload_entry, bucket, entry, target, options) for entry in entries]

            for future in tqdm(as_completed(futures), total=len(futures), desc=f"Uploading to {target.bucket_name}", disable=not self.show_progress):
                report.results.append(future.result())

        log.info(f"Uploaded {len(report.succeeded)}/{len(report.results)} files to {target.bucket_name}")
        return report
