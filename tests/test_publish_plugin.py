"""
Test cases for the PublishPlugin, driven through run lifecycle messages with a file:// store.
"""

import shutil
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Optional

import pytest

from blobpublish.errors import ConfigurationError, FilesystemError, PublishFailedError
from blobpublish.io import AbstractBucket, UploadOptions
from blobpublish.io.FileObjectStore import FileBucket, FileObjectStore
from blobpublish.plugin import (REPORT_FINISHED_MESSAGE, SETUP_MESSAGE, Message, MessageMaker, MessageQueue, PluginContext,
                                PublishPlugin, ResultStorageManager)
from blobpublish.publisher import PublisherOptions


class FailingBucket(FileBucket):
    def __init__(self, root: Path, fail_name: str) -> None:
        super().__init__(root)
        self.fail_name = fail_name

    def upload(self, local_path: Path, remote_key: str, options: UploadOptions) -> None:
        if local_path.name == self.fail_name:
            raise IOError(f"Simulated outage for {remote_key}")
        super().upload(local_path, remote_key, options)


class FailingObjectStore(FileObjectStore):
    def __init__(self, root: Path, fail_name: str) -> None:
        super().__init__(root)
        self.fail_name = fail_name

    def bucket(self, name: str) -> AbstractBucket:
        return FailingBucket(self.root / name, self.fail_name)


class TestPublishPlugin:
    def setup_method(self) -> None:
        """ A run wrote its report to <output>/example.com/<timestamp>, a latest file sits next to it """
        self.test_dir = Path(tempfile.mkdtemp())
        self.storage_manager = ResultStorageManager.from_output_folder(self.test_dir / "output", "https://example.com/start", datetime(2024, 5, 1, 12, 30, 0))
        self.base_dir = self.storage_manager.get_base_dir()
        (self.base_dir / "pages").mkdir(parents=True)
        (self.base_dir / "index.html").write_text("<html></html>")
        (self.base_dir / "pages" / "data.json").write_text("{}")
        (self.base_dir.parent / "latest.html").write_text("<html>latest</html>")

        self.buckets = self.test_dir / "buckets"
        self.queue = MessageQueue()

    def teardown_method(self) -> None:
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def _open(self, options: PublisherOptions, store: Optional[FileObjectStore] = None) -> PublishPlugin:
        plugin = PublishPlugin(store or FileObjectStore(self.buckets))
        plugin.open(PluginContext(self.storage_manager), options)
        return plugin

    def _message_types(self) -> list[str]:
        return [message.type for message in self.queue.messages]

    def test_open_without_bucket_fails_fast(self) -> None:
        with pytest.raises(ConfigurationError):
            self._open(PublisherOptions())

    def test_setup_message_is_acknowledged(self) -> None:
        plugin = self._open(PublisherOptions(bucket_name="results"))
        plugin.process_message(Message(SETUP_MESSAGE), self.queue)

        assert self._message_types() == ["blob.setup"]
        assert self.queue.messages[0].source == "blob"

    def test_other_messages_are_ignored(self) -> None:
        plugin = self._open(PublisherOptions(bucket_name="results"))
        plugin.process_message(Message("browsertime.run"), self.queue)
        assert self.queue.messages == []

    def test_report_finished_publishes_base_dir_under_storage_prefix(self) -> None:
        plugin = self._open(PublisherOptions(bucket_name="results"))
        plugin.process_message(Message(REPORT_FINISHED_MESSAGE), self.queue)

        published = self.buckets / "results" / "example.com" / "2024-05-01-12-30-00"
        assert (published / "index.html").read_text() == "<html></html>"
        assert (published / "pages" / "data.json").read_text() == "{}"
        assert not (self.buckets / "results" / "example.com" / "latest.html").exists()
        assert self._message_types() == ["blob.finished"]
        assert self.base_dir.exists()

    def test_copy_latest_files_to_parent(self) -> None:
        plugin = self._open(PublisherOptions(bucket_name="results", copy_latest_files_to_parent=True))
        plugin.process_message(Message(REPORT_FINISHED_MESSAGE), self.queue)

        assert (self.buckets / "results" / "example.com" / "latest.html").read_text() == "<html>latest</html>"
        assert self._message_types() == ["blob.finished"]

    def test_remove_local_result_after_clean_publish(self) -> None:
        plugin = self._open(PublisherOptions(bucket_name="results", remove_local_result=True))
        plugin.process_message(Message(REPORT_FINISHED_MESSAGE), self.queue)

        assert not self.base_dir.exists()
        assert self._message_types() == ["blob.finished"]

    def test_failed_upload_keeps_local_result(self) -> None:
        store = FailingObjectStore(self.buckets, fail_name="data.json")
        plugin = self._open(PublisherOptions(bucket_name="results", remove_local_result=True, copy_latest_files_to_parent=True), store)
        plugin.process_message(Message(REPORT_FINISHED_MESSAGE), self.queue)

        assert self.base_dir.exists()
        assert (self.base_dir / "pages" / "data.json").exists()
        assert self._message_types() == ["error", "blob.finished"]
        assert isinstance(self.queue.messages[0].data, PublishFailedError)

        # The sibling upload still went through, the latest mirror was skipped
        assert (self.buckets / "results" / "example.com" / "2024-05-01-12-30-00" / "index.html").exists()
        assert not (self.buckets / "results" / "example.com" / "latest.html").exists()

    def test_missing_base_dir_posts_error_and_finishes(self) -> None:
        shutil.rmtree(self.base_dir)
        plugin = self._open(PublisherOptions(bucket_name="results"))
        plugin.process_message(Message(REPORT_FINISHED_MESSAGE), self.queue)

        assert self._message_types() == ["error", "blob.finished"]
        assert isinstance(self.queue.messages[0].data, FilesystemError)


class TestResultStorageManager:
    def setup_method(self) -> None:
        self.test_dir = Path(tempfile.mkdtemp())

    def teardown_method(self) -> None:
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_from_output_folder_uses_hostname_and_timestamp(self) -> None:
        manager = ResultStorageManager.from_output_folder(self.test_dir, "https://www.example.com/path?q=1", datetime(2024, 1, 2, 3, 4, 5))
        assert manager.get_base_dir() == self.test_dir / "www.example.com" / "2024-01-02-03-04-05"
        assert manager.get_storage_prefix() == "www.example.com/2024-01-02-03-04-05"

    def test_from_output_folder_with_plain_name(self) -> None:
        manager = ResultStorageManager.from_output_folder(self.test_dir, "my test/run", datetime(2024, 1, 2, 3, 4, 5))
        assert manager.get_storage_prefix() == "my_test_run/2024-01-02-03-04-05"

    def test_from_result_directory(self) -> None:
        result = self.test_dir / "site" / "2024-01-02"
        result.mkdir(parents=True)
        manager = ResultStorageManager.from_result_directory(result)

        assert manager.get_base_dir() == result.resolve()
        assert manager.get_storage_prefix() == "site/2024-01-02"

    def test_remove_missing_base_dir_raises(self) -> None:
        manager = ResultStorageManager(self.test_dir / "missing", "missing")
        with pytest.raises(FilesystemError):
            manager.remove_base_dir()


class TestMessageQueue:
    def test_post_message_notifies_subscribers(self) -> None:
        queue = MessageQueue()
        received: list[Message] = []
        queue.subscribe(received.append)

        message = MessageMaker("blob").make("blob.setup", {"bucket": "results"})
        queue.post_message(message)

        assert received == [message]
        assert queue.messages_of_type("blob.setup") == [message]
        assert message.source == "blob"
        assert message.data == {"bucket": "results"}
