import logging
from dataclasses import dataclass
from typing import Optional

from blobpublish.io import AbstractObjectStore
from blobpublish.publisher import Publisher, PublisherOptions

from .MessageQueue import Message, MessageMaker, MessageQueue
from .ResultStorageManager import ResultStorageManager

log = logging.getLogger()

SETUP_MESSAGE = "run.setup"
REPORT_FINISHED_MESSAGE = "report.finished"


@dataclass
class PluginContext:
    storage_manager: ResultStorageManager

    def message_maker(self, source: str) -> MessageMaker:
        return MessageMaker(source)


class PublishPlugin:
    """
    Publishes the result directory of a run once its report has been rendered.

    Posts blob.setup when the run is set up, blob.finished once publishing is over (also after
    a failure, so nothing waits forever on a storage outage) and an error message carrying the
    exception when publishing failed. Local results are only removed after a clean publish.
    """
    name = "blob"

    def __init__(self, store: Optional[AbstractObjectStore] = None, show_progress: bool = False) -> None:
        self.store = store
        self.show_progress = show_progress

    def open(self, context: PluginContext, options: PublisherOptions) -> None:
        self.options = options
        self.publisher = Publisher(options, self.store, self.show_progress)
        self.make = context.message_maker(self.name).make
        self.storage_manager = context.storage_manager

    def process_message(self, message: Message, queue: MessageQueue) -> None:
        if message.type == SETUP_MESSAGE:
            # Let other plugins know that the blob plugin is alive
            queue.post_message(self.make("blob.setup"))
        elif message.type == REPORT_FINISHED_MESSAGE:
            self._publish_run(queue)
            queue.post_message(self.make("blob.finished"))

    def _publish_run(self, queue: MessageQueue) -> None:
        base_dir = self.storage_manager.get_base_dir()
        bucket_name = self.options.bucket_name
        log.info(f"Uploading {base_dir} to bucket {bucket_name}, this can take a while ...")

        try:
            target = self.publisher.target(self.storage_manager.get_storage_prefix())
            self.publisher.publish(base_dir, target).raise_for_failures()

            if self.options.copy_latest_files_to_parent:
                root_path = base_dir.resolve().parent
                self.publisher.publish_latest_mirror(root_path, target, root_path.name).raise_for_failures()

            log.info(f"Finished upload to bucket {bucket_name}")
            if self.options.public:
                log.info("Uploaded results are publicly readable")

            if self.options.remove_local_result:
                self.storage_manager.remove_base_dir()
            else:
                log.debug(f"Local result files and directories are stored in {base_dir}")
        except Exception as e:
            queue.post_message(self.make("error", e))
            log.error(f"Could not upload to bucket {bucket_name}: {e}")
