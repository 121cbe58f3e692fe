import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from blobpublish import defaultlogging
from blobpublish.errors import ConfigurationError, PublishError
from blobpublish.plugin import REPORT_FINISHED_MESSAGE, SETUP_MESSAGE, Message, MessageQueue, PluginContext, PublishPlugin, ResultStorageManager
from blobpublish.publisher import Publisher, PublisherOptions

log = logging.getLogger()


def _options(args: argparse.Namespace) -> PublisherOptions:
    return PublisherOptions(bucket_name=args.bucket,
                            key_path=args.key_path,
                            endpoint=args.endpoint,
                            destination_path=args.destination,
                            public=args.public,
                            gzip=args.gzip,
                            remove_local_result=getattr(args, "remove_local_result", False),
                            copy_latest_files_to_parent=getattr(args, "copy_latest_files_to_parent", False),
                            max_workers=args.max_workers)


def publish_operation(args: argparse.Namespace) -> None:
    if not publish(args.source, _options(args)):
        sys.exit(1)


def publish(source: Path, options: PublisherOptions, show_progress: bool = True) -> bool:
    """ Publish an existing result directory the same way a finished run does, returns False when anything failed """
    queue = MessageQueue()
    plugin = PublishPlugin(show_progress=show_progress)
    plugin.open(PluginContext(ResultStorageManager.from_result_directory(source)), options)

    for message_type in (SETUP_MESSAGE, REPORT_FINISHED_MESSAGE):
        plugin.process_message(Message(message_type, source="cli"), queue)

    return not queue.messages_of_type("error")


def publishlatest_operation(args: argparse.Namespace) -> None:
    if not publishlatest(args.source, _options(args), args.prefix):
        sys.exit(1)


def publishlatest(source: Path, options: PublisherOptions, prefix: Optional[str] = None, show_progress: bool = True) -> bool:
    """ Publish only the immediate files of source as no-cache latest copies """
    source = source.resolve()
    prefix_name = prefix or source.name
    publisher = Publisher(options, show_progress=show_progress)

    try:
        publisher.publish_latest_mirror(source, publisher.target(prefix_name), prefix_name).raise_for_failures()
    except PublishError as e:
        log.error(f"Could not upload latest files from {source}: {e}")
        return False

    return True


def main() -> None:
    parser = argparse.ArgumentParser(description="Publish result directories to an object store bucket")
    parser.add_argument("--verbose", action="store_true", help="Log debug messages")
    subparsers = parser.add_subparsers(dest="command")

    def _add_common_arguments(subparser: argparse.ArgumentParser) -> None:
        subparser.add_argument("--source", type=Path, required=True, help="Local directory to publish")
        subparser.add_argument("--bucket", type=str, required=True, help="Bucket (Azure container) to upload to")
        subparser.add_argument("--endpoint", type=str, required=False, help="Object store, format is file:///buckets, azure://https://account.blob.core.windows.net?sas or http://127.0.0.1:10000/devstoreaccount1")
        subparser.add_argument("--key_path", type=Path, required=False, help="File containing the storage connection string, defaults to AZURE_STORAGE_CONNECTION_STRING")
        subparser.add_argument("--destination", type=str, required=False, help="Destination path in the bucket, overrides the default prefix")
        subparser.add_argument("--public", action="store_true", help="Make the uploaded files publicly readable")
        subparser.add_argument("--gzip", action="store_true", help="Gzip the files while uploading")
        subparser.add_argument("--max_workers", type=int, required=False, default=0, help="Maximum number of concurrent uploads (0 = use CPU count)")

    publish_parser = subparsers.add_parser("publish", help="Publish a result directory, the prefix defaults to <parent name>/<directory name>")
    _add_common_arguments(publish_parser)
    publish_parser.add_argument("--remove_local_result", action="store_true", help="Remove the local directory after a fully successful upload")
    publish_parser.add_argument("--copy_latest_files_to_parent", action="store_true", help="Also publish the files of the parent directory as no-cache latest copies")
    publish_parser.set_defaults(func=publish_operation)

    publishlatest_parser = subparsers.add_parser("publishlatest", help="Publish the immediate files of a directory as no-cache latest copies")
    _add_common_arguments(publishlatest_parser)
    publishlatest_parser.add_argument("--prefix", type=str, required=False, help="Prefix in the bucket, defaults to the directory name")
    publishlatest_parser.set_defaults(func=publishlatest_operation)

    args = parser.parse_args()
    defaultlogging.setup_logging(args.verbose)

    if args.command:
        try:
            args.func(args)
        except ConfigurationError as e:
            log.error(f"Invalid configuration: {e}")
            sys.exit(2)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
