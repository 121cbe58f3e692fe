import logging

AZURE_HTTP_LOGGER = "azure.core.pipeline.policies.http_logging_policy"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(verbose: bool = False) -> logging.Logger:
    """
    Console logging for the blobpublish command line.

    Verbose runs log at DEBUG and keep the request and response lines of the Azure SDK,
    otherwise those are limited to errors so upload progress stays readable.
    """
    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    logging.getLogger(AZURE_HTTP_LOGGER).setLevel(logging.NOTSET if verbose else logging.ERROR)

    if not logger.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(console_handler)

    return logger
