import logging
import sys
from typing import Dict, Optional

from cfn_packager import config

from .format import AddFormattedAttributes, CliFormatter, DefaultFormatter

PACKAGE_LOGGER = "cfn_packager"

# levels of the AWS SDK loggers, which are very chatty on DEBUG
default_log_levels: Dict[str, int] = {
    "boto3": logging.INFO,
    "botocore": logging.ERROR,
    "s3transfer": logging.INFO,
    "urllib3": logging.WARNING,
}

trace_log_levels: Dict[str, int] = {
    "boto3": logging.DEBUG,
    "botocore": logging.DEBUG,
    "s3transfer": logging.DEBUG,
    "urllib3": logging.DEBUG,
}


def get_log_level_from_config() -> int:
    """Log level from ``CFN_PACKAGER_LOG``, falling back to DEBUG or INFO depending on ``DEBUG``."""
    if not config.LOG_LEVEL:
        return logging.DEBUG if config.DEBUG else logging.INFO
    if config.is_trace_logging_enabled():
        return logging.DEBUG
    return logging.getLevelName(config.LOG_LEVEL.upper())


def create_default_handler(log_level: int, formatter: Optional[logging.Formatter] = None):
    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setLevel(log_level)
    handler.setFormatter(formatter or DefaultFormatter())
    handler.addFilter(AddFormattedAttributes())
    return handler


def setup_logging(log_level=logging.INFO, formatter: Optional[logging.Formatter] = None) -> None:
    """
    Route all log records to stderr (stdout is reserved for command output such as the packaged
    template), replacing previously installed handlers.

    :param log_level: level of the root and the cfn-packager loggers
    :param formatter: formatter of the handler, ``DefaultFormatter`` if not given
    """
    logging.basicConfig(
        level=log_level, handlers=[create_default_handler(log_level, formatter)], force=True
    )
    logging.captureWarnings(True)

    logging.getLogger(PACKAGE_LOGGER).setLevel(log_level)
    levels = trace_log_levels if config.is_trace_logging_enabled() else default_log_levels
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)


def setup_logging_for_cli(log_level=logging.DEBUG) -> None:
    setup_logging(log_level, CliFormatter())


def setup_logging_from_config() -> None:
    setup_logging(get_log_level_from_config())
