"""Log record formatting for cfn-packager."""

import logging
from functools import lru_cache

MAX_NAME_LEN = 26

LOG_FORMAT = f"%(asctime)s.%(msecs)03d %(cp_level)5s --- %(cp_name)-{MAX_NAME_LEN}s : %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

# compact format for interactive CLI sessions, without timestamps
CLI_LOG_FORMAT = "%(cp_level)-5s %(cp_name)s: %(message)s"

LEVEL_ABBREVIATIONS = {
    logging.CRITICAL: "FATAL",
    logging.ERROR: "ERROR",
    logging.WARNING: "WARN",
    logging.INFO: "INFO",
    logging.DEBUG: "DEBUG",
}


class DefaultFormatter(logging.Formatter):
    """Formatter for records that went through :class:`AddFormattedAttributes`."""

    def __init__(self, fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT):
        super().__init__(fmt=fmt, datefmt=datefmt)


class CliFormatter(DefaultFormatter):
    def __init__(self):
        super().__init__(fmt=CLI_LOG_FORMAT)


class AddFormattedAttributes(logging.Filter):
    """
    Adds the attributes used by the log formats to each record:

    - ``cp_level``: level name of at most five characters
    - ``cp_name``: logger name shortened to ``max_name_len`` (e.g., ``c.p.template``)
    """

    max_name_len: int

    def __init__(self, max_name_len: int = None):
        super().__init__()
        self.max_name_len = max_name_len or MAX_NAME_LEN

    def filter(self, record):
        record.cp_level = LEVEL_ABBREVIATIONS.get(record.levelno, record.levelname[:5])
        record.cp_name = self._short_name(record.name)
        return True

    @lru_cache(maxsize=256)
    def _short_name(self, name):
        return compress_logger_name(name, self.max_name_len)


def compress_logger_name(name: str, length: int) -> str:
    """
    Shorten a dotted logger name to at most ``length`` characters. Parts are abbreviated to their first
    letter from left to right until the name fits, so ``cfn_packager.packaging.template`` with length 19
    becomes ``c.p.template``. The last part is cut off only if all other parts are abbreviated already.
    """
    parts = name.split(".")
    for i in range(len(parts) - 1):
        if len(".".join(parts)) <= length:
            return ".".join(parts)
        parts[i] = parts[i][:1]

    result = ".".join(parts)
    if len(result) <= length:
        return result

    head = parts[:-1]
    available = length - len(".".join(head)) - 1 if head else length
    return ".".join(head + [parts[-1][: max(available, 1)]])
