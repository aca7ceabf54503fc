"""
Scratch files and folders used to turn local artifacts into uploadable payloads. Each helper that creates a
resource has a scoped counterpart that guarantees its removal, whether the wrapped operation succeeds or not.
"""

import contextlib
import logging
import os
from typing import Iterator

from cfn_packager.constants import TMP_RESOURCE_PREFIX
from cfn_packager.utils.archives import create_zip_file_python
from cfn_packager.utils.files import cp_r, new_tmp_dir, new_tmp_file, rm_rf

LOG = logging.getLogger(__name__)


def copy_into_own_directory(path: str) -> str:
    """
    Copy the given file into a fresh scratch directory, keeping its base name, and return the directory.
    This allows a single file to be zipped the same way as a folder.
    """
    tmp_dir = new_tmp_dir(prefix=TMP_RESOURCE_PREFIX)
    cp_r(path, os.path.join(tmp_dir, os.path.basename(path)))
    return tmp_dir


def zip_directory(path: str) -> str:
    """Zip the contents of the given directory into a new, uniquely named scratch file and return its path."""
    zip_file = new_tmp_file(prefix=f"{TMP_RESOURCE_PREFIX}data-", suffix=".zip")
    try:
        create_zip_file_python(path, zip_file)
    except Exception:
        release(zip_file)
        raise
    LOG.debug("Zipped folder %s into %s", path, zip_file)
    return zip_file


def release(path: str) -> None:
    """Remove the given scratch file or directory. No-op if it does not exist (anymore)."""
    rm_rf(path)


@contextlib.contextmanager
def copied_into_own_directory(path: str) -> Iterator[str]:
    tmp_dir = copy_into_own_directory(path)
    try:
        yield tmp_dir
    finally:
        release(tmp_dir)


@contextlib.contextmanager
def zipped_directory(path: str) -> Iterator[str]:
    zip_file = zip_directory(path)
    try:
        yield zip_file
    finally:
        release(zip_file)
