import logging
import os
import shutil
import stat
import tempfile
from typing import Optional, Union

from cfn_packager import config

LOG = logging.getLogger(__name__)


def save_file(file: str, content: Union[str, bytes]):
    """Write the content to the file, creating missing parent folders."""
    mkdir(os.path.dirname(file))
    mode = "w" if isinstance(content, str) else "wb"
    with open(file, mode) as f:
        f.write(content)


def load_file(file_path: str, default=None) -> Optional[str]:
    """Return the text content of the file, or ``default`` if there is no such file."""
    if not os.path.isfile(file_path):
        return default
    with open(file_path) as f:
        return f.read()


def mkdir(folder: str):
    if folder:
        os.makedirs(folder, exist_ok=True)


def is_local_file(path: str) -> bool:
    return bool(path) and os.path.isfile(path)


def is_local_folder(path: str) -> bool:
    return bool(path) and os.path.isdir(path)


def make_writable(path: str):
    """
    Recursively add owner write (and, for folders, execute) permissions below ``path``, so that read-only
    artifacts copied into a scratch folder can be removed again.
    """
    for root, dirnames, filenames in os.walk(path):
        for dirname in dirnames:
            _add_mode(os.path.join(root, dirname), stat.S_IRWXU)
        for filename in filenames:
            _add_mode(os.path.join(root, filename), stat.S_IWUSR)
    _add_mode(path, stat.S_IRWXU)


def _add_mode(path: str, mode: int):
    if os.path.islink(path):
        return
    current = stat.S_IMODE(os.lstat(path).st_mode)
    if current & mode != mode:
        os.chmod(path, current | mode)


def rm_rf(path: str):
    """
    Recursively removes a file or directory. No-op if the path does not exist.
    """
    if not path or not os.path.lexists(path):
        return
    # symlinks (also to folders), fifos and regular files
    if os.path.islink(path) or not os.path.isdir(path):
        os.remove(path)
        return
    try:
        make_writable(path)
    except PermissionError as e:
        LOG.debug("Unable to update permissions of %s before removal: %s", path, e)
    shutil.rmtree(path)


def cp_r(src: str, dst: str):
    """Copy a file (into ``dst`` if it is a folder) or a folder tree (merging into an existing ``dst``)."""
    try:
        if os.path.isdir(src):
            return shutil.copytree(src, dst, dirs_exist_ok=True)
        return shutil.copy2(src, dst)
    except OSError as e:
        LOG.debug("Error copying %s to %s: %s", src, dst, e)
        raise


def new_tmp_file(suffix: Optional[str] = None, prefix: Optional[str] = None) -> str:
    """Return a path to a new (empty) temporary file below the configured tmp folder."""
    mkdir(config.TMP_FOLDER)
    fd, tmp_path = tempfile.mkstemp(suffix=suffix, prefix=prefix, dir=config.TMP_FOLDER)
    os.close(fd)
    return tmp_path


def new_tmp_dir(prefix: Optional[str] = None) -> str:
    """Return a path to a new (empty) temporary directory below the configured tmp folder."""
    mkdir(config.TMP_FOLDER)
    return tempfile.mkdtemp(prefix=prefix, dir=config.TMP_FOLDER)
