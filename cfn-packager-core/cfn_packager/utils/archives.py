import logging
import os
import zipfile
from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Union

from cfn_packager import config

LOG = logging.getLogger(__name__)


StrPath = Union[str, os.PathLike]

# number of header bytes needed to check all known signatures (tar carries its magic at offset 257)
HEADER_SIZE = 262

TAR_MAGIC_OFFSET = 257

ZIP_SIGNATURES = (b"PK\x03\x04", b"PK\x05\x06", b"PK\x07\x08")
RAR_SIGNATURES = (b"Rar!",)
SEVEN_ZIP_SIGNATURES = (b"7z\xbc\xaf",)
GZIP_SIGNATURES = (b"\x1f\x8b",)
ZSTD_SIGNATURES = (b"\x28\xb5\x2f\xfd",)
TAR_SIGNATURES = (b"ustar",)

# archive file extensions, mapped to the signatures a file with that extension has to start with
ARCHIVE_EXTENSIONS: Dict[str, Tuple[bytes, ...]] = {
    ".zip": ZIP_SIGNATURES,
    ".jar": ZIP_SIGNATURES,
    ".war": ZIP_SIGNATURES,
    ".rar": RAR_SIGNATURES,
    ".7z": SEVEN_ZIP_SIGNATURES,
    ".gz": GZIP_SIGNATURES,
    ".tgz": GZIP_SIGNATURES,
    ".zst": ZSTD_SIGNATURES,
    ".tar": TAR_SIGNATURES,
}


@dataclass(frozen=True)
class PathClassification:
    is_file: bool
    is_directory: bool
    is_archive: bool


def read_file_header(path: StrPath, size: int = HEADER_SIZE) -> bytes:
    with open(path, "rb") as f:
        return f.read(size)


def matches_signature(header: bytes, extension: str) -> bool:
    signatures = ARCHIVE_EXTENSIONS.get(extension, ())
    if extension == ".tar":
        magic = header[TAR_MAGIC_OFFSET : TAR_MAGIC_OFFSET + len(TAR_SIGNATURES[0])]
        return magic in signatures
    return any(header.startswith(signature) for signature in signatures)


def is_archive_file(path: StrPath, signature_check: Optional[bool] = None) -> bool:
    """
    Whether the given local file is an archive. Only files with a known archive extension qualify, and
    (unless the signature check is disabled) the file header has to match the signature of that format,
    so that a misnamed file is not mistaken for an archive.
    """
    if signature_check is None:
        signature_check = config.ARCHIVE_SIGNATURE_CHECK
    extension = os.path.splitext(str(path))[1].lower()
    if extension not in ARCHIVE_EXTENSIONS or not os.path.isfile(path):
        return False
    if not signature_check:
        return True
    header = read_file_header(path)
    result = matches_signature(header, extension)
    if not result:
        LOG.debug("File %s has an archive extension, but no matching signature", path)
    return result


def classify(path: StrPath) -> PathClassification:
    is_file = os.path.isfile(path)
    return PathClassification(
        is_file=is_file,
        is_directory=os.path.isdir(path),
        is_archive=is_file and is_archive_file(path),
    )


def create_zip_file_python(
    base_dir: StrPath,
    zip_file: StrPath,
    compression: int = zipfile.ZIP_DEFLATED,
    compresslevel: int = 9,
):
    """
    Creates a zip archive of the contents of `base_dir`. Entries are relative to `base_dir`, i.e., the
    directory itself is not part of the entry paths.
    """
    with zipfile.ZipFile(
        zip_file, "w", compression=compression, compresslevel=compresslevel
    ) as zip_ref:
        for root, dirs, files in os.walk(base_dir):
            dirs.sort()
            for name in sorted(files):
                full_name = os.path.join(root, name)
                relative = os.path.relpath(full_name, start=base_dir)
                zip_ref.write(full_name, relative.replace(os.sep, "/"))
