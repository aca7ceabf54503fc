import abc
import logging
import re
from dataclasses import dataclass
from typing import Optional, Tuple

from botocore.client import BaseClient

from cfn_packager.constants import HTTP_URL_SCHEMES, S3_URL_SCHEME

LOG = logging.getLogger(__name__)

S3_URL_REGEX = re.compile(r"^s3://([^/]+)/(.+)")


@dataclass
class UploadResult:
    bucket: str
    key: str
    version_id: Optional[str] = None


def is_s3_url(url: str) -> bool:
    return isinstance(url, str) and S3_URL_REGEX.match(url) is not None


def is_remote_url(url: str) -> bool:
    """Whether the given value references an object store or a web location, rather than a local path."""
    return is_s3_url(url) or (isinstance(url, str) and url.startswith(HTTP_URL_SCHEMES))


def s3_url(bucket: str, key: str) -> str:
    return f"{S3_URL_SCHEME}{bucket}/{key}"


def parse_s3_url(url: str) -> Tuple[str, str]:
    """Split an `s3://<bucket>/<key>` URL into bucket and key."""
    match = S3_URL_REGEX.match(url or "")
    if not match:
        raise ValueError(f"Not a valid S3 URL: {url}")
    return match.group(1), match.group(2)


class ObjectStorageService(abc.ABC):
    """
    Base class abstraction for the object store that packaged artifacts are uploaded to.
    """

    @abc.abstractmethod
    def put_object(self, local_path: str, destination_url: str) -> UploadResult:
        """
        Upload the local file to the given destination.

        :param local_path: path of the local file to upload
        :param destination_url: target location, in the form `s3://<bucket>/<key>`
        :return: the upload result, including the version id if the bucket is versioned
        """

    @abc.abstractmethod
    def put_object_content(self, content: str, bucket: str, key: str) -> UploadResult:
        """Store the given text content as object `key` in `bucket`."""


class S3ObjectStorageService(ObjectStorageService):
    """Object storage backed by a boto3 S3 client."""

    def __init__(self, s3_client: BaseClient = None):
        if s3_client is None:
            from cfn_packager.aws.connect import connect_to

            s3_client = connect_to("s3")
        self.s3_client = s3_client

    def put_object(self, local_path: str, destination_url: str) -> UploadResult:
        bucket, key = parse_s3_url(destination_url)
        LOG.debug("Uploading %s to %s", local_path, destination_url)
        with open(local_path, "rb") as body:
            response = self.s3_client.put_object(Bucket=bucket, Key=key, Body=body)
        return UploadResult(bucket=bucket, key=key, version_id=response.get("VersionId"))

    def put_object_content(self, content: str, bucket: str, key: str) -> UploadResult:
        LOG.debug("Uploading content to %s", s3_url(bucket, key))
        response = self.s3_client.put_object(Bucket=bucket, Key=key, Body=content.encode("utf-8"))
        return UploadResult(bucket=bucket, key=key, version_id=response.get("VersionId"))
