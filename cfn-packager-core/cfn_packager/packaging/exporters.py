import logging
import os
from typing import Any, Dict, Optional, Tuple

from cfn_packager import config
from cfn_packager.constants import ARTIFACT_KEY_FOLDER
from cfn_packager.packaging.exceptions import (
    CircularNestedTemplateError,
    InvalidLocalPathError,
    InvalidTemplatePathError,
    NestedTemplateDepthExceededError,
)
from cfn_packager.packaging.registry import ExporterDescriptor, WriteBackShape
from cfn_packager.packaging.tempfiles import copied_into_own_directory, zipped_directory
from cfn_packager.services.s3 import ObjectStorageService, UploadResult, is_remote_url, s3_url
from cfn_packager.template.parser import dump_yaml
from cfn_packager.utils.archives import classify
from cfn_packager.utils.files import is_local_file, is_local_folder
from cfn_packager.utils.objects import get_value_at_path, set_value_at_path
from cfn_packager.utils.time import unique_timestamp_millis

LOG = logging.getLogger(__name__)


def get_s3_key(key_prefix: str, file_path: str, extension: Optional[str] = None) -> str:
    """
    Return the object key for the given local artifact, in the form
    `<prefix>/artifact/<name>-<epoch millis>.<extension>`. The timestamp makes every key unique.
    If `extension` is given, it replaces the extension of the file name.
    """
    filename = os.path.basename(os.path.normpath(file_path))
    if extension:
        filename = f"{os.path.splitext(filename)[0] or filename}.{extension}"
    timestamp = unique_timestamp_millis()
    key_prefix = (key_prefix or "").strip("/")
    folder = f"{key_prefix}/{ARTIFACT_KEY_FOLDER}" if key_prefix else ARTIFACT_KEY_FOLDER

    name, _, suffix = filename.rpartition(".")
    if name and suffix:
        return f"{folder}/{name}-{timestamp}.{suffix}"
    return f"{folder}/{filename}-{timestamp}"


class ResourceExporter:
    """
    Uploads the local artifact referenced by one resource property and replaces the reference with the
    remote location, in the shape defined by the exporter descriptor.
    """

    descriptor: ExporterDescriptor
    storage: ObjectStorageService
    bucket_name: str
    key_prefix: str

    def __init__(
        self,
        descriptor: ExporterDescriptor,
        storage: ObjectStorageService,
        bucket_name: str,
        key_prefix: str = "",
    ):
        self.descriptor = descriptor
        self.storage = storage
        self.bucket_name = bucket_name
        self.key_prefix = key_prefix

    @property
    def resource_type(self) -> str:
        return self.descriptor.resource_type

    @property
    def property_path(self) -> str:
        return self.descriptor.property_path

    def get_property_value(self, properties: Dict) -> Any:
        return get_value_at_path(properties, self.property_path)

    def should_export(self, properties: Optional[Dict]) -> bool:
        if not properties:
            return False
        if self.matches_skip_condition(properties):
            return False
        value = self.get_property_value(properties)
        if not value and not self.descriptor.package_null_property:
            return False
        if value and not isinstance(value, str):
            # already materialized, e.g. an inline code block or an intrinsic function
            return False
        if is_remote_url(value):
            return False
        return True

    def matches_skip_condition(self, properties: Dict) -> bool:
        for name, expected in self.descriptor.skip_conditions:
            value = properties.get(name)
            if value and (expected is None or value == expected):
                return True
        return False

    def export(self, properties: Optional[Dict], artifact_abs_path: str) -> None:
        if not self.should_export(properties):
            LOG.debug(
                "Skipping property %s of %s, it does not reference a local artifact",
                self.property_path,
                self.resource_type,
            )
            return

        classification = classify(artifact_abs_path)
        if self.descriptor.force_zip and classification.is_file and not classification.is_archive:
            with copied_into_own_directory(artifact_abs_path) as tmp_dir:
                self.do_export(properties, tmp_dir, artifact_abs_path, key_extension="zip")
        else:
            self.do_export(properties, artifact_abs_path, artifact_abs_path)

    def do_export(
        self,
        properties: Dict,
        upload_path: str,
        artifact_abs_path: str,
        key_extension: Optional[str] = None,
    ) -> None:
        """
        Upload the payload at `upload_path` (zipping it first if it is a folder) and write the remote location
        back into the properties. The object key is derived from the original `artifact_abs_path`, with
        `key_extension` replacing its extension if given.
        """
        if not os.path.exists(upload_path):
            raise InvalidLocalPathError(self.resource_type, self.property_path, artifact_abs_path)

        key = get_s3_key(self.key_prefix, artifact_abs_path, extension=key_extension)
        destination = s3_url(self.bucket_name, key)
        if is_local_folder(upload_path):
            with zipped_directory(upload_path) as zip_file:
                result = self.storage.put_object(zip_file, destination)
        else:
            result = self.storage.put_object(upload_path, destination)

        LOG.info("Uploaded artifact %s to %s", artifact_abs_path, destination)
        self.write_back(properties, result)

    def write_back(self, properties: Dict, result: UploadResult) -> None:
        if self.descriptor.shape == WriteBackShape.URL:
            value = s3_url(result.bucket, result.key)
        else:
            value = {
                self.descriptor.bucket_name_property: result.bucket,
                self.descriptor.object_key_property: result.key,
            }
            if result.version_id and self.descriptor.version_property:
                value[self.descriptor.version_property] = result.version_id
        set_value_at_path(properties, self.property_path, value)


class NestedTemplateExporter(ResourceExporter):
    """
    Exports a nested stack/application: the referenced local template is exported recursively, and the
    resulting template is uploaded as YAML.
    """

    ancestors: Tuple[str, ...]

    def __init__(
        self,
        descriptor: ExporterDescriptor,
        storage: ObjectStorageService,
        bucket_name: str,
        key_prefix: str = "",
        ancestors: Tuple[str, ...] = (),
    ):
        super().__init__(descriptor, storage, bucket_name, key_prefix)
        # real paths of the templates that (transitively) include the nested template
        self.ancestors = tuple(ancestors)

    def export(self, properties: Optional[Dict], template_abs_path: str) -> None:
        if not self.should_export(properties):
            return
        if self.get_property_value(properties) is None:
            LOG.debug("Skipping %s without %s property", self.resource_type, self.property_path)
            return
        self.do_export(properties, template_abs_path, template_abs_path)

    def do_export(
        self,
        properties: Dict,
        upload_path: str,
        template_abs_path: str,
        key_extension: Optional[str] = None,
    ) -> None:
        from cfn_packager.packaging.template import ArtifactExporter

        if not is_local_file(template_abs_path):
            raise InvalidTemplatePathError(template_abs_path)
        if os.path.realpath(template_abs_path) in self.ancestors:
            raise CircularNestedTemplateError(template_abs_path)
        if len(self.ancestors) > config.NESTED_TEMPLATE_MAX_DEPTH:
            raise NestedTemplateDepthExceededError(
                template_abs_path, config.NESTED_TEMPLATE_MAX_DEPTH
            )

        LOG.debug("Exporting nested template %s", template_abs_path)
        template = ArtifactExporter.from_file(
            self.storage, template_abs_path, ancestors=self.ancestors
        )
        exported_template = template.export(self.bucket_name, self.key_prefix)
        content = dump_yaml(exported_template)

        key = get_s3_key(self.key_prefix, template_abs_path)
        result = self.storage.put_object_content(content, self.bucket_name, key)
        LOG.info("Uploaded nested template %s to %s", template_abs_path, s3_url(result.bucket, key))
        self.write_back(properties, result)


def create_exporter(
    descriptor: ExporterDescriptor,
    storage: ObjectStorageService,
    bucket_name: str,
    key_prefix: str = "",
    ancestors: Tuple[str, ...] = (),
) -> ResourceExporter:
    if descriptor.nested_template:
        return NestedTemplateExporter(
            descriptor, storage, bucket_name, key_prefix, ancestors=ancestors
        )
    return ResourceExporter(descriptor, storage, bucket_name, key_prefix)
