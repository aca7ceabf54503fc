import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from cfn_packager.constants import TEMPLATE_SECTION_RESOURCES
from cfn_packager.packaging.exceptions import PackagingError
from cfn_packager.packaging.exporters import create_exporter
from cfn_packager.packaging.registry import ExporterDescriptor, lookup_all
from cfn_packager.services.s3 import ObjectStorageService, is_remote_url
from cfn_packager.template.parser import (
    DocumentType,
    detect_document_type,
    parse,
    restore_intrinsic_keys,
    uri_to_path,
)
from cfn_packager.utils.files import load_file
from cfn_packager.utils.objects import get_value_at_path

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class Artifact:
    resource_type: str
    file_path: str
    logical_id: Optional[str] = None
    property_path: Optional[str] = None


@dataclass
class _ResourceArtifact:
    logical_id: str
    properties: Optional[Dict]
    descriptor: ExporterDescriptor


class ArtifactExporter:
    """
    Uploads the local artifacts referenced by the resources of a template, and rewrites the template so that
    every artifact reference points to the uploaded object. Nested templates are exported recursively, each
    by a new instance of this class.
    """

    storage: Optional[ObjectStorageService]
    template_uri: str
    document_type: DocumentType
    template: Any

    def __init__(
        self,
        storage: Optional[ObjectStorageService],
        template_uri: str,
        content: str,
        document_type: Optional[DocumentType] = None,
        ancestors: Sequence[str] = (),
    ):
        """
        :param storage: the object storage artifacts are uploaded to, only required for `export`
        :param template_uri: location of the template, a local path or a `file://` URI. Relative artifact
            paths are resolved against the directory of this location.
        :param content: the template source text
        :param document_type: format of the template, detected from URI and content if not given
        :param ancestors: real paths of the templates that include this one as nested template
        """
        self.storage = storage
        self.template_uri = template_uri
        self.document_type = document_type or detect_document_type(template_uri, content)
        self.template = parse(content, self.document_type, template_uri)
        self.template_path = os.path.abspath(uri_to_path(template_uri))
        self.ancestors: Tuple[str, ...] = tuple(ancestors) + (os.path.realpath(self.template_path),)

    @classmethod
    def from_file(
        cls, storage: Optional[ObjectStorageService], template_path: str, ancestors: Sequence[str] = ()
    ) -> "ArtifactExporter":
        content = load_file(uri_to_path(template_path))
        if content is None:
            raise FileNotFoundError(f"Template file not found: {template_path}")
        return cls(storage, template_path, content, ancestors=ancestors)

    @property
    def template_dir(self) -> str:
        return os.path.dirname(self.template_path)

    def _get_resources(self) -> Dict[str, Any]:
        if not isinstance(self.template, dict):
            return {}
        resources = self.template.get(TEMPLATE_SECTION_RESOURCES)
        return resources if isinstance(resources, dict) else {}

    def _iter_resource_artifacts(self) -> Iterator[_ResourceArtifact]:
        for logical_id, resource in self._get_resources().items():
            if not isinstance(resource, dict):
                continue
            descriptors = lookup_all(resource.get("Type"))
            if not descriptors:
                continue
            properties = resource.get("Properties")
            for descriptor in descriptors:
                yield _ResourceArtifact(logical_id, properties, descriptor)

    def get_template_artifacts(self) -> List[Artifact]:
        """
        Return the resource properties that reference an artifact by path, without touching the filesystem
        or the object store.
        """
        result = []
        for artifact in self._iter_resource_artifacts():
            if not isinstance(artifact.properties, dict):
                continue
            file_path = get_value_at_path(artifact.properties, artifact.descriptor.property_path)
            if isinstance(file_path, str):
                result.append(
                    Artifact(
                        resource_type=artifact.descriptor.resource_type,
                        file_path=file_path,
                        logical_id=artifact.logical_id,
                        property_path=artifact.descriptor.property_path,
                    )
                )
        return result

    def resolve_artifact_path(self, local_path: Optional[str]) -> str:
        """Resolve an artifact reference against the directory of the template."""
        if not local_path:
            return self.template_dir
        local_path = uri_to_path(local_path)
        if os.path.isabs(local_path):
            return local_path
        return os.path.normpath(os.path.join(self.template_dir, local_path))

    def export(self, bucket_name: str, key_prefix: str = "") -> Any:
        """
        Upload all local artifacts of the template and return the template with rewritten references. The
        template is modified in place. An error aborts the export, artifacts uploaded until then are kept.

        :param bucket_name: name of the bucket to upload artifacts to
        :param key_prefix: optional prefix for the object keys
        :return: the exported template
        """
        if self.storage is None:
            raise PackagingError("An object storage service is required to export artifacts")
        self._export_resources(bucket_name, key_prefix)
        if self.document_type == DocumentType.YAML:
            restore_intrinsic_keys(self.template)
        return self.template

    def _export_resources(self, bucket_name: str, key_prefix: str) -> None:
        for artifact in self._iter_resource_artifacts():
            descriptor = artifact.descriptor
            local_path = (
                get_value_at_path(artifact.properties, descriptor.property_path)
                if isinstance(artifact.properties, dict)
                else None
            )
            if isinstance(local_path, str) and is_remote_url(local_path):
                LOG.debug(
                    "Property %s of resource %s already references a remote location: %s",
                    descriptor.property_path,
                    artifact.logical_id,
                    local_path,
                )
                continue
            if local_path is not None and not isinstance(local_path, str):
                continue

            exporter = create_exporter(
                descriptor, self.storage, bucket_name, key_prefix, ancestors=self.ancestors
            )
            exporter.export(artifact.properties, self.resolve_artifact_path(local_path))
