"""
Static table of the resource types whose properties can reference local artifacts, and how the remote
location is written back into the resource once the artifact has been uploaded.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple


class WriteBackShape(Enum):
    # the property becomes a single `s3://<bucket>/<key>` string
    URL = "url"
    # the property becomes a map of bucket name, object key and (optionally) version id
    RECORD = "record"


@dataclass(frozen=True)
class ExporterDescriptor:
    resource_type: str
    property_path: str
    package_null_property: bool = True
    force_zip: bool = False
    shape: WriteBackShape = WriteBackShape.URL
    bucket_name_property: Optional[str] = None
    object_key_property: Optional[str] = None
    version_property: Optional[str] = None
    nested_template: bool = False
    # sibling properties that mean there is nothing to package, as (name, value) pairs. A value of
    # `None` matches any non-empty value, e.g. inline code.
    skip_conditions: Tuple[Tuple[str, Optional[str]], ...] = ()


def url_descriptor(resource_type: str, property_path: str, **kwargs) -> ExporterDescriptor:
    return ExporterDescriptor(resource_type, property_path, shape=WriteBackShape.URL, **kwargs)


def record_descriptor(
    resource_type: str,
    property_path: str,
    bucket_name_property: str,
    object_key_property: str,
    version_property: Optional[str] = None,
    **kwargs,
) -> ExporterDescriptor:
    return ExporterDescriptor(
        resource_type,
        property_path,
        shape=WriteBackShape.RECORD,
        bucket_name_property=bucket_name_property,
        object_key_property=object_key_property,
        version_property=version_property,
        **kwargs,
    )


RESOURCE_EXPORTERS: List[ExporterDescriptor] = [
    url_descriptor(
        "AWS::Serverless::Function",
        "CodeUri",
        force_zip=True,
        skip_conditions=(("InlineCode", None), ("ImageUri", None), ("PackageType", "Image")),
    ),
    url_descriptor("AWS::Serverless::Api", "DefinitionUri", package_null_property=False),
    url_descriptor(
        "AWS::AppSync::GraphQLSchema", "DefinitionS3Location", package_null_property=False
    ),
    url_descriptor(
        "AWS::AppSync::Resolver", "RequestMappingTemplateS3Location", package_null_property=False
    ),
    url_descriptor(
        "AWS::AppSync::Resolver", "ResponseMappingTemplateS3Location", package_null_property=False
    ),
    url_descriptor(
        "AWS::AppSync::FunctionConfiguration",
        "RequestMappingTemplateS3Location",
        package_null_property=False,
    ),
    url_descriptor(
        "AWS::AppSync::FunctionConfiguration",
        "ResponseMappingTemplateS3Location",
        package_null_property=False,
    ),
    record_descriptor(
        "AWS::ApiGateway::RestApi",
        "BodyS3Location",
        "Bucket",
        "Key",
        "Version",
        package_null_property=False,
    ),
    record_descriptor(
        "AWS::Lambda::Function", "Code", "S3Bucket", "S3Key", "S3ObjectVersion", force_zip=True
    ),
    record_descriptor(
        "AWS::ElasticBeanstalk::ApplicationVersion", "SourceBundle", "S3Bucket", "S3Key"
    ),
    url_descriptor("AWS::CloudFormation::Stack", "TemplateURL", nested_template=True),
    url_descriptor("AWS::Serverless::Application", "Location", nested_template=True),
    url_descriptor("AWS::Serverless::LayerVersion", "ContentUri", force_zip=True),
    record_descriptor(
        "AWS::Lambda::LayerVersion",
        "Content",
        "S3Bucket",
        "S3Key",
        "S3ObjectVersion",
        force_zip=True,
    ),
    url_descriptor("AWS::Glue::Job", "Command.ScriptLocation"),
    record_descriptor(
        "AWS::StepFunctions::StateMachine",
        "DefinitionS3Location",
        "Bucket",
        "Key",
        "Version",
        package_null_property=False,
    ),
    record_descriptor(
        "AWS::Serverless::StateMachine",
        "DefinitionUri",
        "Bucket",
        "Key",
        "Version",
        package_null_property=False,
    ),
    record_descriptor(
        "AWS::CodeCommit::Repository",
        "Code.S3",
        "Bucket",
        "Key",
        "ObjectVersion",
        package_null_property=False,
        force_zip=True,
    ),
]


def _build_registry(descriptors: List[ExporterDescriptor]) -> Dict[str, List[ExporterDescriptor]]:
    registry: Dict[str, List[ExporterDescriptor]] = {}
    for descriptor in descriptors:
        registry.setdefault(descriptor.resource_type, []).append(descriptor)
    return registry


RESOURCE_EXPORTER_MAP = _build_registry(RESOURCE_EXPORTERS)


def lookup_all(resource_type: str) -> List[ExporterDescriptor]:
    """
    Return all descriptors registered for the resource type. Empty for types without local artifacts, and
    for types that are not a plain string (e.g. an unresolved intrinsic function).
    """
    if not isinstance(resource_type, str):
        return []
    return list(RESOURCE_EXPORTER_MAP.get(resource_type, []))


def lookup(resource_type: str) -> Optional[ExporterDescriptor]:
    """Return the (first) descriptor registered for the resource type, or `None` for untracked types."""
    descriptors = lookup_all(resource_type)
    return descriptors[0] if descriptors else None
