"""
Parsing and serialization of CloudFormation templates in JSON and YAML format.

YAML templates may use the short form of intrinsic functions (e.g., ``!Ref MyBucket`` or
``!GetAtt MyFunction.Arn``). While loading, these tags are stored under parser-internal keys that keep the
tag name (``{"!Ref": "MyBucket"}``), and :func:`restore_intrinsic_keys` turns them into their canonical
long form (``{"Ref": "MyBucket"}``, ``{"Fn::GetAtt": ["MyFunction", "Arn"]}``).
"""

import json
import os
from enum import Enum
from typing import Any
from urllib.parse import unquote, urlparse

import yaml

from cfn_packager.constants import FILE_URI_SCHEME
from cfn_packager.utils.objects import recurse_object

INTRINSIC_TAG_PREFIX = "!"

# short form tags that do not map to a `Fn::<name>` function
INTRINSIC_KEY_NAMES = {
    "!Ref": "Ref",
    "!Condition": "Condition",
}


class DocumentType(str, Enum):
    JSON = "JSON"
    YAML = "YAML"


class Extension(str, Enum):
    YAML = "yaml"
    JSON = "json"
    YML = "yml"
    TXT = "txt"
    CFN = "cfn"
    TEMPLATE = "template"


class TemplateParsingError(Exception):
    def __init__(self, uri: str, message: str):
        super().__init__(f"Unable to parse template {uri}: {message}")
        self.uri = uri


class UnsupportedDocumentError(Exception):
    def __init__(self, uri: str, extension: str):
        super().__init__(f"Extension '{extension}' of template {uri} is not supported")
        self.uri = uri
        self.extension = extension


class TemplateLoader(yaml.SafeLoader):
    """Safe YAML loader that keeps dates as strings and understands CloudFormation short form tags."""


# parse date strings as string, not date objects
TemplateLoader.yaml_implicit_resolvers = {
    k: [r for r in v if r[0] != "tag:yaml.org,2002:timestamp"]
    for k, v in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def _construct_intrinsic(loader: TemplateLoader, tag_suffix: str, node: yaml.Node) -> dict:
    tag = f"{INTRINSIC_TAG_PREFIX}{tag_suffix}"
    if isinstance(node, yaml.SequenceNode):
        value = loader.construct_sequence(node, deep=True)
    elif isinstance(node, yaml.MappingNode):
        value = loader.construct_mapping(node, deep=True)
    else:
        value = loader.construct_scalar(node)
    return {tag: value}


TemplateLoader.add_multi_constructor(INTRINSIC_TAG_PREFIX, _construct_intrinsic)


class TemplateDumper(yaml.SafeDumper):
    """Block style YAML dumper that indents sequences below their parent key."""

    def increase_indent(self, flow=False, indentless=False):
        return super().increase_indent(flow, False)


def uri_to_path(uri: str) -> str:
    """Return the local filesystem path for a `file://` URI, or the given value if it is a plain path."""
    if uri.startswith(FILE_URI_SCHEME):
        return unquote(urlparse(uri).path)
    return uri


def detect_document_type(uri: str, content: str) -> DocumentType:
    """
    Detect the format of a template from the extension of its URI, falling back to sniffing the content
    for generic template extensions (`.txt`, `.cfn`, `.template`).
    """
    extension = os.path.splitext(uri_to_path(uri))[1].lower().lstrip(".")
    try:
        extension = Extension(extension)
    except ValueError:
        raise UnsupportedDocumentError(uri, extension) from None

    if extension == Extension.JSON:
        return DocumentType.JSON
    if extension in (Extension.YAML, Extension.YML):
        return DocumentType.YAML
    if content.lstrip().startswith(("{", "[")):
        return DocumentType.JSON
    return DocumentType.YAML


def parse(content: str, document_type: DocumentType, uri: str = "<template>") -> Any:
    try:
        if document_type == DocumentType.JSON:
            return json.loads(content)
        return yaml.load(content, Loader=TemplateLoader)
    except (ValueError, yaml.YAMLError) as e:
        raise TemplateParsingError(uri, str(e)) from e


def _canonical_intrinsic(key: str, value: Any):
    name = INTRINSIC_KEY_NAMES.get(key)
    if name is None:
        name = f"Fn::{key[len(INTRINSIC_TAG_PREFIX):]}"
    if name == "Fn::GetAtt" and isinstance(value, str):
        value = value.split(".", 1)
    return name, value


def restore_intrinsic_keys(tree: Any) -> Any:
    """Recursively rename the parser-internal short form keys (`!Ref`, `!Sub`, ...) to canonical names."""

    def _restore(obj, **kwargs):
        if isinstance(obj, dict) and any(
            isinstance(key, str) and key.startswith(INTRINSIC_TAG_PREFIX) for key in obj
        ):
            items = list(obj.items())
            obj.clear()
            for key, value in items:
                if isinstance(key, str) and key.startswith(INTRINSIC_TAG_PREFIX):
                    key, value = _canonical_intrinsic(key, value)
                obj[key] = value
        return obj

    return recurse_object(tree, _restore)


def dump_yaml(tree: Any) -> str:
    return yaml.dump(
        tree,
        Dumper=TemplateDumper,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
        width=float("inf"),
    )


def dump_json(tree: Any) -> str:
    return json.dumps(tree, indent=2)
