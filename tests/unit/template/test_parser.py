import pytest

from cfn_packager.template.parser import (
    DocumentType,
    TemplateParsingError,
    UnsupportedDocumentError,
    detect_document_type,
    dump_json,
    dump_yaml,
    parse,
    restore_intrinsic_keys,
    uri_to_path,
)


@pytest.mark.parametrize(
    "uri, content, expected",
    [
        ("template.yaml", "", DocumentType.YAML),
        ("template.YML", "", DocumentType.YAML),
        ("template.json", "Resources: {}", DocumentType.JSON),
        ("template.template", '{"Resources": {}}', DocumentType.JSON),
        ("template.cfn", "Resources: {}", DocumentType.YAML),
        ("template.txt", "  [1, 2]", DocumentType.JSON),
        ("file:///tmp/stack/template.json", "", DocumentType.JSON),
    ],
)
def test_detect_document_type(uri, content, expected):
    assert detect_document_type(uri, content) == expected


def test_unsupported_extension():
    with pytest.raises(UnsupportedDocumentError) as e:
        detect_document_type("template.xml", "<xml/>")
    assert e.value.extension == "xml"


def test_uri_to_path():
    assert uri_to_path("file:///tmp/my%20stack/template.yaml") == "/tmp/my stack/template.yaml"
    assert uri_to_path("./template.yaml") == "./template.yaml"


def test_parse_invalid_content():
    with pytest.raises(TemplateParsingError):
        parse("{invalid", DocumentType.JSON, "template.json")
    with pytest.raises(TemplateParsingError) as e:
        parse("Resources: [unclosed", DocumentType.YAML, "template.yaml")
    assert e.value.uri == "template.yaml"


def test_dates_are_parsed_as_strings():
    result = parse('AWSTemplateFormatVersion: 2010-09-09\n', DocumentType.YAML)
    assert result == {"AWSTemplateFormatVersion": "2010-09-09"}


def test_short_form_tags():
    content = """
Value: !Join
  - ""
  - - !Ref AWS::Region
    - !GetAtt Bucket.Arn
Condition: !Condition IsProd
Mapping: !FindInMap {MapName: Map, Key: Value}
"""
    result = parse(content, DocumentType.YAML)

    assert result["Value"] == {"!Join": ["", [{"!Ref": "AWS::Region"}, {"!GetAtt": "Bucket.Arn"}]]}

    restore_intrinsic_keys(result)
    assert result == {
        "Value": {"Fn::Join": ["", [{"Ref": "AWS::Region"}, {"Fn::GetAtt": ["Bucket", "Arn"]}]]},
        "Condition": {"Condition": "IsProd"},
        "Mapping": {"Fn::FindInMap": {"MapName": "Map", "Key": "Value"}},
    }


def test_restore_keeps_key_order():
    tree = {"A": 1, "!Ref": "B", "C": 2}
    restore_intrinsic_keys(tree)
    assert list(tree) == ["A", "Ref", "C"]


def test_dump_yaml():
    tree = {"Resources": {"Fn": {"Type": "AWS::Lambda::Function", "Properties": {"Layers": ["a", "b"]}}}}
    assert dump_yaml(tree) == (
        "Resources:\n"
        "  Fn:\n"
        "    Type: AWS::Lambda::Function\n"
        "    Properties:\n"
        "      Layers:\n"
        "        - a\n"
        "        - b\n"
    )
    assert parse(dump_yaml(tree), DocumentType.YAML) == tree


def test_dump_json():
    assert dump_json({"Resources": {}}) == '{\n  "Resources": {}\n}'
