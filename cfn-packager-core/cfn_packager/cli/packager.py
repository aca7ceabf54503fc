import json
import logging
import os
import traceback
from typing import TYPE_CHECKING, List, Optional

import click

from cfn_packager import config
from cfn_packager.cli.exceptions import CLIError
from cfn_packager.constants import VERSION

from .console import console

if TYPE_CHECKING:
    from cfn_packager.packaging.template import Artifact


class PackagerCliGroup(click.Group):
    """
    Top-level command group. Errors raised while packaging are reported as ``CLIError`` (red message, exit
    code 1), click exceptions pass through unchanged. With ``--debug`` the traceback is printed as well.
    """

    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except click.exceptions.Exit:
            # raised on --help and --version
            raise
        except Exception as e:
            if ctx.params.get("debug"):
                click.echo(traceback.format_exc(), err=True)
            if isinstance(e, click.ClickException):
                raise
            raise CLIError(str(e), hint=_error_hint(e)) from e


def _error_hint(error: Exception) -> Optional[str]:
    from botocore.exceptions import BotoCoreError, ClientError

    from cfn_packager.packaging.exceptions import InvalidLocalPathError, InvalidTemplatePathError

    if isinstance(error, (InvalidLocalPathError, InvalidTemplatePathError)):
        return "Relative paths are resolved against the directory of the template that contains them."
    if isinstance(error, (BotoCoreError, ClientError)):
        return "Check the AWS credentials and region, and that the target bucket exists."
    return None


def _setup_cli_debug():
    from cfn_packager.logging.setup import setup_logging_for_cli

    config.DEBUG = True
    os.environ["DEBUG"] = "1"

    setup_logging_for_cli(logging.DEBUG)


@click.group(
    name="cfn-packager",
    cls=PackagerCliGroup,
    help="Upload the local artifacts of a CloudFormation template and rewrite their references",
)
@click.version_option(version=VERSION, message="%(version)s")
@click.option("--debug", is_flag=True, help="Enable CLI debugging mode")
def packager(debug):
    if debug:
        _setup_cli_debug()
    elif config.LOG_LEVEL:
        from cfn_packager.logging.setup import setup_logging_from_config

        setup_logging_from_config()


@packager.command(name="artifacts", help="List the local artifacts referenced by a template")
@click.argument("template_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--format", "format_", type=click.Choice(["table", "json"]), default="table")
def cmd_artifacts(template_file: str, format_: str):
    from cfn_packager.packaging.template import ArtifactExporter

    artifacts = ArtifactExporter.from_file(None, template_file).get_template_artifacts()
    if format_ == "json":
        console.print_json(
            json.dumps(
                [{"resourceType": a.resource_type, "filePath": a.file_path} for a in artifacts]
            )
        )
        return
    _print_artifact_table(artifacts)


def _print_artifact_table(artifacts: List["Artifact"]) -> None:
    from rich.table import Table

    table = Table()
    table.add_column("Resource")
    table.add_column("Type")
    table.add_column("Property")
    table.add_column("Path")

    for artifact in artifacts:
        table.add_row(
            artifact.logical_id, artifact.resource_type, artifact.property_path, artifact.file_path
        )

    console.print(table)


@packager.command(name="package", help="Upload local artifacts to S3 and print the packaged template")
@click.argument("template_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--s3-bucket", required=True, help="Bucket the artifacts are uploaded to")
@click.option("--s3-prefix", default="", help="Prefix for the keys of the uploaded objects")
@click.option(
    "--output-template-file",
    type=click.Path(dir_okay=False),
    help="Write the packaged template to this file instead of printing it",
)
@click.option("--use-json", is_flag=True, help="Write the packaged template as JSON instead of YAML")
def cmd_package(
    template_file: str,
    s3_bucket: str,
    s3_prefix: str,
    output_template_file: Optional[str],
    use_json: bool,
):
    from cfn_packager.packaging.template import ArtifactExporter
    from cfn_packager.services.s3 import S3ObjectStorageService
    from cfn_packager.template.parser import dump_json, dump_yaml
    from cfn_packager.utils.files import save_file

    exporter = ArtifactExporter.from_file(S3ObjectStorageService(), template_file)
    exported = exporter.export(s3_bucket, s3_prefix)
    content = dump_json(exported) if use_json else dump_yaml(exported)

    if not output_template_file:
        click.echo(content)
        return

    save_file(output_template_file, content)
    console.print(
        f"[green]:heavy_check_mark:[/green] Successfully packaged artifacts and wrote output template "
        f"to file {output_template_file}"
    )
