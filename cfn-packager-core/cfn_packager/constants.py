import cfn_packager

# cfn-packager version
VERSION = cfn_packager.__version__

# strings to indicate truthy/falsy values
TRUE_STRINGS = ("1", "true", "True")
FALSE_STRINGS = ("0", "false", "False")
# strings with valid log levels for CFN_PACKAGER_LOG
LOG_LEVELS = ("trace", "debug", "info", "warn", "error", "warning")
LOG_LEVEL_TRACE = "trace"
TRACE_LOG_LEVELS = [LOG_LEVEL_TRACE]

# name of the top level template section holding the resources
TEMPLATE_SECTION_RESOURCES = "Resources"

# folder (below the optional key prefix) where uploaded artifacts are stored
ARTIFACT_KEY_FOLDER = "artifact"

# URL schemes
S3_URL_SCHEME = "s3://"
HTTP_URL_SCHEMES = ("http://", "https://")
FILE_URI_SCHEME = "file://"

# prefix of scratch files and folders created while packaging
TMP_RESOURCE_PREFIX = "cfn-"
