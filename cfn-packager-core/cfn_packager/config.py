import os
import tempfile
from typing import Optional, Union

from cfn_packager.constants import FALSE_STRINGS, LOG_LEVELS, TRACE_LOG_LEVELS, TRUE_STRINGS


def eval_log_type(env_var_name: str) -> Union[str, bool]:
    """Get the log type from environment variable"""
    log_type = os.environ.get(env_var_name, "").lower().strip()
    return log_type if log_type in LOG_LEVELS else False


def parse_boolean_env(env_var_name: str) -> Optional[bool]:
    """Parse the value of the given env variable and return True/False, or None if it is not a boolean value."""
    value = os.environ.get(env_var_name, "").lower().strip()
    if value in TRUE_STRINGS:
        return True
    if value in FALSE_STRINGS:
        return False
    return None


def is_env_true(env_var_name: str) -> bool:
    """Whether the given environment variable has a truthy value."""
    return os.environ.get(env_var_name, "").lower().strip() in TRUE_STRINGS


def is_env_not_false(env_var_name: str) -> bool:
    """Whether the given environment variable is empty or has a truthy value."""
    return os.environ.get(env_var_name, "").lower().strip() not in FALSE_STRINGS


def is_trace_logging_enabled():
    if LOG_LEVEL:
        return LOG_LEVEL.lower() in TRACE_LOG_LEVELS
    return False


# whether to enable verbose debug logging
LOG_LEVEL = eval_log_type("CFN_PACKAGER_LOG")
DEBUG = is_env_true("DEBUG") or LOG_LEVEL in TRACE_LOG_LEVELS

# folder for temporary files and data (zipped artifacts, copied single files)
TMP_FOLDER = os.path.join(tempfile.gettempdir(), "cfn-packager")

# fix for Mac OS, where /var/folders is a symlink to /private/var/folders
if TMP_FOLDER.startswith("/var/folders/") and os.path.exists("/private%s" % TMP_FOLDER):
    TMP_FOLDER = "/private%s" % TMP_FOLDER

# maximum nesting depth of nested stacks/applications exported recursively
NESTED_TEMPLATE_MAX_DEPTH = int(os.environ.get("NESTED_TEMPLATE_MAX_DEPTH", "").strip() or 10)

# whether files with an archive extension must also carry a matching binary signature to be
# treated as archives (otherwise the extension alone is sufficient)
ARCHIVE_SIGNATURE_CHECK = is_env_not_false("ARCHIVE_SIGNATURE_CHECK")

# custom endpoint for the object store (e.g., a local S3 emulator), `None` to use AWS
AWS_ENDPOINT_URL = os.environ.get("AWS_ENDPOINT_URL", "").strip() or None

# region used for the S3 client, `None` to let boto3 resolve it
AWS_REGION = os.environ.get("AWS_DEFAULT_REGION", "").strip() or None
