import os

# settings of the calling environment must not leak into the test run
for env_var in ("CFN_PACKAGER_LOG", "ARCHIVE_SIGNATURE_CHECK", "NESTED_TEMPLATE_MAX_DEPTH", "AWS_ENDPOINT_URL"):
    os.environ.pop(env_var, None)
