"""Upstream endpoints and fixed markers shared across modules."""
from __future__ import annotations

METADATA_URL = "http://169.254.169.254/latest/meta-data/"
TASK_ROLE_URL = "http://169.254.170.2"
INSTANCE_IDENTITY_URL = "http://169.254.169.254/latest/dynamic/instance-identity/document"
USER_DATA_URL = "http://169.254.169.254/latest/user-data"
LOCAL_IPV4_URL = "http://169.254.169.254/latest/meta-data/local-ipv4/"
ECS_AGENT_PORT = 51678

REDACTED = "(removed)"
SENSITIVE_KEYS = ("Token", "AccessKeyId", "SecretAccessKey")

# Never followed while crawling.
LICENSE_COMMAND = "/license"
SECURITY_CREDENTIALS_SEGMENT = "security-credentials/"

NO_RELATIVE_URI_ROLE_ARN = "(no-relative-url-for-task-information)"
INVALID_ROLE_ARN = "<invalid_single_value>"
ROLE_ARN_KEY = "RoleArn"

DEFAULT_REQUEST_TIMEOUT_SECONDS = 0.2
DEFAULT_MAX_DEPTH = 16


class BRANCH:
    META_DATA = "meta-data"
    ECS_METADATA = "ecs-metadata"
    INSTANCE_IDENTITY = "instance-identity"
    USER_DATA = "user-data"
    CONTAINER_METADATA = "container-metadata"

    ORDER = (
        META_DATA,
        ECS_METADATA,
        INSTANCE_IDENTITY,
        USER_DATA,
        CONTAINER_METADATA,
    )
