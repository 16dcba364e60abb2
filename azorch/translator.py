"""
Spec translator: JobSpec -> AzkabanProjectConfig.

translate() is pure. It reads the spec's flat config bag, falling back to
adapter defaults, and derives the project name from the spec URI so that the
same spec always maps to the same Azkaban project. Retries and repeated
add_spec calls depend on that.
"""

import hashlib
import re
from typing import Any, Mapping, Optional

from azorch.config import (
    AZKABAN_NAMESPACE,
    AZKABAN_PROJECT_DESCRIPTION_KEY,
    AZKABAN_PROJECT_FLOW_NAME_KEY,
    AZKABAN_PROJECT_GROUP_ADMINS_KEY,
    AZKABAN_PROJECT_NAME_PREFIX_KEY,
    AZKABAN_PROJECT_OVERWRITE_IF_EXISTS_KEY,
    AZKABAN_PROJECT_USER_TO_PROXY_KEY,
    AZKABAN_SCHEDULE_CRON_KEY,
    AZKABAN_SERVER_URL_KEY,
    DEFAULT_FLOW_NAME,
    DEFAULT_PROJECT_NAME_PREFIX,
    DEFAULT_SCHEDULE_CRON,
    JOB_SCHEDULE_KEY,
)
from azorch.errors import SpecTypeError
from azorch.schemas import AzkabanProjectConfig, JobSpec
from azorch.utils import get_bool, split_csv

# Azkaban rejects longer project names
MAX_PROJECT_NAME_LENGTH = 64
_HASH_LENGTH = 8
_INVALID_NAME_CHARS = re.compile(r"[^A-Za-z0-9\-]")
_FLOW_NAME = re.compile(r"^[A-Za-z0-9_\-]+$")


def construct_project_name(uri: str, prefix: str = DEFAULT_PROJECT_NAME_PREFIX) -> str:
    """
    Derive the Azkaban project name for a spec URI.

    Underscores in the URI become dashes, any other character outside
    [A-Za-z0-9-] becomes an underscore, and the result is joined to the
    prefix with "_". Names over 64 chars are cut and suffixed with a sha1
    digest of the full name.

    Examples:
        construct_project_name("flows/etl_job", "azorch") -> "azorch_flows_etl-job"
    """
    postfix = _INVALID_NAME_CHARS.sub("_", uri.replace("_", "-"))
    name = f"{prefix}_{postfix}" if prefix else postfix
    return trim_project_name(name)


def trim_project_name(name: str) -> str:
    """Cut a project name to MAX_PROJECT_NAME_LENGTH, keeping it unique."""
    if len(name) <= MAX_PROJECT_NAME_LENGTH:
        return name
    digest = hashlib.sha1(name.encode("utf-8")).hexdigest()[:_HASH_LENGTH]
    keep = MAX_PROJECT_NAME_LENGTH - _HASH_LENGTH - 1
    return f"{name[:keep]}_{digest}"


def _job_property_value(value: Any) -> str:
    """Render a config value as a .job property string."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    return str(value)


def _validate_cron(cron: str) -> str:
    """Quartz cron has 6 or 7 fields."""
    fields = cron.split()
    if len(fields) not in (6, 7):
        raise SpecTypeError(
            f"Schedule must be a Quartz cron expression with 6 or 7 fields, got {cron!r}"
        )
    return " ".join(fields)


def translate(spec: Any, defaults: Optional[Mapping[str, Any]] = None) -> AzkabanProjectConfig:
    """
    Translate a JobSpec into an Azkaban project descriptor.

    Args:
        spec: The spec to translate. Must be a JobSpec.
        defaults: Fallback config keys (see AzorchConfig.spec_defaults)

    Returns:
        AzkabanProjectConfig for the spec

    Raises:
        SpecTypeError: If spec is not a JobSpec or its config is malformed
    """
    if not isinstance(spec, JobSpec):
        raise SpecTypeError(
            f"Only JobSpec can be deployed to Azkaban, got {type(spec).__name__}"
        )

    config: dict[str, Any] = {**(defaults or {}), **spec.config}

    server_url = config.get(AZKABAN_SERVER_URL_KEY)
    if not server_url:
        raise SpecTypeError(f"Spec {spec.uri}: no Azkaban server URL ({AZKABAN_SERVER_URL_KEY})")

    prefix = config.get(AZKABAN_PROJECT_NAME_PREFIX_KEY, DEFAULT_PROJECT_NAME_PREFIX)
    flow_name = str(config.get(AZKABAN_PROJECT_FLOW_NAME_KEY) or DEFAULT_FLOW_NAME)
    if not _FLOW_NAME.match(flow_name):
        raise SpecTypeError(f"Spec {spec.uri}: invalid flow name {flow_name!r}")

    cron = config.get(AZKABAN_SCHEDULE_CRON_KEY) or config.get(JOB_SCHEDULE_KEY) or DEFAULT_SCHEDULE_CRON

    description = (
        config.get(AZKABAN_PROJECT_DESCRIPTION_KEY)
        or spec.description
        or f"Deployed by azorch from {spec.uri}"
    )

    job_properties = {"type": "command"}
    job_properties.update({
        key: _job_property_value(value)
        for key, value in spec.config.items()
        if not key.startswith(AZKABAN_NAMESPACE) and value is not None
    })

    return AzkabanProjectConfig(
        server_url=str(server_url),
        project_name=construct_project_name(spec.uri, prefix or ""),
        description=str(description),
        flow_name=flow_name,
        job_properties=job_properties,
        schedule_cron=_validate_cron(str(cron)),
        group_admin_users=split_csv(config.get(AZKABAN_PROJECT_GROUP_ADMINS_KEY)),
        user_to_proxy=config.get(AZKABAN_PROJECT_USER_TO_PROXY_KEY) or None,
        overwrite_if_exists=get_bool(config, AZKABAN_PROJECT_OVERWRITE_IF_EXISTS_KEY, False),
        spec_uri=spec.uri,
        spec_version=spec.version,
    )
