"""
Azkaban project descriptor and deployment result.

AzkabanProjectConfig is the read-only view of a JobSpec that the Azkaban
client works with. It is rebuilt from the spec on every operation and never
stored.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


@dataclass(frozen=True)
class AzkabanProjectConfig:
    """
    Everything needed to create, upload and schedule one Azkaban project.

    Attributes:
        server_url: Azkaban server base URL
        project_name: Remote project identity, derived from the spec URI
        description: Project description (Azkaban requires a non-empty one)
        flow_name: Name of the flow, i.e. the generated <flow_name>.job file
        job_properties: Properties written into the .job file
        schedule_cron: Quartz cron expression for the flow schedule
        group_admin_users: Groups granted admin permission on the project
        user_to_proxy: User the flow runs as, if any
        overwrite_if_exists: Replace an existing project instead of skipping it
        spec_uri: URI of the spec this descriptor came from
        spec_version: Version of that spec
    """
    server_url: str
    project_name: str
    description: str
    flow_name: str
    job_properties: dict[str, str] = field(default_factory=dict)
    schedule_cron: str = "0 0 0 ? * *"
    group_admin_users: tuple[str, ...] = field(default_factory=tuple)
    user_to_proxy: Optional[str] = None
    overwrite_if_exists: bool = False
    spec_uri: str = ""
    spec_version: str = ""

    @property
    def manager_url(self) -> str:
        """URL of the project page in the Azkaban web UI."""
        return f"{self.server_url.rstrip('/')}/manager?project={self.project_name}"

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for display."""
        return {
            "server_url": self.server_url,
            "project_name": self.project_name,
            "manager_url": self.manager_url,
            "description": self.description,
            "flow_name": self.flow_name,
            "job_properties": dict(self.job_properties),
            "schedule_cron": self.schedule_cron,
            "group_admin_users": list(self.group_admin_users),
            "user_to_proxy": self.user_to_proxy,
            "overwrite_if_exists": self.overwrite_if_exists,
            "spec_uri": self.spec_uri,
            "spec_version": self.spec_version,
        }


class DeployOutcome(str, Enum):
    """Which reconciliation branch an add_spec call took."""
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class DeploymentResult:
    """Result carried by the future returned from add_spec."""
    project_name: str
    manager_url: str
    outcome: DeployOutcome
    project_id: Optional[str] = None
