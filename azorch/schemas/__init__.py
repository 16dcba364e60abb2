"""
azorch.schemas - Data structures flowing through a deployment.

Spec (JobSpec) -> AzkabanProjectConfig -> DeploymentResult

1. Spec: versioned document with a stable URI and a flat config bag
2. AzkabanProjectConfig: read-only descriptor translated from a JobSpec
3. DeploymentResult: what add_spec did (created, updated, unchanged)
"""

from .spec import (
    Spec,
    JobSpec,
    TopologySpec,
    flatten_config,
    load_spec,
)
from .project import (
    AzkabanProjectConfig,
    DeployOutcome,
    DeploymentResult,
)

__all__ = [
    # Specs
    "Spec",
    "JobSpec",
    "TopologySpec",
    "flatten_config",
    "load_spec",
    # Project descriptor
    "AzkabanProjectConfig",
    "DeployOutcome",
    "DeploymentResult",
]
